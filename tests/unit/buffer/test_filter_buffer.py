"""Tests for the filter/command text buffer and its listener fan-out."""

from __future__ import annotations

import unittest

from xrayview.buffer import BufferKind, FilterBuffer, FilterMode


class _Listener:
    def __init__(self) -> None:
        self.changes: list[str] = []
        self.activations: list[tuple[bool, BufferKind]] = []

    def buffer_changed(self, text: str) -> None:
        self.changes.append(text)

    def buffer_active(self, state: bool, kind: BufferKind) -> None:
        self.activations.append((state, kind))


class FilterBufferTests(unittest.TestCase):
    def test_every_text_mutation_notifies_listeners(self) -> None:
        buffer = FilterBuffer()
        listener = _Listener()
        buffer.add_listener(listener)

        buffer.add("w")
        buffer.add("e")
        buffer.delete()
        buffer.set_text("nginx")
        buffer.clear()

        self.assertEqual(listener.changes, ["w", "we", "w", "nginx", ""])

    def test_delete_on_empty_buffer_is_silent(self) -> None:
        buffer = FilterBuffer()
        listener = _Listener()
        buffer.add_listener(listener)

        buffer.delete()

        self.assertEqual(listener.changes, [])
        self.assertTrue(buffer.empty)

    def test_reset_clears_and_deactivates(self) -> None:
        buffer = FilterBuffer(BufferKind.COMMAND)
        listener = _Listener()
        buffer.add_listener(listener)
        buffer.set_active(True)
        buffer.set_text("ns default")

        buffer.reset()

        self.assertEqual(buffer.text, "")
        self.assertFalse(buffer.active)
        self.assertEqual(listener.activations, [(True, BufferKind.COMMAND), (False, BufferKind.COMMAND)])

    def test_listener_registration_is_identity_based_and_idempotent(self) -> None:
        buffer = FilterBuffer()
        listener = _Listener()

        buffer.add_listener(listener)
        buffer.add_listener(listener)
        self.assertEqual(len(buffer.listeners), 1)

        buffer.remove_listener(listener)
        buffer.remove_listener(listener)
        buffer.add("x")
        self.assertEqual(listener.changes, [])

    def test_mode_and_cmd_mode_track_text_and_activity(self) -> None:
        buffer = FilterBuffer()
        self.assertEqual(buffer.mode, FilterMode.INACTIVE)
        self.assertFalse(buffer.in_cmd_mode)

        buffer.set_active(True)
        self.assertEqual(buffer.mode, FilterMode.ACTIVE)
        self.assertTrue(buffer.in_cmd_mode)

        buffer.set_text("-l app=web")
        buffer.set_active(False)
        self.assertEqual(buffer.mode, FilterMode.LABEL_SELECTOR)
        self.assertTrue(buffer.in_cmd_mode)
        self.assertEqual(str(buffer), "-l app=web")


if __name__ == "__main__":
    unittest.main()
