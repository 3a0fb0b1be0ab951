"""Tests for the single-subscription watch lifecycle.

Covers restart exclusivity, idempotent stop, and suppression of snapshots
from sessions that were cancelled before or after their delivery was queued.
"""

from __future__ import annotations

import threading
import time
import unittest

from tests.support import RecordingSource, sample_tree
from xrayview.buffer import FilterBuffer
from xrayview.errors import SnapshotError
from xrayview.watch import UpdateQueue, WatchController


class _TreeListener:
    def __init__(self) -> None:
        self.trees: list[object] = []
        self.errors: list[Exception] = []

    def tree_changed(self, root) -> None:
        self.trees.append(root)

    def tree_load_failed(self, err: Exception) -> None:
        self.errors.append(err)


class _BufferListener:
    def __init__(self) -> None:
        self.changes: list[str] = []

    def buffer_changed(self, text: str) -> None:
        self.changes.append(text)

    def buffer_active(self, state, kind) -> None:
        pass


def _controller(source, listener, **kwargs) -> tuple[WatchController, UpdateQueue]:
    updates = UpdateQueue()
    controller = WatchController(source, updates, listener, lambda: ("default", "app=web"), **kwargs)
    return controller, updates


class WatchControllerTests(unittest.TestCase):
    def test_start_subscribes_with_current_context_values(self) -> None:
        source = RecordingSource()
        controller, _updates = _controller(source, _TreeListener())

        session = controller.start()

        ctx, _listener = source.last
        self.assertIs(ctx, session.context)
        self.assertEqual((ctx.namespace, ctx.labels), ("default", "app=web"))
        self.assertTrue(controller.running)

    def test_restart_cancels_previous_session_first(self) -> None:
        source = RecordingSource()
        controller, _updates = _controller(source, _TreeListener())

        first = controller.start()
        second = controller.start()

        self.assertTrue(first.context.cancelled)
        self.assertFalse(second.context.cancelled)
        self.assertIs(controller.session, second)
        self.assertNotEqual(first.session_id, second.session_id)
        self.assertEqual(len(source.subscriptions), 2)

    def test_stop_is_idempotent(self) -> None:
        controller, _updates = _controller(RecordingSource(), _TreeListener())

        controller.stop()
        session = controller.start()
        controller.stop()
        controller.stop()

        self.assertFalse(controller.running)
        self.assertTrue(session.context.cancelled)

    def test_current_session_delivery_runs_on_drain(self) -> None:
        source = RecordingSource()
        listener = _TreeListener()
        controller, updates = _controller(source, listener)
        controller.start()
        root = sample_tree()

        source.last[1].tree_changed(root)

        self.assertEqual(listener.trees, [])
        self.assertEqual(updates.drain(), 1)
        self.assertEqual(listener.trees, [root])

    def test_delivery_from_replaced_session_is_dropped(self) -> None:
        source = RecordingSource()
        listener = _TreeListener()
        controller, updates = _controller(source, listener)
        controller.start()
        stale = source.last[1]
        controller.start()

        stale.tree_changed(sample_tree())
        stale.tree_load_failed(SnapshotError("late"))

        self.assertEqual(len(updates), 0)
        updates.drain()
        self.assertEqual(listener.trees, [])
        self.assertEqual(listener.errors, [])

    def test_delivery_queued_before_stop_is_dropped_at_drain(self) -> None:
        source = RecordingSource()
        listener = _TreeListener()
        controller, updates = _controller(source, listener)
        controller.start()

        source.last[1].tree_changed(sample_tree())
        controller.stop()
        updates.drain()

        self.assertEqual(listener.trees, [])

    def test_load_failure_stops_session_and_reports(self) -> None:
        source = RecordingSource()
        listener = _TreeListener()
        controller, updates = _controller(source, listener)
        controller.start()
        err = SnapshotError("bad snapshot")

        source.last[1].tree_load_failed(err)
        updates.drain()

        self.assertEqual(listener.errors, [err])
        self.assertFalse(controller.running)

    def test_buffer_listeners_attach_only_while_running(self) -> None:
        buffer = FilterBuffer()
        buffer_listener = _BufferListener()
        controller, _updates = _controller(
            RecordingSource(),
            _TreeListener(),
            buffer=buffer,
            buffer_listeners=(buffer_listener,),
        )

        buffer.add("a")
        controller.start()
        controller.start()
        buffer.add("b")
        controller.stop()
        buffer.add("c")

        self.assertEqual(buffer_listener.changes, ["ab"])
        self.assertEqual(buffer.listeners, ())


class _RacingSource(RecordingSource):
    """Keeps delivering from a background thread, ignoring cancellation."""

    def __init__(self) -> None:
        super().__init__()
        self.halt = threading.Event()
        self.delivered = threading.Event()
        self.threads: list[threading.Thread] = []

    def watch(self, ctx, listener) -> None:
        super().watch(ctx, listener)

        def run() -> None:
            while not self.halt.is_set():
                listener.tree_changed(sample_tree())
                self.delivered.set()
                time.sleep(0.001)

        thread = threading.Thread(target=run, daemon=True)
        self.threads.append(thread)
        thread.start()


class WatchControllerRaceTests(unittest.TestCase):
    def test_no_snapshot_lands_after_stop_even_if_source_keeps_sending(self) -> None:
        source = _RacingSource()
        listener = _TreeListener()
        controller, updates = _controller(source, listener)
        try:
            controller.start()
            self.assertTrue(source.delivered.wait(1.0))
            controller.stop()
            updates.drain()
            landed = len(listener.trees)

            time.sleep(0.02)
            updates.drain()

            self.assertEqual(len(listener.trees), landed)
        finally:
            source.halt.set()
            for thread in source.threads:
                thread.join(1.0)


class UpdateQueueTests(unittest.TestCase):
    def test_drain_runs_fifo_and_survives_failing_update(self) -> None:
        updates = UpdateQueue()
        seen: list[int] = []

        def boom() -> None:
            raise RuntimeError("boom")

        updates.queue_update(lambda: seen.append(1))
        updates.queue_update(boom)
        updates.queue_update(lambda: seen.append(3))

        with self.assertLogs("xrayview.watch.updates", level="ERROR"):
            ran = updates.drain()

        self.assertEqual(ran, 3)
        self.assertEqual(seen, [1, 3])

    def test_wait_wakes_when_work_is_queued_from_another_thread(self) -> None:
        updates = UpdateQueue()
        threading.Timer(0.01, lambda: updates.queue_update(lambda: None)).start()

        self.assertTrue(updates.wait(1.0))
        self.assertEqual(updates.drain(), 1)


if __name__ == "__main__":
    unittest.main()
