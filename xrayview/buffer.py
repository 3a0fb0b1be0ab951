"""Text-entry buffer backing filter mode and the command prompt.

The buffer owns its text and active flag and fans every change out to
registered listeners. Listener callbacks run synchronously on the thread that
mutated the buffer, which is always the UI thread.
"""

from __future__ import annotations

from enum import Enum
from typing import Protocol

from .tree.filtering import is_label_selector


class BufferKind(Enum):
    FILTER = "filter"
    COMMAND = "command"


class FilterMode(Enum):
    INACTIVE = "inactive"
    ACTIVE = "active"
    LABEL_SELECTOR = "label-selector"


class BufferListener(Protocol):
    def buffer_changed(self, text: str) -> None: ...

    def buffer_active(self, state: bool, kind: BufferKind) -> None: ...


class FilterBuffer:
    """Editable query text plus activation state and change listeners."""

    def __init__(self, kind: BufferKind = BufferKind.FILTER) -> None:
        self.kind = kind
        self._text: list[str] = []
        self._active = False
        self._listeners: list[BufferListener] = []

    def __str__(self) -> str:
        return self.text

    @property
    def text(self) -> str:
        return "".join(self._text)

    @property
    def empty(self) -> bool:
        return not self._text

    @property
    def active(self) -> bool:
        return self._active

    @property
    def in_cmd_mode(self) -> bool:
        """Return whether the buffer is being edited or still holds text."""
        return self._active or bool(self._text)

    @property
    def mode(self) -> FilterMode:
        if is_label_selector(self.text):
            return FilterMode.LABEL_SELECTOR
        if self._active or self._text:
            return FilterMode.ACTIVE
        return FilterMode.INACTIVE

    @property
    def listeners(self) -> tuple[BufferListener, ...]:
        return tuple(self._listeners)

    def add_listener(self, listener: BufferListener) -> None:
        if not any(existing is listener for existing in self._listeners):
            self._listeners.append(listener)

    def remove_listener(self, listener: BufferListener) -> None:
        self._listeners = [existing for existing in self._listeners if existing is not listener]

    def set_active(self, state: bool) -> None:
        self._active = state
        self._fire_active(state)

    def add(self, ch: str) -> None:
        self._text.append(ch)
        self._fire_changed()

    def set_text(self, text: str) -> None:
        self._text = list(text)
        self._fire_changed()

    def delete(self) -> None:
        """Remove the last character; no-op on an empty buffer."""
        if not self._text:
            return
        self._text.pop()
        self._fire_changed()

    def clear(self) -> None:
        self._text = []
        self._fire_changed()

    def reset(self) -> None:
        """Clear the text and leave edit mode."""
        self.clear()
        self.set_active(False)

    def _fire_changed(self) -> None:
        text = self.text
        for listener in tuple(self._listeners):
            listener.buffer_changed(text)

    def _fire_active(self, state: bool) -> None:
        for listener in tuple(self._listeners):
            listener.buffer_active(state, self.kind)
