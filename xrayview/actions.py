"""Key-action table used by the view and rendered into the hints menu."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass

KeyHandler = Callable[[str], bool]


@dataclass(frozen=True)
class KeyAction:
    """One bound action.

    Handlers return ``True`` when they consumed the key; ``False`` lets the
    caller fall through to its own handling. ``shared`` actions are the
    filter-mode bindings that stay live while the buffer is being edited.
    """

    description: str
    handler: KeyHandler
    visible: bool = True
    shared: bool = False


def key_action(description: str, handler: KeyHandler, visible: bool = True) -> KeyAction:
    return KeyAction(description, handler, visible=visible)


def shared_key_action(description: str, handler: KeyHandler, visible: bool = False) -> KeyAction:
    return KeyAction(description, handler, visible=visible, shared=True)


class KeyActions:
    """Mutable key-token -> ``KeyAction`` registry."""

    def __init__(self) -> None:
        self._actions: dict[str, KeyAction] = {}

    def __contains__(self, key: str) -> bool:
        return key in self._actions

    def __iter__(self) -> Iterator[str]:
        return iter(self._actions)

    def __len__(self) -> int:
        return len(self._actions)

    def get(self, key: str) -> KeyAction | None:
        return self._actions.get(key)

    def add(self, actions: dict[str, KeyAction]) -> None:
        self._actions.update(actions)

    def clear(self) -> None:
        self._actions.clear()

    def dispatch(self, key: str) -> bool | None:
        """Run the action bound to ``key``; ``None`` when nothing is bound."""
        action = self._actions.get(key)
        if action is None:
            return None
        return action.handler(key)

    def hints(self) -> list[tuple[str, str]]:
        """Return ``(key, description)`` pairs for visible actions, sorted by key."""
        return sorted(
            (key, action.description) for key, action in self._actions.items() if action.visible
        )
