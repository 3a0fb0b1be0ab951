"""Cancellation token and immutable per-subscription watch context."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field


class CancelToken:
    """Cooperative cancellation flag shared between a session and its source.

    ``cancel()`` may be called any number of times from any thread.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    def wait(self, timeout: float | None = None) -> bool:
        """Block up to ``timeout`` seconds; return whether cancellation fired."""
        return self._event.wait(timeout)


@dataclass(frozen=True)
class WatchContext:
    """Values a subscription was started with.

    ``labels`` is the trimmed label selector, empty when the filter buffer holds
    a local query. ``session_id`` tags every delivery for stale detection.
    """

    namespace: str
    labels: str
    session_id: int
    token: CancelToken = field(default_factory=CancelToken, compare=False)

    @property
    def cancelled(self) -> bool:
        return self.token.cancelled
