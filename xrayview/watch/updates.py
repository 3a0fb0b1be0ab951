"""Serialized UI update context.

Background threads post callables with ``queue_update``; the UI thread runs
them in FIFO order with ``drain``. Nothing that touches presentation state
runs anywhere else.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from queue import Empty, Queue

logger = logging.getLogger(__name__)


class UpdateQueue:
    """FIFO of pending UI mutations, drained on the owning thread."""

    def __init__(self) -> None:
        self._pending: Queue[Callable[[], None]] = Queue()
        self._wakeup = threading.Event()

    def queue_update(self, fn: Callable[[], None]) -> None:
        """Schedule ``fn`` to run on the next drain. Safe from any thread."""
        self._pending.put(fn)
        self._wakeup.set()

    def wait(self, timeout: float | None = None) -> bool:
        """Block until work is queued or ``timeout`` elapses."""
        fired = self._wakeup.wait(timeout)
        self._wakeup.clear()
        return fired

    def drain(self) -> int:
        """Run every pending update to completion, in order.

        Each update runs on the calling thread. An update that raises is
        logged and skipped so later updates still run.
        """
        ran = 0
        while True:
            try:
                fn = self._pending.get_nowait()
            except Empty:
                break
            try:
                fn()
            except Exception:
                logger.exception("UI update %r failed", fn)
            ran += 1
        return ran

    def __len__(self) -> int:
        return self._pending.qsize()
