"""Start/stop lifecycle for the single live watch subscription of a view."""

from __future__ import annotations

import itertools
import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass

from ..buffer import BufferListener, FilterBuffer
from ..protocols import TreeListener, WatchSource
from ..tree.types import DomainNode
from .context import CancelToken, WatchContext
from .updates import UpdateQueue

logger = logging.getLogger(__name__)

_SESSION_IDS = itertools.count(1)


@dataclass(frozen=True)
class WatchSession:
    """One subscription: its context plus the cancel handle that ends it."""

    context: WatchContext

    @property
    def session_id(self) -> int:
        return self.context.session_id

    def cancel(self) -> None:
        self.context.token.cancel()


class _SessionListener:
    """Tags deliveries with their session and marshals them onto the UI queue.

    Stale deliveries are dropped twice: when the source calls in, and again
    when the queued update runs, so a snapshot racing a restart never lands.
    """

    def __init__(self, controller: WatchController, session: WatchSession) -> None:
        self._controller = controller
        self._session = session

    def tree_changed(self, root: DomainNode) -> None:
        if not self._controller.is_current(self._session):
            logger.debug("Dropping snapshot from stale session %d", self._session.session_id)
            return
        self._controller.updates.queue_update(lambda: self._controller._deliver(self._session, root))

    def tree_load_failed(self, err: Exception) -> None:
        if not self._controller.is_current(self._session):
            return
        self._controller.updates.queue_update(lambda: self._controller._fail(self._session, err))


class WatchController:
    """Owns at most one running subscription against a watch source.

    ``start`` always tears down the previous session first; ``stop`` is
    idempotent and safe from any thread. Buffer listeners are attached while a
    session runs so filter edits reach the view only when it is live.
    """

    def __init__(
        self,
        source: WatchSource,
        updates: UpdateQueue,
        listener: TreeListener,
        context_values: Callable[[], tuple[str, str]],
        buffer: FilterBuffer | None = None,
        buffer_listeners: tuple[BufferListener, ...] = (),
    ) -> None:
        self.source = source
        self.updates = updates
        self._listener = listener
        self._context_values = context_values
        self._buffer = buffer
        self._buffer_listeners = buffer_listeners
        self._lock = threading.Lock()
        self._session: WatchSession | None = None

    @property
    def running(self) -> bool:
        with self._lock:
            return self._session is not None

    @property
    def session(self) -> WatchSession | None:
        with self._lock:
            return self._session

    def is_current(self, session: WatchSession) -> bool:
        with self._lock:
            current = self._session
        return current is session and not session.context.cancelled

    def start(self) -> WatchSession:
        """Restart the subscription with fresh namespace/selector values."""
        self.stop()

        if self._buffer is not None:
            for buffer_listener in self._buffer_listeners:
                self._buffer.add_listener(buffer_listener)

        namespace, labels = self._context_values()
        session = WatchSession(
            WatchContext(
                namespace=namespace,
                labels=labels,
                session_id=next(_SESSION_IDS),
                token=CancelToken(),
            )
        )
        with self._lock:
            self._session = session
        logger.debug("Starting watch session %d ns=%r labels=%r", session.session_id, namespace, labels)
        self.source.watch(session.context, _SessionListener(self, session))
        return session

    def stop(self) -> None:
        """Cancel the running session, if any, and detach buffer listeners."""
        with self._lock:
            session = self._session
            self._session = None
        if session is None:
            return
        session.cancel()
        logger.debug("Stopped watch session %d", session.session_id)
        if self._buffer is not None:
            for buffer_listener in self._buffer_listeners:
                self._buffer.remove_listener(buffer_listener)

    def _deliver(self, session: WatchSession, root: DomainNode) -> None:
        if not self.is_current(session):
            logger.debug("Discarding queued snapshot from stale session %d", session.session_id)
            return
        self._listener.tree_changed(root)

    def _fail(self, session: WatchSession, err: Exception) -> None:
        if not self.is_current(session):
            return
        logger.debug("Watch session %d failed: %s", session.session_id, err)
        self.stop()
        self._listener.tree_load_failed(err)
