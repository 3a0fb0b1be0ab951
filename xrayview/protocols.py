"""Collaborator contracts consumed by the xray view.

Implementations satisfy these structurally; nothing needs to inherit from
them. Watch sources call back on their own threads, everything else is
invoked on the UI thread.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .resources import ResourceMeta
    from .tree.types import DomainNode, NodeRef
    from .watch.context import WatchContext


class TreeListener(Protocol):
    """Receiver of whole-tree snapshots from a watch subscription."""

    def tree_changed(self, root: DomainNode) -> None: ...

    def tree_load_failed(self, err: Exception) -> None: ...


class WatchSource(Protocol):
    """Delivers snapshots for ``ctx`` until ``ctx.token`` is cancelled.

    ``watch`` must return promptly; delivery happens on the source's own
    schedule. After observing cancellation a source must not call
    ``listener`` again.
    """

    def watch(self, ctx: WatchContext, listener: TreeListener) -> None: ...

    def describe(self, kind: str, path: str) -> str: ...

    def to_json(self, kind: str, path: str) -> str: ...


class MetadataResolver(Protocol):
    """Maps a kind descriptor to verbs and display names.

    Raises ``MetaNotFoundError`` for unknown kinds.
    """

    def meta_for(self, kind: str) -> ResourceMeta: ...


@runtime_checkable
class Nuker(Protocol):
    """Capability handle for deleting resources by path."""

    def delete(self, path: str, cascade: bool, force: bool) -> None: ...


class AccessorFactory(Protocol):
    def accessor_for(self, kind: str) -> object: ...


DeleteConfirmed = Callable[[bool, bool], None]


class PresentationHost(Protocol):
    """Terminal-side services the view needs: flash, dialogs, and sub-views."""

    def flash_info(self, message: str) -> None: ...

    def flash_error(self, message: str) -> None: ...

    def in_cmd_mode(self) -> bool: ...

    def previous_view(self) -> None: ...

    def request_redraw(self) -> None: ...

    def confirm_delete(self, message: str, on_ok: DeleteConfirmed, on_cancel: Callable[[], None]) -> None: ...

    def show_details(self, title: str, path: str, text: str, language: str) -> None: ...

    def show_logs(self, pod: NodeRef, container: NodeRef, previous: bool) -> None: ...

    def shell_in(self, pod_path: str, container: str) -> None: ...

    def edit(self, ref: NodeRef) -> bool: ...

    def view_resource(self, kind: str, path: str) -> None: ...
