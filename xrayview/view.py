"""Live xray tree view: filter-mode state machine, actions, and watch wiring.

Every method here runs on the UI thread. Snapshots arrive through the watch
controller, which marshals them onto the update queue before calling
``tree_changed``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from .actions import KeyActions, key_action, shared_key_action
from .buffer import BufferKind, BufferListener, FilterBuffer, FilterMode
from .errors import MetaNotFoundError, XrayError
from .protocols import AccessorFactory, MetadataResolver, Nuker, PresentationHost, WatchSource
from .resources import ResourceMeta
from .tree.build import cleanse_namespace, is_all_namespaces, namespaced
from .tree.filtering import filter_for_query, trim_selector
from .tree.reconcile import reconcile
from .tree.rendering import kind_icons
from .tree.types import PATH_SEPARATOR, DomainNode, NodeRef, PresentationNode, PresentationTree
from .ui_theme import DEFAULT_THEME, UITheme
from .watch.controller import WatchController
from .watch.updates import UpdateQueue

logger = logging.getLogger(__name__)

XRAY_TITLE = "Xray"


@dataclass(frozen=True)
class ViewSettings:
    """Display preferences resolved from config and CLI flags."""

    expand_nodes: bool = True
    show_icons: bool = True
    theme: UITheme = DEFAULT_THEME


class XrayView:
    """Relationship tree for one resource kind, kept live by a watch."""

    def __init__(
        self,
        kind: str,
        source: WatchSource,
        updates: UpdateQueue,
        host: PresentationHost,
        resolver: MetadataResolver,
        accessors: AccessorFactory,
        namespace: str = "",
        settings: ViewSettings | None = None,
        prompt_listener: BufferListener | None = None,
    ) -> None:
        self.kind = kind
        self.source = source
        self.updates = updates
        self.host = host
        self.resolver = resolver
        self.accessors = accessors
        self.namespace = cleanse_namespace(namespace)
        self.settings = settings or ViewSettings()
        self.expand_nodes = self.settings.expand_nodes
        self.buffer = FilterBuffer(BufferKind.FILTER)
        self.actions = KeyActions()
        self.meta: ResourceMeta | None = None
        self.count = 0
        self.title = ""
        self.tree: PresentationTree = reconcile(None, "", self.expand_nodes, self.settings.theme)
        self._snapshot: DomainNode | None = None
        self._selected_item = ""
        listeners: tuple[BufferListener, ...] = (self,)
        if prompt_listener is not None:
            listeners = (prompt_listener, self)
        self.watch = WatchController(
            source,
            updates,
            self,
            self.context_values,
            buffer=self.buffer,
            buffer_listeners=listeners,
        )

    # ------------------------------------------------------------------
    # Lifecycle

    def init(self) -> None:
        """Resolve the view's own metadata and bind the initial key table."""
        try:
            self.meta = self.resolver.meta_for(self.kind)
        except MetaNotFoundError as exc:
            logger.warning("No meta for view kind %r -- %s", self.kind, exc)
            self.meta = None
        self.title = self.style_title()
        self.refresh_actions()

    def start(self) -> None:
        """(Re)start the watch with the current namespace and selector."""
        self.watch.start()
        self.update_title()

    def stop(self) -> None:
        self.watch.stop()

    @property
    def running(self) -> bool:
        return self.watch.running

    def context_values(self) -> tuple[str, str]:
        """Return ``(namespace, labels)`` for a new watch session."""
        if self.buffer.mode is not FilterMode.LABEL_SELECTOR:
            return self.namespace, ""
        return self.namespace, trim_selector(self.buffer.text)

    def set_namespace(self, namespace: str) -> None:
        """Switch namespace; a namespace change always restarts the watch."""
        self.namespace = cleanse_namespace(namespace)
        self._selected_item = ""
        if self.running:
            self.start()
        else:
            self.update_title()

    # ------------------------------------------------------------------
    # Key bindings

    def bind_keys(self) -> None:
        self.actions.add(
            {
                "ENTER": key_action("Goto", self.goto_cmd),
                "/": shared_key_action("Filter Mode", self.activate_cmd),
                "BACKSPACE": shared_key_action("Erase", self.erase_cmd),
                "CTRL_U": shared_key_action("Clear Filter", self.clear_cmd),
                "ESC": shared_key_action("Filter Reset", self.reset_cmd),
                "+": key_action("Toggle Expand", self.toggle_expand_cmd),
            }
        )

    def refresh_actions(self) -> None:
        """Rebind actions for the selected node's kind.

        Unknown kinds keep only the base bindings; a metadata miss is logged
        and never surfaced as an error.
        """
        self.actions.clear()
        self.bind_keys()
        try:
            ref = self.selected_spec()
            if ref is None:
                return
            try:
                meta = self.resolver.meta_for(ref.kind)
            except MetaNotFoundError as exc:
                logger.warning("No meta for %r -- %s", ref.kind, exc)
                return

            aa = {}
            if meta.can("edit"):
                aa["e"] = key_action("Edit", self.edit_cmd)
            if meta.can("delete"):
                aa["CTRL_D"] = key_action("Delete", self.delete_cmd)
            if not meta.internal:
                aa["y"] = key_action("View", self.view_cmd)
                aa["d"] = key_action("Describe", self.describe_cmd)
            if ref.kind == "containers":
                aa["s"] = key_action("Shell", self.shell_cmd)
                aa["l"] = key_action("Logs", self.logs_cmd(False))
                aa["L"] = key_action("Logs Previous", self.logs_cmd(True))
            self.actions.add(aa)
        finally:
            self.host.request_redraw()

    def hints(self) -> list[tuple[str, str]]:
        """Return visible key hints plus the icon legend when icons are on."""
        hints = self.actions.hints()
        if self.settings.show_icons:
            hints.extend(sorted(kind_icons().items(), key=lambda item: item[1]))
        return hints

    def aliases(self) -> list[str]:
        if self.meta is None:
            return [self.kind]
        return self.meta.aliases()

    def handle_key(self, key: str) -> bool:
        """Route one key token; returns whether the view consumed it.

        While filter mode is active printable keys, ``/`` included, extend
        the buffer; only ``ENTER`` and the named filter keys dispatch.
        """
        if self.buffer.active:
            if len(key) == 1 and key.isprintable():
                self.buffer.add(key)
                return True
            action = self.actions.get(key)
            if key == "ENTER" or (action is not None and action.shared):
                return bool(self.actions.dispatch(key))
            return True

        if key in {"UP", "k"}:
            self.move_selection(-1)
            return True
        if key in {"DOWN", "j"}:
            self.move_selection(1)
            return True
        if key == " ":
            self.toggle_current()
            return True
        handled = self.actions.dispatch(key)
        return bool(handled)

    # ------------------------------------------------------------------
    # Filter-mode transitions

    def activate_cmd(self, key: str) -> bool:
        if self.host.in_cmd_mode():
            return False
        self.host.flash_info("Filter mode activated.")
        self.buffer.set_active(True)
        return True

    def clear_cmd(self, key: str) -> bool:
        if not self.buffer.active:
            return False
        self.buffer.clear()
        self.start()
        return True

    def erase_cmd(self, key: str) -> bool:
        if self.buffer.active:
            self.buffer.delete()
        self.update_title()
        return True

    def reset_cmd(self, key: str) -> bool:
        if not self.buffer.in_cmd_mode:
            self.buffer.reset()
            self.host.previous_view()
            return True

        self.host.flash_info("Clearing filter...")
        self.buffer.reset()
        self.start()
        return True

    def goto_cmd(self, key: str) -> bool:
        """Confirm the filter while editing, otherwise open the selected resource."""
        if self.buffer.active:
            if self.buffer.mode is FilterMode.LABEL_SELECTOR:
                self.start()
            self.buffer.set_active(False)
            self.tree.expand_all()
            self.host.request_redraw()
            return True

        ref = self.selected_spec()
        if ref is None:
            return True
        if len(ref.path.split(PATH_SEPARATOR)) == 1:
            return True
        try:
            self.host.view_resource(ref.kind, ref.path)
        except XrayError as exc:
            self.host.flash_error(str(exc))
        return True

    def toggle_expand_cmd(self, key: str) -> bool:
        self.expand_nodes = not self.expand_nodes
        self.update(self.filter(self._snapshot))
        return True

    # ------------------------------------------------------------------
    # Resource actions

    def logs_cmd(self, previous: bool) -> Callable[[str], bool]:
        def run(key: str) -> bool:
            ref = self.selected_spec()
            if ref is None:
                return True
            if ref.parent is None:
                logger.error("No parent found for container %r", ref.path)
                return True
            try:
                self.host.show_logs(ref.parent, ref, previous)
            except (OSError, XrayError) as exc:
                self.host.flash_error(str(exc))
            return True

        return run

    def shell_cmd(self, key: str) -> bool:
        ref = self.selected_spec()
        if ref is None:
            return True
        if ref.status:
            self.host.flash_error(f"{ref.path} is not in a running state")
            return True
        if ref.parent is None:
            logger.error("No parent found on container node %r", ref.path)
            return True
        _ns, container = namespaced(ref.path)
        self.shell_in(ref.parent.path, container)
        return True

    def shell_in(self, pod_path: str, container: str) -> None:
        self.stop()
        try:
            self.host.shell_in(pod_path, container)
        except (OSError, XrayError) as exc:
            self.host.flash_error(f"Shell failed: {exc}")
        finally:
            self.start()

    def view_cmd(self, key: str) -> bool:
        ref = self.selected_spec()
        if ref is None:
            return False
        try:
            raw = self.source.to_json(ref.kind, ref.path)
        except (OSError, XrayError) as exc:
            self.host.flash_error(f"unable to get resource {ref.kind!r} -- {exc}")
            return True
        self.host.show_details("View", ref.path, raw, "json")
        return True

    def describe_cmd(self, key: str) -> bool:
        ref = self.selected_spec()
        if ref is None:
            return False
        try:
            text = self.source.describe(ref.kind, ref.path)
        except (OSError, XrayError) as exc:
            self.host.flash_error(f"Describe command failed: {exc}")
            return True
        self.host.show_details("Describe", ref.path, text, "describe")
        return True

    def edit_cmd(self, key: str) -> bool:
        ref = self.selected_spec()
        if ref is None:
            return False
        self.stop()
        try:
            if not self.host.edit(ref):
                self.host.flash_error("Edit exec failed")
        finally:
            self.start()
        return True

    def delete_cmd(self, key: str) -> bool:
        ref = self.selected_spec()
        if ref is None:
            return False
        self.stop()
        try:
            try:
                meta = self.resolver.meta_for(ref.kind)
            except MetaNotFoundError as exc:
                logger.warning("No meta for %r -- %s", ref.kind, exc)
                return True
            self.resource_delete(ref, f"Delete {meta.singular} {ref.path}?")
        finally:
            self.start()
        return True

    def resource_delete(self, ref: NodeRef, message: str) -> None:
        def on_ok(cascade: bool, force: bool) -> None:
            self.host.flash_info(f"Delete resource {ref.kind} {ref.path}")
            try:
                accessor = self.accessors.accessor_for(ref.kind)
            except MetaNotFoundError as exc:
                logger.error("No accessor for %r: %s", ref.kind, exc)
                self.host.flash_error(f"No accessor for {ref.kind}")
                return
            if not isinstance(accessor, Nuker):
                self.host.flash_error(f"Invalid nuker {type(accessor).__name__}")
                return
            try:
                accessor.delete(ref.path, cascade, force)
            except (OSError, XrayError) as exc:
                self.host.flash_error(f"Delete failed with {exc}")
            else:
                self.host.flash_info(f"{self.kind} {ref.path} deleted successfully")
            self.refresh()

        self.host.confirm_delete(message, on_ok, lambda: None)

    # ------------------------------------------------------------------
    # Selection

    def selected_spec(self) -> NodeRef | None:
        node = self.tree.current
        if node is None:
            return None
        if node.ref is None:
            logger.error("Expecting a NodeRef on node %r", node.label)
            return None
        return node.ref

    def selected_path(self) -> str:
        """Return the selected node's path, or ``""`` when nothing is selected."""
        ref = self.selected_spec()
        if ref is None:
            return ""
        return ref.path

    def clear_selection(self) -> None:
        self._selected_item = ""

    def select_path(self, path: str) -> None:
        """Anchor the next reconcile on ``path``."""
        self._selected_item = path

    def move_selection(self, delta: int) -> None:
        node = self.tree.move(delta)
        if node is not None:
            self.selection_changed(node)

    def toggle_current(self) -> None:
        node = self.tree.current
        if node is None:
            return
        node.toggle()
        self.host.request_redraw()

    def selection_changed(self, node: PresentationNode) -> None:
        """Remember the newly highlighted node and rebind actions for it."""
        if node.ref is None:
            logger.error("No ref found on node %r", node.label)
            return
        self._selected_item = node.ref.path
        self.tree_node_selected()
        self.refresh_actions()

    def tree_node_selected(self) -> None:
        """Recolor so only the current node carries the cursor color."""
        theme = self.settings.theme
        for node, _parent in self.tree.root.walk():
            if node.ref is not None:
                node.color = theme.tree_fg
        if self.tree.current is not None and self.tree.current.ref is not None:
            self.tree.current.color = theme.tree_cursor
        self.host.request_redraw()

    # ------------------------------------------------------------------
    # Snapshot -> filter -> reconcile pipeline

    def filter(self, root: DomainNode | None) -> DomainNode | None:
        """Apply the buffer's local query to ``root``.

        Empty and label-selector buffers pass ``root`` through untouched; the
        watch source has already applied any selector.
        """
        if self.buffer.empty or self.buffer.mode is FilterMode.LABEL_SELECTOR:
            return root

        self.update_title()
        return filter_for_query(root, self.buffer.text, on_error=self.host.flash_error)

    def update(self, node: DomainNode | None) -> None:
        """Rebuild the presentation tree for ``node`` and re-anchor selection."""
        if node is not None and not self._selected_item:
            self._selected_item = node.path
        self.tree = reconcile(
            node,
            self._selected_item,
            self.expand_nodes,
            self.settings.theme,
            self.settings.show_icons,
        )
        self.tree_node_selected()
        self.refresh_actions()

    def key_entered(self) -> None:
        self.clear_selection()
        self.update(self.filter(self._snapshot))

    def refresh(self) -> None:
        self.update(self.filter(self._snapshot))

    @property
    def snapshot(self) -> DomainNode | None:
        return self._snapshot

    # ------------------------------------------------------------------
    # Notifications

    def tree_changed(self, root: DomainNode) -> None:
        """Accept a new snapshot from the current watch session."""
        self._snapshot = root
        self.count = root.count(self.kind)
        self.update(self.filter(root))
        self.update_title()

    def tree_load_failed(self, err: Exception) -> None:
        self.host.flash_error(str(err))
        self.update_title()

    def buffer_changed(self, text: str) -> None:
        self.key_entered()

    def buffer_active(self, state: bool, kind: BufferKind) -> None:
        self.update_title()

    # ------------------------------------------------------------------
    # Title

    def update_title(self) -> None:
        self.title = self.style_title()
        self.host.request_redraw()

    def style_title(self) -> str:
        theme = self.settings.theme
        base = f"{XRAY_TITLE}-{self.kind.title()}"
        ns = "all" if is_all_namespaces(self.namespace) else self.namespace
        title = (
            f" {theme.title}{base}{theme.reset}"
            f"({theme.title_namespace}{ns}{theme.reset})"
            f"[{theme.title_count}{self.count}{theme.reset}] "
        )
        buff = self.buffer.text
        if not buff:
            return title
        if self.buffer.mode is FilterMode.LABEL_SELECTOR:
            buff = trim_selector(buff)
        return title + f"<{theme.title_filter}/{buff}{theme.reset}> "
