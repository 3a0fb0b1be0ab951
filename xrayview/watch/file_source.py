"""Poll-based watch source over a JSON snapshot file.

Each subscription runs one daemon thread that compares a cheap stat
signature of the file and re-reads it only when the signature moves.
Namespace scoping and label selectors are applied here, on the source side,
to the root's direct children.
"""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path

from ..errors import SnapshotError, XrayError
from ..protocols import TreeListener
from ..snapshot_file import find_record, read_document, tree_record
from ..tree.build import cleanse_namespace, copy_tree, namespaced, node_from_dict
from ..tree.types import DomainNode
from .context import WatchContext
from .selectors import LabelSelector, parse_selector

logger = logging.getLogger(__name__)

DEFAULT_REFRESH_SECONDS = 2.0


def path_signature(path: Path) -> tuple[str, int, int, int]:
    """Return a stable stat tuple describing ``path`` existence and metadata."""
    try:
        st = path.stat()
    except FileNotFoundError:
        return ("missing", 0, 0, 0)
    except OSError:
        return ("error", 0, 0, 0)
    return ("ok", st.st_mtime_ns, st.st_size, st.st_ino)


def scope_tree(root: DomainNode, namespace: str, selector: LabelSelector) -> DomainNode:
    """Copy ``root`` keeping only top-level resources in scope.

    Cluster-scoped children (no namespace segment) survive namespace scoping;
    the label selector applies to every direct child.
    """
    namespace = cleanse_namespace(namespace)
    scoped = root.shallow_copy()
    for child in root.children:
        child_ns, _name = namespaced(child.path)
        if namespace and child_ns and child_ns != namespace:
            continue
        if not selector.matches(child.labels):
            continue
        copy_tree(child, scoped)
    return scoped


class FileWatchSource:
    """Watch source delivering whole-tree snapshots read from ``path``."""

    def __init__(self, path: Path, refresh_seconds: float = DEFAULT_REFRESH_SECONDS) -> None:
        self.path = path
        self.refresh_seconds = max(0.05, refresh_seconds)
        self._threads: list[threading.Thread] = []

    def load_tree(self, ctx: WatchContext) -> DomainNode:
        """Read, decode, and scope one snapshot for ``ctx``."""
        selector = parse_selector(ctx.labels)
        document = read_document(self.path)
        root = node_from_dict(tree_record(document))
        return scope_tree(root, ctx.namespace, selector)

    def watch(self, ctx: WatchContext, listener: TreeListener) -> None:
        worker = threading.Thread(
            target=self._run,
            args=(ctx, listener),
            name=f"xrayview-watch-{ctx.session_id}",
            daemon=True,
        )
        self._threads = [thread for thread in self._threads if thread.is_alive()]
        self._threads.append(worker)
        worker.start()

    def join(self, timeout: float | None = None) -> None:
        """Wait for subscription threads to exit; used on shutdown and in tests."""
        for thread in list(self._threads):
            thread.join(timeout)

    def _run(self, ctx: WatchContext, listener: TreeListener) -> None:
        last_signature: tuple[str, int, int, int] | None = None
        while not ctx.cancelled:
            signature = path_signature(self.path)
            if signature != last_signature:
                last_signature = signature
                try:
                    root = self.load_tree(ctx)
                except (OSError, XrayError) as exc:
                    if not ctx.cancelled:
                        logger.debug("Watch session %d load failed: %s", ctx.session_id, exc)
                        listener.tree_load_failed(exc)
                    return
                if ctx.cancelled:
                    return
                listener.tree_changed(root)
            if ctx.token.wait(self.refresh_seconds):
                return

    def _record(self, path: str) -> dict[str, object]:
        document = read_document(self.path)
        found = find_record(document, path)
        if found is None:
            raise SnapshotError(f"{path!r} not found in {self.path.name}")
        return found[0]

    def to_json(self, kind: str, path: str) -> str:
        """Return the record at ``path`` without its children, as JSON."""
        record = {key: value for key, value in self._record(path).items() if key != "children"}
        record.setdefault("kind", kind)
        return json.dumps(record, indent=2) + "\n"

    def describe(self, kind: str, path: str) -> str:
        """Return a describe-style summary of the record at ``path``."""
        record = self._record(path)
        ns, name = namespaced(path)
        lines = [
            f"Name:       {name}",
            f"Namespace:  {ns or '<none>'}",
            f"Kind:       {record.get('kind', kind)}",
            f"Status:     {record.get('status') or 'Running'}",
        ]
        labels = record.get("labels")
        if isinstance(labels, dict) and labels:
            lines.append("Labels:")
            lines.extend(f"  {key}={value}" for key, value in sorted(labels.items()))
        else:
            lines.append("Labels:     <none>")
        children = record.get("children")
        if isinstance(children, list) and children:
            lines.append("Owns:")
            for child in children:
                if isinstance(child, dict):
                    lines.append(f"  {child.get('kind', '?')}  {child.get('path', '?')}")
        return "\n".join(lines) + "\n"

    def logs(self, pod_path: str, container_path: str, previous: bool) -> str:
        """Return recorded log lines of a container record."""
        record = self._record(container_path)
        key = "previous_logs" if previous else "logs"
        raw = record.get(key) or []
        if not isinstance(raw, list):
            raise SnapshotError(f"{key} of {container_path!r} must be a list")
        if not raw:
            return f"No {'previous ' if previous else ''}logs recorded for {container_path} in {pod_path}\n"
        return "\n".join(str(line) for line in raw) + "\n"
