"""Snapshot codec between JSON-shaped records and ``DomainNode`` trees."""

from __future__ import annotations

from collections.abc import Mapping

from ..errors import SnapshotError
from .types import PATH_SEPARATOR, DomainNode


def namespaced(path: str) -> tuple[str, str]:
    """Split ``path`` into ``(namespace, name)`` on its last separator.

    Paths without a separator are cluster scoped and return ``("", path)``.
    """
    if PATH_SEPARATOR not in path:
        return "", path
    ns, name = path.rsplit(PATH_SEPARATOR, 1)
    return ns, name


def _decode_labels(raw: object, path: str) -> dict[str, str]:
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        raise SnapshotError(f"labels for {path!r} must be an object")
    return {str(key): str(value) for key, value in raw.items()}


def node_from_dict(data: object, parent: DomainNode | None = None) -> DomainNode:
    """Decode one snapshot record and its children into a ``DomainNode`` tree.

    Raises ``SnapshotError`` for non-object records, missing or empty
    ``kind``/``path`` strings, non-list ``children``, and paths repeated
    within the same snapshot.
    """
    seen: set[str] = set()

    def decode(record: object, owner: DomainNode | None) -> DomainNode:
        if not isinstance(record, Mapping):
            raise SnapshotError(f"snapshot record must be an object, got {type(record).__name__}")
        kind = record.get("kind")
        path = record.get("path")
        if not isinstance(kind, str) or not kind:
            raise SnapshotError(f"snapshot record is missing a kind: {dict(record)!r}")
        if not isinstance(path, str) or not path:
            raise SnapshotError(f"{kind} record is missing a path")
        if path in seen:
            raise SnapshotError(f"path {path!r} appears twice in one snapshot")
        seen.add(path)
        status = record.get("status") or ""
        node = DomainNode(
            kind=kind,
            path=path,
            status=str(status),
            labels=_decode_labels(record.get("labels"), path),
        )
        if owner is not None:
            owner.add_child(node)
        children = record.get("children") or []
        if not isinstance(children, list):
            raise SnapshotError(f"children of {path!r} must be a list")
        for child in children:
            decode(child, node)
        return node

    return decode(data, parent)


def copy_tree(node: DomainNode, parent: DomainNode | None = None) -> DomainNode:
    """Deep-copy ``node`` with fresh parent back-references."""
    clone = node.shallow_copy()
    if parent is not None:
        parent.add_child(clone)
    for child in node.children:
        copy_tree(child, clone)
    return clone


ALL_NAMESPACES = ""
_ALL_NAMESPACE_ALIASES = {"", "all", "-", "*"}


def cleanse_namespace(namespace: str | None) -> str:
    """Normalize user-facing all-namespace spellings to ``ALL_NAMESPACES``."""
    if namespace is None:
        return ALL_NAMESPACES
    stripped = namespace.strip()
    if stripped.lower() in _ALL_NAMESPACE_ALIASES:
        return ALL_NAMESPACES
    return stripped


def is_all_namespaces(namespace: str) -> bool:
    return cleanse_namespace(namespace) == ALL_NAMESPACES
