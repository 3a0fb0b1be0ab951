"""Resource metadata registry and snapshot-file accessors.

``KindRegistry`` answers which verbs a kind supports and how to name it.
``FileAccessor`` is the mutation service for file-backed snapshots.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path

from .errors import DeleteError, EditError, MetaNotFoundError
from .snapshot_file import find_record, read_document, write_document

_STANDARD_VERBS = ("get", "list", "watch", "edit", "delete")
_STRUCTURAL_KEYS = ("path", "kind", "children")


@dataclass(frozen=True)
class ResourceMeta:
    """Verbs and display names for one resource kind.

    ``internal`` marks synthetic kinds (cluster root, containers) that have no
    standalone manifest to view or describe.
    """

    name: str
    singular: str
    short_names: tuple[str, ...] = ()
    verbs: tuple[str, ...] = ()
    internal: bool = False

    def can(self, verb: str) -> bool:
        return verb in self.verbs or "*" in self.verbs

    def aliases(self) -> list[str]:
        return [*self.short_names, self.singular, self.name]


DEFAULT_KINDS: tuple[ResourceMeta, ...] = (
    ResourceMeta("cluster", "cluster", (), ("get",), internal=True),
    ResourceMeta("namespaces", "namespace", ("ns",), _STANDARD_VERBS),
    ResourceMeta("deployments", "deployment", ("deploy", "dp"), _STANDARD_VERBS),
    ResourceMeta("replicasets", "replicaset", ("rs",), _STANDARD_VERBS),
    ResourceMeta("statefulsets", "statefulset", ("sts",), _STANDARD_VERBS),
    ResourceMeta("daemonsets", "daemonset", ("ds",), _STANDARD_VERBS),
    ResourceMeta("pods", "pod", ("po",), _STANDARD_VERBS),
    ResourceMeta("containers", "container", ("co",), ("get", "list"), internal=True),
    ResourceMeta("services", "service", ("svc",), _STANDARD_VERBS),
    ResourceMeta("configmaps", "configmap", ("cm",), _STANDARD_VERBS),
    ResourceMeta("secrets", "secret", ("sec",), _STANDARD_VERBS),
    ResourceMeta("serviceaccounts", "serviceaccount", ("sa",), _STANDARD_VERBS),
    ResourceMeta("persistentvolumeclaims", "persistentvolumeclaim", ("pvc",), _STANDARD_VERBS),
)


def _string_tuple(value: object) -> tuple[str, ...]:
    if not isinstance(value, (list, tuple)):
        return ()
    return tuple(str(item) for item in value if isinstance(item, str) and item)


def meta_from_record(kind: str, record: Mapping[str, object]) -> ResourceMeta:
    """Build metadata from one ``kinds`` table entry, defaulting missing names."""
    singular = record.get("singular")
    return ResourceMeta(
        name=kind,
        singular=singular if isinstance(singular, str) and singular else kind.rstrip("s"),
        short_names=_string_tuple(record.get("short_names")),
        verbs=_string_tuple(record.get("verbs")),
        internal=bool(record.get("internal", False)),
    )


class KindRegistry:
    """Thread-safe kind -> ``ResourceMeta`` lookup."""

    def __init__(self, metas: Iterable[ResourceMeta] = ()) -> None:
        self._lock = threading.Lock()
        self._metas: dict[str, ResourceMeta] = {}
        for meta in metas:
            self.register(meta)

    @classmethod
    def with_defaults(cls, extra: Mapping[str, Mapping[str, object]] | None = None) -> KindRegistry:
        registry = cls(DEFAULT_KINDS)
        for kind, record in (extra or {}).items():
            registry.register(meta_from_record(kind, record))
        return registry

    def register(self, meta: ResourceMeta) -> None:
        with self._lock:
            self._metas[meta.name] = meta

    def meta_for(self, kind: str) -> ResourceMeta:
        with self._lock:
            meta = self._metas.get(kind)
        if meta is None:
            raise MetaNotFoundError(f"no resource meta registered for {kind!r}")
        return meta

    def kinds(self) -> list[str]:
        with self._lock:
            return sorted(self._metas)


_DOCUMENT_LOCK = threading.Lock()


@dataclass
class FileAccessor:
    """Deletes and edits resources of one kind in a snapshot file."""

    kind: str
    snapshot_path: Path

    def delete(self, path: str, cascade: bool, force: bool) -> None:
        """Remove the record at ``path`` and rewrite the snapshot.

        Without ``cascade`` a record that still owns children is refused;
        without ``force`` a record with pending ``finalizers`` is refused.
        Failures raise ``DeleteError`` and leave the file untouched.
        """
        with _DOCUMENT_LOCK:
            try:
                document = read_document(self.snapshot_path)
            except OSError as exc:
                raise DeleteError(f"cannot read {self.snapshot_path.name}: {exc}") from exc
            found = find_record(document, path)
            if found is None:
                raise DeleteError(f"{self.kind} {path!r} not found")
            record, parent = found
            if parent is None:
                raise DeleteError("cannot delete the snapshot root")
            if record.get("kind") != self.kind:
                raise DeleteError(f"{path!r} is a {record.get('kind')}, not a {self.kind}")
            if record.get("children") and not cascade:
                raise DeleteError(f"{path!r} still owns resources; delete with cascade")
            if record.get("finalizers") and not force:
                raise DeleteError(f"{path!r} has pending finalizers; delete with force")
            children = parent.get("children")
            assert isinstance(children, list)
            parent["children"] = [child for child in children if child is not record]
            try:
                write_document(self.snapshot_path, document)
            except OSError as exc:
                raise DeleteError(f"cannot write {self.snapshot_path.name}: {exc}") from exc

    def update(self, path: str, changes: Mapping[str, object]) -> None:
        """Overwrite the editable fields of the record at ``path``.

        ``path``, ``kind`` and ``children`` are structural and must come back
        unchanged (or absent) from an edit.
        """
        with _DOCUMENT_LOCK:
            try:
                document = read_document(self.snapshot_path)
            except OSError as exc:
                raise EditError(f"cannot read {self.snapshot_path.name}: {exc}") from exc
            found = find_record(document, path)
            if found is None:
                raise EditError(f"{self.kind} {path!r} not found")
            record, _parent = found
            for key in _STRUCTURAL_KEYS:
                if key in changes and changes[key] != record.get(key):
                    raise EditError(f"{key!r} of {path!r} cannot be edited")
            for key in [key for key in record if key not in _STRUCTURAL_KEYS and key not in changes]:
                del record[key]
            record.update({key: value for key, value in changes.items() if key not in _STRUCTURAL_KEYS})
            try:
                write_document(self.snapshot_path, document)
            except OSError as exc:
                raise EditError(f"cannot write {self.snapshot_path.name}: {exc}") from exc


class FileAccessorFactory:
    """Hands out ``FileAccessor`` handles for kinds the registry knows."""

    def __init__(self, registry: KindRegistry, snapshot_path: Path) -> None:
        self._registry = registry
        self._snapshot_path = snapshot_path

    def accessor_for(self, kind: str) -> FileAccessor:
        meta = self._registry.meta_for(kind)
        return FileAccessor(kind=meta.name, snapshot_path=self._snapshot_path)
