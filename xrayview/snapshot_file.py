"""JSON snapshot document helpers shared by the file watch source and accessor.

A document is either a bare tree record or an object with a ``tree`` record
and an optional ``kinds`` table. Writes go through a temp file and
``os.replace`` so a polling reader never sees a half-written file.
"""

from __future__ import annotations

import contextlib
import json
import os
import tempfile
from collections.abc import Iterator, Mapping
from pathlib import Path

from .errors import SnapshotError


def read_document(path: Path) -> dict[str, object]:
    """Load and shape-check a snapshot document.

    Raises ``SnapshotError`` for undecodable JSON or a non-object top level;
    ``OSError`` from reading propagates unchanged.
    """
    text = path.read_text(encoding="utf-8")
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise SnapshotError(f"{path.name}: invalid JSON at line {exc.lineno}: {exc.msg}") from exc
    if not isinstance(data, dict):
        raise SnapshotError(f"{path.name}: top level must be an object")
    return data


def write_document(path: Path, document: Mapping[str, object]) -> None:
    payload = json.dumps(document, indent=2) + "\n"
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=str(path.parent))
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(payload)
        os.replace(tmp_name, path)
    except BaseException:
        with contextlib.suppress(FileNotFoundError):
            os.unlink(tmp_name)
        raise


def tree_record(document: Mapping[str, object]) -> dict[str, object]:
    """Return the root tree record of ``document``."""
    record = document.get("tree", document)
    if not isinstance(record, dict):
        raise SnapshotError("snapshot tree must be an object")
    return record


def kinds_table(document: Mapping[str, object]) -> dict[str, dict[str, object]]:
    """Return the document's ``kinds`` table, skipping malformed entries."""
    raw = document.get("kinds")
    if not isinstance(raw, dict):
        return {}
    return {str(key): value for key, value in raw.items() if isinstance(value, dict)}


def iter_records(record: Mapping[str, object]) -> Iterator[tuple[dict[str, object], dict[str, object] | None]]:
    """Yield ``(record, parent_record)`` pairs depth-first."""
    stack: list[tuple[Mapping[str, object], Mapping[str, object] | None]] = [(record, None)]
    while stack:
        current, parent = stack.pop()
        yield current, parent  # type: ignore[misc]
        children = current.get("children") or []
        if isinstance(children, list):
            stack.extend((child, current) for child in reversed(children) if isinstance(child, dict))


def find_record(document: Mapping[str, object], path: str) -> tuple[dict[str, object], dict[str, object] | None] | None:
    for record, parent in iter_records(tree_record(document)):
        if record.get("path") == path:
            return record, parent
    return None
