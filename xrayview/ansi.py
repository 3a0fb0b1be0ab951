"""Clipping of styled rows to the terminal width."""

from __future__ import annotations

import re
import unicodedata

SGR_RE = re.compile(r"\x1b\[[0-9;?]*[ -/]*[@-~]")


def cell_width(ch: str) -> int:
    """Columns one character occupies; icons and CJK take two."""
    if unicodedata.combining(ch):
        return 0
    return 2 if unicodedata.east_asian_width(ch) in {"W", "F"} else 1


def clip_ansi_line(text: str, max_cols: int) -> str:
    """Cut ``text`` to ``max_cols`` columns without splitting escape sequences.

    Escapes after the cut are still emitted so a clipped row ends with its
    reset.
    """
    if max_cols <= 0:
        return ""
    pieces: list[str] = []
    used = 0
    pos = 0
    clipped = False
    while pos < len(text):
        escape = SGR_RE.match(text, pos)
        if escape is not None:
            pieces.append(escape.group(0))
            pos = escape.end()
            continue
        ch = " " if text[pos] == "\t" else text[pos]
        pos += 1
        if clipped:
            continue
        width = cell_width(ch)
        if used + width > max_cols:
            clipped = True
            continue
        pieces.append(ch)
        used += width
    return "".join(pieces)
