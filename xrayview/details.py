"""Syntax highlighting for the resource detail overlay.

JSON manifests go through the Pygments JSON lexer, describe output through a
YAML lexer (it is ``key: value`` shaped), and log lines stay plain. Control
bytes are neutralized before anything reaches the terminal.
"""

from __future__ import annotations

import re

from pygments import highlight
from pygments.formatters import TerminalFormatter
from pygments.lexer import Lexer
from pygments.lexers import JsonLexer, TextLexer, YamlLexer
from pygments.styles import get_style_by_name
from pygments.util import ClassNotFound

DEFAULT_STYLE = "monokai"

_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]")

_FORMATTERS: dict[str, TerminalFormatter] = {}
_VALID_STYLES: set[str] = set()
_INVALID_STYLES: set[str] = set()

_LEXERS: dict[str, type[Lexer]] = {
    "json": JsonLexer,
    "describe": YamlLexer,
}


def sanitize_terminal_text(text: str) -> str:
    """Escape terminal control bytes (bell, cursor moves, etc.)."""
    if _CONTROL_RE.search(text) is None:
        return text

    out: list[str] = []
    for ch in text:
        code = ord(ch)
        if ch in {"\n", "\r", "\t"}:
            out.append(ch)
            continue
        # C0 controls + DEL + C1 controls.
        if code < 32 or code == 127 or 0x80 <= code <= 0x9F:
            out.append(f"\\x{code:02x}")
            continue
        out.append(ch)
    return "".join(out)


def normalize_style(style: str) -> str:
    """Return ``style`` when Pygments knows it, otherwise the default style."""
    if style in _VALID_STYLES:
        return style
    if style in _INVALID_STYLES:
        return DEFAULT_STYLE
    try:
        get_style_by_name(style)
    except ClassNotFound:
        _INVALID_STYLES.add(style)
        return DEFAULT_STYLE
    _VALID_STYLES.add(style)
    return style


def _formatter_for_style(style: str) -> TerminalFormatter:
    formatter = _FORMATTERS.get(style)
    if formatter is None:
        formatter = TerminalFormatter(style=style)
        _FORMATTERS[style] = formatter
    return formatter


def lexer_for(language: str) -> Lexer:
    return _LEXERS.get(language, TextLexer)()


def colorize(text: str, language: str, style: str = DEFAULT_STYLE, no_color: bool = False) -> str:
    """Return sanitized ``text``, highlighted for ``language`` unless ``no_color``."""
    text = sanitize_terminal_text(text)
    if no_color or language not in _LEXERS:
        return text
    formatter = _formatter_for_style(normalize_style(style))
    return highlight(text, lexer_for(language), formatter)
