"""Key decoding for the raw-mode terminal.

``read_key`` turns stdin bytes into the key tokens the view binds
(``"ENTER"``, ``"CTRL_D"``, ``"UP"``, printable characters, ...).
"""

from __future__ import annotations

import os
import select
from collections import deque

ESC_SEQUENCE_TIMEOUT_MS = 25

_pushback: deque[bytes] = deque()

_CONTROL_KEYS = {
    b"\x03": "CTRL_C",
    b"\x04": "CTRL_D",
    b"\x15": "CTRL_U",
    b"\t": "TAB",
    b"\x08": "BACKSPACE",
    b"\x7f": "BACKSPACE",
    b"\r": "ENTER",
    b"\n": "ENTER",
}

# Final byte of ``ESC [`` sequences; ``~`` terminated ones are keyed by their digit.
_CSI_KEYS = {b"A": "UP", b"B": "DOWN", b"C": "RIGHT", b"D": "LEFT", b"H": "HOME", b"F": "END"}
_CSI_TILDE_KEYS = {b"5": "PAGE_UP", b"6": "PAGE_DOWN"}


def _next_byte(fd: int, timeout_ms: int | None) -> bytes | None:
    if _pushback:
        return _pushback.popleft()
    if timeout_ms is not None:
        ready, _, _ = select.select([fd], [], [], max(0.0, timeout_ms / 1000.0))
        if not ready:
            return None
    return os.read(fd, 1) or None


def _utf8_length(lead: int) -> int:
    if lead >= 0xF0:
        return 4
    if lead >= 0xE0:
        return 3
    if lead >= 0xC0:
        return 2
    return 1


def _decode_char(fd: int, lead: bytes) -> str:
    raw = lead
    while len(raw) < _utf8_length(lead[0]):
        more = _next_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
        if more is None:
            break
        raw += more
    return raw.decode("utf-8", errors="replace")


def _decode_escape(fd: int) -> str:
    introducer = _next_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
    if introducer is None:
        return "ESC"
    if introducer != b"[":
        _pushback.append(introducer)
        return "ESC"
    final = _next_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
    if final in _CSI_KEYS:
        return _CSI_KEYS[final]
    if final in _CSI_TILDE_KEYS and _next_byte(fd, ESC_SEQUENCE_TIMEOUT_MS) == b"~":
        return _CSI_TILDE_KEYS[final]
    return "ESC"


def read_key(fd: int, timeout_ms: int | None = None) -> str:
    """Return the next key token, or ``""`` when ``timeout_ms`` elapses first."""
    lead = _next_byte(fd, timeout_ms)
    if lead is None:
        return ""
    if lead in _CONTROL_KEYS:
        return _CONTROL_KEYS[lead]
    if lead == b"\x1b":
        return _decode_escape(fd)
    return _decode_char(fd, lead)
