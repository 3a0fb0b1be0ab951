"""Read-only JSON config.

All access is defensive: a missing or malformed file, or a value of the
wrong type, falls back to the built-in default for that key.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path

from platformdirs import user_config_dir

logger = logging.getLogger(__name__)

APP_NAME = "xrayview"
CONFIG_FILENAME = "config.json"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME

MIN_REFRESH_SECONDS = 0.1


@dataclass(frozen=True)
class Settings:
    refresh_seconds: float = 2.0
    expand_nodes: bool = True
    show_icons: bool = True
    theme: str | None = None
    namespace: str = ""


def load_config() -> dict[str, object]:
    """Load the JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except (OSError, ValueError) as exc:
        logger.warning("Ignoring unreadable config %s: %s", CONFIG_PATH, exc)
        return {}
    return data if isinstance(data, dict) else {}


def _load_bool(data: dict[str, object], key: str, default: bool) -> bool:
    value = data.get(key)
    return value if isinstance(value, bool) else default


def _load_refresh(data: dict[str, object]) -> float:
    value = data.get("refresh_seconds")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return Settings.refresh_seconds
    return max(MIN_REFRESH_SECONDS, float(value))


def _load_string(data: dict[str, object], key: str) -> str | None:
    value = data.get(key)
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    return stripped if stripped else None


def load_settings() -> Settings:
    data = load_config()
    return Settings(
        refresh_seconds=_load_refresh(data),
        expand_nodes=_load_bool(data, "expand_nodes", Settings.expand_nodes),
        show_icons=_load_bool(data, "show_icons", Settings.show_icons),
        theme=_load_string(data, "theme"),
        namespace=_load_string(data, "namespace") or "",
    )
