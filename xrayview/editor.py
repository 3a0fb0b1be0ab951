"""External process launches: ``$EDITOR`` for manifests and ``$SHELL`` for containers.

Both run while the TUI is temporarily out of raw/alternate-screen mode and
return an error message string instead of raising, for UI-friendly handling.
"""

from __future__ import annotations

import os
import shlex
import subprocess
from pathlib import Path
from typing import Callable


def _command_from_env(name: str, fallback: str = "") -> list[str] | str:
    value = os.environ.get(name, "").strip() or fallback
    if not value:
        return f"${name} is not set."
    cmd = shlex.split(value)
    if not cmd:
        return f"${name} is empty."
    return cmd


def launch_editor(
    target: Path,
    disable_tui_mode: Callable[[], None],
    enable_tui_mode: Callable[[], None],
) -> str | None:
    cmd = _command_from_env("EDITOR")
    if isinstance(cmd, str):
        return f"Cannot edit: {cmd}"

    disable_tui_mode()
    try:
        result = subprocess.run([*cmd, str(target)], check=False)
    except OSError as exc:
        return f"Failed to launch editor: {exc}"
    finally:
        enable_tui_mode()
    if result.returncode != 0:
        return f"Editor exited with status {result.returncode}"
    return None


def launch_shell(
    pod_path: str,
    container: str,
    disable_tui_mode: Callable[[], None],
    enable_tui_mode: Callable[[], None],
) -> str | None:
    """Open ``$SHELL`` with the target pod and container exported in its environment."""
    cmd = _command_from_env("SHELL", fallback="/bin/sh")
    if isinstance(cmd, str):
        return f"Cannot open shell: {cmd}"

    env = dict(os.environ)
    env["XRAY_POD"] = pod_path
    env["XRAY_CONTAINER"] = container
    disable_tui_mode()
    try:
        print(f"Shell for {pod_path} ({container}); exit to return.", flush=True)
        subprocess.run(cmd, check=False, env=env)
    except OSError as exc:
        return f"Failed to launch shell: {exc}"
    finally:
        enable_tui_mode()
    return None
