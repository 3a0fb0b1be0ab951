"""Terminal host for the xray view.

``TerminalApp`` implements the presentation services the view calls (flash
line, delete confirmation, detail overlay, editor and shell launches) and
runs the single-threaded input/render loop that drains watch updates.
"""

from __future__ import annotations

import json
import logging
import os
import sys
import tempfile
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from .ansi import clip_ansi_line
from .buffer import BufferKind, FilterBuffer
from .details import DEFAULT_STYLE, colorize
from .editor import launch_editor, launch_shell
from .errors import EditError, MetaNotFoundError, XrayError
from .input import read_key
from .protocols import DeleteConfirmed
from .resources import FileAccessorFactory, KindRegistry
from .terminal import TerminalController
from .tree.rendering import format_rows
from .tree.types import NodeRef
from .view import ViewSettings, XrayView
from .watch.file_source import FileWatchSource
from .watch.updates import UpdateQueue

logger = logging.getLogger(__name__)

FLASH_SECONDS = 4.0
KEY_POLL_MS = 100


@dataclass
class Flash:
    message: str = ""
    error: bool = False
    until: float = 0.0


@dataclass
class DetailOverlay:
    """Scrollable read-only text shown over the tree."""

    title: str
    lines: list[str]
    start: int = 0


@dataclass
class PendingDelete:
    message: str
    on_ok: DeleteConfirmed
    on_cancel: Callable[[], None]
    cascade: bool = False
    force: bool = False


@dataclass
class AppOptions:
    kind: str = "pods"
    namespace: str = ""
    style: str = DEFAULT_STYLE
    no_color: bool = False
    settings: ViewSettings = field(default_factory=ViewSettings)


class TerminalApp:
    """Owns the active ``XrayView`` and everything the terminal draws around it."""

    def __init__(
        self,
        source: FileWatchSource,
        registry: KindRegistry,
        accessors: FileAccessorFactory,
        options: AppOptions | None = None,
    ) -> None:
        self.source = source
        self.registry = registry
        self.accessors = accessors
        self.options = options or AppOptions()
        self.updates = UpdateQueue()
        self.command = FilterBuffer(BufferKind.COMMAND)
        self.command.add_listener(self)
        self.flash = Flash()
        self.overlay: DetailOverlay | None = None
        self.pending_delete: PendingDelete | None = None
        self.history: list[str] = []
        self.terminal: TerminalController | None = None
        self.dirty = True
        self.quit = False
        self.tree_start = 0
        self.view = self._make_view(self.options.kind, self.options.namespace)

    def _make_view(self, kind: str, namespace: str) -> XrayView:
        return XrayView(
            kind,
            self.source,
            self.updates,
            self,
            self.registry,
            self.accessors,
            namespace=namespace,
            settings=self.options.settings,
            prompt_listener=self,
        )

    # ------------------------------------------------------------------
    # Presentation services

    def flash_info(self, message: str) -> None:
        self.flash = Flash(message, False, time.monotonic() + FLASH_SECONDS)
        self.dirty = True

    def flash_error(self, message: str) -> None:
        logger.info("flash error: %s", message)
        self.flash = Flash(message, True, time.monotonic() + FLASH_SECONDS)
        self.dirty = True

    def in_cmd_mode(self) -> bool:
        return self.command.active

    def previous_view(self) -> None:
        if not self.history:
            return
        self.switch_kind(self.history.pop(), remember=False)

    def request_redraw(self) -> None:
        self.dirty = True

    def confirm_delete(self, message: str, on_ok: DeleteConfirmed, on_cancel: Callable[[], None]) -> None:
        self.pending_delete = PendingDelete(message, on_ok, on_cancel)
        self.dirty = True

    def show_details(self, title: str, path: str, text: str, language: str) -> None:
        rendered = colorize(text, language, self.options.style, no_color=self.options.no_color)
        self.overlay = DetailOverlay(f"{title}: {path}", rendered.rstrip("\n").splitlines())
        self.dirty = True

    def show_logs(self, pod: NodeRef, container: NodeRef, previous: bool) -> None:
        text = self.source.logs(pod.path, container.path, previous)
        self.show_details("Logs Previous" if previous else "Logs", container.path, text, "logs")

    def shell_in(self, pod_path: str, container: str) -> None:
        error = self._run_external(lambda off, on: launch_shell(pod_path, container, off, on))
        if error:
            self.flash_error(error)

    def edit(self, ref: NodeRef) -> bool:
        """Round-trip the manifest of ``ref`` through ``$EDITOR``.

        Returns ``False`` only when the editor itself could not run.
        """
        try:
            raw = self.source.to_json(ref.kind, ref.path)
        except (OSError, XrayError) as exc:
            self.flash_error(f"unable to get resource {ref.kind!r} -- {exc}")
            return True

        fd, tmp_name = tempfile.mkstemp(prefix="xrayview-", suffix=".json")
        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(raw)
            error = self._run_external(lambda off, on: launch_editor(tmp_path, off, on))
            if error:
                logger.warning("Edit of %s failed: %s", ref.path, error)
                return False
            edited = tmp_path.read_text(encoding="utf-8")
        finally:
            tmp_path.unlink(missing_ok=True)

        if edited == raw:
            self.flash_info("Edit cancelled, no changes made")
            return True
        try:
            changes = json.loads(edited)
            if not isinstance(changes, dict):
                raise EditError("edited manifest must be a JSON object")
            self.accessors.accessor_for(ref.kind).update(ref.path, changes)
        except ValueError as exc:
            self.flash_error(f"Edit rejected: {exc}")
        except XrayError as exc:
            self.flash_error(f"Edit failed: {exc}")
        else:
            self.flash_info(f"{ref.kind} {ref.path} edited")
        return True

    def view_resource(self, kind: str, path: str) -> None:
        self.switch_kind(kind)
        self.view.select_path(path)

    def _run_external(self, launch: Callable[[Callable[[], None], Callable[[], None]], str | None]) -> str | None:
        if self.terminal is None:
            return "no terminal attached"
        self.dirty = True
        return launch(self.terminal.disable_tui_mode, self.terminal.enable_tui_mode)

    # ------------------------------------------------------------------
    # Buffer listener: the prompt line mirrors both buffers

    def buffer_changed(self, text: str) -> None:
        self.dirty = True

    def buffer_active(self, state: bool, kind: BufferKind) -> None:
        self.dirty = True

    # ------------------------------------------------------------------
    # View switching and commands

    def switch_kind(self, kind: str, remember: bool = True) -> None:
        """Replace the active view with one for ``kind``; raises for unknown kinds."""
        meta = self.registry.meta_for(kind)
        previous = self.view
        previous.stop()
        if remember:
            self.history.append(previous.kind)
        self.view = self._make_view(meta.name, previous.namespace)
        self.tree_start = 0
        self.view.init()
        self.view.start()

    def resolve_kind(self, alias: str) -> str | None:
        for kind in self.registry.kinds():
            if alias in self.registry.meta_for(kind).aliases():
                return kind
        return None

    def run_command(self, line: str) -> None:
        parts = line.split()
        if not parts:
            return
        name, args = parts[0], parts[1:]
        if name in {"q", "quit"}:
            self.quit = True
            return
        if name in {"ns", "namespace"}:
            self.view.set_namespace(args[0] if args else "")
            self.flash_info(f"Namespace {args[0] if args else 'all'}")
            return
        kind = self.resolve_kind(name)
        if kind is None:
            self.flash_error(f"Unknown command {line!r}")
            return
        try:
            self.switch_kind(kind)
        except MetaNotFoundError as exc:
            self.flash_error(str(exc))

    # ------------------------------------------------------------------
    # Input

    def handle_key(self, key: str) -> None:
        self.dirty = True
        if self.pending_delete is not None:
            self._handle_delete_key(key)
            return
        if self.overlay is not None:
            self._handle_overlay_key(key)
            return
        if self.command.active:
            self._handle_command_key(key)
            return
        if self.view.buffer.active:
            self.view.handle_key(key)
            return
        if key == ":":
            self.command.set_active(True)
            return
        if key in {"q", "CTRL_C"}:
            self.quit = True
            return
        self.view.handle_key(key)

    def _handle_delete_key(self, key: str) -> None:
        pending = self.pending_delete
        assert pending is not None
        if key == "c":
            pending.cascade = not pending.cascade
        elif key == "f":
            pending.force = not pending.force
        elif key in {"y", "ENTER"}:
            self.pending_delete = None
            pending.on_ok(pending.cascade, pending.force)
        elif key in {"n", "ESC", "q"}:
            self.pending_delete = None
            pending.on_cancel()

    def _handle_overlay_key(self, key: str) -> None:
        overlay = self.overlay
        assert overlay is not None
        if key in {"q", "ESC"}:
            self.overlay = None
            return
        page = max(1, self._body_rows() - 1)
        delta = {"UP": -1, "k": -1, "DOWN": 1, "j": 1, "PAGE_UP": -page, "PAGE_DOWN": page}.get(key, 0)
        max_start = max(0, len(overlay.lines) - self._body_rows())
        overlay.start = max(0, min(max_start, overlay.start + delta))

    def _handle_command_key(self, key: str) -> None:
        if key == "ENTER":
            line = self.command.text
            self.command.reset()
            self.run_command(line)
        elif key == "ESC":
            self.command.reset()
        elif key == "BACKSPACE":
            self.command.delete()
        elif len(key) == 1 and key.isprintable():
            self.command.add(key)

    # ------------------------------------------------------------------
    # Rendering

    def _body_rows(self) -> int:
        if self.terminal is None:
            return 20
        return max(1, self.terminal.size()[1] - 3)

    def status_line(self) -> str:
        theme = self.options.settings.theme
        if self.pending_delete is not None:
            pending = self.pending_delete
            return (
                f"{theme.dialog_border}{pending.message}{theme.reset} "
                f"[y]es [n]o [c]ascade={'on' if pending.cascade else 'off'} "
                f"[f]orce={'on' if pending.force else 'off'}"
            )
        if self.command.active:
            return f"{theme.prompt}:{self.command.text}{theme.reset}"
        if self.view.buffer.active:
            return f"{theme.prompt}/{self.view.buffer.text}{theme.reset}"
        if self.flash.message:
            color = theme.flash_error if self.flash.error else theme.flash_info
            return f"{color}{self.flash.message}{theme.reset}"
        return ""

    def hint_line(self) -> str:
        theme = self.options.settings.theme
        if self.overlay is not None:
            return f"{theme.dim}<q> Close  <j/k> Scroll{theme.reset}"
        return "  ".join(f"{theme.dim}<{key}>{theme.reset} {desc}" for key, desc in self.view.hints())

    def _tree_lines(self, body_rows: int) -> list[str]:
        tree = self.view.tree
        rows = tree.visible_rows()
        current = next((idx for idx, row in enumerate(rows) if row.node is tree.current), 0)
        if current < self.tree_start:
            self.tree_start = current
        elif current >= self.tree_start + body_rows:
            self.tree_start = current - body_rows + 1
        self.tree_start = max(0, min(self.tree_start, max(0, len(rows) - body_rows)))
        lines = format_rows(tree, self.options.settings.theme)
        return lines[self.tree_start : self.tree_start + body_rows]

    def frame(self, columns: int, rows: int) -> list[str]:
        """Compose one full screen of ``rows`` lines clipped to ``columns``."""
        body_rows = max(1, rows - 3)
        if self.overlay is not None:
            title = f" {self.options.settings.theme.title}{self.overlay.title}{self.options.settings.theme.reset}"
            body = self.overlay.lines[self.overlay.start : self.overlay.start + body_rows]
        else:
            title = self.view.title
            body = self._tree_lines(body_rows)
        body = body + [""] * (body_rows - len(body))
        lines = [title, *body, self.status_line(), self.hint_line()]
        return [clip_ansi_line(line, columns) for line in lines]

    def render(self) -> None:
        assert self.terminal is not None
        columns, rows = self.terminal.size()
        self.terminal.draw(self.frame(columns, rows))

    # ------------------------------------------------------------------
    # Main loop

    def tick(self) -> None:
        """Apply queued watch updates and expire the flash line."""
        if self.updates.drain():
            self.dirty = True
        if self.flash.message and time.monotonic() >= self.flash.until:
            self.flash = Flash()
            self.dirty = True

    def run(self) -> None:
        stdin_fd = sys.stdin.fileno()
        self.terminal = TerminalController(stdin_fd, sys.stdout.fileno())
        self.view.init()
        self.view.start()
        try:
            with self.terminal.raw_mode():
                while not self.quit:
                    self.tick()
                    if self.dirty:
                        self.render()
                        self.dirty = False
                    try:
                        key = read_key(stdin_fd, timeout_ms=KEY_POLL_MS)
                    except KeyboardInterrupt:
                        continue
                    if key:
                        self.handle_key(key)
        finally:
            self.view.stop()
            self.source.join(timeout=1.0)
