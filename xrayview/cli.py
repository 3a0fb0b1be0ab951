"""Command-line front door for xrayview.

Parses CLI options, merges them over the config file, and either prints a
one-shot render of the tree (``--render``) or launches the interactive view.
"""

from __future__ import annotations

import argparse
import logging
import shutil
import sys
from pathlib import Path

from .ansi import clip_ansi_line
from .app import AppOptions, TerminalApp
from .config import load_settings
from .details import DEFAULT_STYLE
from .errors import XrayError
from .resources import FileAccessorFactory, KindRegistry
from .snapshot_file import kinds_table, read_document
from .tree.rendering import format_rows
from .ui_theme import available_theme_names, resolve_theme
from .view import ViewSettings, XrayView
from .watch.context import WatchContext
from .watch.file_source import FileWatchSource
from .watch.updates import UpdateQueue

logger = logging.getLogger("xrayview")


def _positive_float(value: str) -> float:
    """argparse type for positive float values."""
    try:
        parsed = float(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid number: {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be > 0")
    return parsed


def _positive_int(value: str) -> int:
    """argparse type for positive integer values."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be >= 1")
    return parsed


def configure_logging(log_file: str | None, level: str) -> None:
    """Send package logs to ``log_file``; the TUI owns stdout and stderr."""
    if log_file is None:
        logger.addHandler(logging.NullHandler())
        return
    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s [%(threadName)s] %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(level)


class _RenderHost:
    """Presentation host for one-shot rendering: errors go to stderr."""

    def flash_info(self, message: str) -> None:
        pass

    def flash_error(self, message: str) -> None:
        sys.stderr.write(f"xrayview: {message}\n")

    def in_cmd_mode(self) -> bool:
        return False

    def previous_view(self) -> None:
        pass

    def request_redraw(self) -> None:
        pass

    def confirm_delete(self, message, on_ok, on_cancel) -> None:
        on_cancel()

    def show_details(self, title: str, path: str, text: str, language: str) -> None:
        pass

    def show_logs(self, pod, container, previous: bool) -> None:
        pass

    def shell_in(self, pod_path: str, container: str) -> None:
        pass

    def edit(self, ref) -> bool:
        return False

    def view_resource(self, kind: str, path: str) -> None:
        pass


def render_tree_view(
    source: FileWatchSource,
    registry: KindRegistry,
    kind: str,
    namespace: str,
    query: str,
    settings: ViewSettings,
    max_cols: int,
) -> str:
    """Render the title and tree rows the interactive view would show."""
    view = XrayView(
        kind,
        source,
        UpdateQueue(),
        _RenderHost(),
        registry,
        FileAccessorFactory(registry, source.path),
        namespace=namespace,
        settings=settings,
    )
    view.init()
    view.buffer.set_text(query)
    ns, labels = view.context_values()
    view.tree_changed(source.load_tree(WatchContext(ns, labels, session_id=0)))
    lines = [view.title, *format_rows(view.tree, settings.theme)]
    out: list[str] = []
    for line in lines:
        row = clip_ansi_line(line, max_cols)
        out.append(row)
        if "\033" in row:
            out.append("\033[0m")
        out.append("\n")
    return "".join(out)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Browse a resource relationship snapshot as a live, filterable tree."
    )
    parser.add_argument("path", help="Path to a JSON tree snapshot. The file is watched for changes.")
    parser.add_argument("--kind", default="pods", help="Resource kind the view is rooted on (default: pods).")
    parser.add_argument("-n", "--namespace", default=None, help="Namespace scope; 'all' for every namespace.")
    parser.add_argument("--filter", default="", help="Initial filter query (regex, '-f fuzzy' or '-l selector').")
    parser.add_argument("--style", default=DEFAULT_STYLE, help="Pygments style name for detail views.")
    parser.add_argument(
        "--theme",
        default=None,
        help=f"UI theme name ({', '.join(available_theme_names())}).",
    )
    parser.add_argument("--no-color", action="store_true", help="Disable color output.")
    parser.add_argument("--no-icons", action="store_true", help="Label nodes with their kind instead of an icon.")
    expand = parser.add_mutually_exclusive_group()
    expand.add_argument("--expand", dest="expand", action="store_true", default=None, help="Expand every node.")
    expand.add_argument("--collapse", dest="expand", action="store_false", help="Collapse all but the root.")
    parser.add_argument("--refresh", type=_positive_float, default=None, help="Snapshot poll interval in seconds.")
    parser.add_argument("--render", action="store_true", help="Print the tree once and exit.")
    parser.add_argument(
        "--max-cols",
        type=_positive_int,
        default=None,
        help="Column width for --render output (default: terminal width).",
    )
    parser.add_argument("--log-file", default=None, help="Write logs to this file.")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level used with --log-file (default: INFO).",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and launch xrayview on a snapshot file."""
    args = build_parser().parse_args(argv)
    configure_logging(args.log_file, args.log_level)

    path = Path(args.path)
    if not path.is_file():
        raise SystemExit(f"Snapshot not found: {path}")

    config = load_settings()
    settings = ViewSettings(
        expand_nodes=config.expand_nodes if args.expand is None else args.expand,
        show_icons=config.show_icons and not args.no_icons,
        theme=resolve_theme(args.theme or config.theme, no_color=args.no_color),
    )
    namespace = config.namespace if args.namespace is None else args.namespace
    refresh = config.refresh_seconds if args.refresh is None else args.refresh

    try:
        registry = KindRegistry.with_defaults(kinds_table(read_document(path)))
    except (OSError, XrayError) as exc:
        raise SystemExit(f"Cannot load {path}: {exc}") from exc
    source = FileWatchSource(path, refresh_seconds=refresh)

    if args.render:
        max_cols = args.max_cols or max(1, shutil.get_terminal_size((80, 24)).columns)
        try:
            rendered = render_tree_view(source, registry, args.kind, namespace, args.filter, settings, max_cols)
        except (OSError, XrayError) as exc:
            raise SystemExit(f"Cannot render {path}: {exc}") from exc
        sys.stdout.write(rendered)
        return

    app = TerminalApp(
        source,
        registry,
        FileAccessorFactory(registry, path),
        AppOptions(
            kind=args.kind,
            namespace=namespace,
            style=args.style,
            no_color=args.no_color,
            settings=settings,
        ),
    )
    if args.filter:
        app.view.buffer.set_text(args.filter)
    logger.debug("Starting %s view on %s", args.kind, path)
    app.run()


if __name__ == "__main__":
    main()
