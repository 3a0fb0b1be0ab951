"""Watch subscription lifecycle, UI update marshaling, and the file source."""

from .context import CancelToken, WatchContext
from .controller import WatchController, WatchSession
from .file_source import FileWatchSource, path_signature, scope_tree
from .selectors import LabelSelector, parse_selector
from .updates import UpdateQueue

__all__ = [
    "CancelToken",
    "FileWatchSource",
    "LabelSelector",
    "UpdateQueue",
    "WatchContext",
    "WatchController",
    "WatchSession",
    "parse_selector",
    "path_signature",
    "scope_tree",
]
