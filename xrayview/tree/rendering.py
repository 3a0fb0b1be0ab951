"""Formatting helpers for presentation-tree rows and node labels."""

from __future__ import annotations

from ..ui_theme import DEFAULT_THEME, UITheme
from .types import DomainNode, PresentationTree, TreeRow

NO_DATA_LABEL = "No data..."

_KIND_ICONS: dict[str, str] = {
    "cluster": "🌐",
    "namespaces": "🗂",
    "deployments": "🪂",
    "replicasets": "👯",
    "statefulsets": "🎎",
    "daemonsets": "😈",
    "pods": "🚛",
    "containers": "🐳",
    "services": "💁",
    "configmaps": "🗺",
    "secrets": "🔒",
    "serviceaccounts": "💳",
    "persistentvolumeclaims": "🎟",
}


def kind_icons() -> dict[str, str]:
    """Return the icon legend keyed by icon, as shown in the hints menu."""
    return {icon: kind for kind, icon in _KIND_ICONS.items()}


def node_title(node: DomainNode, theme: UITheme | None = None, show_icons: bool = True) -> str:
    """Render the label of one domain node.

    Nodes carrying a status get a trailing badge in the theme's error color.
    """
    active_theme = theme or DEFAULT_THEME
    parts: list[str] = []
    if show_icons:
        icon = _KIND_ICONS.get(node.kind)
        if icon:
            parts.append(icon)
    else:
        parts.append(f"[{node.kind}]")
    parts.append(node.name)
    title = " ".join(parts)
    if node.status:
        title += f" {active_theme.tree_status_bad}({node.status}){active_theme.reset}"
    return title


def _guides(row: TreeRow, theme: UITheme) -> str:
    if row.depth == 0:
        return ""
    guides = "".join("   " if last else "│  " for last in row.lineage)
    branch = "└─ " if row.is_last else "├─ "
    return f"{theme.tree_graphic}{guides}{branch}{theme.reset}"


def format_row(row: TreeRow, current: bool, theme: UITheme | None = None) -> str:
    """Render one visible row with guide lines, expand marker, and cursor."""
    active_theme = theme or DEFAULT_THEME
    node = row.node
    marker = ""
    if node.children:
        marker = "▾ " if node.expanded else "▸ "
    color = node.color or active_theme.tree_fg
    if node.ref is None:
        color = active_theme.tree_placeholder
    label = f"{color}{marker}{node.label}{active_theme.reset}"
    if current:
        label = f"{active_theme.reverse}{label}{active_theme.reset}"
    return _guides(row, active_theme) + label


def format_rows(tree: PresentationTree, theme: UITheme | None = None) -> list[str]:
    """Render every visible row of ``tree`` in display order."""
    return [format_row(row, row.node is tree.current, theme) for row in tree.visible_rows()]
