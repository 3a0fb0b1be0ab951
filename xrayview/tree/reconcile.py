"""Full-rebuild reconciliation from domain snapshots to presentation trees.

Every pass allocates a brand new presentation tree and then re-anchors the
previous selection by path. Nothing is diffed against the prior tree.
"""

from __future__ import annotations

import logging

from ..ui_theme import DEFAULT_THEME, UITheme
from .rendering import NO_DATA_LABEL, node_title
from .types import DomainNode, NodeRef, PresentationNode, PresentationTree

logger = logging.getLogger(__name__)


def make_presentation_node(
    node: DomainNode | None,
    expanded: bool,
    theme: UITheme | None = None,
    show_icons: bool = True,
) -> PresentationNode:
    """Build one presentation node; ``None`` yields the no-data placeholder."""
    active_theme = theme or DEFAULT_THEME
    if node is None:
        return PresentationNode(
            ref=None,
            label=NO_DATA_LABEL,
            expanded=expanded,
            selectable=True,
            color=active_theme.tree_placeholder,
        )
    return PresentationNode(
        ref=NodeRef.for_node(node),
        label=node_title(node, active_theme, show_icons),
        expanded=expanded,
        selectable=True,
        color=active_theme.tree_fg,
    )


def _hydrate(
    parent: PresentationNode,
    node: DomainNode,
    expand_nodes: bool,
    theme: UITheme,
    show_icons: bool,
) -> None:
    child = parent.add_child(make_presentation_node(node, expand_nodes, theme, show_icons))
    for grandchild in node.children:
        _hydrate(child, grandchild, expand_nodes, theme, show_icons)


def reconcile(
    root: DomainNode | None,
    selected_path: str,
    expand_nodes: bool,
    theme: UITheme | None = None,
    show_icons: bool = True,
) -> PresentationTree:
    """Rebuild the presentation tree for ``root`` and re-anchor the selection.

    The root is always expanded; every other node takes ``expand_nodes``. The
    node whose path equals ``selected_path`` is expanded and becomes current.
    When no node carries that path the tree has no current node; an empty
    ``selected_path`` anchors on the root.
    """
    active_theme = theme or DEFAULT_THEME
    presentation_root = make_presentation_node(root, True, active_theme, show_icons)
    tree = PresentationTree(root=presentation_root)
    if root is None:
        return tree

    for child in root.children:
        _hydrate(presentation_root, child, expand_nodes, active_theme, show_icons)

    target = selected_path or root.path
    for node, parent in presentation_root.walk():
        if node.ref is None:
            logger.error("Presentation node %r has no NodeRef; skipping", node.label)
            continue
        node.expanded = expand_nodes if parent is not None else True
        if node.ref.path == target:
            node.expanded = True
            node.selectable = True
            tree.set_current(node)
    return tree
