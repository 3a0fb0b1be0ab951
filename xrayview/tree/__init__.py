"""Domain/presentation tree model: codec, filtering, reconciliation, rendering."""

from .build import (
    ALL_NAMESPACES,
    cleanse_namespace,
    copy_tree,
    is_all_namespaces,
    namespaced,
    node_from_dict,
)
from .filtering import (
    filter_for_query,
    filter_tree,
    fuzzy_matcher,
    is_fuzzy_selector,
    is_label_selector,
    segment_matcher,
    trim_selector,
)
from .reconcile import make_presentation_node, reconcile
from .rendering import format_row, format_rows, kind_icons, node_title
from .types import PATH_SEPARATOR, DomainNode, NodeRef, PresentationNode, PresentationTree, TreeRow

__all__ = [
    "ALL_NAMESPACES",
    "cleanse_namespace",
    "is_all_namespaces",
    "PATH_SEPARATOR",
    "DomainNode",
    "NodeRef",
    "PresentationNode",
    "PresentationTree",
    "TreeRow",
    "copy_tree",
    "filter_for_query",
    "filter_tree",
    "format_row",
    "format_rows",
    "fuzzy_matcher",
    "is_fuzzy_selector",
    "is_label_selector",
    "kind_icons",
    "make_presentation_node",
    "namespaced",
    "node_from_dict",
    "node_title",
    "reconcile",
    "segment_matcher",
    "trim_selector",
]
