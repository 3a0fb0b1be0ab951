"""Domain and presentation tree datatypes used across xrayview modules."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field

PATH_SEPARATOR = "/"


@dataclass(eq=True)
class DomainNode:
    """One resource in a watch snapshot.

    A snapshot is treated as immutable once delivered; filtering always
    produces fresh nodes. ``parent`` is a back-reference kept out of equality
    and repr so comparisons only follow the owned ``children``.
    """

    kind: str
    path: str
    status: str = ""
    labels: dict[str, str] = field(default_factory=dict)
    children: list[DomainNode] = field(default_factory=list)
    parent: DomainNode | None = field(default=None, compare=False, repr=False)

    @property
    def name(self) -> str:
        """Return the last path segment."""
        return self.path.rsplit(PATH_SEPARATOR, 1)[-1]

    def add_child(self, child: DomainNode) -> DomainNode:
        """Append ``child`` in display order and point it back at ``self``."""
        child.parent = self
        self.children.append(child)
        return child

    def walk(self) -> Iterator[DomainNode]:
        """Yield this node and all descendants depth-first."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def count(self, kind: str) -> int:
        """Count subtree nodes of ``kind``."""
        return sum(1 for node in self.walk() if node.kind == kind)

    def shallow_copy(self) -> DomainNode:
        """Return a childless copy carrying identity, status, and labels."""
        return DomainNode(
            kind=self.kind,
            path=self.path,
            status=self.status,
            labels=dict(self.labels),
        )


@dataclass(frozen=True)
class NodeRef:
    """Addressable identity of a presentation node.

    Only the immediate parent is retained: a ref whose ``parent`` carries its
    own parent is rejected, so ref chains never grow past one hop.
    """

    kind: str
    path: str
    status: str = ""
    parent: NodeRef | None = None

    def __post_init__(self) -> None:
        if self.parent is not None and self.parent.parent is not None:
            raise ValueError(f"NodeRef parent for {self.path!r} must not carry its own parent")

    @classmethod
    def for_node(cls, node: DomainNode) -> NodeRef:
        """Derive a ref from ``node`` and its immediate parent."""
        parent = None
        if node.parent is not None:
            parent = cls(kind=node.parent.kind, path=node.parent.path, status=node.parent.status)
        return cls(kind=node.kind, path=node.path, status=node.status, parent=parent)


@dataclass
class PresentationNode:
    """One renderable tree row; rebuilt from scratch on every reconciliation."""

    ref: NodeRef | None
    label: str
    expanded: bool = True
    selectable: bool = True
    color: str = ""
    children: list[PresentationNode] = field(default_factory=list)

    def add_child(self, child: PresentationNode) -> PresentationNode:
        self.children.append(child)
        return child

    def toggle(self) -> None:
        self.expanded = not self.expanded

    def walk(self) -> Iterator[tuple[PresentationNode, PresentationNode | None]]:
        """Yield ``(node, parent)`` pairs depth-first, root first."""
        stack: list[tuple[PresentationNode, PresentationNode | None]] = [(self, None)]
        while stack:
            node, parent = stack.pop()
            yield node, parent
            stack.extend((child, node) for child in reversed(node.children))

    def expand_all(self) -> None:
        for node, _parent in self.walk():
            node.expanded = True


@dataclass(frozen=True)
class TreeRow:
    """One visible row of a presentation tree with its drawing context."""

    node: PresentationNode
    depth: int
    is_last: bool
    lineage: tuple[bool, ...]


@dataclass
class PresentationTree:
    """Presentation root plus the cursor node (``None`` when nothing is anchored)."""

    root: PresentationNode
    current: PresentationNode | None = None

    def find(self, path: str) -> PresentationNode | None:
        for node, _parent in self.root.walk():
            if node.ref is not None and node.ref.path == path:
                return node
        return None

    def set_current(self, node: PresentationNode | None) -> None:
        self.current = node

    def expand_all(self) -> None:
        self.root.expand_all()

    def visible_rows(self) -> list[TreeRow]:
        """Flatten the tree into rows, skipping children of collapsed nodes.

        ``lineage`` records, for each ancestor level, whether that ancestor was
        the last of its siblings; renderers use it to draw guide lines.
        """
        rows: list[TreeRow] = [TreeRow(self.root, 0, True, ())]

        def walk(node: PresentationNode, depth: int, lineage: tuple[bool, ...]) -> None:
            if not node.expanded:
                return
            last_idx = len(node.children) - 1
            for idx, child in enumerate(node.children):
                is_last = idx == last_idx
                rows.append(TreeRow(child, depth, is_last, lineage))
                walk(child, depth + 1, lineage + (is_last,))

        walk(self.root, 1, ())
        return rows

    def move(self, delta: int) -> PresentationNode | None:
        """Move the cursor by ``delta`` visible rows, clamped to the tree.

        With no current node the cursor starts from the root.
        """
        nodes = [row.node for row in self.visible_rows()]
        idx = 0
        if self.current is not None and any(node is self.current for node in nodes):
            idx = next(i for i, node in enumerate(nodes) if node is self.current)
        self.current = nodes[max(0, min(len(nodes) - 1, idx + delta))]
        return self.current
