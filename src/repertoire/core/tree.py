"""MoveTree — immutable, id-addressed arena of move nodes.

Every mutating operation returns a new :class:`MoveTree`.  Nodes that the
operation does not touch are shared by identity between the old and the
new tree, so a consumer can diff two trees cheaply with ``is``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import replace

from repertoire.core.nodes import BoardShape, MoveNode
from repertoire.core.notation import normalize_nag

_LOGGER = logging.getLogger(__name__)


class MoveTree:
    """Ordered forest of :class:`MoveNode` objects keyed by id.

    The root sequence holds the first-move alternatives; the empty path
    addresses the position before any of them.
    """

    __slots__ = ("_nodes", "_parents", "_roots")

    def __init__(self) -> None:
        self._nodes: dict[str, MoveNode] = {}
        self._parents: dict[str, str | None] = {}
        self._roots: tuple[str, ...] = ()

    @classmethod
    def _from_parts(
        cls,
        nodes: dict[str, MoveNode],
        parents: dict[str, str | None],
        roots: tuple[str, ...],
    ) -> MoveTree:
        tree = cls.__new__(cls)
        tree._nodes = nodes
        tree._parents = parents
        tree._roots = roots
        return tree

    @classmethod
    def from_nodes(cls, nodes: Iterable[MoveNode], root_ids: Sequence[str]) -> MoveTree:
        """Rebuild a tree from a flat node collection (e.g. after loading).

        Raises:
            ValueError: if the collection is not a well-formed forest.
        """
        by_id: dict[str, MoveNode] = {}
        for node in nodes:
            if node.id in by_id:
                raise ValueError(f"Duplicate node id: {node.id!r}")
            by_id[node.id] = node

        parents: dict[str, str | None] = {}
        for root_id in root_ids:
            if root_id not in by_id:
                raise ValueError(f"Unknown root node id: {root_id!r}")
            if root_id in parents:
                raise ValueError(f"Root listed twice: {root_id!r}")
            parents[root_id] = None
        for node in by_id.values():
            for child_id in node.children:
                if child_id not in by_id:
                    raise ValueError(f"Unknown child id {child_id!r} under {node.id!r}")
                if child_id in parents:
                    raise ValueError(f"Node {child_id!r} has more than one parent")
                parents[child_id] = node.id
        orphans = by_id.keys() - parents.keys()
        if orphans:
            raise ValueError(f"Unreachable nodes: {sorted(orphans)}")
        # A cycle leaves every member with a parent but none reachable from a root.
        reachable = sum(1 for _ in cls._from_parts(by_id, parents, tuple(root_ids)).iter_depth_first())
        if reachable != len(by_id):
            raise ValueError("Tree contains a cycle")
        return cls._from_parts(by_id, parents, tuple(root_ids))

    # ── Container protocol ───────────────────────────────────────────────

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MoveTree):
            return NotImplemented
        return self._roots == other._roots and self._nodes == other._nodes

    def __hash__(self) -> int:
        return hash((self._roots, len(self._nodes)))

    def __repr__(self) -> str:
        return f"MoveTree(nodes={len(self._nodes)}, roots={len(self._roots)})"

    @property
    def is_empty(self) -> bool:
        return not self._roots

    # ── Lookup ───────────────────────────────────────────────────────────

    @property
    def root_ids(self) -> tuple[str, ...]:
        return self._roots

    @property
    def root_nodes(self) -> tuple[MoveNode, ...]:
        return tuple(self._nodes[i] for i in self._roots)

    def find_node_by_id(self, node_id: str) -> MoveNode | None:
        return self._nodes.get(node_id)

    def node(self, node_id: str) -> MoveNode:
        """Like :meth:`find_node_by_id` but raises ``KeyError`` when missing."""
        return self._nodes[node_id]

    def children_of(self, node_id: str | None) -> tuple[MoveNode, ...]:
        """Children of *node_id*; ``None`` means the root sequence."""
        if node_id is None:
            return self.root_nodes
        node = self._nodes.get(node_id)
        if node is None:
            return ()
        return tuple(self._nodes[i] for i in node.children)

    def parent_id_of(self, node_id: str) -> str | None:
        return self._parents.get(node_id)

    def parent_of(self, node_id: str) -> MoveNode | None:
        parent_id = self._parents.get(node_id)
        return None if parent_id is None else self._nodes[parent_id]

    def siblings_of(self, node_id: str) -> tuple[MoveNode, ...]:
        """Alternatives to *node_id* at the same position (excluding itself)."""
        if node_id not in self._nodes:
            return ()
        group = self.children_of(self._parents[node_id])
        return tuple(n for n in group if n.id != node_id)

    def get_path_to_node(self, node_id: str) -> tuple[str, ...]:
        """Ids from the first move down to *node_id*; empty when not found."""
        if node_id not in self._nodes:
            return ()
        path: list[str] = []
        current: str | None = node_id
        while current is not None:
            path.append(current)
            current = self._parents[current]
        path.reverse()
        return tuple(path)

    def walk(self, path: Sequence[str]) -> MoveNode | None:
        """Follow *path* segment by segment; ``None`` if any segment fails."""
        group = self._roots
        node: MoveNode | None = None
        for node_id in path:
            if node_id not in group:
                return None
            node = self._nodes[node_id]
            group = node.children
        return node

    def iter_depth_first(self) -> Iterator[MoveNode]:
        """Pre-order traversal, children in insertion order."""
        stack = list(reversed(self._roots))
        while stack:
            node = self._nodes[stack.pop()]
            yield node
            stack.extend(reversed(node.children))

    def leaves(self) -> tuple[MoveNode, ...]:
        return tuple(n for n in self.iter_depth_first() if not n.children)

    def depth_of(self, node_id: str) -> int:
        """Zero-based ply depth (root moves have depth 0); -1 when missing."""
        return len(self.get_path_to_node(node_id)) - 1

    def main_line(self) -> tuple[MoveNode, ...]:
        """Follow main-line children (falling back to the first child)."""
        result: list[MoveNode] = []
        group = self.root_nodes
        while group:
            current = next((n for n in group if n.is_main_line), group[0])
            result.append(current)
            group = self.children_of(current.id)
        return tuple(result)

    def is_on_linear_trunk(self, node_id: str) -> bool:
        """True if *node_id* lies on the main line before the first branch."""
        group = self.root_nodes
        while group:
            current = next((n for n in group if n.is_main_line), group[0])
            if current.id == node_id:
                return True
            if len(current.children) > 1:
                return False
            group = self.children_of(current.id)
        return False

    def branch_points(self) -> list[tuple[MoveNode, int]]:
        """Nodes where variations start, with their depth.

        Multiple first moves count as root-level branch points.
        """
        points: list[tuple[MoveNode, int]] = []
        if len(self._roots) > 1:
            points.extend((n, 0) for n in self.root_nodes)
        for node in self.iter_depth_first():
            if len(node.children) > 1:
                points.append((node, self.depth_of(node.id)))
        return points

    # ── Copy-on-write mutations ──────────────────────────────────────────

    def add_move(self, parent_path: Sequence[str], node: MoveNode) -> MoveTree:
        """Append *node* as a new leaf under the node at *parent_path*.

        The new node is main line iff its sibling group was empty and the
        parent is main line (the root sequence counts as main line).
        A stale *parent_path* leaves the tree unchanged.
        """
        if node.id in self._nodes:
            raise ValueError(f"Node id already in tree: {node.id!r}")

        parent: MoveNode | None = None
        if parent_path:
            parent = self.walk(parent_path)
            if parent is None:
                _LOGGER.warning(
                    "Cannot add %s: parent path %s no longer resolves",
                    node.san,
                    list(parent_path),
                )
                return self
            siblings = parent.children
            parent_is_main = parent.is_main_line
        else:
            siblings = self._roots
            parent_is_main = True

        leaf = replace(node, children=(), is_main_line=not siblings and parent_is_main)
        nodes = dict(self._nodes)
        parents = dict(self._parents)
        nodes[leaf.id] = leaf
        if parent is None:
            parents[leaf.id] = None
            roots = self._roots + (leaf.id,)
        else:
            parents[leaf.id] = parent.id
            nodes[parent.id] = replace(parent, children=parent.children + (leaf.id,))
            roots = self._roots
        return MoveTree._from_parts(nodes, parents, roots)

    def delete_node(self, node_id: str) -> MoveTree:
        """Remove *node_id* and its whole subtree (no-op when missing)."""
        target = self._nodes.get(node_id)
        if target is None:
            return self

        doomed: set[str] = set()
        stack = [node_id]
        while stack:
            current = stack.pop()
            doomed.add(current)
            stack.extend(self._nodes[current].children)

        nodes = {k: v for k, v in self._nodes.items() if k not in doomed}
        parents = {k: v for k, v in self._parents.items() if k not in doomed}
        parent_id = self._parents[node_id]
        if parent_id is None:
            roots = tuple(i for i in self._roots if i != node_id)
        else:
            parent = nodes[parent_id]
            nodes[parent_id] = replace(
                parent, children=tuple(i for i in parent.children if i != node_id)
            )
            roots = self._roots
        return MoveTree._from_parts(nodes, parents, roots)

    def promote_to_main_line(self, node_id: str) -> MoveTree:
        """Make *node_id* the main line of its sibling group.

        Only the sibling group changes; ancestors keep their flags.
        """
        target = self._nodes.get(node_id)
        if target is None or target.is_main_line:
            return self

        parent_id = self._parents[node_id]
        group = self._roots if parent_id is None else self._nodes[parent_id].children
        nodes = dict(self._nodes)
        for sibling_id in group:
            sibling = nodes[sibling_id]
            wanted = sibling_id == node_id
            if sibling.is_main_line != wanted:
                nodes[sibling_id] = replace(sibling, is_main_line=wanted)
        return MoveTree._from_parts(nodes, self._parents, self._roots)

    def update_comment(self, node_id: str, comment: str | None) -> MoveTree:
        text = comment.strip() if comment else ""
        return self._replace_fields(node_id, comment=text or None)

    def update_nags(self, node_id: str, nags: Iterable[str] | None) -> MoveTree:
        normalized: list[str] = []
        for nag in nags or ():
            code = normalize_nag(nag)
            if code not in normalized:
                normalized.append(code)
        return self._replace_fields(node_id, nags=tuple(normalized))

    def update_shapes(self, node_id: str, shapes: Iterable[BoardShape] | None) -> MoveTree:
        return self._replace_fields(node_id, shapes=tuple(shapes or ()))

    def _replace_fields(self, node_id: str, **changes: object) -> MoveTree:
        node = self._nodes.get(node_id)
        if node is None:
            return self
        nodes = dict(self._nodes)
        nodes[node_id] = replace(node, **changes)
        return MoveTree._from_parts(nodes, self._parents, self._roots)
