"""
Expand / collapse state for the family tree diagram.

The state is a frozenset of node names that are currently expanded. A node
whose name is missing from the set is drawn collapsed, and nothing below it
is shown. Every operation returns a new set and leaves its input alone.

Collapsing a node drops the node and all of its descendants from the set.
The set remembers which of those descendants were expanded, so expanding the
node again brings its branch back exactly as it was, including any
grandchildren that had been collapsed on their own.
"""

from __future__ import annotations

import logging
from typing import AbstractSet, Dict, FrozenSet, Iterable, Iterator, List, Optional

from .tree_builder import TreeNode, find_by_name, walk, walk_with_depth

logger = logging.getLogger(__name__)


class ExpandedSet(frozenset):
    """
    Frozenset of expanded names.

    `memory` maps a collapsed node's name to the descendant names that were
    expanded when it was collapsed. It is never mutated after construction.
    """

    def __new__(cls, names: Iterable[str] = (), memory: Optional[Dict[str, FrozenSet[str]]] = None):
        obj = super().__new__(cls, names)
        obj.memory = dict(memory or {})
        return obj


def _as_expanded(current: AbstractSet[str]) -> ExpandedSet:
    if isinstance(current, ExpandedSet):
        return current
    return ExpandedSet(current)


def initialize(root: TreeNode) -> ExpandedSet:
    """Return the fully expanded state: the names of every node in the tree."""
    return ExpandedSet(node.name for node in walk(root))


def toggle(
    node: TreeNode,
    current: AbstractSet[str],
    root: Optional[TreeNode] = None,
) -> ExpandedSet:
    """
    Collapse `node` if it is expanded, otherwise expand it.

    When `root` is given and the tree holds no node with this name, the
    state is returned unchanged. Without `root` the node is trusted to
    belong to the tree, so an unknown name is simply expanded; callers that
    only have a name should go through VisibilityController.toggle_name.
    """
    current = _as_expanded(current)
    if root is not None and find_by_name(root, node.name) is None:
        logger.debug("Toggle of %r ignored; not in the tree", node.name)
        return current

    memory = dict(current.memory)
    if node.name in current:
        below = {n.name for n in walk(node) if n is not node}
        memory[node.name] = frozenset(below & current)
        return ExpandedSet(current - below - {node.name}, memory)

    restored = memory.pop(node.name, frozenset())
    return ExpandedSet(current | restored | {node.name}, memory)


def iter_visible(root: TreeNode, expanded: AbstractSet[str]) -> Iterator[TreeNode]:
    """
    Yield the nodes a diagram should show, parents before children.

    The root is always shown. Children are shown only below expanded nodes.
    """
    for node, _ in walk_with_depth(root, descend=lambda n: n.name in expanded):
        yield node


class VisibilityController:
    """Holds the expanded set for one loaded tree."""

    def __init__(self, root: TreeNode, expanded: Optional[AbstractSet[str]] = None):
        self.root = root
        self._expanded = initialize(root) if expanded is None else _as_expanded(expanded)

    @property
    def expanded(self) -> ExpandedSet:
        return self._expanded

    def is_expanded(self, node: TreeNode) -> bool:
        return node.name in self._expanded

    def toggle(self, node: TreeNode) -> ExpandedSet:
        self._expanded = toggle(node, self._expanded, root=self.root)
        return self._expanded

    def toggle_name(self, name: str) -> ExpandedSet:
        """Toggle the node called `name`; unknown names leave the state as is."""
        node = find_by_name(self.root, name)
        if node is None:
            logger.debug("Toggle of %r ignored; not in the tree", name)
            return self._expanded
        self._expanded = toggle(node, self._expanded)
        return self._expanded

    def expand_all(self) -> ExpandedSet:
        self._expanded = initialize(self.root)
        return self._expanded

    def visible_nodes(self) -> List[TreeNode]:
        return list(iter_visible(self.root, self._expanded))
