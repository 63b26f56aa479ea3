"""
Turn a flat list of member records into one rooted family tree.

Records link to each other through `parent_id` and `spouse_id`. The builder
creates one TreeNode per record, then links children under their parent and
pairs spouses in both directions. The root is the parent-less generation 0
record; when there is none a placeholder root named "Family Tree" is returned.

Broken links are tolerated: an id that does not resolve is skipped, never
raised. Family data is typed in by hand and is rarely perfect.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterator, List, Optional, Sequence, Tuple

from .records import MemberRecord

logger = logging.getLogger(__name__)

PLACEHOLDER_ROOT_NAME = "Family Tree"

# Optional record fields copied onto each node, in display order
ATTRIBUTE_FIELDS = ("birth_year", "phone_number", "address", "notes")


class CyclicStructureError(ValueError):
    """Raised when a walk over `children` reaches the same node twice."""


@dataclass(eq=False)
class TreeNode:
    name: str
    attributes: Dict[str, str] = field(default_factory=dict)
    children: List["TreeNode"] = field(default_factory=list)
    spouse: Optional["TreeNode"] = field(default=None, repr=False)
    member_id: Optional[int] = None

    @property
    def is_placeholder(self) -> bool:
        return self.member_id is None


def _node_from_record(record: MemberRecord) -> TreeNode:
    attributes = {}
    for fld in ATTRIBUTE_FIELDS:
        value = getattr(record, fld)
        if value:
            attributes[fld] = value
    return TreeNode(name=record.name, attributes=attributes, member_id=record.id)


def _pair(node: TreeNode, spouse: TreeNode) -> None:
    """Marry two nodes, unlinking any earlier partner of either one."""
    for side in (node, spouse):
        old = side.spouse
        if old is not None and old is not node and old is not spouse:
            logger.debug("Spouse link %r - %r replaced", side.name, old.name)
            old.spouse = None
    node.spouse = spouse
    spouse.spouse = node


def build(records: Sequence[MemberRecord]) -> TreeNode:
    """
    Build the family tree and return its root.

    When several records qualify as root, the last one in input order wins.
    The input is expected to hold exactly one such record, ordered by
    generation, so this only matters for bad data.
    """
    nodes: Dict[int, TreeNode] = {}
    last_row: Dict[int, int] = {}
    for i, record in enumerate(records):
        nodes[record.id] = _node_from_record(record)
        last_row[record.id] = i

    root: Optional[TreeNode] = None
    for i, record in enumerate(records):
        if last_row[record.id] != i:
            # duplicate id; the last row replaces earlier ones
            continue
        node = nodes[record.id]

        if record.parent_id is None and record.generation == 0:
            if root is not None:
                logger.warning(
                    "Several root candidates; %r replaces %r", node.name, root.name
                )
            root = node

        if record.spouse_id is not None:
            spouse = nodes.get(record.spouse_id)
            if spouse is None:
                logger.debug("Ignoring unknown spouse_id %s on member %s",
                             record.spouse_id, record.id)
            else:
                _pair(node, spouse)

        if record.parent_id is not None:
            parent = nodes.get(record.parent_id)
            if parent is None:
                logger.debug("Ignoring unknown parent_id %s on member %s",
                             record.parent_id, record.id)
            else:
                parent.children.append(node)

    if root is None:
        logger.warning("No generation 0 member without a parent; using placeholder root")
        return TreeNode(name=PLACEHOLDER_ROOT_NAME)

    logger.info("Built family tree rooted at %r from %d records", root.name, len(records))
    return root


# ---------------------------------------------------------------------------
# Walking
# ---------------------------------------------------------------------------


def walk_with_depth(
    node: TreeNode,
    descend: Optional[Callable[[TreeNode], bool]] = None,
) -> Iterator[Tuple[TreeNode, int]]:
    """
    Yield `(node, depth)` for `node` and its descendants, depth first,
    parents before children. `node` itself has depth 0.

    When `descend` is given, the children of a node are only visited if
    `descend(node)` is true.

    Raises CyclicStructureError if a node is reached twice, which only
    happens when parent links in the source data form a loop.
    """
    seen = set()
    stack = [(node, 0)]
    while stack:
        current, depth = stack.pop()
        if id(current) in seen:
            raise CyclicStructureError(
                f"Cyclic structure detected at member {current.name!r}"
            )
        seen.add(id(current))
        yield current, depth
        if descend is None or descend(current):
            stack.extend((child, depth + 1) for child in reversed(current.children))


def walk(node: TreeNode) -> Iterator[TreeNode]:
    """Yield `node` and all of its descendants, depth first, parents before children."""
    for current, _ in walk_with_depth(node):
        yield current


def count_nodes(root: TreeNode) -> int:
    return sum(1 for _ in walk(root))


def find_by_name(root: TreeNode, name: str) -> Optional[TreeNode]:
    """Return the first node named `name` in walk order, or None."""
    for node in walk(root):
        if node.name == name:
            return node
    return None
