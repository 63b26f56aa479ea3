"""
Graphviz rendering of the family tree.

`build_diagram(root, expanded)` draws the visible part of the tree: the root,
and the children of every expanded node. A collapsed node with children
carries a "+N" badge. Spouses are joined by a dashed line without arrows and
kept on the same rank; a spouse who is not in the tree themselves (married
in) is drawn beside their partner.
"""

from __future__ import annotations

import html
from typing import AbstractSet, Dict, Set

from graphviz import Digraph

from .tree_builder import ATTRIBUTE_FIELDS, TreeNode, walk
from .visibility import iter_visible

NODE_STYLE = {
    "root":      dict(shape="box", style="rounded,filled", fillcolor="#1f2937", fontcolor="white"),
    "member":    dict(shape="box", style="rounded,filled", fillcolor="#3b82f6", fontcolor="white"),
    "collapsed": dict(shape="box", style="rounded,filled", fillcolor="#10b981", fontcolor="white"),
    "spouse":    dict(shape="box", style="rounded,filled", fillcolor="#f4cccc", fontcolor="#1f2937"),
}

FIELD_LABELS = {
    "birth_year": "b.",
    "phone_number": "Phone:",
    "address": "Addr:",
    "notes": "",
}


def node_key(node: TreeNode) -> str:
    if node.member_id is None:
        return "placeholder"
    return f"m{node.member_id}"


def node_label(node: TreeNode, hidden_children: int = 0, show_details: bool = True) -> str:
    title = f"<b>{html.escape(node.name)}</b>"
    if hidden_children:
        title += f" (+{hidden_children})"
    lines = [title]
    if show_details:
        for fld in ATTRIBUTE_FIELDS:
            value = node.attributes.get(fld)
            if value:
                prefix = FIELD_LABELS[fld]
                text = html.escape(value)
                lines.append(f"{prefix} {text}" if prefix else f"<i>{text}</i>")
    return "<" + "<br/>".join(lines) + ">"


def build_diagram(
    root: TreeNode,
    expanded: AbstractSet[str],
    title: str = "",
    rankdir: str = "TB",
    show_details: bool = True,
) -> Digraph:
    g = Digraph("family_tree", engine="dot")
    g.attr(rankdir=rankdir, splines="ortho", nodesep="0.4", ranksep="0.6")
    if title:
        g.attr(labelloc="t", fontsize="20",
               label=f"<<font point-size=\"24\"><b>{html.escape(title)}</b></font>>")

    in_tree: Set[int] = {id(n) for n in walk(root)}
    visible: Dict[int, TreeNode] = {}

    for node in iter_visible(root, expanded):
        visible[id(node)] = node
        hidden = 0 if node.name in expanded else len(node.children)
        if node is root:
            style = NODE_STYLE["root"]
        elif hidden:
            style = NODE_STYLE["collapsed"]
        else:
            style = NODE_STYLE["member"]
        g.node(node_key(node), label=node_label(node, hidden, show_details), **style)

    for node in visible.values():
        if node.name not in expanded:
            continue
        for child in node.children:
            g.edge(node_key(node), node_key(child), arrowhead="none")

    drawn_pairs = set()
    for node in list(visible.values()):
        spouse = node.spouse
        if spouse is None:
            continue
        pair = frozenset((id(node), id(spouse)))
        if pair in drawn_pairs:
            continue
        if id(spouse) in in_tree and id(spouse) not in visible:
            # spouse sits inside a collapsed branch
            continue
        drawn_pairs.add(pair)
        if id(spouse) not in in_tree:
            g.node(node_key(spouse), label=node_label(spouse, 0, show_details),
                   **NODE_STYLE["spouse"])
        with g.subgraph() as s:
            s.attr(rank="same")
            s.node(node_key(node))
            s.node(node_key(spouse))
        g.edge(node_key(node), node_key(spouse),
               style="dashed", dir="none", color="#ef4444", constraint="false")

    return g
