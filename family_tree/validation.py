"""Data-quality checks for member records."""

from collections import Counter
from typing import List, Sequence

import networkx as nx

from .records import MemberRecord


def _parent_graph(records: Sequence[MemberRecord]) -> nx.DiGraph:
    """Directed parent -> child graph over resolvable parent links."""
    ids = {r.id for r in records}
    G = nx.DiGraph()
    for r in records:
        G.add_node(r.id, member_name=r.name)
    for r in records:
        if r.parent_id is not None and r.parent_id in ids:
            G.add_edge(r.parent_id, r.id)
    return G


def validate_records(records: Sequence[MemberRecord]) -> List[str]:
    """
    Check the record set for problems the tree builder silently works around:
    - missing or competing root members
    - parent / spouse ids that point nowhere or at the member itself
    - duplicate ids and names
    - cycles in parent links
    - members that do not show up under the root
    - spouse links recorded on one side only, or pointing at different partners

    Returns a list of warning messages.
    """
    warnings: List[str] = []
    by_id = {r.id: r for r in records}

    dup_ids = [i for i, n in Counter(r.id for r in records).items() if n > 1]
    for i in sorted(dup_ids):
        warnings.append(f"Duplicate member id {i}; only the last row is used")

    dup_names = [name for name, n in Counter(r.name for r in records).items() if n > 1]
    for name in sorted(dup_names):
        warnings.append(f"Several members are named {name!r}; they expand and collapse together")

    roots = [r for r in records if r.parent_id is None and r.generation == 0]
    if not roots:
        warnings.append("No generation 0 member without a parent; showing an empty tree")
    elif len(roots) > 1:
        names = ", ".join(repr(r.name) for r in roots)
        warnings.append(f"Several root members ({names}); using {roots[-1].name!r}")

    for r in records:
        if r.parent_id is not None:
            if r.parent_id == r.id:
                warnings.append(f"{r.name!r} is listed as their own parent")
            elif r.parent_id not in by_id:
                warnings.append(f"{r.name!r} has unknown parent id {r.parent_id}")
        if r.spouse_id is not None:
            if r.spouse_id == r.id:
                warnings.append(f"{r.name!r} is listed as their own spouse")
            elif r.spouse_id not in by_id:
                warnings.append(f"{r.name!r} has unknown spouse id {r.spouse_id}")
            elif by_id[r.spouse_id].spouse_id is None:
                warnings.append(
                    f"Spouse link {r.name!r} -> {by_id[r.spouse_id].name!r} is recorded one way only"
                )
            elif by_id[r.spouse_id].spouse_id != r.id:
                other = by_id[r.spouse_id]
                partner = by_id.get(other.spouse_id)
                partner_name = partner.name if partner is not None else other.spouse_id
                warnings.append(
                    f"Conflicting spouse links: {r.name!r} -> {other.name!r}, "
                    f"but {other.name!r} -> {partner_name!r}"
                )

    G = _parent_graph(records)
    try:
        cycle = nx.find_cycle(G, orientation="original")
        names = [G.nodes[edge[0]]["member_name"] for edge in cycle]
        warnings.append(f"Cycle detected in parent links: {names}")
    except nx.NetworkXNoCycle:
        pass

    if roots:
        root_id = roots[-1].id
        reachable = {root_id} | nx.descendants(G, root_id)
        # spouses of tree members are drawn beside them
        shown = set(reachable)
        for member_id in reachable:
            spouse_id = by_id[member_id].spouse_id
            if spouse_id in by_id:
                shown.add(spouse_id)
        for r in records:
            if r.spouse_id in reachable:
                shown.add(r.id)
        missing = [by_id[i].name for i in by_id if i not in shown]
        if missing:
            warnings.append(
                f"{len(missing)} member(s) not connected to the root: {', '.join(missing[:10])}"
            )

    return warnings
