"""Shared fixtures for the family tree tests."""

import pytest

from family_tree.tree_builder import build

from helpers import member


@pytest.fixture
def family_records():
    """
    Galib (root) married to Siti (married in, no parent). Siti is also a
    parent-less generation 0 row but comes first, so Galib wins as root.
    Children: Ahmad, Budi. Ahmad has a child Citra. Budi married to Dewi,
    recorded on Budi's side only.
    """
    return [
        member(2, "Siti", generation=0, spouse_id=1),
        member(1, "Galib", generation=0, spouse_id=2, birth_year="1920"),
        member(3, "Ahmad", parent_id=1, birth_year="1945", phone_number="0812"),
        member(4, "Budi", parent_id=1, spouse_id=5),
        member(5, "Dewi"),
        member(6, "Citra", generation=2, parent_id=3, address="Jakarta", notes="Eldest"),
    ]


@pytest.fixture
def family_tree(family_records):
    return build(family_records)


@pytest.fixture
def chain_tree():
    """R -> A -> B"""
    return build([
        member(1, "R", generation=0),
        member(2, "A", parent_id=1),
        member(3, "B", generation=2, parent_id=2),
    ])
