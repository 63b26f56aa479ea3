import pytest

from family_tree.tree_builder import (
    PLACEHOLDER_ROOT_NAME,
    CyclicStructureError,
    TreeNode,
    build,
    count_nodes,
    find_by_name,
    walk,
    walk_with_depth,
)
from family_tree.records import MemberRecord

from helpers import member


def test_root_selection():
    root = build([member(1, "Root", generation=0), member(2, "Kid", parent_id=1)])

    assert root.name == "Root"
    assert [c.name for c in root.children] == ["Kid"]


def test_fallback_root_when_no_generation_zero_orphan():
    root = build([member(1, "A", generation=1), member(2, "B", generation=0, parent_id=1)])

    assert root.name == PLACEHOLDER_ROOT_NAME
    assert root.children == []
    assert root.is_placeholder


def test_fallback_root_for_empty_input():
    assert build([]).name == PLACEHOLDER_ROOT_NAME


def test_last_root_candidate_wins():
    root = build([member(1, "First", generation=0), member(2, "Second", generation=0)])
    assert root.name == "Second"


def test_spouse_link_is_made_symmetric():
    root = build([member(1, "A", generation=0, spouse_id=2), member(2, "B", generation=0)])
    # B comes last and wins as root; A is reachable as its spouse
    spouse = root.spouse

    assert root.name == "B"
    assert spouse.name == "A"
    assert spouse.spouse is root


def test_spouse_never_becomes_child(family_tree):
    assert family_tree.spouse.name == "Siti"
    assert "Siti" not in [c.name for c in family_tree.children]
    assert family_tree.spouse.children == []


def test_conflicting_spouse_links_stay_symmetric():
    root = build([
        member(1, "Root", generation=0),
        member(2, "A", parent_id=1, spouse_id=3),
        member(3, "B", parent_id=1, spouse_id=4),
        member(4, "C", parent_id=1, spouse_id=3),
    ])
    a, b, c = root.children

    assert a.spouse is None
    assert b.spouse is c
    assert c.spouse is b
    for node in walk(root):
        if node.spouse is not None:
            assert node.spouse.spouse is node


def test_bare_records_without_generation_give_placeholder_root():
    root = build([MemberRecord(id=1, name="Kid"), MemberRecord(id=2, name="X")])

    assert root.name == PLACEHOLDER_ROOT_NAME


def test_bare_records_still_link_spouses():
    root = build([
        MemberRecord(id=1, name="One", generation=0, spouse_id=2),
        MemberRecord(id=2, name="Two"),
    ])

    assert root.name == "One"
    assert root.spouse.name == "Two"
    assert root.spouse.spouse is root


def test_dangling_references_are_ignored():
    root = build([
        member(1, "Root", generation=0),
        member(2, "Lost", parent_id=999, spouse_id=998),
    ])

    assert root.children == []
    assert root.spouse is None


def test_duplicate_id_uses_last_row():
    root = build([
        member(1, "Root", generation=0),
        member(2, "Old", parent_id=1),
        member(2, "New", parent_id=1),
    ])

    assert [c.name for c in root.children] == ["New"]
    assert count_nodes(root) == 2


def test_children_keep_input_order():
    root = build([
        member(1, "Root", generation=0),
        member(4, "C", parent_id=1),
        member(2, "A", parent_id=1),
        member(3, "B", parent_id=1),
    ])
    assert [c.name for c in root.children] == ["C", "A", "B"]


def test_parent_listed_after_child_still_links():
    root = build([member(2, "Kid", parent_id=1), member(1, "Root", generation=0)])
    assert [c.name for c in root.children] == ["Kid"]


def test_attributes_copied_only_when_present(family_tree):
    ahmad = find_by_name(family_tree, "Ahmad")
    citra = find_by_name(family_tree, "Citra")

    assert ahmad.attributes == {"birth_year": "1945", "phone_number": "0812"}
    assert citra.attributes == {"address": "Jakarta", "notes": "Eldest"}
    assert ahmad.member_id == 3


def test_every_record_reachable_as_child_or_spouse(family_records, family_tree):
    reachable = {}
    for node in walk(family_tree):
        reachable[node.member_id] = node
        if node.spouse is not None:
            reachable.setdefault(node.spouse.member_id, node.spouse)

    assert set(reachable) == {r.id for r in family_records}


def test_repr_does_not_recurse_through_spouse(family_tree):
    assert "Galib" in repr(family_tree)


class TestWalk:

    def test_preorder(self, family_tree):
        names = [n.name for n in walk(family_tree)]
        assert names == ["Galib", "Ahmad", "Citra", "Budi"]

    def test_count_nodes(self, family_tree):
        assert count_nodes(family_tree) == 4

    def test_find_missing_name(self, family_tree):
        assert find_by_name(family_tree, "Nobody") is None

    def test_cycle_raises(self):
        a = TreeNode(name="A")
        b = TreeNode(name="B", children=[a])
        a.children.append(b)

        with pytest.raises(CyclicStructureError):
            list(walk(a))

    def test_self_parent_stays_out_of_tree(self):
        root = build([member(1, "Root", generation=0), member(2, "Loop", parent_id=2)])

        assert count_nodes(root) == 1
        assert root.children == []

    def test_walk_with_depth(self, family_tree):
        pairs = [(n.name, d) for n, d in walk_with_depth(family_tree)]
        assert pairs == [("Galib", 0), ("Ahmad", 1), ("Citra", 2), ("Budi", 1)]

    def test_walk_with_depth_descend_filter(self, family_tree):
        names = [n.name for n, _ in walk_with_depth(family_tree, descend=lambda n: n.name != "Ahmad")]
        assert names == ["Galib", "Ahmad", "Budi"]

    def test_walk_with_depth_cycle_raises(self):
        a = TreeNode(name="A")
        a.children.append(TreeNode(name="B", children=[a]))

        with pytest.raises(CyclicStructureError):
            list(walk_with_depth(a))
