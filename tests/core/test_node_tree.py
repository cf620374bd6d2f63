import random

import pytest

from outline_toolkit.core.errors import CycleRejectedError, NodeNotFoundError, NoParentError
from outline_toolkit.core.models import NodeTree, Position


def _children(ctx, node_id):
    return ctx.tree.get_children(node_id)


def test_build_and_query(make_context):
    ctx = make_context(["A", ("B", ["B1", "B2"]), "C"])
    tree = ctx.tree
    assert tree.roots() == ["root"]
    assert _children(ctx, "root") == ["A", "B", "C"]
    assert tree.get_parent("B1") == "B"
    assert tree.index_in_parent("C") == 2
    assert tree.depth("root") == 0
    assert tree.depth("B2") == 2
    assert tree.get_all_descendants("root") == ["A", "B", "B1", "B2", "C"]
    assert tree.is_ancestor("root", "B2")
    assert not tree.is_ancestor("B2", "B")
    assert len(tree) == 6


def test_get_parent_of_document_root_raises(make_context):
    ctx = make_context(["A"])
    with pytest.raises(NoParentError):
        ctx.tree.get_parent("root")
    assert ctx.tree.find_parent("root") is None


def test_unknown_node_raises(make_context):
    ctx = make_context(["A"])
    with pytest.raises(NodeNotFoundError):
        ctx.tree.get_children("missing")


def test_insert_positions():
    tree = NodeTree()
    root = tree.create_root("r")
    b = tree.insert_node(root, Position.end(), node_id="b")
    tree.insert_node(root, Position.start(), node_id="a")
    tree.insert_node(root, Position.after(b), node_id="d")
    tree.insert_node(root, Position.before("d"), node_id="c")
    assert tree.get_children(root) == ["a", "b", "c", "d"]


def test_insert_with_foreign_anchor_raises(make_context):
    ctx = make_context(["A", ("B", ["B1"])])
    with pytest.raises(NodeNotFoundError):
        ctx.tree.insert_node("root", Position.after("B1"))


def test_generated_ids_are_unique():
    tree = NodeTree()
    root = tree.create_root()
    ids = {tree.insert_node(root, Position.end()) for _ in range(50)}
    assert len(ids) == 50
    assert all(node_id.startswith("n-") for node_id in ids)


def test_insert_nodes_keeps_order_and_contiguity(make_context):
    ctx = make_context(["A", "B", "C", ("D", ["D1"])])
    ctx.tree.insert_nodes(["C", "A"], "D", Position.end())
    assert _children(ctx, "root") == ["B", "D"]
    assert _children(ctx, "D") == ["D1", "C", "A"]


def test_insert_nodes_rejects_cycle_without_mutation(make_context):
    ctx = make_context([("A", [("A1", ["A2"])]), "B"])
    before = ctx.tree.to_bytes()
    with pytest.raises(CycleRejectedError):
        ctx.tree.insert_nodes(["B", "A"], "A2", Position.end())
    assert ctx.tree.to_bytes() == before


def test_insert_nodes_unknown_id_is_atomic(make_context):
    ctx = make_context(["A", "B"])
    before = ctx.tree.to_bytes()
    with pytest.raises(NodeNotFoundError):
        ctx.tree.insert_nodes(["A", "ghost"], "B", Position.end())
    assert ctx.tree.to_bytes() == before


def test_move_existing_node_via_insert_node(make_context):
    ctx = make_context(["A", ("B", ["B1"])])
    ctx.tree.insert_node("root", Position.start(), node_id="B1")
    assert _children(ctx, "root") == ["B1", "A", "B"]
    assert not ctx.tree.has_children("B")


def test_delete_node_returns_preorder(make_context):
    ctx = make_context(["A", ("B", [("B1", ["B1a"]), "B2"])])
    removed = ctx.tree.delete_node("B")
    assert removed == ["B", "B1", "B1a", "B2"]
    assert _children(ctx, "root") == ["A"]
    assert not ctx.tree.contains("B1a")


def test_document_order_walks_as_if_expanded(make_context):
    ctx = make_context([("A", [("A1", ["A1a"])]), "B"])
    ctx.buffer.expanded["A"] = False
    tree = ctx.tree
    assert tree.find_previous_in_document_order("B") == "A1a"
    assert tree.find_previous_in_document_order("A1") == "A"
    assert tree.find_previous_in_document_order("A") == "root"
    assert tree.find_next_in_document_order("A") == "A1"
    assert tree.find_next_in_document_order("A1a") == "B"
    assert tree.find_next_in_document_order("B") is None


def test_serialization_round_trip_preserves_structure(make_context):
    ctx = make_context(["A", ("B", ["B1"])])
    clone = NodeTree.from_bytes(ctx.tree.to_bytes())
    assert clone.get_all_descendants("root") == ["A", "B", "B1"]
    assert clone.get_parent("B1") == "B"


def test_duplicate_ids_rejected_on_load():
    with pytest.raises(ValueError):
        NodeTree.from_bytes(b'<outline><node id="x"/><node id="x"/></outline>')


# ---------------------------------------------------------------------------
# Well-formedness under mixed edit sequences
# ---------------------------------------------------------------------------

def _assert_well_formed(tree):
    seen = []
    for root_id in tree.roots():
        seen.extend(tree.iter_subtree(root_id))
    assert len(seen) == len(set(seen)) == len(tree)
    for node_id in seen:
        parent = tree.find_parent(node_id)
        assert tree.is_root(node_id) == (parent is None)
        if parent is not None:
            assert tree.get_children(parent).count(node_id) == 1
        assert not tree.is_ancestor(node_id, node_id)
        assert node_id not in tree.ancestors(node_id)


@pytest.mark.parametrize("seed", range(5))
def test_random_edit_sequences_keep_forest_well_formed(seed):
    rng = random.Random(seed)
    tree = NodeTree()
    tree.create_root("r")

    for _ in range(300):
        ids = list(tree.iter_subtree("r"))
        blocks = [node_id for node_id in ids if node_id != "r"]
        action = rng.choice(["insert", "insert", "move", "delete"])

        if action == "insert" or not blocks:
            parent = rng.choice(ids)
            children = tree.get_children(parent)
            kind = rng.choice(["start", "end", "before", "after"])
            if kind in ("before", "after") and children:
                position = Position(kind, rng.choice(children))
            else:
                position = Position.end()
            tree.insert_node(parent, position)
        elif action == "move":
            moving = rng.sample(blocks, k=min(len(blocks), rng.randint(1, 2)))
            if rng.random() < 0.3:
                target = rng.choice(list(tree.iter_subtree(moving[0])))
            else:
                target = rng.choice(ids)
            creates_cycle = any(
                target == node_id or tree.is_ancestor(node_id, target) for node_id in moving
            )
            before = tree.to_bytes()
            if creates_cycle:
                with pytest.raises(CycleRejectedError):
                    tree.move_nodes(moving, target, rng.choice([Position.start(), Position.end()]))
                assert tree.to_bytes() == before
            else:
                tree.move_nodes(moving, target, rng.choice([Position.start(), Position.end()]))
                for node_id in moving:
                    assert tree.get_parent(node_id) == target
        else:
            victim = rng.choice(blocks)
            removed = tree.delete_node(victim)
            assert all(not tree.contains(node_id) for node_id in removed)

        _assert_well_formed(tree)

