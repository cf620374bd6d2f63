import pytest

from outline_toolkit.core.errors import NodeNotFoundError
from outline_toolkit.core.models import TextSelection
from outline_toolkit.core.services.structure_editing_service import OperationResult


def _children(ctx, node_id="root"):
    return ctx.tree.get_children(node_id)


def _assert_noop(result: OperationResult):
    assert result.success is False
    assert result.message.endswith("(noop)")


# ---------------------------------------------------------------------------
# Swap and move-to-extreme
# ---------------------------------------------------------------------------

def test_swap_up_exchanges_with_previous_sibling(make_context, editing):
    ctx = make_context(["First", "Second", "Third"])
    result = editing.swap(ctx, ["Second"], "up")
    assert result.success
    assert _children(ctx) == ["Second", "First", "Third"]


def test_swap_run_down_keeps_order(make_context, editing):
    ctx = make_context(["A", "B", "C", "D"])
    assert editing.swap(ctx, ["C", "B"], "down").success
    assert _children(ctx) == ["A", "D", "B", "C"]


def test_swap_up_at_top_level_boundary_is_noop(make_context, editing):
    ctx = make_context(["A", "B"])
    _assert_noop(editing.swap(ctx, ["A"], "up"))
    assert _children(ctx) == ["A", "B"]


def test_swap_up_past_first_child_moves_into_aunt(make_context, editing):
    ctx = make_context([("P", ["P1"]), ("Q", ["Q1", "Q2"])])
    result = editing.swap(ctx, ["Q1"], "up")
    assert result.success
    assert result.details["new_parent"] == "P"
    assert _children(ctx, "P") == ["P1", "Q1"]
    assert _children(ctx, "Q") == ["Q2"]


def test_swap_up_without_aunt_outdents_before_parent(make_context, editing):
    ctx = make_context([("P", ["P1", "P2"])])
    assert editing.swap(ctx, ["P1"], "up").success
    assert _children(ctx) == ["P1", "P"]


def test_swap_down_past_last_child_moves_into_uncle(make_context, editing):
    ctx = make_context([("P", ["P1", "P2"]), ("Q", ["Q1"])])
    assert editing.swap(ctx, ["P2"], "down").success
    assert _children(ctx, "Q") == ["P2", "Q1"]


def test_swap_down_without_uncle_outdents_after_parent(make_context, editing):
    ctx = make_context([("P", ["P1"])])
    assert editing.swap(ctx, ["P1"], "down").success
    assert _children(ctx) == ["P", "P1"]


def test_swap_never_leaves_buffer_root(make_context, editing):
    ctx = make_context([("Z", ["A", "B"])])
    ctx.buffer.root_node_id = "Z"
    _assert_noop(editing.swap(ctx, ["A"], "up"))
    _assert_noop(editing.swap(ctx, ["B"], "down"))


def test_swap_rejects_non_contiguous_run(make_context, editing):
    ctx = make_context(["A", "B", "C"])
    result = editing.swap(ctx, ["A", "C"], "down")
    assert not result.success
    assert _children(ctx) == ["A", "B", "C"]


def test_move_to_extreme(make_context, editing):
    ctx = make_context(["A", "B", "C", "D"])
    assert editing.move_to_extreme(ctx, ["C"], "up").success
    assert _children(ctx) == ["C", "A", "B", "D"]
    assert editing.move_to_extreme(ctx, ["A", "B"], "down").success
    assert _children(ctx) == ["C", "D", "A", "B"]
    _assert_noop(editing.move_to_extreme(ctx, ["C"], "up"))


# ---------------------------------------------------------------------------
# Indent and outdent
# ---------------------------------------------------------------------------

def test_indent_appends_to_previous_sibling_and_expands_it(make_context, editing, fold):
    ctx = make_context([("A", ["A1"]), "B", "C"])
    fold.collapse_block(ctx, "A")
    assert editing.indent(ctx, ["B", "C"]).success
    assert _children(ctx, "A") == ["A1", "B", "C"]
    assert fold.is_expanded(ctx, "A")


def test_indent_without_previous_sibling_is_noop(make_context, editing):
    ctx = make_context(["A", "B"])
    _assert_noop(editing.indent(ctx, ["A"]))


def test_outdent_lands_after_parent(make_context, editing):
    ctx = make_context([("A", ["A1", "A2", "A3"]), "B"])
    assert editing.outdent(ctx, ["A2"]).success
    assert _children(ctx) == ["A", "A2", "B"]
    assert _children(ctx, "A") == ["A1", "A3"]


def test_outdent_at_buffer_root_is_noop(make_context, editing):
    ctx = make_context(["A"])
    _assert_noop(editing.outdent(ctx, ["A"]))


# ---------------------------------------------------------------------------
# Merge
# ---------------------------------------------------------------------------

def test_merge_backward_appends_text_and_places_caret(make_context, editing):
    ctx = make_context(["First", "Second"])
    result = editing.merge_backward(ctx, "Second")
    assert result.success
    assert ctx.texts.get_text("First") == "FirstSecond"
    assert not ctx.tree.contains("Second")
    assert ctx.texts.get_text("Second") == ""
    assert result.target == TextSelection.caret("First", 5)


def test_merge_backward_targets_deepest_visible_descendant(make_context, editing, fold):
    ctx = make_context([("A", [("A1", ["A1a"])]), "B"])
    result = editing.merge_backward(ctx, "B")
    assert result.details["into"] == "A1a"
    assert ctx.texts.get_text("A1a") == "A1aB"

    ctx = make_context([("A", [("A1", ["A1a"])]), "B"])
    fold.collapse_block(ctx, "A1")
    assert editing.merge_backward(ctx, "B").details["into"] == "A1"


def test_merge_backward_without_previous_sibling_is_noop(make_context, editing):
    ctx = make_context([("P", ["C"])])
    _assert_noop(editing.merge_backward(ctx, "C"))
    assert ctx.texts.get_text("P") == "P"


def test_merge_backward_refuses_block_with_children(make_context, editing):
    ctx = make_context(["A", ("B", ["B1"])])
    _assert_noop(editing.merge_backward(ctx, "B"))
    assert _children(ctx) == ["A", "B"]


def test_merge_forward_pulls_next_sibling(make_context, editing):
    ctx = make_context(["First", "Second"])
    result = editing.merge_forward(ctx, "First")
    assert result.success
    assert ctx.texts.get_text("First") == "FirstSecond"
    assert result.target == TextSelection.caret("First", 5)


def test_merge_forward_pulls_visible_first_child(make_context, editing):
    ctx = make_context([("A", ["A1", "A2"])])
    assert editing.merge_forward(ctx, "A").success
    assert ctx.texts.get_text("A") == "AA1"
    assert _children(ctx, "A") == ["A2"]


def test_merge_forward_never_orphans(make_context, editing):
    ctx = make_context(["First", ("Second", ["Nephew"])])
    before = (ctx.tree.to_bytes(), ctx.texts.as_dict())
    _assert_noop(editing.merge_forward(ctx, "First"))
    assert (ctx.tree.to_bytes(), ctx.texts.as_dict()) == before


def test_merge_forward_on_last_child_is_noop(make_context, editing):
    ctx = make_context([("P", ["C"]), "Q"])
    _assert_noop(editing.merge_forward(ctx, "C"))
    assert ctx.tree.contains("Q")


# ---------------------------------------------------------------------------
# Split and creation
# ---------------------------------------------------------------------------

def test_split_in_middle(make_context, editing):
    ctx = make_context(["HelloWorld"])
    result = editing.split(ctx, "HelloWorld", 5)
    new_id = result.details["created"]
    assert _children(ctx) == ["HelloWorld", new_id]
    assert ctx.texts.get_text("HelloWorld") == "Hello"
    assert ctx.texts.get_text(new_id) == "World"
    assert result.target == TextSelection.caret(new_id, 0)


def test_split_at_start_inserts_empty_block_before(make_context, editing):
    ctx = make_context(["Text"])
    result = editing.split(ctx, "Text", 0)
    new_id = result.details["created"]
    assert _children(ctx) == [new_id, "Text"]
    assert ctx.texts.get_text(new_id) == ""
    assert ctx.texts.get_text("Text") == "Text"


def test_split_at_end_creates_empty_block_after(make_context, editing):
    ctx = make_context(["Text"])
    new_id = editing.split(ctx, "Text", 4).details["created"]
    assert _children(ctx) == ["Text", new_id]
    assert ctx.texts.get_text(new_id) == ""


def test_split_removes_selected_range(make_context, editing):
    ctx = make_context(["abcdef"])
    new_id = editing.split(ctx, "abcdef", 2, 4).details["created"]
    assert ctx.texts.get_text("abcdef") == "ab"
    assert ctx.texts.get_text(new_id) == "ef"


def test_split_title_creates_first_block(make_context, editing):
    ctx = make_context(["Existing"], title="My Title")
    result = editing.split_title(ctx, 2)
    new_id = result.details["created"]
    assert ctx.texts.get_text("root") == "My"
    assert ctx.texts.get_text(new_id) == " Title"
    assert _children(ctx) == [new_id, "Existing"]


def test_create_first_child_expands_parent(make_context, editing, fold):
    ctx = make_context([("A", ["A1"])])
    fold.collapse_block(ctx, "A")
    new_id = editing.create_first_child(ctx, "A").details["created"]
    assert _children(ctx, "A") == [new_id, "A1"]
    assert fold.is_expanded(ctx, "A")


def test_create_sibling_after(make_context, editing):
    ctx = make_context(["A", "B"])
    result = editing.create_sibling_after(ctx, "A", "x")
    assert _children(ctx) == ["A", result.details["created"], "B"]
    assert result.target.focus_offset == 1


# ---------------------------------------------------------------------------
# Delete
# ---------------------------------------------------------------------------

def test_delete_cascades_and_focuses_previous_sibling(make_context, editing, fold):
    ctx = make_context(["A", ("B", ["B1"]), "C"])
    fold.collapse_block(ctx, "B")
    result = editing.delete_blocks(ctx, ["B"])
    assert result.success
    assert result.details["removed"] == ["B", "B1"]
    assert result.details["focus"] == "A"
    assert ctx.texts.get_text("B1") == ""
    assert "B" not in ctx.buffer.expanded


def test_delete_focus_falls_back_to_next_then_parent(make_context, editing):
    ctx = make_context(["A", "B"])
    assert editing.delete_blocks(ctx, ["A"]).details["focus"] == "B"

    ctx = make_context([("P", ["C"])])
    assert editing.delete_blocks(ctx, ["C"]).details["focus"] == "P"

    ctx = make_context(["Only"])
    assert editing.delete_blocks(ctx, ["Only"]).details["focus"] is None


def test_stale_identity_raises(make_context, editing):
    ctx = make_context(["A"])
    with pytest.raises(NodeNotFoundError):
        editing.merge_backward(ctx, "ghost")
    with pytest.raises(NodeNotFoundError):
        editing.swap(ctx, ["ghost"], "up")


def test_operation_result_target():
    caret = TextSelection.caret("A", 2)
    assert OperationResult(True, "ok", {"target": caret}).target == caret
    assert OperationResult(True, "ok", {"removed": ["A"]}).target is None
    assert OperationResult(False, "noop").target is None


def test_move_to_extreme_never_leaves_sibling_group(make_context, editing):
    ctx = make_context([("P", ["X", "Y"]), "Q"])
    _assert_noop(editing.move_to_extreme(ctx, ["Y"], "down"))
    _assert_noop(editing.move_to_extreme(ctx, ["X"], "up"))
    assert _children(ctx, "P") == ["X", "Y"]
    assert _children(ctx) == ["P", "Q"]
