import pytest

from outline_toolkit.core.errors import NodeNotFoundError
from outline_toolkit.core.models import NO_SELECTION, BlockSelection, TextSelection, TitleSelection


def test_text_selection_auto_expands_ancestors(make_context, selection_service, fold):
    ctx = make_context([("A", [("B", ["C"])]), ("X", ["Y"])])
    fold.collapse_block(ctx, "A")
    fold.collapse_block(ctx, "B")
    fold.collapse_block(ctx, "X")

    selection_service.select_text(ctx, "C", 0)

    assert fold.is_expanded(ctx, "A") and fold.is_expanded(ctx, "B")
    assert not fold.is_expanded(ctx, "X")
    assert ctx.selection == TextSelection.caret("C", 0)
    assert ctx.buffer.active
    assert ctx.buffer.last_focused_block_id == "C"


def test_clearing_never_expands(make_context, selection_service, fold):
    ctx = make_context([("A", ["B"])])
    selection_service.select_blocks(ctx, ["A"])
    fold.collapse_block(ctx, "A")
    selection_service.clear(ctx)
    assert ctx.selection is NO_SELECTION
    assert not fold.is_expanded(ctx, "A")
    assert ctx.buffer.active
    assert ctx.buffer.last_focused_block_id == "A"


def test_select_text_defaults_to_end(make_context, selection_service):
    ctx = make_context(["Hello"])
    selection_service.select_text(ctx, "Hello")
    assert ctx.selection.focus_offset == 5
    selection_service.select_text(ctx, "Hello", 99)
    assert ctx.selection.focus_offset == 5


def test_select_title(make_context, selection_service):
    ctx = make_context(["A"], title="Notes")
    selection_service.select_title(ctx)
    assert ctx.selection == TitleSelection.caret(5)


def test_select_blocks_orders_by_sibling_position(make_context, selection_service):
    ctx = make_context(["A", "B", "C"])
    selection = selection_service.select_blocks(ctx, ["C", "B"], anchor="C", focus="B")
    assert selection.node_ids == ("B", "C")
    assert selection.anchor == "C"
    assert selection.focus == "B"


def test_non_contiguous_blocks_replaced_by_focus(make_context, selection_service):
    ctx = make_context(["A", "B", "C"])
    selection = selection_service.select_blocks(ctx, ["A", "C"], anchor="A", focus="C")
    assert selection == BlockSelection.single("C")


def test_blocks_under_different_parents_replaced_by_focus(make_context, selection_service):
    ctx = make_context([("A", ["A1"]), "B"])
    selection = selection_service.select_blocks(ctx, ["A1", "B"], focus="B")
    assert selection == BlockSelection.single("B")


def test_select_block_range(make_context, selection_service):
    ctx = make_context(["A", "B", "C", "D"])
    selection = selection_service.select_block_range(ctx, "D", "B")
    assert selection.node_ids == ("B", "C", "D")
    assert (selection.anchor, selection.focus) == ("D", "B")


def test_unknown_node_is_rejected(make_context, selection_service):
    ctx = make_context(["A"])
    with pytest.raises(NodeNotFoundError):
        selection_service.set_selection(ctx, BlockSelection.single("ghost"))


def test_block_selection_cannot_carry_goal_column():
    with pytest.raises(TypeError):
        BlockSelection(("A",), "A", "A", goal_x=3)


def test_block_selection_requires_members():
    with pytest.raises(ValueError):
        BlockSelection(("A",), "A", "B")
