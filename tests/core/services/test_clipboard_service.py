import pytest

from outline_toolkit.core.errors import NodeNotFoundError
from outline_toolkit.core.services import ClipboardService


def test_copy_joins_in_document_order(make_context, clipboard):
    ctx = make_context(["One", ("Two", ["Nested"]), "Three"])
    assert clipboard.copy_text(ctx, ["Three", "One"]) == "One\n\nThree"


def test_copy_single_block(make_context, clipboard):
    ctx = make_context(["One"])
    assert clipboard.copy_text(ctx, ["One"]) == "One"


def test_custom_separator(make_context):
    ctx = make_context(["A", "B"])
    assert ClipboardService(separator="\n").copy_text(ctx, ["A", "B"]) == "A\nB"


def test_unknown_block_raises(make_context, clipboard):
    ctx = make_context(["A"])
    with pytest.raises(NodeNotFoundError):
        clipboard.copy_text(ctx, ["ghost"])
