from __future__ import annotations

"""Selection writes for a buffer, enforcing the visibility invariant.

Every write that names target nodes first expands the collapsed ancestors
strictly between the buffer root and those nodes, so a focused or selected
block is never hidden. Clearing the selection never expands anything.
"""

import logging
from typing import Iterable, List, Optional

from outline_toolkit.core.errors import NodeNotFoundError
from outline_toolkit.core.models import (
    NO_SELECTION,
    BlockSelection,
    GoalLine,
    OutlineContext,
    Selection,
    TextSelection,
    TitleSelection,
)
from outline_toolkit.core.services.fold_service import FoldService

__all__ = ["SelectionService"]

logger = logging.getLogger(__name__)


class SelectionService:
    """Apply focus-state transitions to :class:`OutlineContext` buffers.

    Parameters
    ----------
    fold_service : FoldService, optional
        Used for the auto-expand step. A private instance is created when
        omitted.
    """

    def __init__(self, fold_service: Optional[FoldService] = None) -> None:
        self._fold = fold_service or FoldService()

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def set_selection(self, context: OutlineContext, selection: Selection) -> Selection:
        """Store *selection* in the buffer, auto-expanding its targets.

        Raises
        ------
        NodeNotFoundError
            If the selection names a node that is not in the tree.
        """
        writers = {
            "none": self._write_none,
            "title": self._write_title,
            "text": self._write_text,
            "block": self._write_block,
        }
        writers[selection.kind](context, selection)
        context.buffer.selection = selection
        return selection

    def clear(self, context: OutlineContext) -> Selection:
        """Drop the selection; the buffer stays active and remembers its last block."""
        return self.set_selection(context, NO_SELECTION)

    def activate(self, context: OutlineContext) -> None:
        context.buffer.active = True

    def deactivate(self, context: OutlineContext) -> None:
        context.buffer.selection = NO_SELECTION
        context.buffer.active = False

    def select_title(self, context: OutlineContext, offset: Optional[int] = None,
                     goal_x: Optional[int] = None) -> Selection:
        length = context.texts.length(context.root_id)
        offset = length if offset is None else max(0, min(offset, length))
        return self.set_selection(context, TitleSelection.caret(offset, goal_x))

    def select_text(
        self,
        context: OutlineContext,
        node_id: str,
        anchor_offset: Optional[int] = None,
        focus_offset: Optional[int] = None,
        goal_x: Optional[int] = None,
        goal_line: Optional[GoalLine] = None,
    ) -> Selection:
        """Put a caret (or range) in *node_id*; ``None`` offsets mean text end."""
        length = context.texts.length(node_id)
        anchor = length if anchor_offset is None else max(0, min(anchor_offset, length))
        focus = anchor if focus_offset is None else max(0, min(focus_offset, length))
        return self.set_selection(context, TextSelection(node_id, anchor, focus, goal_x, goal_line))

    def select_blocks(
        self,
        context: OutlineContext,
        node_ids: Iterable[str],
        anchor: Optional[str] = None,
        focus: Optional[str] = None,
    ) -> Selection:
        """Select a contiguous sibling run.

        The ids are put in sibling order. When they are not one contiguous
        run under a single parent, the selection is replaced wholesale by the
        focus block alone.
        """
        ids = list(dict.fromkeys(node_ids))
        if not ids:
            return self.clear(context)
        anchor = anchor if anchor in ids else ids[0]
        focus = focus if focus in ids else anchor
        ordered = self._as_sibling_run(context, ids)
        if ordered is None:
            logger.debug("Selection: non-contiguous block set replaced by focus=%s", focus)
            ordered = [focus]
            anchor = focus
        return self.set_selection(context, BlockSelection(tuple(ordered), anchor, focus))

    def select_block_range(self, context: OutlineContext, anchor: str, focus: str) -> Selection:
        """Select every sibling between *anchor* and *focus* inclusive."""
        siblings = context.tree.get_siblings(anchor)
        if focus not in siblings:
            return self.select_blocks(context, [focus])
        lo, hi = sorted((siblings.index(anchor), siblings.index(focus)))
        return self.set_selection(context, BlockSelection(tuple(siblings[lo:hi + 1]), anchor, focus))

    # -------------------------------------------------------------------------
    # Internal helpers
    # -------------------------------------------------------------------------

    def _write_none(self, context: OutlineContext, selection: Selection) -> None:
        return None

    def _write_title(self, context: OutlineContext, selection: Selection) -> None:
        context.buffer.active = True

    def _write_text(self, context: OutlineContext, selection: Selection) -> None:
        self._require(context, [selection.node_id])
        self._fold.expand_ancestors(context, selection.node_id)
        context.buffer.active = True
        context.buffer.last_focused_block_id = selection.node_id

    def _write_block(self, context: OutlineContext, selection: Selection) -> None:
        self._require(context, selection.node_ids)
        self._fold.expand_ancestors_for_nodes(context, selection.node_ids)
        context.buffer.active = True
        context.buffer.last_focused_block_id = selection.focus

    @staticmethod
    def _require(context: OutlineContext, node_ids: Iterable[str]) -> None:
        for node_id in node_ids:
            if not context.tree.contains(node_id):
                raise NodeNotFoundError("Selection names an unknown node", node_id)

    @staticmethod
    def _as_sibling_run(context: OutlineContext, ids: List[str]) -> Optional[List[str]]:
        for node_id in ids:
            if not context.tree.contains(node_id):
                raise NodeNotFoundError("Selection names an unknown node", node_id)
        siblings = context.tree.get_siblings(ids[0])
        if any(node_id not in siblings for node_id in ids):
            return None
        positions = sorted(siblings.index(node_id) for node_id in ids)
        if positions[-1] - positions[0] != len(positions) - 1:
            return None
        return siblings[positions[0]:positions[-1] + 1]
