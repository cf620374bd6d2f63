from __future__ import annotations

"""Directional navigation targets for an outline buffer.

The service answers "where does this key take the focus?" without writing
anything: each method returns the target :data:`Selection` (or None when the
key does not move) and the dispatcher applies it through the selection
service, which handles auto-expansion.

Two traversals are used:

* *visible order* (this module): pre-order that skips children of collapsed
  blocks and stays inside the buffer root. Used by all arrow keys.
* *document order* (:class:`NodeTree`): the same walk with every block
  expanded.

Vertical caret motion keeps a goal column: the first vertical move records
the caret column and later moves reuse it, so moving through a short block
does not drift the caret left.
"""

import logging
from typing import List, Literal, Optional

from outline_toolkit.core.models import (
    BlockSelection,
    OutlineContext,
    Selection,
    TextSelection,
    TitleSelection,
)
from outline_toolkit.core.services.fold_service import FoldService
from outline_toolkit.core.text_layout import TextLayout

__all__ = ["NavigationService"]

logger = logging.getLogger(__name__)

Direction = Literal["up", "down"]


class NavigationService:
    """Compute focus targets for arrow keys in every focus mode.

    Parameters
    ----------
    fold_service : FoldService, optional
        Source of fold flags for visible-order traversal.
    layout : TextLayout, optional
        Line model used when the key event carries no line information.
    """

    def __init__(self, fold_service: Optional[FoldService] = None, layout: Optional[TextLayout] = None) -> None:
        self._fold = fold_service or FoldService()
        self.layout = layout or TextLayout()

    # -------------------------------------------------------------------------
    # Visible-order traversal
    # -------------------------------------------------------------------------

    def top_level_blocks(self, context: OutlineContext) -> List[str]:
        return context.tree.get_children(context.root_id)

    def deepest_visible_last_child(self, context: OutlineContext, node_id: str) -> str:
        """Descend into last children while they are shown."""
        probe = node_id
        while self._fold.has_visible_children(context, probe):
            probe = context.tree.last_child(probe)
        return probe

    def previous_visible(self, context: OutlineContext, node_id: str) -> Optional[str]:
        """Block shown right above *node_id*; None when that is the title."""
        prev = context.tree.previous_sibling(node_id)
        if prev is not None:
            return self.deepest_visible_last_child(context, prev)
        parent = context.tree.find_parent(node_id)
        if parent is None or parent == context.root_id:
            return None
        return parent

    def next_visible(self, context: OutlineContext, node_id: str) -> Optional[str]:
        """Block shown right below *node_id*; None at the end of the buffer."""
        if self._fold.has_visible_children(context, node_id):
            return context.tree.first_child(node_id)
        return self.next_after_subtree(context, node_id)

    def next_after_subtree(self, context: OutlineContext, node_id: str) -> Optional[str]:
        """Next sibling of the nearest ancestor-or-self that has one, inside the buffer."""
        probe = node_id
        while probe != context.root_id:
            nxt = context.tree.next_sibling(probe)
            if nxt is not None:
                return nxt
            parent = context.tree.find_parent(probe)
            if parent is None:
                return None
            probe = parent
        return None

    def last_visible_block(self, context: OutlineContext) -> Optional[str]:
        last = context.tree.last_child(context.root_id)
        if last is None:
            return None
        return self.deepest_visible_last_child(context, last)

    def in_view(self, context: OutlineContext, node_id: str) -> bool:
        """True if *node_id* is a descendant of the buffer root."""
        if not context.tree.contains(node_id):
            return False
        return context.root_id in context.tree.ancestors(node_id)

    # -------------------------------------------------------------------------
    # Text mode
    # -------------------------------------------------------------------------

    def text_left(self, context: OutlineContext, selection: TextSelection) -> Selection:
        node_id = selection.node_id
        if not selection.is_collapsed:
            return TextSelection.caret(node_id, selection.start)
        if selection.focus_offset > 0:
            return TextSelection.caret(node_id, selection.focus_offset - 1)
        prev = self.previous_visible(context, node_id)
        if prev is None:
            return TitleSelection.caret(context.texts.length(context.root_id))
        return TextSelection.caret(prev, context.texts.length(prev))

    def text_right(self, context: OutlineContext, selection: TextSelection) -> Selection:
        node_id = selection.node_id
        length = context.texts.length(node_id)
        if not selection.is_collapsed:
            return TextSelection.caret(node_id, selection.end)
        if selection.focus_offset < length:
            return TextSelection.caret(node_id, selection.focus_offset + 1)
        nxt = self.next_visible(context, node_id)
        if nxt is None:
            return TextSelection.caret(node_id, length)
        return TextSelection.caret(nxt, 0)

    def text_up(
        self,
        context: OutlineContext,
        selection: TextSelection,
        caret_x: Optional[int] = None,
        on_first_line: Optional[bool] = None,
    ) -> Selection:
        """Move up one visual line, crossing to the previous block on the first line."""
        node_id = selection.node_id
        text = context.texts.get_text(node_id)
        goal_x = self._goal_x(selection.goal_x, caret_x, text, selection.focus_offset)
        if on_first_line is None:
            on_first_line = self.layout.is_first_line(text, selection.focus_offset)
        if not on_first_line:
            offset = self.layout.offset_on_adjacent_line(text, selection.focus_offset, goal_x, -1)
            if offset is not None:
                return TextSelection.caret(node_id, offset, goal_x)
        prev = self.previous_visible(context, node_id)
        if prev is None:
            title = context.texts.get_text(context.root_id)
            return TitleSelection.caret(self.layout.offset_at_goal(title, goal_x, "last"), goal_x)
        prev_text = context.texts.get_text(prev)
        return TextSelection.caret(prev, self.layout.offset_at_goal(prev_text, goal_x, "last"), goal_x, "last")

    def text_down(
        self,
        context: OutlineContext,
        selection: TextSelection,
        caret_x: Optional[int] = None,
        on_last_line: Optional[bool] = None,
    ) -> Selection:
        """Move down one visual line, crossing to the next block on the last line."""
        node_id = selection.node_id
        text = context.texts.get_text(node_id)
        goal_x = self._goal_x(selection.goal_x, caret_x, text, selection.focus_offset)
        if on_last_line is None:
            on_last_line = self.layout.is_last_line(text, selection.focus_offset)
        if not on_last_line:
            offset = self.layout.offset_on_adjacent_line(text, selection.focus_offset, goal_x, 1)
            if offset is not None:
                return TextSelection.caret(node_id, offset, goal_x)
        nxt = self.next_visible(context, node_id)
        if nxt is None:
            return TextSelection.caret(node_id, len(text))
        next_text = context.texts.get_text(nxt)
        return TextSelection.caret(nxt, self.layout.offset_at_goal(next_text, goal_x, "first"), goal_x, "first")

    def text_extend(self, context: OutlineContext, selection: TextSelection, step: int) -> Selection:
        """Move the focus end of a text range by one character."""
        length = context.texts.length(selection.node_id)
        focus = max(0, min(selection.focus_offset + step, length))
        return TextSelection(selection.node_id, selection.anchor_offset, focus)

    # -------------------------------------------------------------------------
    # Title
    # -------------------------------------------------------------------------

    def title_left(self, context: OutlineContext, selection: TitleSelection) -> Selection:
        if not selection.is_collapsed:
            return TitleSelection.caret(selection.start)
        return TitleSelection.caret(max(0, selection.focus_offset - 1))

    def title_right(self, context: OutlineContext, selection: TitleSelection) -> Selection:
        length = context.texts.length(context.root_id)
        if not selection.is_collapsed:
            return TitleSelection.caret(selection.end)
        if selection.focus_offset < length:
            return TitleSelection.caret(selection.focus_offset + 1)
        first = context.tree.first_child(context.root_id)
        if first is None:
            return selection
        return TextSelection.caret(first, 0)

    def title_up(self, context: OutlineContext, selection: TitleSelection,
                 caret_x: Optional[int] = None, on_first_line: Optional[bool] = None) -> Selection:
        title = context.texts.get_text(context.root_id)
        goal_x = self._goal_x(selection.goal_x, caret_x, title, selection.focus_offset)
        if on_first_line is None:
            on_first_line = self.layout.is_first_line(title, selection.focus_offset)
        if not on_first_line:
            offset = self.layout.offset_on_adjacent_line(title, selection.focus_offset, goal_x, -1)
            if offset is not None:
                return TitleSelection.caret(offset, goal_x)
        return selection

    def title_down(self, context: OutlineContext, selection: TitleSelection,
                   caret_x: Optional[int] = None, on_last_line: Optional[bool] = None) -> Selection:
        title = context.texts.get_text(context.root_id)
        goal_x = self._goal_x(selection.goal_x, caret_x, title, selection.focus_offset)
        if on_last_line is None:
            on_last_line = self.layout.is_last_line(title, selection.focus_offset)
        if not on_last_line:
            offset = self.layout.offset_on_adjacent_line(title, selection.focus_offset, goal_x, 1)
            if offset is not None:
                return TitleSelection.caret(offset, goal_x)
        first = context.tree.first_child(context.root_id)
        if first is None:
            return TitleSelection.caret(len(title))
        first_text = context.texts.get_text(first)
        return TextSelection.caret(first, self.layout.offset_at_goal(first_text, goal_x, "first"), goal_x, "first")

    # -------------------------------------------------------------------------
    # Block selection
    # -------------------------------------------------------------------------

    def seed_block(self, context: OutlineContext, direction: Direction) -> Optional[Selection]:
        """Initial block selection when nothing is selected.

        While the buffer is active (after Escape), the last focused block
        wins when it is still inside the buffer. Otherwise, and always for an
        inactive buffer, the first (down) or last (up) top-level block.
        """
        blocks = self.top_level_blocks(context)
        if not blocks:
            return None
        remembered = context.buffer.last_focused_block_id
        if context.buffer.active and remembered is not None and self.in_view(context, remembered):
            return BlockSelection.single(remembered)
        return BlockSelection.single(blocks[0] if direction == "down" else blocks[-1])

    def block_step(self, context: OutlineContext, selection: BlockSelection, direction: Direction) -> Optional[Selection]:
        """Plain ArrowUp/ArrowDown in block mode.

        A multi-block range collapses to its edge in the pressed direction.
        A single block moves to the previous/next visible block. Stepping
        follows visible document order, so it crosses into children and back
        out to parents instead of stopping at the sibling group. None means
        there is nowhere to go.
        """
        if not selection.is_single:
            edge = selection.node_ids[0] if direction == "up" else selection.node_ids[-1]
            return BlockSelection.single(edge)
        if direction == "up":
            target = self.previous_visible(context, selection.focus)
        else:
            target = self.next_visible(context, selection.focus)
        if target is None:
            return None
        return BlockSelection.single(target)

    def block_extend(self, context: OutlineContext, selection: BlockSelection, direction: Direction) -> Selection:
        """Shift+ArrowUp/ArrowDown: move the focus one sibling, keeping the anchor."""
        siblings = context.tree.get_siblings(selection.anchor)
        index = siblings.index(selection.focus)
        index = index - 1 if direction == "up" else index + 1
        index = max(0, min(index, len(siblings) - 1))
        focus = siblings[index]
        lo, hi = sorted((siblings.index(selection.anchor), index))
        return BlockSelection(tuple(siblings[lo:hi + 1]), selection.anchor, focus)

    def block_parent(self, context: OutlineContext, selection: BlockSelection) -> Optional[Selection]:
        parent = context.tree.find_parent(selection.focus)
        if parent is None or parent == context.root_id:
            return None
        return BlockSelection.single(parent)

    def block_first_child(self, context: OutlineContext, selection: BlockSelection) -> Optional[Selection]:
        child = context.tree.first_child(selection.focus)
        if child is None:
            return None
        return BlockSelection.single(child)

    # -------------------------------------------------------------------------
    # Internal helpers
    # -------------------------------------------------------------------------

    def _goal_x(self, remembered: Optional[int], caret_x: Optional[int], text: str, offset: int) -> int:
        if remembered is not None:
            return remembered
        if caret_x is not None:
            return caret_x
        return self.layout.column(text, offset)
