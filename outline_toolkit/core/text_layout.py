from __future__ import annotations

"""Visual line model used for goal-column vertical motion.

The render layer knows where text actually wraps. When it does not report
that information with a key event, the core falls back to this plain model:
``"\\n"`` is the only line break and every character is one column wide.
Subclasses can override :meth:`TextLayout.lines` to model soft wrapping.
"""

from typing import List, Optional, Tuple

from outline_toolkit.core.models.selection import GoalLine

__all__ = ["TextLayout"]


class TextLayout:
    """Map between caret offsets and (line, column) positions."""

    def lines(self, text: str) -> List[Tuple[int, int]]:
        """Return ``(start, end)`` offsets for each visual line of *text*.

        ``end`` excludes the line break. Empty text still has one line.
        """
        result: List[Tuple[int, int]] = []
        start = 0
        for index, char in enumerate(text):
            if char == "\n":
                result.append((start, index))
                start = index + 1
        result.append((start, len(text)))
        return result

    def line_index(self, text: str, offset: int) -> int:
        offset = max(0, min(offset, len(text)))
        for index, (start, end) in enumerate(self.lines(text)):
            if start <= offset <= end:
                return index
        return len(self.lines(text)) - 1

    def column(self, text: str, offset: int) -> int:
        offset = max(0, min(offset, len(text)))
        start, _ = self.lines(text)[self.line_index(text, offset)]
        return offset - start

    def is_first_line(self, text: str, offset: int) -> bool:
        return self.line_index(text, offset) == 0

    def is_last_line(self, text: str, offset: int) -> bool:
        return self.line_index(text, offset) == len(self.lines(text)) - 1

    def offset_at_goal(self, text: str, goal_x: Optional[int], goal_line: GoalLine) -> int:
        """Caret offset on the first or last line closest to column *goal_x*."""
        lines = self.lines(text)
        start, end = lines[0] if goal_line == "first" else lines[-1]
        if goal_x is None:
            return start
        return min(start + max(0, goal_x), end)

    def offset_on_adjacent_line(self, text: str, offset: int, goal_x: int, step: int) -> Optional[int]:
        """Offset one line up (``step=-1``) or down (``step=1``) at *goal_x*.

        Returns None when there is no such line inside *text*.
        """
        lines = self.lines(text)
        target = self.line_index(text, offset) + step
        if target < 0 or target >= len(lines):
            return None
        start, end = lines[target]
        return min(start + max(0, goal_x), end)
