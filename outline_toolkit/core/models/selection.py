from __future__ import annotations

"""Focus state of a buffer as a tagged union.

Exactly one of these values describes what has keyboard focus inside a
buffer. Each variant carries a ``kind`` tag so that callers dispatch with a
table keyed by mode instead of probing fields:

* :class:`NoSelection` (``"none"``)
* :class:`TitleSelection` (``"title"``): caret in the buffer root's text
* :class:`TextSelection` (``"text"``): caret or range inside one block
* :class:`BlockSelection` (``"block"``): a contiguous run of sibling blocks

Only the text variants remember a goal column, so a block selection with a
``goal_x`` cannot be built.
"""

from dataclasses import dataclass, field
from typing import Literal, Optional, Tuple, Union

__all__ = [
    "Mode",
    "GoalLine",
    "NoSelection",
    "TitleSelection",
    "TextSelection",
    "BlockSelection",
    "Selection",
    "NO_SELECTION",
]

Mode = Literal["none", "title", "text", "block"]
GoalLine = Literal["first", "last"]


@dataclass(frozen=True)
class NoSelection:
    kind: Mode = field(default="none", init=False)


@dataclass(frozen=True)
class TitleSelection:
    """Caret (or range) inside the buffer title."""
    anchor_offset: int = 0
    focus_offset: int = 0
    goal_x: Optional[int] = None
    kind: Mode = field(default="title", init=False)

    @classmethod
    def caret(cls, offset: int, goal_x: Optional[int] = None) -> "TitleSelection":
        return cls(offset, offset, goal_x)

    @property
    def is_collapsed(self) -> bool:
        return self.anchor_offset == self.focus_offset

    @property
    def start(self) -> int:
        return min(self.anchor_offset, self.focus_offset)

    @property
    def end(self) -> int:
        return max(self.anchor_offset, self.focus_offset)


@dataclass(frozen=True)
class TextSelection:
    """Caret or text range inside a single block.

    Attributes
    ----------
    node_id
        The block owning the caret.
    anchor_offset, focus_offset
        Range ends; equal when the selection is a collapsed caret.
    goal_x
        Remembered column for vertical motion.
    goal_line
        Which visual line of the target block the goal column applies to.
    assoc
        Wrap-boundary association, ``-1`` (end of previous line) or ``1``.
    """
    node_id: str
    anchor_offset: int = 0
    focus_offset: int = 0
    goal_x: Optional[int] = None
    goal_line: Optional[GoalLine] = None
    assoc: int = 1
    kind: Mode = field(default="text", init=False)

    @classmethod
    def caret(
        cls,
        node_id: str,
        offset: int,
        goal_x: Optional[int] = None,
        goal_line: Optional[GoalLine] = None,
    ) -> "TextSelection":
        return cls(node_id, offset, offset, goal_x, goal_line)

    @property
    def is_collapsed(self) -> bool:
        return self.anchor_offset == self.focus_offset

    @property
    def start(self) -> int:
        return min(self.anchor_offset, self.focus_offset)

    @property
    def end(self) -> int:
        return max(self.anchor_offset, self.focus_offset)


@dataclass(frozen=True)
class BlockSelection:
    """Ordered, contiguous run of sibling blocks.

    ``anchor`` is the fixed end of the run and ``focus`` the moving end. Both
    must be members of ``node_ids``.
    """
    node_ids: Tuple[str, ...]
    anchor: str
    focus: str
    kind: Mode = field(default="block", init=False)

    def __post_init__(self) -> None:
        if not self.node_ids:
            raise ValueError("BlockSelection needs at least one node")
        if self.anchor not in self.node_ids or self.focus not in self.node_ids:
            raise ValueError("BlockSelection anchor and focus must be selected nodes")

    @classmethod
    def single(cls, node_id: str) -> "BlockSelection":
        return cls((node_id,), node_id, node_id)

    @property
    def is_single(self) -> bool:
        return len(self.node_ids) == 1


Selection = Union[NoSelection, TitleSelection, TextSelection, BlockSelection]

NO_SELECTION = NoSelection()
