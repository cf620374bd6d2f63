from __future__ import annotations

"""Shared data structures used across the outline core.

This package exposes the node forest, the text storage, the selection union
and the buffer/session context. It is intentionally free of UI and I/O code
so that the contained objects can be reused in any context (unit-tests, CLI,
GUI, etc.).
"""

from .node_tree import NodeTree, Position, generate_node_id  # noqa: F401
from .text_store import TextStore  # noqa: F401
from .selection import (  # noqa: F401
    NO_SELECTION,
    BlockSelection,
    GoalLine,
    Mode,
    NoSelection,
    Selection,
    TextSelection,
    TitleSelection,
)
from .buffer import Buffer, OutlineContext  # noqa: F401

__all__: list[str] = [
    "NodeTree",
    "Position",
    "generate_node_id",
    "TextStore",
    "NO_SELECTION",
    "BlockSelection",
    "GoalLine",
    "Mode",
    "NoSelection",
    "Selection",
    "TextSelection",
    "TitleSelection",
    "Buffer",
    "OutlineContext",
]
