from __future__ import annotations

"""Editing services operating on an explicit OutlineContext.

Services hold no session state of their own (except the undo history); every
call receives the context it works on.
"""

from .fold_service import FoldService  # noqa: F401
from .selection_service import SelectionService  # noqa: F401
from .navigation_service import NavigationService  # noqa: F401
from .structure_editing_service import StructureEditingService, OperationResult  # noqa: F401
from .clipboard_service import ClipboardService  # noqa: F401
from .undo_service import UndoService  # noqa: F401

__all__: list[str] = [
    "FoldService",
    "SelectionService",
    "NavigationService",
    "StructureEditingService",
    "OperationResult",
    "ClipboardService",
    "UndoService",
]
