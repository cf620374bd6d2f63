from __future__ import annotations

"""Exception classes for the outline core.

Only identity inconsistencies are real errors. Boundary conditions such as
"no previous sibling" or "already first" are reported as no-op results by
the services and never raised.
"""

from typing import Optional


class OutlineError(Exception):
    """Base exception for all outline core errors."""

    def __init__(self, message: str, node_id: Optional[str] = None) -> None:
        super().__init__(message)
        self.node_id = node_id

    def __str__(self) -> str:
        if self.node_id:
            return f"[Node: {self.node_id}] {super().__str__()}"
        return super().__str__()


class NodeNotFoundError(OutlineError):
    """Raised when a stale or unknown node identity is referenced.

    Signals that the selection and the tree are out of sync. Callers are
    not expected to recover from it.
    """
    pass


class NoParentError(OutlineError):
    """Raised when asking for the parent of a document root.

    Services catch this locally and turn it into a no-op or a title
    transition.
    """
    pass


class CycleRejectedError(OutlineError):
    """Raised when a relocation would make a node its own ancestor.

    The tree is left unchanged.
    """

    def __init__(self, message: str, node_id: Optional[str] = None,
                 target_parent_id: Optional[str] = None) -> None:
        super().__init__(message, node_id)
        self.target_parent_id = target_parent_id


__all__ = [
    "OutlineError",
    "NodeNotFoundError",
    "NoParentError",
    "CycleRejectedError",
]
