from __future__ import annotations

"""Undo/redo snapshot management for OutlineContext.

This service is UI-agnostic and performs pure in-memory history tracking of
the whole editing session. Snapshots hold the serialized node forest, the
block texts and the buffer state (root assignment, fold flags, selection),
and can be restored into a provided OutlineContext instance.

Design principles
-----------------
- No UI imports and no I/O (filesystem/console).
- Snapshots are immutable blobs once stored.
- Redo stack is cleared on every new snapshot push (standard undo/redo behavior).
- Memory usage controlled by a max_history policy (trim oldest).

Notes
-----
The forest is serialized with lxml.etree.tostring(); texts and fold flags are
copied as plain dictionaries and the selection value is immutable already.
"""

from dataclasses import dataclass
import logging
from typing import Dict, List, Optional

from lxml import etree as ET

from outline_toolkit.core.models import NodeTree, OutlineContext, Selection

__all__ = ["UndoService"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Snapshot:
    """Immutable in-memory snapshot of an OutlineContext.

    Attributes
    ----------
    tree_xml :
        Serialized ``<outline>`` container as bytes.
    texts :
        Mapping of node id -> text.
    root_node_id :
        Buffer root at snapshot time.
    expanded :
        Copy of the buffer fold flags.
    selection :
        Buffer selection (frozen dataclass, shared safely).
    last_focused_block_id :
        Remembered block at snapshot time.
    """

    tree_xml: bytes
    texts: Dict[str, str]
    root_node_id: str
    expanded: Dict[str, bool]
    selection: Selection
    last_focused_block_id: Optional[str]


class UndoService:
    """Manage undo/redo stacks for :class:`OutlineContext`.

    Parameters
    ----------
    max_history : int, default=50
        Maximum number of undo snapshots to keep. Oldest entries are discarded
        when the capacity is exceeded. Values lower than 1 are coerced to 1.

    Notes
    -----
    Callers take a :meth:`checkpoint` BEFORE a mutation (baseline) and push
    a snapshot AFTER it succeeds (post); undo then restores the baseline and
    keeps the post state for redo.

    Examples
    --------
    >>> ctx = OutlineContext.new_document("Notes")
    >>> svc = UndoService(max_history=10)
    >>> svc.checkpoint(ctx)
    True
    >>> # mutate ctx, then:
    >>> svc.push_snapshot(ctx)
    True
    >>> svc.undo(ctx)
    True
    """

    def __init__(self, max_history: int = 50) -> None:
        self._max_history: int = max(1, int(max_history))
        self._undo_stack: List[_Snapshot] = []
        self._redo_stack: List[_Snapshot] = []

    # --------------------------------------------------------------------- API

    def push_snapshot(self, context: OutlineContext) -> bool:
        """Capture the current state and push it onto the undo stack.

        The redo stack is cleared. Returns False (and pushes nothing) when
        the state cannot be serialized.
        """
        snap = self._create_snapshot(context)
        if snap is None:
            return False
        self._undo_stack.append(snap)
        self._redo_stack.clear()
        self._trim(self._undo_stack)
        return True

    def undo(self, context: OutlineContext) -> bool:
        """Restore the previous state into the provided context.

        Given ``undo_stack = [..., baseline, post]`` with the context equal to
        ``post``: ``post`` moves to the redo stack and ``baseline`` is
        restored.
        """
        if len(self._undo_stack) < 2:
            return False
        post_snap = self._undo_stack.pop()
        baseline_snap = self._undo_stack[-1]
        if not self._restore_snapshot_into_context(context, baseline_snap):
            self._undo_stack.append(post_snap)
            return False
        self._redo_stack.append(post_snap)
        self._trim(self._redo_stack)
        logger.info("Undo: restored baseline (history=%d)", len(self._undo_stack))
        return True

    def redo(self, context: OutlineContext) -> bool:
        """Re-apply a state that was previously undone."""
        if not self._redo_stack:
            return False
        post_snap = self._redo_stack.pop()
        if not self._restore_snapshot_into_context(context, post_snap):
            self._redo_stack.append(post_snap)
            return False
        self._undo_stack.append(post_snap)
        self._trim(self._undo_stack)
        logger.info("Redo: restored state (history=%d)", len(self._undo_stack))
        return True

    def checkpoint(self, context: OutlineContext) -> bool:
        """Refresh the newest snapshot with the current state before an edit.

        Navigation and folding happen between edits without snapshots; the
        checkpoint makes the baseline of the next edit include them. An
        empty history gets its first entry. The redo stack is kept because a
        no-op edit must not discard it.
        """
        snap = self._create_snapshot(context)
        if snap is None:
            return False
        if self._undo_stack:
            self._undo_stack[-1] = snap
        else:
            self._undo_stack.append(snap)
        return True

    def can_undo(self) -> bool:
        """Return True if an undo operation is currently possible."""
        return len(self._undo_stack) > 1

    def can_redo(self) -> bool:
        """Return True if a redo operation is currently possible."""
        return len(self._redo_stack) > 0

    def clear(self) -> None:
        """Clear both undo and redo histories."""
        self._undo_stack.clear()
        self._redo_stack.clear()

    # --------------------------------------------------------------- Internals

    def _trim(self, stack: List[_Snapshot]) -> None:
        overflow = len(stack) - self._max_history
        if overflow > 0:
            del stack[0:overflow]

    def _create_snapshot(self, context: OutlineContext) -> Optional[_Snapshot]:
        try:
            buffer = context.buffer
            return _Snapshot(
                tree_xml=context.tree.to_bytes(),
                texts=context.texts.as_dict(),
                root_node_id=buffer.root_node_id,
                expanded=dict(buffer.expanded),
                selection=buffer.selection,
                last_focused_block_id=buffer.last_focused_block_id,
            )
        except (ET.LxmlError, ValueError, TypeError) as exc:
            logger.error("Undo: snapshot failed: %s", exc)
            return None

    def _restore_snapshot_into_context(self, context: OutlineContext, snap: _Snapshot) -> bool:
        """Restore *snap* into *context* in place.

        The new tree is fully parsed before anything on the context changes,
        so a failed restore leaves the context as it was.
        """
        try:
            new_tree = NodeTree.from_bytes(snap.tree_xml)
        except (ET.LxmlError, ValueError) as exc:
            logger.error("Undo: restore failed: %s", exc)
            return False

        context.tree = new_tree
        context.texts.replace_all(snap.texts)
        context.buffer.root_node_id = snap.root_node_id
        context.buffer.expanded = dict(snap.expanded)
        context.buffer.selection = snap.selection
        context.buffer.last_focused_block_id = snap.last_focused_block_id
        return True
