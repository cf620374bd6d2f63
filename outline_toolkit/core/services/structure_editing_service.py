from __future__ import annotations

"""Service layer for structural edits on an outline buffer.

This module provides a UI-agnostic, testable service that encapsulates the
business logic for manipulating the outline structure: reordering and
relocating sibling runs, indenting/outdenting, merging on delete/backspace,
splitting on Enter and deleting subtrees.

Scope and guarantees:
- Operates purely in-memory on an OutlineContext, no file I/O nor UI imports.
- Boundary conditions (first sibling, root level, merges that would orphan
  children) are silent no-ops returning OperationResult(success=False, ...)
  with a "noop" message; the tree, the texts and the fold flags are left
  untouched.
- Stale identities raise NodeNotFoundError; they indicate a selection/tree
  desync and are not recoverable here.
- Every relocation goes through the tree's batch insert primitive, so a run
  of blocks always lands contiguous and in its original order.

When an operation moves the focus, the new target is returned in
``result.details["target"]`` as a Selection value; the caller applies it.

Examples
--------
Basic usage:

    service = StructureEditingService()
    result = service.swap(ctx, ["n-1"], "up")
    if not result.success:
        print(result.message)

"""

from dataclasses import dataclass
import logging
from typing import Any, Dict, List, Literal, Optional, Tuple

from outline_toolkit.core.errors import NodeNotFoundError
from outline_toolkit.core.models import OutlineContext, Position, Selection, TextSelection
from outline_toolkit.core.services.fold_service import FoldService


__all__ = ["OperationResult", "StructureEditingService"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OperationResult:
    """Result of a structural editing operation.

    Attributes
    ----------
    success
        Whether the operation changed anything.
    message
        Human-readable summary suitable for logs or UI display.
    details
        Optional structured details for diagnostics or caller logic, e.g.
        the focus ``target`` after the edit.
    """
    success: bool
    message: str
    details: Optional[Dict[str, Any]] = None

    @property
    def target(self) -> Optional[Selection]:
        return (self.details or {}).get("target")


class StructureEditingService:
    """Encapsulates structural edit operations on an outline buffer.

    Design principles:
    - No UI dependencies, no disk I/O.
    - No exceptions for expected boundary conditions; return OperationResult.
    - Validation happens before the first mutation so that refused
      operations leave the context unchanged.

    Parameters
    ----------
    fold_service : FoldService, optional
        Source of fold flags ("visible children") and sink for expanding a
        new parent after indent. A private instance is created when omitted.
    """

    def __init__(self, fold_service: Optional[FoldService] = None) -> None:
        self._fold = fold_service or FoldService()

    # -------------------------------------------------------------------------
    # Public API: relocation
    # -------------------------------------------------------------------------

    def swap(
        self,
        context: OutlineContext,
        node_ids: List[str],
        direction: Literal["up", "down"],
    ) -> OperationResult:
        """Exchange a block (or contiguous run) with its adjacent sibling.

        At the edge of the sibling group the run relocates across the parent
        boundary instead:

        - up past the first sibling: becomes the last children of the
          parent's previous sibling, else lands right before the parent;
        - down past the last sibling: becomes the first children of the
          parent's next sibling, else lands right after the parent.

        Nothing ever leaves the buffer root.

        Parameters
        ----------
        context : OutlineContext
            Session holding the tree and the buffer.
        node_ids : List[str]
            Consecutive sibling blocks to move, in any order.
        direction : Literal["up", "down"]
            Direction of the move.

        Returns
        -------
        OperationResult
            ``details["new_parent"]`` names the parent after the move.
        """
        logger.info("Edit: swap direction=%s count=%d", direction, len(node_ids or []))
        run = self._validate_run(context, node_ids)
        if run is None:
            return self._invalid("swap", node_ids)
        parent_id, ordered = run
        tree = context.tree

        if direction == "up":
            neighbour = tree.previous_sibling(ordered[0])
            if neighbour is not None:
                tree.insert_nodes(ordered, parent_id, Position.before(neighbour))
                return self._ok("swap", ordered, parent_id, "Moved block(s) up.")
            if parent_id == context.root_id:
                return self._noop("swap", ordered, "Cannot move up (first block of buffer).")
            grandparent_id = tree.get_parent(parent_id)
            aunt = tree.previous_sibling(parent_id)
            if aunt is not None:
                tree.insert_nodes(ordered, aunt, Position.end())
                return self._ok("swap", ordered, aunt, "Moved block(s) into previous parent.")
            tree.insert_nodes(ordered, grandparent_id, Position.before(parent_id))
            return self._ok("swap", ordered, grandparent_id, "Moved block(s) out before parent.")

        if direction == "down":
            neighbour = tree.next_sibling(ordered[-1])
            if neighbour is not None:
                tree.insert_nodes(ordered, parent_id, Position.after(neighbour))
                return self._ok("swap", ordered, parent_id, "Moved block(s) down.")
            if parent_id == context.root_id:
                return self._noop("swap", ordered, "Cannot move down (last block of buffer).")
            grandparent_id = tree.get_parent(parent_id)
            uncle = tree.next_sibling(parent_id)
            if uncle is not None:
                tree.insert_nodes(ordered, uncle, Position.start())
                return self._ok("swap", ordered, uncle, "Moved block(s) into next parent.")
            tree.insert_nodes(ordered, grandparent_id, Position.after(parent_id))
            return self._ok("swap", ordered, grandparent_id, "Moved block(s) out after parent.")

        return OperationResult(False, f"Unsupported move direction '{direction}'.", {"allowed": ["up", "down"]})

    def move_to_extreme(
        self,
        context: OutlineContext,
        node_ids: List[str],
        direction: Literal["up", "down"],
    ) -> OperationResult:
        """Move a run to the first (up) or last (down) position among its siblings."""
        logger.info("Edit: move_to_extreme direction=%s count=%d", direction, len(node_ids or []))
        run = self._validate_run(context, node_ids)
        if run is None:
            return self._invalid("move_to_extreme", node_ids)
        parent_id, ordered = run
        siblings = context.tree.get_children(parent_id)

        if direction == "up":
            if siblings[0] == ordered[0]:
                return self._noop("move_to_extreme", ordered, "Already first.")
            context.tree.insert_nodes(ordered, parent_id, Position.start())
            return self._ok("move_to_extreme", ordered, parent_id, "Moved block(s) to first position.")
        if direction == "down":
            if siblings[-1] == ordered[-1]:
                return self._noop("move_to_extreme", ordered, "Already last.")
            context.tree.insert_nodes(ordered, parent_id, Position.end())
            return self._ok("move_to_extreme", ordered, parent_id, "Moved block(s) to last position.")
        return OperationResult(False, f"Unsupported move direction '{direction}'.", {"allowed": ["up", "down"]})

    def indent(self, context: OutlineContext, node_ids: List[str]) -> OperationResult:
        """Make the run the last children of the sibling right before it.

        The new parent is expanded so the moved blocks stay visible.
        """
        logger.info("Edit: indent count=%d", len(node_ids or []))
        run = self._validate_run(context, node_ids)
        if run is None:
            return self._invalid("indent", node_ids)
        _, ordered = run
        new_parent = context.tree.previous_sibling(ordered[0])
        if new_parent is None:
            return self._noop("indent", ordered, "Cannot indent (no previous sibling).")
        context.tree.insert_nodes(ordered, new_parent, Position.end())
        self._fold.expand_block(context, new_parent)
        return self._ok("indent", ordered, new_parent, "Indented block(s).")

    def outdent(self, context: OutlineContext, node_ids: List[str]) -> OperationResult:
        """Move the run to become siblings right after its current parent."""
        logger.info("Edit: outdent count=%d", len(node_ids or []))
        run = self._validate_run(context, node_ids)
        if run is None:
            return self._invalid("outdent", node_ids)
        parent_id, ordered = run
        if parent_id == context.root_id:
            return self._noop("outdent", ordered, "Cannot outdent (already at top level).")
        grandparent_id = context.tree.get_parent(parent_id)
        context.tree.insert_nodes(ordered, grandparent_id, Position.after(parent_id))
        return self._ok("outdent", ordered, grandparent_id, "Outdented block(s).")

    # -------------------------------------------------------------------------
    # Public API: text-bearing edits
    # -------------------------------------------------------------------------

    def merge_backward(self, context: OutlineContext, node_id: str) -> OperationResult:
        """Backspace at offset 0: append this block's text to the block above.

        The receiving block is the previous sibling's deepest visible last
        descendant (the previous sibling itself when it is childless or
        collapsed). Refused without a previous sibling, and when this block
        has children of its own.
        """
        logger.info("Edit: merge_backward node=%s", node_id)
        self._require_block(context, node_id)
        tree = context.tree
        if tree.has_children(node_id):
            return self._noop("merge_backward", [node_id], "Cannot merge a block that has children.")
        prev = tree.previous_sibling(node_id)
        if prev is None:
            return self._noop("merge_backward", [node_id], "Cannot merge (no previous sibling).")
        target_id = prev
        while self._fold.has_visible_children(context, target_id):
            target_id = tree.last_child(target_id)
        merge_point = self._absorb(context, target_id, node_id)
        logger.info("Edit OK: merge_backward node=%s into=%s offset=%d", node_id, target_id, merge_point)
        return OperationResult(
            True,
            "Merged block into previous.",
            {"removed": [node_id], "into": target_id, "target": TextSelection.caret(target_id, merge_point)},
        )

    def merge_forward(self, context: OutlineContext, node_id: str) -> OperationResult:
        """Delete at text end: pull the following block's text into this one.

        Decision tree:
        - visible children: merge the first child, only if it is childless;
        - otherwise: merge the next sibling, only if it is childless;
        - no next sibling: no-op (never crosses to the parent's sibling).
        """
        logger.info("Edit: merge_forward node=%s", node_id)
        self._require_block(context, node_id)
        tree = context.tree
        if self._fold.has_visible_children(context, node_id):
            source_id = tree.first_child(node_id)
        else:
            source_id = tree.next_sibling(node_id)
            if source_id is None:
                return self._noop("merge_forward", [node_id], "Cannot merge (no next sibling).")
        if tree.has_children(source_id):
            return self._noop("merge_forward", [node_id], "Cannot merge (would orphan children).")
        merge_point = self._absorb(context, node_id, source_id)
        logger.info("Edit OK: merge_forward node=%s from=%s offset=%d", node_id, source_id, merge_point)
        return OperationResult(
            True,
            "Merged following block.",
            {"removed": [source_id], "into": node_id, "target": TextSelection.caret(node_id, merge_point)},
        )

    def split(self, context: OutlineContext, node_id: str, start: int, end: Optional[int] = None) -> OperationResult:
        """Enter in a block: split its text at the caret.

        Any selected range ``[start, end)`` is removed first. With the caret at
        offset 0 and text after it, a new empty block is inserted before the
        current one. Otherwise the current block keeps the text before the
        caret and a new block after it receives the rest. The new block gets
        the caret at offset 0 either way.
        """
        logger.info("Edit: split node=%s offset=%s", node_id, start)
        self._require_block(context, node_id)
        text = context.texts.get_text(node_id)
        start, end = self._clamp_range(text, start, start if end is None else end)
        before, after = text[:start], text[end:]
        parent_id = context.tree.get_parent(node_id)

        if start == 0 and after:
            new_id = context.tree.insert_node(parent_id, Position.before(node_id))
            context.texts.set_text(new_id, "")
            context.texts.set_text(node_id, after)
        else:
            new_id = context.tree.insert_node(parent_id, Position.after(node_id))
            context.texts.set_text(node_id, before)
            context.texts.set_text(new_id, after)
        logger.info("Edit OK: split node=%s new=%s", node_id, new_id)
        return OperationResult(True, "Split block.", {"created": new_id, "target": TextSelection.caret(new_id, 0)})

    def split_title(self, context: OutlineContext, start: int, end: Optional[int] = None) -> OperationResult:
        """Enter in the title: text after the caret becomes a new first block."""
        root_id = context.root_id
        logger.info("Edit: split_title root=%s offset=%s", root_id, start)
        text = context.texts.get_text(root_id)
        start, end = self._clamp_range(text, start, start if end is None else end)
        new_id = context.tree.insert_node(root_id, Position.start())
        context.texts.set_text(root_id, text[:start])
        context.texts.set_text(new_id, text[end:])
        return OperationResult(True, "Split title.", {"created": new_id, "target": TextSelection.caret(new_id, 0)})

    # -------------------------------------------------------------------------
    # Public API: creation and deletion
    # -------------------------------------------------------------------------

    def create_sibling_after(self, context: OutlineContext, node_id: str, text: str = "") -> OperationResult:
        self._require_block(context, node_id)
        parent_id = context.tree.get_parent(node_id)
        new_id = context.tree.insert_node(parent_id, Position.after(node_id))
        context.texts.set_text(new_id, text)
        logger.info("Edit OK: create_sibling_after node=%s new=%s", node_id, new_id)
        return OperationResult(True, "Created block.", {"created": new_id, "target": TextSelection.caret(new_id, len(text))})

    def create_first_child(self, context: OutlineContext, node_id: str, text: str = "") -> OperationResult:
        """Insert a new first child under *node_id* (a block or the buffer root)."""
        if not context.tree.contains(node_id):
            raise NodeNotFoundError("Unknown node id", node_id)
        new_id = context.tree.insert_node(node_id, Position.start())
        context.texts.set_text(new_id, text)
        self._fold.expand_block(context, node_id)
        logger.info("Edit OK: create_first_child parent=%s new=%s", node_id, new_id)
        return OperationResult(True, "Created child block.", {"created": new_id, "target": TextSelection.caret(new_id, 0)})

    def append_block(self, context: OutlineContext, text: str = "") -> OperationResult:
        """Add a new last top-level block to the buffer."""
        new_id = context.tree.insert_node(context.root_id, Position.end())
        context.texts.set_text(new_id, text)
        logger.info("Edit OK: append_block root=%s new=%s", context.root_id, new_id)
        return OperationResult(True, "Created block.", {"created": new_id, "target": TextSelection.caret(new_id, 0)})

    def delete_blocks(self, context: OutlineContext, node_ids: List[str]) -> OperationResult:
        """Delete a run of blocks together with all their descendants.

        The focus goes to the previous sibling of the run, else the next
        remaining sibling, else the parent. ``details["focus"]`` is None when
        that parent is the buffer root (the title takes the focus).
        """
        logger.info("Edit: delete_blocks count=%d", len(node_ids or []))
        run = self._validate_run(context, node_ids)
        if run is None:
            return self._invalid("delete_blocks", node_ids)
        parent_id, ordered = run
        tree = context.tree
        focus = tree.previous_sibling(ordered[0]) or tree.next_sibling(ordered[-1])
        if focus is None and parent_id != context.root_id:
            focus = parent_id

        removed: List[str] = []
        for node_id in ordered:
            removed.extend(tree.delete_node(node_id))
        context.texts.delete_many(removed)
        self._fold.forget(context, removed)
        logger.info("Edit OK: delete_blocks removed=%d focus=%s", len(removed), focus)
        return OperationResult(
            True,
            f"Deleted {len(ordered)} block(s).",
            {"removed": removed, "deleted": ordered, "focus": focus},
        )

    # -------------------------------------------------------------------------
    # Internal helpers
    # -------------------------------------------------------------------------

    def _validate_run(self, context: OutlineContext, node_ids: List[str]) -> Optional[Tuple[str, List[str]]]:
        """Return ``(parent_id, ids in sibling order)`` for a contiguous run.

        Returns None when the ids are empty, not siblings, not contiguous or
        not inside the buffer root.
        """
        ids = list(dict.fromkeys(node_ids or []))
        if not ids:
            return None
        for node_id in ids:
            self._require_block(context, node_id)
        parent_id = context.tree.find_parent(ids[0])
        if parent_id is None:
            return None
        siblings = context.tree.get_children(parent_id)
        if any(node_id not in siblings for node_id in ids):
            return None
        positions = sorted(siblings.index(node_id) for node_id in ids)
        if positions[-1] - positions[0] != len(positions) - 1:
            return None
        root_id = context.root_id
        if parent_id != root_id and root_id not in context.tree.ancestors(parent_id):
            return None
        return parent_id, siblings[positions[0]:positions[-1] + 1]

    @staticmethod
    def _require_block(context: OutlineContext, node_id: str) -> None:
        if not context.tree.contains(node_id):
            raise NodeNotFoundError("Unknown node id", node_id)

    def _absorb(self, context: OutlineContext, into_id: str, source_id: str) -> int:
        """Append *source_id*'s text to *into_id*, delete *source_id*, return the merge point."""
        merge_point = context.texts.length(into_id)
        context.texts.set_text(into_id, context.texts.get_text(into_id) + context.texts.get_text(source_id))
        removed = context.tree.delete_node(source_id)
        context.texts.delete_many(removed)
        self._fold.forget(context, removed)
        return merge_point

    @staticmethod
    def _clamp_range(text: str, start: int, end: int) -> Tuple[int, int]:
        start, end = sorted((max(0, start), max(0, end)))
        return min(start, len(text)), min(end, len(text))

    @staticmethod
    def _ok(op: str, node_ids: List[str], new_parent: str, message: str) -> OperationResult:
        logger.info("Edit OK: %s count=%d new_parent=%s", op, len(node_ids), new_parent)
        return OperationResult(True, message, {"node_ids": list(node_ids), "new_parent": new_parent})

    @staticmethod
    def _noop(op: str, node_ids: List[str], message: str) -> OperationResult:
        logger.info("Edit noop: %s nodes=%s (%s)", op, list(node_ids), message)
        return OperationResult(False, f"{message} (noop)", {"node_ids": list(node_ids), "noop": True})

    @staticmethod
    def _invalid(op: str, node_ids: List[str]) -> OperationResult:
        logger.warning("Edit FAIL: %s not_consecutive_siblings nodes=%s", op, list(node_ids or []))
        return OperationResult(
            False,
            "Selected blocks must be consecutive siblings inside the buffer.",
            {"node_ids": list(node_ids or [])},
        )
