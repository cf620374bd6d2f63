from __future__ import annotations

"""Per-buffer fold state with progressive expand/collapse.

Fold flags live on :attr:`Buffer.expanded` and default to expanded. A node
without children has no fold state: every operation on it reports no change.
The buffer's own root is always treated as expanded in that buffer.

Progressive folding works one hierarchy level per call:

* :meth:`FoldService.collapse_one_level` folds the deepest expanded subtrees
  first, so repeated calls walk from the leaves toward the target;
* :meth:`FoldService.expand_one_level` unfolds the shallowest collapsed
  subtrees first, so repeated calls drill downward.

Both are plain recursive functions returning whether anything changed.
"""

import logging
from typing import Iterable, List, Optional

from outline_toolkit.core.models import OutlineContext

__all__ = ["FoldService"]

logger = logging.getLogger(__name__)


class FoldService:
    """Read and change fold flags of an :class:`OutlineContext` buffer."""

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def is_expanded(self, context: OutlineContext, node_id: str) -> bool:
        if node_id == context.buffer.root_node_id:
            return True
        return context.buffer.expanded.get(node_id, True)

    def has_visible_children(self, context: OutlineContext, node_id: str) -> bool:
        return context.tree.has_children(node_id) and self.is_expanded(context, node_id)

    def hidden_by(self, context: OutlineContext, node_id: str) -> Optional[str]:
        """Return the shallowest collapsed ancestor hiding *node_id*, if any.

        Only ancestors strictly between the buffer root and the node count.
        """
        chain = self._ancestors_below_root(context, node_id)
        for ancestor_id in reversed(chain):
            if not self.is_expanded(context, ancestor_id):
                return ancestor_id
        return None

    # -------------------------------------------------------------------------
    # Single-block changes
    # -------------------------------------------------------------------------

    def set_expanded(self, context: OutlineContext, node_id: str, expanded: bool) -> bool:
        """Set the fold flag of *node_id*; return True if it changed."""
        if not context.tree.has_children(node_id):
            return False
        if self.is_expanded(context, node_id) == expanded:
            return False
        context.buffer.expanded[node_id] = expanded
        logger.debug("Fold: %s node=%s", "expand" if expanded else "collapse", node_id)
        return True

    def collapse_block(self, context: OutlineContext, node_id: str) -> bool:
        """Collapse *node_id* only, without touching its descendants."""
        return self.set_expanded(context, node_id, False)

    def expand_block(self, context: OutlineContext, node_id: str) -> bool:
        return self.set_expanded(context, node_id, True)

    def toggle(self, context: OutlineContext, node_id: str) -> bool:
        return self.set_expanded(context, node_id, not self.is_expanded(context, node_id))

    # -------------------------------------------------------------------------
    # Progressive folding
    # -------------------------------------------------------------------------

    def collapse_one_level(self, context: OutlineContext, node_id: str) -> bool:
        """Collapse the deepest expanded level under (and including) *node_id*.

        Children are tried first. If any of them reports a change, this node
        stays as it is. Otherwise the node itself collapses when it is
        expanded and has children.
        """
        children = context.tree.get_children(node_id)
        if not children or not self.is_expanded(context, node_id):
            return False
        changed_below = False
        for child_id in children:
            if self.collapse_one_level(context, child_id):
                changed_below = True
        if changed_below:
            return True
        if node_id == context.buffer.root_node_id:
            return False
        return self.collapse_block(context, node_id)

    def expand_one_level(self, context: OutlineContext, node_id: str) -> bool:
        """Expand the shallowest collapsed level under (and including) *node_id*."""
        children = context.tree.get_children(node_id)
        if not children:
            return False
        if not self.is_expanded(context, node_id):
            return self.expand_block(context, node_id)
        changed_below = False
        for child_id in children:
            if self.expand_one_level(context, child_id):
                changed_below = True
        return changed_below

    def collapse_all_levels(self, context: OutlineContext, node_id: str) -> bool:
        changed = False
        while self.collapse_one_level(context, node_id):
            changed = True
        return changed

    def expand_all_levels(self, context: OutlineContext, node_id: str) -> bool:
        changed = False
        while self.expand_one_level(context, node_id):
            changed = True
        return changed

    def apply_each(self, context: OutlineContext, node_ids: Iterable[str], operation: str) -> bool:
        """Apply a fold *operation* independently to every node in *node_ids*.

        *operation* names one of the methods of this service, e.g.
        ``"collapse_one_level"``.
        """
        fold = getattr(self, operation)
        changed = False
        for node_id in list(node_ids):
            if fold(context, node_id):
                changed = True
        return changed

    # -------------------------------------------------------------------------
    # Visibility
    # -------------------------------------------------------------------------

    def expand_ancestors(self, context: OutlineContext, node_id: str) -> List[str]:
        """Expand every collapsed ancestor strictly between buffer root and *node_id*.

        Returns the ids that were expanded.
        """
        return self.expand_ancestors_for_nodes(context, [node_id])

    def expand_ancestors_for_nodes(self, context: OutlineContext, node_ids: Iterable[str]) -> List[str]:
        expanded: List[str] = []
        seen = set()
        for node_id in node_ids:
            for ancestor_id in self._ancestors_below_root(context, node_id):
                if ancestor_id in seen:
                    continue
                seen.add(ancestor_id)
                if self.expand_block(context, ancestor_id):
                    expanded.append(ancestor_id)
        if expanded:
            logger.debug("Fold: auto-expanded ancestors=%s", expanded)
        return expanded

    def forget(self, context: OutlineContext, node_ids: Iterable[str]) -> None:
        """Drop fold flags of deleted nodes."""
        for node_id in node_ids:
            context.buffer.expanded.pop(node_id, None)

    # -------------------------------------------------------------------------
    # Internal helpers
    # -------------------------------------------------------------------------

    def _ancestors_below_root(self, context: OutlineContext, node_id: str) -> List[str]:
        root_id = context.buffer.root_node_id
        if node_id == root_id:
            return []
        chain = context.tree.ancestors(node_id)
        if root_id not in chain:
            logger.warning("Fold: node=%s is outside buffer root=%s", node_id, root_id)
            return []
        return chain[: chain.index(root_id)]
