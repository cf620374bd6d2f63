from __future__ import annotations

"""Clipboard text production for selected blocks.

The core only produces a plain text blob; placing it on the OS clipboard is
the render layer's job and pasting is not handled here.
"""

import logging
from typing import Iterable, List, Optional

from outline_toolkit.core.errors import NodeNotFoundError
from outline_toolkit.core.models import OutlineContext

__all__ = ["ClipboardService", "DEFAULT_SEPARATOR"]

logger = logging.getLogger(__name__)

DEFAULT_SEPARATOR = "\n\n"


class ClipboardService:
    """Serialize block texts into a paragraph-joined blob.

    Parameters
    ----------
    separator : str, optional
        String placed between paragraphs (a blank line by default).
    """

    def __init__(self, separator: Optional[str] = None) -> None:
        self.separator = DEFAULT_SEPARATOR if separator is None else separator

    def ordered_for_copy(self, context: OutlineContext, node_ids: Iterable[str]) -> List[str]:
        """Return *node_ids* in document order, whatever order they were selected in."""
        wanted = list(dict.fromkeys(node_ids))
        for node_id in wanted:
            if not context.tree.contains(node_id):
                raise NodeNotFoundError("Cannot copy unknown node", node_id)
        rank = {node_id: index for index, node_id in enumerate(context.tree.iter_subtree(context.root_id))}
        return sorted(wanted, key=lambda node_id: rank.get(node_id, len(rank)))

    def copy_text(self, context: OutlineContext, node_ids: Iterable[str]) -> str:
        """Produce the clipboard blob for the given blocks."""
        ordered = self.ordered_for_copy(context, node_ids)
        blob = self.separator.join(context.texts.get_text(node_id) for node_id in ordered)
        logger.debug("Clipboard: copied blocks=%d chars=%d", len(ordered), len(blob))
        return blob
