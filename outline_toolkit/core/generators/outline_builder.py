from __future__ import annotations

"""Export a buffer subtree as an OPML 2.0 document.

The buffer root becomes ``<head><title>`` and each block an ``<outline>``
element carrying its text. Identities and fold flags travel in the
underscore-prefixed attributes OPML reserves for application data
(``_id``, ``_collapsed``). This is an exchange format; nothing here
persists editor state.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from lxml import etree as ET

from outline_toolkit.core.models import OutlineContext
from outline_toolkit.core.services.fold_service import FoldService

logger = logging.getLogger(__name__)

__all__ = ["OutlineBuilder", "OPML_VERSION"]

OPML_VERSION = "2.0"


class OutlineBuilder:
    """Build OPML trees from an :class:`OutlineContext`."""

    def __init__(self, fold_service: Optional[FoldService] = None) -> None:
        self._fold = fold_service or FoldService()

    def build(self, context: OutlineContext, node_id: Optional[str] = None) -> ET._Element:
        """Return an ``<opml>`` element for the subtree under *node_id*.

        Defaults to the buffer root. The node itself is the title; only its
        descendants become ``<outline>`` entries.
        """
        root_id = node_id or context.root_id
        opml = ET.Element("opml", version=OPML_VERSION)
        head = ET.SubElement(opml, "head")
        ET.SubElement(head, "title").text = context.texts.get_text(root_id)
        ET.SubElement(head, "ownerId").text = root_id
        body = ET.SubElement(opml, "body")
        count = 0
        for child_id in context.tree.get_children(root_id):
            count += self._append_outline(context, body, child_id)
        logger.info("Export: root=%s blocks=%d", root_id, count)
        return opml

    def to_bytes(self, context: OutlineContext, node_id: Optional[str] = None, pretty_print: bool = True) -> bytes:
        return ET.tostring(
            self.build(context, node_id),
            xml_declaration=True,
            encoding="UTF-8",
            pretty_print=pretty_print,
        )

    def write(self, context: OutlineContext, path: Union[str, Path], node_id: Optional[str] = None) -> Path:
        target = Path(path)
        target.write_bytes(self.to_bytes(context, node_id))
        logger.info("Export: wrote %s", target)
        return target

    def _append_outline(self, context: OutlineContext, parent: ET._Element, node_id: str) -> int:
        elem = ET.SubElement(parent, "outline", text=context.texts.get_text(node_id), _id=node_id)
        children = context.tree.get_children(node_id)
        if children and not self._fold.is_expanded(context, node_id):
            elem.set("_collapsed", "true")
        count = 1
        for child_id in children:
            count += self._append_outline(context, elem, child_id)
        return count
