from __future__ import annotations

"""OPML importer.

Reads OPML 2.0 documents (as written by
:class:`outline_toolkit.core.generators.outline_builder.OutlineBuilder` or by
other outliners) and turns them into a document root with one block per
``<outline>`` element.
"""

import logging
from pathlib import Path
from typing import List, Optional, Union

from lxml import etree as ET

from outline_toolkit.core.models import OutlineContext, Position

logger = logging.getLogger(__name__)

__all__ = ["OutlineImporter", "OutlineImportError"]


class OutlineImportError(Exception):
    """Exception raised when an OPML document cannot be imported."""

    def __init__(self, message: str, file_path: Optional[Path] = None, cause: Optional[Exception] = None):
        self.file_path = file_path
        self.cause = cause
        super().__init__(message)


class OutlineImporter:
    """Importer for OPML outline documents."""

    def can_import(self, file_path: Path) -> bool:
        """Check whether *file_path* looks like an OPML file."""
        if not file_path.exists() or not file_path.is_file():
            return False
        return file_path.suffix.lower() in self.get_supported_extensions()

    def load(self, data: bytes) -> OutlineContext:
        """Parse *data* into a fresh :class:`OutlineContext`.

        The OPML title becomes the document root text. ``_collapsed="true"``
        entries are folded in the new buffer.
        """
        opml = self._parse(data)
        context = OutlineContext.new_document(self._title(opml))
        count = self._import_body(context, opml, context.root_id)
        logger.info("Import: root=%s blocks=%d", context.root_id, count)
        return context

    def load_file(self, file_path: Union[str, Path]) -> OutlineContext:
        path = Path(file_path)
        try:
            data = path.read_bytes()
        except OSError as exc:
            raise OutlineImportError(f"Cannot read outline file: {exc}", path, exc) from exc
        try:
            return self.load(data)
        except OutlineImportError as exc:
            exc.file_path = path
            raise

    def import_into(self, context: OutlineContext, data: bytes) -> str:
        """Add the document in *data* to *context* as another document root.

        The buffer is left pointing where it was; the caller decides whether
        to switch to the new root. Returns the new root id.
        """
        opml = self._parse(data)
        root_id = context.tree.create_root()
        context.texts.set_text(root_id, self._title(opml))
        count = self._import_body(context, opml, root_id)
        logger.info("Import: added root=%s blocks=%d", root_id, count)
        return root_id

    def get_supported_extensions(self) -> List[str]:
        return [".opml", ".xml"]

    def get_format_description(self) -> str:
        return "OPML 2.0 outline"

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _parse(self, data: bytes) -> ET._Element:
        parser = ET.XMLParser(resolve_entities=False, no_network=True)
        try:
            root = ET.fromstring(data, parser)
        except ET.XMLSyntaxError as exc:
            raise OutlineImportError(f"Malformed outline document: {exc}", cause=exc) from exc
        if root.tag != "opml":
            raise OutlineImportError(f"Expected <opml> root element, found <{root.tag}>")
        if root.find("body") is None:
            raise OutlineImportError("Outline document has no <body>")
        return root

    @staticmethod
    def _title(opml: ET._Element) -> str:
        title = opml.findtext("head/title")
        return title or ""

    def _import_body(self, context: OutlineContext, opml: ET._Element, root_id: str) -> int:
        count = 0
        # (element, parent id) pairs; reversed pushes keep document order
        stack = [(elem, root_id) for elem in reversed(opml.find("body").findall("outline"))]
        while stack:
            elem, parent_id = stack.pop()
            node_id = self._insert(context, elem, parent_id)
            count += 1
            stack.extend((child, node_id) for child in reversed(elem.findall("outline")))
        return count

    def _insert(self, context: OutlineContext, elem: ET._Element, parent_id: str) -> str:
        wanted = elem.get("_id")
        if wanted and context.tree.contains(wanted):
            logger.debug("Import: id %s already in use, generating a new one", wanted)
            wanted = None
        node_id = context.tree.insert_node(parent_id, Position.end(), node_id=wanted or None)
        context.texts.set_text(node_id, elem.get("text", ""))
        if elem.get("_collapsed", "").lower() == "true" and len(elem.findall("outline")):
            context.buffer.expanded[node_id] = False
        return node_id
