from __future__ import annotations

"""Import functionality for outline exchange formats.

Key components:
- OutlineImporter: parses OPML documents into a document root
"""

from .outline_importer import OutlineImporter, OutlineImportError

__all__ = ["OutlineImporter", "OutlineImportError"]
