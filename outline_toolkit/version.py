# -*- coding: utf-8 -*-
"""Application version detection utilities.

Provides a single public function, ``get_app_version()``, which determines
the current version from a ``version.txt`` next to the package root, falling
back to the installed distribution metadata and finally to ``"vdev"``.
"""

from __future__ import annotations

from importlib import metadata
from pathlib import Path
from typing import Optional

_CACHED_VERSION: Optional[str] = None
_DISTRIBUTION = "outline-toolkit"


def get_app_version() -> str:
    """Return the application version string (e.g., ``v1.2.3``)."""
    global _CACHED_VERSION
    if _CACHED_VERSION:
        return _CACHED_VERSION

    text = _read_version_file()
    if not text:
        try:
            text = metadata.version(_DISTRIBUTION)
        except metadata.PackageNotFoundError:
            text = ""

    if text:
        _CACHED_VERSION = text if text.startswith("v") else f"v{text}"
    else:
        _CACHED_VERSION = "vdev"
    return _CACHED_VERSION


def _read_version_file() -> str:
    version_file = Path(__file__).resolve().parent.parent / "version.txt"
    if not version_file.exists():
        return ""
    return version_file.read_text(encoding="ascii", errors="ignore").strip()
