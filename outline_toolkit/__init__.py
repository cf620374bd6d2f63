"""Top-level package for Outline Toolkit.

A keyboard-driven block outline editor core. Front-ends should only depend on
the public API exposed here and in :mod:`outline_toolkit.ui.controllers`
rather than importing internal modules directly.
"""

from .core.models import OutlineContext  # re-export for convenience

__all__: list[str] = [
    "OutlineContext",
]
