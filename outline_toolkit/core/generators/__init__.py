from __future__ import annotations

"""Export of outline subtrees to exchange formats."""

from .outline_builder import OutlineBuilder  # noqa: F401

__all__: list[str] = ["OutlineBuilder"]
