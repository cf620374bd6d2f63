from __future__ import annotations

"""Controllers translating key presses into service calls."""

from .keymap import KeyEvent, Keymap  # noqa: F401
from .outline_controller import KeyResult, OutlineController  # noqa: F401

__all__: list[str] = [
    "KeyEvent",
    "Keymap",
    "KeyResult",
    "OutlineController",
]
