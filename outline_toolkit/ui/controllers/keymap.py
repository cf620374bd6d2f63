from __future__ import annotations

"""Key events and the key-combination to command table.

Combinations are written as ``Shift+Alt+Mod+Key`` where ``Mod`` stands for
the platform command modifier (Ctrl, or Cmd on macOS). Modifier order in
configuration files does not matter; :attr:`KeyEvent.combo` always renders
them in the canonical order above.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional

from outline_toolkit.config import ConfigManager

logger = logging.getLogger(__name__)

__all__ = ["KeyEvent", "Keymap"]

_MODIFIER_ALIASES = {
    "shift": "shift",
    "alt": "alt",
    "option": "alt",
    "mod": "mod",
    "ctrl": "mod",
    "control": "mod",
    "cmd": "mod",
    "meta": "mod",
}

_KEY_ALIASES = {
    "up": "ArrowUp",
    "down": "ArrowDown",
    "left": "ArrowLeft",
    "right": "ArrowRight",
    "esc": "Escape",
    "return": "Enter",
    "del": "Delete",
    " ": "Space",
    "spacebar": "Space",
}


def _normalize_key(key: str) -> str:
    if key in _KEY_ALIASES:
        return _KEY_ALIASES[key]
    lowered = key.lower()
    if lowered in _KEY_ALIASES:
        return _KEY_ALIASES[lowered]
    if len(key) == 1:
        return key.upper()
    return key[:1].upper() + key[1:]


@dataclass(frozen=True)
class KeyEvent:
    """A key press as delivered by the render layer.

    Attributes
    ----------
    key
        Key name (``"ArrowUp"``, ``"Enter"``, ``"A"``, ``"."``...).
    shift, alt, mod
        Modifier state.
    caret_x
        Caret column measured by the render layer, if known.
    on_first_line, on_last_line
        Whether the caret sits on the first/last visual line of its text,
        if the render layer measured it. Without these hints the core uses
        its own line model.
    """
    key: str
    shift: bool = False
    alt: bool = False
    mod: bool = False
    caret_x: Optional[int] = None
    on_first_line: Optional[bool] = None
    on_last_line: Optional[bool] = None

    @classmethod
    def parse(cls, combo: str, **hints) -> "KeyEvent":
        """Build an event from a combination string such as ``"Shift+Mod+ArrowDown"``.

        Raises
        ------
        ValueError
            If the combination names no key or an unknown modifier.
        """
        parts = [part.strip() for part in combo.split("+")]
        if not parts or not parts[-1]:
            raise ValueError(f"Key combination has no key: {combo!r}")
        flags = {"shift": False, "alt": False, "mod": False}
        for part in parts[:-1]:
            modifier = _MODIFIER_ALIASES.get(part.lower())
            if modifier is None:
                raise ValueError(f"Unknown modifier {part!r} in {combo!r}")
            flags[modifier] = True
        return cls(_normalize_key(parts[-1]), **flags, **hints)

    @property
    def combo(self) -> str:
        parts = []
        if self.shift:
            parts.append("Shift")
        if self.alt:
            parts.append("Alt")
        if self.mod:
            parts.append("Mod")
        parts.append(_normalize_key(self.key))
        return "+".join(parts)


class Keymap:
    """Lookup table from key combinations to command names.

    Invalid combinations in *bindings* are logged and skipped; a binding set
    to ``None`` is left unbound.
    """

    def __init__(self, bindings: Mapping[str, Optional[str]]) -> None:
        self._bindings: Dict[str, str] = {}
        for combo, command in bindings.items():
            if not command:
                continue
            try:
                canonical = KeyEvent.parse(str(combo)).combo
            except ValueError as exc:
                logger.warning("Keymap: skipping binding %r: %s", combo, exc)
                continue
            self._bindings[canonical] = str(command)

    @classmethod
    def from_config(cls, config: Optional[Mapping] = None) -> "Keymap":
        """Build from a ``keymap`` config section; defaults to :class:`ConfigManager`."""
        if config is None:
            config = ConfigManager().get_keymap()
        return cls(config.get("bindings") or {})

    @property
    def bindings(self) -> Dict[str, str]:
        return dict(self._bindings)

    def command_for(self, event: KeyEvent) -> Optional[str]:
        return self._bindings.get(event.combo)

    def combos_for(self, command: str) -> List[str]:
        return [combo for combo, bound in self._bindings.items() if bound == command]
