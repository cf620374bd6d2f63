from __future__ import annotations

"""In-memory text storage keyed by node identity.

Block text is owned by a separate storage collaborator (in production a rich
text layer); the outline core only reads, replaces, measures and deletes
plain strings through this interface.
"""

from typing import Dict, Iterable, Mapping, Optional

__all__ = ["TextStore"]


class TextStore:
    """Plain-string text storage for outline nodes.

    Missing entries read as the empty string, so newly inserted nodes need no
    explicit initialisation.
    """

    def __init__(self, texts: Optional[Mapping[str, str]] = None) -> None:
        self._texts: Dict[str, str] = dict(texts or {})

    def get_text(self, node_id: str) -> str:
        return self._texts.get(node_id, "")

    def set_text(self, node_id: str, text: str) -> None:
        self._texts[node_id] = text

    def length(self, node_id: str) -> int:
        return len(self._texts.get(node_id, ""))

    def delete_text(self, node_id: str) -> None:
        self._texts.pop(node_id, None)

    def delete_many(self, node_ids: Iterable[str]) -> None:
        for node_id in node_ids:
            self._texts.pop(node_id, None)

    def replace_range(self, node_id: str, start: int, end: int, text: str) -> int:
        """Replace ``[start, end)`` with *text* and return the caret offset after it."""
        current = self.get_text(node_id)
        start, end = sorted((max(0, start), max(0, end)))
        start = min(start, len(current))
        end = min(end, len(current))
        self._texts[node_id] = current[:start] + text + current[end:]
        return start + len(text)

    def as_dict(self) -> Dict[str, str]:
        """Return a copy of the stored texts (used for snapshots)."""
        return dict(self._texts)

    def replace_all(self, texts: Mapping[str, str]) -> None:
        self._texts = dict(texts)
