from __future__ import annotations

"""Buffer state and the session context passed to every service call."""

from dataclasses import dataclass, field
from typing import Dict, Optional

from outline_toolkit.core.models.node_tree import NodeTree
from outline_toolkit.core.models.selection import NO_SELECTION, Selection
from outline_toolkit.core.models.text_store import TextStore

__all__ = ["Buffer", "OutlineContext"]


@dataclass
class Buffer:
    """One open view onto a document subtree.

    Attributes
    ----------
    buffer_id
        Identity of the view.
    root_node_id
        Node shown as the title; its children are the top-level blocks.
    selection
        Current focus state (see :mod:`outline_toolkit.core.models.selection`).
    active
        True while the buffer owns keyboard focus, even with no selection.
    last_focused_block_id
        Block remembered across selection clearing.
    expanded
        Fold flags per node. Missing entries mean expanded.
    """
    buffer_id: str
    root_node_id: str
    selection: Selection = NO_SELECTION
    active: bool = False
    last_focused_block_id: Optional[str] = None
    expanded: Dict[str, bool] = field(default_factory=dict)


@dataclass
class OutlineContext:
    """Explicit editing session: the tree, its texts and one buffer."""
    tree: NodeTree
    texts: TextStore
    buffer: Buffer

    @property
    def root_id(self) -> str:
        return self.buffer.root_node_id

    @property
    def selection(self) -> Selection:
        return self.buffer.selection

    @classmethod
    def new_document(cls, title: str = "", buffer_id: str = "main") -> "OutlineContext":
        """Create a context holding a fresh document root titled *title*."""
        tree = NodeTree()
        texts = TextStore()
        root_id = tree.create_root()
        texts.set_text(root_id, title)
        return cls(tree=tree, texts=texts, buffer=Buffer(buffer_id=buffer_id, root_node_id=root_id))
