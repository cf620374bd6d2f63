from __future__ import annotations

"""Ordered forest storage for outline nodes.

The forest is kept as an lxml element tree. A single ``<outline>`` container
holds one ``<node>`` element per document root, and the child elements of a
node are its children in order. Element order is the only ranking signal.

Every structural mutation goes through :meth:`NodeTree.insert_nodes` or
:meth:`NodeTree.delete_node`; both validate before touching the tree so a
refused call leaves it unchanged.
"""

from dataclasses import dataclass
import logging
import uuid
from typing import Dict, Iterable, Iterator, List, Literal, Optional

from lxml import etree as ET

from outline_toolkit.core.errors import CycleRejectedError, NodeNotFoundError, NoParentError

logger = logging.getLogger(__name__)

__all__ = ["Position", "NodeTree", "generate_node_id"]

CONTAINER_TAG = "outline"
NODE_TAG = "node"


def generate_node_id() -> str:
    """Return a fresh, unique node identity."""
    return f"n-{uuid.uuid4().hex[:16]}"


@dataclass(frozen=True)
class Position:
    """Where to place nodes among the children of a parent.

    Attributes
    ----------
    kind
        ``"before"`` / ``"after"`` a sibling, or ``"start"`` / ``"end"`` of
        the child list.
    sibling_id
        Anchor sibling for ``before``/``after``; ignored otherwise.
    """
    kind: Literal["before", "after", "start", "end"]
    sibling_id: Optional[str] = None

    @classmethod
    def before(cls, sibling_id: str) -> "Position":
        return cls("before", sibling_id)

    @classmethod
    def after(cls, sibling_id: str) -> "Position":
        return cls("after", sibling_id)

    @classmethod
    def start(cls) -> "Position":
        return cls("start")

    @classmethod
    def end(cls) -> "Position":
        return cls("end")


class NodeTree:
    """Mutable ordered forest of outline nodes.

    Parameters
    ----------
    container : lxml element, optional
        Existing ``<outline>`` element to adopt (used when restoring
        snapshots or importing). A new empty container is created otherwise.
    """

    def __init__(self, container: Optional[ET._Element] = None) -> None:
        if container is None:
            container = ET.Element(CONTAINER_TAG)
        if container.tag != CONTAINER_TAG:
            raise ValueError(f"Expected <{CONTAINER_TAG}> container, got <{container.tag}>")
        self._container = container
        self._index: Dict[str, ET._Element] = {}
        for elem in container.iter(NODE_TAG):
            node_id = elem.get("id")
            if not node_id or node_id in self._index:
                raise ValueError(f"Invalid or duplicate node id: {node_id!r}")
            self._index[node_id] = elem

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    @property
    def container(self) -> ET._Element:
        return self._container

    def to_bytes(self) -> bytes:
        return ET.tostring(self._container, encoding="utf-8")

    @classmethod
    def from_bytes(cls, data: bytes) -> "NodeTree":
        return cls(ET.fromstring(data))

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._index)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._index

    def contains(self, node_id: str) -> bool:
        return node_id in self._index

    def roots(self) -> List[str]:
        """Return the document roots in order."""
        return [elem.get("id") for elem in self._container]

    def is_root(self, node_id: str) -> bool:
        return self._element(node_id).getparent() is self._container

    def get_parent(self, node_id: str) -> str:
        """Return the parent id of *node_id*.

        Raises
        ------
        NoParentError
            If *node_id* is a document root.
        """
        parent = self._element(node_id).getparent()
        if parent is None or parent is self._container:
            raise NoParentError("Node is a document root and has no parent", node_id)
        return parent.get("id")

    def find_parent(self, node_id: str) -> Optional[str]:
        """Like :meth:`get_parent` but returns None for a document root."""
        try:
            return self.get_parent(node_id)
        except NoParentError:
            return None

    def get_children(self, node_id: str) -> List[str]:
        return [child.get("id") for child in self._element(node_id)]

    def has_children(self, node_id: str) -> bool:
        return len(self._element(node_id)) > 0

    def child_count(self, node_id: str) -> int:
        return len(self._element(node_id))

    def first_child(self, node_id: str) -> Optional[str]:
        elem = self._element(node_id)
        return elem[0].get("id") if len(elem) else None

    def last_child(self, node_id: str) -> Optional[str]:
        elem = self._element(node_id)
        return elem[-1].get("id") if len(elem) else None

    def get_siblings(self, node_id: str) -> List[str]:
        """Return the ordered sibling group containing *node_id* (itself included)."""
        parent = self._element(node_id).getparent()
        return [sib.get("id") for sib in parent]

    def index_in_parent(self, node_id: str) -> int:
        elem = self._element(node_id)
        return elem.getparent().index(elem)

    def previous_sibling(self, node_id: str) -> Optional[str]:
        prev = self._element(node_id).getprevious()
        return prev.get("id") if prev is not None else None

    def next_sibling(self, node_id: str) -> Optional[str]:
        nxt = self._element(node_id).getnext()
        return nxt.get("id") if nxt is not None else None

    def get_all_descendants(self, node_id: str) -> List[str]:
        """Return every descendant of *node_id* in pre-order, excluding itself."""
        return [desc.get("id") for desc in self._element(node_id).iterdescendants(NODE_TAG)]

    def ancestors(self, node_id: str) -> List[str]:
        """Return ancestor ids from the parent up to the document root."""
        result: List[str] = []
        probe = self._element(node_id).getparent()
        while probe is not None and probe is not self._container:
            result.append(probe.get("id"))
            probe = probe.getparent()
        return result

    def depth(self, node_id: str) -> int:
        """Return 0 for a document root, 1 for its children, and so on."""
        return len(self.ancestors(node_id))

    def is_ancestor(self, ancestor_id: str, node_id: str) -> bool:
        """Return True if *ancestor_id* is a strict ancestor of *node_id*."""
        return self._is_ancestor_element(self._element(ancestor_id), self._element(node_id))

    def iter_subtree(self, node_id: str) -> Iterator[str]:
        """Yield *node_id* and its descendants in document order."""
        for elem in self._element(node_id).iter(NODE_TAG):
            yield elem.get("id")

    def find_previous_in_document_order(self, node_id: str) -> Optional[str]:
        """Previous node in fully-expanded pre-order, within one document.

        The previous sibling's deepest last descendant, else the parent.
        Returns None at the document root.
        """
        elem = self._element(node_id)
        prev = elem.getprevious()
        if prev is not None and elem.getparent() is not self._container:
            while len(prev):
                prev = prev[-1]
            return prev.get("id")
        parent = elem.getparent()
        if parent is None or parent is self._container:
            return None
        return parent.get("id")

    def find_next_in_document_order(self, node_id: str) -> Optional[str]:
        """Next node in fully-expanded pre-order, within one document.

        The first child, else the next sibling of the nearest ancestor-or-self
        that has one. Returns None past the end of the document.
        """
        elem = self._element(node_id)
        if len(elem):
            return elem[0].get("id")
        probe = elem
        while probe.getparent() is not None and probe.getparent() is not self._container:
            nxt = probe.getnext()
            if nxt is not None:
                return nxt.get("id")
            probe = probe.getparent()
        return None

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def create_root(self, node_id: Optional[str] = None) -> str:
        """Create a new document root and return its id."""
        node_id = node_id or generate_node_id()
        if node_id in self._index:
            raise ValueError(f"Node id already exists: {node_id}")
        elem = ET.SubElement(self._container, NODE_TAG, id=node_id)
        self._index[node_id] = elem
        logger.debug("Tree: create_root node=%s", node_id)
        return node_id

    def insert_node(self, parent_id: str, position: Position, node_id: Optional[str] = None) -> str:
        """Insert a new node, or move an existing one, under *parent_id*.

        Parameters
        ----------
        parent_id : str
            Target parent.
        position : Position
            Placement among the parent's children.
        node_id : str, optional
            When it names an existing node, that node (with its subtree) is
            moved instead of creating a new one.

        Returns
        -------
        str
            The inserted (or moved) node id.
        """
        if node_id is not None and node_id in self._index:
            self.insert_nodes([node_id], parent_id, position)
            return node_id

        parent = self._element(parent_id)
        index = self._resolve_index(parent, position)
        node_id = node_id or generate_node_id()
        elem = ET.Element(NODE_TAG, id=node_id)
        parent.insert(index, elem)
        self._index[node_id] = elem
        logger.debug("Tree: insert node=%s parent=%s position=%s", node_id, parent_id, position.kind)
        return node_id

    def insert_nodes(self, node_ids: Iterable[str], parent_id: str, position: Position) -> List[str]:
        """Place existing nodes, in the given order, at one position.

        This is the batch relocation primitive: the nodes end up contiguous
        and in *node_ids* order at *position*. The call is atomic; validation
        happens before any element is detached.

        Raises
        ------
        NodeNotFoundError
            If any id is unknown, or the anchor sibling is not a child of
            *parent_id*.
        CycleRejectedError
            If *parent_id* is one of the nodes or one of their descendants.
        ValueError
            If *node_ids* contains duplicates or the anchor sibling itself.
        """
        ids = list(node_ids)
        if len(set(ids)) != len(ids):
            raise ValueError("Duplicate node ids in batch insert")
        parent = self._element(parent_id)
        elements = [self._element(node_id) for node_id in ids]
        for node_id, elem in zip(ids, elements):
            if elem is parent or self._is_ancestor_element(elem, parent):
                raise CycleRejectedError(
                    "Relocation would make node its own ancestor", node_id, target_parent_id=parent_id
                )
        if position.kind in ("before", "after") and position.sibling_id in ids:
            raise ValueError("Anchor sibling cannot be part of the relocated nodes")
        # Validates the anchor before mutating anything.
        self._resolve_index(parent, position)

        for elem in elements:
            elem.getparent().remove(elem)
        index = self._resolve_index(parent, position)
        for offset, elem in enumerate(elements):
            parent.insert(index + offset, elem)
        logger.debug("Tree: insert_nodes count=%d parent=%s position=%s", len(ids), parent_id, position.kind)
        return ids

    def move_nodes(self, node_ids: Iterable[str], new_parent_id: str, position: Position) -> List[str]:
        """Relocate existing nodes; see :meth:`insert_nodes`."""
        return self.insert_nodes(node_ids, new_parent_id, position)

    def delete_node(self, node_id: str) -> List[str]:
        """Detach the subtree rooted at *node_id*.

        Returns the removed ids in pre-order (the node first) so that callers
        can cascade cleanup of associated text.
        """
        elem = self._element(node_id)
        removed = list(self.iter_subtree(node_id))
        elem.getparent().remove(elem)
        for removed_id in removed:
            self._index.pop(removed_id, None)
        logger.debug("Tree: delete node=%s removed=%d", node_id, len(removed))
        return removed

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _element(self, node_id: str) -> ET._Element:
        try:
            return self._index[node_id]
        except KeyError:
            raise NodeNotFoundError("Unknown node id", node_id) from None

    def _resolve_index(self, parent: ET._Element, position: Position) -> int:
        if position.kind == "start":
            return 0
        if position.kind == "end":
            return len(parent)
        if position.kind not in ("before", "after"):
            raise ValueError(f"Unsupported position kind: {position.kind}")
        if position.sibling_id is None:
            raise ValueError(f"Position '{position.kind}' requires a sibling id")
        anchor = self._element(position.sibling_id)
        if anchor.getparent() is not parent:
            raise NodeNotFoundError(
                f"Sibling is not a child of {parent.get('id')}", position.sibling_id
            )
        index = parent.index(anchor)
        return index if position.kind == "before" else index + 1

    @staticmethod
    def _is_ancestor_element(ancestor: ET._Element, elem: ET._Element) -> bool:
        probe = elem.getparent()
        while probe is not None:
            if probe is ancestor:
                return True
            probe = probe.getparent()
        return False
