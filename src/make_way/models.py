"""
Data models for Make Way — the scene graph.

The scene graph is a tree of positioned rectangles:

    Document
    └── Page       — the canvas the user works on (not resizable)
        ├── Section    — a resizable grouping container
        │   ├── Section    (sections nest)
        │   └── Shape / Frame
        └── Shape / Frame

Every node has an ``id`` (unique across the document) and an optional
``name`` used in log lines and notifications.  Positions are *local*: a
child's ``x``/``y`` are relative to its parent container.  The absolute
position is obtained from ``absolute_transform``, which accumulates the
translation of every geometric ancestor.  Pages and the document have no
geometry of their own.

Node types
----------

    shape    — a leaf element (rectangle, text, vector, ...)
    frame    — a container whose children move with it
    section  — a resizable grouping container; may hold top-level nodes
    page     — the page root; children of a page are top-level nodes
    document — the document root; holds pages

Mutation surface
----------------

The layout engine only ever writes through four primitives:
``translate()`` (or plain ``x`` assignment), ``resize_without_constraints()``,
``append_child()`` and ``remove()``.  Everything else is a read-only query.

Identity
--------

Two nodes are equal when their ids are equal, and nodes hash by id.  This
keeps membership tests and sets cheap and stops pydantic from comparing
whole subtrees (and parent links) field by field.
"""

from __future__ import annotations

import uuid
from contextlib import contextmanager
from typing import Iterator, Optional

from pydantic import BaseModel, Field, PrivateAttr, field_validator

from .exceptions import MutationError, OperationInProgressError


# ---------------------------------------------------------------------------
# Node types
# ---------------------------------------------------------------------------

SHAPE = "shape"
FRAME = "frame"
SECTION = "section"
PAGE = "page"
DOCUMENT = "document"

NODE_TYPES = (SHAPE, FRAME, SECTION, PAGE, DOCUMENT)

# Terminal containers: never resized, never positioned.
ROOT_TYPES = frozenset({PAGE, DOCUMENT})

# Containers that grow when a ripple escapes them.
RESIZABLE_TYPES = frozenset({SECTION, FRAME})

# A node is "top-level" when its parent is one of these.
TOP_LEVEL_PARENT_TYPES = frozenset({PAGE, SECTION})

Transform = tuple[tuple[float, float, float], tuple[float, float, float]]


# ---------------------------------------------------------------------------
# SceneNode
# ---------------------------------------------------------------------------

class SceneNode(BaseModel):
    """A positioned rectangle in the scene graph.

    Attributes:
        id:        Unique, stable identifier.
        name:      Display name (falls back to id, see ``get_label()``).
        type:      One of ``NODE_TYPES``.
        x, y:      Position relative to the parent container.
        width, height: Own geometry; ``None`` for pages and the document.
        locked:    Locked nodes are never pushed by a ripple.
        visible:   Visibility flag (carried, not used by the engine).
        opacity:   0.0 – 1.0.
        fill:      Hex fill colour used by the preview renderer.
        max_width: Optional resize constraint; growing past it is rejected.
        children:  Ordered child nodes, owned by this node.
    """
    id: str
    name: str = ""
    type: str = SHAPE
    x: float = 0.0
    y: float = 0.0
    width: Optional[float] = None
    height: Optional[float] = None
    locked: bool = False
    visible: bool = True
    opacity: float = 1.0
    fill: Optional[str] = None
    max_width: Optional[float] = None
    children: list[SceneNode] = Field(default_factory=list)

    _parent: Optional[SceneNode] = PrivateAttr(default=None)
    _removed: bool = PrivateAttr(default=False)

    @field_validator("type")
    @classmethod
    def _check_type(cls, value: str) -> str:
        value = value.lower()
        if value not in NODE_TYPES:
            raise ValueError(f"Unknown node type: {value!r}")
        return value

    def model_post_init(self, __context):
        """Link children back to this node."""
        for child in self.children:
            child._parent = self

    def __eq__(self, other):
        if not isinstance(other, SceneNode):
            return NotImplemented
        return self.id == other.id

    def __hash__(self):
        return hash(self.id)

    def __repr__(self):
        return (
            f"SceneNode(id={self.id!r}, type={self.type!r}, x={self.x}, "
            f"y={self.y}, width={self.width}, height={self.height})"
        )

    # --- Hierarchy queries ---

    @property
    def parent(self) -> Optional[SceneNode]:
        return self._parent

    @property
    def is_removed(self) -> bool:
        return self._removed

    @property
    def is_geometric(self) -> bool:
        """True when the node has a position and a size of its own."""
        return (
            self.type not in ROOT_TYPES
            and self.width is not None
            and self.height is not None
        )

    @property
    def is_resizable(self) -> bool:
        return self.type in RESIZABLE_TYPES

    def get_label(self) -> str:
        """Return ``name`` if set, otherwise ``id``."""
        return self.name if self.name else self.id

    def ancestors(self) -> Iterator[SceneNode]:
        """Yield the parent chain, nearest first."""
        node = self._parent
        while node is not None:
            yield node
            node = node._parent

    def is_ancestor_of(self, other: SceneNode) -> bool:
        return any(ancestor is self for ancestor in other.ancestors())

    def walk(self) -> Iterator[SceneNode]:
        """Depth-first, pre-order iteration over this node and its subtree."""
        yield self
        for child in self.children:
            yield from child.walk()

    @property
    def absolute_transform(self) -> Transform:
        """The 2x3 affine transform from local to page coordinates.

        Only translation is modelled; the matrix form is kept so callers
        read the position from ``[0][2]`` / ``[1][2]``.
        """
        tx = self.x if self.type not in ROOT_TYPES else 0.0
        ty = self.y if self.type not in ROOT_TYPES else 0.0
        for ancestor in self.ancestors():
            if ancestor.type in ROOT_TYPES:
                continue
            tx += ancestor.x
            ty += ancestor.y
        return ((1.0, 0.0, tx), (0.0, 1.0, ty))

    # --- Mutation primitives ---

    def _check_mutable(self, action: str) -> None:
        if self._removed:
            raise MutationError(f"Cannot {action} '{self.get_label()}': node was removed")
        if self.type in ROOT_TYPES:
            raise MutationError(f"Cannot {action} a {self.type} node")

    def translate(self, dx: float, dy: float = 0.0) -> None:
        """Move the node by (dx, dy) in its parent's coordinate space."""
        self._check_mutable("move")
        self.x += dx
        self.y += dy

    def resize_without_constraints(self, width: float, height: float) -> None:
        """Set width/height without re-laying out children."""
        self._check_mutable("resize")
        if width <= 0 or height <= 0:
            raise MutationError(
                f"Cannot resize '{self.get_label()}' to {width}x{height}: size must be positive"
            )
        if self.max_width is not None and width > self.max_width:
            raise MutationError(
                f"Cannot resize '{self.get_label()}' to width {width}: "
                f"constraint max_width={self.max_width}"
            )
        self.width = width
        self.height = height

    def append_child(self, child: SceneNode) -> None:
        """Attach ``child`` as the last child, detaching it from any old parent."""
        if child._parent is not None:
            child._parent._detach(child)
        child._parent = self
        child._removed = False
        self.children.append(child)

    def remove(self) -> None:
        """Detach this node from the tree.  Removed nodes reject mutation."""
        if self._parent is not None:
            self._parent._detach(self)
        self._parent = None
        self._removed = True

    def _detach(self, child: SceneNode) -> None:
        self.children = [c for c in self.children if c is not child]


# ---------------------------------------------------------------------------
# SceneGraph (the handle passed to every component)
# ---------------------------------------------------------------------------

def _default_document() -> SceneNode:
    return SceneNode(id="document", type=DOCUMENT, name="Document")


class SceneGraph(BaseModel):
    """The root handle for one scene.

    Holds the document tree, the current page and the current selection
    (a list of node ids, captured once at the start of an operation).
    Components receive the handle explicitly; there is no global scene.

    Re-entrancy
    -----------
    ``operation()`` is a context manager marking an edit in flight.
    Entering it a second time before the first exits raises
    ``OperationInProgressError``.
    """
    title: str = "Untitled Scene"
    document: SceneNode = Field(default_factory=_default_document)
    current_page_id: Optional[str] = None
    selection: list[str] = Field(default_factory=list)

    _busy: bool = PrivateAttr(default=False)

    def model_post_init(self, __context):
        """Make sure there is at least one page and a current page."""
        if self.document.type != DOCUMENT:
            raise ValueError("SceneGraph.document must be a document node")
        if not self.pages():
            self.document.append_child(SceneNode(id="page-1", type=PAGE, name="Page 1"))
        if self.current_page_id is None:
            self.current_page_id = self.pages()[0].id

    def pages(self) -> list[SceneNode]:
        return [child for child in self.document.children if child.type == PAGE]

    @property
    def current_page(self) -> SceneNode:
        for page in self.pages():
            if page.id == self.current_page_id:
                return page
        return self.pages()[0]

    @property
    def busy(self) -> bool:
        return self._busy

    def get_node(self, node_id: str) -> Optional[SceneNode]:
        """Look up a node by id anywhere in the document."""
        for node in self.document.walk():
            if node.id == node_id:
                return node
        return None

    def all_nodes(self) -> list[SceneNode]:
        """Return every node below the document root, pre-order."""
        return [node for node in self.document.walk() if node is not self.document]

    def selected_nodes(self) -> list[SceneNode]:
        nodes = []
        for node_id in self.selection:
            node = self.get_node(node_id)
            if node is not None:
                nodes.append(node)
        return nodes

    def select(self, *node_ids: str) -> None:
        self.selection = list(node_ids)

    def create_frame(self, name: str = "Frame", node_id: Optional[str] = None, **fields) -> SceneNode:
        """Create a detached frame node; the caller appends it where needed."""
        return SceneNode(
            id=node_id or f"frame-{uuid.uuid4().hex[:8]}",
            type=FRAME,
            name=name,
            **fields,
        )

    @contextmanager
    def operation(self) -> Iterator[SceneGraph]:
        """Mark an edit in flight for the duration of the block."""
        if self._busy:
            raise OperationInProgressError("An operation is already running on this scene")
        self._busy = True
        try:
            yield self
        finally:
            self._busy = False
