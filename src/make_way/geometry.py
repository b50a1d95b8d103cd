"""Absolute bounding boxes for scene nodes.

Boxes are derived values: they are recomputed on demand and must never be
held across a mutation.  Moving or resizing a node invalidates every box
that was computed for it or for any of its descendants.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .exceptions import GeometryResolutionError
from .models import ROOT_TYPES, SceneNode


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned rectangle in page coordinates."""
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def overlaps_vertically(self, other: BoundingBox) -> bool:
        """Open-interval overlap on the y axis; touching edges do not overlap."""
        return self.y < other.bottom and self.bottom > other.y


def is_attached(node: SceneNode) -> bool:
    """True when no link of the parent chain is removed and it ends at a page or the document."""
    if node.is_removed:
        return False
    top = None
    for ancestor in node.ancestors():
        if ancestor.is_removed:
            return False
        top = ancestor
    return top is not None and top.type in ROOT_TYPES


def get_absolute_bounding_box(node: SceneNode) -> Optional[BoundingBox]:
    """Resolve a node's absolute box, or None if it has no geometry.

    Pages, the document, nodes without a size and detached nodes have no
    box.  The position comes from the translation column of the node's
    absolute transform.
    """
    if not node.is_geometric or not is_attached(node):
        return None

    transform = node.absolute_transform
    return BoundingBox(
        x=transform[0][2],
        y=transform[1][2],
        width=node.width,
        height=node.height,
    )


def require_bounding_box(node: SceneNode) -> BoundingBox:
    """Like ``get_absolute_bounding_box`` but raises when unresolvable."""
    box = get_absolute_bounding_box(node)
    if box is None:
        raise GeometryResolutionError(
            f"Could not determine the bounds of '{node.get_label()}' ({node.type})"
        )
    return box
