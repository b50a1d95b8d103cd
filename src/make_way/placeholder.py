"""Temporary gap marker.

Opening N pixels of space next to a node is the same as pushing an object
N pixels wide: a near-invisible frame is dropped right of the selection
and the ripple sweep pushes from it.  The marker must never outlive the
operation, so it is handed out through ``gap_marker()`` which removes it
on every exit path.
"""

from __future__ import annotations

import logging
import uuid
from contextlib import contextmanager
from typing import Iterator

from .config import PLACEHOLDER_FILL, PLACEHOLDER_NAME, PLACEHOLDER_OPACITY
from .models import SceneGraph, SceneNode

logger = logging.getLogger(__name__)


def create_gap_marker(
    graph: SceneGraph,
    selected: SceneNode,
    amount: float,
    name: str = PLACEHOLDER_NAME,
    opacity: float = PLACEHOLDER_OPACITY,
) -> SceneNode:
    """Create the marker and append it to the selection's container.

    The marker is ``amount`` wide, as tall as ``selected``, and its left
    edge sits exactly on ``selected``'s right edge.
    """
    container = selected.parent
    if container is None:
        raise ValueError(f"'{selected.get_label()}' is not attached to a container")

    marker = graph.create_frame(
        name=name,
        node_id=f"make-way-temp-{uuid.uuid4().hex[:8]}",
        x=selected.x + selected.width,
        y=selected.y,
        width=amount,
        height=selected.height,
        opacity=opacity,
        fill=PLACEHOLDER_FILL,
    )
    container.append_child(marker)
    logger.info(f"1. Created temp node '{marker.name}' at x: {marker.x}, width: {marker.width}")
    return marker


@contextmanager
def gap_marker(
    graph: SceneGraph,
    selected: SceneNode,
    amount: float,
    name: str = PLACEHOLDER_NAME,
    opacity: float = PLACEHOLDER_OPACITY,
) -> Iterator[SceneNode]:
    """Yield a gap marker that is removed when the block exits, however it exits."""
    marker = create_gap_marker(graph, selected, amount, name=name, opacity=opacity)
    try:
        yield marker
    finally:
        marker.remove()
        logger.info(f"Removed temp node '{marker.name}'.")
