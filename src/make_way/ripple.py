"""
Ripple sweep — pushes colliding siblings to the right.

Given a node whose right edge is the *push frontier* and the container it
lives in, the sweep shifts every sibling the frontier runs into, advancing
the frontier to each moved sibling's new right edge:

    before   [start]|frontier   [a]  [b]        [c]
    after    [start]  ...gap...   [a]  [b]      [c]

Candidates are the container's children that are

  - not the start node and not locked,
  - geometric (have a resolvable box),
  - vertically overlapping the start node (open interval), and
  - starting at or to the right of the start node's left edge.

They are sorted left-to-right and scanned once.  The first candidate that
clears the frontier ends the scan: every later candidate starts even
further right, so none of them can collide either.  Each sibling moves at
most once per sweep, and the sweep never recurses.  A candidate that refuses
to move is skipped like a locked one.

The return value is the final frontier, which tells the caller how far
the disturbance reached (used to decide whether a container must grow).
"""

from __future__ import annotations

import logging
from typing import Optional

from .exceptions import MutationError
from .geometry import BoundingBox, get_absolute_bounding_box, require_bounding_box
from .models import SceneNode

logger = logging.getLogger(__name__)


def find_right_neighbours(
    node: SceneNode,
    container: SceneNode,
    node_box: Optional[BoundingBox] = None,
) -> list[SceneNode]:
    """Return the siblings a push from ``node`` may hit, sorted by absolute x.

    Ties (siblings starting at exactly ``node``'s x) are included.
    """
    start_box = node_box or require_bounding_box(node)

    candidates: list[tuple[float, SceneNode]] = []
    for sibling in container.children:
        if sibling is node or sibling.locked:
            continue
        box = get_absolute_bounding_box(sibling)
        if box is None:
            continue
        if not box.overlaps_vertically(start_box):
            continue
        if box.x < start_box.x:
            continue
        candidates.append((box.x, sibling))

    # sorted() is stable: equal x keeps child order
    candidates.sort(key=lambda pair: pair[0])
    return [sibling for _, sibling in candidates]


def propagate_shift(start_node: SceneNode, container: SceneNode, shift_amount: float) -> float:
    """Shift every sibling of ``start_node`` that the push frontier collides with.

    Args:
        start_node: The node whose right edge defines the initial frontier.
            It may be a placeholder positioned inside ``container``.
        container: The common parent whose children are swept.
        shift_amount: Distance every colliding sibling is moved along x.

    Returns:
        The absolute x of the final frontier.  Never less than the start
        node's right edge.

    Raises:
        GeometryResolutionError: if the start node itself has no box.
    """
    start_box = require_bounding_box(start_node)
    frontier = start_box.right

    siblings = find_right_neighbours(start_node, container, start_box)
    logger.debug(
        f"[Sweep] '{start_node.get_label()}' in '{container.get_label()}': "
        f"frontier={frontier}, {len(siblings)} candidate(s)"
    )

    for sibling in siblings:
        box = get_absolute_bounding_box(sibling)
        if box is None:
            logger.warning(f"[Sweep] Lost bounds of '{sibling.get_label()}' mid-scan. Stopping.")
            break

        if box.x >= frontier:
            # Sorted by x: nothing further right can collide.
            break

        old_x = sibling.x
        try:
            sibling.translate(shift_amount)
        except MutationError as e:
            # Left in place like a locked node; the frontier does not advance.
            logger.warning(f"[Sweep] Could not move '{sibling.get_label()}': {e}. Skipping it.")
            continue
        logger.debug(
            f"[Sweep] Moved '{sibling.get_label()}' from x: {old_x} to x: {sibling.x} "
            f"(Shift: {shift_amount}px)"
        )

        moved_box = get_absolute_bounding_box(sibling)
        if moved_box is None:
            logger.warning(f"[Sweep] Lost bounds of '{sibling.get_label()}' after move. Stopping.")
            break
        frontier = max(frontier, moved_box.right)

    return frontier
