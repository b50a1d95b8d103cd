"""
Upward resize propagation.

Once a container has grown, its own siblings may now overlap it and its
parent may no longer enclose it.  ``propagate_resize`` walks the ancestor
chain one level at a time:

    AT_ROOT        parent is the page/document: sweep the root's children
                   from the grown container and stop.
    UNDER_SECTION  parent is a resizable container: remember its right
                   edge, sweep its children from the grown container, and
                   grow it only if the ripple reached that edge.  Then
                   continue one level up.
    CONTAINED      the ripple stayed inside the parent: stop.
    UNRESOLVED     the container is detached or its parent's bounds could
                   not be resolved: stop.
    REJECTED       the parent refused to grow: stop.

Each step ascends exactly one level of a finite tree, so the walk always
ends; its depth is bounded by the height of the tree.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

from .exceptions import MutationError
from .geometry import get_absolute_bounding_box
from .models import ROOT_TYPES, SceneNode
from .ripple import propagate_shift

logger = logging.getLogger(__name__)


class ResizeState(str, Enum):
    AT_ROOT = "at_root"
    UNDER_SECTION = "under_section"
    CONTAINED = "contained"
    UNRESOLVED = "unresolved"
    REJECTED = "rejected"


@dataclass
class ResizeTrace:
    """What the upward walk did.

    Attributes:
        state: The terminal state the walk stopped in.
        depth: Level of the last container processed (the first call is 1).
        resized: Ids of ancestors grown by the walk, nearest first.
    """
    state: ResizeState = ResizeState.AT_ROOT
    depth: int = 0
    resized: list[str] = field(default_factory=list)


def grow_width(container: SceneNode, amount: float) -> float:
    """Grow a container's width by ``amount`` keeping its height.

    Returns the old width.  Propagates ``MutationError``.
    """
    old_width = container.width
    container.resize_without_constraints(container.width + amount, container.height)
    return old_width


def propagate_resize(resized_container: SceneNode, amount: float, level: int = 1) -> ResizeTrace:
    """Propagate the growth of ``resized_container`` up the tree.

    Must only be called after ``resized_container`` has already grown by
    ``amount``.  The walk is iterative: ``current`` is the container that
    just grew and ``level`` how far above the selection it sits.
    """
    trace = ResizeTrace(depth=level)
    current = resized_container

    while True:
        parent = current.parent
        log_prefix = f"[Resize Propagate L{level}]"
        trace.depth = level

        if parent is None:
            logger.warning(f"{log_prefix} '{current.get_label()}' is detached. Stopping.")
            trace.state = ResizeState.UNRESOLVED
            return trace

        # --- AT_ROOT: final sweep against the page, then stop ---
        if parent.type in ROOT_TYPES:
            propagate_shift(current, parent, amount)
            logger.info(f"{log_prefix} Stopping upward propagation at top level.")
            trace.state = ResizeState.AT_ROOT
            return trace

        # --- UNDER_SECTION ---
        parent_box = get_absolute_bounding_box(parent)
        if parent_box is None:
            logger.warning(
                f"{log_prefix} Could not get absolute box for parent '{parent.get_label()}'. Stopping."
            )
            trace.state = ResizeState.UNRESOLVED
            return trace

        # Boundary is taken BEFORE anything in this step changes.
        boundary = parent_box.right
        logger.info(f"{log_prefix} Parent '{parent.get_label()}' boundary (absolute X): {boundary}px.")

        frontier = propagate_shift(current, parent, amount)
        logger.info(f"{log_prefix} Final ripple frontier (absolute X): {frontier}px.")

        if frontier < boundary:
            logger.info(
                f"{log_prefix} Ripple contained within '{parent.get_label()}' "
                f"({frontier}px < {boundary}px). Stopping."
            )
            trace.state = ResizeState.CONTAINED
            return trace

        try:
            old_width = grow_width(parent, amount)
        except MutationError as e:
            logger.error(f"{log_prefix} Could not resize '{parent.get_label()}': {e}")
            trace.state = ResizeState.REJECTED
            return trace

        logger.info(
            f"{log_prefix} Resized parent '{parent.get_label()}' from {old_width}px to {parent.width}px."
        )
        trace.resized.append(parent.id)
        current = parent
        level += 1
