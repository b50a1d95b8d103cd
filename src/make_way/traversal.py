"""
Whole-page traversal with a proximity filter.

An alternative to the local ripple: instead of sweeping one container at
a time and growing ancestors only when the ripple escapes them, a single
pass over the whole page decides what moves.

Visit (depth-first from the page), for every node:

  1. ancestor of the selection  -> recurse (ancestors never move, but their
                                   other descendants might)
  2. no vertical overlap        -> prune the branch
  3. at/after the selection's   -> collect it and prune its subtree
     right edge                    (descendants travel with it)
  4. otherwise                  -> recurse into children only

Filter: candidates sharing the selection's parent are always kept.  Any
other candidate is measured against ``X``, the member of the selection's
ancestor chain sitting directly under the deepest ancestor shared with the
candidate.  If the candidate starts more than ``max_gap`` beyond ``X``'s
right edge pushed forward by the requested amount, it is too remote to be
affected and is dropped.

Shift: survivors move by the full amount, rightmost first.  Then every
resizable, unlocked ancestor of the selection below the page grows by the
same amount.
"""

from __future__ import annotations

import logging
from typing import Optional

from .config import MAX_PROXIMITY_GAP
from .exceptions import MutationError
from .geometry import get_absolute_bounding_box, require_bounding_box
from .models import ROOT_TYPES, SceneNode
from .resize import grow_width

logger = logging.getLogger(__name__)


def collect_candidates(page: SceneNode, selected: SceneNode) -> list[SceneNode]:
    """Return every node on ``page`` that must move as a unit, in visit order."""
    selected_box = require_bounding_box(selected)
    candidates: list[SceneNode] = []

    stack = list(reversed(page.children))
    while stack:
        node = stack.pop()
        if node is selected:
            continue

        if node.is_ancestor_of(selected):
            stack.extend(reversed(node.children))
            continue

        box = get_absolute_bounding_box(node)
        if box is None:
            continue
        if not box.overlaps_vertically(selected_box):
            continue

        if box.x >= selected_box.right:
            if node.locked:
                logger.debug(f"[Traverse] Skipping locked '{node.get_label()}'")
            else:
                candidates.append(node)
            continue

        stack.extend(reversed(node.children))

    logger.info(f"[Traverse] Collected {len(candidates)} candidate(s)")
    return candidates


def _anchor_for(candidate: SceneNode, chain: list[SceneNode]) -> Optional[SceneNode]:
    """Find the selection-chain member directly under the shared ancestor."""
    for ancestor in candidate.ancestors():
        for index, member in enumerate(chain):
            if member is ancestor:
                return chain[index - 1] if index > 0 else None
    return None


def filter_by_proximity(
    candidates: list[SceneNode],
    selected: SceneNode,
    amount: float,
    max_gap: float = MAX_PROXIMITY_GAP,
) -> list[SceneNode]:
    """Drop candidates that are structurally too far from the selection."""
    chain = [selected, *selected.ancestors()]
    kept: list[SceneNode] = []

    for candidate in candidates:
        if candidate.parent is selected.parent:
            kept.append(candidate)
            continue

        anchor = _anchor_for(candidate, chain)
        anchor_box = get_absolute_bounding_box(anchor) if anchor is not None else None
        candidate_box = get_absolute_bounding_box(candidate)
        if anchor_box is None or candidate_box is None:
            logger.warning(f"[Filter] Cannot measure '{candidate.get_label()}', keeping it")
            kept.append(candidate)
            continue

        projected_edge = anchor_box.right + amount
        gap = candidate_box.x - projected_edge
        if gap > max_gap:
            logger.debug(
                f"[Filter] Dropping '{candidate.get_label()}': {gap}px beyond "
                f"'{anchor.get_label()}' (max {max_gap}px)"
            )
            continue
        kept.append(candidate)

    return kept


def shift_candidates(candidates: list[SceneNode], amount: float) -> list[SceneNode]:
    """Move each candidate by ``amount`` once, rightmost first.

    Returns the candidates that actually moved.
    """
    positioned = []
    for candidate in candidates:
        box = get_absolute_bounding_box(candidate)
        if box is not None:
            positioned.append((box.x, candidate))
    positioned.sort(key=lambda pair: pair[0], reverse=True)

    moved = []
    for _, candidate in positioned:
        try:
            candidate.translate(amount)
        except MutationError as e:
            logger.warning(f"[Shift] Could not move '{candidate.get_label()}': {e}")
            continue
        moved.append(candidate)
    return moved


def grow_ancestors(selected: SceneNode, amount: float) -> list[SceneNode]:
    """Grow every resizable, unlocked ancestor below the page by ``amount``."""
    grown = []
    for ancestor in selected.ancestors():
        if ancestor.type in ROOT_TYPES:
            break
        if not ancestor.is_resizable or ancestor.locked:
            continue
        try:
            old_width = grow_width(ancestor, amount)
        except MutationError as e:
            logger.warning(f"[Grow] Could not resize '{ancestor.get_label()}': {e}")
            continue
        logger.info(f"[Grow] Resized '{ancestor.get_label()}' from {old_width}px to {ancestor.width}px")
        grown.append(ancestor)
    return grown
