"""Gap suggestions for parameter entry.

The suggested space is "enough to fit another copy of the selection":
the selection's width plus the gap it currently keeps to its nearest
right-hand neighbour, or ``default_gap`` when there is no neighbour.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .config import MakeWaySettings
from .exceptions import SelectionError
from .geometry import get_absolute_bounding_box
from .models import SceneGraph, SceneNode
from .operation import validate_selection
from .ripple import find_right_neighbours


@dataclass
class GapSuggestion:
    value: int
    width: int
    gap: int
    label: str


def nearest_gap(node: SceneNode) -> Optional[float]:
    """Distance from ``node``'s right edge to its nearest right-hand neighbour."""
    container = node.parent
    box = get_absolute_bounding_box(node)
    if container is None or box is None:
        return None

    neighbours = find_right_neighbours(node, container, box)
    if not neighbours:
        return None
    nearest_box = get_absolute_bounding_box(neighbours[0])
    if nearest_box is None:
        return None
    return round(nearest_box.x - box.right)


def suggest_gap(graph: SceneGraph, settings: Optional[MakeWaySettings] = None) -> Optional[GapSuggestion]:
    """Suggest a gap for the current selection, or None if it is not usable."""
    settings = settings or MakeWaySettings()
    try:
        node = validate_selection(graph)
    except SelectionError:
        return None

    width = round(node.width)
    gap = nearest_gap(node)
    if gap is None or gap <= 0:
        gap = round(settings.default_gap)

    value = width + gap
    return GapSuggestion(
        value=value,
        width=width,
        gap=gap,
        label=f"{value}px ({width}px + {gap}px for gap)",
    )
