"""
The "Make Way" operation — open a horizontal gap right of the selection.

Two strategies are available behind ``MakeWayStrategy``:

``RippleStrategy`` (default)
    1. Drop a gap marker ``amount`` wide right of the selection.
    2. Sweep the selection's container from the marker.
    3. If the container is a section and the ripple reached its right
       edge, grow it by ``amount`` and propagate the growth upward.
       Pages are never resized.
    4. Remove the marker, whatever happened.

``TraversalStrategy``
    A single pass over the page with a proximity filter, then every
    resizable ancestor grows unconditionally (see ``traversal``).

``make_way()`` validates the request, runs one strategy inside the scene's
re-entrancy guard, and reports a ``MakeWayResult``.  Edits are additive:
positions change, containers on the escape path widen, heights never
change, nothing is deleted except the gap marker.  There is no rollback:
shifts applied before a failure are kept.
"""

from __future__ import annotations

import logging
import math
from typing import Optional, Protocol

from pydantic import BaseModel, Field

from .config import MakeWaySettings
from .exceptions import InputError, MakeWayError, MutationError, SelectionError
from .geometry import get_absolute_bounding_box
from .models import PAGE, TOP_LEVEL_PARENT_TYPES, SceneGraph, SceneNode
from .notifications import LoggingNotifier, Notifier
from .placeholder import gap_marker
from .resize import ResizeState, grow_width, propagate_resize
from .ripple import propagate_shift
from .traversal import collect_candidates, filter_by_proximity, grow_ancestors, shift_candidates

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def validate_selection(graph: SceneGraph) -> SceneNode:
    """Return the single selected top-level node, or raise ``SelectionError``."""
    selection = graph.selected_nodes()
    if len(selection) < 1:
        raise SelectionError("Please select a top level item")
    if len(selection) > 1:
        raise SelectionError("Please select exactly one top level item")

    node = selection[0]
    parent = node.parent
    if parent is None or parent.type not in TOP_LEVEL_PARENT_TYPES:
        raise SelectionError("Please select a node whose parent is the Page or a Section.")
    if not node.is_geometric:
        raise SelectionError("Selected node type is not supported for movement.")
    return node


def validate_amount(value) -> float:
    """Parse the requested gap; it must be a finite number greater than zero."""
    if value is None or isinstance(value, bool):
        raise InputError("Please enter a valid positive number for the space.")
    try:
        amount = float(value)
    except (TypeError, ValueError):
        raise InputError(f"Not a number: {value!r}. Please enter a valid positive number for the space.") from None
    if not math.isfinite(amount) or amount <= 0:
        raise InputError(f"Invalid space {value!r}. Please enter a valid positive number for the space.")
    return amount


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------

class MakeWayStrategy(Protocol):
    name: str

    def apply(
        self,
        graph: SceneGraph,
        selected: SceneNode,
        amount: float,
        notifier: Notifier,
    ) -> list[str]:
        """Perform the edit and return warnings for degraded steps."""
        ...


class RippleStrategy:
    """Local ripple with a gap marker and containment-aware resizing."""

    name = "ripple"

    def __init__(self, settings: Optional[MakeWaySettings] = None):
        self.settings = settings or MakeWaySettings()

    def apply(self, graph, selected, amount, notifier):
        warnings: list[str] = []
        container = selected.parent

        with gap_marker(
            graph,
            selected,
            amount,
            name=self.settings.placeholder_name,
            opacity=self.settings.placeholder_opacity,
        ) as marker:
            notifier.notify("Pushing items on the right...")
            frontier = propagate_shift(marker, container, amount)

            # A page is never resized and there is nothing above it to propagate to.
            if container.is_resizable:
                warnings.extend(self._resize_container(container, frontier, amount, notifier))

        return warnings

    def _resize_container(self, container, frontier, amount, notifier) -> list[str]:
        box = get_absolute_bounding_box(container)
        if box is None:
            message = "Could not determine initial parent bounds."
            notifier.notify(message, error=True)
            return [message]

        boundary = box.right
        logger.info(f"[Initial Resize Check] Parent boundary: {boundary}px. Ripple front: {frontier}px.")
        if frontier < boundary:
            logger.info(f"Ripple contained within local parent '{container.get_label()}'.")
            return []

        try:
            old_width = grow_width(container, amount)
        except MutationError as e:
            logger.error(f"Could not resize local parent '{container.get_label()}': {e}")
            return [str(e)]
        logger.info(
            f"Ripple reached boundary. Resized local parent '{container.get_label()}' "
            f"from {old_width}px to {container.width}px."
        )

        trace = propagate_resize(container, amount, 1)
        if trace.state in (ResizeState.UNRESOLVED, ResizeState.REJECTED):
            return [f"Upward propagation stopped at level {trace.depth} ({trace.state.value})"]
        return []


class TraversalStrategy:
    """Whole-page traversal with a proximity filter."""

    name = "traversal"

    def __init__(self, settings: Optional[MakeWaySettings] = None):
        self.settings = settings or MakeWaySettings()

    def apply(self, graph, selected, amount, notifier):
        warnings: list[str] = []
        page = next((a for a in selected.ancestors() if a.type == PAGE), graph.current_page)

        notifier.notify("Pushing items on the right...")
        candidates = collect_candidates(page, selected)
        kept = filter_by_proximity(candidates, selected, amount, self.settings.max_proximity_gap)
        moved = shift_candidates(kept, amount)
        if len(moved) < len(kept):
            warnings.append(f"{len(kept) - len(moved)} item(s) could not be moved")

        grow_ancestors(selected, amount)
        return warnings


STRATEGIES = {
    RippleStrategy.name: RippleStrategy,
    TraversalStrategy.name: TraversalStrategy,
}


def get_strategy(name: str, settings: Optional[MakeWaySettings] = None) -> MakeWayStrategy:
    try:
        strategy_cls = STRATEGIES[name]
    except KeyError:
        raise ValueError(f"Unknown strategy: {name!r} (expected one of {sorted(STRATEGIES)})") from None
    return strategy_cls(settings)


# ---------------------------------------------------------------------------
# Operation
# ---------------------------------------------------------------------------

class MakeWayResult(BaseModel):
    """Outcome of one make-way invocation."""
    success: bool
    message: str
    amount: Optional[float] = None
    strategy: str = "ripple"
    selected_id: Optional[str] = None
    moved: list[str] = Field(default_factory=list)
    resized: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    error_kind: Optional[str] = None


def _snapshot(graph: SceneGraph) -> dict[str, tuple[float, Optional[float]]]:
    return {node.id: (node.x, node.width) for node in graph.all_nodes()}


def _diff(graph: SceneGraph, before: dict[str, tuple[float, Optional[float]]]) -> tuple[list[str], list[str]]:
    moved, resized = [], []
    for node in graph.all_nodes():
        previous = before.get(node.id)
        if previous is None:
            continue
        if node.x != previous[0]:
            moved.append(node.id)
        if node.width != previous[1]:
            resized.append(node.id)
    return moved, resized


def make_way(
    graph: SceneGraph,
    amount,
    strategy: MakeWayStrategy | str | None = None,
    notifier: Optional[Notifier] = None,
    settings: Optional[MakeWaySettings] = None,
) -> MakeWayResult:
    """Open ``amount`` pixels of space right of the selected node.

    Args:
        graph: The scene; its selection must hold exactly one top-level node.
        amount: Requested gap.  Strings and numbers are accepted.
        strategy: A strategy instance or name; defaults to ``settings.strategy``.
        notifier: Receives start, completion and failure messages.
        settings: Defaults to ``MakeWaySettings()``.
    """
    settings = settings or MakeWaySettings()
    notifier = notifier or LoggingNotifier()
    if strategy is None or isinstance(strategy, str):
        strategy = get_strategy(strategy or settings.strategy, settings)

    try:
        value = validate_amount(amount)
        selected = validate_selection(graph)
    except (InputError, SelectionError) as e:
        notifier.notify(str(e), error=True)
        return MakeWayResult(
            success=False,
            message=str(e),
            strategy=strategy.name,
            error_kind=e.kind,
        )

    moved: list[str] = []
    resized: list[str] = []
    try:
        with graph.operation():
            logger.info(f"--- STARTING MOVEMENT: {selected.get_label()} ---")
            logger.info(f"SPACE_TO_CREATE: {value}px")
            before = _snapshot(graph)
            try:
                warnings = strategy.apply(graph, selected, value, notifier)
            finally:
                moved, resized = _diff(graph, before)
                logger.info("--- FINISHED MOVEMENT ---")
    except MakeWayError as e:
        logger.error(f"Make Way algorithm error: {e}")
        message = f"An error occurred during movement propagation: {e}"
        notifier.notify(message, error=True)
        return MakeWayResult(
            success=False,
            message=message,
            amount=value,
            strategy=strategy.name,
            selected_id=selected.id,
            moved=moved,
            resized=resized,
            error_kind=e.kind,
        )

    message = f'Created {value:g}px of space next to "{selected.get_label()}". Now go use that space!'
    notifier.notify(message)
    return MakeWayResult(
        success=True,
        message=message,
        amount=value,
        strategy=strategy.name,
        selected_id=selected.id,
        moved=moved,
        resized=resized,
        warnings=warnings,
    )
