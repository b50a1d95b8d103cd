"""Error taxonomy for Make Way.

Every failure the engine reports is a ``MakeWayError``.  The ``kind``
attribute is a short stable tag that the operation result and the MCP
server echo back to the host, so callers can branch on the failure class
without importing the exception types.

    selection   — zero or several nodes selected, or not a top-level node
    input       — requested gap is not a finite positive number
    geometry    — a node's absolute bounding box cannot be computed
    mutation    — a move or resize primitive rejected the change
    busy        — an operation is already running on the scene graph
"""

from __future__ import annotations


class MakeWayError(Exception):
    """Base class for all Make Way failures."""

    kind = "error"


class SelectionError(MakeWayError):
    """The current selection cannot be used for a make-way edit."""

    kind = "selection"


class InputError(MakeWayError):
    """The requested gap is non-numeric, non-finite, zero or negative."""

    kind = "input"


class GeometryResolutionError(MakeWayError):
    """A node's absolute bounding box could not be resolved."""

    kind = "geometry"


class MutationError(MakeWayError):
    """A move or resize primitive rejected the requested change."""

    kind = "mutation"


class OperationInProgressError(MakeWayError):
    """Raised when an operation is started while another one is in flight."""

    kind = "busy"
