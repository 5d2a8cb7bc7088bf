"""
Path Router
===========
Builds the straight legs of a connector between two anchored points.

Why is this file needed?
------------------------
1. Routing: Connectors either jump straight from anchor to anchor ("direct")
   or walk one axis at a time in a requested order.
2. Extension: A connector may first leave its anchor along the face normal
   and enter the target anchor the same way.
3. Continuity: Every route is a continuous chain of segments, which the
   particle sampler and the depth resolver rely on.

Routes are recomputed from scratch whenever an endpoint, anchor or axis order
changes; nothing here patches a previous route.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
import logging
from typing import Iterable, Sequence, Union

from isoscene import config
from isoscene.model.anchors import Face
from isoscene.model.geometry_primitives import Point3D, Segment

logger = logging.getLogger(__name__)


class RouteAxis(StrEnum):
    X = "x"
    Y = "y"
    Z = "z"
    DIRECT = "direct"


class RouteMode(StrEnum):
    DIRECT = "direct"
    AXIS_WALK = "axis-walk"


# Completion order for axes the caller did not name
DEFAULT_AXIS_ORDER: tuple[RouteAxis, ...] = (RouteAxis.X, RouteAxis.Z, RouteAxis.Y)

_WALK_AXES = {RouteAxis.X.value, RouteAxis.Y.value, RouteAxis.Z.value}


@dataclass(frozen=True)
class AxisOrder:
    """
    Parsed routing instruction.

    `axes` always lists every walk axis exactly once: the requested ones
    first, in the order given, then the remaining ones in x, z, y order.
    """
    mode: RouteMode = RouteMode.AXIS_WALK
    axes: tuple[RouteAxis, ...] = DEFAULT_AXIS_ORDER
    requested: tuple[RouteAxis, ...] = field(default=(), compare=False)

    @staticmethod
    def parse(value: Union[str, Sequence[str], AxisOrder, None]) -> AxisOrder:
        """
        Build an AxisOrder from a token such as "auto", "direct", "y-x" or a
        sequence of axis letters. Unknown letters are dropped.
        """
        if isinstance(value, AxisOrder):
            return value
        if value is None:
            return AxisOrder()

        if isinstance(value, str):
            token = value.strip().lower()
            if token == RouteMode.DIRECT.value:
                return AxisOrder(mode=RouteMode.DIRECT)
            if token in ("", "auto"):
                return AxisOrder()
            letters: Iterable[str] = token.split("-")
        else:
            letters = [str(s).strip().lower() for s in value]

        requested: list[RouteAxis] = []
        for letter in letters:
            if letter not in _WALK_AXES:
                logger.warning(f"Ignoring unknown route axis '{letter}' in {value!r}.")
                continue
            axis = RouteAxis(letter)
            if axis not in requested:
                requested.append(axis)

        return AxisOrder.from_axes(requested)

    @staticmethod
    def from_axes(requested: Sequence[RouteAxis]) -> AxisOrder:
        remaining = [a for a in DEFAULT_AXIS_ORDER if a not in requested]
        return AxisOrder(
            mode=RouteMode.AXIS_WALK,
            axes=tuple(requested) + tuple(remaining),
            requested=tuple(requested),
        )

    def __str__(self) -> str:
        if self.mode is RouteMode.DIRECT:
            return RouteMode.DIRECT.value
        return "-".join(a.value for a in self.axes)


@dataclass(frozen=True)
class Route:
    """An ordered, continuous chain of segments."""
    origin: Point3D
    segments: tuple[Segment, ...] = ()
    total_length: float = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "total_length", sum(s.length for s in self.segments))

    @property
    def is_empty(self) -> bool:
        return len(self.segments) == 0

    @property
    def points(self) -> list[Point3D]:
        """Polyline vertices: the first start followed by every segment end."""
        if not self.segments:
            return [self.origin]
        return [self.segments[0].start] + [s.end for s in self.segments]


def _walk(
    start: Point3D,
    target: Point3D,
    axes: Sequence[RouteAxis],
    epsilon: float,
) -> tuple[list[Segment], Point3D]:
    """Axis-by-axis walk. Returns the segments and the final position."""
    segments: list[Segment] = []
    current = start
    for axis in axes:
        goal = target.coordinate(axis.value)
        if abs(goal - current.coordinate(axis.value)) < epsilon:
            continue
        nxt = current.with_coordinate(axis.value, goal)
        segments.append(Segment(start=current, end=nxt, axis=axis.value))
        current = nxt
    return segments, current


def compute_route(
    from_point: Point3D,
    to_point: Point3D,
    from_face: Face = Face.TOP,
    to_face: Face = Face.TOP,
    axis_order: Union[str, Sequence[str], AxisOrder, None] = "auto",
    perpendicular_extension: float = 0.0,
    epsilon: float = config.ROUTE_EPSILON,
) -> Route:
    """
    Compute the segments connecting two anchored points.

    Args:
        from_point: Resolved start anchor in logical space.
        to_point: Resolved end anchor in logical space.
        from_face: Face of the start anchor; its normal drives the first extension.
        to_face: Face of the end anchor; its normal drives the last extension.
        axis_order: "direct", "auto", a dash separated axis list ("y-x") or an AxisOrder.
        perpendicular_extension: Length of the normal legs at both ends (>= 0).
        epsilon: Axis differences below this value are treated as aligned.

    Returns:
        The Route. Coincident endpoints give an empty route.

    Raises:
        ValueError: If `perpendicular_extension` is negative.
    """
    if perpendicular_extension < 0:
        raise ValueError(f"Perpendicular extension must be >= 0, got {perpendicular_extension}.")

    order = AxisOrder.parse(axis_order)

    if from_point.is_close(to_point, config.COINCIDENT_TOLERANCE):
        logger.debug("Route endpoints coincide, no connector to draw.")
        return Route(origin=from_point)

    if order.mode is RouteMode.DIRECT:
        return Route(
            origin=from_point,
            segments=(Segment(start=from_point, end=to_point, axis=RouteAxis.DIRECT.value),),
        )

    segments: list[Segment] = []
    walk_start = from_point
    walk_target = to_point

    if perpendicular_extension > 0:
        walk_start = from_point + from_face.normal * perpendicular_extension
        walk_target = to_point + to_face.normal * perpendicular_extension
        segments.append(Segment(start=from_point, end=walk_start, axis=from_face.axis))

    walk, current = _walk(walk_start, walk_target, order.axes, epsilon)
    segments.extend(walk)

    if perpendicular_extension > 0:
        # Start from where the walk actually ended so sub-epsilon residues
        # never open a gap in the chain.
        segments.append(Segment(start=current, end=to_point, axis=to_face.axis))

    route = Route(origin=from_point, segments=tuple(segments))
    logger.debug(
        f"Routed {from_point} -> {to_point} via {order}: "
        f"{len(route.segments)} segments, length {route.total_length:.2f}"
    )
    return route
