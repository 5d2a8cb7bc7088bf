"""
Depth / Z-Order Resolver
========================
Scalar paint-order ranks for boxes and connector segments.

The ranking weights ground position far above height and is calibrated for
the default camera (rotateX=60, rotateZ=45) only. It is not claimed to hold
for other runtime-selected angles; `check_calibration` reports such use.
"""
from __future__ import annotations

import logging
from typing import Sequence, TYPE_CHECKING

from isoscene import config
from isoscene.model.geometry_primitives import Point3D, Segment

if TYPE_CHECKING:
    from isoscene.model.routing import Route
    from isoscene.model.transform import AngleConfig

logger = logging.getLogger(__name__)

_warned_angles: set[tuple[float, float]] = set()


def box_corner(point: Point3D, width: float, height: float) -> Point3D:
    """Bottom-right (viewer-nearest) footprint corner of a box centred at `point`."""
    return Point3D(point.x + width / 2, point.y + height / 2, point.z)


def rank_point(point: Point3D) -> int:
    return round(config.Z_RANK_GROUND_WEIGHT * (point.x + point.y) + config.Z_RANK_HEIGHT_WEIGHT * point.z)


def z_order_rank(point: Point3D, width: float, height: float) -> int:
    """
    Paint-order rank of a box; larger ranks are drawn in front.

    Args:
        point: Box position (footprint centre, base elevation).
        width: Extent along x.
        height: Extent along y.
    """
    return rank_point(box_corner(point, width, height))


def segment_rank(segment: Segment) -> int:
    """Rank a segment by the average of its endpoint coordinates."""
    mid = Point3D(
        (segment.start.x + segment.end.x) / 2,
        (segment.start.y + segment.end.y) / 2,
        (segment.start.z + segment.end.z) / 2,
    )
    return rank_point(mid)


def segment_ranks(segments: Sequence[Segment]) -> list[int]:
    return [segment_rank(s) for s in segments]


def route_rank(route: Route, z_offset: int = 0) -> int:
    """Single rank for a whole route: mean of its segment ranks plus an offset."""
    ranks = segment_ranks(route.segments)
    if not ranks:
        return rank_point(route.origin) + z_offset
    return round(sum(ranks) / len(ranks)) + z_offset


def check_calibration(angles: AngleConfig) -> bool:
    """
    Report whether the ranking is calibrated for `angles`.

    Logs a warning once per distinct (rotateX, rotateZ) pair outside the
    default camera.
    """
    if angles.is_default:
        return True
    key = (angles.rotate_x, angles.rotate_z)
    if key not in _warned_angles:
        _warned_angles.add(key)
        logger.warning(
            f"Z-order ranks are calibrated for rotateX={config.DEFAULT_ROTATE_X}, "
            f"rotateZ={config.DEFAULT_ROTATE_Z}; paint order under rotateX={angles.rotate_x}, "
            f"rotateZ={angles.rotate_z} is unverified."
        )
    return False
