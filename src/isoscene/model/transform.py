"""
Coordinate Transform
====================
Pure mapping between logical isometric coordinates and screen offsets.

Why is this file needed?
------------------------
1. Projection: Boxes, anchors, routes and particles are all computed in 3D
   logical space and must be placed on a 2D screen.
2. Picking: Screen positions (e.g. a mouse click) must be mapped back onto a
   plane of known height.
3. Explicit camera: Every call receives the AngleConfig it must use. There is
   no ambient camera state in this module; the broadcast lives in
   `isoscene.app.state` and only hands out fresh values.

Classes:
    AngleConfig: Immutable camera parameters (degrees).
    ConfigurationError: Raised for singular or invalid camera configurations.
"""
from __future__ import annotations

from dataclasses import dataclass, asdict
import logging
import math
from typing import Any, Dict, Optional

from isoscene import config
from isoscene.model.geometry_primitives import Point2D, Point3D, Vector
from isoscene.model.geometry_utils import deg2rad

logger = logging.getLogger(__name__)

# Below this magnitude a trigonometric factor counts as zero
SINGULAR_TOLERANCE = 1e-12


class ConfigurationError(ValueError):
    """The camera configuration cannot be used for the requested operation."""


@dataclass(frozen=True)
class AngleConfig:
    """
    Camera parameters shared by every projection.

    Attributes:
        rotate_x: Tilt around the screen X axis in degrees.
        rotate_z: Rotation of the ground plane in degrees.
        perspective: Perspective distance in pixels, carried for consumers
            that apply it; the parallel projection here ignores it.
    """
    rotate_x: float = config.DEFAULT_ROTATE_X
    rotate_z: float = config.DEFAULT_ROTATE_Z
    perspective: float = config.DEFAULT_PERSPECTIVE

    def __post_init__(self) -> None:
        for name in ("rotate_x", "rotate_z", "perspective"):
            value = getattr(self, name)
            if not math.isfinite(value):
                raise ConfigurationError(f"AngleConfig.{name} must be finite, got {value!r}.")
        if self.perspective < 0:
            raise ConfigurationError(f"Perspective must be non-negative, got {self.perspective}.")

    @property
    def cos_x(self) -> float:
        return math.cos(deg2rad(self.rotate_x))

    @property
    def sin_x(self) -> float:
        return math.sin(deg2rad(self.rotate_x))

    @property
    def cos_z(self) -> float:
        return math.cos(deg2rad(self.rotate_z))

    @property
    def sin_z(self) -> float:
        return math.sin(deg2rad(self.rotate_z))

    @property
    def is_invertible(self) -> bool:
        """True when screen_to_iso has a unique solution for this camera."""
        return (
            abs(self.cos_z) > SINGULAR_TOLERANCE
            and abs(self.sin_z) > SINGULAR_TOLERANCE
            and abs(self.cos_x) > SINGULAR_TOLERANCE
        )

    @property
    def is_default(self) -> bool:
        return (
            math.isclose(self.rotate_x, config.DEFAULT_ROTATE_X)
            and math.isclose(self.rotate_z, config.DEFAULT_ROTATE_Z)
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> AngleConfig:
        return AngleConfig(
            rotate_x=float(data.get("rotate_x", config.DEFAULT_ROTATE_X)),
            rotate_z=float(data.get("rotate_z", config.DEFAULT_ROTATE_Z)),
            perspective=float(data.get("perspective", config.DEFAULT_PERSPECTIVE)),
        )


def iso_offset_to_screen(offset: Vector, angles: AngleConfig, scale: float = config.DEFAULT_SCALE) -> Point2D:
    """
    Project a logical displacement onto the screen (no origin applied).

    Args:
        offset: Displacement in logical space.
        angles: Camera to project with.
        scale: Pixels per logical unit.

    Returns:
        The screen displacement.
    """
    x_rot_z = (offset.x - offset.y) * angles.cos_z
    y_rot_z = (offset.x + offset.y) * angles.sin_z
    return Point2D(
        x=x_rot_z * scale,
        y=(y_rot_z * angles.cos_x - offset.z * angles.sin_x) * scale,
    )


def iso_to_screen(
    point: Point3D,
    scale: float = config.DEFAULT_SCALE,
    origin: Optional[Point2D] = None,
    angles: Optional[AngleConfig] = None,
) -> Point2D:
    """
    Map a logical point to a screen position.

    Args:
        point: Logical coordinates.
        scale: Pixels per logical unit.
        origin: Screen position of the logical origin. Defaults to (0, 0).
        angles: Camera to project with. Defaults to the 60/45 isometric camera.

    Returns:
        The screen position in pixels.
    """
    origin = origin or Point2D(0.0, 0.0)
    angles = angles or AngleConfig()
    offset = iso_offset_to_screen(Vector(point.x, point.y, point.z), angles, scale)
    return Point2D(offset.x + origin.x, offset.y + origin.y)


def screen_to_iso(
    screen: Point2D,
    z: float = 0.0,
    scale: float = config.DEFAULT_SCALE,
    origin: Optional[Point2D] = None,
    angles: Optional[AngleConfig] = None,
) -> Point3D:
    """
    Map a screen position back to logical space on the plane of height `z`.

    Inverts
        sx = (x - y) * cos(rz) * scale + ox
        sy = ((x + y) * sin(rz) * cos(rx) - z * sin(rx)) * scale + oy
    for (x, y).

    Raises:
        ConfigurationError: If the camera or scale makes the system singular.
    """
    origin = origin or Point2D(0.0, 0.0)
    angles = angles or AngleConfig()

    if abs(scale) <= SINGULAR_TOLERANCE:
        raise ConfigurationError("Cannot invert the projection with a zero scale.")
    if not angles.is_invertible:
        raise ConfigurationError(
            f"Projection is singular for rotateX={angles.rotate_x}, rotateZ={angles.rotate_z}; "
            "screen position cannot be mapped back to logical space."
        )

    sx = (screen.x - origin.x) / scale
    sy = (screen.y - origin.y) / scale

    diff = sx / angles.cos_z                                   # x - y
    total = (sy + z * angles.sin_x) / (angles.sin_z * angles.cos_x)  # x + y

    return Point3D(x=(total + diff) / 2, y=(total - diff) / 2, z=z)
