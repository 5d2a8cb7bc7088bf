"""
Geometric Primitives for the isometric scene.
"""
from __future__ import annotations
from dataclasses import dataclass, field, replace
import math


@dataclass(frozen=True)
class Vector:
    """
    A vector in logical isometric space representing direction and magnitude.
    """
    x: float
    y: float
    z: float = 0.0

    def __add__(self, other: Vector) -> Vector:
        return Vector(self.x + other.x, self.y + other.y, self.z + other.z)

    def __mul__(self, scalar: float) -> Vector:
        return Vector(self.x * scalar, self.y * scalar, self.z * scalar)

    @property
    def magnitude(self) -> float:
        return math.sqrt(self.x**2 + self.y**2 + self.z**2)


@dataclass(frozen=True)
class Point3D:
    """A point in logical isometric coordinates (x, y on the ground, z up)."""
    x: float
    y: float
    z: float = 0.0

    def __add__(self, other: Vector) -> Point3D:
        # Point + Vector = Point (Translation)
        if isinstance(other, Vector):
            return Point3D(self.x + other.x, self.y + other.y, self.z + other.z)
        raise TypeError("Can only add a Vector to a Point3D.")

    def __sub__(self, other: Point3D) -> Vector:
        # Point - Point = Vector (Direction)
        return Vector(self.x - other.x, self.y - other.y, self.z - other.z)

    def coordinate(self, axis: str) -> float:
        """Value along one of the 'x', 'y', 'z' axes."""
        return getattr(self, axis)

    def with_coordinate(self, axis: str, value: float) -> Point3D:
        """Copy of the point with a single axis replaced."""
        return replace(self, **{axis: value})

    def distance_to(self, other: Point3D) -> float:
        return (self - other).magnitude

    def is_close(self, other: Point3D, tol: float = 1e-9) -> bool:
        return (
            abs(self.x - other.x) <= tol
            and abs(self.y - other.y) <= tol
            and abs(self.z - other.z) <= tol
        )

    def to_dict(self) -> dict[str, float]:
        return {"x": self.x, "y": self.y, "z": self.z}


@dataclass(frozen=True)
class Point2D:
    """A screen-space pixel offset."""
    x: float
    y: float

    def to_tuple(self) -> tuple[float, float]:
        return self.x, self.y


@dataclass(frozen=True)
class BoxGeometry:
    """
    Axis-aligned extents of an entity, centred on its footprint.

    width runs along x, height along y, depth is the vertical (z) extent.
    """
    width: float
    height: float
    depth: float

    def to_dict(self) -> dict[str, float]:
        return {"width": self.width, "height": self.height, "depth": self.depth}


@dataclass(frozen=True)
class Segment:
    """One straight leg of a route."""
    start: Point3D
    end: Point3D
    axis: str
    length: float = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "length", self.start.distance_to(self.end))

    def point_at(self, t: float) -> Point3D:
        """Linear interpolation between start (t=0) and end (t=1)."""
        return Point3D(
            self.start.x + (self.end.x - self.start.x) * t,
            self.start.y + (self.end.y - self.start.y) * t,
            self.start.z + (self.end.z - self.start.z) * t,
        )
