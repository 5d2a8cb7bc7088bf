import pytest

from isoscene.model.geometry_primitives import Point3D, Segment, Vector
from isoscene.model.geometry_utils import clamp, deg2rad, grid_to_iso, rad2deg


def test_point_vector_arithmetic():
    p = Point3D(1.0, 2.0, 3.0)
    q = Point3D(4.0, 6.0, 3.0)

    assert q - p == Vector(3.0, 4.0, 0.0)
    assert p + Vector(3.0, 4.0, 0.0) == q
    assert (q - p).magnitude == pytest.approx(5.0)
    assert p.distance_to(q) == pytest.approx(5.0)
    with pytest.raises(TypeError):
        p + q


def test_with_coordinate_replaces_single_axis():
    p = Point3D(1.0, 2.0, 3.0)
    assert p.with_coordinate("y", 9.0) == Point3D(1.0, 9.0, 3.0)
    assert p.coordinate("z") == 3.0


def test_segment_length_and_interpolation():
    seg = Segment(Point3D(0.0, 0.0, 0.0), Point3D(0.0, 30.0, 40.0), axis="direct")

    assert seg.length == pytest.approx(50.0)
    assert seg.point_at(0.5) == Point3D(0.0, 15.0, 20.0)


def test_helpers():
    assert rad2deg(deg2rad(60.0)) == pytest.approx(60.0)
    assert clamp(1.5) == 1.0
    assert clamp(-0.5) == 0.0


def test_grid_to_iso():
    assert grid_to_iso(2, 1, 30) == (30, 90)
