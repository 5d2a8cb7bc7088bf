import math

import pytest

from isoscene.model.geometry_primitives import Point2D, Point3D
from isoscene.model.transform import AngleConfig, ConfigurationError, iso_to_screen, screen_to_iso


def test_origin_maps_to_screen_origin():
    assert iso_to_screen(Point3D(0.0, 0.0, 0.0)) == Point2D(0.0, 0.0)


def test_default_camera_projection():
    s = iso_to_screen(Point3D(100.0, 0.0, 0.0))
    assert s.x == pytest.approx(100 * math.cos(math.radians(45)))
    assert s.y == pytest.approx(100 * math.sin(math.radians(45)) * 0.5)

    lifted = iso_to_screen(Point3D(0.0, 0.0, 10.0))
    assert lifted.x == pytest.approx(0.0)
    assert lifted.y == pytest.approx(-10 * math.sin(math.radians(60)))


def test_scale_and_origin():
    base = iso_to_screen(Point3D(10.0, 5.0, 2.0))
    moved = iso_to_screen(Point3D(10.0, 5.0, 2.0), scale=2.0, origin=Point2D(400.0, 300.0))
    assert moved.x == pytest.approx(base.x * 2 + 400)
    assert moved.y == pytest.approx(base.y * 2 + 300)


@pytest.mark.parametrize("angles", [
    AngleConfig(),
    AngleConfig(rotate_x=30.0, rotate_z=20.0),
    AngleConfig(rotate_x=75.0, rotate_z=-30.0),
])
@pytest.mark.parametrize("point", [
    Point3D(0.0, 0.0, 0.0),
    Point3D(120.0, -45.5, 0.0),
    Point3D(-80.0, 300.0, 75.0),
])
def test_screen_to_iso_inverts_projection(angles, point):
    origin = Point2D(512.0, 384.0)
    screen = iso_to_screen(point, 1.5, origin, angles)
    back = screen_to_iso(screen, z=point.z, scale=1.5, origin=origin, angles=angles)

    assert back.x == pytest.approx(point.x, abs=1e-6)
    assert back.y == pytest.approx(point.y, abs=1e-6)
    assert back.z == point.z


@pytest.mark.parametrize("angles", [
    AngleConfig(rotate_x=90.0, rotate_z=45.0),
    AngleConfig(rotate_x=60.0, rotate_z=0.0),
    AngleConfig(rotate_x=60.0, rotate_z=90.0),
])
def test_singular_camera_raises(angles):
    assert not angles.is_invertible
    with pytest.raises(ConfigurationError):
        screen_to_iso(Point2D(10.0, 10.0), angles=angles)


def test_zero_scale_raises():
    with pytest.raises(ConfigurationError):
        screen_to_iso(Point2D(10.0, 10.0), scale=0.0)


def test_invalid_angle_config():
    with pytest.raises(ConfigurationError):
        AngleConfig(perspective=-1.0)
    with pytest.raises(ValueError):
        AngleConfig(rotate_x=float("nan"))


def test_angle_config_dict_roundtrip():
    angles = AngleConfig(rotate_x=50.0, rotate_z=30.0, perspective=0.0)
    assert AngleConfig.from_dict(angles.to_dict()) == angles
    assert AngleConfig().is_default
    assert not angles.is_default
