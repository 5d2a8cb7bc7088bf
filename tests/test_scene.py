import math

import pytest

from isoscene.model.anchors import Anchor, AnchorPosition, Face
from isoscene.model.geometry_primitives import BoxGeometry, Point2D, Point3D
from isoscene.model.routing import AxisOrder
from isoscene.model.scene import Box, Connector, Scene, SceneError, arrow_angle
from isoscene.model.transform import AngleConfig


def test_box_anchor_points():
    box = Box(id="a", position=Point3D(0.0, 0.0, 0.0), geometry=BoxGeometry(100, 100, 50))

    assert box.anchor_point(Anchor(Face.TOP, AnchorPosition.MC)) == Point3D(0.0, 0.0, 50.0)
    assert box.anchor_point(Anchor(Face.RIGHT, AnchorPosition.MC)) == Point3D(50.0, 0.0, 25.0)
    assert box.anchor_point(Anchor(Face.BOTTOM, AnchorPosition.TL)) == Point3D(-50.0, -50.0, 0.0)


def test_box_from_grid():
    box = Box.from_grid("g", row=2, col=1, grid_size=30, z=5.0)
    assert box.position == Point3D(30.0, 90.0, 5.0)


def test_face_polygon_lies_on_the_face():
    box = Box(id="a", position=Point3D(10.0, 0.0, 0.0), geometry=BoxGeometry(20, 40, 10))
    assert all(p.z == 10.0 for p in box.face_polygon(Face.TOP))
    assert all(p.x == 20.0 for p in box.face_polygon(Face.RIGHT))
    assert all(p.y == 20.0 for p in box.face_polygon(Face.FRONT))


def test_scene_rejects_inconsistent_content(two_box_scene):
    with pytest.raises(SceneError):
        two_box_scene.add_box(Box(id="a"))
    with pytest.raises(SceneError):
        two_box_scene.add_connector(Connector(id="dangling", from_entity="a", to_entity="missing"))
    with pytest.raises(SceneError):
        two_box_scene.add_connector(Connector(id="link", from_entity="a", to_entity="b"))
    with pytest.raises(SceneError):
        two_box_scene.get_box("missing")


def test_remove_box_drops_attached_connectors(two_box_scene):
    two_box_scene.remove_box("b")
    assert "b" not in two_box_scene.boxes
    assert two_box_scene.connectors == {}


def test_route_for_connector(two_box_scene):
    route = two_box_scene.route_for(two_box_scene.connectors["link"])

    assert len(route.segments) == 1
    assert route.segments[0].start == Point3D(50.0, 0.0, 25.0)
    assert route.segments[0].end == Point3D(150.0, 0.0, 25.0)


def test_route_follows_moved_box(two_box_scene):
    two_box_scene.get_box("b").position = Point3D(200.0, 100.0, 0.0)
    route = two_box_scene.route_for(two_box_scene.connectors["link"])
    assert route.segments[-1].end == Point3D(150.0, 100.0, 25.0)


def test_layout_projects_and_orders(two_box_scene):
    layout = two_box_scene.layout(AngleConfig())

    projected = layout.connectors["link"]
    assert len(projected.screen_points) == len(projected.route.segments) + 1
    assert projected.arrow_angle == pytest.approx(math.degrees(math.atan2(0.5, 1.0)))
    assert layout.box_positions["b"] == two_box_scene.to_screen(Point3D(200.0, 0.0, 0.0), AngleConfig())

    ranks = [item.rank for item in layout.paint_order]
    assert ranks == sorted(ranks)
    assert [item.item_id for item in layout.paint_order if item.kind == "box"] == ["a", "b"]
    assert layout.paint_order == two_box_scene.paint_order(AngleConfig())


def test_boxes_paint_before_segments_on_equal_rank():
    scene = Scene()
    scene.add_box(Box(id="a", position=Point3D(0.0, 0.0, 0.0), geometry=BoxGeometry(100, 100, 50)))
    scene.add_box(Box(id="b", position=Point3D(200.0, 0.0, 0.0), geometry=BoxGeometry(100, 100, 50)))
    # (50, -50, 0) -> (150, 50, 0): midpoint (100, 0, 0) ranks exactly like box "a"
    scene.add_connector(Connector(
        id="c", from_entity="a", to_entity="b",
        from_anchor=Anchor(Face.BOTTOM, AnchorPosition.TR),
        to_anchor=Anchor(Face.BOTTOM, AnchorPosition.BL),
        route=AxisOrder.parse("direct"),
    ))

    order = scene.paint_order(AngleConfig())
    assert [(item.kind, item.item_id) for item in order] == [("box", "a"), ("segment", "c"), ("box", "b")]
    assert order[0].rank == order[1].rank


def test_z_offset_shifts_connector_ranks(two_box_scene):
    base = two_box_scene.project_connector("link", AngleConfig())
    two_box_scene.connectors["link"].z_offset = 5
    shifted = two_box_scene.project_connector("link", AngleConfig())

    assert shifted.rank == base.rank + 5
    assert shifted.segment_ranks == [r + 5 for r in base.segment_ranks]


def test_layout_uses_given_camera(two_box_scene):
    a = two_box_scene.layout(AngleConfig())
    b = two_box_scene.layout(AngleConfig(rotate_x=30.0, rotate_z=20.0))
    assert a.connectors["link"].screen_points != b.connectors["link"].screen_points
    assert b.angles.rotate_z == 20.0


def test_arrow_angle():
    assert arrow_angle([Point2D(0.0, 0.0)]) is None
    assert arrow_angle([Point2D(0.0, 0.0), Point2D(0.0, 10.0)]) == pytest.approx(90.0)
