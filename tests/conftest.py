import matplotlib

matplotlib.use("Agg")

import pytest
from PySide6.QtCore import QCoreApplication

from isoscene.model import depth
from isoscene.model.anchors import Anchor, AnchorPosition, Face
from isoscene.model.geometry_primitives import BoxGeometry, Point3D
from isoscene.model.particles import ParticleConfig
from isoscene.model.routing import AxisOrder
from isoscene.model.scene import Box, Connector, Scene


@pytest.fixture(scope="session")
def qapp():
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


@pytest.fixture(autouse=True)
def reset_calibration_warnings():
    depth._warned_angles.clear()
    yield
    depth._warned_angles.clear()


@pytest.fixture
def two_box_scene() -> Scene:
    """Two default boxes 200 units apart on x, linked right face to left face."""
    scene = Scene()
    scene.add_box(Box(id="a", position=Point3D(0.0, 0.0, 0.0), geometry=BoxGeometry(100, 100, 50)))
    scene.add_box(Box(id="b", position=Point3D(200.0, 0.0, 0.0), geometry=BoxGeometry(100, 100, 50)))
    scene.add_connector(Connector(
        id="link",
        from_entity="a",
        to_entity="b",
        from_anchor=Anchor(Face.RIGHT, AnchorPosition.MC),
        to_anchor=Anchor(Face.LEFT, AnchorPosition.MC),
        route=AxisOrder.parse("x"),
        particles=ParticleConfig(enabled=True, rate=2.0, speed=0.5),
    ))
    return scene
