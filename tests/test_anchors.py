import logging

import pytest

from isoscene.model.anchors import (
    Anchor,
    AnchorPosition,
    FACE_NORMALS,
    Face,
    face_anchor_offset,
    face_center_offset,
)
from isoscene.model.geometry_primitives import BoxGeometry, Vector

BOX = BoxGeometry(width=100.0, height=60.0, depth=40.0)


def _close(a: Vector, b: Vector) -> bool:
    return all(abs(u - v) < 1e-9 for u, v in zip((a.x, a.y, a.z), (b.x, b.y, b.z)))


@pytest.mark.parametrize("face", list(Face))
def test_middle_centre_is_face_centre(face):
    assert _close(face_anchor_offset(face, AnchorPosition.MC, BOX), face_center_offset(face, BOX))


@pytest.mark.parametrize("face", list(Face))
def test_opposite_corners_reflect_through_centre(face):
    tl = face_anchor_offset(face, AnchorPosition.TL, BOX)
    br = face_anchor_offset(face, AnchorPosition.BR, BOX)
    centre = face_center_offset(face, BOX)
    assert _close(tl + br, centre * 2)


def test_known_offsets():
    assert face_anchor_offset(Face.TOP, AnchorPosition.TL, BOX) == Vector(-50.0, -30.0, 40.0)
    assert face_anchor_offset(Face.BOTTOM, AnchorPosition.BR, BOX) == Vector(50.0, 30.0, 0.0)
    assert face_anchor_offset(Face.FRONT, AnchorPosition.BC, BOX) == Vector(0.0, 30.0, 0.0)
    assert face_anchor_offset(Face.RIGHT, AnchorPosition.TC, BOX) == Vector(50.0, 0.0, 40.0)


def test_normals_are_unit_and_match_axis():
    for face, normal in FACE_NORMALS.items():
        assert normal.magnitude == pytest.approx(1.0)
        assert abs(getattr(normal, face.axis)) == 1.0
    assert Face.FRONT.normal == Vector(0.0, 1.0, 0.0)
    assert Face.RIGHT.normal == Vector(1.0, 0.0, 0.0)


def test_anchor_parse():
    anchor = Anchor.parse("bottom:tl")
    assert anchor == Anchor(Face.BOTTOM, AnchorPosition.TL)
    assert str(anchor) == "bottom:tl"
    assert Anchor.parse("") == Anchor(Face.TOP, AnchorPosition.MC)
    assert Anchor.parse("Right") == Anchor(Face.RIGHT, AnchorPosition.MC)


def test_unknown_tokens_fall_back_with_warning(caplog):
    with caplog.at_level(logging.WARNING, logger="isoscene"):
        assert Face.parse("diagonal") is Face.TOP
        assert AnchorPosition.parse("zz") is AnchorPosition.MC
    assert len(caplog.records) == 2
