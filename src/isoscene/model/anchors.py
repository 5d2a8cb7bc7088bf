"""
Face / Anchor Model
===================
Addresses named points on the faces of an oriented box.

A box is placed by the centre of its footprint at its base elevation. Each of
its six faces carries a 3x3 grid of anchor cells (tl ... br) mapped to
normalised (u, v) coordinates; `face_anchor_offset` turns a (face, cell) pair
into a displacement from the box position.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
import logging
from typing import Dict, Tuple

from isoscene.model.geometry_primitives import BoxGeometry, Vector

logger = logging.getLogger(__name__)


class Face(StrEnum):
    TOP = "top"
    BOTTOM = "bottom"
    FRONT = "front"
    BACK = "back"
    LEFT = "left"
    RIGHT = "right"

    @staticmethod
    def parse(token: str) -> Face:
        """Resolve a face token, falling back to TOP for unknown values."""
        try:
            return Face(token.strip().lower())
        except (ValueError, AttributeError):
            logger.warning(f"Unknown face '{token}', using '{Face.TOP}'.")
            return Face.TOP

    @property
    def normal(self) -> Vector:
        return FACE_NORMALS[self]

    @property
    def axis(self) -> str:
        """The coordinate axis the face normal points along."""
        n = self.normal
        if abs(n.z) > 0.5:
            return "z"
        if abs(n.y) > 0.5:
            return "y"
        return "x"


class AnchorPosition(StrEnum):
    TL = "tl"
    TC = "tc"
    TR = "tr"
    ML = "ml"
    MC = "mc"
    MR = "mr"
    BL = "bl"
    BC = "bc"
    BR = "br"

    @staticmethod
    def parse(token: str) -> AnchorPosition:
        """Resolve a grid cell token, falling back to MC for unknown values."""
        try:
            return AnchorPosition(token.strip().lower())
        except (ValueError, AttributeError):
            logger.warning(f"Unknown anchor position '{token}', using '{AnchorPosition.MC}'.")
            return AnchorPosition.MC

    @property
    def uv(self) -> Tuple[float, float]:
        return POSITION_UV[self]


# Outward unit normals. Front faces the viewer along +y.
FACE_NORMALS: Dict[Face, Vector] = {
    Face.TOP: Vector(0.0, 0.0, 1.0),
    Face.BOTTOM: Vector(0.0, 0.0, -1.0),
    Face.FRONT: Vector(0.0, 1.0, 0.0),
    Face.BACK: Vector(0.0, -1.0, 0.0),
    Face.LEFT: Vector(-1.0, 0.0, 0.0),
    Face.RIGHT: Vector(1.0, 0.0, 0.0),
}

POSITION_UV: Dict[AnchorPosition, Tuple[float, float]] = {
    AnchorPosition.TL: (0.0, 0.0),
    AnchorPosition.TC: (0.5, 0.0),
    AnchorPosition.TR: (1.0, 0.0),
    AnchorPosition.ML: (0.0, 0.5),
    AnchorPosition.MC: (0.5, 0.5),
    AnchorPosition.MR: (1.0, 0.5),
    AnchorPosition.BL: (0.0, 1.0),
    AnchorPosition.BC: (0.5, 1.0),
    AnchorPosition.BR: (1.0, 1.0),
}


@dataclass(frozen=True)
class Anchor:
    """A (face, grid cell) pair on a box."""
    face: Face = Face.TOP
    position: AnchorPosition = AnchorPosition.MC

    @staticmethod
    def parse(token: str) -> Anchor:
        """
        Parse a "face:position" token, e.g. "bottom:tl".

        Missing parts take the defaults (top, mc); unknown parts are resolved
        by Face.parse / AnchorPosition.parse.
        """
        face_token, _, position_token = (token or "").partition(":")
        face = Face.parse(face_token) if face_token else Face.TOP
        position = AnchorPosition.parse(position_token) if position_token else AnchorPosition.MC
        return Anchor(face=face, position=position)

    def __str__(self) -> str:
        return f"{self.face}:{self.position}"


def face_anchor_offset(face: Face, position: AnchorPosition, box: BoxGeometry) -> Vector:
    """
    Displacement of an anchor from the box position (footprint centre at its base).

    Args:
        face: The face the anchor lies on.
        position: Grid cell on that face.
        box: Box extents.

    Returns:
        The (dx, dy, dz) offset.
    """
    w, h, d = box.width, box.height, box.depth
    u, v = position.uv

    if face is Face.TOP:
        return Vector(w * (u - 0.5), h * (v - 0.5), d)
    if face is Face.BOTTOM:
        return Vector(w * (u - 0.5), h * (v - 0.5), 0.0)
    if face is Face.FRONT:
        return Vector(w * (u - 0.5), h / 2, d * (1 - v))
    if face is Face.BACK:
        return Vector(w * (u - 0.5), -h / 2, d * (1 - v))
    if face is Face.LEFT:
        return Vector(-w / 2, h * (u - 0.5), d * (1 - v))
    return Vector(w / 2, h * (u - 0.5), d * (1 - v))  # Face.RIGHT


def face_center_offset(face: Face, box: BoxGeometry) -> Vector:
    """Geometric centre of a face relative to the box position."""
    w, h, d = box.width, box.height, box.depth
    return {
        Face.TOP: Vector(0.0, 0.0, d),
        Face.BOTTOM: Vector(0.0, 0.0, 0.0),
        Face.FRONT: Vector(0.0, h / 2, d / 2),
        Face.BACK: Vector(0.0, -h / 2, d / 2),
        Face.LEFT: Vector(-w / 2, 0.0, d / 2),
        Face.RIGHT: Vector(w / 2, 0.0, d / 2),
    }[face]
