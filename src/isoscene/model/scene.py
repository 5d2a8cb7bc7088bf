"""
Scene (Data Model)
==================
This module defines the boxes and connectors of an isometric scene and resolves
them into routes, screen positions and paint order.

Why is this file needed?
------------------------
1. Anchors: Connectors name their endpoints as (entity, face, cell); the scene
   turns these into logical points on the referenced boxes.
2. Layout: For a given camera it projects boxes and routes to the screen and
   ranks everything for painting.
3. Decoupling: Views and controllers read from a SceneLayout; the camera is
   always passed in, never stored here.

Classes:
    Box: An oriented box entity.
    Connector: A routed link between two box anchors.
    Scene: The container of boxes and connectors.
    SceneLayout: One projected frame of the scene.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
import logging
import math
from typing import Dict, Iterator, List, Optional

from isoscene import config
from isoscene.model.anchors import Anchor, Face, face_anchor_offset
from isoscene.model.depth import check_calibration, segment_ranks, route_rank, z_order_rank
from isoscene.model.geometry_primitives import BoxGeometry, Point2D, Point3D, Vector
from isoscene.model.geometry_utils import grid_to_iso, rad2deg
from isoscene.model.particles import ParticleConfig
from isoscene.model.routing import AxisOrder, Route, compute_route
from isoscene.model.transform import AngleConfig, iso_to_screen

logger = logging.getLogger(__name__)


class SceneError(ValueError):
    """Inconsistent scene content (duplicate or missing entity ids)."""


class AnimationType(StrEnum):
    NONE = "none"
    FLOW = "flow"
    PULSE = "pulse"
    GLOW = "glow"


class LineStyle(StrEnum):
    SOLID = "solid"
    DASHED = "dashed"
    DOTTED = "dotted"


@dataclass(frozen=True)
class AnimationConfig:
    """Line animation of a connector; speed is a rate multiplier."""
    type: AnimationType = AnimationType.NONE
    speed: float = 1.0

    def __post_init__(self) -> None:
        if self.speed <= 0:
            raise ValueError(f"Animation speed must be positive, got {self.speed}.")


@dataclass
class Box:
    """
    An axis-aligned box. `position` is the centre of the footprint at the
    base elevation.
    """
    id: str
    position: Point3D = field(default_factory=lambda: Point3D(0.0, 0.0, 0.0))
    geometry: BoxGeometry = field(default_factory=lambda: BoxGeometry(
        config.DEFAULT_BOX_WIDTH, config.DEFAULT_BOX_HEIGHT, config.DEFAULT_BOX_DEPTH
    ))
    top_color: str = "#6C9BCF"
    front_color: str = "#4A7AB0"
    right_color: str = "#3A6691"

    @staticmethod
    def from_grid(
        box_id: str,
        row: float,
        col: float,
        grid_size: float = config.DEFAULT_GRID_SIZE,
        z: float = 0.0,
        geometry: Optional[BoxGeometry] = None,
    ) -> Box:
        x, y = grid_to_iso(row, col, grid_size)
        box = Box(id=box_id, position=Point3D(x, y, z))
        if geometry is not None:
            box.geometry = geometry
        return box

    def anchor_point(self, anchor: Anchor) -> Point3D:
        return self.position + face_anchor_offset(anchor.face, anchor.position, self.geometry)

    @property
    def rank(self) -> int:
        return z_order_rank(self.position, self.geometry.width, self.geometry.height)

    def face_polygon(self, face: Face) -> List[Point3D]:
        """The four corners of a face, in drawing order."""
        w, h, d = self.geometry.width / 2, self.geometry.height / 2, self.geometry.depth
        p = self.position
        corners = {
            Face.TOP: [(-w, -h, d), (w, -h, d), (w, h, d), (-w, h, d)],
            Face.BOTTOM: [(-w, -h, 0), (w, -h, 0), (w, h, 0), (-w, h, 0)],
            Face.FRONT: [(-w, h, 0), (w, h, 0), (w, h, d), (-w, h, d)],
            Face.BACK: [(-w, -h, 0), (w, -h, 0), (w, -h, d), (-w, -h, d)],
            Face.LEFT: [(-w, -h, 0), (-w, h, 0), (-w, h, d), (-w, -h, d)],
            Face.RIGHT: [(w, -h, 0), (w, h, 0), (w, h, d), (w, -h, d)],
        }[face]
        return [p + Vector(dx, dy, dz) for dx, dy, dz in corners]


@dataclass
class Connector:
    id: str
    from_entity: str
    to_entity: str
    from_anchor: Anchor = field(default_factory=Anchor)
    to_anchor: Anchor = field(default_factory=Anchor)
    route: AxisOrder = field(default_factory=AxisOrder)
    perpendicular_extension: float = 0.0
    color: str = config.DEFAULT_CONNECTOR_COLOR
    width: float = config.DEFAULT_CONNECTOR_WIDTH
    line_style: LineStyle = LineStyle.SOLID
    animation: AnimationConfig = field(default_factory=AnimationConfig)
    particles: ParticleConfig = field(default_factory=ParticleConfig)
    z_offset: int = 0

    @property
    def particle_color(self) -> str:
        return self.particles.color or self.color


@dataclass(frozen=True)
class ProjectedConnector:
    connector_id: str
    route: Route
    screen_points: List[Point2D]
    segment_ranks: List[int]
    rank: int
    arrow_angle: Optional[float]


@dataclass(frozen=True)
class PaintItem:
    rank: int
    kind: str           # "box" or "segment"
    item_id: str
    index: int = 0      # segment index within its connector


@dataclass(frozen=True)
class SceneLayout:
    angles: AngleConfig
    box_positions: Dict[str, Point2D]
    connectors: Dict[str, ProjectedConnector]
    paint_order: List[PaintItem]


def arrow_angle(points: List[Point2D]) -> Optional[float]:
    """Screen heading in degrees of the last leg of a polyline."""
    if len(points) < 2:
        return None
    last, prev = points[-1], points[-2]
    return rad2deg(math.atan2(last.y - prev.y, last.x - prev.x))


class Scene:
    """
    Boxes and connectors, keyed by id in insertion order.
    """

    def __init__(self, scale: float = config.DEFAULT_SCALE, origin: Optional[Point2D] = None) -> None:
        self.scale = scale
        self.origin = origin or Point2D(0.0, 0.0)
        self.boxes: Dict[str, Box] = {}
        self.connectors: Dict[str, Connector] = {}

    def __repr__(self) -> str:
        return f"Scene(boxes={len(self.boxes)}, connectors={len(self.connectors)})"

    # --- Content -----------------------------------------------------------
    def add_box(self, box: Box) -> Box:
        if box.id in self.boxes:
            raise SceneError(f"Entity with id '{box.id}' already exists.")
        self.boxes[box.id] = box
        return box

    def remove_box(self, box_id: str) -> None:
        """Remove a box together with every connector attached to it."""
        if box_id not in self.boxes:
            raise SceneError(f"Entity with id '{box_id}' not found.")
        del self.boxes[box_id]
        attached = [c.id for c in self.connectors.values() if box_id in (c.from_entity, c.to_entity)]
        for connector_id in attached:
            del self.connectors[connector_id]
        logger.debug(f"Removed entity '{box_id}' and {len(attached)} connectors.")

    def get_box(self, box_id: str) -> Box:
        try:
            return self.boxes[box_id]
        except KeyError:
            raise SceneError(f"Entity with id '{box_id}' not found.") from None

    def add_connector(self, connector: Connector) -> Connector:
        if connector.id in self.connectors:
            raise SceneError(f"Connector with id '{connector.id}' already exists.")
        self.get_box(connector.from_entity)
        self.get_box(connector.to_entity)
        self.connectors[connector.id] = connector
        return connector

    def iter_boxes(self) -> Iterator[Box]:
        return iter(self.boxes.values())

    # --- Geometry ----------------------------------------------------------
    def route_for(self, connector: Connector) -> Route:
        """Compute a fresh route for `connector` from the current box state."""
        source = self.get_box(connector.from_entity)
        target = self.get_box(connector.to_entity)
        return compute_route(
            from_point=source.anchor_point(connector.from_anchor),
            to_point=target.anchor_point(connector.to_anchor),
            from_face=connector.from_anchor.face,
            to_face=connector.to_anchor.face,
            axis_order=connector.route,
            perpendicular_extension=connector.perpendicular_extension,
        )

    def routes(self) -> Dict[str, Route]:
        return {cid: self.route_for(c) for cid, c in self.connectors.items()}

    def to_screen(self, point: Point3D, angles: AngleConfig) -> Point2D:
        return iso_to_screen(point, self.scale, self.origin, angles)

    def project_route(self, route: Route, angles: AngleConfig) -> List[Point2D]:
        if route.is_empty:
            return []
        return [self.to_screen(p, angles) for p in route.points]

    def project_connector(self, connector_id: str, angles: AngleConfig) -> ProjectedConnector:
        """Route one connector and project it for `angles`."""
        connector = self.connectors[connector_id]
        route = self.route_for(connector)
        points = self.project_route(route, angles)
        return ProjectedConnector(
            connector_id=connector_id,
            route=route,
            screen_points=points,
            segment_ranks=[r + connector.z_offset for r in segment_ranks(route.segments)],
            rank=route_rank(route, connector.z_offset),
            arrow_angle=arrow_angle(points),
        )

    def paint_order(self, angles: AngleConfig) -> List[PaintItem]:
        return self.layout(angles).paint_order

    def layout(self, angles: AngleConfig) -> SceneLayout:
        """
        Project the whole scene for one camera.

        Routes are recomputed and the paint order is rebuilt on every call.
        Ties in rank put boxes before segments, then keep insertion order.
        """
        check_calibration(angles)

        box_positions = {b.id: self.to_screen(b.position, angles) for b in self.iter_boxes()}
        projected: Dict[str, ProjectedConnector] = {}
        items: List[tuple[int, int, int, PaintItem]] = []

        for order, box in enumerate(self.iter_boxes()):
            items.append((box.rank, 0, order, PaintItem(rank=box.rank, kind="box", item_id=box.id)))

        for order, cid in enumerate(self.connectors):
            projected[cid] = self.project_connector(cid, angles)
            for index, rank in enumerate(projected[cid].segment_ranks):
                items.append((rank, 1, order, PaintItem(rank=rank, kind="segment", item_id=cid, index=index)))

        items.sort(key=lambda t: t[:3])
        return SceneLayout(
            angles=angles,
            box_positions=box_positions,
            connectors=projected,
            paint_order=[t[3] for t in items],
        )
