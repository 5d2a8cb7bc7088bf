"""
Input/Output Manager (JSON)
Handles loading and saving a Scene to .json files, including the compact
string notation used by scene descriptions:

    "main-shell@bottom:tl"   connector endpoint (entity@face:position)
    "y-x" / "auto" / "direct" route axis order
    "flow 0.5"               line animation (type and speed)
"""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, Tuple

from isoscene import config
from isoscene.model.anchors import Anchor
from isoscene.model.geometry_primitives import BoxGeometry, Point2D, Point3D
from isoscene.model.particles import ParticleConfig
from isoscene.model.routing import AxisOrder
from isoscene.model.scene import AnimationConfig, AnimationType, Box, Connector, LineStyle, Scene

logger = logging.getLogger(__name__)

SCENE_FORMAT_VERSION = 1


def parse_endpoint(token: str) -> Tuple[str, Anchor]:
    """
    Split "entity@face:position" into the entity id and its anchor.

    Without "@" the whole token is the entity id and the anchor defaults to top:mc.
    """
    entity_id, _, anchor_token = token.partition("@")
    return entity_id.strip(), Anchor.parse(anchor_token)


def format_endpoint(entity_id: str, anchor: Anchor) -> str:
    return f"{entity_id}@{anchor}"


def parse_animation(token: str) -> AnimationConfig:
    """
    Parse "type [speed]", e.g. "flow 0.5". Unknown types fall back to none,
    a missing or invalid speed to 1.
    """
    parts = (token or "").split()
    if not parts:
        return AnimationConfig()

    try:
        anim_type = AnimationType(parts[0].lower())
    except ValueError:
        logger.warning(f"Unknown animation type '{parts[0]}', using '{AnimationType.NONE}'.")
        anim_type = AnimationType.NONE

    speed = 1.0
    if len(parts) > 1:
        try:
            speed = float(parts[1])
        except ValueError:
            logger.warning(f"Invalid animation speed '{parts[1]}', using 1.")
        if speed <= 0:
            logger.warning(f"Animation speed must be positive, got {speed}; using 1.")
            speed = 1.0

    return AnimationConfig(type=anim_type, speed=speed)


def format_animation(animation: AnimationConfig) -> str:
    return f"{animation.type.value} {animation.speed:g}"


def box_from_dict(data: Dict[str, Any]) -> Box:
    geometry = BoxGeometry(
        width=float(data.get("width", config.DEFAULT_BOX_WIDTH)),
        height=float(data.get("height", config.DEFAULT_BOX_HEIGHT)),
        depth=float(data.get("depth", config.DEFAULT_BOX_DEPTH)),
    )
    if data.get("row") is not None and data.get("col") is not None:
        box = Box.from_grid(
            box_id=str(data["id"]),
            row=float(data["row"]),
            col=float(data["col"]),
            grid_size=float(data.get("grid_size", config.DEFAULT_GRID_SIZE)),
            z=float(data.get("z", 0.0)),
            geometry=geometry,
        )
    else:
        box = Box(
            id=str(data["id"]),
            position=Point3D(float(data.get("x", 0.0)), float(data.get("y", 0.0)), float(data.get("z", 0.0))),
            geometry=geometry,
        )
    for key in ("top_color", "front_color", "right_color"):
        if key in data:
            setattr(box, key, data[key])
    return box


def box_to_dict(box: Box) -> Dict[str, Any]:
    return {
        "id": box.id,
        **box.position.to_dict(),
        **box.geometry.to_dict(),
        "top_color": box.top_color,
        "front_color": box.front_color,
        "right_color": box.right_color,
    }


def connector_from_dict(data: Dict[str, Any], default_id: str) -> Connector:
    from_entity, from_anchor = parse_endpoint(data["from"])
    to_entity, to_anchor = parse_endpoint(data["to"])

    try:
        line_style = LineStyle(data.get("line_style", LineStyle.SOLID))
    except ValueError:
        logger.warning(f"Unknown line style '{data.get('line_style')}', using '{LineStyle.SOLID}'.")
        line_style = LineStyle.SOLID

    return Connector(
        id=str(data.get("id", default_id)),
        from_entity=from_entity,
        to_entity=to_entity,
        from_anchor=from_anchor,
        to_anchor=to_anchor,
        route=AxisOrder.parse(data.get("route", "auto")),
        perpendicular_extension=float(data.get("perpendicular_length", 0.0)),
        color=data.get("color", config.DEFAULT_CONNECTOR_COLOR),
        width=float(data.get("width", config.DEFAULT_CONNECTOR_WIDTH)),
        line_style=line_style,
        animation=parse_animation(data.get("animation", "")),
        particles=ParticleConfig.from_dict(data.get("particles", {})),
        z_offset=int(data.get("z_offset", 0)),
    )


def connector_to_dict(connector: Connector) -> Dict[str, Any]:
    return {
        "id": connector.id,
        "from": format_endpoint(connector.from_entity, connector.from_anchor),
        "to": format_endpoint(connector.to_entity, connector.to_anchor),
        "route": str(connector.route),
        "perpendicular_length": connector.perpendicular_extension,
        "color": connector.color,
        "width": connector.width,
        "line_style": connector.line_style.value,
        "animation": format_animation(connector.animation),
        "particles": connector.particles.to_dict(),
        "z_offset": connector.z_offset,
    }


class IOManager:

    @staticmethod
    def scene_from_dict(data: Dict[str, Any]) -> Scene:
        settings = data.get("scene", {})
        origin = settings.get("origin", [0.0, 0.0])
        scene = Scene(
            scale=float(settings.get("scale", config.DEFAULT_SCALE)),
            origin=Point2D(float(origin[0]), float(origin[1])),
        )

        for entity in data.get("entities", []):
            scene.add_box(box_from_dict(entity))

        for i, item in enumerate(data.get("connectors", [])):
            scene.add_connector(connector_from_dict(item, default_id=f"connector-{i + 1}"))

        return scene

    @staticmethod
    def scene_to_dict(scene: Scene) -> Dict[str, Any]:
        return {
            "version": SCENE_FORMAT_VERSION,
            "scene": {"scale": scene.scale, "origin": list(scene.origin.to_tuple())},
            "entities": [box_to_dict(b) for b in scene.iter_boxes()],
            "connectors": [connector_to_dict(c) for c in scene.connectors.values()],
        }

    @staticmethod
    def load_scene(filepath: str) -> Scene:
        logger.info(f"Loading scene from: {filepath}")
        with open(filepath, "r", encoding="utf-8") as f:
            data = json.load(f)

        version = data.get("version", SCENE_FORMAT_VERSION)
        if version > SCENE_FORMAT_VERSION:
            logger.warning(f"Scene file version {version} is newer than supported ({SCENE_FORMAT_VERSION}).")

        scene = IOManager.scene_from_dict(data)
        logger.info(f"Loaded {scene!r}")
        return scene

    @staticmethod
    def save_scene(scene: Scene, filepath: str) -> None:
        logger.info(f"Saving scene to: {filepath}")
        with open(filepath, "w", encoding="utf-8") as f:
            json.dump(IOManager.scene_to_dict(scene), f, indent=2)
        logger.info(f"Scene saved to: {filepath}")
