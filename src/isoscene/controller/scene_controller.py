"""
Scene Controller
================
Keeps a projected SceneLayout in sync with the camera broadcast.

Why is this file needed?
------------------------
1. Recompute: Every angle change and every box edit triggers a full rebuild
   of routes, screen positions and paint order.
2. Signals: Views receive the fresh layout through `layout_changed` instead of
   polling the scene.
"""
from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtCore import QObject, Signal

from isoscene.app.state import AngleStore
from isoscene.model.geometry_primitives import BoxGeometry, Point3D
from isoscene.model.scene import Scene, SceneLayout
from isoscene.model.transform import AngleConfig

logger = logging.getLogger(__name__)


class SceneController(QObject):
    layout_changed = Signal(object)

    def __init__(self, scene: Scene, store: AngleStore) -> None:
        super().__init__()
        self.scene = scene
        self.store = store
        self.layout: Optional[SceneLayout] = None
        self.store.angles_changed.connect(self._on_angles_changed)

    def _on_angles_changed(self, angles: AngleConfig) -> None:
        self.refresh(angles)

    def refresh(self, angles: Optional[AngleConfig] = None) -> SceneLayout:
        """Rebuild the layout with `angles`, or with the store's current camera."""
        angles = angles or self.store.current()
        self.layout = self.scene.layout(angles)
        logger.debug(
            f"Layout rebuilt for rotateX={angles.rotate_x}, rotateZ={angles.rotate_z}: "
            f"{len(self.layout.paint_order)} paint items"
        )
        self.layout_changed.emit(self.layout)
        return self.layout

    def move_box(self, box_id: str, position: Point3D) -> SceneLayout:
        self.scene.get_box(box_id).position = position
        return self.refresh()

    def resize_box(self, box_id: str, geometry: BoxGeometry) -> SceneLayout:
        self.scene.get_box(box_id).geometry = geometry
        return self.refresh()
