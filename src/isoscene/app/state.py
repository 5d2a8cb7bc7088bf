from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtCore import QObject, Signal

from isoscene import config
from isoscene.model.transform import AngleConfig

logger = logging.getLogger(__name__)


class AngleStore(QObject):
    """
    Holder of the current camera with a change broadcast.

    Every change produces a new frozen AngleConfig which is emitted to
    listeners; they use the emitted value instead of reading shared state.
    """
    angles_changed = Signal(object)

    def __init__(self, angles: Optional[AngleConfig] = None) -> None:
        super().__init__()
        self._angles = angles or AngleConfig()

    def current(self) -> AngleConfig:
        return self._angles

    def set_angles(
        self,
        rotate_x: Optional[float] = None,
        rotate_z: Optional[float] = None,
        perspective: Optional[float] = None,
    ) -> AngleConfig:
        """Replace the given parameters and broadcast the resulting camera."""
        angles = AngleConfig(
            rotate_x=self._angles.rotate_x if rotate_x is None else float(rotate_x),
            rotate_z=self._angles.rotate_z if rotate_z is None else float(rotate_z),
            perspective=self._angles.perspective if perspective is None else float(perspective),
        )
        return self.publish(angles)

    def publish(self, angles: AngleConfig) -> AngleConfig:
        self._angles = angles
        logger.debug(
            f"Angles changed: rotateX={angles.rotate_x}, rotateZ={angles.rotate_z}, "
            f"perspective={angles.perspective}"
        )
        self.angles_changed.emit(angles)
        return angles

    def reset(self) -> AngleConfig:
        """Restore the default 60/45 camera without perspective."""
        return self.publish(AngleConfig(
            rotate_x=config.DEFAULT_ROTATE_X,
            rotate_z=config.DEFAULT_ROTATE_Z,
            perspective=config.RESET_PERSPECTIVE,
        ))
