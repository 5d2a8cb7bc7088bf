"""
Configuration & Constants
=========================
This module serves as the central registry for global constants and file paths.

Why is this file needed?
------------------------
1. Defaults: The camera, box, routing and particle defaults are defined once
   here instead of being repeated in every component.
2. Calibration: The depth ranking weights only hold for the default camera,
   so both live side by side.
3. Deployment: It handles the logic required by PyInstaller (sys._MEIPASS) to
   find assets (the demo scene) when the app is frozen into an .exe.

Exports:
    ASSETS_PATH (str): Absolute path to the assets directory.
    DEMO_SCENE_PATH (str): Absolute path to the bundled demo scene.
"""
import sys
import os
from pathlib import Path


def get_resource_path(relative_path: str) -> str:
    """
    Get absolute path to resource, works for dev and for PyInstaller.
    """
    if hasattr(sys, '_MEIPASS'):
        base_path: str = getattr(sys, '_MEIPASS')
        return os.path.join(base_path, relative_path)

    # config.py is in src/isoscene/
    current_file_path: Path = Path(__file__)
    project_root: Path = current_file_path.parent.parent.parent
    return os.path.join(str(project_root), relative_path)


# Camera (degrees)
DEFAULT_ROTATE_X: float = 60.0  # tilt, compresses the ground plane vertically
DEFAULT_ROTATE_Z: float = 45.0  # ground plane rotation
DEFAULT_PERSPECTIVE: float = 1000.0
RESET_PERSPECTIVE: float = 0.0
DEFAULT_SCALE: float = 1.0

# Entities
DEFAULT_BOX_WIDTH: float = 100.0
DEFAULT_BOX_HEIGHT: float = 100.0
DEFAULT_BOX_DEPTH: float = 50.0
DEFAULT_GRID_SIZE: float = 30.0

# Routing
ROUTE_EPSILON: float = 0.1
COINCIDENT_TOLERANCE: float = 1e-9

# Depth ranking, calibrated for rotateX=60, rotateZ=45 only
Z_RANK_GROUND_WEIGHT: float = 100.0
Z_RANK_HEIGHT_WEIGHT: float = 10.0

# Particles
DEFAULT_PARTICLE_SIZE: float = 8.0
DEFAULT_PARTICLE_RATE: float = 2.0    # particles per second
DEFAULT_PARTICLE_SPEED: float = 0.5   # progress units per second
DEFAULT_TRAIL_LENGTH: int = 3
TRAIL_STEP: float = 0.03
TRAIL_SIZE_FALLOFF: float = 0.15
TRAIL_OPACITY_SPAN: float = 0.8

# Animation loop
FRAME_INTERVAL_MS: int = 16

# Connector style
DEFAULT_CONNECTOR_COLOR: str = "#00d4ff"
DEFAULT_CONNECTOR_WIDTH: float = 2.0

ASSETS_PATH: str = get_resource_path("assets")
DEMO_SCENE_PATH: str = os.path.join(ASSETS_PATH, "demo_scene.json")
