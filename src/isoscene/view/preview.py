"""
Scene Preview (matplotlib)
==========================
Draws a projected scene: visible box faces, connector polylines and particles.
Each artist receives its z-order rank as matplotlib `zorder`, so the figure
shows exactly the paint order the ranking produces.
"""
from __future__ import annotations

import logging
from typing import Optional, TYPE_CHECKING

import numpy as np
import matplotlib.pyplot as plt
from matplotlib.patches import Polygon

from isoscene.model.anchors import Face
from isoscene.model.scene import LineStyle, Scene, SceneLayout
from isoscene.model.transform import AngleConfig

if TYPE_CHECKING:
    from matplotlib.axes import Axes
    from matplotlib.figure import Figure
    from isoscene.controller.animation import ParticleFrame

logger = logging.getLogger(__name__)

# Faces seen by the default camera, back to front
VISIBLE_FACES: tuple[tuple[Face, str], ...] = (
    (Face.FRONT, "front_color"),
    (Face.RIGHT, "right_color"),
    (Face.TOP, "top_color"),
)

_LINE_STYLES = {LineStyle.SOLID: "-", LineStyle.DASHED: "--", LineStyle.DOTTED: ":"}


def _draw_boxes(ax: Axes, scene: Scene, layout: SceneLayout) -> None:
    ranks = {item.item_id: item.rank for item in layout.paint_order if item.kind == "box"}
    for box in scene.iter_boxes():
        for i, (face, color_attr) in enumerate(VISIBLE_FACES):
            xy = np.array([scene.to_screen(p, layout.angles).to_tuple() for p in box.face_polygon(face)])
            ax.add_patch(Polygon(
                xy,
                closed=True,
                facecolor=getattr(box, color_attr),
                edgecolor="black",
                lw=0.5,
                zorder=ranks[box.id] + i * 1e-3,
            ))


def _draw_connectors(ax: Axes, scene: Scene, layout: SceneLayout) -> None:
    for cid, projected in layout.connectors.items():
        connector = scene.connectors[cid]
        pts = projected.screen_points
        for i, rank in enumerate(projected.segment_ranks):
            ax.plot(
                [pts[i].x, pts[i + 1].x],
                [pts[i].y, pts[i + 1].y],
                color=connector.color,
                lw=connector.width,
                ls=_LINE_STYLES[connector.line_style],
                solid_capstyle="round",
                zorder=rank + 0.5,
            )


def _draw_particles(ax: Axes, scene: Scene, frame: ParticleFrame, angles: AngleConfig, top: float) -> None:
    for cid, samples in frame.particles.items():
        connector = scene.connectors[cid]
        for sample in samples:
            dots = [(sample.screen, connector.particles.size, 1.0)]
            dots += [
                (scene.to_screen(t.position, angles), t.size, t.opacity)
                for t in sample.trail[1:]
            ]
            for screen, size, alpha in dots:
                ax.scatter([screen.x], [screen.y], s=size ** 2, color=connector.particle_color,
                           alpha=alpha, edgecolors="none", zorder=top + 1)


def plot_scene(
    scene: Scene,
    angles: Optional[AngleConfig] = None,
    frame: Optional[ParticleFrame] = None,
    ax: Optional[Axes] = None,
    show: bool = False,
) -> Figure:
    """
    Plot the scene for one camera.

    Args:
        scene: Scene to draw.
        angles: Camera; defaults to the 60/45 isometric camera.
        frame: Optional particle frame from the animator.
        ax: Axes to draw into; a new figure is created if omitted.
        show: Call plt.show() when done.

    Returns:
        The figure holding the plot.
    """
    angles = angles or AngleConfig()
    layout = scene.layout(angles)

    if ax is None:
        plt.rcParams["figure.constrained_layout.use"] = True
        fig, ax = plt.subplots(figsize=(8, 6))
    else:
        fig = ax.figure

    _draw_boxes(ax, scene, layout)
    _draw_connectors(ax, scene, layout)
    if frame is not None:
        top = max((item.rank for item in layout.paint_order), default=0)
        _draw_particles(ax, scene, frame, angles, top)

    ax.set_title(f"rotateX={angles.rotate_x:g}°, rotateZ={angles.rotate_z:g}°")
    ax.set_aspect("equal")
    ax.autoscale_view()
    ax.invert_yaxis()  # screen y grows downwards
    ax.axis("off")

    logger.debug(f"Plotted {len(scene.boxes)} boxes and {len(layout.connectors)} connectors.")
    if show:
        plt.show()
    return fig
