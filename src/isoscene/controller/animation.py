"""
Particle Animation Loop
=======================
This module drives the particle streams of all connectors from a QTimer.

Why is this file needed?
------------------------
1. Frame loop: Each timer tick advances every enabled stream with the time
   elapsed since the previous tick, measured on a monotonic clock.
2. Signals: The sampled particle positions are handed to the view through
   `frame_ready`, one ParticleFrame per tick.
3. Lifecycle: Starting and stopping are idempotent; stopping leaves no
   pending tick behind.

All work runs on the thread that owns the animator; there are no worker
threads here.
"""
from __future__ import annotations

from dataclasses import dataclass, field
import logging
import time
from typing import Dict, List, Optional

from PySide6.QtCore import QObject, QTimer, Signal

from isoscene import config
from isoscene.app.state import AngleStore
from isoscene.model.geometry_primitives import Point2D, Point3D
from isoscene.model.particles import ParticleEffect, ParticleStream, TrailPoint
from isoscene.model.scene import Scene
from isoscene.model.transform import AngleConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParticleSample:
    particle_id: int
    progress: float
    position: Point3D
    screen: Point2D
    is_reversed: bool
    trail: List[TrailPoint] = field(default_factory=list)


@dataclass(frozen=True)
class ParticleFrame:
    timestamp: float
    particles: Dict[str, List[ParticleSample]]


class ParticleAnimator(QObject):
    frame_ready = Signal(object)

    def __init__(self, scene: Scene, store: AngleStore, interval_ms: int = config.FRAME_INTERVAL_MS) -> None:
        super().__init__()
        self.scene = scene
        self.store = store
        self.streams: Dict[str, ParticleStream] = {}

        self._timer = QTimer(self)
        self._timer.setInterval(interval_ms)
        self._timer.timeout.connect(self._on_timeout)

        self.sync_streams()

    @property
    def is_running(self) -> bool:
        return self._timer.isActive()

    def sync_streams(self) -> None:
        """Create streams for new connectors and drop those of removed ones."""
        for cid, connector in self.scene.connectors.items():
            if cid not in self.streams:
                self.streams[cid] = ParticleStream(settings=connector.particles)
        for cid in list(self.streams):
            if cid not in self.scene.connectors:
                del self.streams[cid]

    def start(self) -> None:
        if self._timer.isActive():
            return
        for stream in self.streams.values():
            stream.last_frame_time = None
        self._timer.start()
        logger.debug("Particle animation started.")

    def stop(self) -> None:
        if not self._timer.isActive():
            return
        self._timer.stop()
        logger.debug("Particle animation stopped.")

    def _on_timeout(self) -> None:
        self.tick()

    def tick(self, now: Optional[float] = None) -> ParticleFrame:
        """
        Advance all streams to `now` (seconds, defaults to a monotonic clock)
        and emit the sampled frame. Routes and camera are read fresh each tick.
        """
        now = time.perf_counter() if now is None else now
        self.sync_streams()
        frame = build_frame(self.scene, self.streams, self.store.current(), now)
        self.frame_ready.emit(frame)
        return frame


def build_frame(
    scene: Scene,
    streams: Dict[str, ParticleStream],
    angles: AngleConfig,
    now: float,
) -> ParticleFrame:
    """
    Advance every enabled stream to `now` and sample its particles.

    Args:
        scene: Scene providing the routes, scale and origin.
        streams: Particle state per connector id.
        angles: Camera used for the screen positions.
        now: Timestamp in seconds.
    """
    samples: Dict[str, List[ParticleSample]] = {}

    for cid, stream in streams.items():
        if not stream.settings.enabled or cid not in scene.connectors:
            continue
        route = scene.route_for(scene.connectors[cid])

        stream.advance(now, route.total_length)
        heads = stream.heads(route)
        if stream.settings.effect is ParticleEffect.TRAIL:
            trails = stream.trails(route)
        else:
            trails = [[] for _ in heads]
        samples[cid] = [
            ParticleSample(
                particle_id=particle.id,
                progress=particle.progress,
                position=position,
                screen=scene.to_screen(position, angles),
                is_reversed=is_reversed,
                trail=trail,
            )
            for (particle, position, is_reversed), trail in zip(heads, trails)
        ]

    return ParticleFrame(timestamp=now, particles=samples)
