"""
Particle Sampler
================
Moves markers along a route over time.

Why is this file needed?
------------------------
1. Sampling: A normalised progress value (0..1) is mapped to a point on a
   piecewise-linear chain of segments by arclength.
2. Time stepping: Particles advance by speed * elapsed time, are emitted at a
   fixed rate and retired the moment they leave [0, 1].
3. Trails: A trail is derived from the head position on demand; it holds no
   state of its own.

This module is pure Python/NumPy. Wall-clock time is supplied by the caller
(see `isoscene.controller.animation`).
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace, asdict
from enum import StrEnum
import itertools
import logging
from typing import Any, Dict, Iterator, NamedTuple, Optional, Sequence, TYPE_CHECKING

import numpy as np

from isoscene import config
from isoscene.model.geometry_primitives import Point3D, Segment
from isoscene.model.geometry_utils import clamp
from isoscene.model.routing import Route

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)

FORWARD = 1
BACKWARD = -1

_PARTICLE_IDS: Iterator[int] = itertools.count()


class ParticleDirection(StrEnum):
    FORWARD = "forward"
    BACKWARD = "backward"
    BIDIRECTIONAL = "bidirectional"

    @staticmethod
    def parse(token: str) -> ParticleDirection:
        try:
            return ParticleDirection(str(token).strip().lower())
        except ValueError:
            logger.warning(f"Unknown particle direction '{token}', using '{ParticleDirection.FORWARD}'.")
            return ParticleDirection.FORWARD

    @property
    def emits_forward(self) -> bool:
        return self in (ParticleDirection.FORWARD, ParticleDirection.BIDIRECTIONAL)

    @property
    def emits_backward(self) -> bool:
        return self in (ParticleDirection.BACKWARD, ParticleDirection.BIDIRECTIONAL)


class ParticleEffect(StrEnum):
    NONE = "none"
    GLOW = "glow"
    TRAIL = "trail"
    PULSE = "pulse"
    RAINBOW = "rainbow"
    SPARK = "spark"

    @staticmethod
    def parse(token: str) -> ParticleEffect:
        try:
            return ParticleEffect(str(token).strip().lower())
        except ValueError:
            logger.warning(f"Unknown particle effect '{token}', using '{ParticleEffect.GLOW}'.")
            return ParticleEffect.GLOW


@dataclass
class ParticleConfig:
    """Particle settings for one connector."""
    enabled: bool = False
    size: float = config.DEFAULT_PARTICLE_SIZE
    rate: float = config.DEFAULT_PARTICLE_RATE      # particles per second
    speed: float = config.DEFAULT_PARTICLE_SPEED    # progress units per second
    effect: ParticleEffect = ParticleEffect.GLOW
    direction: ParticleDirection = ParticleDirection.FORWARD
    trail_length: int = config.DEFAULT_TRAIL_LENGTH
    color: Optional[str] = None                     # None -> connector colour

    def __post_init__(self) -> None:
        if self.size <= 0:
            raise ValueError(f"Particle size must be positive, got {self.size}.")
        if self.rate < 0:
            raise ValueError(f"Particle rate must be >= 0, got {self.rate}.")
        if self.speed < 0:
            raise ValueError(f"Particle speed must be >= 0, got {self.speed}.")
        if self.trail_length < 0:
            raise ValueError(f"Trail length must be >= 0, got {self.trail_length}.")

    @property
    def emission_interval(self) -> float:
        """Seconds between emissions; infinite when the rate is zero."""
        return 1.0 / self.rate if self.rate > 0 else float("inf")

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["effect"] = self.effect.value
        d["direction"] = self.direction.value
        return d

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> ParticleConfig:
        return ParticleConfig(
            enabled=bool(data.get("enabled", False)),
            size=float(data.get("size", config.DEFAULT_PARTICLE_SIZE)),
            rate=float(data.get("rate", config.DEFAULT_PARTICLE_RATE)),
            speed=float(data.get("speed", config.DEFAULT_PARTICLE_SPEED)),
            effect=ParticleEffect.parse(data.get("effect", ParticleEffect.GLOW)),
            direction=ParticleDirection.parse(data.get("direction", ParticleDirection.FORWARD)),
            trail_length=int(data.get("trail_length", config.DEFAULT_TRAIL_LENGTH)),
            color=data.get("color"),
        )


@dataclass(frozen=True)
class Particle:
    id: int
    progress: float
    created_at: float


class StepResult(NamedTuple):
    particles: list[Particle]
    last_emit_time: Optional[float]


@dataclass(frozen=True)
class TrailPoint:
    position: Point3D
    progress: float
    size: float
    opacity: float


def sample_progress(
    segments: Sequence[Segment],
    total_length: float,
    progress: float,
    reference: Optional[Point3D] = None,
) -> Point3D:
    """
    Point at `progress` of the arclength along a chain of segments.

    Args:
        segments: Continuous chain of segments.
        total_length: Sum of the segment lengths.
        progress: Normalised position, clamped to [0, 1].
        reference: Returned for an empty or zero-length path. Defaults to the
            first segment start, or the logical origin without segments.

    Returns:
        The interpolated point.
    """
    if not segments or total_length <= 0:
        if reference is not None:
            return reference
        return segments[0].start if segments else Point3D(0.0, 0.0, 0.0)

    target = clamp(progress) * total_length
    lengths: npt.NDArray[np.float64] = np.fromiter((s.length for s in segments), dtype=np.float64)
    cumulative = np.cumsum(lengths)

    # First segment whose accumulated length reaches the target
    idx = int(np.searchsorted(cumulative, target, side="left"))
    if idx >= len(segments):
        return segments[-1].end

    segment = segments[idx]
    if segment.length <= 0:
        return segment.start
    before = float(cumulative[idx]) - segment.length
    return segment.point_at((target - before) / segment.length)


def sample_route(route: Route, progress: float) -> Point3D:
    """Point at `progress` (0..1) of a route's arclength; its origin for an empty route."""
    return sample_progress(route.segments, route.total_length, progress, reference=route.origin)


def step_particles(
    particles: Sequence[Particle],
    delta_time: float,
    speed: float,
    direction: int,
    emission_rate: float,
    last_emit_time: Optional[float],
    now: float,
) -> StepResult:
    """
    Advance one particle stream by `delta_time` seconds and emit if due.

    Args:
        particles: Current particles of the stream.
        delta_time: Seconds since the previous step.
        speed: Progress units per second.
        direction: FORWARD (+1) or BACKWARD (-1).
        emission_rate: Particles per second; 0 disables emission.
        last_emit_time: Time of the previous emission, None if none yet.
        now: Current time in seconds.

    Returns:
        The surviving and newly emitted particles, and the updated emission time.
    """
    if direction not in (FORWARD, BACKWARD):
        raise ValueError(f"Direction must be +1 or -1, got {direction}.")

    delta = direction * speed * max(0.0, delta_time)
    moved = (replace(p, progress=p.progress + delta) for p in particles)
    alive = [p for p in moved if 0.0 <= p.progress <= 1.0]

    if emission_rate > 0 and (last_emit_time is None or now - last_emit_time >= 1.0 / emission_rate):
        start = 0.0 if direction == FORWARD else 1.0
        alive.append(Particle(id=next(_PARTICLE_IDS), progress=start, created_at=now))
        last_emit_time = now

    return StepResult(particles=alive, last_emit_time=last_emit_time)


def trail_points(
    segments: Sequence[Segment],
    total_length: float,
    particle: Particle,
    reversed_: bool = False,
    count: int = config.DEFAULT_TRAIL_LENGTH,
    size: float = config.DEFAULT_PARTICLE_SIZE,
    step: float = config.TRAIL_STEP,
    reference: Optional[Point3D] = None,
) -> list[TrailPoint]:
    """
    Head plus `count` trailing points.

    Trailing points sit `step` progress units apart behind the head (ahead of
    it in progress terms for reversed particles) and shrink and fade with
    distance from it.
    """
    points: list[TrailPoint] = []
    for i in range(count + 1):
        if reversed_:
            progress = min(1.0, particle.progress + i * step)
        else:
            progress = max(0.0, particle.progress - i * step)
        opacity = 1.0 - i * (config.TRAIL_OPACITY_SPAN / count) if count else 1.0
        points.append(TrailPoint(
            position=sample_progress(segments, total_length, progress, reference),
            progress=progress,
            size=max(0.0, size * (1.0 - i * config.TRAIL_SIZE_FALLOFF)),
            opacity=opacity,
        ))
    return points


@dataclass
class ParticleStream:
    """
    Particle state for one connector: a forward and a backward stream, each
    with its own emission clock.

    `advance(now)` derives the elapsed time from successive timestamps, so
    the motion does not depend on the frame rate.
    """
    settings: ParticleConfig = field(default_factory=ParticleConfig)
    forward: list[Particle] = field(default_factory=list)
    backward: list[Particle] = field(default_factory=list)
    last_forward_emit: Optional[float] = None
    last_backward_emit: Optional[float] = None
    last_frame_time: Optional[float] = None

    def clear(self) -> None:
        self.forward = []
        self.backward = []
        self.last_forward_emit = None
        self.last_backward_emit = None

    def set_direction(self, direction: ParticleDirection) -> None:
        if direction != self.settings.direction:
            self.settings.direction = direction
            self.clear()

    def set_enabled(self, enabled: bool) -> None:
        self.settings.enabled = enabled
        if not enabled:
            self.clear()
            self.last_frame_time = None

    def advance(self, now: float, total_length: float) -> None:
        """Step both streams to time `now` (seconds)."""
        delta_time = 0.0 if self.last_frame_time is None else max(0.0, now - self.last_frame_time)
        self.last_frame_time = now

        if not self.settings.enabled or total_length <= 0:
            return

        s = self.settings
        if s.direction.emits_forward or self.forward:
            rate = s.rate if s.direction.emits_forward else 0.0
            self.forward, self.last_forward_emit = step_particles(
                self.forward, delta_time, s.speed, FORWARD, rate, self.last_forward_emit, now
            )
        if s.direction.emits_backward or self.backward:
            rate = s.rate if s.direction.emits_backward else 0.0
            self.backward, self.last_backward_emit = step_particles(
                self.backward, delta_time, s.speed, BACKWARD, rate, self.last_backward_emit, now
            )

    def heads(self, route: Route) -> list[tuple[Particle, Point3D, bool]]:
        """(particle, position, is_reversed) for every live particle."""
        result = [(p, sample_route(route, p.progress), False) for p in self.forward]
        result += [(p, sample_route(route, p.progress), True) for p in self.backward]
        return result

    def trails(self, route: Route) -> list[list[TrailPoint]]:
        s = self.settings
        return [
            trail_points(
                route.segments, route.total_length, p, reversed_, s.trail_length, s.size, reference=route.origin
            )
            for p, reversed_ in [(p, False) for p in self.forward] + [(p, True) for p in self.backward]
        ]
