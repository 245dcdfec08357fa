"""
Gesture Force Fields
=====================

One force function per gesture category. Each function adds its
contribution to the particle velocities in place, restricted to the
particles inside its radius of influence.
"""

from dataclasses import dataclass
from typing import Callable, Dict

import numpy as np

from handmagic.recognition.gesture_classifier import GestureType

SWIRL_RADIUS = 40.0
REPEL_RADIUS = 50.0
SUCTION_RADIUS = 60.0
WAVE_RADIUS = 40.0
ORBIT_RADIUS = 40.0
CHAOS_RADIUS = 60.0
PASSIVE_RADIUS = 15.0


@dataclass
class ForceContext:
    """Per-tick inputs shared by all force functions.

    `delta` and `dist` are measured from the hand to each particle before
    any velocity change of this tick.
    """
    positions: np.ndarray   # (N, 3)
    velocities: np.ndarray  # (N, 3), updated in place
    delta: np.ndarray       # (N, 3) particle - hand
    dist: np.ndarray        # (N,)
    index: np.ndarray       # (N,) particle index as float
    hand: np.ndarray        # (3,)
    time: float
    dt: float
    strength: float
    rng: np.random.Generator


ForceFunction = Callable[[ForceContext], None]


def _radial_push(ctx: ForceContext, radius: float, gain: float) -> None:
    # Particles sitting exactly on the hand have no defined direction
    mask = (ctx.dist < radius) & (ctx.dist > 0)
    if not np.any(mask):
        return
    dist = ctx.dist[mask]
    direction = ctx.delta[mask] / dist[:, None]
    force = (radius - dist) * gain
    ctx.velocities[mask] += direction * (force * ctx.dt)[:, None]


def swirl(ctx: ForceContext) -> None:
    """OPEN_HAND: tangential swirl, vertical ripple and gentle pull inward."""
    mask = ctx.dist < SWIRL_RADIUS
    if not np.any(mask):
        return
    d = ctx.delta[mask]
    force = (SWIRL_RADIUS - ctx.dist[mask]) * 1.5
    v = ctx.velocities[mask]
    v[:, 0] += -d[:, 1] * force * 0.5 * ctx.dt
    v[:, 1] += d[:, 0] * force * 0.5 * ctx.dt
    v[:, 2] += np.sin(ctx.time * 5.0 + ctx.index[mask]) * force * ctx.dt
    v -= d * (2.0 * ctx.dt)
    ctx.velocities[mask] = v


def repel(ctx: ForceContext) -> None:
    """CLOSED_FIST: strong radial explosion."""
    _radial_push(ctx, REPEL_RADIUS, 20.0)


def suction(ctx: ForceContext) -> None:
    """PINCH: attraction scaled by pinch strength."""
    mask = ctx.dist < SUCTION_RADIUS
    if not np.any(mask):
        return
    ctx.velocities[mask] -= ctx.delta[mask] * (150.0 * ctx.strength * ctx.dt)


def wave(ctx: ForceContext) -> None:
    """VICTORY: sine lift travelling along x."""
    mask = ctx.dist < WAVE_RADIUS
    if not np.any(mask):
        return
    px = ctx.positions[mask, 0]
    ctx.velocities[mask, 1] += np.sin(px * 0.2 + ctx.time * 10.0) * 20.0 * ctx.dt


def orbit(ctx: ForceContext) -> None:
    """THUMBS_UP: pull each particle toward its own point circling the hand."""
    mask = ctx.dist < ORBIT_RADIUS
    if not np.any(mask):
        return
    phase = ctx.time * 3.0 + ctx.index[mask] * 0.1
    target_x = ctx.hand[0] + np.sin(phase) * 20.0
    target_y = ctx.hand[1] + np.cos(phase) * 20.0
    p = ctx.positions[mask]
    v = ctx.velocities[mask]
    v[:, 0] += (target_x - p[:, 0]) * 5.0 * ctx.dt
    v[:, 1] += (target_y - p[:, 1]) * 5.0 * ctx.dt
    ctx.velocities[mask] = v


def chaos(ctx: ForceContext) -> None:
    """ROCK_ON: uniform random jitter."""
    mask = ctx.dist < CHAOS_RADIUS
    count = int(np.count_nonzero(mask))
    if count == 0:
        return
    jitter = ctx.rng.random((count, 3)) - 0.5
    ctx.velocities[mask] += jitter * (200.0 * ctx.dt)


def passive_repulse(ctx: ForceContext) -> None:
    """Unrecognized gesture: keep particles from clipping through the hand."""
    _radial_push(ctx, PASSIVE_RADIUS, 10.0)


FORCE_TABLE: Dict[GestureType, ForceFunction] = {
    GestureType.OPEN_HAND: swirl,
    GestureType.CLOSED_FIST: repel,
    GestureType.PINCH: suction,
    GestureType.VICTORY: wave,
    GestureType.THUMBS_UP: orbit,
    GestureType.ROCK_ON: chaos,
}


def force_for(gesture_type: GestureType) -> ForceFunction:
    """Force function for a category; passive repulsion for anything else."""
    return FORCE_TABLE.get(gesture_type, passive_repulse)
