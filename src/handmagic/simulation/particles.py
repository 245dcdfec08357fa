"""
Particle Simulation Engine
===========================

Fixed-size particle field integrated once per tick:

    1. home force      pull back toward the seeded rest position
    2. gesture force   selected from FORCE_TABLE while a hand is present
    3. damping         velocity *= damping, every tick
    4. integration     semi-implicit Euler, position += velocity * dt
    5. color update    while a hand is present

Buffers are parallel (N, 3) arrays owned by the engine. Renderers get
read-only views and must only read them between ticks.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

from handmagic.recognition.gesture_classifier import GestureType
from .colors import Palette, Theme, heat_colors, rainbow_colors, relax_colors, seed_colors
from .forces import ForceContext, force_for
from .state import InteractionState

logger = logging.getLogger(__name__)


@dataclass
class ParticleEngineConfig:
    """Particle field configuration."""
    count: int = 25000
    # Radius of the solid sphere particles are seeded in
    bounds: float = 80.0
    home_strength: float = 1.5
    damping: float = 0.92
    # Frame hitches longer than this are integrated as this long
    max_dt: float = 0.1
    # Chance per particle per tick to relax back to the theme gradient
    color_relax_probability: float = 0.05
    seed: Optional[int] = None
    theme: str = "nebula"

    @classmethod
    def from_dict(cls, config: dict) -> "ParticleEngineConfig":
        """Create config from dictionary."""
        return cls(
            count=config.get("count", 25000),
            bounds=config.get("bounds", 80.0),
            home_strength=config.get("home_strength", 1.5),
            damping=config.get("damping", 0.92),
            max_dt=config.get("max_dt", 0.1),
            color_relax_probability=config.get("color_relax_probability", 0.05),
            seed=config.get("seed"),
            theme=config.get("theme", "nebula"),
        )


def _read_only(array: np.ndarray) -> np.ndarray:
    view = array.view()
    view.flags.writeable = False
    return view


class ParticleField:
    """Particle buffers: positions, velocities, home positions, colors."""

    def __init__(self, positions: np.ndarray, colors: np.ndarray):
        assert positions.ndim == 2 and positions.shape[1] == 3, "positions must be (N, 3)"
        assert colors.shape == positions.shape, "colors must match positions"

        self.positions = np.array(positions, dtype=np.float32)
        self.velocities = np.zeros_like(self.positions)
        self.home_positions = self.positions.copy()
        self.home_positions.flags.writeable = False
        self.colors = np.array(colors, dtype=np.float32)

    @classmethod
    def seeded(cls, count: int, radius: float, palette: Palette,
               rng: np.random.Generator) -> "ParticleField":
        """Uniformly fill a solid sphere of the given radius."""
        assert count > 0, "particle count must be positive"
        r = radius * np.cbrt(rng.random(count))
        theta = rng.random(count) * 2.0 * np.pi
        phi = np.arccos(2.0 * rng.random(count) - 1.0)
        positions = np.column_stack([
            r * np.sin(phi) * np.cos(theta),
            r * np.sin(phi) * np.sin(theta),
            r * np.cos(phi),
        ])
        return cls(positions, seed_colors(count, palette, rng))

    @property
    def count(self) -> int:
        return self.positions.shape[0]

    def check_invariants(self) -> None:
        """Assert all buffers are (N, 3) with the same N."""
        shape = (self.count, 3)
        assert self.velocities.shape == shape, "velocity buffer length mismatch"
        assert self.home_positions.shape == shape, "home buffer length mismatch"
        assert self.colors.shape == shape, "color buffer length mismatch"


class ParticleEngine:
    """
    Gesture-driven particle physics.

    Example:
        >>> engine = ParticleEngine(ParticleEngineConfig(seed=7))
        >>> state = InteractionState()
        >>> engine.step(state, 1 / 60)
        >>> positions = engine.positions  # read-only (N, 3)
    """

    def __init__(self, config: Optional[ParticleEngineConfig] = None,
                 field: Optional[ParticleField] = None):
        self.config = config or ParticleEngineConfig()
        self._rng = np.random.default_rng(self.config.seed)
        self._theme = Theme.from_string(self.config.theme)

        if field is None:
            field = ParticleField.seeded(
                self.config.count, self.config.bounds, self._theme.palette, self._rng)
        field.check_invariants()
        self.field = field
        self._index = np.arange(field.count, dtype=np.float32)
        self._step_count = 0

        logger.info("Particle engine ready: %d particles, theme=%s",
                    field.count, self._theme.value)

    def clamp_dt(self, dt: float) -> float:
        """Clamp elapsed time into [0, max_dt]."""
        return min(max(float(dt), 0.0), self.config.max_dt)

    def step(self, state: InteractionState, dt: float) -> float:
        """
        Advance the field by one tick.

        Args:
            state: Interaction state for this tick (read only here)
            dt: Elapsed seconds since the previous tick

        Returns:
            The clamped dt actually integrated
        """
        dt = self.clamp_dt(dt)
        f = self.field
        pos, vel, home = f.positions, f.velocities, f.home_positions

        vel += (home - pos) * (self.config.home_strength * dt)

        hand_dist = None
        x_before = None
        if state.hand_present:
            hand = np.asarray(state.hand_position, dtype=np.float32)
            delta = pos - hand
            hand_dist = np.sqrt(np.einsum("ij,ij->i", delta, delta))
            x_before = pos[:, 0].copy()
            force_for(state.gesture.gesture_type)(ForceContext(
                positions=pos,
                velocities=vel,
                delta=delta,
                dist=hand_dist,
                index=self._index,
                hand=hand,
                time=state.time,
                dt=dt,
                strength=state.gesture.strength,
                rng=self._rng,
            ))

        vel *= self.config.damping
        pos += vel * dt

        if state.hand_present:
            self._update_colors(state, x_before, hand_dist)

        self._step_count += 1
        return dt

    def _update_colors(self, state: InteractionState, x: np.ndarray, dist: np.ndarray) -> None:
        gesture_type = state.gesture.gesture_type
        if gesture_type == GestureType.VICTORY:
            self.field.colors[:] = rainbow_colors(x, state.time)
        elif gesture_type == GestureType.PINCH:
            self.field.colors[:] = heat_colors(dist)
        else:
            relax_colors(self.field.colors, self.field.home_positions[:, 0],
                         self._theme.palette, self._rng,
                         self.config.color_relax_probability)

    def set_theme(self, theme: Theme) -> None:
        """Switch palette and reseed the colors along its gradient."""
        self._theme = theme
        self.field.colors[:] = seed_colors(self.field.count, theme.palette, self._rng)
        logger.info("Theme set to %s", theme.value)

    @property
    def theme(self) -> Theme:
        return self._theme

    @property
    def count(self) -> int:
        return self.field.count

    @property
    def step_count(self) -> int:
        return self._step_count

    @property
    def positions(self) -> np.ndarray:
        return _read_only(self.field.positions)

    @property
    def colors(self) -> np.ndarray:
        return _read_only(self.field.colors)

    @property
    def velocities(self) -> np.ndarray:
        return _read_only(self.field.velocities)

    @property
    def home_positions(self) -> np.ndarray:
        return self.field.home_positions
