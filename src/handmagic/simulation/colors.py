"""
Color Dynamics
===============

Palettes and vectorized color rules for the particle field.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Tuple

import numpy as np

RGB = Tuple[float, float, float]


@dataclass(frozen=True)
class Palette:
    """Two-tone palette.

    `seed_start`/`seed_end` bound the random gradient used when seeding.
    Idle particles relax to `relax_positive` when their home lies at x > 0
    and to `relax_negative` otherwise.
    """
    seed_start: RGB
    seed_end: RGB
    relax_positive: RGB
    relax_negative: RGB


class Theme(Enum):
    """Named color themes."""
    NEBULA = "nebula"
    EMBER = "ember"
    AURORA = "aurora"

    @classmethod
    def from_string(cls, name: str) -> "Theme":
        """Convert a theme name to Theme, falling back to NEBULA."""
        try:
            return cls(name.lower())
        except (ValueError, AttributeError):
            return cls.NEBULA

    @property
    def palette(self) -> Palette:
        return PALETTES[self]

    def next(self) -> "Theme":
        """The following theme, wrapping around."""
        members = list(Theme)
        return members[(members.index(self) + 1) % len(members)]


PALETTES: Dict[Theme, Palette] = {
    # Cyan 0x00ffff to magenta 0xff00ff
    Theme.NEBULA: Palette(
        seed_start=(0.0, 1.0, 1.0),
        seed_end=(1.0, 0.0, 1.0),
        relax_positive=(0.0, 0.8, 1.0),
        relax_negative=(1.0, 0.8, 1.0),
    ),
    Theme.EMBER: Palette(
        seed_start=(1.0, 0.3, 0.0),
        seed_end=(1.0, 0.85, 0.2),
        relax_positive=(1.0, 0.45, 0.1),
        relax_negative=(1.0, 0.8, 0.3),
    ),
    Theme.AURORA: Palette(
        seed_start=(0.1, 1.0, 0.5),
        seed_end=(0.4, 0.2, 1.0),
        relax_positive=(0.2, 1.0, 0.6),
        relax_negative=(0.5, 0.4, 1.0),
    ),
}


def _hue_to_rgb(p: np.ndarray, q: np.ndarray, t: np.ndarray) -> np.ndarray:
    t = np.mod(t, 1.0)
    return np.select(
        [t < 1.0 / 6.0, t < 0.5, t < 2.0 / 3.0],
        [p + (q - p) * 6.0 * t, q, p + (q - p) * 6.0 * (2.0 / 3.0 - t)],
        default=p,
    )


def hsl_to_rgb(hue, saturation: float, lightness: float) -> np.ndarray:
    """Vectorized HSL to RGB.

    Args:
        hue: Scalar or array of hues; wrapped into [0, 1)
        saturation: Saturation in [0, 1]
        lightness: Lightness in [0, 1]

    Returns:
        Array of shape (..., 3) with RGB components in [0, 1]
    """
    h = np.mod(np.asarray(hue, dtype=np.float64), 1.0)
    s = min(max(saturation, 0.0), 1.0)
    l = min(max(lightness, 0.0), 1.0)

    if s == 0.0:
        return np.stack([np.full_like(h, l)] * 3, axis=-1)

    q = l * (1.0 + s) if l <= 0.5 else l + s - l * s
    p = 2.0 * l - q
    p = np.full_like(h, p)
    q = np.full_like(h, q)
    return np.stack([
        _hue_to_rgb(p, q, h + 1.0 / 3.0),
        _hue_to_rgb(p, q, h),
        _hue_to_rgb(p, q, h - 1.0 / 3.0),
    ], axis=-1)


def seed_colors(count: int, palette: Palette, rng: np.random.Generator) -> np.ndarray:
    """Random mix along the palette's seed gradient, shape (count, 3)."""
    start = np.asarray(palette.seed_start, dtype=np.float32)
    end = np.asarray(palette.seed_end, dtype=np.float32)
    mix = rng.random((count, 1), dtype=np.float32)
    return start + (end - start) * mix


def rainbow_colors(x: np.ndarray, time: float) -> np.ndarray:
    """Hue wave travelling along x over time."""
    return hsl_to_rgb(time * 0.2 + x * 0.01, 0.8, 0.6)


def heat_colors(dist: np.ndarray) -> np.ndarray:
    """White-to-red gradient, red close to the hand."""
    intensity = np.minimum(1.0, 40.0 / (dist + 1.0))
    out = np.empty(dist.shape + (3,), dtype=np.float64)
    out[:, 0] = 1.0
    out[:, 1] = 1.0 - intensity
    out[:, 2] = 1.0 - intensity
    return out


def relax_colors(
    colors: np.ndarray,
    home_x: np.ndarray,
    palette: Palette,
    rng: np.random.Generator,
    probability: float,
) -> int:
    """Snap a random subset of particles back to the palette gradient.

    Returns:
        Number of particles recolored
    """
    chosen = rng.random(colors.shape[0]) < probability
    if not np.any(chosen):
        return 0
    positive = home_x[chosen] > 0
    colors[chosen] = np.where(
        positive[:, None],
        np.asarray(palette.relax_positive, dtype=colors.dtype),
        np.asarray(palette.relax_negative, dtype=colors.dtype),
    )
    return int(np.count_nonzero(chosen))
