"""
Camera Framing Controller
==========================

Two exclusive modes, chosen each tick:

- follow: the hand is near the left/right edge of the interaction area,
  so the camera drifts sideways toward it
- orbit: no hand, the camera sweeps slowly around the origin

In both modes the camera looks at the origin.
"""

import math
import logging
from dataclasses import dataclass, field
from typing import Optional

import numpy as np

logger = logging.getLogger(__name__)


@dataclass
class FramingConfig:
    """Camera framing configuration."""
    # Distance of the camera from the origin along z
    distance: float = 100.0
    # Half-width of the interaction area in world units
    bounds: float = 80.0
    # Fraction of bounds past which the camera follows the hand
    edge_threshold: float = 0.8
    follow_speed: float = 100.0
    orbit_radius: float = 20.0
    # Radians of orbit phase per millisecond of wall-clock time
    orbit_rate: float = 0.0001
    orbit_y_ratio: float = 0.7

    @classmethod
    def from_dict(cls, config: dict) -> "FramingConfig":
        """Create config from dictionary."""
        return cls(
            distance=config.get("distance", 100.0),
            bounds=config.get("bounds", 80.0),
            edge_threshold=config.get("edge_threshold", 0.8),
            follow_speed=config.get("follow_speed", 100.0),
            orbit_radius=config.get("orbit_radius", 20.0),
            orbit_rate=config.get("orbit_rate", 0.0001),
            orbit_y_ratio=config.get("orbit_y_ratio", 0.7),
        )


@dataclass
class CameraPose:
    """Camera position and look target in world space."""
    position: np.ndarray = field(default_factory=lambda: np.zeros(3))
    target: np.ndarray = field(default_factory=lambda: np.zeros(3))

    def copy(self) -> "CameraPose":
        return CameraPose(position=self.position.copy(), target=self.target.copy())


class CameraController:
    """
    Derives the camera pose from hand presence and position.

    Example:
        >>> camera = CameraController()
        >>> pose = camera.update(state.hand_present, state.hand_position, dt, now_ms)
    """

    FOLLOW = "follow"
    ORBIT = "orbit"
    HOLD = "hold"

    def __init__(self, config: Optional[FramingConfig] = None):
        self.config = config or FramingConfig()
        self.pose = CameraPose(position=np.array([0.0, 0.0, self.config.distance]))
        self._mode = self.HOLD

    def update(self, hand_present: bool, hand_position: np.ndarray,
               dt: float, now_ms: float) -> CameraPose:
        """
        Update the camera for one tick.

        Args:
            hand_present: Whether a hand is tracked
            hand_position: Smoothed hand position in world space
            dt: Clamped tick duration in seconds
            now_ms: Wall-clock time in milliseconds (drives the idle orbit)

        Returns:
            Copy of the updated camera pose
        """
        cfg = self.config
        if hand_present:
            screen_x = float(hand_position[0]) / cfg.bounds
            if abs(screen_x) > cfg.edge_threshold:
                self.pose.position[0] += screen_x * cfg.follow_speed * dt
                self._mode = self.FOLLOW
            else:
                self._mode = self.HOLD
        else:
            t = now_ms * cfg.orbit_rate
            self.pose.position[0] = math.sin(t) * cfg.orbit_radius
            self.pose.position[1] = math.cos(t * cfg.orbit_y_ratio) * cfg.orbit_radius
            self._mode = self.ORBIT

        self.pose.target[:] = 0.0
        return self.pose.copy()

    @property
    def mode(self) -> str:
        """Mode chosen on the last update."""
        return self._mode
