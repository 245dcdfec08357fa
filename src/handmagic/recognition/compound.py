"""
Compound Gesture Detector
==========================

Debounced two-hand gesture: both hands showing an open palm twice within
a short window fires a one-shot DOUBLE_PALM trigger.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from .gesture_classifier import Gesture, GestureType

logger = logging.getLogger(__name__)


@dataclass
class CompoundGestureConfig:
    """Double-palm timing configuration."""
    window_ms: float = 1000.0

    @classmethod
    def from_dict(cls, config: dict) -> "CompoundGestureConfig":
        """Create config from dictionary."""
        return cls(window_ms=config.get("window_ms", 1000.0))


@dataclass
class CompoundTimerState:
    """Start of the currently open double-palm window, or None when unset."""
    started_ms: Optional[float] = None

    @property
    def is_set(self) -> bool:
        return self.started_ms is not None


class DoublePalmDetector:
    """
    Edge detector over two simultaneous hand classifications.

    Only call update() on ticks where exactly two hands are present.

    Behaviour per call:
    - both OPEN_HAND, timer unset: open the window
    - both OPEN_HAND, inside the window: fire once, clear the timer
    - both OPEN_HAND, window stale: restart the window at `now_ms`
    - otherwise: clear the timer only once the window has expired, so a
      single missed frame does not lose an open window

    Example:
        >>> detector = DoublePalmDetector()
        >>> if detector.update(left, right, now_ms):
        ...     toggle_fullscreen()
    """

    def __init__(self, config: Optional[CompoundGestureConfig] = None):
        self.config = config or CompoundGestureConfig()
        self.state = CompoundTimerState()
        self._trigger_count = 0

    def update(self, first: Gesture, second: Gesture, now_ms: float) -> bool:
        """
        Feed the classifications of both hands for one tick.

        Args:
            first: Classification of the first hand
            second: Classification of the second hand
            now_ms: Current timestamp in milliseconds

        Returns:
            True if the DOUBLE_PALM trigger fired on this tick
        """
        both_open = (first.gesture_type == GestureType.OPEN_HAND and
                     second.gesture_type == GestureType.OPEN_HAND)

        if both_open:
            if not self.state.is_set:
                self.state.started_ms = now_ms
                return False

            elapsed = now_ms - self.state.started_ms
            if elapsed < self.config.window_ms:
                self.state.started_ms = None
                self._trigger_count += 1
                logger.info("Double palm triggered (%.0fms window)", elapsed)
                return True

            self.state.started_ms = now_ms
            return False

        if self.state.is_set and (now_ms - self.state.started_ms) > self.config.window_ms:
            self.state.started_ms = None

        return False

    def reset(self) -> None:
        """Clear the timer."""
        self.state.started_ms = None

    @property
    def trigger_count(self) -> int:
        """Number of triggers fired since construction."""
        return self._trigger_count
