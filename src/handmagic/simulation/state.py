"""Cross-tick interaction state shared by the physics and camera stages."""

from dataclasses import dataclass, field

import numpy as np

from handmagic.recognition.gesture_classifier import Gesture


@dataclass
class InteractionState:
    """Mutable interaction state, updated once per tick.

    Attributes:
        hand_position: Smoothed hand position in world space, shape (3,)
        gesture: Current single-hand classification
        hand_present: Whether a hand was tracked this tick
        time: Elapsed simulation time in seconds
    """
    hand_position: np.ndarray = field(default_factory=lambda: np.zeros(3, dtype=np.float32))
    gesture: Gesture = field(default_factory=Gesture.none)
    hand_present: bool = False
    time: float = 0.0

    def clear_hand(self) -> None:
        """Mark the hand as absent; the smoothed position is kept."""
        self.hand_present = False
        self.gesture = Gesture.none()
