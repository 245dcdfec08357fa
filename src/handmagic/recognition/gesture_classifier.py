"""
Static Gesture Classifier
==========================

Rule-based gesture recognition from hand landmark geometry.
Maps the 21 joints of one hand to a gesture category and a strength.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict

from handmagic.detection.landmarks import (
    NUM_LANDMARKS, LandmarkIndex, PoseLike, as_landmarks,
)
from .geometry import distance, is_extended

logger = logging.getLogger(__name__)


class GestureType(Enum):
    """Recognized gesture categories."""
    NONE = "none"
    OPEN_HAND = "open_hand"
    CLOSED_FIST = "closed_fist"
    VICTORY = "victory"
    PINCH = "pinch"
    THUMBS_UP = "thumbs_up"
    ROCK_ON = "rock_on"
    # Two-hand gesture, emitted only by DoublePalmDetector
    DOUBLE_PALM = "double_palm"

    @classmethod
    def from_string(cls, name: str) -> "GestureType":
        """Convert a string gesture name to GestureType, safely."""
        try:
            return cls(name.lower())
        except (ValueError, AttributeError):
            return cls.NONE

    @property
    def label(self) -> str:
        """Short effect label shown on the status overlay."""
        return GESTURE_LABELS.get(self, "")


GESTURE_LABELS: Dict[GestureType, str] = {
    GestureType.OPEN_HAND: "Swirl",
    GestureType.CLOSED_FIST: "Repel",
    GestureType.VICTORY: "Flow",
    GestureType.PINCH: "Gravity",
    GestureType.THUMBS_UP: "Orbit",
    GestureType.ROCK_ON: "Chaos",
}


@dataclass(frozen=True)
class Gesture:
    """Classification result: category plus strength in [0, 1]."""
    gesture_type: GestureType
    strength: float

    @property
    def name(self) -> str:
        return self.gesture_type.value

    @property
    def is_valid(self) -> bool:
        return self.gesture_type != GestureType.NONE

    @staticmethod
    def none() -> "Gesture":
        """Create empty/no gesture result."""
        return Gesture(gesture_type=GestureType.NONE, strength=0.0)

    @staticmethod
    def of(gesture_type: GestureType) -> "Gesture":
        """Full-strength gesture of the given type."""
        return Gesture(gesture_type=gesture_type, strength=1.0)


@dataclass
class GestureClassifierConfig:
    """Gesture classifier configuration."""
    # Thumb-index tip distance below which the hand is pinching
    pinch_threshold: float = 0.05
    # Strength falls linearly from 1 at contact by this factor per unit distance
    pinch_strength_gain: float = 20.0
    debug: bool = False

    @classmethod
    def from_dict(cls, config: dict) -> "GestureClassifierConfig":
        """Create config from dictionary."""
        return cls(
            pinch_threshold=config.get("pinch_threshold", 0.05),
            pinch_strength_gain=config.get("pinch_strength_gain", 20.0),
            debug=config.get("debug", False),
        )


# (tip, proximal joint) per digit; the thumb has no PIP so its MCP is used
FINGER_JOINTS = {
    "thumb": (LandmarkIndex.THUMB_TIP, LandmarkIndex.THUMB_MCP),
    "index": (LandmarkIndex.INDEX_TIP, LandmarkIndex.INDEX_PIP),
    "middle": (LandmarkIndex.MIDDLE_TIP, LandmarkIndex.MIDDLE_PIP),
    "ring": (LandmarkIndex.RING_TIP, LandmarkIndex.RING_PIP),
    "pinky": (LandmarkIndex.PINKY_TIP, LandmarkIndex.PINKY_PIP),
}


class GestureClassifier:
    """
    Rule-based single-hand gesture classifier.

    The classifier is a pure function of the current frame's joints; it
    keeps no history. Rules are checked in a fixed order and the first
    match wins, since several rules can hold at once:

    1. PINCH (thumb and index tips touching), regardless of other fingers
    2. CLOSED_FIST (no digit extended)
    3. ROCK_ON (index + pinky)
    4. VICTORY (index + middle)
    5. THUMBS_UP (thumb only)
    6. OPEN_HAND (four or more digits extended)

    Example:
        >>> classifier = GestureClassifier()
        >>> gesture = classifier.classify(hand_pose)
        >>> if gesture.is_valid:
        ...     print(f"Detected: {gesture.name} ({gesture.strength:.2f})")
    """

    def __init__(self, config: GestureClassifierConfig = None):
        self.config = config or GestureClassifierConfig()

    def classify(self, pose: PoseLike) -> Gesture:
        """
        Classify a hand pose.

        Args:
            pose: HandPose, landmark sequence or (N, 3) array

        Returns:
            Gesture; incomplete detections yield Gesture.none()
        """
        landmarks = as_landmarks(pose)
        if len(landmarks) < NUM_LANDMARKS:
            return Gesture.none()

        pinch_dist = distance(landmarks[LandmarkIndex.THUMB_TIP], landmarks[LandmarkIndex.INDEX_TIP])
        if pinch_dist < self.config.pinch_threshold:
            strength = min(1.0, max(0.0, 1.0 - pinch_dist * self.config.pinch_strength_gain))
            return Gesture(GestureType.PINCH, strength)

        fingers = self.finger_states(landmarks)
        extended_count = sum(1 for extended in fingers.values() if extended)

        if self.config.debug:
            logger.debug("Finger states: %s (extended=%d)", fingers, extended_count)

        if extended_count == 0:
            return Gesture.of(GestureType.CLOSED_FIST)

        if fingers["index"] and fingers["pinky"] and not fingers["middle"] and not fingers["ring"]:
            return Gesture.of(GestureType.ROCK_ON)

        if fingers["index"] and fingers["middle"] and not fingers["ring"] and not fingers["pinky"]:
            return Gesture.of(GestureType.VICTORY)

        if fingers["thumb"] and extended_count == 1:
            return Gesture.of(GestureType.THUMBS_UP)

        if extended_count >= 4:
            return Gesture.of(GestureType.OPEN_HAND)

        return Gesture.none()

    @staticmethod
    def finger_states(landmarks) -> Dict[str, bool]:
        """Extension flag for each of the five digits."""
        return {
            finger: is_extended(landmarks, tip, proximal)
            for finger, (tip, proximal) in FINGER_JOINTS.items()
        }


_default_classifier = GestureClassifier()


def classify_gesture(pose: PoseLike) -> Gesture:
    """Classify with the default thresholds."""
    return _default_classifier.classify(pose)
