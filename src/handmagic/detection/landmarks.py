"""
Hand Landmark Model
====================

Joint indices and containers for the 21-point hand skeleton produced by
the pose provider (MediaPipe convention).
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import List, NamedTuple, Sequence, Union

import numpy as np

NUM_LANDMARKS = 21


class LandmarkIndex(IntEnum):
    """Hand landmark indices following MediaPipe convention."""
    WRIST = 0
    THUMB_CMC = 1
    THUMB_MCP = 2
    THUMB_IP = 3
    THUMB_TIP = 4
    INDEX_MCP = 5
    INDEX_PIP = 6
    INDEX_DIP = 7
    INDEX_TIP = 8
    MIDDLE_MCP = 9
    MIDDLE_PIP = 10
    MIDDLE_DIP = 11
    MIDDLE_TIP = 12
    RING_MCP = 13
    RING_PIP = 14
    RING_DIP = 15
    RING_TIP = 16
    PINKY_MCP = 17
    PINKY_PIP = 18
    PINKY_DIP = 19
    PINKY_TIP = 20


class Landmark(NamedTuple):
    """A single joint with normalized coordinates."""
    x: float  # 0.0 to 1.0, normalized by image width
    y: float  # 0.0 to 1.0, normalized by image height
    z: float  # Depth relative to wrist


@dataclass
class HandPose:
    """Joints of one detected hand for a single frame.

    A complete detection holds exactly 21 landmarks. Partial detections are
    kept as-is; the classifier maps them to NONE and tick() treats them
    as an absent hand.
    """
    landmarks: List[Landmark]
    handedness: str = "Right"  # "Left" or "Right"
    confidence: float = 1.0

    def __getitem__(self, index: int) -> Landmark:
        return self.landmarks[index]

    def __len__(self) -> int:
        return len(self.landmarks)

    @property
    def is_complete(self) -> bool:
        return len(self.landmarks) >= NUM_LANDMARKS

    def to_numpy(self) -> np.ndarray:
        """Convert landmarks to numpy array of shape (N, 3)."""
        return np.array([[lm.x, lm.y, lm.z] for lm in self.landmarks], dtype=np.float64)

    @classmethod
    def from_points(
        cls,
        points: Union[np.ndarray, Sequence[Sequence[float]]],
        handedness: str = "Right",
        confidence: float = 1.0,
    ) -> "HandPose":
        """Build a pose from an (N, 3) array or a list of (x, y, z) triples."""
        landmarks = [Landmark(float(p[0]), float(p[1]), float(p[2])) for p in points]
        return cls(landmarks=landmarks, handedness=handedness, confidence=confidence)


PoseLike = Union[HandPose, Sequence[Landmark], np.ndarray]


def as_landmarks(pose: PoseLike) -> Sequence[Landmark]:
    """Normalize any accepted pose representation to a landmark sequence."""
    if pose is None:
        return []
    if isinstance(pose, HandPose):
        return pose.landmarks
    if isinstance(pose, np.ndarray):
        return HandPose.from_points(pose).landmarks
    return pose
