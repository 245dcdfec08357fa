"""Distance and finger-extension primitives over 3D joints."""

from typing import Sequence

import numpy as np

from handmagic.detection.landmarks import Landmark, LandmarkIndex


def distance(a: Landmark, b: Landmark) -> float:
    """Euclidean distance between two joints in 3D."""
    return float(np.sqrt((a.x - b.x) ** 2 + (a.y - b.y) ** 2 + (a.z - b.z) ** 2))


def is_extended(pose: Sequence[Landmark], tip_index: int, pip_index: int) -> bool:
    """Check whether a finger is straightened outward.

    A finger counts as extended when its tip is farther from the wrist than
    its proximal joint. Comparing distances from the wrist keeps the test
    independent of how the hand is rotated on screen.
    """
    wrist = pose[LandmarkIndex.WRIST]
    return distance(wrist, pose[tip_index]) > distance(wrist, pose[pip_index])
