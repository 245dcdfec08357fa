"""
Shared fixtures: synthetic hand poses with chosen fingers extended.
"""

import pytest

from handmagic.detection.landmarks import HandPose, Landmark, LandmarkIndex

WRIST = (0.5, 0.9, 0.0)
FINGER_X = {"index": 0.44, "middle": 0.5, "ring": 0.56, "pinky": 0.62}


def create_mock_hand(extended=(), thumb_tip=None, index_tip=None,
                     handedness="Right", anchor=None) -> HandPose:
    """
    Build a 21-joint hand with the wrist at the bottom and fingers pointing up.

    Args:
        extended: Names of digits to straighten ("thumb", "index", ...)
        thumb_tip: Optional (x, y, z) override for the thumb tip
        index_tip: Optional (x, y, z) override for the index tip
        anchor: Optional (x, y, z) override for the middle MCP joint

    Returns:
        HandPose
    """
    points = [WRIST]

    # Thumb: CMC, MCP, IP, TIP
    points += [(0.42, 0.85, 0.0), (0.36, 0.80, 0.0), (0.32, 0.75, 0.0)]
    points.append((0.26, 0.70, 0.0) if "thumb" in extended else (0.47, 0.82, 0.0))

    # Fingers: MCP, PIP, DIP, TIP
    for finger in ("index", "middle", "ring", "pinky"):
        x = FINGER_X[finger]
        points += [(x, 0.70, 0.0), (x, 0.60, 0.0), (x, 0.55, 0.0)]
        points.append((x, 0.45, 0.0) if finger in extended else (x, 0.75, 0.0))

    if thumb_tip is not None:
        points[LandmarkIndex.THUMB_TIP] = thumb_tip
    if index_tip is not None:
        points[LandmarkIndex.INDEX_TIP] = index_tip
    if anchor is not None:
        points[LandmarkIndex.MIDDLE_MCP] = anchor

    return HandPose(
        landmarks=[Landmark(*p) for p in points],
        handedness=handedness,
        confidence=0.95,
    )


@pytest.fixture
def make_hand():
    """Factory fixture for synthetic hands."""
    return create_mock_hand
