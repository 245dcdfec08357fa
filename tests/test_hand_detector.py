"""
Tests for the MediaPipe pose provider wrapper
"""

from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import numpy as np
import pytest

pytest.importorskip("mediapipe")

from handmagic.detection.hand_detector import HandDetector, HandDetectorConfig
from handmagic.detection.landmarks import NUM_LANDMARKS


def landmarker_result(num_hands=1):
    hand = [SimpleNamespace(x=0.1 * (i % 10), y=0.5, z=0.0) for i in range(NUM_LANDMARKS)]
    return SimpleNamespace(
        hand_landmarks=[hand] * num_hands,
        handedness=[[SimpleNamespace(category_name="Left", score=0.9)]] * num_hands,
    )


@pytest.fixture
def detector():
    det = HandDetector(HandDetectorConfig())
    det._landmarker = MagicMock()
    det._landmarker.detect_for_video.return_value = landmarker_result(2)
    return det


class TestHandDetector:

    def test_not_started(self):
        assert HandDetector().detect(np.zeros((4, 4, 3), dtype=np.uint8), 0) == []

    def test_detect_converts_landmarks(self, detector):
        with patch("handmagic.detection.hand_detector.mp"):
            poses = detector.detect(np.zeros((4, 4, 3), dtype=np.uint8), 100)

        assert len(poses) == 2
        assert all(pose.is_complete for pose in poses)
        assert poses[0].handedness == "Left"
        assert poses[0].confidence == pytest.approx(0.9)

    def test_timestamps_strictly_increase(self, detector):
        image = np.zeros((4, 4, 3), dtype=np.uint8)
        with patch("handmagic.detection.hand_detector.mp"):
            detector.detect(image, 100)
            detector.detect(image, 100)
            detector.detect(image, 50)

        stamps = [call.args[1] for call in detector._landmarker.detect_for_video.call_args_list]
        assert stamps == [100, 101, 102]

    def test_stop_closes(self, detector):
        landmarker = detector._landmarker
        detector.stop()
        landmarker.close.assert_called_once()
        assert detector._landmarker is None


class TestHandDetectorConfig:

    def test_from_dict(self):
        config = HandDetectorConfig.from_dict({"max_num_hands": 1})
        assert config.max_num_hands == 1
        assert config.min_detection_confidence == 0.5
