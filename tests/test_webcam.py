"""
Tests for webcam capture
"""

from unittest.mock import MagicMock, patch

import numpy as np
import pytest

pytest.importorskip("cv2")

from handmagic.capture.webcam import Frame, Webcam, WebcamConfig


def mock_capture(opened=True, frame=None):
    cap = MagicMock()
    cap.isOpened.return_value = opened
    image = frame if frame is not None else np.zeros((4, 6, 3), dtype=np.uint8)
    cap.read.return_value = (True, image)
    return cap


class TestWebcamConfig:

    def test_defaults(self):
        config = WebcamConfig()
        assert (config.width, config.height) == (640, 480)
        assert config.threaded

    def test_from_dict(self):
        config = WebcamConfig.from_dict({"device_id": 2, "mirror": True})
        assert config.device_id == 2
        assert config.mirror
        assert config.fps == 30


class TestWebcam:

    def test_open_failure(self):
        with patch("handmagic.capture.webcam.cv2.VideoCapture", return_value=mock_capture(False)):
            cam = Webcam(WebcamConfig(threaded=False))
            assert cam.start() is False
            assert cam.read() is None

    def test_synchronous_read(self):
        with patch("handmagic.capture.webcam.cv2.VideoCapture", return_value=mock_capture()):
            cam = Webcam(WebcamConfig(threaded=False, warmup_frames=0))
            assert cam.start()
            first = cam.read()
            second = cam.read()
            cam.stop()

        assert first.frame_number == 1
        assert second.frame_number == 2
        assert second.timestamp_ms >= first.timestamp_ms
        assert not cam.is_running

    def test_mirror(self):
        image = np.zeros((2, 2, 3), dtype=np.uint8)
        image[0, 0] = 255
        with patch("handmagic.capture.webcam.cv2.VideoCapture", return_value=mock_capture(frame=image)):
            cam = Webcam(WebcamConfig(threaded=False, warmup_frames=0, mirror=True))
            cam.start()
            frame = cam.read()
            cam.stop()
        assert frame.image[0, 1].max() == 255

    def test_frame_rgb(self):
        image = np.zeros((1, 1, 3), dtype=np.uint8)
        image[0, 0] = (255, 0, 0)  # blue in BGR
        frame = Frame(image=image, timestamp_ms=0.0, frame_number=1)
        assert tuple(frame.rgb[0, 0]) == (0, 0, 255)
