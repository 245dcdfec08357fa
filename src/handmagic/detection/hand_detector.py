"""
Hand Pose Provider - MediaPipe Tasks API
=========================================

Wraps MediaPipe's HandLandmarker to turn webcam frames into HandPose
values (up to two hands per frame).
"""

import logging
import urllib.request
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

import numpy as np
import mediapipe as mp
from mediapipe.tasks import python as mp_tasks
from mediapipe.tasks.python import vision

from .landmarks import HandPose, Landmark

logger = logging.getLogger(__name__)

HAND_LANDMARKER_MODEL_URL = (
    "https://storage.googleapis.com/mediapipe-models/hand_landmarker/"
    "hand_landmarker/float16/1/hand_landmarker.task"
)
DEFAULT_MODEL_PATH = Path.home() / ".cache" / "handmagic" / "hand_landmarker.task"


@dataclass
class HandDetectorConfig:
    """HandLandmarker settings."""
    model_path: str = ""
    max_num_hands: int = 2
    min_detection_confidence: float = 0.5
    min_presence_confidence: float = 0.5
    min_tracking_confidence: float = 0.5

    @classmethod
    def from_dict(cls, d: dict) -> "HandDetectorConfig":
        """Create config from dictionary."""
        return cls(
            model_path=d.get("model_path", ""),
            max_num_hands=d.get("max_num_hands", 2),
            min_detection_confidence=d.get("min_detection_confidence", 0.5),
            min_presence_confidence=d.get("min_presence_confidence", 0.5),
            min_tracking_confidence=d.get("min_tracking_confidence", 0.5),
        )


def download_model(url: str, save_path: Path) -> bool:
    """Download the hand landmarker model if not present."""
    if save_path.exists():
        return True
    try:
        save_path.parent.mkdir(parents=True, exist_ok=True)
        logger.info("Downloading hand landmarker model to %s...", save_path)
        urllib.request.urlretrieve(url, save_path)
        logger.info("Model download complete")
        return True
    except OSError as e:
        logger.error("Failed to download model: %s", e)
        return False


class HandDetector:
    """
    Pose provider backed by MediaPipe HandLandmarker in VIDEO mode.

    Example:
        >>> with HandDetector(HandDetectorConfig()) as detector:
        ...     poses = detector.detect(frame.rgb, frame.timestamp_ms)
    """

    def __init__(self, config: Optional[HandDetectorConfig] = None):
        self.config = config or HandDetectorConfig()
        self._landmarker: Optional[vision.HandLandmarker] = None
        self._last_timestamp_ms = -1

    def start(self) -> bool:
        """Load the model. Returns False if it cannot be loaded."""
        model_path = Path(self.config.model_path) if self.config.model_path else DEFAULT_MODEL_PATH
        if not model_path.exists() and not download_model(HAND_LANDMARKER_MODEL_URL, model_path):
            logger.error("Could not obtain hand landmarker model")
            return False

        options = vision.HandLandmarkerOptions(
            base_options=mp_tasks.BaseOptions(model_asset_path=str(model_path)),
            running_mode=vision.RunningMode.VIDEO,
            num_hands=self.config.max_num_hands,
            min_hand_detection_confidence=self.config.min_detection_confidence,
            min_hand_presence_confidence=self.config.min_presence_confidence,
            min_tracking_confidence=self.config.min_tracking_confidence,
        )
        try:
            self._landmarker = vision.HandLandmarker.create_from_options(options)
        except (RuntimeError, ValueError) as e:
            logger.error("Failed to initialize HandLandmarker: %s", e)
            return False

        logger.info("HandLandmarker ready (model=%s, max hands=%d)",
                    model_path, self.config.max_num_hands)
        return True

    def stop(self) -> None:
        """Release the landmarker."""
        if self._landmarker:
            self._landmarker.close()
            self._landmarker = None
            logger.info("HandLandmarker stopped")

    def detect(self, rgb_image: np.ndarray, timestamp_ms: float) -> List[HandPose]:
        """
        Detect hands in an RGB image.

        Args:
            rgb_image: RGB image (H, W, 3)
            timestamp_ms: Frame timestamp; VIDEO mode needs it increasing

        Returns:
            One HandPose per detected hand, in detection order
        """
        if self._landmarker is None:
            logger.warning("HandLandmarker not initialized. Call start() first.")
            return []

        ts = int(timestamp_ms)
        if ts <= self._last_timestamp_ms:
            ts = self._last_timestamp_ms + 1
        self._last_timestamp_ms = ts

        mp_image = mp.Image(image_format=mp.ImageFormat.SRGB, data=np.ascontiguousarray(rgb_image))
        result = self._landmarker.detect_for_video(mp_image, ts)

        poses = []
        for i, hand_landmarks in enumerate(result.hand_landmarks):
            handedness, confidence = "Right", 0.0
            if result.handedness and len(result.handedness) > i:
                handedness = result.handedness[i][0].category_name
                confidence = result.handedness[i][0].score
            poses.append(HandPose(
                landmarks=[Landmark(lm.x, lm.y, lm.z) for lm in hand_landmarks],
                handedness=handedness,
                confidence=confidence,
            ))
        return poses

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
        return False
