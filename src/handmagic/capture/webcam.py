"""
Webcam Capture
===============

OpenCV frame acquisition with an optional background reader thread so the
render loop never blocks on the camera.
"""

import time
import logging
import threading
from dataclasses import dataclass
from typing import Optional

import cv2
import numpy as np

logger = logging.getLogger(__name__)


@dataclass
class WebcamConfig:
    """Webcam settings."""
    device_id: int = 0
    width: int = 640
    height: int = 480
    fps: int = 30
    threaded: bool = True
    # Mirror the image so moving a hand right moves it right on screen
    mirror: bool = False
    warmup_frames: int = 5

    @classmethod
    def from_dict(cls, config: dict) -> "WebcamConfig":
        """Create config from dictionary."""
        return cls(
            device_id=config.get("device_id", 0),
            width=config.get("width", 640),
            height=config.get("height", 480),
            fps=config.get("fps", 30),
            threaded=config.get("threaded", True),
            mirror=config.get("mirror", False),
            warmup_frames=config.get("warmup_frames", 5),
        )


@dataclass
class Frame:
    """Captured BGR image with metadata."""
    image: np.ndarray
    timestamp_ms: float
    frame_number: int

    @property
    def rgb(self) -> np.ndarray:
        return cv2.cvtColor(self.image, cv2.COLOR_BGR2RGB)


class Webcam:
    """
    Webcam reader.

    Example:
        >>> with Webcam(WebcamConfig()) as cam:
        ...     frame = cam.read()
    """

    def __init__(self, config: Optional[WebcamConfig] = None):
        self.config = config or WebcamConfig()
        self._cap: Optional[cv2.VideoCapture] = None
        self._running = False
        self._frame_number = 0
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()
        self._latest: Optional[Frame] = None

    def start(self) -> bool:
        """Open the device. Returns False if it cannot be opened or read."""
        cfg = self.config
        logger.info("Opening webcam %d (%dx%d@%dfps)", cfg.device_id, cfg.width, cfg.height, cfg.fps)

        self._cap = cv2.VideoCapture(cfg.device_id)
        if not self._cap.isOpened():
            logger.error("Failed to open webcam %d", cfg.device_id)
            self._cap = None
            return False

        self._cap.set(cv2.CAP_PROP_FRAME_WIDTH, cfg.width)
        self._cap.set(cv2.CAP_PROP_FRAME_HEIGHT, cfg.height)
        self._cap.set(cv2.CAP_PROP_FPS, cfg.fps)
        self._cap.set(cv2.CAP_PROP_BUFFERSIZE, 1)

        for _ in range(cfg.warmup_frames):
            self._cap.read()

        ok, _ = self._cap.read()
        if not ok:
            logger.error("Webcam %d opened but returned no frames", cfg.device_id)
            self._cap.release()
            self._cap = None
            return False

        self._running = True
        self._frame_number = 0
        if cfg.threaded:
            self._thread = threading.Thread(target=self._reader_loop, daemon=True)
            self._thread.start()
        logger.info("Webcam started (%s)", "threaded" if cfg.threaded else "synchronous")
        return True

    def stop(self) -> None:
        """Stop reading and release the device."""
        self._running = False
        if self._thread:
            self._thread.join(timeout=1.0)
            self._thread = None
        if self._cap:
            self._cap.release()
            self._cap = None
        logger.info("Webcam stopped")

    def read(self) -> Optional[Frame]:
        """Latest frame (threaded) or a freshly grabbed one (synchronous)."""
        if not self._running:
            return None
        if self.config.threaded:
            with self._lock:
                return self._latest
        return self._grab()

    def _grab(self) -> Optional[Frame]:
        if self._cap is None:
            return None
        ok, image = self._cap.read()
        if not ok or image is None:
            logger.warning("Failed to capture frame")
            return None
        if self.config.mirror:
            image = cv2.flip(image, 1)
        self._frame_number += 1
        return Frame(image=image, timestamp_ms=time.monotonic() * 1000.0,
                     frame_number=self._frame_number)

    def _reader_loop(self) -> None:
        while self._running:
            frame = self._grab()
            if frame is not None:
                with self._lock:
                    self._latest = frame

    @property
    def is_running(self) -> bool:
        return self._running

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
        return False
