"""Webcam frame acquisition."""
from .webcam import Frame, Webcam, WebcamConfig

__all__ = ["Frame", "Webcam", "WebcamConfig"]
