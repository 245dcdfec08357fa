"""Gesture recognition module."""
from .gesture_classifier import (
    Gesture, GestureClassifier, GestureClassifierConfig, GestureType, classify_gesture,
)
from .compound import CompoundGestureConfig, CompoundTimerState, DoublePalmDetector
from .geometry import distance, is_extended

__all__ = [
    "Gesture",
    "GestureClassifier",
    "GestureClassifierConfig",
    "GestureType",
    "classify_gesture",
    "CompoundGestureConfig",
    "CompoundTimerState",
    "DoublePalmDetector",
    "distance",
    "is_extended",
]
