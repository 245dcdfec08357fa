"""Hand landmark model and pose provider."""
from .landmarks import HandPose, Landmark, LandmarkIndex, NUM_LANDMARKS

__all__ = ["HandPose", "Landmark", "LandmarkIndex", "NUM_LANDMARKS"]
