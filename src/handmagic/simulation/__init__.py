"""Particle simulation, color dynamics and camera framing."""
from .camera import CameraController, CameraPose, FramingConfig
from .colors import Palette, Theme, hsl_to_rgb
from .forces import FORCE_TABLE, ForceContext, force_for
from .particles import ParticleEngine, ParticleEngineConfig, ParticleField
from .state import InteractionState

__all__ = [
    "CameraController",
    "CameraPose",
    "FramingConfig",
    "Palette",
    "Theme",
    "hsl_to_rgb",
    "FORCE_TABLE",
    "ForceContext",
    "force_for",
    "ParticleEngine",
    "ParticleEngineConfig",
    "ParticleField",
    "InteractionState",
]
