"""
Per-tick orchestration for the particle field.

Architecture:
    hand poses -> GestureClassifier -> DoublePalmDetector
               -> ParticleEngine -> CameraController

All state that survives between ticks lives in a SimulationContext,
which is passed into tick(). tick() itself keeps nothing between calls;
an external driver (the frame loop) invokes it repeatedly.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from handmagic.detection.landmarks import NUM_LANDMARKS, HandPose, LandmarkIndex, as_landmarks
from handmagic.recognition.compound import CompoundGestureConfig, DoublePalmDetector
from handmagic.recognition.gesture_classifier import (
    Gesture, GestureClassifier, GestureClassifierConfig,
)
from handmagic.simulation.camera import CameraController, CameraPose, FramingConfig
from handmagic.simulation.particles import ParticleEngine, ParticleEngineConfig
from handmagic.simulation.state import InteractionState

logger = logging.getLogger(__name__)


@dataclass
class HandMappingConfig:
    """How a normalized hand joint maps into world space."""
    # Joint used as the hand's position (middle finger MCP)
    anchor: int = LandmarkIndex.MIDDLE_MCP
    bounds: float = 80.0
    xy_scale: float = 2.5
    z_scale: float = 2.0
    # Fraction of the way toward the new position covered per tick
    smoothing: float = 0.2

    @classmethod
    def from_dict(cls, config: dict) -> "HandMappingConfig":
        """Create config from dictionary."""
        return cls(
            anchor=config.get("anchor", int(LandmarkIndex.MIDDLE_MCP)),
            bounds=config.get("bounds", 80.0),
            xy_scale=config.get("xy_scale", 2.5),
            z_scale=config.get("z_scale", 2.0),
            smoothing=config.get("smoothing", 0.2),
        )


def hand_to_world(pose: HandPose, config: HandMappingConfig) -> np.ndarray:
    """Map the anchor joint of a pose into world coordinates.

    x is mirrored because the webcam image is.
    """
    joint = as_landmarks(pose)[config.anchor]
    return np.array([
        (0.5 - joint.x) * config.bounds * config.xy_scale,
        (0.5 - joint.y) * config.bounds * config.xy_scale,
        -joint.z * config.bounds * config.z_scale,
    ], dtype=np.float32)


class TickResult:
    """Outputs of a single tick."""

    __slots__ = (
        "gesture", "hand_present", "hand_count", "double_palm",
        "camera", "positions", "colors", "dt", "time",
    )

    def __init__(self):
        self.gesture: Gesture = Gesture.none()
        self.hand_present = False
        self.hand_count = 0
        self.double_palm = False
        self.camera: Optional[CameraPose] = None
        self.positions: Optional[np.ndarray] = None
        self.colors: Optional[np.ndarray] = None
        self.dt = 0.0
        self.time = 0.0


class SimulationContext:
    """Everything that carries over from one tick to the next."""

    def __init__(
        self,
        engine: ParticleEngine,
        classifier: Optional[GestureClassifier] = None,
        compound: Optional[DoublePalmDetector] = None,
        camera: Optional[CameraController] = None,
        mapping: Optional[HandMappingConfig] = None,
        state: Optional[InteractionState] = None,
    ):
        self.engine = engine
        self.classifier = classifier or GestureClassifier()
        self.compound = compound or DoublePalmDetector()
        self.camera = camera or CameraController()
        self.mapping = mapping or HandMappingConfig()
        self.state = state or InteractionState()
        self.tick_count = 0

    @classmethod
    def from_config(cls, config: dict) -> "SimulationContext":
        """Build all components from a parsed config dictionary."""
        return cls(
            engine=ParticleEngine(ParticleEngineConfig.from_dict(config.get("simulation", {}))),
            classifier=GestureClassifier(
                GestureClassifierConfig.from_dict(config.get("recognition", {}))),
            compound=DoublePalmDetector(
                CompoundGestureConfig.from_dict(config.get("compound", {}))),
            camera=CameraController(FramingConfig.from_dict(config.get("framing", {}))),
            mapping=HandMappingConfig.from_dict(config.get("hand_mapping", {})),
        )


def tick(context: SimulationContext, hand_poses: Sequence[HandPose],
         dt: float, now_ms: float) -> TickResult:
    """
    Run one simulation tick.

    Order within the tick: classification, compound detection, force
    selection and integration, color update, camera framing.

    Args:
        context: Cross-tick state, mutated in place
        hand_poses: Zero, one or two hands for this tick
        dt: Seconds since the previous tick (clamped by the engine)
        now_ms: Wall-clock time in milliseconds

    Returns:
        TickResult with gesture, trigger flag, camera pose and buffer views
    """
    result = TickResult()
    state = context.state
    previous = state.gesture.gesture_type
    # Partial detections count as no hand
    poses = [p for p in hand_poses or [] if len(as_landmarks(p)) >= NUM_LANDMARKS][:2]
    result.hand_count = len(poses)

    # --- 1. Classification ---
    if poses:
        target = hand_to_world(poses[0], context.mapping)
        state.hand_position += (target - state.hand_position) * context.mapping.smoothing
        state.hand_present = True
        state.gesture = context.classifier.classify(poses[0])
    else:
        state.clear_hand()

    if state.gesture.gesture_type != previous:
        logger.info("Gesture: %-12s | Strength: %.2f",
                    state.gesture.name, state.gesture.strength)

    # --- 2. Compound gesture ---
    if len(poses) == 2:
        result.double_palm = context.compound.update(
            state.gesture, context.classifier.classify(poses[1]), now_ms)

    # --- 3. Physics ---
    dt = context.engine.clamp_dt(dt)
    state.time += dt
    context.engine.step(state, dt)

    # --- 4. Camera ---
    result.camera = context.camera.update(state.hand_present, state.hand_position, dt, now_ms)

    context.tick_count += 1
    result.gesture = state.gesture
    result.hand_present = state.hand_present
    result.positions = context.engine.positions
    result.colors = context.engine.colors
    result.dt = dt
    result.time = state.time
    return result
