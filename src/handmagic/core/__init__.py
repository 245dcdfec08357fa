"""Per-tick orchestration over an explicit simulation context."""
from .pipeline import HandMappingConfig, SimulationContext, TickResult, hand_to_world, tick

__all__ = ["HandMappingConfig", "SimulationContext", "TickResult", "hand_to_world", "tick"]
