"""Utility modules for logging and performance."""
from .logger import LoggingConfig, log_timing, setup_logging
from .performance import PerformanceMonitor, Timer

__all__ = ["LoggingConfig", "log_timing", "setup_logging", "PerformanceMonitor", "Timer"]
