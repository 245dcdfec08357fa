"""
Performance Monitoring
=======================

Frame rate and per-stage timing for the render loop.
"""

import time
import logging
from collections import deque
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Deque, Dict, Optional

logger = logging.getLogger(__name__)


class Timer:
    """
    High-precision timer, usable as a context manager.

    Example:
        >>> with Timer("physics") as t:
        ...     engine.step(state, dt)
        >>> print(f"Took {t.elapsed_ms:.2f}ms")
    """

    def __init__(self, name: str = ""):
        self.name = name
        self._start_time: Optional[float] = None
        self._end_time: Optional[float] = None

    def start(self) -> "Timer":
        self._start_time = time.perf_counter()
        self._end_time = None
        return self

    def stop(self) -> float:
        """Stop the timer and return elapsed seconds."""
        self._end_time = time.perf_counter()
        return self.elapsed

    @property
    def elapsed(self) -> float:
        """Elapsed seconds; still running timers report time so far."""
        if self._start_time is None:
            return 0.0
        end = self._end_time if self._end_time is not None else time.perf_counter()
        return end - self._start_time

    @property
    def elapsed_ms(self) -> float:
        return self.elapsed * 1000

    def __enter__(self):
        return self.start()

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
        return False


@dataclass
class PerformanceMetrics:
    """Snapshot of loop performance."""
    fps: float = 0.0
    frame_time_ms: float = 0.0
    detection_time_ms: float = 0.0
    simulation_time_ms: float = 0.0
    render_time_ms: float = 0.0
    total_frames: int = 0
    slow_frames: int = 0


class PerformanceMonitor:
    """
    Rolling-window frame rate and stage timing.

    Frame rate is measured between consecutive frame_start() calls, so it
    reflects the whole loop including waits for the display.

    Example:
        >>> monitor = PerformanceMonitor()
        >>> while running:
        ...     monitor.frame_start()
        ...     with monitor.measure("simulation"):
        ...         tick(context, poses, dt, now_ms)
        ...     monitor.frame_complete()
    """

    def __init__(self, window_size: int = 30, target_fps: float = 30.0):
        self.window_size = window_size
        self.target_fps = target_fps
        self._intervals: Deque[float] = deque(maxlen=window_size)
        self._frame_times: Deque[float] = deque(maxlen=window_size)
        self._stage_times: Dict[str, Deque[float]] = {}
        self._frame_start: Optional[float] = None
        self._last_start: Optional[float] = None
        self._total_frames = 0
        self._slow_frames = 0

    def start(self) -> None:
        """Reset all counters."""
        self._intervals.clear()
        self._frame_times.clear()
        self._stage_times.clear()
        self._frame_start = None
        self._last_start = None
        self._total_frames = 0
        self._slow_frames = 0
        logger.info("Performance monitor started")

    def stop(self) -> None:
        logger.info("Performance monitor stopped. Total frames: %d, slow: %d",
                    self._total_frames, self._slow_frames)

    def frame_start(self) -> None:
        """Mark the start of a frame."""
        now = time.perf_counter()
        if self._last_start is not None:
            self._intervals.append(now - self._last_start)
        self._last_start = now
        self._frame_start = now

    def frame_complete(self) -> None:
        """Mark the frame's work as done."""
        if self._frame_start is None:
            return
        frame_time = time.perf_counter() - self._frame_start
        self._frame_times.append(frame_time)
        self._total_frames += 1
        if frame_time > 1.0 / self.target_fps:
            self._slow_frames += 1
        self._frame_start = None

    @contextmanager
    def measure(self, stage: str):
        """Time a named stage of the frame."""
        start = time.perf_counter()
        try:
            yield
        finally:
            times = self._stage_times.setdefault(stage, deque(maxlen=self.window_size))
            times.append(time.perf_counter() - start)

    @property
    def fps(self) -> float:
        """Frames per second over the rolling window."""
        if not self._intervals:
            return 0.0
        avg = sum(self._intervals) / len(self._intervals)
        return 1.0 / avg if avg > 0 else 0.0

    @property
    def frame_time_ms(self) -> float:
        if not self._frame_times:
            return 0.0
        return (sum(self._frame_times) / len(self._frame_times)) * 1000

    def stage_time_ms(self, stage: str) -> float:
        """Average time of a stage in milliseconds."""
        times = self._stage_times.get(stage)
        if not times:
            return 0.0
        return (sum(times) / len(times)) * 1000

    def get_metrics(self) -> PerformanceMetrics:
        return PerformanceMetrics(
            fps=self.fps,
            frame_time_ms=self.frame_time_ms,
            detection_time_ms=self.stage_time_ms("detection"),
            simulation_time_ms=self.stage_time_ms("simulation"),
            render_time_ms=self.stage_time_ms("render"),
            total_frames=self._total_frames,
            slow_frames=self._slow_frames,
        )

    def get_report(self) -> str:
        """Formatted performance report."""
        m = self.get_metrics()
        return (
            f"Performance Report\n"
            f"{'=' * 40}\n"
            f"FPS: {m.fps:.1f} (target: >={self.target_fps})\n"
            f"Frame time: {m.frame_time_ms:.1f}ms\n"
            f"\nPer-Stage Breakdown:\n"
            f"  Detection: {m.detection_time_ms:.2f}ms\n"
            f"  Simulation: {m.simulation_time_ms:.2f}ms\n"
            f"  Render: {m.render_time_ms:.2f}ms\n"
            f"\nFrame Stats:\n"
            f"  Total: {m.total_frames}\n"
            f"  Slow: {m.slow_frames} ({100 * m.slow_frames / max(1, m.total_frames):.1f}%)\n"
        )
