"""
Hand Magic - Main Application
==============================

Entry point for the gesture-driven particle field.
Wires webcam, pose provider, simulation core and preview renderer into a
frame loop.
"""

import sys
import time
import signal
import logging
import argparse
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

import yaml

from handmagic.capture.webcam import Webcam, WebcamConfig
from handmagic.core.pipeline import SimulationContext, tick
from handmagic.detection.hand_detector import HandDetector, HandDetectorConfig
from handmagic.detection.landmarks import HandPose
from handmagic.simulation.colors import Theme
from handmagic.utils.logger import LoggingConfig, setup_logging
from handmagic.utils.performance import PerformanceMonitor
from handmagic.utils.visualization import ParticleRenderer, VisualizerConfig

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config/config.yaml"


@dataclass
class AppConfig:
    """Application configuration container."""
    webcam: WebcamConfig
    mediapipe: HandDetectorConfig
    visualization: VisualizerConfig
    logging: LoggingConfig
    # Raw sections for the simulation core
    core: dict = field(default_factory=dict)
    show_preview: bool = False
    target_fps: float = 60.0


def load_config(config_path) -> dict:
    """Load configuration from a YAML file; missing file yields {}."""
    path = Path(config_path)
    if not path.exists():
        logger.warning("Config file not found: %s, using defaults", path)
        return {}
    with open(path, "r") as f:
        data = yaml.safe_load(f) or {}
    logger.info("Loaded configuration from %s", path)
    return data


def create_app_config(config_dict: dict) -> AppConfig:
    """Create AppConfig from a configuration dictionary."""
    visualization = config_dict.get("visualization", {})
    return AppConfig(
        webcam=WebcamConfig.from_dict(config_dict.get("camera", {})),
        mediapipe=HandDetectorConfig.from_dict(config_dict.get("mediapipe", {})),
        visualization=VisualizerConfig.from_dict(visualization),
        logging=LoggingConfig.from_dict(config_dict.get("logging", {})),
        core={
            key: config_dict.get(key, {})
            for key in ("simulation", "recognition", "compound", "framing", "hand_mapping")
        },
        show_preview=visualization.get("show_preview", False),
        target_fps=config_dict.get("performance", {}).get("target_fps", 60.0),
    )


class HandMagicApp:
    """
    Main application: one tick of the simulation per displayed frame.

    Keys:
        q/ESC  quit
        p      toggle webcam preview
        t      cycle color theme
        f      toggle full screen
    """

    def __init__(self, config: AppConfig):
        self.config = config
        self.webcam = Webcam(config.webcam)
        self.detector = HandDetector(config.mediapipe)
        self.context = SimulationContext.from_config(config.core)
        self.renderer = ParticleRenderer(config.visualization)
        self.performance = PerformanceMonitor(target_fps=config.target_fps)

        self._running = False
        self._show_preview = config.show_preview
        self._last_frame_number = -1
        self._poses: List[HandPose] = []

    def start(self) -> bool:
        """Start the webcam and pose provider."""
        logger.info("Starting Hand Magic...")
        if not self.webcam.start():
            logger.error("Failed to start webcam")
            return False
        if not self.detector.start():
            logger.error("Failed to start hand detector")
            self.webcam.stop()
            return False
        self.performance.start()
        self._running = True
        return True

    def stop(self) -> None:
        """Release all collaborators."""
        logger.info("Stopping Hand Magic...")
        self._running = False
        self.detector.stop()
        self.webcam.stop()
        self.renderer.close()
        self.performance.stop()

    def run(self) -> int:
        """Run the frame loop until quit. Returns a process exit code."""
        if not self.start():
            return 1

        signal.signal(signal.SIGINT, self._signal_handler)
        signal.signal(signal.SIGTERM, self._signal_handler)

        try:
            self._main_loop()
        finally:
            self.stop()
            logger.info("\n%s", self.performance.get_report())
        return 0

    def _read_poses(self):
        """Poll the pose provider; provider failures mean no hands this tick."""
        frame = self.webcam.read()
        if frame is None:
            return None, []
        if frame.frame_number == self._last_frame_number:
            return frame, self._poses
        self._last_frame_number = frame.frame_number
        try:
            self._poses = self.detector.detect(frame.rgb, frame.timestamp_ms)
        except Exception as e:
            logger.warning("Pose provider error: %s", e)
            self._poses = []
        return frame, self._poses

    def _main_loop(self) -> None:
        last = time.perf_counter()
        while self._running:
            self.performance.frame_start()
            now = time.perf_counter()
            dt, last = now - last, now

            with self.performance.measure("detection"):
                frame, poses = self._read_poses()

            with self.performance.measure("simulation"):
                result = tick(self.context, poses, dt, time.monotonic() * 1000.0)

            if result.double_palm:
                self.renderer.toggle_fullscreen()

            with self.performance.measure("render"):
                image = self.renderer.render(result.positions, result.colors, result.camera)
                preview = frame.image if (self._show_preview and frame is not None) else None
                self.renderer.draw_overlay(image, result.gesture, self.performance.fps,
                                           preview, self.context.engine.theme.value)
                key = self.renderer.show(image) & 0xFF

            self.performance.frame_complete()
            self._handle_key(key)

    def _handle_key(self, key: int) -> None:
        if key in (ord("q"), 27):
            self._running = False
        elif key == ord("p"):
            self._show_preview = not self._show_preview
        elif key == ord("t"):
            self.context.engine.set_theme(self.context.engine.theme.next())
        elif key == ord("f"):
            self.renderer.toggle_fullscreen()

    def _signal_handler(self, signum, frame) -> None:
        logger.info("Received signal %d, shutting down...", signum)
        self._running = False


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Hand Magic: gesture-driven particle field",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Gestures:
  Open hand   - Swirl
  Fist        - Repel
  Victory     - Flow (rainbow wave)
  Pinch       - Gravity
  Thumbs up   - Orbit
  Rock on     - Chaos
  Two open palms twice within a second - toggle full screen

Keyboard Controls:
  q/ESC  Quit
  p      Toggle webcam preview
  t      Cycle color theme
  f      Toggle full screen
        """,
    )
    parser.add_argument("--config", "-c", default=DEFAULT_CONFIG_PATH,
                        help="Path to configuration file")
    parser.add_argument("--camera", type=int, default=None, help="Webcam device id")
    parser.add_argument("--particles", type=int, default=None, help="Particle count")
    parser.add_argument("--theme", choices=[t.value for t in Theme], default=None,
                        help="Color theme")
    parser.add_argument("--preview", action="store_true", help="Show webcam preview")
    parser.add_argument("--debug", "-d", action="store_true", help="Enable debug logging")
    parser.add_argument("--log-file", default=None, help="Also log to this file")
    return parser


def apply_overrides(config_dict: dict, args: argparse.Namespace) -> dict:
    """Fold command-line overrides into the config dictionary."""
    if args.camera is not None:
        config_dict.setdefault("camera", {})["device_id"] = args.camera
    if args.particles is not None:
        config_dict.setdefault("simulation", {})["count"] = args.particles
    if args.theme is not None:
        config_dict.setdefault("simulation", {})["theme"] = args.theme
    if args.preview:
        config_dict.setdefault("visualization", {})["show_preview"] = True
    if args.debug:
        config_dict.setdefault("logging", {})["level"] = "DEBUG"
    if args.log_file:
        config_dict.setdefault("logging", {})["log_file"] = args.log_file
    return config_dict


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    setup_logging("DEBUG" if args.debug else "INFO")
    config_dict = apply_overrides(load_config(args.config), args)
    app_config = create_app_config(config_dict)
    log_cfg = app_config.logging
    setup_logging(log_cfg.level, log_cfg.log_file, log_cfg.max_size_mb, log_cfg.backup_count)

    app = HandMagicApp(app_config)
    return app.run()


if __name__ == "__main__":
    sys.exit(main())
