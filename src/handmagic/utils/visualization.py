"""
Visualization Module
=====================

OpenCV preview renderer: projects the particle buffers through the camera
pose with additive blending and a cheap bloom, then draws the status
overlay (gesture label, FPS, legend, optional webcam preview).
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

import cv2
import numpy as np

from handmagic.recognition.gesture_classifier import Gesture, GestureType
from handmagic.simulation.camera import CameraPose
from .logger import log_timing

logger = logging.getLogger(__name__)

LEGEND = [
    (GestureType.OPEN_HAND, "Open"),
    (GestureType.CLOSED_FIST, "Fist"),
    (GestureType.VICTORY, "Victory"),
    (GestureType.PINCH, "Pinch"),
    (GestureType.THUMBS_UP, "Thumbs up"),
    (GestureType.ROCK_ON, "Rock on"),
]

# BGR
GESTURE_COLORS = {
    GestureType.CLOSED_FIST: (68, 68, 239),
    GestureType.PINCH: (22, 115, 249),
    GestureType.VICTORY: (128, 222, 74),
    GestureType.ROCK_ON: (247, 85, 168),
}
DEFAULT_GESTURE_COLOR = (238, 211, 34)


@dataclass
class VisualizerConfig:
    """Preview window settings."""
    window_name: str = "Hand Magic"
    width: int = 1280
    height: int = 720
    fov_degrees: float = 75.0
    near: float = 1.0
    far: float = 1000.0
    point_intensity: float = 0.8
    bloom_strength: float = 1.2
    bloom_sigma: float = 3.0
    preview_scale: float = 0.25
    show_fps: bool = True
    show_legend: bool = True
    font_scale: float = 0.7
    font_thickness: int = 2

    @classmethod
    def from_dict(cls, config: dict) -> "VisualizerConfig":
        """Create config from dictionary."""
        return cls(
            window_name=config.get("window_name", "Hand Magic"),
            width=config.get("width", 1280),
            height=config.get("height", 720),
            fov_degrees=config.get("fov_degrees", 75.0),
            near=config.get("near", 1.0),
            far=config.get("far", 1000.0),
            point_intensity=config.get("point_intensity", 0.8),
            bloom_strength=config.get("bloom_strength", 1.2),
            bloom_sigma=config.get("bloom_sigma", 3.0),
            preview_scale=config.get("preview_scale", 0.25),
            show_fps=config.get("show_fps", True),
            show_legend=config.get("show_legend", True),
            font_scale=config.get("font_scale", 0.7),
            font_thickness=config.get("font_thickness", 2),
        )


def project_points(
    points: np.ndarray,
    pose: CameraPose,
    width: int,
    height: int,
    fov_degrees: float = 75.0,
    near: float = 1.0,
    far: float = 1000.0,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Perspective-project world points to pixel coordinates.

    Args:
        points: (N, 3) world positions
        pose: Camera position and look target
        width, height: Image size in pixels
        fov_degrees: Vertical field of view

    Returns:
        (pixels, visible): (N, 2) int pixel coords and (N,) bool mask of
        points in front of the camera and inside the image
    """
    forward = pose.target - pose.position
    forward = forward / np.linalg.norm(forward)
    right = np.cross(forward, np.array([0.0, 1.0, 0.0]))
    right = right / np.linalg.norm(right)
    up = np.cross(right, forward)

    rel = points - pose.position
    depth = rel @ forward
    xc = rel @ right
    yc = rel @ up

    focal = (height / 2.0) / np.tan(np.radians(fov_degrees) / 2.0)
    safe_depth = np.where(depth > near, depth, 1.0)
    u = width / 2.0 + focal * xc / safe_depth
    v = height / 2.0 - focal * yc / safe_depth

    pixels = np.column_stack([u, v]).astype(np.int32)
    visible = ((depth > near) & (depth < far) &
               (pixels[:, 0] >= 0) & (pixels[:, 0] < width) &
               (pixels[:, 1] >= 0) & (pixels[:, 1] < height))
    return pixels, visible


class ParticleRenderer:
    """
    Draws the particle field and status overlay into an OpenCV window.

    Example:
        >>> renderer = ParticleRenderer(VisualizerConfig())
        >>> image = renderer.render(result.positions, result.colors, result.camera)
        >>> renderer.draw_overlay(image, result.gesture, fps=60)
        >>> renderer.show(image)
    """

    def __init__(self, config: Optional[VisualizerConfig] = None):
        self.config = config or VisualizerConfig()
        self._font = cv2.FONT_HERSHEY_SIMPLEX
        self._window_open = False
        self._fullscreen = False

    @log_timing
    def render(self, positions: np.ndarray, colors: np.ndarray, camera: CameraPose) -> np.ndarray:
        """Rasterize particles with additive blending; returns a BGR uint8 image."""
        cfg = self.config
        pixels, visible = project_points(
            positions, camera, cfg.width, cfg.height, cfg.fov_degrees, cfg.near, cfg.far)

        canvas = np.zeros((cfg.height, cfg.width, 3), dtype=np.float32)
        px = pixels[visible]
        # RGB buffers, BGR image
        rgb = colors[visible][:, ::-1] * cfg.point_intensity
        np.add.at(canvas, (px[:, 1], px[:, 0]), rgb)

        if cfg.bloom_strength > 0:
            glow = cv2.GaussianBlur(canvas, (0, 0), cfg.bloom_sigma)
            canvas = cv2.addWeighted(canvas, 1.0, glow, cfg.bloom_strength, 0.0)

        return (np.clip(canvas, 0.0, 1.0) * 255).astype(np.uint8)

    def draw_overlay(self, image: np.ndarray, gesture: Gesture, fps: float = 0.0,
                     preview: Optional[np.ndarray] = None, theme_name: str = "") -> np.ndarray:
        """Draw title, FPS, gesture label, legend and optional webcam preview."""
        cfg = self.config
        h, w = image.shape[:2]

        cv2.putText(image, "Hand Magic", (20, 40), self._font, 1.1, (255, 255, 0), 2)
        cv2.putText(image, "Show your hand to interact.", (20, 65),
                    self._font, 0.5, (160, 160, 160), 1)

        if cfg.show_fps:
            label = f"{fps:.0f} FPS"
            if theme_name:
                label += f" | {theme_name}"
            cv2.putText(image, label, (w - 220, 35), self._font, 0.6, (200, 200, 0), 1)

        if gesture.is_valid and gesture.gesture_type.label:
            text = gesture.gesture_type.label.upper()
            color = GESTURE_COLORS.get(gesture.gesture_type, DEFAULT_GESTURE_COLOR)
            scale = cfg.font_scale * 2.5
            (tw, th), _ = cv2.getTextSize(text, self._font, scale, cfg.font_thickness + 2)
            origin = ((w - tw) // 2, (h + th) // 2)
            cv2.rectangle(image, (origin[0] - 20, origin[1] - th - 20),
                          (origin[0] + tw + 20, origin[1] + 20), color, 3)
            cv2.putText(image, text, origin, self._font, scale, color, cfg.font_thickness + 2)

        if cfg.show_legend:
            for i, (gesture_type, name) in enumerate(LEGEND):
                col, row = i % 3, i // 3
                pos = (20 + col * 220, h - 40 + row * 22)
                cv2.putText(image, f"{name}: {gesture_type.label}", pos,
                            self._font, 0.45, (130, 130, 130), 1)

        if preview is not None:
            self._draw_preview(image, preview)

        return image

    def _draw_preview(self, image: np.ndarray, preview: np.ndarray) -> None:
        h, w = image.shape[:2]
        thumb_w = max(1, int(w * self.config.preview_scale))
        thumb_h = max(1, int(preview.shape[0] * thumb_w / preview.shape[1]))
        thumb = cv2.resize(preview, (thumb_w, thumb_h))
        y0 = 80
        x0 = w - thumb_w - 20
        if y0 + thumb_h > h or x0 < 0:
            return
        image[y0:y0 + thumb_h, x0:x0 + thumb_w] = thumb
        cv2.rectangle(image, (x0, y0), (x0 + thumb_w, y0 + thumb_h), (255, 255, 0), 1)

    def show(self, image: np.ndarray) -> int:
        """Display the image and return the pressed key code (or -1)."""
        if not self._window_open:
            cv2.namedWindow(self.config.window_name, cv2.WINDOW_NORMAL)
            self._window_open = True
        cv2.imshow(self.config.window_name, image)
        return cv2.waitKey(1)

    def toggle_fullscreen(self) -> bool:
        """Switch the window between full-screen and normal mode."""
        self._fullscreen = not self._fullscreen
        if self._window_open:
            cv2.setWindowProperty(
                self.config.window_name,
                cv2.WND_PROP_FULLSCREEN,
                cv2.WINDOW_FULLSCREEN if self._fullscreen else cv2.WINDOW_NORMAL,
            )
        logger.info("Fullscreen %s", "on" if self._fullscreen else "off")
        return self._fullscreen

    @property
    def is_fullscreen(self) -> bool:
        return self._fullscreen

    def close(self) -> None:
        if self._window_open:
            cv2.destroyWindow(self.config.window_name)
            self._window_open = False
