"""
Hand Magic Particle Field
==========================

Real-time particle field driven by hand gestures tracked from a webcam.

Modules:
    - detection: Hand landmark model and MediaPipe pose provider
    - recognition: Geometric gesture classification and compound gestures
    - simulation: Particle physics, color dynamics, camera framing
    - core: Per-tick orchestration over an explicit simulation context
    - capture: Webcam frame acquisition
    - utils: Logging, performance monitoring, visualization
"""

__version__ = "1.0.0"
__author__ = "Hand Magic Team"
