"""Runtime configuration read from environment variables.

Every setting has a default and can be overridden with a BEAMLINE_*
environment variable. Command-line options override these again; the
resolved values for one run are collected in RenderSettings.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

# Logging settings
LOG_LEVEL = os.getenv("BEAMLINE_LOG_LEVEL", "INFO")
LOG_FORMAT = os.getenv("BEAMLINE_LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s")

# Rendering settings
DEFAULT_WIDTH = int(os.getenv("BEAMLINE_WIDTH", "800"))
DEFAULT_HEIGHT = int(os.getenv("BEAMLINE_HEIGHT", "600"))
DEFAULT_MAX_DEPTH = int(os.getenv("BEAMLINE_MAX_DEPTH", "4"))

# Animation settings
DEFAULT_FPS = float(os.getenv("BEAMLINE_FPS", "24"))

# Output
DEFAULT_OUTPUT_BASE = "output"
DEFAULT_OUTPUT_EXT = "ppm"


@dataclass
class RenderSettings:
    """Options for one command-line run.

    Attributes:
        scene_path: Scene file to load.
        width: Image width in pixels.
        height: Image height in pixels.
        max_depth: Maximum recursion depth.
        output: Output image path, or None for a timestamped default.
        arch: Taichi backend ("cpu" or "gpu").
        info_only: Print the scene summary and stop before rendering.
        animate: Render the camera keyframes instead of a single image.
        fps: Animation frame rate.
        video: Optional video file to encode the animation frames into.
    """

    scene_path: Path
    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    max_depth: int = DEFAULT_MAX_DEPTH
    output: Optional[Path] = None
    arch: str = "cpu"
    info_only: bool = False
    animate: bool = False
    fps: float = DEFAULT_FPS
    video: Optional[Path] = None
