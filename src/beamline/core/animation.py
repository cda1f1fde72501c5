"""Camera keyframe animation and video assembly.

A scene may carry camera keyframes ([CameraFrame] sections). This module
interpolates the camera between them, renders one image per frame into a
directory, and optionally hands the numbered frames to ffmpeg.

Frames are sampled at a fixed rate from the first keyframe time to the last,
inclusive. Before the first key and after the last the camera holds still.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.beamline.core.animation import render_animation, stitch_video
    >>> from src.beamline.core.renderer import Renderer
    >>>
    >>> renderer = Renderer(320, 240)
    >>> for index, total, path in render_animation(renderer, scene, "frames", fps=24):
    ...     print(f"{index + 1}/{total} {path}")
    >>> stitch_video("frames", "movie.mp4", fps=24)
"""

from __future__ import annotations

import logging
import math
import shutil
import subprocess
from collections.abc import Callable, Generator, Sequence
from pathlib import Path
from typing import TYPE_CHECKING

from src.beamline.scene.model import CameraFrame, Scene, Vec3

if TYPE_CHECKING:
    from src.beamline.core.renderer import Renderer

logger = logging.getLogger(__name__)

# Callback receives (frame_index, total_frames, saved_path)
FrameCallback = Callable[[int, int, Path], None]

# Numbered frame file pattern (printf style, as ffmpeg expects)
FRAME_PATTERN = "frame_%04d"


def _lerp(a: Vec3, b: Vec3, s: float) -> Vec3:
    return (
        a[0] + (b[0] - a[0]) * s,
        a[1] + (b[1] - a[1]) * s,
        a[2] + (b[2] - a[2]) * s,
    )


def interpolate_camera(frames: Sequence[CameraFrame], time: float) -> CameraFrame:
    """Interpolate the camera at a point in time.

    Args:
        frames: Keyframes in any order.
        time: Time in seconds.

    Returns:
        A new CameraFrame with linearly interpolated position and look-at
        point. Times outside the keyed range return the nearest end key.

    Raises:
        ValueError: If frames is empty.
    """
    if not frames:
        raise ValueError("At least one camera keyframe is required")

    keys = sorted(frames, key=lambda f: f.time)

    if time <= keys[0].time:
        first = keys[0]
        return CameraFrame(time, first.position, first.lookat)
    if time >= keys[-1].time:
        last = keys[-1]
        return CameraFrame(time, last.position, last.lookat)

    for a, b in zip(keys, keys[1:]):
        if a.time <= time <= b.time:
            span = b.time - a.time
            s = (time - a.time) / span if span > 0 else 0.0
            return CameraFrame(time, _lerp(a.position, b.position, s), _lerp(a.lookat, b.lookat, s))

    # Unreachable for finite times; keeps NaN from falling through
    last = keys[-1]
    return CameraFrame(time, last.position, last.lookat)


def frame_times(frames: Sequence[CameraFrame], fps: float) -> list[float]:
    """List the sample times for an animation.

    Args:
        frames: Keyframes in any order.
        fps: Frames per second.

    Returns:
        Times from the first key to the last, inclusive, every 1 / fps
        seconds. A single keyframe gives one frame.

    Raises:
        ValueError: If frames is empty or fps is not positive.
    """
    if not frames:
        raise ValueError("At least one camera keyframe is required")
    if fps <= 0:
        raise ValueError(f"fps must be positive, got {fps}")

    start = min(f.time for f in frames)
    end = max(f.time for f in frames)

    # Small tolerance so that an exact multiple of the frame step is included
    count = math.floor((end - start) * fps + 1e-6) + 1
    return [start + i / fps for i in range(count)]


def render_animation(
    renderer: Renderer,
    scene: Scene,
    output_dir: str | Path,
    fps: float = 24.0,
    ext: str = "ppm",
    callback: FrameCallback | None = None,
) -> Generator[tuple[int, int, Path], None, None]:
    """Render every animation frame of a scene to numbered image files.

    The scene's camera is moved to each interpolated keyframe between
    render calls and is left at the final frame.

    Args:
        renderer: Renderer to draw with.
        scene: Scene with at least one camera keyframe.
        output_dir: Directory for frame_0000.<ext>, frame_0001.<ext>, ...
            Created if missing.
        fps: Frames per second.
        ext: Image extension passed to the encoder.
        callback: Optional callback invoked after each saved frame.

    Yields:
        Tuple of (frame_index, total_frames, saved_path).

    Raises:
        ValueError: If the scene has no keyframes or fps is not positive.
    """
    times = frame_times(scene.camera_frames, fps)
    total = len(times)

    out = Path(output_dir)
    out.mkdir(parents=True, exist_ok=True)
    logger.info("Rendering %d frames at %g fps into %s", total, fps, out)

    for index, t in enumerate(times):
        scene.camera.apply_frame(interpolate_camera(scene.camera_frames, t))
        renderer.render(scene)

        path = out / f"{FRAME_PATTERN % index}.{ext.lstrip('.')}"
        renderer.save(path)
        logger.debug("Frame %d/%d (t=%.3fs) -> %s", index + 1, total, t, path)

        if callback is not None:
            callback(index, total, path)
        yield (index, total, path)


def stitch_video(
    frame_dir: str | Path,
    output: str | Path,
    fps: float = 24.0,
    ext: str = "ppm",
) -> Path:
    """Encode numbered frames into a video with ffmpeg.

    Args:
        frame_dir: Directory holding frame_0000.<ext>, frame_0001.<ext>, ...
        output: Output video path; the container follows its extension.
        fps: Frames per second.
        ext: Extension of the frame images.

    Returns:
        The output path.

    Raises:
        RuntimeError: If ffmpeg is not installed.
        subprocess.CalledProcessError: If ffmpeg fails.
    """
    ffmpeg = shutil.which("ffmpeg")
    if ffmpeg is None:
        raise RuntimeError("ffmpeg not found on PATH; cannot create video")

    input_pattern = str(Path(frame_dir) / f"{FRAME_PATTERN}.{ext.lstrip('.')}")
    output_path = Path(output)

    ffmpeg_cmd = [
        ffmpeg,
        "-y",
        "-framerate", str(fps),
        "-i", input_pattern,
        # yuv420p needs even dimensions
        "-vf", "pad=ceil(iw/2)*2:ceil(ih/2)*2",
        "-c:v", "libx264",
        "-pix_fmt", "yuv420p",
        str(output_path),
    ]

    logger.info("Encoding video %s", output_path)
    subprocess.run(
        ffmpeg_cmd,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
        check=True,
    )
    return output_path
