"""Command-line entry point.

Usage:
    beamline <scene.beam> [width height] [options]

Options:
    --info              Only print the scene summary
    -o, --output PATH   Output image (default: output_<timestamp>.ppm)
    --depth N           Maximum recursion depth (default: 4)
    --arch {cpu,gpu}    Taichi backend (default: cpu)
    --animate           Render the scene's camera keyframes
    --fps N             Animation frame rate (default: 24)
    --video PATH        Encode the animation frames into a video with ffmpeg
    --quiet             Suppress rendering progress messages
    --log-level LEVEL   Logging level (default: INFO)

Example:
    beamline scenes/example.beam 800 600
    beamline scenes/example.beam --info
    beamline scenes/example.beam 320 240 --animate --video orbit.mp4
"""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path
from typing import Optional, Sequence

import taichi as ti

from src.beamline import __version__
from src.beamline.config import (
    DEFAULT_FPS,
    DEFAULT_HEIGHT,
    DEFAULT_MAX_DEPTH,
    DEFAULT_OUTPUT_BASE,
    DEFAULT_OUTPUT_EXT,
    DEFAULT_WIDTH,
    LOG_LEVEL,
    RenderSettings,
)
from src.beamline.image.export import timestamped_filename, timestamped_name
from src.beamline.logging_config import setup_logging
from src.beamline.scene.loader import load_scene
from src.beamline.scene.model import Scene
from src.beamline.scene.validation import scene_summary, validate_scene


def print_banner() -> None:
    """Print the program banner."""
    print()
    print("=======================================")
    print("   Beamline")
    print(f"   Version {__version__}")
    print("   An open source command-line renderer")
    print("=======================================")
    print()


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="beamline",
        description="Render a .beam scene file with Whitted ray tracing.",
        epilog=(
            "Example:\n"
            "  beamline scenes/example.beam 800 600\n"
            "  beamline scenes/example.beam --info"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("scene", type=Path, help="Scene file (.beam)")
    parser.add_argument(
        "size",
        type=int,
        nargs="*",
        metavar="width height",
        help=f"Image size in pixels (default: {DEFAULT_WIDTH} {DEFAULT_HEIGHT})",
    )
    parser.add_argument(
        "--info",
        action="store_true",
        help="Only print the scene summary",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help="Output image path; the format follows the extension "
        "(default: output_<timestamp>.ppm)",
    )
    parser.add_argument(
        "--depth",
        type=int,
        default=DEFAULT_MAX_DEPTH,
        help=f"Maximum recursion depth (default: {DEFAULT_MAX_DEPTH})",
    )
    parser.add_argument(
        "--arch",
        choices=("cpu", "gpu"),
        default="cpu",
        help="Taichi backend (default: cpu)",
    )
    parser.add_argument(
        "--animate",
        action="store_true",
        help="Render the scene's camera keyframes to numbered frames",
    )
    parser.add_argument(
        "--fps",
        type=float,
        default=DEFAULT_FPS,
        help=f"Animation frame rate (default: {DEFAULT_FPS:g})",
    )
    parser.add_argument(
        "--video",
        type=Path,
        default=None,
        help="Encode the animation frames into this video file with ffmpeg",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress rendering progress messages; the scene summary "
        "and timing summary are still printed",
    )
    parser.add_argument(
        "--log-level",
        default=LOG_LEVEL,
        help=f"Logging level (default: {LOG_LEVEL})",
    )
    return parser


def parse_args(argv: Optional[Sequence[str]] = None) -> tuple[RenderSettings, argparse.Namespace]:
    """Parse command-line arguments into RenderSettings."""
    parser = build_parser()
    args = parser.parse_args(argv)

    width, height = DEFAULT_WIDTH, DEFAULT_HEIGHT
    if args.size:
        if len(args.size) != 2:
            parser.error("image size needs both width and height")
        width, height = args.size
        if width <= 0 or height <= 0:
            parser.error(f"image size must be positive, got {width}x{height}")

    settings = RenderSettings(
        scene_path=args.scene,
        width=width,
        height=height,
        max_depth=args.depth,
        output=args.output,
        arch=args.arch,
        info_only=args.info,
        animate=args.animate or args.video is not None,
        fps=args.fps,
        video=args.video,
    )
    return settings, args


def init_taichi(arch: str) -> None:
    """Initialize the Taichi runtime on the requested backend."""
    ti.init(arch=ti.gpu if arch == "gpu" else ti.cpu)


def render_still(settings: RenderSettings, scene: Scene, quiet: bool = False) -> dict[str, float]:
    """Render one image and save it.

    Returns:
        Timings in seconds for the "render" and "save" stages.
    """
    # Lazy imports to allow Taichi initialization first
    from src.beamline.core.renderer import Renderer

    if not quiet:
        print("\nRendering...")
    renderer = Renderer(settings.width, settings.height, settings.max_depth)
    renderer.render(scene)

    output = settings.output or Path(timestamped_filename(DEFAULT_OUTPUT_BASE, DEFAULT_OUTPUT_EXT))
    if not quiet:
        print(f"Saving to: {output}")

    save_start = time.perf_counter()
    renderer.save(output)
    save_time = time.perf_counter() - save_start

    return {"render": renderer.last_render_seconds, "save": save_time}


def render_frames(settings: RenderSettings, scene: Scene, quiet: bool = False) -> dict[str, float]:
    """Render the camera keyframe animation and optionally encode a video.

    Frames go to the directory given by --output, or to a timestamped
    "frames_<stamp>" directory.

    Returns:
        Timings in seconds for the "render" and "save" (video) stages.
    """
    from src.beamline.core.animation import render_animation, stitch_video
    from src.beamline.core.renderer import Renderer

    if not scene.camera_frames:
        raise ValueError("Scene has no [CameraFrame] sections to animate")

    frame_dir = settings.output or Path(timestamped_name("frames"))
    renderer = Renderer(settings.width, settings.height, settings.max_depth)

    if not quiet:
        print(f"\nRendering animation to {frame_dir}/ ...")

    render_start = time.perf_counter()
    for index, total, path in render_animation(
        renderer, scene, frame_dir, fps=settings.fps, ext=DEFAULT_OUTPUT_EXT
    ):
        if not quiet:
            print(f"\r  Frame {index + 1}/{total}: {path.name}", end="", flush=True)
    render_time = time.perf_counter() - render_start

    if not quiet:
        print()

    save_time = 0.0
    if settings.video is not None:
        save_start = time.perf_counter()
        stitch_video(frame_dir, settings.video, fps=settings.fps, ext=DEFAULT_OUTPUT_EXT)
        save_time = time.perf_counter() - save_start
        if not quiet:
            print(f"Video saved to: {settings.video}")

    return {"render": render_time, "save": save_time}


def print_timing(load_time: float, timings: dict[str, float]) -> None:
    """Print the timing summary."""
    total = load_time + timings["render"] + timings["save"]
    print("\n--- Timing Summary ---")
    print(f"Scene load:   {load_time:.3f} sec")
    print(f"Render time:  {timings['render']:.3f} sec")
    print(f"Save image:   {timings['save']:.3f} sec")
    print(f"Total:        {total:.3f} sec")


def run(settings: RenderSettings, quiet: bool = False) -> int:
    """Load, check, render and save according to settings. Returns an exit code."""
    if not settings.scene_path.exists():
        print(f"Error: File not found: {settings.scene_path}", file=sys.stderr)
        return 1

    load_start = time.perf_counter()
    scene = load_scene(settings.scene_path)
    load_time = time.perf_counter() - load_start
    print(f"Scene loaded: {settings.scene_path} ({load_time:.3f} sec)")

    for warning in validate_scene(scene):
        print(f"[WARNING] {warning}", file=sys.stderr)
    print(scene_summary(scene, settings.width, settings.height))

    if settings.info_only:
        print("\n[INFO MODE] No rendering performed.")
        return 0

    init_taichi(settings.arch)

    if settings.animate:
        timings = render_frames(settings, scene, quiet=quiet)
    else:
        timings = render_still(settings, scene, quiet=quiet)

    print_timing(load_time, timings)
    print("\nBeamline complete.")
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point."""
    settings, args = parse_args(argv)
    setup_logging(args.log_level)

    print_banner()

    try:
        return run(settings, quiet=args.quiet)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
