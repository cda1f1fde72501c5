"""Advisory checks and summaries for loaded scenes.

The renderer itself never validates input: a degenerate camera or an empty
scene simply renders as background, black or NaN pixels. These checks let
the command line warn about such scenes before spending time on them.
"""

import logging

import numpy as np

from src.beamline.core.ray import normalize_np, to_array
from src.beamline.scene.model import DEFAULT_AMBIENT_LIGHT, PrimitiveKind, Scene

logger = logging.getLogger(__name__)

# |dot(forward, world_up)| above this counts as looking straight up or down
PARALLEL_TOLERANCE = 1.0 - 1e-6


def validate_scene(scene: Scene) -> list[str]:
    """Check a scene for setups that render poorly.

    Every warning is also logged. This never raises.

    Returns:
        A list of human-readable warnings; empty if nothing was found.
    """
    warnings: list[str] = []
    camera = scene.camera

    view = to_array(camera.lookat) - to_array(camera.position)
    if not np.any(view):
        warnings.append("Camera position and lookat are identical; every ray is degenerate")
    else:
        forward = normalize_np(view)
        if abs(float(forward[1])) > PARALLEL_TOLERANCE:
            warnings.append(
                "Camera looks straight up or down; the view basis is degenerate"
            )

    if not scene.lights:
        warnings.append("Scene has no lights; only ambient and emission will be visible")

    if not scene.primitives:
        warnings.append("Scene has no geometry; the image will be background only")

    if tuple(scene.ambient_light) != DEFAULT_AMBIENT_LIGHT:
        warnings.append(
            f"Ambient light {tuple(scene.ambient_light)} is recorded but not applied; "
            "shading uses a fixed ambient factor"
        )

    for message in warnings:
        logger.warning(message)
    return warnings


def _fmt(v) -> str:
    return f"({v[0]:g}, {v[1]:g}, {v[2]:g})"


def scene_summary(scene: Scene, width: int, height: int) -> str:
    """Describe a scene in a few lines for console output."""
    counts = {kind: 0 for kind in PrimitiveKind}
    for primitive in scene.primitives:
        counts[primitive.kind] += 1

    lines = [
        f"Resolution:  {width}x{height}",
        f"Primitives:  {len(scene.primitives)} "
        f"({counts[PrimitiveKind.SPHERE]} spheres, {counts[PrimitiveKind.PLANE]} planes, "
        f"{counts[PrimitiveKind.CUBE]} cubes, {counts[PrimitiveKind.TRIANGLE]} triangles)",
        f"Lights:      {len(scene.lights)}",
        f"Camera:      {_fmt(scene.camera.position)} -> {_fmt(scene.camera.lookat)}",
    ]
    if scene.camera_frames:
        times = [f.time for f in scene.camera_frames]
        lines.append(
            f"Keyframes:   {len(scene.camera_frames)} ({min(times):g}s to {max(times):g}s)"
        )
    return "\n".join(lines)
