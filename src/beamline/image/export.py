"""Image export utilities for rendered framebuffers.

Framebuffers hold linear, unclamped float color. Every writer quantizes
each channel the same way: clamp to [0, 1], scale by 255.999 and truncate,
so 1.0 maps to 255 and values just below an integer boundary round down.
No tone mapping or gamma correction is applied.

Supported formats:
    - PPM (plain text "P3", one "R G B" triple per line)
    - PNG, BMP, JPEG and TGA (via Pillow)

Example:
    >>> from src.beamline.image.export import save_image, timestamped_filename
    >>> image = renderer.render(scene)
    >>> save_image(image, timestamped_filename("output", "png"))
"""

from __future__ import annotations

import logging
import os
from datetime import datetime

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

logger = logging.getLogger(__name__)

# Scale applied after clamping; truncation keeps 1.0 at 255
QUANTIZE_SCALE = 255.999

# Extension -> Pillow format name
RASTER_FORMATS = {
    "png": "PNG",
    "bmp": "BMP",
    "jpg": "JPEG",
    "jpeg": "JPEG",
    "tga": "TGA",
}


def framebuffer_to_uint8(image: npt.NDArray[np.floating]) -> npt.NDArray[np.uint8]:
    """Convert a linear float image to 8-bit channels.

    Args:
        image: Array of shape (H, W, 3).

    Returns:
        uint8 array of the same shape.
    """
    # NaN pixels from degenerate inputs encode as black
    values = np.nan_to_num(np.asarray(image, dtype=np.float64), nan=0.0)
    clamped = np.clip(values, 0.0, 1.0)
    return (clamped * QUANTIZE_SCALE).astype(np.uint8)


def save_ppm(image: npt.NDArray[np.floating], filepath: str | os.PathLike) -> None:
    """Save an image as a plain-text PPM (P3) file.

    The header is "P3", then "<width> <height>", then "255", followed by one
    line per pixel in row-major order starting at the top-left.
    """
    pixels = framebuffer_to_uint8(image)
    height, width = pixels.shape[:2]

    with open(filepath, "w", encoding="ascii") as f:
        f.write(f"P3\n{width} {height}\n255\n")
        for r, g, b in pixels.reshape(-1, 3):
            f.write(f"{r} {g} {b}\n")


def save_raster(
    image: npt.NDArray[np.floating],
    filepath: str | os.PathLike,
    image_format: str | None = None,
) -> None:
    """Save an image through Pillow.

    Args:
        image: Linear float image of shape (H, W, 3).
        filepath: Output path.
        image_format: Pillow format name (e.g. "PNG"). Inferred from the
            file extension when omitted.

    Raises:
        ValueError: If the format cannot be determined.
    """
    if image_format is None:
        ext = _extension(filepath)
        if ext not in RASTER_FORMATS:
            raise ValueError(f"Unsupported raster format: '.{ext}'")
        image_format = RASTER_FORMATS[ext]

    pil_image = PILImage.fromarray(framebuffer_to_uint8(image))
    pil_image.save(filepath, format=image_format)


def save_image(image: npt.NDArray[np.floating], filepath: str | os.PathLike) -> None:
    """Save an image, choosing the encoder from the file extension.

    Extensions are matched case-insensitively: ".ppm" writes plain PPM,
    anything in RASTER_FORMATS goes through Pillow.

    Raises:
        ValueError: If the extension is not supported.
    """
    ext = _extension(filepath)
    if ext == "ppm":
        save_ppm(image, filepath)
    elif ext in RASTER_FORMATS:
        save_raster(image, filepath, RASTER_FORMATS[ext])
    else:
        supported = ", ".join(["ppm", *RASTER_FORMATS])
        raise ValueError(f"Unsupported image format '.{ext}' (supported: {supported})")

    logger.debug("Saved %s image to %s", ext.upper(), filepath)


def timestamped_name(base: str, now: datetime | None = None) -> str:
    """Build a name of the form base_YYYY-MM-DD_HHMM from the local time."""
    stamp = (now or datetime.now()).strftime("%Y-%m-%d_%H%M")
    return f"{base}_{stamp}"


def timestamped_filename(base: str, ext: str, now: datetime | None = None) -> str:
    """Build a file name of the form base_YYYY-MM-DD_HHMM.ext."""
    return f"{timestamped_name(base, now)}.{ext.lstrip('.')}"


def _extension(filepath: str | os.PathLike) -> str:
    return os.path.splitext(os.fspath(filepath))[1].lstrip(".").lower()
