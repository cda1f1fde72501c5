"""Image encoding for rendered framebuffers.

Components:
    export: Clamp-and-quantize conversion plus PPM and Pillow raster writers
"""

from src.beamline.image.export import (
    RASTER_FORMATS,
    framebuffer_to_uint8,
    save_image,
    save_ppm,
    save_raster,
    timestamped_filename,
    timestamped_name,
)

__all__ = [
    "RASTER_FORMATS",
    "framebuffer_to_uint8",
    "save_image",
    "save_ppm",
    "save_raster",
    "timestamped_filename",
    "timestamped_name",
]
