"""Renderer facade tying scene upload, camera setup and the integrator together.

The Renderer owns the image size and recursion depth and delegates to the
global integrator buffers (which are Taichi fields). Those buffers
and the scene tables are shared by every Renderer, so each render call
sets the render target to its own size and uploads the scene unless that
same Scene object is what the tables currently hold. Rendering the same
Scene again only re-reads its camera, so the camera can be moved between
frames without re-uploading geometry.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.beamline.core.renderer import Renderer
    >>> from src.beamline.scene.loader import load_scene
    >>>
    >>> scene = load_scene("scenes/example.beam")
    >>> renderer = Renderer(640, 480)
    >>> image = renderer.render(scene)
    >>> renderer.save("output.png")
"""

import logging
import os
import time

import numpy as np
import numpy.typing as npt

from src.beamline.camera.pinhole import setup_camera
from src.beamline.core.integrator import (
    DEFAULT_MAX_DEPTH,
    get_framebuffer_numpy,
    render_frame,
    setup_render_target,
)
from src.beamline.image.export import save_image
from src.beamline.scene.manager import SceneManager, get_loaded_scene
from src.beamline.scene.model import Scene

logger = logging.getLogger(__name__)


class Renderer:
    """Renders Scenes to (height, width, 3) float32 framebuffers.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        max_depth: Maximum recursion depth per primary ray.
        manager: The SceneManager holding the uploaded scene.
        last_render_seconds: Wall-clock duration of the last render() call.
    """

    def __init__(self, width: int, height: int, max_depth: int = DEFAULT_MAX_DEPTH) -> None:
        """Initialize the renderer.

        Args:
            width: Image width in pixels (max 2048).
            height: Image height in pixels (max 2048).
            max_depth: Maximum recursion depth.

        Raises:
            ValueError: If dimensions are not positive or exceed the maximum.
        """
        setup_render_target(width, height)
        self._width = width
        self._height = height
        self.max_depth = max_depth
        self.manager = SceneManager()
        self.last_render_seconds = 0.0
        self._image: npt.NDArray[np.float32] | None = None

    @property
    def width(self) -> int:
        """Get the image width."""
        return self._width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self._height

    @property
    def image(self) -> npt.NDArray[np.float32] | None:
        """The framebuffer returned by the last render, or None."""
        return self._image

    def render(self, scene: Scene, reload: bool = False) -> npt.NDArray[np.float32]:
        """Render one frame of a scene from its current camera.

        Args:
            scene: The scene to render.
            reload: Upload the scene again even if it is already loaded,
                for callers that mutated its primitives or lights.

        Returns:
            A new float32 array of shape (height, width, 3).
        """
        setup_render_target(self._width, self._height)

        if reload or get_loaded_scene() is not scene:
            self.manager.load(scene)
            logger.debug(
                "Uploaded scene: %d primitives, %d lights",
                self.manager.get_primitive_count(),
                self.manager.get_light_count(),
            )

        start = time.perf_counter()
        setup_camera(scene.camera, self._width, self._height)
        render_frame(self.max_depth)
        self._image = get_framebuffer_numpy()
        self.last_render_seconds = time.perf_counter() - start

        logger.debug(
            "Rendered %dx%d in %.3fs", self._width, self._height, self.last_render_seconds
        )
        return self._image

    def save(self, filepath: str | os.PathLike) -> None:
        """Save the last rendered framebuffer; the format follows the extension.

        Raises:
            RuntimeError: If nothing has been rendered yet.
            ValueError: If the extension is not supported.
        """
        if self._image is None:
            raise RuntimeError("Nothing rendered yet. Call render() first.")
        save_image(self._image, filepath)

    def __repr__(self) -> str:
        """Return a string representation of the renderer state."""
        return (
            f"Renderer(width={self.width}, height={self.height}, "
            f"max_depth={self.max_depth})"
        )
