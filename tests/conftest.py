"""Pytest configuration for Beamline tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts.
    """
    ti.init(arch=ti.cpu, random_seed=42)
    yield


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear device-side scene tables before and after each test.

    This ensures tests are isolated from each other.
    """
    # Import here so that Taichi is initialized before fields are declared
    from src.beamline.core.integrator import clear_render_target
    from src.beamline.materials.surface import clear_materials
    from src.beamline.scene.intersection import clear_scene
    from src.beamline.scene.lights import clear_lights
    from src.beamline.scene.manager import SceneManager

    def _clear_all():
        clear_scene()
        clear_materials()
        clear_lights()
        # Forget which Scene the shared tables were holding
        SceneManager().clear()
        clear_render_target()

    _clear_all()
    yield
    _clear_all()


@pytest.fixture
def write_scene(tmp_path):
    """Write scene text to a .beam file and return its path."""

    def _write(text: str, name: str = "scene.beam"):
        path = tmp_path / name
        path.write_text(text)
        return path

    return _write
