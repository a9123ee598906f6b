"""Pytest configuration for raytracer tests.

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
    """Clear scene data before and after each test.

    This ensures tests are isolated from each other.
    """
    # Import here so the field-declaring modules load after ti.init()
    from src.raylet.camera.pinhole import reset_camera
    from src.raylet.materials.matte import clear_matte_materials
    from src.raylet.materials.mirror import clear_mirror_materials
    from src.raylet.scene.intersection import clear_scene
    from src.raylet.scene.lights import clear_lights
    from src.raylet.scene.manager import _clear_material_tracking

    def _clear_all():
        clear_scene()
        clear_lights()
        clear_matte_materials()
        clear_mirror_materials()
        _clear_material_tracking()
        reset_camera()

    _clear_all()

    yield

    _clear_all()
