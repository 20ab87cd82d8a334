"""Pytest configuration for sphere tracer tests.

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
    # Note: We don't call ti.reset() here as it can cause issues
    # with subsequent tests if any cleanup happens after


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear scene and render state before and after each test.

    This ensures tests are isolated from each other.
    """
    # Import here to ensure Taichi is initialized before fields are declared
    from spheretrace.camera.pinhole import PinholeCamera, setup_camera
    from spheretrace.core.integrator import reset_render_target, setup_light
    from spheretrace.scene.intersection import clear_scene
    from spheretrace.scene.sphere_cluster import LIGHT_DIRECTION

    def _clear_all():
        clear_scene()
        reset_render_target()
        setup_camera(PinholeCamera())
        setup_light(LIGHT_DIRECTION)

    _clear_all()

    yield

    _clear_all()


@pytest.fixture
def rng():
    """Seeded NumPy random generator for randomized scenes and rays."""
    import numpy as np

    return np.random.default_rng(1234)
