"""Pytest configuration for lumen tests.

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
    # Import here so Taichi is initialized before any field is declared
    from src.lumen.core.renderer import unload_generation
    from src.lumen.scene.intersection import clear_scene

    def _clear_all():
        clear_scene()
        unload_generation()

    _clear_all()
    yield
    _clear_all()


@pytest.fixture
def make_config():
    """Factory for small RenderConfigs looking along +x from the origin."""
    from src.lumen.core.ray import Ray
    from src.lumen.core.vector import Vector3
    from src.lumen.scene.objects import RenderConfig

    def _make(objects=(), *, width=8, height=6, fov=0.5, max_depth=3, num_tries=2, max_variation=0.01):
        return RenderConfig(
            pov=Ray(Vector3(0.0, 0.0, 0.0), Vector3(1.0, 0.0, 0.0)),
            width=width,
            height=height,
            fov=fov,
            max_depth=max_depth,
            num_tries=num_tries,
            max_variation=max_variation,
            objects=tuple(objects),
        )

    return _make


SIMPLE_SCENE = """\
// camera
0 0 0
1 0 0
8 6
0.5
3 2
0.01
1 1

white 0 opaque sphere 5 0 0 1
white 1 opaque plane 0 0 -2 0 0 1
"""


@pytest.fixture
def scene_text():
    """A small valid scene description."""
    return SIMPLE_SCENE
