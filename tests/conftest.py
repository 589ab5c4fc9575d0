"""Pytest configuration for path tracer tests.

Taichi must be initialized once per session before any field is allocated.
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


@pytest.fixture
def empty_scene():
    """A built scene with no objects."""
    from pathtracer.scene.manager import SceneManager

    return SceneManager().build()
