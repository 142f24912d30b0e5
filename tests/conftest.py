"""Pytest configuration for spheretracer tests.

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
    from spheretracer.config import taichi_options

    ti.init(arch=ti.cpu, **taichi_options(random_seed=42))
    yield


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear the world and every material table around each test."""
    # Import here so Taichi is initialized before fields are allocated
    from spheretracer.scene.manager import clear_all

    clear_all()
    yield
    clear_all()
