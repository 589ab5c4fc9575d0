"""Ready-made scenes.

Example:
    >>> import numpy as np
    >>> from pathtracer.scene.presets import default_scene, random_scene
    >>> manager = default_scene()
    >>> manager = random_scene(np.random.default_rng(7))
"""

from __future__ import annotations

import logging

import numpy as np

from pathtracer.scene.manager import SceneManager

logger = logging.getLogger(__name__)

# Spheres in random scenes share one radius
RANDOM_SPHERE_RADIUS = 0.5


def default_scene() -> SceneManager:
    """Build the four-sphere scene seen by the default camera.

    A red diffuse sphere sits in the middle on a large yellow diffuse ground
    sphere, flanked by a gold mirror on the right and a silver mirror on the
    left.
    """
    manager = SceneManager()
    manager.add_diffuse_sphere((0.0, 0.0, -1.0), 0.5, albedo=(0.8, 0.3, 0.3))
    manager.add_diffuse_sphere((0.0, -100.5, -1.0), 100.0, albedo=(0.8, 0.8, 0.0))
    manager.add_mirror_sphere((1.0, 0.0, -1.0), 0.5, albedo=(0.8, 0.6, 0.2))
    manager.add_mirror_sphere((-1.0, 0.0, -1.0), 0.5, albedo=(0.8, 0.8, 0.8))
    return manager


def random_scene(rng: np.random.Generator, max_primitives: int = 100) -> SceneManager:
    """Generate a scene of randomly placed spheres.

    Args:
        rng: Generator supplying every random choice, so a seeded generator
            reproduces the same scene.
        max_primitives: Exclusive upper bound on the number of spheres.

    Returns:
        A SceneManager holding between 0 and max_primitives - 1 spheres, each
        with radius 0.5, a random albedo, and an even chance of being diffuse
        or a perfect mirror.

    Raises:
        ValueError: If max_primitives is less than 1.
    """
    if max_primitives < 1:
        raise ValueError(f"max_primitives must be at least 1, got {max_primitives}")

    num_prims = int(rng.integers(0, max_primitives))
    logger.info("Generating %d primitives", num_prims)

    manager = SceneManager()
    for _ in range(num_prims):
        center = (
            float(rng.uniform(-1.0, 1.0)),
            float(rng.uniform(-0.5, 0.5)),
            float(rng.uniform(-1.0, 1.0)),
        )
        albedo = tuple(float(c) for c in rng.uniform(0.0, 1.0, size=3))

        if rng.random() < 0.5:
            manager.add_mirror_sphere(center, RANDOM_SPHERE_RADIUS, albedo=albedo)
        else:
            manager.add_diffuse_sphere(center, RANDOM_SPHERE_RADIUS, albedo=albedo)

    return manager
