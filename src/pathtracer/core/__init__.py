"""Core rendering module.

Components:
    ray: Ray data structure, vector helpers and unit-ball sampling
    integrator: Radiance estimator (scatter, bounce, attenuate, sky on escape)
    render: Parallel per-pixel sample accumulation and 8-bit quantization

The integrator and render loop depend on the scene and material modules, so
they are not imported here. Import them directly:
    from pathtracer.core.integrator import radiance
    from pathtracer.core.render import RenderConfig, Renderer
"""

from .ray import (
    Ray,
    length_squared,
    make_ray,
    random_in_unit_sphere,
    ray_at,
    reflect,
    vec3,
)

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "length_squared",
    "reflect",
    "random_in_unit_sphere",
]
