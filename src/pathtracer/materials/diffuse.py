"""Diffuse (Lambertian) material.

The outgoing direction is the normal plus a random offset inside the unit
ball, which distributes scattered rays with a cosine-like falloff around the
normal. The incoming direction plays no part: a Lambertian surface looks the
same from every viewing angle.

Example:
    >>> # Within a Taichi kernel:
    >>> # record = scatter_diffuse(albedo, hit_record)
"""

import taichi as ti

from pathtracer.core.ray import Ray, random_in_unit_sphere, vec3
from pathtracer.geometry.sphere import HitRecord
from pathtracer.materials.bsdf import BSDFRecord


@ti.func
def scatter_diffuse(albedo: vec3, rec: HitRecord) -> BSDFRecord:
    """Scatter a ray off a diffuse surface.

    Args:
        albedo: The diffuse reflectance color (RGB, each component in [0, 1]).
        rec: The hit record for the intersection.

    Returns:
        A BSDFRecord whose ray starts at rec.p and whose attenuation is
        exactly the albedo.
    """
    target = rec.p + rec.normal + random_in_unit_sphere()
    scattered = Ray(origin=rec.p, direction=target - rec.p)
    return BSDFRecord(out_scattered=scattered, attenuated=albedo)
