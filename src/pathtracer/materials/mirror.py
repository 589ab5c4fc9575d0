"""Mirror (specular reflective) material with optional fuzziness.

The incoming direction is reflected about the surface normal,

    R = I - 2(I . N)N

and then perturbed by a random offset inside a ball of radius ``fuzziness``
to model glossy reflection. A perturbed ray that no longer points along the
ideal reflection (dot product <= 0) would head back into the surface, so it is
absorbed: the attenuation drops to zero.

Example:
    >>> # Within a Taichi kernel:
    >>> # record = scatter_mirror(albedo, fuzziness, in_ray, hit_record)
"""

import taichi as ti
import taichi.math as tm

from pathtracer.core.ray import Ray, random_in_unit_sphere, reflect, vec3
from pathtracer.geometry.sphere import HitRecord
from pathtracer.materials.bsdf import BSDFRecord


@ti.func
def scatter_mirror(albedo: vec3, fuzziness: ti.f32, in_ray: Ray, rec: HitRecord) -> BSDFRecord:
    """Scatter a ray off a mirror surface.

    Args:
        albedo: The reflective tint (RGB, each component in [0, 1]).
        fuzziness: Perturbation radius. Clamped to [0, 1]; 0 is a perfect mirror.
        in_ray: The incoming ray.
        rec: The hit record for the intersection (unit normal).

    Returns:
        A BSDFRecord with the reflected ray starting at rec.p. The attenuation
        is the albedo, or zero when the perturbed ray is absorbed.
    """
    reflected = reflect(in_ray.direction, rec.normal)

    fuzz = tm.clamp(fuzziness, 0.0, 1.0)
    direction = reflected + fuzz * random_in_unit_sphere()

    attenuation = albedo
    if tm.dot(direction, reflected) <= 0.0:
        attenuation = vec3(0.0, 0.0, 0.0)

    scattered = Ray(origin=rec.p, direction=direction)
    return BSDFRecord(out_scattered=scattered, attenuated=attenuation)
