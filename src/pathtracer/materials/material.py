"""Material representation and scatter dispatch.

Materials form a closed set of variants. Each scene object carries a Material
struct whose ``kind`` field selects the scattering function; ``scatter`` is the
single dispatch point used by the integrator.

Scattering returns a BSDFRecord holding the outgoing ray and the per-channel
attenuation that multiplies the light gathered along that ray.
"""

from enum import IntEnum

import taichi as ti

from pathtracer.core.ray import Ray, vec3
from pathtracer.geometry.sphere import HitRecord
from pathtracer.materials.bsdf import BSDFRecord
from pathtracer.materials.diffuse import scatter_diffuse
from pathtracer.materials.mirror import scatter_mirror


class MaterialType(IntEnum):
    """Enumeration of supported material types."""

    DIFFUSE = 0
    MIRROR = 1


@ti.dataclass
class Material:
    """Material parameters as stored on the device.

    Attributes:
        kind: The MaterialType value selecting the scattering function.
        albedo: Per-channel reflectance (RGB, each component in [0, 1]).
        fuzziness: Mirror roughness. Ignored by diffuse materials; clamped to
            [0, 1] when the mirror scatters.
    """

    kind: ti.i32
    albedo: vec3
    fuzziness: ti.f32


@ti.func
def scatter(material: Material, in_ray: Ray, rec: HitRecord) -> BSDFRecord:
    """Dispatch to the scattering function selected by material.kind.

    Args:
        material: The material of the surface that was hit.
        in_ray: The incoming ray.
        rec: The hit record for the intersection.

    Returns:
        A BSDFRecord. Unknown material kinds absorb the ray (zero attenuation).
    """
    result = BSDFRecord(
        out_scattered=Ray(origin=rec.p, direction=in_ray.direction),
        attenuated=vec3(0.0, 0.0, 0.0),
    )

    if material.kind == int(MaterialType.DIFFUSE):
        result = scatter_diffuse(material.albedo, rec)
    elif material.kind == int(MaterialType.MIRROR):
        result = scatter_mirror(material.albedo, material.fuzziness, in_ray, rec)

    return result
