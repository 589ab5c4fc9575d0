"""Materials module for surface scattering (BSDF) models.

Components:
    bsdf: BSDFRecord, the result of a single scatter event
    diffuse: Lambertian reflection (attenuation = albedo)
    mirror: Specular reflection with clamped fuzziness
    material: MaterialType tags, the Material struct and scatter dispatch

All scattering functions are Taichi functions (@ti.func) and run inside the
render kernel.
"""

from .bsdf import BSDFRecord
from .diffuse import scatter_diffuse
from .material import Material, MaterialType, scatter
from .mirror import scatter_mirror

__all__ = [
    "BSDFRecord",
    "Material",
    "MaterialType",
    "scatter",
    "scatter_diffuse",
    "scatter_mirror",
]
