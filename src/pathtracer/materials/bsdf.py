"""Scatter event record shared by all materials."""

import taichi as ti

from pathtracer.core.ray import Ray, vec3


@ti.dataclass
class BSDFRecord:
    """Result of one scatter event.

    Attributes:
        out_scattered: The outgoing ray, starting at the hit point.
        attenuated: Per-channel factor applied to the light gathered along
            out_scattered.
    """

    out_scattered: Ray
    attenuated: vec3
