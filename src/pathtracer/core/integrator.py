"""Radiance estimator for Monte Carlo light transport.

The estimator follows a light path backwards from the camera:

    color(ray, depth):
        no hit                  -> sky gradient
        hit, depth < limit      -> color(scattered, depth + 1) * attenuation
        hit, depth >= limit     -> black

Taichi functions cannot recurse, so the path is unrolled into a loop that
carries the product of attenuations seen so far (the throughput). Because the
recursion only ever multiplies component-wise, the loop returns exactly what
the recursion would: the sky colour times the throughput when the path
escapes, and zero when it reaches the depth limit.

Example:
    >>> # Within a Taichi kernel:
    >>> # color = radiance(scene, ray, 0, 50)
"""

import taichi as ti
import taichi.math as tm

from pathtracer.core.ray import Ray, vec3
from pathtracer.materials.material import scatter

# =============================================================================
# Rendering Constants
# =============================================================================

# Lower bound on hit distance. Excludes the surface a scattered ray starts on,
# which float error would otherwise report as a hit at t ~ 0 (shadow acne).
T_MIN = 0.001

# No upper bound on hit distance
T_MAX = tm.inf

# Sky gradient endpoints: horizon and zenith
SKY_WHITE = vec3(1.0, 1.0, 1.0)
SKY_BLUE = vec3(0.5, 0.7, 1.0)


@ti.func
def sky_color(direction: vec3) -> vec3:
    """Background radiance for a ray that escapes the scene.

    Blends white to sky blue by the elevation of the ray:
    t = 0.5 * (normalize(direction).y + 1).

    Args:
        direction: The ray direction (any non-zero length).

    Returns:
        The background color (RGB).
    """
    unit_direction = tm.normalize(direction)
    t = 0.5 * (unit_direction.y + 1.0)
    return (1.0 - t) * SKY_WHITE + t * SKY_BLUE


@ti.func
def radiance(scene: ti.template(), ray: Ray, depth: ti.i32, depth_limit: ti.i32) -> vec3:
    """Estimate the radiance arriving along a ray.

    Args:
        scene: The Scene to trace against.
        ray: The ray to trace.
        depth: Number of bounces already taken before this ray.
        depth_limit: Number of bounces after which a path contributes nothing.

    Returns:
        The per-channel radiance estimate.
    """
    result = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)
    current = ray
    bounce = depth

    # Path continuation flag (break is not used in ti.func loops)
    active = 1

    while active == 1:
        rec, material = scene.nearest_hit(current, T_MIN, T_MAX)

        if rec.hit == 0:
            result = throughput * sky_color(current.direction)
            active = 0
        elif bounce >= depth_limit:
            # Energy still travelling along the path is dropped at the cutoff
            active = 0
        else:
            bsdf = scatter(material, current, rec)
            throughput *= bsdf.attenuated
            current = bsdf.out_scattered
            bounce += 1

    return result
