"""Pinhole camera model for primary ray generation.

The camera is an eye point plus an image-plane rectangle anchored at
``lower_left`` and spanned by ``horizontal`` and ``vertical``. Normalized
image coordinates (u, v) map to the plane point

    lower_left + u * horizontal + v * vertical

and the primary ray runs from the eye through that point. The direction is
not normalized. Coordinates outside [0, 1] extrapolate the plane, which
jittered sampling of edge pixels relies on.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.camera.pinhole import Camera, get_ray
    >>>
    >>> @ti.kernel
    ... def center_ray() -> ti.math.vec3:
    ...     cam = Camera(
    ...         origin=ti.math.vec3(0.0, 0.0, 0.0),
    ...         horizontal=ti.math.vec3(4.0, 0.0, 0.0),
    ...         vertical=ti.math.vec3(0.0, 2.0, 0.0),
    ...         lower_left=ti.math.vec3(-2.0, -1.0, -1.0),
    ...     )
    ...     return get_ray(cam, 0.5, 0.5).direction
"""

import math
from dataclasses import dataclass

import numpy as np
import taichi as ti

from pathtracer.core.ray import Ray, make_ray, vec3

Vector3 = tuple[float, float, float]


# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass(frozen=True)
class PinholeCamera:
    """Host-side configuration for a pinhole camera.

    Attributes:
        origin: The eye point in world space.
        horizontal: Full-width extent of the image plane.
        vertical: Full-height extent of the image plane.
        lower_left: Lower-left corner of the image plane.
    """

    origin: Vector3
    horizontal: Vector3
    vertical: Vector3
    lower_left: Vector3

    @classmethod
    def default(cls) -> "PinholeCamera":
        """The standard camera: eye at the origin looking down -z, 2:1 plane at z = -1."""
        return cls(
            origin=(0.0, 0.0, 0.0),
            horizontal=(4.0, 0.0, 0.0),
            vertical=(0.0, 2.0, 0.0),
            lower_left=(-2.0, -1.0, -1.0),
        )

    @classmethod
    def look_at(
        cls,
        lookfrom: Vector3,
        lookat: Vector3,
        vup: Vector3,
        vfov: float,
        aspect_ratio: float,
    ) -> "PinholeCamera":
        """Build a camera from a viewpoint, a target and a vertical field of view.

        The image plane sits at unit distance in front of the eye, so the
        result has the same form as the default camera.

        Args:
            lookfrom: Camera position in world space.
            lookat: Point the camera looks at.
            vup: Up direction used to orient the image plane.
            vfov: Vertical field of view in degrees.
            aspect_ratio: Width divided by height of the output image.

        Raises:
            ValueError: If lookfrom equals lookat, or vup is parallel to the
                view direction.
        """
        theta = math.radians(vfov)
        h = math.tan(theta / 2.0)

        viewport_height = 2.0 * h
        viewport_width = aspect_ratio * viewport_height

        eye = np.array(lookfrom, dtype=np.float64)
        target = np.array(lookat, dtype=np.float64)
        up = np.array(vup, dtype=np.float64)

        # w points from lookat toward lookfrom (backward)
        w = eye - target
        w_norm = np.linalg.norm(w)
        if w_norm == 0.0:
            raise ValueError("lookfrom and lookat must be different points")
        w = w / w_norm

        u = np.cross(up, w)
        u_norm = np.linalg.norm(u)
        if u_norm == 0.0:
            raise ValueError("vup must not be parallel to the view direction")
        u = u / u_norm

        v = np.cross(w, u)

        horizontal = viewport_width * u
        vertical = viewport_height * v
        lower_left = eye - w - horizontal / 2.0 - vertical / 2.0

        return cls(
            origin=tuple(eye.tolist()),
            horizontal=tuple(horizontal.tolist()),
            vertical=tuple(vertical.tolist()),
            lower_left=tuple(lower_left.tolist()),
        )


@ti.dataclass
class Camera:
    """Device-side camera state, built once per render kernel launch."""

    origin: vec3
    horizontal: vec3
    vertical: vec3
    lower_left: vec3


# =============================================================================
# Ray Generation (Taichi-compatible)
# =============================================================================


@ti.func
def get_ray(camera: Camera, u: ti.f32, v: ti.f32) -> Ray:
    """Generate a ray through normalized image coordinates (u, v).

    - u = 0: left edge, u = 1: right edge
    - v = 0: bottom edge, v = 1: top edge

    Args:
        camera: The camera state.
        u: Horizontal coordinate (not clamped).
        v: Vertical coordinate (not clamped).

    Returns:
        A Ray starting at the eye with direction
        lower_left + u * horizontal + v * vertical - origin.
    """
    direction = camera.lower_left + u * camera.horizontal + v * camera.vertical - camera.origin
    return make_ray(camera.origin, direction)
