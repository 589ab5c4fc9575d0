"""Sphere primitive with robust ray-sphere intersection.

The intersection solves |o + t*d - c|^2 = r^2 in the half-b form

    a*t^2 + 2*h*t + c' = 0,   a = d.d,  h = (o - c).d,  c' = |o - c|^2 - r^2

so the discriminant is h^2 - a*c' and the roots are (-h +/- sqrt(disc)) / a.
The roots are evaluated with the cancellation-free reformulation from Ray
Tracing Gems (chapter 7) so grazing rays and distant spheres stay accurate.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.geometry.sphere import Sphere, hit_sphere
    >>> sphere = Sphere(center=ti.math.vec3(0, 0, -1), radius=0.5)
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from pathtracer.core.ray import Ray, ray_at, vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere. Spheres with radius <= 0 are never hit.
    """

    center: vec3
    radius: ti.f32


@ti.dataclass
class HitRecord:
    """Record of a ray-surface intersection.

    Attributes:
        hit: 1 if the ray hit the surface, 0 for a miss. The remaining fields
            are only meaningful when hit == 1.
        t: The ray parameter of the intersection.
        p: The world-space hit point.
        normal: The unit outward normal at p.
    """

    hit: ti.i32
    t: ti.f32
    p: vec3
    normal: vec3


@ti.func
def make_miss_record() -> HitRecord:
    """Create a HitRecord indicating no intersection."""
    return HitRecord(
        hit=0,
        t=0.0,
        p=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
    )


@ti.func
def _solve_quadratic_robust(h: ti.f32, a: ti.f32, c: ti.f32, sqrt_d: ti.f32):
    """Solve a*t^2 + 2*h*t + c = 0 given sqrt(h^2 - a*c).

    Args:
        h: Half of the linear coefficient.
        a: Quadratic coefficient (non-zero).
        c: Constant term.
        sqrt_d: Square root of the half-b discriminant.

    Returns:
        Tuple of (t0, t1) where t0 <= t1.
    """
    # q = -(h + sign(h) * sqrt(disc)) never subtracts nearly equal values
    sign_h = ti.select(h < 0.0, -1.0, 1.0)
    q = -(h + sign_h * sqrt_d)

    t0 = 0.0
    t1 = 0.0

    if ti.abs(q) < 1e-10:
        # h and the discriminant both vanish: ray origin on the surface,
        # moving tangentially. Both roots come from the textbook formula.
        t0 = (-h - sqrt_d) / a
        t1 = (-h + sqrt_d) / a
    else:
        t0 = q / a
        t1 = c / q

    if t0 > t1:
        temp = t0
        t0 = t1
        t1 = temp

    return t0, t1


@ti.func
def hit_sphere(ray: Ray, sphere: Sphere, t_min: ti.f32, t_max: ti.f32) -> HitRecord:
    """Test for ray-sphere intersection.

    Reports the closest intersection with t_min < t < t_max. The smaller root
    is tried first; when it falls outside the range (for example a ray leaving
    the sphere from inside) the larger root is used.

    Degenerate input never divides by zero: a zero-length direction (a == 0)
    or a non-positive radius is reported as a miss.

    Args:
        ray: The ray to test. The direction need not be normalized.
        sphere: The sphere to test intersection against.
        t_min: Exclusive lower bound on t (avoids self-intersection).
        t_max: Exclusive upper bound on t (use tm.inf for unbounded).

    Returns:
        A HitRecord; check its hit field before reading the others.
    """
    oc = ray.origin - sphere.center

    a = tm.dot(ray.direction, ray.direction)
    h = tm.dot(oc, ray.direction)
    c = tm.dot(oc, oc) - sphere.radius * sphere.radius

    discriminant = h * h - a * c

    result = make_miss_record()

    if a > 0.0 and sphere.radius > 0.0 and discriminant >= 0.0:
        sqrt_d = ti.sqrt(discriminant)
        t0, t1 = _solve_quadratic_robust(h, a, c, sqrt_d)

        t = t0
        valid = (t > t_min) and (t < t_max)

        if not valid:
            t = t1
            valid = (t > t_min) and (t < t_max)

        if valid:
            p = ray_at(ray, t)
            result = HitRecord(
                hit=1,
                t=t,
                p=p,
                normal=(p - sphere.center) / sphere.radius,
            )

    return result
