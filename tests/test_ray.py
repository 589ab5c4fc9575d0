"""Unit tests for the Ray dataclass and vector helpers."""

import taichi as ti


class TestRay:
    """Tests for ray construction and evaluation."""

    def test_ray_at(self):
        from pathtracer.core.ray import Ray, ray_at, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            ray = Ray(origin=vec3(1.0, 2.0, 3.0), direction=vec3(0.0, 0.0, -2.0))
            result[None] = ray_at(ray, 1.5)

        test_kernel()
        p = result[None]
        assert abs(p[0] - 1.0) < 1e-6
        assert abs(p[1] - 2.0) < 1e-6
        assert abs(p[2] - 0.0) < 1e-6

    def test_ray_at_negative_t(self):
        """Negative t lies behind the origin."""
        from pathtracer.core.ray import make_ray, ray_at, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            ray = make_ray(vec3(0.0, 0.0, 0.0), vec3(1.0, 0.0, 0.0))
            result[None] = ray_at(ray, -2.0)

        test_kernel()
        assert abs(result[None][0] + 2.0) < 1e-6


class TestVectorHelpers:
    """Tests for length_squared and reflect."""

    def test_length_squared(self):
        from pathtracer.core.ray import length_squared, vec3

        result = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = length_squared(vec3(1.0, 2.0, 2.0))

        test_kernel()
        assert abs(result[None] - 9.0) < 1e-6

    def test_reflect(self):
        """A 45 degree ray bounces off a horizontal surface."""
        from pathtracer.core.ray import reflect, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = reflect(vec3(1.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0))

        test_kernel()
        r = result[None]
        assert abs(r[0] - 1.0) < 1e-6
        assert abs(r[1] - 1.0) < 1e-6
        assert abs(r[2]) < 1e-6

    def test_reflect_preserves_length(self):
        from pathtracer.core.ray import reflect, vec3

        result = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            n = ti.math.normalize(vec3(1.0, 2.0, 3.0))
            result[None] = ti.math.length(reflect(vec3(0.3, -4.0, 1.2), n))

        test_kernel()
        expected = (0.3**2 + 4.0**2 + 1.2**2) ** 0.5
        assert abs(result[None] - expected) < 1e-4


class TestRandomInUnitSphere:
    """Tests for unit-ball sampling."""

    def test_samples_inside_unit_ball(self):
        from pathtracer.core.ray import random_in_unit_sphere

        n = 2000
        samples = ti.Vector.field(3, dtype=ti.f32, shape=n)

        @ti.kernel
        def test_kernel():
            for i in range(n):
                samples[i] = random_in_unit_sphere()

        test_kernel()
        pts = samples.to_numpy()
        lengths_sq = (pts**2).sum(axis=1)
        assert (lengths_sq < 1.0).all()

    def test_samples_cover_all_octants(self):
        from pathtracer.core.ray import random_in_unit_sphere

        n = 2000
        samples = ti.Vector.field(3, dtype=ti.f32, shape=n)

        @ti.kernel
        def test_kernel():
            for i in range(n):
                samples[i] = random_in_unit_sphere()

        test_kernel()
        pts = samples.to_numpy()
        octants = {tuple(row) for row in (pts > 0).astype(int)}
        assert len(octants) == 8
        # Mean of a symmetric distribution is near zero
        assert abs(pts.mean(axis=0)).max() < 0.1
