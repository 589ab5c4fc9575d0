"""Device-side scene container and nearest-hit query.

A Scene is an ordered list of (sphere, material) pairs copied into Taichi
fields in Structure-of-Arrays layout. Each Scene owns its own fields, so any
number of scenes can coexist and nothing is shared through module globals.
The scene is read-only once built; render kernels access it concurrently
without synchronization.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.scene.manager import SceneManager
    >>> manager = SceneManager()
    >>> manager.add_diffuse_sphere((0.0, 0.0, -1.0), 0.5, albedo=(0.8, 0.3, 0.3))
    >>> scene = manager.build()
    >>> # Use scene.nearest_hit within a Taichi kernel
"""

from collections.abc import Sequence
from typing import TYPE_CHECKING

import taichi as ti

from pathtracer.core.ray import Ray, vec3
from pathtracer.geometry.sphere import Sphere, hit_sphere, make_miss_record
from pathtracer.materials.material import Material

if TYPE_CHECKING:
    from pathtracer.scene.manager import SphereInfo


@ti.data_oriented
class Scene:
    """Immutable collection of spheres and their materials.

    Attributes:
        num_objects: Number of (sphere, material) pairs. May be zero.
    """

    def __init__(self, objects: Sequence["SphereInfo"]) -> None:
        """Copy the objects into freshly allocated Taichi fields.

        Args:
            objects: Ordered spheres with their materials. Order decides
                ties in nearest_hit (first encountered wins).
        """
        self.num_objects = len(objects)

        # Taichi fields cannot be empty; an empty scene keeps one unused slot.
        capacity = max(self.num_objects, 1)

        self.sphere_centers = ti.Vector.field(3, dtype=ti.f32, shape=capacity)
        self.sphere_radii = ti.field(dtype=ti.f32, shape=capacity)
        self.material_kinds = ti.field(dtype=ti.i32, shape=capacity)
        self.material_albedos = ti.Vector.field(3, dtype=ti.f32, shape=capacity)
        self.material_fuzziness = ti.field(dtype=ti.f32, shape=capacity)

        for idx, obj in enumerate(objects):
            self.sphere_centers[idx] = list(obj.center)
            self.sphere_radii[idx] = obj.radius
            self.material_kinds[idx] = int(obj.material.material_type)
            self.material_albedos[idx] = list(obj.material.albedo)
            self.material_fuzziness[idx] = obj.material.fuzziness

    def __len__(self) -> int:
        return self.num_objects

    def __repr__(self) -> str:
        return f"Scene(num_objects={self.num_objects})"

    @ti.func
    def material_at(self, idx: ti.i32) -> Material:
        """Assemble the Material struct stored at index idx."""
        return Material(
            kind=self.material_kinds[idx],
            albedo=self.material_albedos[idx],
            fuzziness=self.material_fuzziness[idx],
        )

    @ti.func
    def nearest_hit(self, ray: Ray, t_min: ti.f32, t_max: ti.f32):
        """Find the closest intersection across all objects.

        Performs a linear scan, shrinking the upper bound to the closest t
        found so far. A later object only replaces the current best when it is
        strictly closer, so exact ties keep the first object in scene order.

        Args:
            ray: The ray to test.
            t_min: Exclusive lower bound on t.
            t_max: Exclusive upper bound on t (use tm.inf for unbounded).

        Returns:
            A tuple (record, material). record.hit is 0 when nothing was hit,
            in which case material is an unused placeholder.
        """
        closest_t = t_max
        record = make_miss_record()
        material = Material(kind=-1, albedo=vec3(0.0, 0.0, 0.0), fuzziness=0.0)

        for i in range(self.num_objects):
            sphere = Sphere(center=self.sphere_centers[i], radius=self.sphere_radii[i])
            rec = hit_sphere(ray, sphere, t_min, closest_t)
            if rec.hit == 1:
                closest_t = rec.t
                record = rec
                material = self.material_at(i)

        return record, material
