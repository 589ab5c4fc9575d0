"""Geometry module for shape primitives.

Components:
    sphere: Sphere primitive with ray-sphere intersection

Intersection routines are Taichi functions (@ti.func) returning a HitRecord
whose hit flag distinguishes hits from misses. Scenes are scanned linearly;
there is no acceleration structure.
"""

from .sphere import HitRecord, Sphere, hit_sphere, make_miss_record

__all__ = [
    "Sphere",
    "HitRecord",
    "hit_sphere",
    "make_miss_record",
]
