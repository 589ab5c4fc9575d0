"""Camera module for primary ray generation.

Components:
    pinhole: Pinhole camera (host configuration, device struct, get_ray)

Ray generation uses normalized image coordinates:
    u in [0, 1]: left to right across image
    v in [0, 1]: bottom to top across image
"""

from .pinhole import Camera, PinholeCamera, get_ray

__all__ = [
    "Camera",
    "PinholeCamera",
    "get_ray",
]
