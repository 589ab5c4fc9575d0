"""Scene module for scene construction and ray-scene queries.

Components:
    scene: Device-side Scene holding spheres and materials in Taichi fields
    manager: Host-side SceneManager builder with dict/JSON serialization
    presets: The default four-sphere scene and a random scene generator

An empty scene is valid: every ray misses and the image is pure background.
"""

from .manager import MaterialInfo, SceneConfig, SceneManager, SphereInfo
from .presets import default_scene, random_scene
from .scene import Scene

__all__ = [
    "Scene",
    "SceneManager",
    "SceneConfig",
    "MaterialInfo",
    "SphereInfo",
    "default_scene",
    "random_scene",
]
