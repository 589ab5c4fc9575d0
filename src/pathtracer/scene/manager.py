"""Host-side scene builder and scene serialization.

The SceneManager collects spheres and their materials as plain Python data,
validates them, and builds the device-side Scene used by the renderer. It also
converts scenes to and from dictionaries and JSON files, so scene
descriptions can be stored next to their renders.

Example:
    >>> from pathtracer.scene.manager import SceneManager
    >>> scene = SceneManager()
    >>> scene.add_diffuse_sphere((0, 0, -1), 0.5, albedo=(0.8, 0.3, 0.3))
    >>> scene.add_mirror_sphere((1, 0, -1), 0.5, albedo=(0.8, 0.6, 0.2), fuzziness=0.3)
    >>> device_scene = scene.build()
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pathtracer.materials.material import MaterialType
from pathtracer.scene.scene import Scene

logger = logging.getLogger(__name__)

Vector3 = tuple[float, float, float]


def _as_vector3(values: Any, name: str) -> Vector3:
    """Convert a 3-element sequence to a float tuple."""
    try:
        x, y, z = values
        return (float(x), float(y), float(z))
    except (TypeError, ValueError) as e:
        raise ValueError(f"{name} must be a sequence of three numbers, got {values!r}") from e


def _as_float(value: Any, name: str) -> float:
    """Convert a scalar to float."""
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"{name} must be a number, got {value!r}") from e


def _validate_albedo(albedo: Vector3) -> None:
    for i, component in enumerate(albedo):
        if component < 0.0 or component > 1.0:
            raise ValueError(
                f"Albedo component {i} = {component} is outside [0, 1]. "
                "This would violate energy conservation."
            )


@dataclass(frozen=True)
class MaterialInfo:
    """A material as described on the host.

    Attributes:
        material_type: Which scattering function the material uses.
        albedo: Per-channel reflectance, each component in [0, 1].
        fuzziness: Mirror roughness. Stored as given; the mirror clamps it to
            [0, 1] when scattering.
    """

    material_type: MaterialType
    albedo: Vector3
    fuzziness: float = 0.0

    @classmethod
    def diffuse(cls, albedo: Vector3) -> MaterialInfo:
        """Create a validated diffuse material."""
        albedo = _as_vector3(albedo, "albedo")
        _validate_albedo(albedo)
        return cls(MaterialType.DIFFUSE, albedo)

    @classmethod
    def mirror(cls, albedo: Vector3, fuzziness: float = 0.0) -> MaterialInfo:
        """Create a validated mirror material."""
        albedo = _as_vector3(albedo, "albedo")
        _validate_albedo(albedo)
        return cls(MaterialType.MIRROR, albedo, _as_float(fuzziness, "fuzziness"))

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "type": self.material_type.name.lower(),
            "albedo": list(self.albedo),
        }
        if self.material_type == MaterialType.MIRROR:
            data["fuzziness"] = self.fuzziness
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MaterialInfo:
        """Load a material from its dictionary form.

        Raises:
            ValueError: If the type is unknown or the albedo is invalid.
        """
        if not isinstance(data, dict):
            raise ValueError(f"Material must be a mapping, got {data!r}")
        mat_type = str(data.get("type", "")).lower()
        if mat_type == "diffuse":
            return cls.diffuse(data.get("albedo", (0.5, 0.5, 0.5)))
        if mat_type == "mirror":
            return cls.mirror(
                data.get("albedo", (0.8, 0.8, 0.8)),
                data.get("fuzziness", 0.0),
            )
        raise ValueError(f"Unknown material type: {mat_type}")


@dataclass(frozen=True)
class SphereInfo:
    """A sphere paired with its material.

    Attributes:
        center: The center of the sphere.
        radius: The radius of the sphere. Non-positive radii are accepted and
            simply never intersect.
        material: The material assigned to the sphere.
    """

    center: Vector3
    radius: float
    material: MaterialInfo

    def to_dict(self) -> dict[str, Any]:
        return {
            "center": list(self.center),
            "radius": self.radius,
            "material": self.material.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SphereInfo:
        if not isinstance(data, dict):
            raise ValueError(f"Sphere entry must be a mapping, got {data!r}")
        if "material" not in data:
            raise ValueError("Sphere entry is missing its material")
        return cls(
            center=_as_vector3(data.get("center", (0.0, 0.0, 0.0)), "center"),
            radius=_as_float(data.get("radius", 1.0), "radius"),
            material=MaterialInfo.from_dict(data["material"]),
        )


@dataclass
class SceneConfig:
    """Serializable scene description.

    Attributes:
        spheres: Sphere entries in scene order, each with a nested material.
    """

    spheres: list[dict[str, Any]] = field(default_factory=list)


class SceneManager:
    """Builder for ordered (sphere, material) scenes.

    The object order is preserved from insertion through serialization to the
    device Scene, since it decides which object wins an exact nearest-hit tie.

    Attributes:
        objects: The spheres added so far, in insertion order.
    """

    def __init__(self) -> None:
        self.objects: list[SphereInfo] = []

    def clear(self) -> None:
        """Remove all objects."""
        self.objects.clear()

    def __len__(self) -> int:
        return len(self.objects)

    # =========================================================================
    # Object Management
    # =========================================================================

    def add_sphere(self, center: Vector3, radius: float, material: MaterialInfo) -> int:
        """Add a sphere with an existing material.

        Args:
            center: The center point of the sphere as (x, y, z).
            radius: The radius of the sphere.
            material: The material to assign.

        Returns:
            The index of the added sphere.
        """
        info = SphereInfo(
            center=_as_vector3(center, "center"),
            radius=_as_float(radius, "radius"),
            material=material,
        )
        self.objects.append(info)
        return len(self.objects) - 1

    def add_diffuse_sphere(self, center: Vector3, radius: float, albedo: Vector3) -> int:
        """Add a sphere with a new diffuse material.

        Raises:
            ValueError: If any albedo component is outside [0, 1].
        """
        return self.add_sphere(center, radius, MaterialInfo.diffuse(albedo))

    def add_mirror_sphere(
        self,
        center: Vector3,
        radius: float,
        albedo: Vector3,
        fuzziness: float = 0.0,
    ) -> int:
        """Add a sphere with a new mirror material.

        Raises:
            ValueError: If any albedo component is outside [0, 1].
        """
        return self.add_sphere(center, radius, MaterialInfo.mirror(albedo, fuzziness))

    def build(self) -> Scene:
        """Create the device-side Scene for rendering.

        Taichi must be initialized before calling this.
        """
        logger.debug("Building scene with %d objects", len(self.objects))
        return Scene(self.objects)

    # =========================================================================
    # Scene Serialization
    # =========================================================================

    def to_config(self) -> SceneConfig:
        return SceneConfig(spheres=[obj.to_dict() for obj in self.objects])

    def from_config(self, config: SceneConfig) -> None:
        """Replace the current objects with those in the configuration.

        Raises:
            ValueError: If the configuration contains invalid data.
        """
        objects = [SphereInfo.from_dict(entry) for entry in config.spheres]
        self.objects = objects

    def to_dict(self) -> dict[str, Any]:
        """Export the scene to a dictionary (for JSON serialization)."""
        return {"spheres": self.to_config().spheres}

    def from_dict(self, data: dict[str, Any]) -> None:
        """Load a scene from a dictionary with a 'spheres' key.

        Raises:
            ValueError: If 'spheres' is not a list or an entry is invalid.
        """
        spheres = data.get("spheres", [])
        if not isinstance(spheres, list):
            raise ValueError(f"'spheres' must be a list, got {type(spheres).__name__}")
        self.from_config(SceneConfig(spheres=list(spheres)))

    def save_json(self, path: str | Path) -> None:
        """Write the scene description to a JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(self.to_dict(), indent=2))

    @classmethod
    def load_json(cls, path: str | Path) -> SceneManager:
        """Read a scene description from a JSON file.

        Raises:
            FileNotFoundError: If the file does not exist.
            ValueError: If the file is not valid JSON or describes an invalid scene.
        """
        path = Path(path)
        try:
            data = json.loads(path.read_text())
        except json.JSONDecodeError as e:
            raise ValueError(f"Scene file {path} is not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Scene file {path} must contain a JSON object")

        manager = cls()
        manager.from_dict(data)
        logger.info("Loaded %d objects from %s", len(manager), path)
        return manager
