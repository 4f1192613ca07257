"""Scene manager for building, checking and serializing scenes.

This module provides a high-level API over the scene storage in
``whitted.scene.intersection``. The SceneManager:
- Checks primitives before they are stored (optional, on by default)
- Keeps a Python-side record of every primitive and light
- Exports and loads scenes as SceneConfig objects, dicts or JSON files

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from whitted.scene.manager import SceneManager
    >>> scene = SceneManager()
    >>> scene.add_sphere((0, 0, -1), 0.5, color=(1, 0, 0), reflection=0.5)
    >>> scene.add_plane((0, 1, 0), -0.5, color=(0.1, 0.1, 0.1), reflection=0.1)
    >>> scene.add_light((0.8, 0.8, 0.2))
    >>> scene.save_json("scene.json")
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from whitted.scene.intersection import (
    MAX_LIGHTS,
    MAX_PLANES,
    MAX_SPHERES,
    MAX_TRIANGLES,
    add_light,
    add_plane,
    add_sphere,
    add_triangle,
    clear_scene,
    get_light_count,
    get_plane_count,
    get_sphere_count,
    get_triangle_count,
)
from whitted.scene.validation import (
    check_nonzero_vec3,
    check_radius,
    check_scalar,
    check_triangle,
    check_vec3,
)

Vec3Tuple = tuple[float, float, float]

DEFAULT_COLOR = (1.0, 1.0, 1.0)


@dataclass
class SphereInfo:
    """Information about a sphere in the scene.

    Attributes:
        sphere_index: The index in the sphere storage arrays.
        center: The center of the sphere.
        radius: The radius of the sphere.
        color: Surface color.
        reflection: Reflection coefficient.
    """

    sphere_index: int
    center: Vec3Tuple
    radius: float
    color: Vec3Tuple
    reflection: float


@dataclass
class PlaneInfo:
    """Information about a plane in the scene.

    Attributes:
        plane_index: The index in the plane storage arrays.
        normal: The plane normal.
        d: The signed offset along the normal.
        color: Surface color.
        reflection: Reflection coefficient.
    """

    plane_index: int
    normal: Vec3Tuple
    d: float
    color: Vec3Tuple
    reflection: float


@dataclass
class TriangleInfo:
    """Information about a triangle in the scene.

    Attributes:
        triangle_index: The index in the triangle storage arrays.
        v0: First vertex.
        v1: Second vertex.
        v2: Third vertex.
        color: Surface color.
        reflection: Reflection coefficient.
    """

    triangle_index: int
    v0: Vec3Tuple
    v1: Vec3Tuple
    v2: Vec3Tuple
    color: Vec3Tuple
    reflection: float


@dataclass
class SceneConfig:
    """Configuration for scene serialization.

    Attributes:
        spheres: List of sphere configurations.
        planes: List of plane configurations.
        triangles: List of triangle configurations.
        lights: List of light directions.
    """

    spheres: list[dict[str, Any]] = field(default_factory=list)
    planes: list[dict[str, Any]] = field(default_factory=list)
    triangles: list[dict[str, Any]] = field(default_factory=list)
    lights: list[list[float]] = field(default_factory=list)


def _vec3(values: Any, default: Vec3Tuple) -> Vec3Tuple:
    if values is None:
        return default
    if len(values) != 3:
        raise ValueError(f"Expected 3 components, got {values!r}")
    return (values[0], values[1], values[2])


class SceneManager:
    """Scene builder over the Taichi scene storage.

    There is one scene storage per process; creating a SceneManager clears
    it. Scene data must not change while a render kernel is running.

    Attributes:
        spheres: List of SphereInfo for all spheres in the scene.
        planes: List of PlaneInfo for all planes in the scene.
        triangles: List of TriangleInfo for all triangles in the scene.
        lights: List of light directions.
        validate: Whether primitives are checked before being stored.
    """

    def __init__(self, validate: bool = True) -> None:
        """Initialize an empty scene.

        Args:
            validate: If False, primitives are stored without checks and
                degenerate geometry reaches the tracer unchanged.
        """
        self.validate = validate
        self.spheres: list[SphereInfo] = []
        self.planes: list[PlaneInfo] = []
        self.triangles: list[TriangleInfo] = []
        self.lights: list[Vec3Tuple] = []
        self._clear_all()

    def _clear_all(self) -> None:
        """Clear all scene data including Taichi fields."""
        clear_scene()
        self.spheres.clear()
        self.planes.clear()
        self.triangles.clear()
        self.lights.clear()

    def clear(self) -> None:
        """Clear the entire scene (primitives and lights)."""
        self._clear_all()

    # =========================================================================
    # Primitive Management
    # =========================================================================

    def add_sphere(
        self,
        center: Vec3Tuple,
        radius: float,
        color: Vec3Tuple = DEFAULT_COLOR,
        reflection: float = 0.0,
    ) -> int:
        """Add a sphere to the scene.

        Args:
            center: The center point of the sphere as (x, y, z).
            radius: The radius of the sphere.
            color: Surface color as (R, G, B).
            reflection: Mirror reflection weight, nominally in [0, 1].

        Returns:
            The index of the added sphere.

        Raises:
            RuntimeError: If the maximum number of spheres is exceeded.
            ValueError: If validation is on and the sphere is invalid.
        """
        if self.validate:
            center = check_vec3("center", center)
            radius = check_radius(radius)
            color = check_vec3("color", color)
            reflection = check_scalar("reflection", reflection)
        return self._store_sphere(center, radius, color, reflection)

    def _store_sphere(self, center, radius, color, reflection) -> int:
        sphere_index = add_sphere(center, radius, color, reflection)
        self.spheres.append(
            SphereInfo(
                sphere_index=sphere_index,
                center=tuple(center),
                radius=radius,
                color=tuple(color),
                reflection=reflection,
            )
        )
        return sphere_index

    def add_plane(
        self,
        normal: Vec3Tuple,
        d: float,
        color: Vec3Tuple = DEFAULT_COLOR,
        reflection: float = 0.0,
    ) -> int:
        """Add a plane to the scene.

        The normal is stored as given; pass a unit vector.

        Args:
            normal: The plane normal as (x, y, z).
            d: Signed offset of the plane along its normal.
            color: Surface color as (R, G, B).
            reflection: Mirror reflection weight, nominally in [0, 1].

        Returns:
            The index of the added plane.

        Raises:
            RuntimeError: If the maximum number of planes is exceeded.
            ValueError: If validation is on and the plane is invalid.
        """
        if self.validate:
            normal = check_nonzero_vec3("normal", normal)
            d = check_scalar("d", d)
            color = check_vec3("color", color)
            reflection = check_scalar("reflection", reflection)
        return self._store_plane(normal, d, color, reflection)

    def _store_plane(self, normal, d, color, reflection) -> int:
        plane_index = add_plane(normal, d, color, reflection)
        self.planes.append(
            PlaneInfo(
                plane_index=plane_index,
                normal=tuple(normal),
                d=d,
                color=tuple(color),
                reflection=reflection,
            )
        )
        return plane_index

    def add_triangle(
        self,
        v0: Vec3Tuple,
        v1: Vec3Tuple,
        v2: Vec3Tuple,
        color: Vec3Tuple = DEFAULT_COLOR,
        reflection: float = 0.0,
    ) -> int:
        """Add a triangle to the scene.

        The normal follows the vertex winding (right-hand rule) and is not
        flipped toward the viewer.

        Returns:
            The index of the added triangle.

        Raises:
            RuntimeError: If the maximum number of triangles is exceeded.
            ValueError: If validation is on and the triangle is degenerate.
        """
        if self.validate:
            v0, v1, v2 = check_triangle(v0, v1, v2)
            color = check_vec3("color", color)
            reflection = check_scalar("reflection", reflection)
        return self._store_triangle(v0, v1, v2, color, reflection)

    def _store_triangle(self, v0, v1, v2, color, reflection) -> int:
        triangle_index = add_triangle(v0, v1, v2, color, reflection)
        self.triangles.append(
            TriangleInfo(
                triangle_index=triangle_index,
                v0=tuple(v0),
                v1=tuple(v1),
                v2=tuple(v2),
                color=tuple(color),
                reflection=reflection,
            )
        )
        return triangle_index

    def add_light(self, direction: Vec3Tuple) -> int:
        """Add a directional light, given as the direction toward the light.

        Returns:
            The index of the added light.

        Raises:
            RuntimeError: If the maximum number of lights is exceeded.
            ValueError: If validation is on and the direction is zero.
        """
        if self.validate:
            direction = check_nonzero_vec3("direction", direction)
        return self._store_light(direction)

    def _store_light(self, direction) -> int:
        light_index = add_light(direction)
        self.lights.append(tuple(direction))
        return light_index

    # =========================================================================
    # Scene Queries
    # =========================================================================

    def get_sphere_count(self) -> int:
        """Get the number of spheres in the scene."""
        return get_sphere_count()

    def get_plane_count(self) -> int:
        """Get the number of planes in the scene."""
        return get_plane_count()

    def get_triangle_count(self) -> int:
        """Get the number of triangles in the scene."""
        return get_triangle_count()

    def get_light_count(self) -> int:
        """Get the number of lights in the scene."""
        return get_light_count()

    def get_primitive_count(self) -> int:
        """Get the total number of primitives in the scene."""
        return self.get_sphere_count() + self.get_plane_count() + self.get_triangle_count()

    # =========================================================================
    # Scene Serialization
    # =========================================================================

    def to_config(self) -> SceneConfig:
        """Export the scene to a configuration object."""
        config = SceneConfig()

        for sphere in self.spheres:
            config.spheres.append(
                {
                    "center": list(sphere.center),
                    "radius": sphere.radius,
                    "color": list(sphere.color),
                    "reflection": sphere.reflection,
                }
            )

        for plane in self.planes:
            config.planes.append(
                {
                    "normal": list(plane.normal),
                    "d": plane.d,
                    "color": list(plane.color),
                    "reflection": plane.reflection,
                }
            )

        for triangle in self.triangles:
            config.triangles.append(
                {
                    "v0": list(triangle.v0),
                    "v1": list(triangle.v1),
                    "v2": list(triangle.v2),
                    "color": list(triangle.color),
                    "reflection": triangle.reflection,
                }
            )

        config.lights = [list(light) for light in self.lights]
        return config

    def from_config(self, config: SceneConfig) -> None:
        """Load a scene from a configuration object.

        Every entry is parsed and checked before the current scene is
        touched, so a ValueError or RuntimeError leaves it unchanged.
        Missing colors default to white and missing reflection coefficients
        to 0.

        Raises:
            ValueError: If the configuration contains invalid data.
            RuntimeError: If the configuration exceeds a storage capacity.
        """
        spheres = []
        for sphere_config in config.spheres:
            if "center" not in sphere_config or "radius" not in sphere_config:
                raise ValueError(f"Sphere needs 'center' and 'radius': {sphere_config}")
            center = _vec3(sphere_config["center"], (0.0, 0.0, 0.0))
            radius = sphere_config["radius"]
            color = _vec3(sphere_config.get("color"), DEFAULT_COLOR)
            reflection = sphere_config.get("reflection", 0.0)
            if self.validate:
                center = check_vec3("center", center)
                radius = check_radius(radius)
                color = check_vec3("color", color)
                reflection = check_scalar("reflection", reflection)
            spheres.append((center, radius, color, reflection))

        planes = []
        for plane_config in config.planes:
            if "normal" not in plane_config or "d" not in plane_config:
                raise ValueError(f"Plane needs 'normal' and 'd': {plane_config}")
            normal = _vec3(plane_config["normal"], (0.0, 1.0, 0.0))
            d = plane_config["d"]
            color = _vec3(plane_config.get("color"), DEFAULT_COLOR)
            reflection = plane_config.get("reflection", 0.0)
            if self.validate:
                normal = check_nonzero_vec3("normal", normal)
                d = check_scalar("d", d)
                color = check_vec3("color", color)
                reflection = check_scalar("reflection", reflection)
            planes.append((normal, d, color, reflection))

        triangles = []
        for triangle_config in config.triangles:
            missing = [k for k in ("v0", "v1", "v2") if k not in triangle_config]
            if missing:
                raise ValueError(f"Triangle is missing {missing}: {triangle_config}")
            v0 = _vec3(triangle_config["v0"], (0.0, 0.0, 0.0))
            v1 = _vec3(triangle_config["v1"], (0.0, 0.0, 0.0))
            v2 = _vec3(triangle_config["v2"], (0.0, 0.0, 0.0))
            color = _vec3(triangle_config.get("color"), DEFAULT_COLOR)
            reflection = triangle_config.get("reflection", 0.0)
            if self.validate:
                v0, v1, v2 = check_triangle(v0, v1, v2)
                color = check_vec3("color", color)
                reflection = check_scalar("reflection", reflection)
            triangles.append((v0, v1, v2, color, reflection))

        lights = []
        for light in config.lights:
            direction = _vec3(light, (0.0, 0.0, 0.0))
            if self.validate:
                direction = check_nonzero_vec3("direction", direction)
            lights.append(direction)

        for name, entries, limit in (
            ("spheres", spheres, MAX_SPHERES),
            ("planes", planes, MAX_PLANES),
            ("triangles", triangles, MAX_TRIANGLES),
            ("lights", lights, MAX_LIGHTS),
        ):
            if len(entries) > limit:
                raise RuntimeError(f"Maximum number of {name} ({limit}) exceeded")

        self.clear()

        for args in spheres:
            self._store_sphere(*args)
        for args in planes:
            self._store_plane(*args)
        for args in triangles:
            self._store_triangle(*args)
        for direction in lights:
            self._store_light(direction)

    def to_dict(self) -> dict[str, Any]:
        """Export the scene to a dictionary (for JSON serialization)."""
        config = self.to_config()
        return {
            "spheres": config.spheres,
            "planes": config.planes,
            "triangles": config.triangles,
            "lights": config.lights,
        }

    def from_dict(self, data: dict[str, Any]) -> None:
        """Load a scene from a dictionary.

        Args:
            data: Dictionary with 'spheres', 'planes', 'triangles' and
                'lights' keys (all optional).
        """
        config = SceneConfig(
            spheres=data.get("spheres", []),
            planes=data.get("planes", []),
            triangles=data.get("triangles", []),
            lights=data.get("lights", []),
        )
        self.from_config(config)

    def save_json(self, filepath: str | Path) -> None:
        """Write the scene to a JSON file."""
        Path(filepath).write_text(json.dumps(self.to_dict(), indent=2))

    def load_json(self, filepath: str | Path) -> None:
        """Replace the scene with the contents of a JSON file.

        Raises:
            ValueError: If the file is not valid JSON or describes an
                invalid scene.
        """
        try:
            data = json.loads(Path(filepath).read_text())
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid scene file {filepath}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Scene file {filepath} must contain a JSON object")
        self.from_dict(data)

    # =========================================================================
    # Capacity Information
    # =========================================================================

    @staticmethod
    def get_max_spheres() -> int:
        """Get the maximum number of spheres supported."""
        return MAX_SPHERES

    @staticmethod
    def get_max_planes() -> int:
        """Get the maximum number of planes supported."""
        return MAX_PLANES

    @staticmethod
    def get_max_triangles() -> int:
        """Get the maximum number of triangles supported."""
        return MAX_TRIANGLES

    @staticmethod
    def get_max_lights() -> int:
        """Get the maximum number of lights supported."""
        return MAX_LIGHTS
