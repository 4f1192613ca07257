"""Scene storage and nearest-hit selection.

This module stores the scene primitives and light directions in Taichi
fields and provides ``intersect_scene``, which tests a ray against every
primitive and keeps the closest hit together with its surface color and
reflection coefficient.

The scan order is fixed: all spheres, then all planes, then all triangles.
A primitive replaces the current hit only when its t is strictly smaller,
so on an exact tie the primitive tested first wins (spheres over planes
over triangles, lower index within a category).

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from whitted.scene.intersection import (
    ...     add_sphere, add_plane, clear_scene, query_nearest_hit
    ... )
    >>> clear_scene()
    >>> add_sphere((0, 0, -1), 0.5, color=(1, 0, 0), reflection=0.0)
    >>> add_plane((0, 1, 0), -0.5, color=(0.1, 0.1, 0.1), reflection=0.1)
    >>> hit = query_nearest_hit((0, 0, 0), (0, 0, -1))
"""

from dataclasses import dataclass

import taichi as ti

from whitted.core.vector import make_ray, ray_at, vec3
from whitted.geometry.plane import Plane, hit_plane
from whitted.geometry.sphere import Sphere, hit_sphere
from whitted.geometry.triangle import Triangle, hit_triangle

Vec3Tuple = tuple[float, float, float]


@ti.dataclass
class SceneHitRecord:
    """Record of the nearest ray-scene intersection.

    Attributes:
        hit: Whether the ray intersected any primitive (1 if hit, 0 if miss).
        t: Ray parameter of the nearest intersection. Only valid if hit == 1.
        point: origin + t * direction. Only valid if hit == 1.
        normal: Surface normal reported by the primitive test. Not
            oriented toward the ray. Only valid if hit == 1.
        color: Color of the hit primitive.
        reflection: Reflection coefficient of the hit primitive.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    color: vec3
    reflection: ti.f32


# Maximum number of primitives and lights supported in the scene
MAX_SPHERES = 1024
MAX_PLANES = 256
MAX_TRIANGLES = 4096
MAX_LIGHTS = 64

# Initial closest distance (largest finite f32)
T_INFINITY = 3.4028234e38

# Sphere storage: Structure of Arrays layout
sphere_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
sphere_colors = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_reflections = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())

# Plane storage
plane_normals = ti.Vector.field(3, dtype=ti.f32, shape=MAX_PLANES)
plane_offsets = ti.field(dtype=ti.f32, shape=MAX_PLANES)
plane_colors = ti.Vector.field(3, dtype=ti.f32, shape=MAX_PLANES)
plane_reflections = ti.field(dtype=ti.f32, shape=MAX_PLANES)
num_planes = ti.field(dtype=ti.i32, shape=())

# Triangle storage
triangle_v0 = ti.Vector.field(3, dtype=ti.f32, shape=MAX_TRIANGLES)
triangle_v1 = ti.Vector.field(3, dtype=ti.f32, shape=MAX_TRIANGLES)
triangle_v2 = ti.Vector.field(3, dtype=ti.f32, shape=MAX_TRIANGLES)
triangle_colors = ti.Vector.field(3, dtype=ti.f32, shape=MAX_TRIANGLES)
triangle_reflections = ti.field(dtype=ti.f32, shape=MAX_TRIANGLES)
num_triangles = ti.field(dtype=ti.i32, shape=())

# Directional lights (direction toward the light, not normalized here)
light_directions = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LIGHTS)
num_lights = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Clear all primitives and lights from the scene.

    Resets the counts to zero. The field data is overwritten when new
    primitives are added.
    """
    num_spheres[None] = 0
    num_planes[None] = 0
    num_triangles[None] = 0
    num_lights[None] = 0


def add_sphere(
    center: Vec3Tuple,
    radius: float,
    color: Vec3Tuple = (1.0, 1.0, 1.0),
    reflection: float = 0.0,
) -> int:
    """Add a sphere to the scene.

    No validation is done here; see SceneManager for checked construction.

    Returns:
        The index of the added sphere.

    Raises:
        RuntimeError: If the maximum number of spheres is exceeded.
    """
    idx = num_spheres[None]
    if idx >= MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")
    sphere_centers[idx] = list(center)
    sphere_radii[idx] = radius
    sphere_colors[idx] = list(color)
    sphere_reflections[idx] = reflection
    num_spheres[None] = idx + 1
    return idx


def add_plane(
    normal: Vec3Tuple,
    d: float,
    color: Vec3Tuple = (1.0, 1.0, 1.0),
    reflection: float = 0.0,
) -> int:
    """Add a plane (unit normal and signed offset) to the scene.

    Returns:
        The index of the added plane.

    Raises:
        RuntimeError: If the maximum number of planes is exceeded.
    """
    idx = num_planes[None]
    if idx >= MAX_PLANES:
        raise RuntimeError(f"Maximum number of planes ({MAX_PLANES}) exceeded")
    plane_normals[idx] = list(normal)
    plane_offsets[idx] = d
    plane_colors[idx] = list(color)
    plane_reflections[idx] = reflection
    num_planes[None] = idx + 1
    return idx


def add_triangle(
    v0: Vec3Tuple,
    v1: Vec3Tuple,
    v2: Vec3Tuple,
    color: Vec3Tuple = (1.0, 1.0, 1.0),
    reflection: float = 0.0,
) -> int:
    """Add a triangle to the scene.

    The vertex order fixes the normal direction (right-hand rule).

    Returns:
        The index of the added triangle.

    Raises:
        RuntimeError: If the maximum number of triangles is exceeded.
    """
    idx = num_triangles[None]
    if idx >= MAX_TRIANGLES:
        raise RuntimeError(f"Maximum number of triangles ({MAX_TRIANGLES}) exceeded")
    triangle_v0[idx] = list(v0)
    triangle_v1[idx] = list(v1)
    triangle_v2[idx] = list(v2)
    triangle_colors[idx] = list(color)
    triangle_reflections[idx] = reflection
    num_triangles[None] = idx + 1
    return idx


def add_light(direction: Vec3Tuple) -> int:
    """Add a directional light to the scene.

    The direction points from the surface toward the light and is used as
    given in the diffuse term max(normal . direction, 0).

    Returns:
        The index of the added light.

    Raises:
        RuntimeError: If the maximum number of lights is exceeded.
    """
    idx = num_lights[None]
    if idx >= MAX_LIGHTS:
        raise RuntimeError(f"Maximum number of lights ({MAX_LIGHTS}) exceeded")
    light_directions[idx] = list(direction)
    num_lights[None] = idx + 1
    return idx


def get_sphere_count() -> int:
    """Get the number of spheres in the scene."""
    return int(num_spheres[None])


def get_plane_count() -> int:
    """Get the number of planes in the scene."""
    return int(num_planes[None])


def get_triangle_count() -> int:
    """Get the number of triangles in the scene."""
    return int(num_triangles[None])


def get_light_count() -> int:
    """Get the number of lights in the scene."""
    return int(num_lights[None])


@ti.func
def _make_miss_record() -> SceneHitRecord:
    """Create a SceneHitRecord indicating no intersection."""
    return SceneHitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        color=vec3(0.0, 0.0, 0.0),
        reflection=0.0,
    )


@ti.func
def intersect_scene(ray_origin: vec3, ray_direction: vec3) -> SceneHitRecord:
    """Find the nearest primitive hit along a ray.

    Iterates through all spheres, planes and triangles, keeping the hit
    with the smallest t. Each primitive test applies its own acceptance
    rule (t >= 0 for spheres and planes, t > 1e-6 for triangles).

    Must not be called from the outermost loop scope of a kernel: the
    category loops have to run serially.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray.

    Returns:
        A SceneHitRecord for the nearest intersection, or a miss record.
    """
    ray = make_ray(ray_origin, ray_direction)
    closest_t = T_INFINITY
    result = _make_miss_record()

    for i in range(num_spheres[None]):
        sphere = Sphere(
            center=sphere_centers[i],
            radius=sphere_radii[i],
            color=sphere_colors[i],
            reflection=sphere_reflections[i],
        )
        rec = hit_sphere(ray_origin, ray_direction, sphere)
        if rec.hit == 1 and rec.t < closest_t:
            closest_t = rec.t
            result = SceneHitRecord(
                hit=1,
                t=rec.t,
                point=ray_at(ray, rec.t),
                normal=rec.normal,
                color=sphere.color,
                reflection=sphere.reflection,
            )

    for i in range(num_planes[None]):
        plane = Plane(
            normal=plane_normals[i],
            d=plane_offsets[i],
            color=plane_colors[i],
            reflection=plane_reflections[i],
        )
        rec = hit_plane(ray_origin, ray_direction, plane)
        if rec.hit == 1 and rec.t < closest_t:
            closest_t = rec.t
            result = SceneHitRecord(
                hit=1,
                t=rec.t,
                point=ray_at(ray, rec.t),
                normal=rec.normal,
                color=plane.color,
                reflection=plane.reflection,
            )

    for i in range(num_triangles[None]):
        triangle = Triangle(
            v0=triangle_v0[i],
            v1=triangle_v1[i],
            v2=triangle_v2[i],
            color=triangle_colors[i],
            reflection=triangle_reflections[i],
        )
        rec = hit_triangle(ray_origin, ray_direction, triangle)
        if rec.hit == 1 and rec.t < closest_t:
            closest_t = rec.t
            result = SceneHitRecord(
                hit=1,
                t=rec.t,
                point=ray_at(ray, rec.t),
                normal=rec.normal,
                color=triangle.color,
                reflection=triangle.reflection,
            )

    return result


# =============================================================================
# Python-side Query (testing and debugging)
# =============================================================================


@dataclass
class NearestHit:
    """Python-side copy of a SceneHitRecord for a hit.

    Attributes:
        t: Ray parameter of the nearest intersection.
        point: The intersection point.
        normal: The surface normal at the intersection.
        color: Color of the hit primitive.
        reflection: Reflection coefficient of the hit primitive.
    """

    t: float
    point: Vec3Tuple
    normal: Vec3Tuple
    color: Vec3Tuple
    reflection: float


_query_hit = ti.field(dtype=ti.i32, shape=())
_query_t = ti.field(dtype=ti.f32, shape=())
_query_point = ti.Vector.field(3, dtype=ti.f32, shape=())
_query_normal = ti.Vector.field(3, dtype=ti.f32, shape=())
_query_color = ti.Vector.field(3, dtype=ti.f32, shape=())
_query_reflection = ti.field(dtype=ti.f32, shape=())


@ti.kernel
def _query_kernel(ox: ti.f32, oy: ti.f32, oz: ti.f32, dx: ti.f32, dy: ti.f32, dz: ti.f32):
    # Single-iteration outer loop keeps the primitive scans serial
    for _ in range(1):
        rec = intersect_scene(vec3(ox, oy, oz), vec3(dx, dy, dz))
        _query_hit[None] = rec.hit
        _query_t[None] = rec.t
        _query_point[None] = rec.point
        _query_normal[None] = rec.normal
        _query_color[None] = rec.color
        _query_reflection[None] = rec.reflection


def _to_tuple(v) -> Vec3Tuple:
    return (float(v[0]), float(v[1]), float(v[2]))


def query_nearest_hit(origin: Vec3Tuple, direction: Vec3Tuple) -> NearestHit | None:
    """Run nearest-hit selection for one ray from Python.

    Args:
        origin: Ray origin (x, y, z).
        direction: Ray direction (x, y, z), used as given.

    Returns:
        A NearestHit, or None if the ray hits nothing.
    """
    _query_kernel(
        origin[0], origin[1], origin[2], direction[0], direction[1], direction[2]
    )
    if _query_hit[None] == 0:
        return None
    return NearestHit(
        t=float(_query_t[None]),
        point=_to_tuple(_query_point[None]),
        normal=_to_tuple(_query_normal[None]),
        color=_to_tuple(_query_color[None]),
        reflection=float(_query_reflection[None]),
    )
