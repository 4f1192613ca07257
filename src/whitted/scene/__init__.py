"""Scene module for scene storage, construction and hit queries.

Components:
    intersection: Taichi-field scene storage and nearest-hit selection
    validation: Geometry checks applied at scene construction
    manager: SceneManager for building and (de)serializing scenes
    demo: The built-in demo scene

Scene data is kept in Structure-of-Arrays Taichi fields, one set per
primitive category, plus a field of directional lights.
"""

from .intersection import (
    MAX_LIGHTS,
    MAX_PLANES,
    MAX_SPHERES,
    MAX_TRIANGLES,
    NearestHit,
    SceneHitRecord,
    add_light,
    add_plane,
    add_sphere,
    add_triangle,
    clear_scene,
    get_light_count,
    get_plane_count,
    get_sphere_count,
    get_triangle_count,
    intersect_scene,
    query_nearest_hit,
)
from .manager import PlaneInfo, SceneConfig, SceneManager, SphereInfo, TriangleInfo
from .demo import create_demo_camera, create_demo_scene

__all__ = [
    # Intersection module
    "SceneHitRecord",
    "NearestHit",
    "add_sphere",
    "add_plane",
    "add_triangle",
    "add_light",
    "clear_scene",
    "get_sphere_count",
    "get_plane_count",
    "get_triangle_count",
    "get_light_count",
    "intersect_scene",
    "query_nearest_hit",
    "MAX_SPHERES",
    "MAX_PLANES",
    "MAX_TRIANGLES",
    "MAX_LIGHTS",
    # Manager module
    "SceneManager",
    "SceneConfig",
    "SphereInfo",
    "PlaneInfo",
    "TriangleInfo",
    # Demo scene
    "create_demo_scene",
    "create_demo_camera",
]
