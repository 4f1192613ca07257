"""Geometry module for shape primitives.

This module provides the primitives the tracer understands and their
intersection tests:

Components:
    sphere: Sphere primitive and the shared PrimitiveHit record
    plane: Infinite plane given by normal and offset
    triangle: Triangle primitive (Moller-Trumbore test)

All intersection routines are Taichi functions (@ti.func). They take the
ray origin, the ray direction and the primitive, and follow the pattern:
    rec = hit_shape(ray_origin, ray_direction, shape)
    if rec.hit == 1: ... rec.t, rec.normal ...
"""

from .plane import Plane, hit_plane, make_plane
from .sphere import PrimitiveHit, Sphere, hit_sphere, make_miss, make_sphere
from .triangle import Triangle, hit_triangle, make_triangle, triangle_normal

__all__ = [
    "PrimitiveHit",
    "make_miss",
    "Sphere",
    "hit_sphere",
    "make_sphere",
    "Plane",
    "hit_plane",
    "make_plane",
    "Triangle",
    "hit_triangle",
    "make_triangle",
    "triangle_normal",
]
