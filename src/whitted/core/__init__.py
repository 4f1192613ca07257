"""Core rendering module.

This module contains the fundamental building blocks of the tracer:

Components:
    vector: Ray data structure and vector algebra
    tracer: Recursive mirror shading (trace_ray) and its configuration
    renderer: Render target, per-pixel kernel and image readback

All compute-intensive operations use Taichi kernels.
"""

from .vector import (
    Ray,
    add,
    cross,
    dot,
    length,
    make_ray,
    normalize,
    ray_at,
    reflect,
    scale,
    sub,
    vec3,
)

# Note: tracer and renderer are NOT imported here. They declare Taichi fields
# at import time, which must happen after ti.init(). Import them directly:
#   from whitted.core.tracer import trace_ray, configure_tracer
#   from whitted.core.renderer import Renderer

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "add",
    "sub",
    "scale",
    "dot",
    "cross",
    "length",
    "normalize",
    "reflect",
]
