"""Recursive mirror shading (Whitted-style) for one ray.

For a ray at recursion level ``depth`` the color is

    C(depth) = background                         if depth >= max_depth
    C(depth) = background                         if nothing is hit
    C(depth) = color * shade * (1 - r)
               + C(depth + 1) * r
               + ambient                          otherwise

where ``shade`` is the sum over directional lights of max(n . l, 0), ``r``
is the reflection coefficient of the hit surface, and C(depth + 1) is
traced from the hit point along the mirror direction. No shadow rays are
cast and the result is not clamped. The ambient term is added once per
level regardless of r.

Taichi functions cannot call themselves, so ``trace_ray`` evaluates the
recursion as a loop. Expanding the recurrence gives

    C(depth) = sum_k w_k * (color_k * shade_k * (1 - r_k) + ambient)
               + w_last * background,      w_0 = 1, w_{k+1} = w_k * r_k

which is what the loop accumulates, with ``weight`` playing the part of
w_k. A ray that reaches max_depth is given the background color even if
it would have hit geometry.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from whitted.core.tracer import TracerConfig, configure_tracer, trace_single_ray
    >>> configure_tracer(TracerConfig(max_depth=4))
    >>> color = trace_single_ray((0, 0, 0), (0, 0, -1))
"""

from dataclasses import dataclass

import taichi as ti

from whitted.core.vector import dot, normalize, reflect, vec3
from whitted.scene.intersection import intersect_scene, light_directions, num_lights

Vec3Tuple = tuple[float, float, float]

# =============================================================================
# Tracer Constants
# =============================================================================

# Recursion levels before a ray is given the background color
MAX_RECURSION_DEPTH = 10

# Sky color returned for misses and for rays at the depth limit
BACKGROUND_COLOR = (0.0, 0.0, 0.3)

# Constant term added to every shaded hit
AMBIENT_LIGHT = (0.1, 0.1, 0.1)


@dataclass
class TracerConfig:
    """Shading parameters for trace_ray.

    Attributes:
        max_depth: Recursion level at which rays stop and return the
            background color. 0 makes every ray return the background.
        background_color: RGB color for misses and depth-limited rays.
        ambient_light: RGB term added to every shaded hit.
    """

    max_depth: int = MAX_RECURSION_DEPTH
    background_color: Vec3Tuple = BACKGROUND_COLOR
    ambient_light: Vec3Tuple = AMBIENT_LIGHT

    def __post_init__(self) -> None:
        if isinstance(self.max_depth, bool) or not isinstance(self.max_depth, int):
            raise ValueError(f"max_depth must be an integer, got {self.max_depth!r}")
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be non-negative, got {self.max_depth}")
        for name in ("background_color", "ambient_light"):
            value = getattr(self, name)
            if len(value) != 3:
                raise ValueError(f"{name} must have 3 components, got {len(value)}")
            setattr(self, name, tuple(float(c) for c in value))


# Taichi-side copies of the active configuration
_max_depth = ti.field(dtype=ti.i32, shape=())
_background_color = ti.Vector.field(3, dtype=ti.f32, shape=())
_ambient_light = ti.Vector.field(3, dtype=ti.f32, shape=())

# Last configuration written, for reading back from Python
_active_config = TracerConfig()


def configure_tracer(config: TracerConfig) -> None:
    """Make config the active shading configuration.

    Must be called from Python, between kernel launches.
    """
    global _active_config
    _max_depth[None] = config.max_depth
    _background_color[None] = list(config.background_color)
    _ambient_light[None] = list(config.ambient_light)
    _active_config = config


def reset_tracer_config() -> None:
    """Restore the default shading configuration."""
    configure_tracer(TracerConfig())


def get_tracer_config() -> TracerConfig:
    """Get the active shading configuration."""
    return _active_config


configure_tracer(_active_config)


# =============================================================================
# Shading
# =============================================================================


@ti.func
def diffuse_shade(normal: vec3) -> ti.f32:
    """Sum of max(normal . light, 0) over all directional lights.

    Lights are directions, so there is no distance falloff, and no shadow
    test is made.
    """
    shade = 0.0
    for i in range(num_lights[None]):
        shade += ti.max(dot(normal, light_directions[i]), 0.0)
    return shade


@ti.func
def trace_ray(ray_origin: vec3, ray_direction: vec3, depth: ti.i32) -> vec3:
    """Trace a ray through the scene with mirror reflections.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The ray direction (unit length for camera rays).
        depth: Recursion level of this ray; 0 for camera rays.

    Returns:
        The unclamped RGB color seen along the ray.
    """
    max_depth = _max_depth[None]
    background = _background_color[None]
    ambient = _ambient_light[None]

    color = vec3(0.0, 0.0, 0.0)
    # Product of the reflection coefficients of all enclosing levels
    weight = 1.0
    origin = ray_origin
    direction = ray_direction
    level = depth
    active = 1

    while active == 1:
        if level >= max_depth:
            color += weight * background
            active = 0
        else:
            rec = intersect_scene(origin, direction)
            if rec.hit == 0:
                color += weight * background
                active = 0
            else:
                shade = diffuse_shade(rec.normal)
                direct = rec.color * shade * (1.0 - rec.reflection)
                color += weight * (direct + ambient)

                weight *= rec.reflection
                origin = rec.point
                direction = normalize(reflect(direction, rec.normal))
                level += 1

    return color


# =============================================================================
# Python-callable Evaluation
# =============================================================================

_trace_result = ti.Vector.field(3, dtype=ti.f32, shape=())


@ti.kernel
def _trace_kernel(
    ox: ti.f32, oy: ti.f32, oz: ti.f32, dx: ti.f32, dy: ti.f32, dz: ti.f32, depth: ti.i32
):
    # Single-iteration outer loop keeps the scene scans serial
    for _ in range(1):
        _trace_result[None] = trace_ray(vec3(ox, oy, oz), vec3(dx, dy, dz), depth)


def trace_single_ray(
    origin: Vec3Tuple,
    direction: Vec3Tuple,
    depth: int = 0,
) -> tuple[float, float, float]:
    """Trace one ray from Python and return its color.

    For production rendering use the renderer, which traces all pixels in
    one kernel launch.

    Args:
        origin: Ray origin (x, y, z).
        direction: Ray direction (x, y, z), used as given.
        depth: Starting recursion level.

    Returns:
        Tuple of (R, G, B), unclamped.
    """
    _trace_kernel(
        origin[0], origin[1], origin[2], direction[0], direction[1], direction[2], depth
    )
    color = _trace_result[None]
    return (float(color[0]), float(color[1]), float(color[2]))
