"""Infinite plane primitive.

A plane is stored as a unit normal ``n`` and a signed offset ``d``; the
point ``n * d`` is taken to lie on the plane. The intersection solves

    t = ((n * d) . n) / (n . D)

which does not involve the ray origin. It is only the true ray-plane
distance for rays leaving the world origin; the general form is
``(p - O) . n / (n . D)``. Scenes are authored against the restricted form.

The normal is used as given. It is not renormalized, so a non-unit normal
also scales t and the diffuse term.
"""

import taichi as ti

from whitted.core.vector import dot, scale, vec3

from .sphere import PrimitiveHit, make_miss

# Rays with |n . D| at or below this are treated as parallel to the plane.
PARALLEL_EPSILON = 1e-6


@ti.dataclass
class Plane:
    """An infinite plane with a flat color and reflection coefficient.

    Attributes:
        normal: Unit normal of the plane (vec3).
        d: Signed offset along the normal.
        color: Surface color (vec3).
        reflection: Mirror reflection weight, nominally in [0, 1].
    """

    normal: vec3
    d: ti.f32
    color: vec3
    reflection: ti.f32


@ti.func
def hit_plane(ray_origin: vec3, ray_direction: vec3, plane: Plane) -> PrimitiveHit:
    """Test for ray-plane intersection.

    Args:
        ray_origin: The starting point of the ray (unused by the formula,
            kept for a uniform primitive-test signature).
        ray_direction: The direction of the ray.
        plane: The plane to test against.

    Returns:
        A PrimitiveHit whose normal is the plane's stored normal.
        Parallel rays and negative t report a miss.
    """
    denom = dot(plane.normal, ray_direction)
    result = make_miss()

    if ti.abs(denom) > PARALLEL_EPSILON:
        p0 = scale(plane.normal, plane.d)
        t = dot(p0, plane.normal) / denom
        if t >= 0.0:
            result = PrimitiveHit(hit=1, t=t, normal=plane.normal, u=0.0, v=0.0)

    return result


@ti.func
def make_plane(normal: vec3, d: ti.f32, color: vec3, reflection: ti.f32) -> Plane:
    """Create a plane within a Taichi kernel."""
    return Plane(normal=normal, d=d, color=color, reflection=reflection)
