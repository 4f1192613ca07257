"""Triangle primitive with Moller-Trumbore intersection.

The triangle stores its three vertices; the normal is derived on each hit
as ``normalize((v1 - v0) x (v2 - v0))``. It follows the vertex winding and
is NOT flipped to face the incoming ray, so a triangle wound clockwise as
seen from the camera has a normal pointing away from the viewer and gets
no diffuse light from lights on the viewer's side. Scenes must wind
triangles counter-clockwise toward the lights they should receive.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from whitted.geometry.triangle import Triangle, hit_triangle, vec3
    >>> tri = Triangle(
    ...     v0=vec3(0, 0, -1), v1=vec3(1, 0, -1), v2=vec3(0, 1, -1),
    ...     color=vec3(1, 0, 1), reflection=0.0,
    ... )
    >>> # Use hit_triangle within a Taichi kernel
"""

import taichi as ti

from whitted.core.vector import cross, dot, normalize, sub, vec3

from .sphere import PrimitiveHit, make_miss

# Determinant band treated as "ray parallel to the triangle plane", and the
# smallest accepted t (rejects self-hits at the ray origin).
TRIANGLE_EPSILON = 1e-6


@ti.dataclass
class Triangle:
    """A triangle with a flat color and reflection coefficient.

    Attributes:
        v0: First vertex (vec3).
        v1: Second vertex (vec3).
        v2: Third vertex (vec3).
        color: Surface color (vec3).
        reflection: Mirror reflection weight, nominally in [0, 1].
    """

    v0: vec3
    v1: vec3
    v2: vec3
    color: vec3
    reflection: ti.f32


@ti.func
def hit_triangle(ray_origin: vec3, ray_direction: vec3, triangle: Triangle) -> PrimitiveHit:
    """Test for ray-triangle intersection (Moller-Trumbore).

    Solves ``O + tD = (1 - u - v) v0 + u v1 + v v2`` with Cramer's rule.
    The hit is rejected when the determinant lies in the parallel band,
    when the barycentrics fall outside the triangle, or when
    t <= TRIANGLE_EPSILON.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction of the ray.
        triangle: The triangle to test against.

    Returns:
        A PrimitiveHit carrying t, the winding normal and the barycentric
        coordinates (u, v) of the hit point.
    """
    edge1 = sub(triangle.v1, triangle.v0)
    edge2 = sub(triangle.v2, triangle.v0)
    h = cross(ray_direction, edge2)
    a = dot(edge1, h)

    result = make_miss()

    # Taichi funcs need a single exit, so the rejections nest.
    if a <= -TRIANGLE_EPSILON or a >= TRIANGLE_EPSILON:
        f = 1.0 / a
        s = sub(ray_origin, triangle.v0)
        u = f * dot(s, h)
        if u >= 0.0 and u <= 1.0:
            q = cross(s, edge1)
            v = f * dot(ray_direction, q)
            if v >= 0.0 and u + v <= 1.0:
                t = f * dot(edge2, q)
                if t > TRIANGLE_EPSILON:
                    result = PrimitiveHit(
                        hit=1,
                        t=t,
                        normal=normalize(cross(edge1, edge2)),
                        u=u,
                        v=v,
                    )

    return result


@ti.func
def triangle_normal(triangle: Triangle) -> vec3:
    """Winding normal of a triangle: normalize((v1 - v0) x (v2 - v0))."""
    return normalize(cross(sub(triangle.v1, triangle.v0), sub(triangle.v2, triangle.v0)))


@ti.func
def make_triangle(v0: vec3, v1: vec3, v2: vec3, color: vec3, reflection: ti.f32) -> Triangle:
    """Create a triangle within a Taichi kernel."""
    return Triangle(v0=v0, v1=v1, v2=v2, color=color, reflection=reflection)
