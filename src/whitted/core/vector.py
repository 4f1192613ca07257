"""Ray data structure and vector algebra for the Whitted tracer.

This module provides the Ray dataclass and the small set of vector
operations the intersection tests and the shading loop are written in.
All operations are Taichi functions and are meant to be called from
inside Taichi kernels.

The operations are pure. ``normalize`` has a precondition: the input
must not be the zero vector. A zero vector produces NaN components,
which then propagate silently through any arithmetic that uses them.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> origin = ti.math.vec3(0.0, 0.0, 0.0)
    >>> direction = ti.math.vec3(0.0, 0.0, -1.0)
    >>> ray = Ray(origin=origin, direction=direction)
    >>> point = ray_at(ray, 0.5)  # Point half a unit along the ray
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction vector of the ray (vec3). Camera rays are
            unit length; intersection tests do not renormalize it.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Compute the point along the ray at parameter t."""
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction."""
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Vector Algebra
# =============================================================================


@ti.func
def add(a: vec3, b: vec3) -> vec3:
    """Component-wise sum a + b."""
    return a + b


@ti.func
def sub(a: vec3, b: vec3) -> vec3:
    """Component-wise difference a - b."""
    return a - b


@ti.func
def scale(v: vec3, s: ti.f32) -> vec3:
    """Multiply every component of v by the scalar s."""
    return v * s


@ti.func
def dot(a: vec3, b: vec3) -> ti.f32:
    """Compute the dot product of two vectors."""
    return a.x * b.x + a.y * b.y + a.z * b.z


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    """Compute the cross product a x b (right-handed)."""
    return vec3(
        a.y * b.z - a.z * b.y,
        a.z * b.x - a.x * b.z,
        a.x * b.y - a.y * b.x,
    )


@ti.func
def length(v: vec3) -> ti.f32:
    """Compute the Euclidean length of a vector."""
    return ti.sqrt(dot(v, v))


@ti.func
def normalize(v: vec3) -> vec3:
    """Scale a vector to unit length.

    Unlike ``tm.normalize`` this does not guard against zero-length input:
    the reciprocal of a zero magnitude is infinite and the result is NaN.
    Callers must not pass a zero vector.

    Args:
        v: The input vector (non-zero).

    Returns:
        A unit vector in the same direction as v.
    """
    inv_mag = 1.0 / length(v)
    return scale(v, inv_mag)


@ti.func
def reflect(direction: vec3, normal: vec3) -> vec3:
    """Mirror a direction about a surface normal.

    Computes ``direction - normal * 2 * (direction . normal)``. The normal
    should be unit length; the result is not renormalized.

    Args:
        direction: The incoming direction (pointing toward the surface).
        normal: The surface normal.

    Returns:
        The mirrored direction.
    """
    return sub(direction, scale(normal, 2.0 * dot(direction, normal)))
