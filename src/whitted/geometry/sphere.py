"""Sphere primitive with ray-sphere intersection.

This module provides the Sphere dataclass, the PrimitiveHit record shared
by all primitive tests, and the sphere intersection function.

The test solves the textbook quadratic (full ``b``, not the half-b form):

    a = D . D
    b = 2 (O - C) . D
    c = (O - C) . (O - C) - r^2

and reports only the smaller root. A ray whose origin lies inside the
sphere therefore reports no hit, because the smaller root is negative even
though the larger one is positive. A ray leaving the surface it starts on
has ``c`` close to 0 and ``b > 0``, so its smaller root ``(-b - sqrt(disc)) / 2a``
is negative and it does not re-hit that sphere.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from whitted.geometry.sphere import Sphere, hit_sphere, vec3
    >>> sphere = Sphere(
    ...     center=vec3(0, 0, -1), radius=0.5, color=vec3(1, 0, 0), reflection=0.0
    ... )
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti

from whitted.core.vector import add, dot, normalize, scale, sub, vec3


@ti.dataclass
class Sphere:
    """A sphere with a flat color and a mirror reflection coefficient.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere (positive float).
        color: Surface color (vec3). Channels are nominally in [0, 1]
            but are not clamped.
        reflection: Mirror reflection weight, nominally in [0, 1].
    """

    center: vec3
    radius: ti.f32
    color: vec3
    reflection: ti.f32


@ti.dataclass
class PrimitiveHit:
    """Result of a single ray-primitive intersection test.

    Attributes:
        hit: 1 if the ray hit the primitive, 0 otherwise.
        t: The ray parameter of the intersection. Only valid if hit == 1.
        normal: Surface normal at the intersection. Only valid if hit == 1.
        u: First barycentric coordinate (triangles only, 0 otherwise).
        v: Second barycentric coordinate (triangles only, 0 otherwise).
    """

    hit: ti.i32
    t: ti.f32
    normal: vec3
    u: ti.f32
    v: ti.f32


@ti.func
def make_miss() -> PrimitiveHit:
    """Create a PrimitiveHit indicating no intersection."""
    return PrimitiveHit(hit=0, t=0.0, normal=vec3(0.0, 0.0, 0.0), u=0.0, v=0.0)


@ti.func
def hit_sphere(ray_origin: vec3, ray_direction: vec3, sphere: Sphere) -> PrimitiveHit:
    """Test for ray-sphere intersection.

    A hit requires a strictly positive discriminant (tangent rays miss) and
    a nonnegative smaller root.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction of the ray. Not required to be unit
            length, but t is only a distance when it is.
        sphere: The sphere to test against.

    Returns:
        A PrimitiveHit. On a hit, normal is the outward unit normal at
        ray_origin + t * ray_direction.
    """
    oc = sub(ray_origin, sphere.center)
    a = dot(ray_direction, ray_direction)
    b = 2.0 * dot(oc, ray_direction)
    c = dot(oc, oc) - sphere.radius * sphere.radius
    discriminant = b * b - 4.0 * a * c

    result = make_miss()

    if discriminant > 0.0:
        sqrt_d = ti.sqrt(discriminant)
        t0 = (-b - sqrt_d) / (2.0 * a)
        t1 = (-b + sqrt_d) / (2.0 * a)
        t = ti.min(t0, t1)

        if t >= 0.0:
            hit_point = add(ray_origin, scale(ray_direction, t))
            result = PrimitiveHit(
                hit=1,
                t=t,
                normal=normalize(sub(hit_point, sphere.center)),
                u=0.0,
                v=0.0,
            )

    return result


@ti.func
def make_sphere(center: vec3, radius: ti.f32, color: vec3, reflection: ti.f32) -> Sphere:
    """Create a sphere within a Taichi kernel."""
    return Sphere(center=center, radius=radius, color=color, reflection=reflection)
