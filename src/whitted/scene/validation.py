"""Scene construction checks.

The intersection and shading code does not check its inputs: a
zero-radius sphere or a collapsed triangle simply produces NaN or Inf
that flows through the arithmetic. These checks catch such geometry at
scene construction time instead, before it reaches the Taichi fields.

Every function raises ValueError with a message naming the offending
value and returns the input converted to plain floats.
"""

import math
from collections.abc import Sequence

Vec3Tuple = tuple[float, float, float]

# Squared cross-product length below which a triangle counts as degenerate
MIN_TRIANGLE_AREA_SQ = 1e-18


def check_vec3(name: str, value: Sequence[float]) -> Vec3Tuple:
    """Check that value has three finite components."""
    if len(value) != 3:
        raise ValueError(f"{name} must have 3 components, got {len(value)}")
    result = (float(value[0]), float(value[1]), float(value[2]))
    if not all(math.isfinite(c) for c in result):
        raise ValueError(f"{name} must be finite, got {result}")
    return result


def check_nonzero_vec3(name: str, value: Sequence[float]) -> Vec3Tuple:
    """Check that value is a finite, non-zero vector."""
    result = check_vec3(name, value)
    if result == (0.0, 0.0, 0.0):
        raise ValueError(f"{name} must not be the zero vector")
    return result


def check_scalar(name: str, value: float) -> float:
    """Check that value is a finite number."""
    result = float(value)
    if not math.isfinite(result):
        raise ValueError(f"{name} must be finite, got {value}")
    return result


def check_radius(radius: float) -> float:
    """Check that a sphere radius is finite and positive."""
    result = check_scalar("radius", radius)
    if result <= 0.0:
        raise ValueError(f"radius must be positive, got {radius}")
    return result


def check_triangle(v0: Sequence[float], v1: Sequence[float], v2: Sequence[float]):
    """Check that three vertices span a triangle with non-zero area.

    Returns:
        The three vertices as float tuples.
    """
    a = check_vec3("v0", v0)
    b = check_vec3("v1", v1)
    c = check_vec3("v2", v2)

    e1 = (b[0] - a[0], b[1] - a[1], b[2] - a[2])
    e2 = (c[0] - a[0], c[1] - a[1], c[2] - a[2])
    n = (
        e1[1] * e2[2] - e1[2] * e2[1],
        e1[2] * e2[0] - e1[0] * e2[2],
        e1[0] * e2[1] - e1[1] * e2[0],
    )
    if n[0] * n[0] + n[1] * n[1] + n[2] * n[2] <= MIN_TRIANGLE_AREA_SQ:
        raise ValueError(f"Degenerate triangle (zero area): {a}, {b}, {c}")
    return a, b, c
