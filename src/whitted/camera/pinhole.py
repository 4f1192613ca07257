"""Pinhole camera model for primary ray generation.

The camera is given by its position, a look-at point, an up vector and a
viewport of fixed size at a fixed focal distance. From these it builds an
orthonormal basis (u, v, w):
- w: points from look_at toward the camera origin (opposite view direction)
- u: points right in the image plane
- v: points up in the image plane

Pixel (i, j) of a W x H image, with j = 0 the bottom row, is mapped to
viewport coordinates s = i / (W - 1), t = j / (H - 1), so the first and
last pixel centers sit exactly on the viewport edges. There is no jitter.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from whitted.camera.pinhole import PinholeCamera, setup_camera, get_ray
    >>>
    >>> camera = PinholeCamera(origin=(0.0, 0.0, 1.0), look_at=(0.0, 0.0, 0.0))
    >>> setup_camera(camera)
    >>>
    >>> @ti.kernel
    ... def render():
    ...     ray = get_ray(0.5, 0.5)  # Ray through the viewport center
"""

from dataclasses import dataclass

import numpy as np
import taichi as ti

from whitted.core.vector import Ray, make_ray, normalize

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass
class PinholeCamera:
    """Configuration for a pinhole camera.

    Attributes:
        origin: Camera position in world space (x, y, z).
        look_at: Point the camera is looking at (x, y, z).
        up: Up direction for camera orientation (typically (0, 1, 0)).
            Must not be parallel to the view direction.
        viewport_width: Width of the virtual image plane in world units.
        viewport_height: Height of the virtual image plane in world units.
        focal_length: Distance from the origin to the image plane.
    """

    origin: tuple[float, float, float] = (0.0, 0.0, 1.0)
    look_at: tuple[float, float, float] = (0.0, 0.0, 0.0)
    up: tuple[float, float, float] = (0.0, 1.0, 0.0)
    viewport_width: float = 2.0
    viewport_height: float = 2.0
    focal_length: float = 1.0


def compute_camera_frame(camera: PinholeCamera) -> dict[str, np.ndarray]:
    """Compute the camera basis and viewport vectors.

    Args:
        camera: Camera configuration.

    Returns:
        Dictionary with float32 arrays for origin, u, v, w, horizontal,
        vertical and lower_left.

    Raises:
        ValueError: If origin equals look_at, or up is parallel to the view
            direction, so no basis can be built.
    """
    origin = np.array(camera.origin, dtype=np.float32)
    look_at = np.array(camera.look_at, dtype=np.float32)
    up = np.array(camera.up, dtype=np.float32)

    # w points from look_at toward origin (backward)
    w = origin - look_at
    w_len = np.linalg.norm(w)
    if w_len == 0.0:
        raise ValueError("Camera origin and look_at must differ")
    w = w / w_len

    # u points right (perpendicular to w and up)
    u = np.cross(up, w)
    u_len = np.linalg.norm(u)
    if u_len == 0.0:
        raise ValueError("Camera up vector must not be parallel to the view direction")
    u = u / u_len

    # v points up in the camera's frame
    v = np.cross(w, u)

    horizontal = u * camera.viewport_width
    vertical = v * camera.viewport_height

    # Origin - horizontal/2 (left) - vertical/2 (down) - w * focal (forward)
    lower_left = origin - horizontal / 2.0 - vertical / 2.0 - w * camera.focal_length

    return {
        "origin": origin,
        "u": u,
        "v": v,
        "w": w,
        "horizontal": horizontal.astype(np.float32),
        "vertical": vertical.astype(np.float32),
        "lower_left": lower_left.astype(np.float32),
    }


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_origin = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_u = ti.Vector.field(3, dtype=ti.f32, shape=())  # Right
_camera_v = ti.Vector.field(3, dtype=ti.f32, shape=())  # Up
_camera_w = ti.Vector.field(3, dtype=ti.f32, shape=())  # Backward (opposite view)

_viewport_horizontal = ti.Vector.field(3, dtype=ti.f32, shape=())
_viewport_vertical = ti.Vector.field(3, dtype=ti.f32, shape=())
_lower_left_corner = ti.Vector.field(3, dtype=ti.f32, shape=())


def setup_camera(camera: PinholeCamera) -> None:
    """Write the camera basis and viewport geometry to the Taichi fields.

    Must be called from Python before rendering.

    Raises:
        ValueError: If the camera configuration is degenerate.
    """
    frame = compute_camera_frame(camera)

    _camera_origin[None] = frame["origin"].tolist()
    _camera_u[None] = frame["u"].tolist()
    _camera_v[None] = frame["v"].tolist()
    _camera_w[None] = frame["w"].tolist()
    _viewport_horizontal[None] = frame["horizontal"].tolist()
    _viewport_vertical[None] = frame["vertical"].tolist()
    _lower_left_corner[None] = frame["lower_left"].tolist()


# =============================================================================
# Ray Generation
# =============================================================================


@ti.func
def get_ray(s: ti.f32, t: ti.f32) -> Ray:
    """Generate a ray through viewport coordinates (s, t).

    s runs left (0) to right (1) and t bottom (0) to top (1). The direction
    is normalized.
    """
    point_on_viewport = (
        _lower_left_corner[None] + s * _viewport_horizontal[None] + t * _viewport_vertical[None]
    )
    origin = _camera_origin[None]
    return make_ray(origin, normalize(point_on_viewport - origin))


@ti.func
def get_pixel_ray(pixel_i: ti.i32, pixel_j: ti.i32, width: ti.i32, height: ti.i32) -> Ray:
    """Generate the ray for pixel (i, j), j = 0 being the bottom row.

    A one-pixel-wide (or tall) image maps that axis to the viewport's left
    (or bottom) edge.
    """
    s = ti.cast(pixel_i, ti.f32) / ti.cast(ti.max(width - 1, 1), ti.f32)
    t = ti.cast(pixel_j, ti.f32) / ti.cast(ti.max(height - 1, 1), ti.f32)
    return get_ray(s, t)


def get_camera_info() -> dict[str, tuple[float, float, float]]:
    """Get current camera state for debugging.

    Returns:
        Dictionary with origin, u, v, w, horizontal, vertical, lower_left.
    """
    fields = {
        "origin": _camera_origin,
        "u": _camera_u,
        "v": _camera_v,
        "w": _camera_w,
        "horizontal": _viewport_horizontal,
        "vertical": _viewport_vertical,
        "lower_left": _lower_left_corner,
    }
    info = {}
    for name, field in fields.items():
        value = field[None]
        info[name] = (float(value[0]), float(value[1]), float(value[2]))
    return info
