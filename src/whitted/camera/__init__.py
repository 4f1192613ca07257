"""Camera module for primary ray generation.

Components:
    pinhole: Pinhole camera with a fixed-size viewport

Camera responsibilities:
    - Build the (u, v, w) basis from origin, look-at point and up vector
    - Map pixel indices linearly across the viewport
    - Produce normalized primary ray directions inside Taichi kernels
"""

from .pinhole import (
    PinholeCamera,
    compute_camera_frame,
    get_camera_info,
    get_pixel_ray,
    get_ray,
    setup_camera,
)

__all__ = [
    "PinholeCamera",
    "compute_camera_frame",
    "setup_camera",
    "get_ray",
    "get_pixel_ray",
    "get_camera_info",
]
