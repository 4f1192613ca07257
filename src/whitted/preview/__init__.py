"""Preview module for image output.

Components:
    export: Byte conversion and PPM/PNG export via Pillow

Example:
    >>> from whitted.preview import image_to_uint8, save_ppm
    >>> save_ppm(image_to_uint8(linear_image), "output.ppm")
"""

from whitted.preview.export import (
    COLOR_SCALE,
    image_to_uint8,
    read_ppm,
    save_image,
    save_png,
    save_ppm,
)

__all__ = [
    "COLOR_SCALE",
    "image_to_uint8",
    "save_ppm",
    "save_png",
    "save_image",
    "read_ppm",
]
