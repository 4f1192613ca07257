"""Render target and per-pixel rendering kernels.

This module owns the image buffer and launches ``trace_ray`` once per
pixel. There is exactly one camera ray per pixel (no anti-aliasing) and
the stored colors are linear and unclamped; conversion to bytes happens
at export time.

The buffer is indexed [i, j] with j = 0 the bottom row. Readback through
``get_image_numpy`` returns the conventional (height, width, 3) layout
with the top row first.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from whitted.camera.pinhole import setup_camera
    >>> from whitted.core.renderer import Renderer
    >>> from whitted.scene.demo import create_demo_scene
    >>>
    >>> scene, camera = create_demo_scene()
    >>> setup_camera(camera)
    >>> renderer = Renderer(400, 400)
    >>> renderer.render()
    >>> renderer.save_image("demo.ppm")
"""

from collections.abc import Callable

import numpy as np
import numpy.typing as npt
import taichi as ti

from whitted.camera.pinhole import get_pixel_ray
from whitted.core.tracer import trace_ray
from whitted.preview.export import image_to_uint8, save_image

# Callback receives (rows_done, total_rows)
ProgressCallback = Callable[[int, int], None]

# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Default output size
IMAGE_WIDTH = 1600
IMAGE_HEIGHT = 1600

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

_color_buffer = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int = IMAGE_WIDTH, height: int = IMAGE_HEIGHT) -> None:
    """Set the active image dimensions and clear the buffer.

    Raises:
        ValueError: If a dimension is not positive or exceeds the maximum.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1

    clear_render_target()


def clear_render_target() -> None:
    """Clear the color buffer to zero."""
    _color_buffer.fill(0.0)


def reset_render_target() -> None:
    """Clear the buffer and mark the render target as not set up."""
    clear_render_target()
    _render_target_initialized[None] = 0


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions as (width, height)."""
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    """Check if render target is initialized and raise if not."""
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_rows(width: ti.i32, height: ti.i32, row_start: ti.i32, row_end: ti.i32):
    """Trace one ray per pixel for rows [row_start, row_end)."""
    for i, j in ti.ndrange(width, (row_start, row_end)):
        ray = get_pixel_ray(i, j, width, height)
        _color_buffer[i, j] = trace_ray(ray.origin, ray.direction, 0)


_pixel_result = ti.Vector.field(3, dtype=ti.f32, shape=())


@ti.kernel
def _render_single_pixel(pixel_i: ti.i32, pixel_j: ti.i32, width: ti.i32, height: ti.i32):
    for _ in range(1):
        ray = get_pixel_ray(pixel_i, pixel_j, width, height)
        _pixel_result[None] = trace_ray(ray.origin, ray.direction, 0)


# =============================================================================
# Public Rendering API
# =============================================================================


def render_image(callback: ProgressCallback | None = None, batch_rows: int = 0) -> None:
    """Render every pixel of the active render target.

    Args:
        callback: Optional function called after each band of rows with
            (rows_done, total_rows).
        batch_rows: Rows per kernel launch. 0 renders the whole image in a
            single launch.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    step = height if batch_rows <= 0 else batch_rows

    row = 0
    while row < height:
        row_end = min(row + step, height)
        _render_rows(width, height, row, row_end)
        row = row_end
        if callback is not None:
            callback(row, height)


def render_pixel(pixel_i: int, pixel_j: int) -> tuple[float, float, float]:
    """Trace the camera ray of one pixel (j = 0 is the bottom row).

    The buffer is not modified.

    Raises:
        RuntimeError: If render target has not been set up.
        ValueError: If the pixel lies outside the render target.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    if not (0 <= pixel_i < width and 0 <= pixel_j < height):
        raise ValueError(f"Pixel ({pixel_i}, {pixel_j}) outside {width}x{height} image")

    _render_single_pixel(pixel_i, pixel_j, width, height)
    color = _pixel_result[None]
    return (float(color[0]), float(color[1]), float(color[2]))


def get_image_numpy() -> npt.NDArray[np.float32]:
    """Get the rendered image as a NumPy array.

    Returns:
        Linear, unclamped colors of shape (height, width, 3), float32,
        top row first.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()

    full_image = _color_buffer.to_numpy()
    image = full_image[:width, :height, :]

    # (width, height, 3) -> (height, width, 3)
    image = np.transpose(image, (1, 0, 2))

    # Buffer row 0 is the bottom of the image
    image = np.flipud(image)

    return np.ascontiguousarray(image, dtype=np.float32)


class Renderer:
    """One-ray-per-pixel renderer bound to an image size.

    Wraps the module-level render target so a caller can size, render and
    export an image through one object.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
    """

    def __init__(self, width: int = IMAGE_WIDTH, height: int = IMAGE_HEIGHT) -> None:
        """Set up the render target.

        Raises:
            ValueError: If dimensions are invalid or exceed the maximum.
        """
        self._width = width
        self._height = height
        setup_render_target(width, height)

    @property
    def width(self) -> int:
        """Get the image width."""
        return self._width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self._height

    def render(self, callback: ProgressCallback | None = None, batch_rows: int = 0) -> None:
        """Render the full image into the buffer."""
        render_image(callback=callback, batch_rows=batch_rows)

    def get_image_numpy(self) -> npt.NDArray[np.float32]:
        """Get the linear image, shape (height, width, 3), top row first."""
        return get_image_numpy()

    def get_image_uint8(self) -> npt.NDArray[np.uint8]:
        """Get the image converted to bytes (x254, clamped, truncated)."""
        return image_to_uint8(self.get_image_numpy())

    def save_image(self, filepath: str) -> None:
        """Save the image; the format follows the extension (.ppm or .png)."""
        save_image(self.get_image_uint8(), filepath)

    def __repr__(self) -> str:
        return f"Renderer(width={self.width}, height={self.height})"
