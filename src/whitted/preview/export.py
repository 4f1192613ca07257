"""Image export utilities for rendered images.

Rendered colors are linear floats with no upper or lower bound. They are
converted to bytes by scaling each channel by 254, clamping to [0, 255]
and truncating toward zero, then written with Pillow.

Supported formats:
    - PPM (binary P6: ``P6\\n<width> <height>\\n255\\n`` + raw RGB rows,
      top row first)
    - PNG (8-bit RGB)

Example:
    >>> from whitted.preview.export import image_to_uint8, save_ppm
    >>> image_uint8 = image_to_uint8(renderer.get_image_numpy())
    >>> save_ppm(image_uint8, "output.ppm")
"""

from __future__ import annotations

from pathlib import Path

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

# Byte value per unit of color; 1.0 maps to 254
COLOR_SCALE = 254.0

_FORMATS = {
    ".ppm": "PPM",
    ".pnm": "PPM",
    ".png": "PNG",
}


def image_to_uint8(
    image: npt.NDArray[np.floating],
    *,
    scale: float = COLOR_SCALE,
) -> npt.NDArray[np.uint8]:
    """Convert a linear float image to bytes.

    Each channel is multiplied by scale, clamped to [0, 255] and
    truncated. NaN channels become 0.

    Args:
        image: Image array of shape (H, W, 3).
        scale: Multiplier applied before clamping.

    Returns:
        Array of the same shape with dtype uint8.
    """
    scaled = np.nan_to_num(np.asarray(image, dtype=np.float64), nan=0.0) * scale
    return np.clip(scaled, 0.0, 255.0).astype(np.uint8)


def _as_uint8(image: npt.NDArray) -> npt.NDArray[np.uint8]:
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected an (H, W, 3) image, got shape {image.shape}")
    if image.dtype == np.uint8:
        return image
    return image_to_uint8(image)


def save_ppm(image: npt.NDArray, filepath: str | Path) -> None:
    """Save an image as a binary (P6) PPM file.

    Float images are converted with image_to_uint8 first.

    Raises:
        ValueError: If image is not of shape (H, W, 3).
    """
    pil_image = PILImage.fromarray(np.ascontiguousarray(_as_uint8(image)))
    pil_image.save(filepath, format="PPM")


def save_png(image: npt.NDArray, filepath: str | Path) -> None:
    """Save an image as an 8-bit RGB PNG file.

    Float images are converted with image_to_uint8 first.

    Raises:
        ValueError: If image is not of shape (H, W, 3).
    """
    pil_image = PILImage.fromarray(np.ascontiguousarray(_as_uint8(image)))
    pil_image.save(filepath, format="PNG")


def save_image(image: npt.NDArray, filepath: str | Path) -> None:
    """Save an image, picking the format from the file extension.

    Raises:
        ValueError: If the extension is not .ppm, .pnm or .png.
    """
    suffix = Path(filepath).suffix.lower()
    fmt = _FORMATS.get(suffix)
    if fmt is None:
        raise ValueError(
            f"Unsupported image extension {suffix!r}; expected one of {sorted(_FORMATS)}"
        )
    if fmt == "PPM":
        save_ppm(image, filepath)
    else:
        save_png(image, filepath)


def read_ppm(filepath: str | Path) -> npt.NDArray[np.uint8]:
    """Read a PPM file back as a (H, W, 3) uint8 array."""
    with PILImage.open(filepath) as pil_image:
        return np.asarray(pil_image.convert("RGB"), dtype=np.uint8)
