"""Image export utilities for rendered images.

This module turns averaged intensities into gray levels and writes them out.

Supported formats:
    - P5 portable graymap (binary PGM), the program's stdout format
    - PNG (8-bit grayscale), for saving to files

Both go through Pillow. Pillow's PPM encoder writes a mode "L" image as

    P5\\n<width> <height>\\n255\\n<width * height bytes>

with rows from top to bottom, which is exactly the required stream.

Example:
    >>> import sys
    >>> from spheretrace.preview.export import write_pgm
    >>> write_pgm(renderer.get_image_numpy(), sys.stdout.buffer)
"""

from __future__ import annotations

from typing import BinaryIO

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage


def intensity_to_uint8(intensity: npt.NDArray[np.floating]) -> npt.NDArray[np.uint8]:
    """Convert intensities in [0, 1] to gray levels.

    Each value maps to floor(0.5 + 255 * value), clamped to [0, 255].

    Args:
        intensity: Array of averaged intensities.

    Returns:
        Array of the same shape with dtype uint8.
    """
    scaled = np.floor(0.5 + 255.0 * intensity.astype(np.float64))
    return np.clip(scaled, 0.0, 255.0).astype(np.uint8)


def _to_pil(image: npt.NDArray[np.uint8]) -> PILImage.Image:
    """Wrap a 2D gray-level array in a Pillow image."""
    if image.ndim != 2:
        raise ValueError(f"Expected a 2D grayscale image, got shape {image.shape}")
    if image.dtype != np.uint8:
        raise ValueError(f"Expected dtype uint8, got {image.dtype}")
    return PILImage.fromarray(np.ascontiguousarray(image))


def write_pgm(image: npt.NDArray[np.uint8], stream: BinaryIO) -> None:
    """Write a grayscale image as a binary P5 graymap.

    Args:
        image: Uint8 array of shape (height, width), row 0 at the top.
        stream: Binary stream to write to (e.g. sys.stdout.buffer).

    Raises:
        ValueError: If the array is not a 2D uint8 image.
    """
    _to_pil(image).save(stream, format="PPM")
    stream.flush()


def save_pgm(image: npt.NDArray[np.uint8], filepath: str) -> None:
    """Save a grayscale image as a binary P5 graymap file."""
    _to_pil(image).save(filepath, format="PPM")


def save_png(image: npt.NDArray[np.uint8], filepath: str) -> None:
    """Save a grayscale image as an 8-bit PNG file."""
    _to_pil(image).save(filepath, format="PNG")


def pgm_header(width: int, height: int) -> bytes:
    """The header write_pgm() emits for an image of the given size."""
    return f"P5\n{width} {height}\n255\n".encode("ascii")
