"""Batched renderer with progress reporting.

This module wraps the integrator's render target in a small class that
renders the image in bands of rows, so long renders (high cluster levels,
16 samples per pixel) can report progress between kernel launches.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from spheretrace.core.renderer import SphereRenderer
    >>>
    >>> renderer = SphereRenderer(1024, samples_per_axis=4)
    >>> renderer.render(batch_rows=64)
    >>> image = renderer.get_image_numpy()  # uint8, (1024, 1024)
"""

from collections.abc import Callable, Generator

import numpy as np
import numpy.typing as npt

from spheretrace.core.integrator import (
    get_image_size,
    get_intensity_numpy,
    render_rows,
    setup_render_target,
)
from spheretrace.preview.export import intensity_to_uint8

# Type alias for progress callback
# Callback receives (rows_done, total_rows)
ProgressCallback = Callable[[int, int], None]


class SphereRenderer:
    """Renders the loaded scene into a square grayscale image.

    The scene, camera and light must be set up before rendering. The
    renderer owns the size and supersampling factor and delegates to the
    global integrator buffers (which are Taichi fields).

    Attributes:
        size: Image width and height in pixels.
        samples_per_axis: Sub-samples per pixel along each axis.
    """

    def __init__(self, size: int, samples_per_axis: int = 1) -> None:
        """Initialize the renderer.

        Args:
            size: Image width and height in pixels (max 2048).
            samples_per_axis: Sub-samples per pixel along each axis.

        Raises:
            ValueError: If size is out of range or samples_per_axis is not
                positive.
        """
        if samples_per_axis <= 0:
            raise ValueError(f"samples_per_axis must be positive, got {samples_per_axis}")
        self._size = size
        self._samples_per_axis = samples_per_axis
        self._rows_done = 0
        setup_render_target(size)

    @property
    def size(self) -> int:
        """Get the image width and height."""
        return self._size

    @property
    def samples_per_axis(self) -> int:
        """Get the supersampling factor."""
        return self._samples_per_axis

    @property
    def rows_done(self) -> int:
        """Number of rows rendered since the last reset."""
        return self._rows_done

    def reset(self) -> None:
        """Reset the render target for a fresh render."""
        setup_render_target(self._size)
        self._rows_done = 0

    def render(
        self,
        batch_rows: int | None = None,
        callback: ProgressCallback | None = None,
    ) -> None:
        """Render the whole image with an optional progress callback.

        Args:
            batch_rows: Rows rendered per kernel launch. None renders the
                whole image in one launch.
            callback: Optional callback called after each batch. Receives
                (rows_done, total_rows).

        Example:
            >>> def progress(done, total):
            ...     print(f"{done}/{total} rows", file=sys.stderr)
            >>> renderer.render(batch_rows=64, callback=progress)
        """
        for done, total in self.render_progressive(batch_rows):
            if callback is not None:
                callback(done, total)

    def render_progressive(
        self,
        batch_rows: int | None = None,
    ) -> Generator[tuple[int, int], None, None]:
        """Render the image band by band, yielding progress after each band.

        Rendering restarts from the top row on every call.

        Args:
            batch_rows: Rows rendered per kernel launch. None renders the
                whole image in one launch.

        Yields:
            Tuple of (rows_done, total_rows).

        Raises:
            ValueError: If batch_rows is not positive.
        """
        if batch_rows is None:
            batch_rows = self._size
        if batch_rows <= 0:
            raise ValueError(f"batch_rows must be positive, got {batch_rows}")

        if get_image_size() != self._size:
            setup_render_target(self._size)

        self._rows_done = 0
        while self._rows_done < self._size:
            row_end = min(self._rows_done + batch_rows, self._size)
            render_rows(self._rows_done, row_end, self._samples_per_axis)
            self._rows_done = row_end
            yield (self._rows_done, self._size)

    def get_intensity_numpy(self) -> npt.NDArray[np.float32]:
        """Get the averaged per-pixel intensities in [0, 1].

        Returns:
            Float32 array of shape (size, size), row 0 at the top.
        """
        return get_intensity_numpy()

    def get_image_numpy(self) -> npt.NDArray[np.uint8]:
        """Get the image as 8-bit gray levels.

        Returns:
            Uint8 array of shape (size, size), row 0 at the top.
        """
        return intensity_to_uint8(self.get_intensity_numpy())
