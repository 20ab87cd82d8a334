"""Tests for gray-level conversion and image export.

Tests cover:
- Rounding and clamping of intensities to gray levels
- The binary P5 stream written to a file object
- Saving graymap and PNG files
- Input validation
"""

import io

import numpy as np
import pytest
from PIL import Image as PILImage

from spheretrace.preview.export import (
    intensity_to_uint8,
    pgm_header,
    save_pgm,
    save_png,
    write_pgm,
)


class TestIntensityToUint8:
    """Tests for quantisation."""

    def test_endpoints(self):
        result = intensity_to_uint8(np.array([0.0, 1.0], dtype=np.float32))
        assert result.tolist() == [0, 255]
        assert result.dtype == np.uint8

    def test_rounds_half_up(self):
        # 255 * 0.5 = 127.5 rounds to 128
        assert intensity_to_uint8(np.array([0.5]))[0] == 128
        assert intensity_to_uint8(np.array([0.001]))[0] == 0
        assert intensity_to_uint8(np.array([0.002]))[0] == 1

    def test_clamps_out_of_range(self):
        result = intensity_to_uint8(np.array([-0.5, 1.5, 100.0]))
        assert result.tolist() == [0, 255, 255]

    def test_preserves_shape(self):
        result = intensity_to_uint8(np.zeros((3, 5), dtype=np.float32))
        assert result.shape == (3, 5)


class TestWritePgm:
    """Tests for the P5 stream."""

    def test_header(self):
        assert pgm_header(1024, 1024) == b"P5\n1024 1024\n255\n"

    def test_stream_is_header_then_rows(self):
        image = np.arange(6, dtype=np.uint8).reshape(2, 3) * 40
        stream = io.BytesIO()
        write_pgm(image, stream)

        data = stream.getvalue()
        header = pgm_header(3, 2)
        assert data.startswith(header)
        assert data[len(header):] == image.tobytes()
        assert len(data) == len(header) + 6

    def test_non_contiguous_input(self):
        image = np.arange(16, dtype=np.uint8).reshape(4, 4)[:, ::2]
        stream = io.BytesIO()
        write_pgm(image, stream)
        assert stream.getvalue()[len(pgm_header(2, 4)):] == np.ascontiguousarray(image).tobytes()

    def test_rejects_color_images(self):
        with pytest.raises(ValueError, match="2D grayscale"):
            write_pgm(np.zeros((4, 4, 3), dtype=np.uint8), io.BytesIO())

    def test_rejects_float_images(self):
        with pytest.raises(ValueError, match="uint8"):
            write_pgm(np.zeros((4, 4), dtype=np.float32), io.BytesIO())


class TestSaveFiles:
    """Tests for saving images to disk."""

    def test_save_pgm(self, tmp_path):
        image = (np.arange(64, dtype=np.uint8) * 4).reshape(8, 8)
        path = tmp_path / "image.pgm"
        save_pgm(image, str(path))

        data = path.read_bytes()
        assert data == pgm_header(8, 8) + image.tobytes()

    def test_save_png_round_trip(self, tmp_path):
        image = (np.arange(64, dtype=np.uint8) * 4).reshape(8, 8)
        path = tmp_path / "image.png"
        save_png(image, str(path))

        with PILImage.open(path) as loaded:
            assert loaded.mode == "L"
            np.testing.assert_array_equal(np.asarray(loaded), image)
