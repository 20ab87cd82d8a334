"""Output utilities for rendered images.

Components:
    export: Gray-level quantisation, P5 graymap and PNG writers
"""

from .export import intensity_to_uint8, pgm_header, save_pgm, save_png, write_pgm

__all__ = [
    "intensity_to_uint8",
    "pgm_header",
    "save_pgm",
    "save_png",
    "write_pgm",
]
