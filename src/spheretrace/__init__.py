"""Taichi-based ray tracer for a fractal cluster of spheres.

This package renders a grayscale image of a self-similar sphere cluster with:
- Nearest-hit traversal of a bounding-sphere hierarchy
- A single directional light with hard shadows
- Regular-grid supersampling
- P5 graymap output

Subpackages:
    core: Ray and hit records, vector utilities, integrator and renderer
    geometry: Sphere primitive and ray-sphere distance
    scene: Scene tree, fractal builder and device-side traversal
    camera: Fixed-eye pinhole camera
    preview: Image export
"""

__version__ = "0.1.0"
