#!/usr/bin/env python3
"""Render the sphere cluster to an image file.

Unlike the spheretrace command, which always streams a 1024x1024 graymap to
stdout, this script exposes the image size, supersampling factor and output
format, which is handy for quick previews at low levels.

Usage:
    python -m examples.render_sphere_cluster [options]

Options:
    --level LEVEL       Recursion depth of the cluster (default: 6)
    --size SIZE         Image width and height in pixels (default: 512)
    --samples SAMPLES   Sub-samples per pixel along each axis (default: 4)
    --output OUTPUT     Output file, .png or .pgm (default: spheres.png)
    --batch-rows ROWS   Rows per progress update (default: 64)
    --quiet             Suppress progress output

Example:
    python -m examples.render_sphere_cluster --level 4 --size 256 --samples 2
"""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path

import taichi as ti


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the sphere cluster to an image file.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--level",
        type=int,
        default=6,
        help="Recursion depth of the cluster (default: 6)",
    )
    parser.add_argument(
        "--size",
        type=int,
        default=512,
        help="Image width and height in pixels (default: 512)",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=4,
        help="Sub-samples per pixel along each axis (default: 4)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="spheres.png",
        help="Output file, .png or .pgm (default: spheres.png)",
    )
    parser.add_argument(
        "--batch-rows",
        type=int,
        default=64,
        help="Rows per progress update (default: 64)",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    return parser.parse_args()


def render_to_file(
    level: int = 6,
    size: int = 512,
    samples_per_axis: int = 4,
    output_path: str = "spheres.png",
    batch_rows: int = 64,
    quiet: bool = False,
) -> Path:
    """Render the sphere cluster and save it.

    Args:
        level: Recursion depth of the cluster.
        size: Image width and height in pixels.
        samples_per_axis: Sub-samples per pixel along each axis.
        output_path: Output file path. A .pgm suffix writes a P5 graymap,
            anything else a PNG.
        batch_rows: Rows rendered between progress updates.
        quiet: If True, suppress progress output.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from spheretrace.camera.pinhole import setup_camera
    from spheretrace.core.integrator import setup_light
    from spheretrace.core.renderer import SphereRenderer
    from spheretrace.preview.export import save_pgm, save_png
    from spheretrace.scene.intersection import load_scene
    from spheretrace.scene.sphere_cluster import SphereClusterParams, create_sphere_cluster_scene

    params = SphereClusterParams(image_size=size, samples_per_axis=samples_per_axis)
    root, camera = create_sphere_cluster_scene(level, params)
    node_count = load_scene(root)
    if not quiet:
        print(f"Sphere cluster level {level}: {node_count} nodes ({size}x{size})")

    setup_camera(camera)
    setup_light(params.light_direction)

    renderer = SphereRenderer(size, samples_per_axis=samples_per_axis)
    start_time = time.time()

    def progress_callback(current: int, total: int) -> None:
        if not quiet:
            elapsed = time.time() - start_time
            print(f"\r  Progress: {current}/{total} rows - {elapsed:.1f}s", end="", flush=True)

    renderer.render(batch_rows=batch_rows, callback=progress_callback)

    if not quiet:
        print()  # Newline after progress

    output_file = Path(output_path)
    image = renderer.get_image_numpy()
    if output_file.suffix.lower() == ".pgm":
        save_pgm(image, str(output_file))
    else:
        save_png(image, str(output_file))

    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {time.time() - start_time:.2f}s")

    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()

    # Use GPU if available, fall back to CPU
    try:
        ti.init(arch=ti.gpu)
    except Exception:
        ti.init(arch=ti.cpu)

    try:
        render_to_file(
            level=args.level,
            size=args.size,
            samples_per_axis=args.samples,
            output_path=args.output,
            batch_rows=args.batch_rows,
            quiet=args.quiet,
        )
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
