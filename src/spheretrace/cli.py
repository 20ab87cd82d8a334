"""Render the fractal sphere cluster to stdout.

Builds the sphere cluster at the requested recursion level, renders it at
1024x1024 with 16 samples per pixel and writes a binary P5 graymap to stdout.
Progress messages go to stderr.

Usage:
    spheretrace [level] [--quiet]
    python -m spheretrace [level] [--quiet]

Arguments:
    level       Recursion depth of the sphere cluster (default: 8)

Options:
    --quiet     Suppress progress output

Example:
    spheretrace 6 > spheres.pgm
"""

from __future__ import annotations

import argparse
import os
import sys
import time
from typing import TYPE_CHECKING, BinaryIO

if TYPE_CHECKING:
    from spheretrace.scene.sphere_cluster import SphereClusterParams

# Rows rendered per kernel launch between progress updates
BATCH_ROWS = 64


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="spheretrace",
        description="Render a fractal cluster of spheres as a P5 graymap on stdout.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "level",
        nargs="?",
        type=int,
        default=8,
        help="Recursion depth of the sphere cluster (default: 8)",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    return parser.parse_args(argv)


def claim_stdout() -> BinaryIO:
    """Keep the real stdout for the image and route fd 1 to stderr.

    Taichi prints its banner and log lines to stdout, from Python and from
    the C++ runtime, which would corrupt the graymap stream.

    Returns:
        A binary stream writing to the original stdout.
    """
    sys.stdout.flush()
    stdout_fd = sys.stdout.fileno()
    image_fd = os.dup(stdout_fd)
    os.dup2(sys.stderr.fileno(), stdout_fd)
    return os.fdopen(image_fd, "wb")


def render_sphere_cluster(
    level: int,
    output: BinaryIO,
    quiet: bool = False,
    params: SphereClusterParams | None = None,
) -> None:
    """Render the sphere cluster scene and write it as a P5 graymap.

    Taichi must be initialized before calling this function.

    Args:
        level: Recursion depth of the sphere cluster.
        output: Binary stream receiving the image.
        quiet: If True, suppress progress output.
        params: Optional scene parameters. If None, uses the defaults
            (1024x1024, 4x4 samples per pixel).
    """
    # Lazy imports: these modules declare Taichi fields and need ti.init() first
    from spheretrace.camera.pinhole import setup_camera
    from spheretrace.core.integrator import setup_light
    from spheretrace.core.renderer import SphereRenderer
    from spheretrace.preview.export import write_pgm
    from spheretrace.scene.intersection import load_scene
    from spheretrace.scene.sphere_cluster import SphereClusterParams, create_sphere_cluster_scene

    if params is None:
        params = SphereClusterParams()
    start_time = time.time()

    root, camera = create_sphere_cluster_scene(level, params)
    node_count = load_scene(root)
    if not quiet:
        sphere_count = sum(1 for _ in root.iter_leaves())
        print(
            f"Built level {root.depth()} sphere cluster "
            f"({node_count} nodes, {sphere_count} spheres)",
            file=sys.stderr,
        )

    setup_camera(camera)
    setup_light(params.light_direction)

    renderer = SphereRenderer(camera.image_size, samples_per_axis=params.samples_per_axis)

    def progress_callback(current: int, total: int) -> None:
        if not quiet:
            elapsed = time.time() - start_time
            progress_pct = (current / total) * 100 if total > 0 else 0
            print(
                f"\r  Progress: {current}/{total} rows ({progress_pct:.1f}%) - {elapsed:.1f}s",
                end="",
                file=sys.stderr,
                flush=True,
            )

    renderer.render(batch_rows=BATCH_ROWS, callback=progress_callback)

    if not quiet:
        print(file=sys.stderr)  # Newline after progress

    write_pgm(renderer.get_image_numpy(), output)

    if not quiet:
        print(f"Total time: {time.time() - start_time:.2f}s", file=sys.stderr)


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    output = claim_stdout()

    import taichi as ti

    log_level = ti.WARN if args.quiet else ti.INFO

    # Use GPU if available, fall back to CPU
    try:
        ti.init(arch=ti.gpu, log_level=log_level)
    except Exception:
        ti.init(arch=ti.cpu, log_level=log_level)

    try:
        with output:
            render_sphere_cluster(args.level, output, quiet=args.quiet)
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
