"""Tests for the command-line entry point.

Tests cover:
- Argument parsing
- Rendering a small cluster to a binary stream
- Progress output on stderr and --quiet
- Exit codes and the stdout stream of the command itself
"""

import io
import os
import subprocess
import sys
from pathlib import Path

import numpy as np
import pytest

from spheretrace.cli import parse_args


class TestParseArgs:
    """Tests for argument parsing."""

    def test_defaults(self):
        args = parse_args([])
        assert args.level == 8
        assert args.quiet is False

    def test_level_and_quiet(self):
        args = parse_args(["3", "--quiet"])
        assert args.level == 3
        assert args.quiet is True

    def test_non_integer_level_exits(self):
        with pytest.raises(SystemExit) as exc_info:
            parse_args(["deep"])
        assert exc_info.value.code == 2


class TestRenderSphereCluster:
    """Tests for render_sphere_cluster with small images."""

    SIZE = 32

    def _params(self):
        from spheretrace.scene.sphere_cluster import SphereClusterParams

        return SphereClusterParams(image_size=self.SIZE, samples_per_axis=1)

    def test_writes_p5_graymap(self):
        from spheretrace.cli import render_sphere_cluster
        from spheretrace.preview.export import pgm_header

        output = io.BytesIO()
        render_sphere_cluster(3, output, quiet=True, params=self._params())

        data = output.getvalue()
        header = pgm_header(self.SIZE, self.SIZE)
        assert data.startswith(header)
        pixels = np.frombuffer(data[len(header):], dtype=np.uint8)
        assert pixels.size == self.SIZE * self.SIZE
        assert pixels.max() > 0
        # Top-left corner is background
        assert pixels[0] == 0

    def test_output_is_deterministic(self):
        from spheretrace.cli import render_sphere_cluster

        first, second = io.BytesIO(), io.BytesIO()
        render_sphere_cluster(2, first, quiet=True, params=self._params())
        render_sphere_cluster(2, second, quiet=True, params=self._params())
        assert first.getvalue() == second.getvalue()

    def test_progress_goes_to_stderr(self, capsys):
        from spheretrace.cli import render_sphere_cluster

        render_sphere_cluster(2, io.BytesIO(), quiet=False, params=self._params())
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "level 2 sphere cluster (6 nodes, 5 spheres)" in captured.err
        assert "Progress" in captured.err

    def test_quiet_prints_nothing(self, capsys):
        from spheretrace.cli import render_sphere_cluster

        render_sphere_cluster(2, io.BytesIO(), quiet=True, params=self._params())
        captured = capsys.readouterr()
        assert captured.out == ""
        assert captured.err == ""

    def test_invalid_level_raises(self):
        from spheretrace.cli import render_sphere_cluster

        output = io.BytesIO()
        with pytest.raises(ValueError, match="at least 1"):
            render_sphere_cluster(0, output, quiet=True, params=self._params())
        assert output.getvalue() == b""


def _run_module(*args):
    """Run `python -m spheretrace` in a fresh process on the CPU backend."""
    src_dir = Path(__file__).resolve().parent.parent / "src"
    env = dict(os.environ)
    env["TI_ARCH"] = "x64"
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(src_dir), env.get("PYTHONPATH")]))
    return subprocess.run(
        [sys.executable, "-m", "spheretrace", *args],
        capture_output=True,
        env=env,
        timeout=600,
    )


class TestMain:
    """End-to-end runs of the command in a subprocess."""

    def test_level_one_writes_clean_graymap(self):
        from spheretrace.preview.export import pgm_header

        result = _run_module("1", "--quiet")
        assert result.returncode == 0, result.stderr.decode(errors="replace")

        header = pgm_header(1024, 1024)
        assert header == b"P5\n1024 1024\n255\n"
        assert result.stdout.startswith(header)
        assert len(result.stdout) == len(header) + 1024 * 1024

        pixels = np.frombuffer(result.stdout[len(header):], dtype=np.uint8).reshape(1024, 1024)
        assert pixels[512, 512] > 0
        assert pixels[0, 0] == 0

    def test_invalid_level_exits_with_error(self):
        result = _run_module("0")
        assert result.returncode == 1
        assert result.stdout == b""
        assert b"Error: Cluster level must be at least 1, got 0" in result.stderr

    def test_usage_error_exits_with_two(self):
        result = _run_module("deep")
        assert result.returncode == 2
        assert result.stdout == b""
