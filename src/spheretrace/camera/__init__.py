"""Camera module for primary ray generation.

Components:
    pinhole: Fixed-eye pinhole camera looking down +Z

Note: pinhole declares Taichi fields at import time; import it after
ti.init().
"""
