"""Camera module for view and ray generation.

Components:
    pinhole: Pinhole (perspective) camera with a fixed 90 degree vertical
        field of view, one ray through each pixel center

Camera responsibilities:
    - Build the forward/right/up basis from position and look-at point
    - Map integer pixel coordinates (y = 0 at the top) to world-space rays

Note: pinhole declares Taichi fields at import time; import it after
ti.init().
"""
