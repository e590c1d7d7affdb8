"""
CPU luminance conversion for single frames using Numba JIT compilation.
"""

import numpy as np
from numba import jit, prange


@jit(nopython=True, parallel=True)
def rgb_to_luminance_cpu(frame: np.ndarray) -> np.ndarray:
    """Convert an RGB frame (H, W, 3) to luminance (H, W)."""
    height, width = frame.shape[0], frame.shape[1]
    output = np.zeros((height, width), dtype=np.uint8)
    for y in prange(height):
        for x in range(width):
            # Standard RGB to grayscale weights
            gray = int(0.299 * frame[y, x, 0] +
                       0.587 * frame[y, x, 1] +
                       0.114 * frame[y, x, 2])
            output[y, x] = min(255, max(0, gray))
    return output


def grayscale_cpu(frame: np.ndarray) -> np.ndarray:
    """
    Grayscale a frame while keeping its channel layout.

    Args:
        frame: (H, W), (H, W, 1), (H, W, 3) or (H, W, 4) uint8 frame

    Returns:
        Frame of the same shape whose color channels all hold the luminance
    """
    if frame.ndim == 2 or frame.shape[2] == 1:
        return frame.copy()

    luminance = rgb_to_luminance_cpu(np.ascontiguousarray(frame[:, :, :3], dtype=np.uint8))
    output = frame.copy()
    output[:, :, :3] = luminance[:, :, np.newaxis]
    return output
