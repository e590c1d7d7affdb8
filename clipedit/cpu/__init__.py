"""
CPU module for frame processing kernels.
"""

from .grayscale import grayscale_cpu, rgb_to_luminance_cpu


__all__ = ['grayscale_cpu', 'rgb_to_luminance_cpu']
