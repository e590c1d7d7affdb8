"""
Frame resizing component.

Scales each frame to an exact (width, height) with OpenCV. Lanczos-4 is the
default interpolation; a target with a zero or negative dimension keeps the
original size.
"""

import cv2
from typing import Tuple, Dict, Any

from .basex import FrameStage, FrameData


class FrameResizer(FrameStage):
    """Stage for resizing frames to a fixed resolution."""

    INTERPOLATIONS = {
        'lanczos': cv2.INTER_LANCZOS4,
        'linear': cv2.INTER_LINEAR,
        'cubic': cv2.INTER_CUBIC,
        'area': cv2.INTER_AREA,
        'nearest': cv2.INTER_NEAREST,
    }

    def __init__(self, target_resolution: Tuple[int, int], interpolation: str = 'lanczos'):
        """
        Initialize the resizer.

        Args:
            target_resolution: Target (width, height); 0 in either keeps the original size
            interpolation: One of INTERPOLATIONS
        """
        super().__init__("FrameResizer")
        if interpolation not in self.INTERPOLATIONS:
            raise ValueError(
                f"Unknown interpolation: {interpolation}. Use one of {sorted(self.INTERPOLATIONS)}"
            )
        self.target_resolution = (int(target_resolution[0]), int(target_resolution[1]))
        self.interpolation = interpolation

    @property
    def is_noop(self) -> bool:
        width, height = self.target_resolution
        return width <= 0 or height <= 0

    def describe(self) -> Dict[str, Any]:
        return {'target_resolution': self.target_resolution, 'interpolation': self.interpolation}

    def process(self, frame: FrameData) -> FrameData:
        if self.is_noop or frame.size == self.target_resolution:
            return frame.derive(frame.pixels)

        resized = cv2.resize(
            frame.pixels,
            self.target_resolution,
            interpolation=self.INTERPOLATIONS[self.interpolation]
        )
        # cv2 drops a trailing singleton channel
        if frame.pixels.ndim == 3 and resized.ndim == 2:
            resized = resized[:, :, None]
        return frame.derive(resized)


def resize_frame(frame: FrameData, target_resolution: Tuple[int, int], **kwargs) -> FrameData:
    """Convenience function to resize a single frame."""
    return FrameResizer(target_resolution, **kwargs).execute(frame)
