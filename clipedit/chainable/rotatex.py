"""
Frame rotation component.

Rotates frames by quarter turns: 90 clockwise, 180, or 270 (90 counter-clockwise).
Any other angle passes frames through unchanged.
"""

import cv2
from typing import Dict, Any

from .basex import FrameStage, FrameData


class FrameRotator(FrameStage):
    """Stage for quarter-turn frame rotation."""

    ROTATIONS = {
        90: cv2.ROTATE_90_CLOCKWISE,
        180: cv2.ROTATE_180,
        270: cv2.ROTATE_90_COUNTERCLOCKWISE,
    }

    def __init__(self, angle: int):
        super().__init__("FrameRotator")
        self.angle = int(angle)
        if self.angle not in self.ROTATIONS and self.angle != 0:
            self.logger.warning(f"Unsupported rotation angle {self.angle}; frames will not be rotated")

    @property
    def is_noop(self) -> bool:
        return self.angle not in self.ROTATIONS

    def describe(self) -> Dict[str, Any]:
        return {'angle': self.angle}

    def process(self, frame: FrameData) -> FrameData:
        if self.is_noop:
            return frame.derive(frame.pixels)
        return frame.derive(cv2.rotate(frame.pixels, self.ROTATIONS[self.angle]))
