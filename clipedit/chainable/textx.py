"""
Text overlay component.

Draws a caption at a fixed anchor near the top-left corner with OpenCV's
Hershey simplex font.
"""

import cv2
import numpy as np
from typing import Dict, Any, Tuple

from .basex import FrameStage, FrameData


class TextOverlay(FrameStage):
    """Stage drawing a fixed-style caption on every frame."""

    ANCHOR = (30, 50)  # baseline-left corner (x, y)
    FONT_FACE = cv2.FONT_HERSHEY_SIMPLEX
    FONT_SCALE = 1.0
    THICKNESS = 2
    COLOR: Tuple[int, int, int] = (0, 0, 255)  # blue, frames are RGB

    def __init__(self, text: str = ""):
        super().__init__("TextOverlay")
        self.text = text or ""

    @property
    def is_noop(self) -> bool:
        return not self.text

    def describe(self) -> Dict[str, Any]:
        return {'text': self.text, 'anchor': self.ANCHOR}

    def process(self, frame: FrameData) -> FrameData:
        if self.is_noop:
            return frame.derive(frame.pixels)

        pixels = np.ascontiguousarray(frame.pixels).copy()
        if pixels.ndim == 2 or pixels.shape[2] == 1:
            color = (int(round(sum(self.COLOR) / 3)),)
        else:
            color = self.COLOR + (255,) * (pixels.shape[2] - 3)
        cv2.putText(pixels, self.text, self.ANCHOR, self.FONT_FACE, self.FONT_SCALE,
                    color, self.THICKNESS, cv2.LINE_AA)
        return frame.derive(pixels)
