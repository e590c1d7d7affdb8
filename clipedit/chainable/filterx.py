"""
Frame color filter component.

Supports a grayscale filter (luminance expanded back to the input channel
layout so later stages and the encoder see the same channel count) and a
fixed-kernel Gaussian blur.
"""

import cv2
from enum import Enum
from typing import Dict, Any, Union

from .basex import FrameStage, FrameData
from ..cpu.grayscale import grayscale_cpu


class FilterId(str, Enum):
    NONE = 'none'
    GRAYSCALE = 'grayscale'
    BLUR = 'blur'

    @classmethod
    def from_menu(cls, choice: int) -> 'FilterId':
        """Map the filter submenu (1 grayscale, 2 blur) to a filter id."""
        return {1: cls.GRAYSCALE, 2: cls.BLUR}.get(choice, cls.NONE)


class FrameFilter(FrameStage):
    """Stage applying one of the FilterId filters."""

    BLUR_KERNEL = (15, 15)
    BLUR_SIGMA = 0  # derived from the kernel size by OpenCV

    def __init__(self, filter_id: Union[FilterId, str] = FilterId.NONE):
        super().__init__("FrameFilter")
        try:
            self.filter_id = FilterId(filter_id)
        except ValueError:
            raise ValueError(
                f"Unknown filter: {filter_id}. Use one of {[f.value for f in FilterId]}"
            ) from None

    @property
    def is_noop(self) -> bool:
        return self.filter_id is FilterId.NONE

    def describe(self) -> Dict[str, Any]:
        params = {'filter': self.filter_id.value}
        if self.filter_id is FilterId.BLUR:
            params.update(kernel=self.BLUR_KERNEL, sigma=self.BLUR_SIGMA)
        return params

    def process(self, frame: FrameData) -> FrameData:
        if self.filter_id is FilterId.GRAYSCALE:
            return frame.derive(grayscale_cpu(frame.pixels))

        if self.filter_id is FilterId.BLUR:
            blurred = cv2.GaussianBlur(frame.pixels, self.BLUR_KERNEL, self.BLUR_SIGMA)
            if frame.pixels.ndim == 3 and blurred.ndim == 2:
                blurred = blurred[:, :, None]
            return frame.derive(blurred)

        return frame.derive(frame.pixels)
