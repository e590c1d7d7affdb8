"""
Editing parameters resolved once before streaming starts.
"""

import math
from dataclasses import dataclass, replace
from enum import IntEnum
from typing import List, Optional, Tuple

from .chainable.basex import LogManager, VideoMetadata, get_component_logger
from .chainable.filterx import FilterId

logger = get_component_logger("Params")

VALID_ROTATIONS = (0, 90, 180, 270)


class MenuOption(IntEnum):
    SKIP = 0
    TRIM = 1
    ROTATE = 2
    RESIZE = 3
    FILTER = 4
    TEXT = 5


MENU_TEXT = (
    "1. Trim Video\n"
    "2. Rotate Video\n"
    "3. Resize Video\n"
    "4. Apply Filter\n"
    "5. Add Text"
)


@dataclass(frozen=True)
class EditParameters:
    """Everything that decides what happens to each frame."""
    trim_start_frame: int = 0
    trim_end_frame: int = 0
    rotation_angle: int = 0
    target_width: int = 0
    target_height: int = 0
    filter_id: FilterId = FilterId.NONE
    overlay_text: str = ""

    @property
    def target_resolution(self) -> Tuple[int, int]:
        return (self.target_width, self.target_height)

    @property
    def trim_range(self) -> Tuple[int, int]:
        return (self.trim_start_frame, self.trim_end_frame)

    def clamped_to(self, total_frames: int) -> 'EditParameters':
        """Return parameters whose trim window is valid for total_frames."""
        start, end = validate_trim(self.trim_start_frame, self.trim_end_frame, total_frames)
        if (start, end) == self.trim_range:
            return self
        return replace(self, trim_start_frame=start, trim_end_frame=end)


@dataclass(frozen=True)
class SessionSettings:
    """Output and preview settings that are not part of the edit itself."""
    codec: str = 'mpeg4'
    codec_tag: Optional[str] = None
    pixel_format: str = 'yuv420p'
    preview: bool = True
    preview_delay_ms: int = 30
    cancel_keys: Tuple[str, ...] = ('q', 'escape')
    window_title: str = "Video"


def full_range(total_frames: int) -> Tuple[int, int]:
    return (0, max(0, total_frames))


def validate_trim(start_frame: int, end_frame: int, total_frames: int) -> Tuple[int, int]:
    """
    Check 0 <= start < end <= total_frames.

    An invalid window is not an error: it widens to the whole stream.
    """
    if start_frame < 0 or end_frame > total_frames or start_frame >= end_frame:
        message = (f"Invalid trim range [{start_frame}, {end_frame}) for {total_frames} frames; "
                   f"using the full video")
        logger.warning(message)
        LogManager.log_warning("Params", message)
        return full_range(total_frames)
    return (start_frame, end_frame)


def resolve_trim(start_seconds: float, end_seconds: float, fps: float, total_frames: int) -> Tuple[int, int]:
    """
    Convert a [start, end) window in seconds to frame indices.

    Args:
        start_seconds: Trim start time
        end_seconds: Trim end time
        fps: Source frame rate
        total_frames: Source frame count

    Returns:
        (start_frame, end_frame), or the full range when the window is invalid
    """
    start_frame = int(math.floor(start_seconds * fps))
    end_frame = int(math.floor(end_seconds * fps))
    return validate_trim(start_frame, end_frame, total_frames)


def parse_menu_choice(value: str) -> List[MenuOption]:
    """
    Parse the menu answer.

    Accepts one option ("2") or several separated by commas or spaces
    ("2,4"). "0" alone means no extra options. Duplicates are dropped and
    the result is ordered by menu number.
    """
    tokens = [token for token in value.replace(',', ' ').split() if token]
    if not tokens:
        raise ValueError("Enter a number between 0 and 5")

    options = set()
    for token in tokens:
        try:
            number = int(token)
        except ValueError:
            raise ValueError(f"{token!r} is not a number between 0 and 5") from None
        try:
            options.add(MenuOption(number))
        except ValueError:
            raise ValueError(f"{number} is not a menu option (0-5)") from None

    options.discard(MenuOption.SKIP)
    return sorted(options)


def default_parameters(metadata: VideoMetadata) -> EditParameters:
    start, end = full_range(metadata.frame_count)
    return EditParameters(trim_start_frame=start, trim_end_frame=end)
