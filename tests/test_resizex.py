import numpy as np
import pytest

from clipedit.chainable.basex import FrameData
from clipedit.chainable.resizex import FrameResizer, resize_frame


def test_frame_resizer_changes_resolution_and_tracks_metadata(sample_rgb_frame):
    resizer = FrameResizer(target_resolution=(2, 1))

    resized = resizer.execute(sample_rgb_frame)

    assert resized.pixels.shape == (1, 2, 3)
    assert resized.size == (2, 1)
    history = resized.metadata.get("processing_history", [])
    assert any(step["component"] == "FrameResizer" for step in history)


@pytest.mark.parametrize("target", [(0, 10), (10, 0), (0, 0), (-5, 8)])
def test_frame_resizer_zero_or_negative_target_keeps_size(sample_rgb_frame, target):
    result = FrameResizer(target).execute(sample_rgb_frame)

    assert result.size == sample_rgb_frame.size
    assert np.array_equal(result.pixels, sample_rgb_frame.pixels)


def test_frame_resizer_noop_when_resolution_matches(sample_rgb_frame):
    result = resize_frame(sample_rgb_frame, sample_rgb_frame.size)

    assert result.size == sample_rgb_frame.size
    assert np.array_equal(result.pixels, sample_rgb_frame.pixels)


def test_frame_resizer_upscale_with_each_interpolation():
    frame = FrameData(pixels=np.full((4, 6, 3), 200, dtype=np.uint8))

    for interpolation in FrameResizer.INTERPOLATIONS:
        result = FrameResizer((12, 9), interpolation=interpolation).execute(frame)
        assert result.pixels.shape == (9, 12, 3)
        assert result.pixels.dtype == np.uint8


def test_frame_resizer_keeps_single_channel_axis():
    frame = FrameData(pixels=np.zeros((4, 4, 1), dtype=np.uint8))

    result = FrameResizer((8, 2)).execute(frame)

    assert result.pixels.shape == (2, 8, 1)


def test_frame_resizer_rejects_unknown_interpolation():
    with pytest.raises(ValueError):
        FrameResizer((10, 10), interpolation="bogus")
