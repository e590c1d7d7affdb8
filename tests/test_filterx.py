import numpy as np
import pytest

from clipedit.chainable.basex import FrameData
from clipedit.chainable.filterx import FrameFilter, FilterId


def test_grayscale_preserves_channel_count(sample_rgb_frame):
    result = FrameFilter(FilterId.GRAYSCALE).execute(sample_rgb_frame)

    assert result.channels == sample_rgb_frame.channels
    assert result.pixels.shape == sample_rgb_frame.pixels.shape
    assert np.array_equal(result.pixels[:, :, 0], result.pixels[:, :, 1])
    assert np.array_equal(result.pixels[:, :, 1], result.pixels[:, :, 2])


def test_grayscale_uses_luminance_weights():
    pixels = np.zeros((1, 3, 3), dtype=np.uint8)
    pixels[0, 0] = (255, 0, 0)
    pixels[0, 1] = (0, 255, 0)
    pixels[0, 2] = (0, 0, 255)

    result = FrameFilter("grayscale").execute(FrameData(pixels=pixels))

    assert list(result.pixels[0, :, 0]) == [76, 149, 29]


def test_grayscale_on_single_channel_frame_is_unchanged():
    pixels = np.arange(12, dtype=np.uint8).reshape(3, 4)

    result = FrameFilter(FilterId.GRAYSCALE).execute(FrameData(pixels=pixels))

    assert np.array_equal(result.pixels, pixels)


def test_blur_keeps_shape_and_smooths():
    pixels = np.zeros((31, 31, 3), dtype=np.uint8)
    pixels[15, 15] = 255
    frame = FrameData(pixels=pixels)

    result = FrameFilter(FilterId.BLUR).execute(frame)

    assert result.pixels.shape == pixels.shape
    assert result.pixels[15, 15, 0] < 255
    assert result.pixels[15, 16, 0] > 0
    assert frame.pixels[15, 15, 0] == 255


def test_blur_leaves_uniform_frame_unchanged():
    pixels = np.full((20, 20, 3), 90, dtype=np.uint8)

    result = FrameFilter(FilterId.BLUR).execute(FrameData(pixels=pixels))

    assert np.abs(result.pixels.astype(int) - 90).max() <= 1


def test_none_filter_is_noop(sample_rgb_frame):
    result = FrameFilter(FilterId.NONE).execute(sample_rgb_frame)

    assert result is sample_rgb_frame


def test_unknown_filter_rejected():
    with pytest.raises(ValueError):
        FrameFilter("sepia")


@pytest.mark.parametrize("choice, expected", [(1, FilterId.GRAYSCALE), (2, FilterId.BLUR), (7, FilterId.NONE)])
def test_filter_menu_mapping(choice, expected):
    assert FilterId.from_menu(choice) is expected
