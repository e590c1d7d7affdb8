import matplotlib

# Preview tests draw into an off-screen canvas.
matplotlib.use("Agg")

import numpy as np
import pytest

from clipedit.chainable.basex import FrameData, VideoMetadata, FileNotOpenable, WriterInitFailed


def make_frames(count, width=6, height=4, channels=3):
    """Frames whose pixels all hold the frame number (times 10)."""
    return [
        np.full((height, width, channels), (i * 10) % 256, dtype=np.uint8)
        for i in range(count)
    ]


class FakeSource:
    """In-memory stand-in for FrameSource."""

    def __init__(self, frames, fps=30.0, fail_open=False):
        self.frames = frames
        self.fps = fps
        self.fail_open = fail_open
        self.position = 0
        self.seeks = []
        self.opened = False
        self.closed = False

    def __call__(self, path):
        self.path = path
        return self

    def open(self):
        if self.fail_open:
            raise FileNotOpenable(f"Video file does not exist: {self.path}", component="FrameSource")
        self.opened = True
        return self

    @property
    def metadata(self):
        height, width = self.frames[0].shape[:2] if self.frames else (0, 0)
        return VideoMetadata(width=width, height=height, fps=self.fps, frame_count=len(self.frames))

    def read_next(self):
        if self.position >= len(self.frames):
            return None
        frame = FrameData(pixels=self.frames[self.position], index=self.position)
        self.position += 1
        return frame

    def seek(self, frame_index):
        self.seeks.append(frame_index)
        self.position = frame_index

    def close(self):
        self.closed = True


class RecordingSink:
    """Stand-in for FrameSink that keeps written frames in memory."""

    def __init__(self, fail_open=False):
        self.fail_open = fail_open
        self.frames = []
        self.opened = False
        self.closed = False
        self.args = None

    def __call__(self, path, codec, fps, frame_size, **kwargs):
        self.args = dict(path=path, codec=codec, fps=fps, frame_size=frame_size, **kwargs)
        self.frame_size = tuple(frame_size)
        return self

    def open(self):
        if self.fail_open:
            raise WriterInitFailed("Could not create video writer", component="FrameSink")
        self.opened = True
        return self

    def write(self, frame):
        assert frame.size == self.frame_size
        self.frames.append(frame.pixels)

    @property
    def frames_written(self):
        return len(self.frames)

    def close(self):
        self.closed = True


class ScriptedPreview:
    """Preview that requests cancellation after a given number of frames."""

    def __init__(self, cancel_after=None):
        self.cancel_after = cancel_after
        self.shown = []
        self.closed = False

    def show(self, frame):
        self.shown.append(frame.index)
        return self.cancel_after is not None and len(self.shown) >= self.cancel_after

    def close(self):
        self.closed = True


@pytest.fixture
def sample_rgb_frame() -> FrameData:
    """Small 4x2 RGB frame with distinct pixel values."""
    pixels = np.arange(2 * 4 * 3, dtype=np.uint8).reshape(2, 4, 3)
    return FrameData(pixels=pixels, index=7)


@pytest.fixture
def black_frame() -> FrameData:
    return FrameData(pixels=np.zeros((120, 240, 3), dtype=np.uint8))


@pytest.fixture
def fake_source():
    return FakeSource(make_frames(10))


@pytest.fixture
def recording_sink():
    return RecordingSink()


@pytest.fixture
def write_clip(tmp_path):
    """Write a real synthetic clip with FrameSink and return its path."""
    from clipedit.chainable.sinkx import FrameSink

    def _write(name="input.avi", count=10, width=64, height=48, fps=30.0):
        path = tmp_path / name
        with FrameSink(path, "mpeg4", fps, (width, height)) as sink:
            for i, pixels in enumerate(make_frames(count, width, height)):
                sink.write(FrameData(pixels=pixels, index=i))
        return path

    return _write
