import numpy as np
import pytest

from clipedit.chainable.basex import FileNotOpenable
from clipedit.chainable.openx import FrameSource, open_source


def read_all(source):
    frames = []
    while True:
        frame = source.read_next()
        if frame is None:
            return frames
        frames.append(frame)


def test_frame_source_reads_metadata_and_frames(write_clip):
    path = write_clip(count=10, width=64, height=48, fps=30.0)

    with FrameSource(path) as source:
        metadata = source.metadata
        frames = read_all(source)

    assert (metadata.width, metadata.height) == (64, 48)
    assert metadata.fps == pytest.approx(30.0)
    assert metadata.frame_count == 10
    assert metadata.codec == "mpeg4"
    assert len(frames) == 10
    assert frames[0].pixels.shape == (48, 64, 3)
    assert [frame.index for frame in frames] == list(range(10))
    assert not source.is_open


def test_frame_source_seek_returns_requested_frame(write_clip):
    path = write_clip(count=10)

    source = open_source(path)
    try:
        source.seek(5)
        frame = source.read_next()
        assert frame.index == 5
        assert abs(float(frame.pixels.mean()) - 50) < 8
        assert source.position == 6

        source.seek(0)
        assert abs(float(source.read_next().pixels.mean())) < 8
    finally:
        source.close()


def test_frame_source_seek_rejects_negative_index(write_clip):
    with FrameSource(write_clip()) as source:
        with pytest.raises(ValueError):
            source.seek(-1)


def test_frame_source_missing_file(tmp_path):
    with pytest.raises(FileNotOpenable):
        FrameSource(tmp_path / "missing.mp4").open()


def test_frame_source_directory_is_not_a_file(tmp_path):
    with pytest.raises(FileNotOpenable):
        FrameSource(tmp_path).open()


def test_frame_source_garbage_file(tmp_path):
    path = tmp_path / "broken.mp4"
    path.write_bytes(b"this is not a video")

    source = FrameSource(path)
    with pytest.raises(FileNotOpenable) as excinfo:
        source.open()

    assert excinfo.value.details["file_path"] == str(path)
    assert not source.is_open


def test_read_before_open_raises(tmp_path):
    with pytest.raises(RuntimeError):
        FrameSource(tmp_path / "x.avi").read_next()
