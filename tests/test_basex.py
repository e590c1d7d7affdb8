import logging

import numpy as np
import pytest

from clipedit.chainable.basex import (
    FrameData, FrameStage, LogManager, ProcessingError, ProgressReporter, build_chain,
)
from clipedit.chainable.filterx import FrameFilter, FilterId
from clipedit.chainable.rotatex import FrameRotator


class ExplodingStage(FrameStage):
    def process(self, frame):
        raise RuntimeError("boom")


def test_frame_data_rejects_bad_dimensions():
    with pytest.raises(ValueError):
        FrameData(pixels=np.zeros((2, 2, 2, 2), dtype=np.uint8))


def test_frame_data_properties(sample_rgb_frame):
    assert sample_rgb_frame.size == (4, 2)
    assert sample_rgb_frame.channels == 3
    assert not sample_rgb_frame.is_empty
    assert FrameData(pixels=np.zeros((0, 0, 3), dtype=np.uint8)).is_empty


def test_chain_runs_stages_in_order(sample_rgb_frame):
    head = build_chain([FrameRotator(90), FrameFilter(FilterId.GRAYSCALE)])

    result = head.execute(sample_rgb_frame)

    components = [step["component"] for step in result.metadata["processing_history"]]
    assert components == ["FrameRotator", "FrameFilter"]
    assert result.size == (2, 4)


def test_build_chain_empty():
    assert build_chain([]) is None


def test_execute_wraps_unexpected_errors(sample_rgb_frame):
    with pytest.raises(ProcessingError) as excinfo:
        ExplodingStage().execute(sample_rgb_frame)

    assert excinfo.value.component == "ExplodingStage"
    assert excinfo.value.details["original_exception"] == "RuntimeError"
    assert excinfo.value.details["frame_index"] == sample_rgb_frame.index


def test_execute_rejects_non_frame_input():
    with pytest.raises(ProcessingError):
        FrameRotator(90).execute(np.zeros((2, 2, 3), dtype=np.uint8))


def test_empty_frames_pass_through_stages():
    empty = FrameData(pixels=np.zeros((0, 0, 3), dtype=np.uint8))

    assert ExplodingStage().execute(empty) is empty


def test_log_manager_writes_run_file(tmp_path):
    LogManager.initialize(str(tmp_path / "logs"))
    try:
        LogManager.log_info("Test", "hello from the test")
        LogManager.log_error("Test", "failure", ValueError("bad"))
        log_path = LogManager.get_log_file_path()
    finally:
        LogManager.cleanup()

    content = log_path.read_text(encoding="utf-8")
    assert "hello from the test" in content
    assert "ValueError: bad" in content
    assert not LogManager._initialized


def test_progress_reporter_logs_milestones(caplog):
    progress = ProgressReporter(10, "Writing frames")

    with caplog.at_level(logging.INFO, logger="clipedit.Progress"):
        for _ in range(10):
            progress.update()
        progress.finish()

    messages = [record.getMessage() for record in caplog.records]
    assert "Writing frames: 100.0% (10/10)" in messages
    assert any("Complete" in message for message in messages)
