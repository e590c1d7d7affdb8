"""
Editing session: opens the source, resolves parameters, and streams frames
through the stage chain into the sink while previewing them.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional, Tuple, Union

from .chainable.basex import (
    FrameData, FrameStage, VideoMetadata, ProcessingError, FirstFrameUnreadable,
    LogManager, ProgressReporter, build_chain, get_component_logger,
)
from .chainable.openx import FrameSource
from .chainable.sinkx import FrameSink
from .chainable.resizex import FrameResizer
from .chainable.rotatex import FrameRotator
from .chainable.filterx import FrameFilter
from .chainable.textx import TextOverlay
from .chainable.previewx import FramePreview, NullPreview
from .params import EditParameters, SessionSettings


class SessionState(Enum):
    IDLE = 'idle'
    METADATA_LOADED = 'metadata_loaded'
    PARAMETERS_RESOLVED = 'parameters_resolved'
    STREAMING = 'streaming'
    FINISHED = 'finished'
    FAILED = 'failed'


@dataclass
class SessionResult:
    """Outcome of EditSession.run()."""
    state: SessionState
    frames_written: int = 0
    frames_skipped: int = 0
    cancelled: bool = False
    output_size: Optional[Tuple[int, int]] = None
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.state is SessionState.FINISHED


def build_stages(params: EditParameters, interpolation: str = 'lanczos') -> List[FrameStage]:
    """
    Stages in the fixed pipeline order: resize, rotate, filter, text.

    The same list sizes the writer and transforms every frame, so the output
    size always matches what is written.
    """
    return [
        FrameResizer(params.target_resolution, interpolation=interpolation),
        FrameRotator(params.rotation_angle),
        FrameFilter(params.filter_id),
        TextOverlay(params.overlay_text),
    ]


class EditSession:
    """Single-use controller for one editing run."""

    def __init__(self,
                 input_path: Union[str, Path],
                 output_path: Union[str, Path],
                 settings: Optional[SessionSettings] = None,
                 source_factory: Callable[..., FrameSource] = FrameSource,
                 sink_factory: Callable[..., FrameSink] = FrameSink,
                 preview=None):
        self.name = "EditSession"
        self.input_path = Path(input_path)
        self.output_path = Path(output_path)
        self.settings = settings or SessionSettings()
        self.source_factory = source_factory
        self.sink_factory = sink_factory
        self.preview = preview
        self.logger = get_component_logger(self.name)

        self.state = SessionState.IDLE
        self.source: Optional[FrameSource] = None
        self.params: Optional[EditParameters] = None
        self.chain: Optional[FrameStage] = None

    def _require_state(self, *states: SessionState):
        if self.state not in states:
            raise RuntimeError(
                f"{self.name} is {self.state.value}, expected {' or '.join(s.value for s in states)}"
            )

    def _fail(self, error: ProcessingError) -> str:
        self.state = SessionState.FAILED
        message = str(error)
        self.logger.error(message)
        LogManager.log_error(error.component or self.name, message, error)
        return message

    @property
    def metadata(self) -> VideoMetadata:
        self._require_state(SessionState.METADATA_LOADED, SessionState.PARAMETERS_RESOLVED)
        return self.source.metadata

    def load(self) -> VideoMetadata:
        """Open the input and read its metadata. Raises FileNotOpenable."""
        self._require_state(SessionState.IDLE)
        source = self.source_factory(self.input_path)
        try:
            source.open()
        except ProcessingError as e:
            self._fail(e)
            raise

        self.source = source
        self.state = SessionState.METADATA_LOADED
        LogManager.log_info(self.name, f"Loaded {self.input_path}: {source.metadata}")
        return source.metadata

    def resolve(self, params: EditParameters, interpolation: str = 'lanczos') -> EditParameters:
        """Fix the parameters for this run and build the stage chain."""
        self._require_state(SessionState.METADATA_LOADED)
        total_frames = self.source.metadata.frame_count
        if total_frames > 0:
            params = params.clamped_to(total_frames)

        self.params = params
        self.chain = build_chain(build_stages(params, interpolation=interpolation))
        self.state = SessionState.PARAMETERS_RESOLVED
        self.logger.info(f"Parameters: {params}")
        LogManager.log_info(self.name, f"Resolved parameters: {params}")
        return params

    def _transform(self, frame: FrameData) -> FrameData:
        return self.chain.execute(frame)

    def _make_preview(self):
        if self.preview is not None:
            return self.preview
        if not self.settings.preview:
            return NullPreview()
        return FramePreview(
            window_title=self.settings.window_title,
            delay_ms=self.settings.preview_delay_ms,
            cancel_keys=self.settings.cancel_keys,
        )

    def _open_sink(self, frame_size: Tuple[int, int]) -> FrameSink:
        sink = self.sink_factory(
            self.output_path,
            self.settings.codec,
            self.source.metadata.fps,
            frame_size,
            codec_tag=self.settings.codec_tag,
            pixel_format=self.settings.pixel_format,
        )
        return sink.open()

    def run(self) -> SessionResult:
        """
        Stream the trim window through the stages into the output file.

        Fatal errors end the run in FAILED and are reported in the result;
        source, sink and preview are released on every path.
        """
        self._require_state(SessionState.PARAMETERS_RESOLVED)
        result = SessionResult(state=self.state)
        start, end = self.params.trim_range
        # An unknown frame count leaves the window open-ended
        stop = end if end > start else None

        preview = self._make_preview()
        sink = None
        try:
            if start > 0:
                self.source.seek(start)

            first = self.source.read_next()
            if first is None:
                raise FirstFrameUnreadable(
                    f"Could not read frame {start} of {self.input_path}",
                    component=self.name,
                    details={'frame_index': start}
                )
            frame = self._transform(first)
            if frame.is_empty:
                raise FirstFrameUnreadable(
                    f"Frame {start} is empty after processing",
                    component=self.name,
                    details={'frame_index': start}
                )

            result.output_size = frame.size
            self.logger.info(f"Output size: {frame.width}x{frame.height}")
            sink = self._open_sink(frame.size)

            self.state = SessionState.STREAMING
            progress = ProgressReporter((stop - start) if stop else 0, "Writing frames")
            index = start

            while True:
                if frame.is_empty or frame.size != result.output_size:
                    message = f"The frame is empty or invalid at frame number {index}, skipping"
                    self.logger.warning(message)
                    LogManager.log_warning(self.name, message)
                    result.frames_skipped += 1
                else:
                    sink.write(frame)
                    result.frames_written += 1
                    if preview.show(frame):
                        result.cancelled = True
                        self.logger.info("Video playback interrupted by user.")
                        break
                progress.update()

                index += 1
                if stop is not None and index >= stop:
                    break
                raw = self.source.read_next()
                if raw is None:
                    self.logger.info("End of video.")
                    break
                frame = self._transform(raw)

            progress.finish()
            self.state = SessionState.FINISHED
        except ProcessingError as e:
            result.error = self._fail(e)
        finally:
            self._release(sink, preview, result)

        result.state = self.state
        LogManager.log_info(self.name, f"Session result: {result}")
        return result

    def _release(self, sink: Optional[FrameSink], preview, result: SessionResult):
        try:
            if sink is not None:
                sink.close()
        except ProcessingError as e:
            result.error = result.error or self._fail(e)
        finally:
            try:
                self.close()
            finally:
                preview.close()

    def close(self):
        """Release the source. Safe to call more than once."""
        if self.source is not None:
            self.source.close()
            self.source = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
