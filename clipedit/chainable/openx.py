"""
Video file opening and sequential frame decoding component.

This component handles video file validation, metadata extraction and
frame-by-frame decoding with PyAV, yielding FrameData one frame at a time
so only the current frame is held in memory.
"""

import av
import math
from pathlib import Path
from typing import Optional, Union

from .basex import FrameData, VideoMetadata, ProcessingError, FileNotOpenable, LogManager, get_component_logger


class FrameSource:
    """Component for opening a video file and reading its frames sequentially."""

    SUPPORTED_FORMATS = {
        'mp4', 'avi', 'mov', 'mkv', 'webm', 'flv', 'wmv', 'm4v'
    }

    DEFAULT_FPS = 30.0

    def __init__(self, file_path: Union[str, Path]):
        """
        Initialize FrameSource component.

        Args:
            file_path: Path to the video file
        """
        self.name = "FrameSource"
        self.file_path = Path(file_path)
        self.logger = get_component_logger(self.name)

        self._container = None
        self._stream = None
        self._decoder = None
        self._metadata: Optional[VideoMetadata] = None
        self._position = 0
        self._skip_until = 0

    def _validate_file(self):
        """Validate the video file exists and is a regular file."""
        if not self.file_path.exists():
            raise FileNotOpenable(
                f"Video file does not exist: {self.file_path}",
                component=self.name
            )

        if not self.file_path.is_file():
            raise FileNotOpenable(
                f"Path is not a file: {self.file_path}",
                component=self.name
            )

        file_extension = self.file_path.suffix.lower().lstrip('.')
        if file_extension not in self.SUPPORTED_FORMATS:
            self.logger.warning(
                f"File extension '.{file_extension}' not in supported formats: {sorted(self.SUPPORTED_FORMATS)}. "
                "Attempting to open anyway..."
            )

    def open(self) -> 'FrameSource':
        """Open the container and extract stream metadata."""
        self._validate_file()

        try:
            self._container = av.open(str(self.file_path))
            if not self._container.streams.video:
                raise ValueError("No video stream found in file")
            self._stream = self._container.streams.video[0]
        except Exception as av_error:
            self.close()
            error_msg = f"Could not open video file {self.file_path}: {av_error}"
            LogManager.log_error(self.name, error_msg, av_error)
            raise FileNotOpenable(
                error_msg,
                component=self.name,
                details={'file_path': str(self.file_path), 'av_error': str(av_error)}
            ) from av_error

        self._metadata = self._extract_metadata(self._stream)
        self._decoder = self._container.decode(self._stream)
        self._position = 0
        self._skip_until = 0

        meta = self._metadata
        self.logger.info(f"Video: {meta.width}x{meta.height}, {meta.fps:.2f} fps, ~{meta.frame_count} frames")
        LogManager.log_info(self.name, f"Video metadata: {meta}")
        return self

    def _extract_metadata(self, video_stream) -> VideoMetadata:
        frame_rate = float(video_stream.average_rate) if video_stream.average_rate else 0.0
        if frame_rate <= 0:
            self.logger.warning(f"Invalid or missing FPS, defaulting to {self.DEFAULT_FPS}")
            frame_rate = self.DEFAULT_FPS

        if video_stream.duration and video_stream.time_base:
            duration = float(video_stream.duration * video_stream.time_base)
        elif self._container.duration:
            duration = self._container.duration / av.time_base
        else:
            duration = 0.0

        # Estimate frame count when the container does not record it
        if video_stream.frames:
            frame_count = int(video_stream.frames)
        else:
            frame_count = int(duration * frame_rate)

        codec = video_stream.codec_context.name if video_stream.codec_context else 'unknown'
        return VideoMetadata(
            width=video_stream.width,
            height=video_stream.height,
            fps=frame_rate,
            frame_count=frame_count,
            duration=duration,
            codec=codec or 'unknown',
            pixel_format=str(video_stream.pix_fmt) if video_stream.pix_fmt else 'unknown'
        )

    @property
    def metadata(self) -> VideoMetadata:
        self._require_open()
        return self._metadata

    @property
    def position(self) -> int:
        """Index of the frame the next read_next() call returns."""
        return self._position

    @property
    def is_open(self) -> bool:
        return self._container is not None

    def _require_open(self):
        if self._container is None:
            raise RuntimeError("FrameSource not opened. Call open() or use as context manager.")

    def _frame_index(self, frame) -> Optional[int]:
        if frame.pts is None or self._stream.time_base is None:
            return None
        start = self._stream.start_time or 0
        seconds = float((frame.pts - start) * self._stream.time_base)
        return int(round(seconds * self._metadata.fps))

    def read_next(self) -> Optional[FrameData]:
        """
        Decode the next frame.

        Returns:
            FrameData in RGB, or None at end of stream
        """
        self._require_open()

        try:
            for frame in self._decoder:
                if self._skip_until:
                    index = self._frame_index(frame)
                    if index is not None and index < self._skip_until:
                        continue
                    self._skip_until = 0

                pixels = frame.to_ndarray(format='rgb24')
                data = FrameData(pixels=pixels, index=self._position, metadata={'source_file': str(self.file_path)})
                self._position += 1
                return data
        except av.error.FFmpegError as av_error:
            error_msg = f"FFmpeg error while decoding frame {self._position}: {av_error}"
            LogManager.log_error(self.name, error_msg, av_error)
            raise ProcessingError(
                error_msg,
                component=self.name,
                details={'file_path': str(self.file_path), 'frame_index': self._position}
            ) from av_error

        return None

    def seek(self, frame_index: int):
        """
        Reposition the read cursor so the next read returns frame_index.

        Seeks to the nearest preceding keyframe, then drops decoded frames
        until the requested index is reached.
        """
        self._require_open()
        if frame_index < 0:
            raise ValueError(f"Frame index must be non-negative, got {frame_index}")

        time_base = self._stream.time_base
        start = self._stream.start_time or 0
        if time_base:
            offset = start + int(math.floor(frame_index / self._metadata.fps / time_base))
        else:
            offset = start
        self._container.seek(offset, stream=self._stream, backward=True, any_frame=False)
        self._decoder = self._container.decode(self._stream)
        self._skip_until = frame_index
        self._position = frame_index
        LogManager.log_debug(self.name, f"Seeked to frame {frame_index} (offset {offset})")

    def close(self):
        """Release the container. Safe to call more than once."""
        if self._container is not None:
            self._container.close()
            LogManager.log_info(self.name, f"Closed {self.file_path} after {self._position} frames")
        self._container = None
        self._stream = None
        self._decoder = None

    def __enter__(self):
        return self.open()

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


def open_source(file_path: Union[str, Path]) -> FrameSource:
    """Convenience function returning an opened FrameSource."""
    return FrameSource(file_path).open()
