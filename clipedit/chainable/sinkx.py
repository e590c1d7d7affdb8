"""
Video encoding component.

Wraps a PyAV output container and a single video stream; frames of a fixed
size are encoded and muxed one at a time.
"""

import av
import numpy as np
from fractions import Fraction
from pathlib import Path
from typing import Optional, Tuple, Union

from .basex import FrameData, ProcessingError, WriterInitFailed, LogManager, get_component_logger


class FrameSink:
    """Component for encoding frames into an output video file."""

    def __init__(self,
                 file_path: Union[str, Path],
                 codec: str,
                 fps: float,
                 frame_size: Tuple[int, int],
                 codec_tag: Optional[str] = None,
                 pixel_format: str = 'yuv420p'):
        """
        Initialize FrameSink component.

        Args:
            file_path: Output video path (overwritten if it exists)
            codec: Encoder name understood by FFmpeg ('mpeg4', 'libx264', 'mjpeg', ...)
            fps: Output frame rate
            frame_size: (width, height) every written frame must have
            codec_tag: Optional four character code stored in the container (e.g. 'XVID')
            pixel_format: Encoder pixel format
        """
        self.name = "FrameSink"
        self.file_path = Path(file_path)
        self.codec = codec
        self.fps = fps
        self.frame_size = tuple(frame_size)
        self.codec_tag = codec_tag
        self.pixel_format = pixel_format
        self.logger = get_component_logger(self.name)

        self.frames_written = 0
        self._container = None
        self._stream = None

    def open(self) -> 'FrameSink':
        """Create the output container and configure the encoder."""
        width, height = self.frame_size
        try:
            if width <= 0 or height <= 0:
                raise ValueError(f"Invalid frame size: {width}x{height}")
            if self.fps <= 0:
                raise ValueError(f"Invalid frame rate: {self.fps}")
            if self.codec_tag is not None and len(self.codec_tag) != 4:
                raise ValueError(f"Codec tag must be four characters, got {self.codec_tag!r}")

            self._container = av.open(str(self.file_path), mode='w')

            fps_fraction = Fraction(self.fps).limit_denominator(1001)
            self._stream = self._container.add_stream(self.codec, rate=fps_fraction)
            self._stream.width = width
            self._stream.height = height
            self._stream.pix_fmt = self.pixel_format
            if self.codec_tag:
                self._stream.codec_context.codec_tag = self.codec_tag
        except Exception as e:
            self._abort()
            error_msg = f"Could not create video writer for {self.file_path}: {e}"
            LogManager.log_error(self.name, error_msg, e)
            raise WriterInitFailed(
                error_msg,
                component=self.name,
                details={'file_path': str(self.file_path), 'codec': self.codec, 'frame_size': self.frame_size}
            ) from e

        self.logger.info(f"Writing {width}x{height} @ {self.fps:.2f} fps with {self.codec} to {self.file_path}")
        LogManager.log_info(self.name, f"Writer opened: codec={self.codec}, tag={self.codec_tag}, "
                                       f"size={self.frame_size}, fps={self.fps}")
        return self

    @property
    def is_open(self) -> bool:
        return self._container is not None

    def write(self, frame: FrameData):
        """Encode one frame and mux the resulting packets."""
        if self._container is None:
            raise RuntimeError("FrameSink not opened. Call open() or use as context manager.")

        if frame.size != self.frame_size:
            raise ProcessingError(
                f"Frame {frame.index} is {frame.size[0]}x{frame.size[1]}, "
                f"writer expects {self.frame_size[0]}x{self.frame_size[1]}",
                component=self.name,
                details={'frame_index': frame.index}
            )

        pixels = frame.pixels
        if pixels.ndim == 2:
            pixels = np.stack([pixels] * 3, axis=-1)
        elif pixels.shape[2] == 1:
            pixels = np.repeat(pixels, 3, axis=2)

        video_frame = av.VideoFrame.from_ndarray(np.ascontiguousarray(pixels, dtype=np.uint8), format='rgb24')
        try:
            for packet in self._stream.encode(video_frame):
                self._container.mux(packet)
        except av.error.FFmpegError as av_error:
            error_msg = f"FFmpeg error while encoding frame {frame.index}: {av_error}"
            LogManager.log_error(self.name, error_msg, av_error)
            raise ProcessingError(error_msg, component=self.name, details={'frame_index': frame.index}) from av_error
        self.frames_written += 1

    def close(self):
        """Flush the encoder and release the container. Safe to call more than once."""
        if self._container is None:
            return
        try:
            for packet in self._stream.encode():
                self._container.mux(packet)
        except av.error.FFmpegError as av_error:
            error_msg = f"FFmpeg error while flushing {self.file_path}: {av_error}"
            LogManager.log_error(self.name, error_msg, av_error)
            raise ProcessingError(error_msg, component=self.name) from av_error
        finally:
            self._container.close()
            self._container = None
            self._stream = None
            LogManager.log_info(self.name, f"Closed {self.file_path}: {self.frames_written} frames written")

    def _abort(self):
        if self._container is not None:
            self._container.close()
        self._container = None
        self._stream = None

    def __enter__(self):
        return self.open()

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
