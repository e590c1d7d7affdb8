"""
Chainable frame processing components.

This package provides a modular, chainable per-frame editing architecture where
each component has a single responsibility: decoding, one pixel transform,
encoding, or previewing. Transform stages can be linked together to form the
editing pipeline.
"""

from .basex import (
    FrameData, VideoMetadata, FrameStage, ProcessingError, FileNotOpenable,
    FirstFrameUnreadable, WriterInitFailed, ProgressReporter, LogManager, build_chain,
)
from .openx import FrameSource, open_source
from .sinkx import FrameSink
from .resizex import FrameResizer, resize_frame
from .rotatex import FrameRotator
from .filterx import FrameFilter, FilterId
from .textx import TextOverlay
from .previewx import FramePreview, NullPreview

__all__ = [
    # Base classes
    'FrameData',
    'VideoMetadata',
    'FrameStage',
    'ProcessingError',
    'FileNotOpenable',
    'FirstFrameUnreadable',
    'WriterInitFailed',
    'ProgressReporter',
    'LogManager',
    'build_chain',

    # Components
    'FrameSource',
    'FrameSink',
    'FrameResizer',
    'FrameRotator',
    'FrameFilter',
    'FilterId',
    'TextOverlay',
    'FramePreview',
    'NullPreview',

    # Convenience functions
    'open_source',
    'resize_frame',
]
