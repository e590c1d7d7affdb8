"""
Base architecture for chainable frame processing components.

This module provides the foundational classes and data structures for the
per-frame editing pipeline with logging and traceback support.
"""

import numpy as np
from dataclasses import dataclass, field
from typing import Dict, Any, Optional, Tuple
from abc import ABC, abstractmethod
import logging
import traceback
from pathlib import Path
from datetime import datetime


@dataclass(frozen=True)
class VideoMetadata:
    """Container for video stream metadata."""
    width: int
    height: int
    fps: float
    frame_count: int
    duration: float = 0.0
    codec: str = 'unknown'
    pixel_format: str = 'unknown'

    @property
    def resolution(self) -> Tuple[int, int]:
        return (self.width, self.height)


@dataclass
class FrameData:
    """One decoded frame travelling through the stage chain."""
    pixels: np.ndarray  # (height, width, channels) or (height, width)
    index: int = 0
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        """Validate FrameData after initialization."""
        if not isinstance(self.pixels, np.ndarray):
            raise ValueError(f"Pixels must be a numpy array, got {type(self.pixels)}")
        if self.pixels.size and self.pixels.ndim not in [2, 3]:
            raise ValueError(f"Pixels must be 2D or 3D array, got {self.pixels.ndim}D")

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0]) if self.pixels.ndim >= 2 else 0

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1]) if self.pixels.ndim >= 2 else 0

    @property
    def channels(self) -> int:
        """Get the channel count (1 for 2D frames)."""
        return int(self.pixels.shape[2]) if self.pixels.ndim == 3 else 1

    @property
    def size(self) -> Tuple[int, int]:
        """Get (width, height)."""
        return (self.width, self.height)

    @property
    def is_empty(self) -> bool:
        return self.pixels.size == 0 or self.width == 0 or self.height == 0

    def derive(self, pixels: np.ndarray) -> 'FrameData':
        """Build a new FrameData carrying this frame's index and a copy of its metadata."""
        metadata = dict(self.metadata)
        metadata['processing_history'] = list(self.metadata.get('processing_history', []))
        return FrameData(pixels=pixels, index=self.index, metadata=metadata)

    def add_processing_step(self, component_name: str, parameters: Dict[str, Any]):
        """Add a processing step to the metadata history."""
        if 'processing_history' not in self.metadata:
            self.metadata['processing_history'] = []

        self.metadata['processing_history'].append({
            'component': component_name,
            'parameters': parameters.copy(),
        })


class LogManager:
    """Manages file logging for chainable components with full traceback support."""

    LOGGER_NAMESPACE = 'clipedit'

    _log_file_path: Optional[Path] = None
    _file_handler: Optional[logging.FileHandler] = None
    _initialized = False

    @classmethod
    def initialize(cls, log_dir: str = "logs"):
        """Initialize the log manager with a clean log file for this editing run."""
        if cls._initialized:
            cls.cleanup()

        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        cls._log_file_path = log_path / f"clipedit_{timestamp}.log"

        cls._file_handler = logging.FileHandler(cls._log_file_path, mode='w', encoding='utf-8')
        cls._file_handler.setLevel(logging.DEBUG)

        file_formatter = logging.Formatter(
            '%(asctime)s | %(name)s | %(levelname)s | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        cls._file_handler.setFormatter(file_formatter)

        cls._initialized = True

        root_logger = logging.getLogger(cls.LOGGER_NAMESPACE)
        root_logger.addHandler(cls._file_handler)
        root_logger.setLevel(logging.DEBUG)

        cls.log_info("LogManager", f"Initialized logging to: {cls._log_file_path}")

    @classmethod
    def cleanup(cls):
        """Clean up logging resources."""
        if cls._file_handler:
            root_logger = logging.getLogger(cls.LOGGER_NAMESPACE)
            if cls._file_handler in root_logger.handlers:
                root_logger.removeHandler(cls._file_handler)

            cls._file_handler.close()
            cls._file_handler = None

        cls._initialized = False

    @classmethod
    def _file_logger(cls, component: str) -> logging.Logger:
        # No console handler below clipedit.run, so these records reach the file only.
        return logging.getLogger(f'{cls.LOGGER_NAMESPACE}.run.{component}')

    @classmethod
    def log_info(cls, component: str, message: str):
        """Log an info message."""
        if cls._initialized:
            cls._file_logger(component).info(message)

    @classmethod
    def log_error(cls, component: str, message: str, exception: Optional[Exception] = None):
        """Log an error message with full traceback."""
        if cls._initialized:
            logger = cls._file_logger(component)
            logger.error(message)

            if exception is not None:
                tb_str = ''.join(traceback.format_exception(
                    type(exception), exception, exception.__traceback__))
                logger.error(f"Full traceback:\n{tb_str}")

    @classmethod
    def log_warning(cls, component: str, message: str):
        """Log a warning message."""
        if cls._initialized:
            cls._file_logger(component).warning(message)

    @classmethod
    def log_debug(cls, component: str, message: str):
        """Log a debug message."""
        if cls._initialized:
            cls._file_logger(component).debug(message)

    @classmethod
    def get_log_file_path(cls) -> Optional[Path]:
        """Get the current log file path."""
        return cls._log_file_path


def get_component_logger(name: str) -> logging.Logger:
    """Set up a console logger for a component."""
    logger = logging.getLogger(f"{LogManager.LOGGER_NAMESPACE}.{name}")
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(f'[{name}] %(levelname)s: %(message)s')
        handler.setFormatter(formatter)
        handler.setLevel(logging.INFO)
        logger.addHandler(handler)
        logger.setLevel(logging.DEBUG)
    return logger


class ProcessingError(Exception):
    """Custom exception for video editing errors."""
    def __init__(self, message: str, component: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.component = component
        self.details = details or {}


class FileNotOpenable(ProcessingError):
    """Input or output file could not be opened."""


class FirstFrameUnreadable(ProcessingError):
    """The first frame of the trim window could not be decoded."""


class WriterInitFailed(ProcessingError):
    """The output container or encoder could not be created."""


class FrameStage(ABC):
    """Abstract base class for chainable per-frame transform stages."""

    def __init__(self, name: Optional[str] = None):
        self.name = name or self.__class__.__name__
        self.next_component: Optional['FrameStage'] = None
        self.logger = get_component_logger(self.name)

    def set_next(self, component: 'FrameStage') -> 'FrameStage':
        """Set the next component in the chain."""
        self.next_component = component
        return component

    @property
    def is_noop(self) -> bool:
        """True when this stage leaves every frame unchanged."""
        return False

    @abstractmethod
    def process(self, frame: FrameData) -> FrameData:
        """Transform one frame. Must be implemented by subclasses."""
        pass

    def describe(self) -> Dict[str, Any]:
        """Parameters recorded in the processing history."""
        return {}

    def execute(self, frame: FrameData) -> FrameData:
        """Execute this stage and continue the chain."""
        try:
            self._validate_input(frame)

            if frame.is_empty or self.is_noop:
                processed = frame
            else:
                processed = self.process(frame)
                processed.add_processing_step(self.name, self.describe())

            self._validate_output(processed)

        except ProcessingError:
            raise
        except Exception as e:
            error_msg = f"Processing failed on frame {frame.index}: {str(e)}"
            LogManager.log_error(self.name, error_msg, e)
            self.logger.error(error_msg)
            raise ProcessingError(
                error_msg,
                component=self.name,
                details={'original_exception': type(e).__name__, 'frame_index': frame.index}
            ) from e

        if self.next_component:
            return self.next_component.execute(processed)
        return processed

    def _validate_input(self, frame: FrameData):
        """Validate input data. Override in subclasses for specific validation."""
        if not isinstance(frame, FrameData):
            raise ProcessingError(
                f"Expected FrameData, got {type(frame)}",
                component=self.name
            )

    def _validate_output(self, frame: FrameData):
        if not isinstance(frame, FrameData):
            raise ProcessingError(
                f"Component produced invalid output: expected FrameData, got {type(frame)}",
                component=self.name
            )


def build_chain(stages) -> Optional[FrameStage]:
    """Link stages in order and return the head of the chain (None if empty)."""
    stages = list(stages)
    for current, following in zip(stages, stages[1:]):
        current.set_next(following)
    return stages[0] if stages else None


class ProgressReporter:
    """Simple progress reporter for processing operations."""

    def __init__(self, total_items: int, description: str = "Processing"):
        self.total_items = max(0, total_items)
        self.current_item = 0
        self.description = description
        self.logger = get_component_logger("Progress")

    def update(self, increment: int = 1):
        """Update progress by increment."""
        if self.total_items == 0:
            return
        self.current_item = min(self.current_item + increment, self.total_items)

        percentage = (self.current_item / self.total_items) * 100
        if self.current_item % max(1, self.total_items // 10) == 0 or self.current_item == self.total_items:
            self.logger.info(f"{self.description}: {percentage:.1f}% ({self.current_item}/{self.total_items})")

    def finish(self):
        """Mark progress as finished."""
        self.logger.info(f"{self.description}: Complete! ({self.current_item}/{self.total_items})")
