"""
Live preview component using matplotlib.

Shows each written frame in a window, paces playback with a short blocking
pause, and records a cancel request when the user presses a cancel key or
closes the window.
"""

import numpy as np
import matplotlib.pyplot as plt
from typing import Optional, Tuple, Iterable

from .basex import FrameData, LogManager, get_component_logger


class NullPreview:
    """Preview that displays nothing and never requests cancellation."""

    cancel_requested = False

    def show(self, frame: FrameData) -> bool:
        return False

    def close(self):
        pass


class FramePreview:
    """Matplotlib window showing the most recent frame."""

    def __init__(self,
                 window_title: str = "Video",
                 delay_ms: int = 30,
                 cancel_keys: Iterable[str] = ('q', 'escape'),
                 figure_size: Tuple[int, int] = (8, 6),
                 show_info: bool = True):
        """
        Initialize the preview.

        Args:
            window_title: Title for the display window
            delay_ms: Blocking pause after each frame (pacing and key polling)
            cancel_keys: Key names that request cancellation
            figure_size: Size of the matplotlib figure (width, height)
            show_info: Whether to show the frame index in the axes title
        """
        self.name = "FramePreview"
        self.window_title = window_title
        self.delay_ms = max(1, int(delay_ms))
        self.cancel_keys = set(cancel_keys)
        self.figure_size = figure_size
        self.show_info = show_info
        self.logger = get_component_logger(self.name)

        self.cancel_requested = False
        self.fig = None
        self.ax = None
        self.img_display = None
        self._shape: Optional[Tuple[int, ...]] = None

    def _setup_display(self, pixels: np.ndarray):
        """Setup the matplotlib display components."""
        self.fig, self.ax = plt.subplots(figsize=self.figure_size)
        if self.fig.canvas.manager is not None:
            self.fig.canvas.manager.set_window_title(self.window_title)
        self.ax.axis('off')
        self._draw_image(pixels)

        self.fig.canvas.mpl_connect('key_press_event', self._on_key_press)
        self.fig.canvas.mpl_connect('close_event', self._on_close)
        plt.tight_layout()

        LogManager.log_info(self.name, f"Display setup complete: {pixels.shape[1]}x{pixels.shape[0]}")

    def _draw_image(self, pixels: np.ndarray):
        if self.img_display is not None:
            self.img_display.remove()
        if pixels.ndim == 2:
            self.img_display = self.ax.imshow(pixels, cmap='gray', vmin=0, vmax=255, interpolation='nearest')
        else:
            self.img_display = self.ax.imshow(pixels, interpolation='nearest')
        self._shape = pixels.shape

    def _prepare_frame_for_display(self, frame: FrameData) -> np.ndarray:
        pixels = frame.pixels
        if pixels.ndim == 3 and pixels.shape[2] == 1:
            return pixels.squeeze(axis=2)
        if pixels.ndim == 3 and pixels.shape[2] > 3:
            return pixels[:, :, :3]
        return pixels

    def _on_key_press(self, event):
        """Handle keyboard events."""
        if event.key in self.cancel_keys:
            self.cancel_requested = True
            LogManager.log_info(self.name, f"Cancel requested with key '{event.key}'")

    def _on_close(self, event):
        self.cancel_requested = True
        LogManager.log_info(self.name, "Preview window closed")

    def show(self, frame: FrameData) -> bool:
        """
        Display a frame and wait delay_ms.

        Returns:
            True once the user has asked to stop
        """
        if self.cancel_requested:
            return True

        pixels = self._prepare_frame_for_display(frame)
        if self.fig is None:
            self._setup_display(pixels)
        elif pixels.shape != self._shape:
            self._draw_image(pixels)
        else:
            self.img_display.set_data(pixels)

        if self.show_info:
            self.ax.set_title(f"Frame {frame.index}")

        plt.pause(self.delay_ms / 1000.0)
        return self.cancel_requested

    def close(self):
        """Close the preview window."""
        if self.fig is not None:
            fig, self.fig = self.fig, None
            plt.close(fig)
        self.img_display = None
