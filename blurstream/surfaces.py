"""
Frame surfaces the compositor reads pixels from.

A frame surface belongs to whatever renders the video. The compositor only
asks it for its size and for rectangles of RGBA pixels.
"""

import logging
from abc import ABC, abstractmethod

import cv2
import numpy as np

from .navigation import FrameNavigator

logger = logging.getLogger(__name__)


class FrameSurfaceProvider(ABC):
    """Read-only access to the current decoded video frame."""

    @abstractmethod
    def size(self) -> tuple[int, int]:
        """Return (width, height) of the current frame, (0, 0) if none."""

    @abstractmethod
    def read_rect(self, x: int, y: int, width: int, height: int) -> np.ndarray:
        """Return a (height, width, 4) RGBA copy of the given rectangle."""


class ArrayFrameSurface(FrameSurfaceProvider):
    """Frame surface backed by a numpy array the host replaces between renders."""

    def __init__(self, frame=None, bgr=False):
        self._pixels = None
        if frame is not None:
            self.update(frame, bgr=bgr)

    def update(self, frame, bgr=False):
        """
        Replace the surface contents.

        Args:
            frame: (H, W, 4) RGBA array, or (H, W, 3) BGR array with bgr=True
            bgr: Convert from OpenCV's BGR layout
        """
        frame = np.asarray(frame, dtype=np.uint8)
        if bgr:
            frame = cv2.cvtColor(frame, cv2.COLOR_BGR2RGBA)
        if frame.ndim != 3 or frame.shape[2] != 4:
            raise ValueError(f"Expected an RGBA frame, got shape {frame.shape}")
        self._pixels = frame

    @property
    def pixels(self):
        return self._pixels

    def size(self):
        if self._pixels is None:
            return 0, 0
        height, width = self._pixels.shape[:2]
        return width, height

    def read_rect(self, x, y, width, height):
        if self._pixels is None:
            raise ValueError("Frame surface is empty")
        frame_w, frame_h = self.size()
        x0, y0 = max(0, x), max(0, y)
        x1, y1 = min(frame_w, x + width), min(frame_h, y + height)
        if x1 <= x0 or y1 <= y0:
            raise ValueError(f"Rectangle ({x}, {y}, {width}, {height}) is outside the {frame_w}x{frame_h} frame")
        return self._pixels[y0:y1, x0:x1].copy()


class VideoFileSource(ArrayFrameSurface, FrameNavigator):
    """
    Decodes a video file with OpenCV and exposes the current frame.

    Listeners added with add_listener() are called with the new frame index
    every time the displayed frame changes.
    """

    def __init__(self, path, fps_fallback=30.0):
        super().__init__()
        self.path = path
        self.cap = cv2.VideoCapture(path)
        if not self.cap.isOpened():
            raise IOError(f"Cannot open video: {path}")

        self.total_frames = int(self.cap.get(cv2.CAP_PROP_FRAME_COUNT))
        self.fps = self.cap.get(cv2.CAP_PROP_FPS) or fps_fallback
        self.current_frame = -1
        self._listeners = []

        logger.info("Opened %s (%d frames at %.2f fps)", path, self.total_frames, self.fps)

    def add_listener(self, callback):
        self._listeners.append(callback)

    def _notify(self):
        for callback in self._listeners:
            callback(self.current_frame)

    def get_total_frames(self):
        return self.total_frames

    def get_frame_rate(self):
        return self.fps

    def read_next(self) -> bool:
        """Decode the next frame in sequence. Returns False at end of stream."""
        ok, frame = self.cap.read()
        if not ok:
            return False
        self.update(frame, bgr=True)
        self.current_frame += 1
        self._notify()
        return True

    def seek_to_frame(self, frame_number):
        """Jump to a frame, clamped to the valid range. Returns the frame shown."""
        if self.total_frames > 0:
            frame_number = max(0, min(self.total_frames - 1, int(frame_number)))
        else:
            frame_number = max(0, int(frame_number))

        if frame_number == self.current_frame:
            return frame_number

        # Sequential playback can skip the (slow) decoder seek
        if frame_number != self.current_frame + 1:
            self.cap.set(cv2.CAP_PROP_POS_FRAMES, frame_number)
        ok, frame = self.cap.read()
        if not ok:
            logger.warning("Could not decode frame %d of %s", frame_number, self.path)
            return self.current_frame

        self.update(frame, bgr=True)
        self.current_frame = frame_number
        self._notify()
        return frame_number

    def bgr_frame(self):
        """Current frame in OpenCV's BGR layout, for display."""
        if self._pixels is None:
            return None
        return cv2.cvtColor(self._pixels, cv2.COLOR_RGBA2BGR)

    def release(self):
        if self.cap is not None:
            self.cap.release()
            self.cap = None
