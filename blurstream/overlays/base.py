"""Base class for all overlays."""

from abc import ABC, abstractmethod


class OverlayBase(ABC):
    """Abstract base class that all overlays inherit from."""

    def __init__(self, enabled=True):
        self.enabled = enabled

    @abstractmethod
    def composite(self, frame, context=None):
        """
        Draw the overlay on top of a display frame.

        Args:
            frame: OpenCV BGR frame (numpy array)
            context: Optional dict with runtime info (frame_index, etc.)

        Returns:
            Modified frame
        """
        pass

    def toggle(self):
        """Flip visibility. Returns the new state."""
        self.enabled = not self.enabled
        return self.enabled
