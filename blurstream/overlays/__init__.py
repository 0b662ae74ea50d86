"""
Overlay system for the video view.

Stacks graphics layers, such as the privacy blur, on top of video frames.
"""

from .base import OverlayBase
from .compositor import OverlayState, RegionCompositor
from .regions import BlurRegion, RegionSnapshot, load_snapshot, region_from_drag, save_snapshot


class OverlayManager:
    """
    Ordered stack of overlays composited onto each display frame.

    The privacy blur (RegionCompositor) is one entry; hosts can stack
    other overlays above or below it.
    """

    def __init__(self):
        self.overlays = []  # Ordered list, composited bottom to top

    def add(self, overlay):
        """Add an overlay to the stack."""
        if not isinstance(overlay, OverlayBase):
            raise TypeError("Overlay must inherit from OverlayBase")
        self.overlays.append(overlay)

    def remove(self, overlay):
        """Remove an overlay from the stack."""
        self.overlays.remove(overlay)

    def composite(self, frame, context=None):
        """Composite all enabled overlays onto the frame."""
        for overlay in self.overlays:
            if overlay.enabled:
                frame = overlay.composite(frame, context)
        return frame


__all__ = [
    "BlurRegion",
    "OverlayBase",
    "OverlayManager",
    "OverlayState",
    "RegionCompositor",
    "RegionSnapshot",
    "load_snapshot",
    "region_from_drag",
    "save_snapshot",
]
