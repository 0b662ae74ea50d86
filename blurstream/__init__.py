"""
Privacy blur for video.

Blurs user-selected rectangles of a video frame on a transparent overlay that
is composited on top of the video as it plays or is scrubbed.
"""

from .blur import blur
from .overlays import BlurRegion, OverlayManager, RegionCompositor, RegionSnapshot
from .scheduler import RedrawScheduler
from .surfaces import ArrayFrameSurface, FrameSurfaceProvider, VideoFileSource

__version__ = "0.1.0"

__all__ = [
    "ArrayFrameSurface",
    "BlurRegion",
    "FrameSurfaceProvider",
    "OverlayManager",
    "RedrawScheduler",
    "RegionCompositor",
    "RegionSnapshot",
    "VideoFileSource",
    "blur",
]
