"""
Privacy blur overlay.

Keeps an ordered list of blur regions and renders them onto a transparent
RGBA overlay the same size as the video frame. Pixels are read fresh from the
frame surface on every render, so the overlay follows the video as it plays
or is scrubbed.
"""

import dataclasses
import itertools
import logging
import math
from enum import Enum

import cv2
import numpy as np

from ..blur import blur, clamp_intensity
from ..surfaces import FrameSurfaceProvider
from .base import OverlayBase
from .regions import DEFAULT_INTENSITY, BlurRegion, RegionSnapshot, normalize_geometry, now_ms

logger = logging.getLogger(__name__)


class OverlayState(Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"
    TORN_DOWN = "torn_down"


class RegionCompositor(OverlayBase):
    """
    Blurs selected rectangles of the current frame onto its own overlay.

    One instance per video session. Every mutating call re-renders right away;
    hosts that want to batch redraws can drive render() through a
    RedrawScheduler instead.
    """

    def __init__(self, enabled=True):
        super().__init__(enabled)
        self.regions = []  # Insertion order is render order
        self.provider = None
        self.overlay = None
        self.state = OverlayState.UNINITIALIZED
        self._ids = itertools.count(1)

    # Lifecycle

    def attach(self, provider):
        """Start reading frames from `provider` and allocate the overlay."""
        if not isinstance(provider, FrameSurfaceProvider):
            raise TypeError("Provider must inherit from FrameSurfaceProvider")

        self.provider = provider
        self.state = OverlayState.READY
        width, height = provider.size()
        self.overlay = np.zeros((height, width, 4), dtype=np.uint8) if width > 0 and height > 0 else None
        logger.info("Blur compositor attached (%dx%d)", width, height)
        return True

    def teardown(self):
        """Release the overlay and forget all regions. Safe to call repeatedly."""
        if self.state is OverlayState.TORN_DOWN:
            return
        self.overlay = None
        self.provider = None
        self.regions = []
        self.state = OverlayState.TORN_DOWN
        logger.info("Blur compositor torn down")

    @property
    def frame_size(self):
        if self.provider is None:
            return 0, 0
        return self.provider.size()

    # Region management

    def add_region(self, x, y, width, height, intensity=DEFAULT_INTENSITY):
        """Add a region and re-render. Returns the new region's id."""
        x, y, width, height, intensity = normalize_geometry(x, y, width, height, intensity)
        region = BlurRegion(next(self._ids), x, y, width, height, intensity)
        self.regions.append(region)
        logger.info("Blur region added: %s", region)
        self.render()
        return region.id

    def remove_region(self, region_id):
        """Remove the region with this id. Returns False if there was none."""
        for index, region in enumerate(self.regions):
            if region.id == region_id:
                del self.regions[index]
                logger.info("Blur region removed: %s", region_id)
                self.render()
                return True
        return False

    def clear_regions(self):
        self.regions = []
        logger.info("All blur regions cleared")
        self.render()

    def update_intensity(self, intensity):
        """Set the same intensity on every region and re-render."""
        intensity = clamp_intensity(intensity)
        for region in self.regions:
            region.intensity = intensity
        logger.info("Blur intensity updated to %d", intensity)
        self.render()
        return intensity

    def toggle_visibility(self):
        """Show or hide the overlay without re-rendering. Returns the new state."""
        visible = self.toggle()
        logger.info("Blur overlay %s", "visible" if visible else "hidden")
        return visible

    @property
    def visible(self):
        return self.enabled

    # Snapshots

    def export_snapshot(self):
        width, height = self.frame_size
        return RegionSnapshot(
            regions=[dataclasses.replace(region) for region in self.regions],
            timestamp=now_ms(),
            frame_width=width,
            frame_height=height,
        )

    def import_snapshot(self, snapshot):
        """
        Replace all regions with those in `snapshot`.

        Accepts a RegionSnapshot or its dict form. Returns False and leaves
        the current regions alone if the payload is malformed.
        """
        try:
            if isinstance(snapshot, RegionSnapshot):
                if not isinstance(snapshot.regions, list):
                    raise ValueError("Snapshot has no regions list")
                regions = [BlurRegion.from_dict(region.to_dict()) for region in snapshot.regions]
            else:
                regions = RegionSnapshot.from_dict(snapshot).regions
            ids = self._ids_after(regions)
        except (ValueError, AttributeError, OverflowError) as e:
            logger.warning("Rejected blur snapshot: %s", e)
            return False

        self.regions = regions
        self._ids = ids
        logger.info("Blur regions loaded: %d", len(regions))
        self.render()
        return True

    def _ids_after(self, regions):
        """Id counter that never collides with the given regions' ids."""
        numeric = [
            int(r.id) for r in regions
            if isinstance(r.id, (int, float)) and not isinstance(r.id, bool) and math.isfinite(r.id)
        ]
        upcoming = next(self._ids)
        start = max([upcoming] + [n + 1 for n in numeric])
        return itertools.count(start)

    # Rendering

    def on_frame_changed(self, frame_index=None):
        """Host notification: the displayed frame changed."""
        return self.render()

    def on_surface_resized(self):
        """Host notification: the frame surface changed size."""
        return self.render()

    def render(self):
        """
        Redraw the overlay from the current frame.

        Returns:
            The overlay array, or None when there is nothing to render into
            (not attached, torn down, or an empty frame)
        """
        if self.state is not OverlayState.READY or self.provider is None:
            return None

        width, height = self.provider.size()
        if width <= 0 or height <= 0:
            return None

        if self.overlay is None or self.overlay.shape[:2] != (height, width):
            # Frame size changed, the old overlay is no longer valid
            self.overlay = np.zeros((height, width, 4), dtype=np.uint8)
            logger.debug("Overlay resized to %dx%d", width, height)
        else:
            self.overlay.fill(0)

        if not self.regions:
            return self.overlay

        for region in self.regions:
            try:
                self._render_region(region, width, height)
            except Exception as e:
                logger.warning("Error rendering blur region %s: %s", region.id, e)

        return self.overlay

    def _render_region(self, region, frame_width, frame_height):
        x, y, width, height = region.clamp_to(frame_width, frame_height)
        if width <= 0 or height <= 0:
            logger.debug("Blur region %s is outside the %dx%d frame, skipped", region.id, frame_width, frame_height)
            return

        pixels = self.provider.read_rect(x, y, width, height)
        blurred = blur(pixels, width, height, region.intensity)
        self.overlay[y:y + height, x:x + width] = blurred

    def composite(self, frame, context=None):
        """Alpha-blend the overlay onto a BGR display frame."""
        if not self.enabled or self.overlay is None or not self.regions:
            return frame

        overlay = self.overlay
        # Display frames may be scaled relative to the source frame
        if overlay.shape[0] != frame.shape[0] or overlay.shape[1] != frame.shape[1]:
            overlay = cv2.resize(overlay, (frame.shape[1], frame.shape[0]), interpolation=cv2.INTER_AREA)

        overlay_bgr = cv2.cvtColor(overlay, cv2.COLOR_RGBA2BGR)
        alpha = overlay[:, :, 3].astype(np.float32) / 255.0
        alpha_3ch = np.dstack([alpha, alpha, alpha])

        # Blend: output = (1 - alpha) * frame + alpha * overlay
        return ((1 - alpha_3ch) * frame + alpha_3ch * overlay_bgr).astype(np.uint8)
