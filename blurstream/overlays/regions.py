"""Blur region value objects and the snapshot format used to persist them."""

import json
import math
import time
from dataclasses import dataclass, field

from ..blur import clamp_intensity

DEFAULT_INTENSITY = 8
MIN_DRAWN_REGION = 10  # Drags this small or smaller are treated as clicks


@dataclass
class BlurRegion:
    """A rectangle of the frame to blur, in source-frame pixel coordinates."""

    id: int
    x: int
    y: int
    width: int
    height: int
    intensity: int = DEFAULT_INTENSITY

    def clamp_to(self, frame_width: int, frame_height: int) -> tuple[int, int, int, int]:
        """
        Clip the region against the frame bounds.

        Returns:
            (x, y, width, height) of the visible part. Width or height is 0
            when the region lies entirely outside the frame.
        """
        x0 = min(max(self.x, 0), frame_width)
        y0 = min(max(self.y, 0), frame_height)
        x1 = min(max(self.x + self.width, x0), frame_width)
        y1 = min(max(self.y + self.height, y0), frame_height)
        return x0, y0, x1 - x0, y1 - y0

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "intensity": self.intensity,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "BlurRegion":
        """Build a region from its persisted form, raising ValueError if malformed."""
        try:
            region_id = data["id"]
            if isinstance(region_id, float) and not math.isfinite(region_id):
                raise ValueError(f"non-finite id {region_id}")
            return cls(
                id=region_id,
                x=int(data["x"]),
                y=int(data["y"]),
                width=int(data["width"]),
                height=int(data["height"]),
                intensity=int(data.get("intensity", DEFAULT_INTENSITY)),
            )
        except (KeyError, TypeError, ValueError, AttributeError, OverflowError) as e:
            raise ValueError(f"Malformed blur region {data!r}: {e}") from e


@dataclass
class RegionSnapshot:
    """Plain, serializable copy of a compositor's regions."""

    regions: list = field(default_factory=list)
    timestamp: int = 0
    frame_width: int = 0
    frame_height: int = 0

    def to_dict(self) -> dict:
        return {
            "regions": [region.to_dict() for region in self.regions],
            "timestamp": self.timestamp,
            "canvasSize": {"width": self.frame_width, "height": self.frame_height},
        }

    @classmethod
    def from_dict(cls, data: dict) -> "RegionSnapshot":
        """
        Parse the persisted form.

        Raises:
            ValueError: if `regions` is missing, not a list, or holds a
                malformed entry
        """
        if not isinstance(data, dict) or not isinstance(data.get("regions"), list):
            raise ValueError("Snapshot has no regions list")

        canvas = data.get("canvasSize") or {}
        return cls(
            regions=[BlurRegion.from_dict(entry) for entry in data["regions"]],
            timestamp=data.get("timestamp", 0),
            frame_width=canvas.get("width", 0),
            frame_height=canvas.get("height", 0),
        )


def now_ms() -> int:
    return int(time.time() * 1000)


def save_snapshot(path, snapshot: RegionSnapshot):
    """Write a snapshot to a JSON file."""
    with open(path, "w") as f:
        json.dump(snapshot.to_dict(), f, indent=2)


def load_snapshot(path) -> dict:
    """
    Read the raw snapshot dict from a JSON file.

    Validation is left to RegionCompositor.import_snapshot so a bad file
    never touches existing regions.
    """
    with open(path, "r") as f:
        return json.load(f)


def normalize_geometry(x, y, width, height, intensity):
    """Coerce user input into a valid region geometry."""
    return (
        max(0, int(x)),
        max(0, int(y)),
        max(1, int(width)),
        max(1, int(height)),
        clamp_intensity(intensity),
    )


def scale_point(point, display_size, frame_size):
    """Map a point in display (window) coordinates to frame coordinates."""
    px, py = point
    display_w, display_h = display_size
    frame_w, frame_h = frame_size
    if display_w <= 0 or display_h <= 0:
        return px, py
    return px * frame_w / display_w, py * frame_h / display_h


def region_from_drag(start, end, min_size=MIN_DRAWN_REGION):
    """
    Turn a drag gesture into a rectangle.

    Args:
        start: (x, y) where the drag began
        end: (x, y) where the drag ended
        min_size: Both extents must exceed this to count as a region

    Returns:
        (x, y, width, height) or None for drags that are too small
    """
    x = min(start[0], end[0])
    y = min(start[1], end[1])
    width = abs(end[0] - start[0])
    height = abs(end[1] - start[1])

    if width <= min_size or height <= min_size:
        return None
    return int(x), int(y), int(width), int(height)
