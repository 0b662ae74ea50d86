from dataclasses import dataclass
from typing import Optional

from .overlays.regions import DEFAULT_INTENSITY, MIN_DRAWN_REGION


@dataclass
class Config:
    video: str
    snapshot: Optional[str] = None
    output: Optional[str] = None
    intensity: int = DEFAULT_INTENSITY
    min_region_size: int = MIN_DRAWN_REGION
    window_name: str = "Privacy Blur"
    window_width: int = 1280
    window_height: int = 720
    fps_fallback: float = 30.0
    speed: float = 1.0
    loop: bool = False
    log_level: str = "INFO"
