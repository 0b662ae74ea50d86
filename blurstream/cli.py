import argparse

from .config import Config


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Play a video with privacy blur regions composited on top"
    )
    parser.add_argument(
        "video",
        help="Video file to open"
    )
    parser.add_argument(
        "-s", "--snapshot",
        type=str,
        metavar="FILE",
        help="JSON file of blur regions to load at startup (saved back with 's')"
    )
    parser.add_argument(
        "-o", "--output",
        type=str,
        metavar="FILE",
        help="Render the whole video with blur applied to FILE instead of opening a window"
    )
    parser.add_argument(
        "-i", "--intensity",
        type=int,
        default=Config.intensity,
        help=f"Blur intensity for new regions, 1-20 (default: {Config.intensity})"
    )
    parser.add_argument(
        "--min-region-size",
        type=int,
        default=Config.min_region_size,
        help=f"Smallest drag, in pixels, that creates a region (default: {Config.min_region_size})"
    )
    parser.add_argument(
        "--speed",
        type=float,
        default=Config.speed,
        help="Playback speed multiplier (default: 1.0)"
    )
    parser.add_argument(
        "--loop",
        action="store_true",
        help="Loop playback at the end of the video"
    )
    parser.add_argument(
        "--log-level",
        default=Config.log_level,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: INFO)"
    )
    return parser


def parse(argv=None) -> Config:
    args = build_parser().parse_args(argv)
    return Config(
        video=args.video,
        snapshot=args.snapshot,
        output=args.output,
        intensity=args.intensity,
        min_region_size=args.min_region_size,
        speed=args.speed,
        loop=args.loop,
        log_level=args.log_level,
    )
