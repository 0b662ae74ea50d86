#!/usr/bin/env python3
"""
Privacy blur viewer
Plays a video file in a window with blurred regions composited on top.
Drag with the mouse to add a region; regions can be saved to and loaded from JSON.
"""

import json
import signal
import sys
import threading

import cv2

from .cli import parse
from .logger import setup_logging
from .navigation import PlaybackController
from .overlays import OverlayManager, RegionCompositor, load_snapshot, region_from_drag, save_snapshot
from .overlays.regions import scale_point
from .scheduler import RedrawScheduler
from .surfaces import VideoFileSource

# Global shutdown flag for clean exit from any context
shutdown_flag = threading.Event()

DEFAULT_SNAPSHOT = "blur_regions.json"
IDLE_DELAY_MS = 30  # waitKey delay while paused
PREVIEW_COLOR = (0, 0, 255)  # Red (BGR)

HELP_TEXT = """Controls:
  drag mouse   add blur region
  space        play / pause
  a / d        step back / forward 1 frame
  j / l        step back / forward 10 frames
  v            toggle blur visibility
  + / -        blur intensity up / down
  c            clear all regions
  s            save regions
  q            quit"""


def fit_size(frame_size, max_size):
    """Largest size with the frame's aspect ratio that fits in max_size."""
    frame_w, frame_h = frame_size
    max_w, max_h = max_size
    if frame_w <= max_w and frame_h <= max_h:
        return frame_w, frame_h
    scale = min(max_w / frame_w, max_h / frame_h)
    return max(1, round(frame_w * scale)), max(1, round(frame_h * scale))


class RegionDrawer:
    """Turns mouse drags in the display window into blur regions."""

    def __init__(self, compositor, min_size, intensity):
        self.compositor = compositor
        self.min_size = min_size
        self.intensity = intensity
        self.display_size = (0, 0)
        self.start = None
        self.current = None

    def on_mouse(self, event, x, y, flags, param):
        if event == cv2.EVENT_LBUTTONDOWN:
            self.start = (x, y)
            self.current = (x, y)
        elif event == cv2.EVENT_MOUSEMOVE and self.start is not None:
            self.current = (x, y)
        elif event == cv2.EVENT_LBUTTONUP and self.start is not None:
            self._finish((x, y))

    def _finish(self, end):
        frame_size = self.compositor.frame_size
        start = scale_point(self.start, self.display_size, frame_size)
        end = scale_point(end, self.display_size, frame_size)
        self.start = None
        self.current = None

        rect = region_from_drag(start, end, self.min_size)
        if rect is None:
            return
        region_id = self.compositor.add_region(*rect, intensity=self.intensity)
        print(f"Added blur region {region_id}: {rect} (intensity {self.intensity})")

    def draw_preview(self, frame):
        """Outline the region being dragged."""
        if self.start is None or self.current is None:
            return frame
        cv2.rectangle(frame, self.start, self.current, PREVIEW_COLOR, 2)
        return frame


def load_regions(compositor, path):
    """Load a snapshot file into the compositor, reporting problems instead of failing."""
    try:
        data = load_snapshot(path)
    except FileNotFoundError:
        print(f"No snapshot at {path}, starting without regions")
        return False
    except (OSError, json.JSONDecodeError) as e:
        print(f"Warning: Could not read snapshot {path}: {e}")
        return False

    if not compositor.import_snapshot(data):
        print(f"Warning: {path} is not a valid blur snapshot")
        return False

    print(f"Loaded {len(compositor.regions)} blur regions from {path}")
    return True


def render_to_file(source, scheduler, overlay_manager, output_path):
    """Write every frame of the video with the blur baked in."""
    frame_size = source.size()
    fourcc = cv2.VideoWriter_fourcc(*'mp4v')
    video_writer = None
    frame_count = 0

    print(f"Rendering blurred video to {output_path}...")
    try:
        while not shutdown_flag.is_set() and source.read_next():
            scheduler.tick()
            if video_writer is None:
                frame_size = source.size()
                video_writer = cv2.VideoWriter(output_path, fourcc, source.get_frame_rate(), frame_size)

            frame = overlay_manager.composite(source.bgr_frame(), {"frame_index": source.current_frame})
            video_writer.write(frame)
            frame_count += 1
    finally:
        if video_writer is not None:
            video_writer.release()

    print(f"Video saved: {output_path} ({frame_count} frames, {frame_size[0]}x{frame_size[1]})")
    return frame_count


def handle_key(key, controller, compositor, drawer, snapshot_path):
    """Apply a keypress. Returns False when the viewer should quit."""
    if key == ord('q'):
        return False
    if key == ord(' '):
        print("Playing" if controller.toggle_play() else "Paused")
    elif key == ord('a'):
        controller.step(-1)
    elif key == ord('d'):
        controller.step(1)
    elif key == ord('j'):
        controller.step(-10)
    elif key == ord('l'):
        controller.step(10)
    elif key == ord('v'):
        visible = compositor.toggle_visibility()
        print(f"Blur {'visible' if visible else 'hidden'}")
    elif key in (ord('+'), ord('=')):
        drawer.intensity = compositor.update_intensity(drawer.intensity + 1)
    elif key == ord('-'):
        drawer.intensity = compositor.update_intensity(drawer.intensity - 1)
    elif key == ord('c'):
        compositor.clear_regions()
    elif key == ord('s'):
        save_snapshot(snapshot_path, compositor.export_snapshot())
        print(f"Saved {len(compositor.regions)} blur regions to {snapshot_path}")
    return True


def main(argv=None):
    cfg = parse(argv)
    setup_logging(cfg.log_level)

    # Set up signal handlers for graceful shutdown
    def signal_handler(signum, frame):
        print(f"\nReceived signal {signum}, shutting down...")
        shutdown_flag.set()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    try:
        source = VideoFileSource(cfg.video, fps_fallback=cfg.fps_fallback)
    except IOError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)

    compositor = RegionCompositor()
    compositor.attach(source)
    scheduler = RedrawScheduler(compositor)
    source.add_listener(scheduler.frame_changed)

    overlay_manager = OverlayManager()
    overlay_manager.add(compositor)

    snapshot_path = cfg.snapshot or DEFAULT_SNAPSHOT
    if cfg.snapshot:
        load_regions(compositor, cfg.snapshot)

    try:
        if cfg.output:
            render_to_file(source, scheduler, overlay_manager, cfg.output)
            return

        controller = PlaybackController(source, speed=cfg.speed, looping=cfg.loop)
        controller.seek(0)

        drawer = RegionDrawer(compositor, cfg.min_region_size, cfg.intensity)
        window_name = cfg.window_name
        cv2.namedWindow(window_name, cv2.WINDOW_AUTOSIZE)
        cv2.setMouseCallback(window_name, drawer.on_mouse)
        drawer.display_size = fit_size(source.size(), (cfg.window_width, cfg.window_height))

        print(f"Opened {cfg.video}: {source.get_total_frames()} frames at {source.get_frame_rate():.2f} fps")
        print(HELP_TEXT)

        while not shutdown_flag.is_set():
            if controller.playing:
                controller.advance()

            scheduler.tick()

            frame = source.bgr_frame()
            if frame is None:
                print("No frame decoded, exiting")
                break

            if (frame.shape[1], frame.shape[0]) != drawer.display_size:
                frame = cv2.resize(frame, drawer.display_size, interpolation=cv2.INTER_AREA)
            frame = overlay_manager.composite(frame, {"frame_index": controller.current_frame})
            frame = drawer.draw_preview(frame)
            cv2.imshow(window_name, frame)

            delay = max(1, int(controller.frame_interval() * 1000)) if controller.playing else IDLE_DELAY_MS
            key = cv2.waitKey(delay) & 0xFF
            if not handle_key(key, controller, compositor, drawer, snapshot_path):
                print("Quit signal received (pressed 'q')")
                break

            # Check if window was closed via X button
            try:
                if cv2.getWindowProperty(window_name, cv2.WND_PROP_VISIBLE) < 1:
                    print("Window closed by user")
                    break
            except cv2.error:
                print("Window no longer exists")
                break

    except KeyboardInterrupt:
        print("\nInterrupted by user")

    finally:
        shutdown_flag.set()
        compositor.teardown()
        source.release()
        cv2.destroyAllWindows()
        print("Viewer stopped")


if __name__ == "__main__":
    main()
