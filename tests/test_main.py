import json

import cv2
import numpy as np
import pytest

from blurstream.cli import parse
from blurstream.main import RegionDrawer, fit_size, handle_key, load_regions
from blurstream.navigation import PlaybackController
from blurstream.overlays import RegionCompositor


def test_parse_defaults():
    cfg = parse(["clip.mp4"])
    assert cfg.video == "clip.mp4"
    assert cfg.snapshot is None
    assert cfg.output is None
    assert cfg.intensity == 8
    assert cfg.min_region_size == 10
    assert cfg.loop is False


def test_parse_options():
    cfg = parse(["clip.mp4", "-s", "regions.json", "-o", "out.mp4", "-i", "12", "--loop", "--speed", "2"])
    assert cfg.snapshot == "regions.json"
    assert cfg.output == "out.mp4"
    assert cfg.intensity == 12
    assert cfg.loop is True
    assert cfg.speed == 2.0


def test_fit_size():
    assert fit_size((640, 480), (1280, 720)) == (640, 480)
    assert fit_size((1920, 1080), (1280, 720)) == (1280, 720)
    assert fit_size((1000, 2000), (1280, 720)) == (360, 720)


def test_drawer_adds_scaled_region(compositor):
    drawer = RegionDrawer(compositor, min_size=10, intensity=6)
    drawer.display_size = (50, 50)  # Half the 100x100 frame

    drawer.on_mouse(cv2.EVENT_LBUTTONDOWN, 5, 5, 0, None)
    drawer.on_mouse(cv2.EVENT_MOUSEMOVE, 15, 20, 0, None)
    assert drawer.draw_preview(np.zeros((50, 50, 3), dtype=np.uint8)).any()
    drawer.on_mouse(cv2.EVENT_LBUTTONUP, 20, 25, 0, None)

    region = compositor.regions[0]
    assert (region.x, region.y, region.width, region.height, region.intensity) == (10, 10, 30, 40, 6)
    assert drawer.start is None


def test_drawer_ignores_clicks(compositor):
    drawer = RegionDrawer(compositor, min_size=10, intensity=6)
    drawer.display_size = (100, 100)
    drawer.on_mouse(cv2.EVENT_LBUTTONDOWN, 5, 5, 0, None)
    drawer.on_mouse(cv2.EVENT_LBUTTONUP, 8, 8, 0, None)
    assert compositor.regions == []


def test_load_regions(compositor, tmp_path):
    path = tmp_path / "regions.json"
    path.write_text(json.dumps({
        "regions": [{"id": 3, "x": 1, "y": 1, "width": 20, "height": 20, "intensity": 5}],
        "timestamp": 0,
        "canvasSize": {"width": 100, "height": 100},
    }))
    assert load_regions(compositor, str(path)) is True
    assert [r.id for r in compositor.regions] == [3]


@pytest.mark.parametrize("content", ["{broken", json.dumps({"regions": 5})])
def test_load_regions_bad_file_keeps_state(compositor, tmp_path, content):
    compositor.add_region(0, 0, 10, 10)
    path = tmp_path / "regions.json"
    path.write_text(content)
    assert load_regions(compositor, str(path)) is False
    assert len(compositor.regions) == 1


def test_load_regions_missing_file(compositor, tmp_path):
    assert load_regions(compositor, str(tmp_path / "nope.json")) is False


class StillNavigator:
    def seek_to_frame(self, n):
        return n

    def get_total_frames(self):
        return 20

    def get_frame_rate(self):
        return 10.0


def test_handle_key(compositor, tmp_path):
    controller = PlaybackController(StillNavigator())
    drawer = RegionDrawer(compositor, min_size=10, intensity=8)
    snapshot_path = str(tmp_path / "saved.json")
    compositor.add_region(0, 0, 20, 20, 8)

    assert handle_key(ord('d'), controller, compositor, drawer, snapshot_path)
    assert controller.current_frame == 1
    handle_key(ord('l'), controller, compositor, drawer, snapshot_path)
    assert controller.current_frame == 11

    handle_key(ord('+'), controller, compositor, drawer, snapshot_path)
    assert drawer.intensity == 9
    assert compositor.regions[0].intensity == 9

    handle_key(ord('v'), controller, compositor, drawer, snapshot_path)
    assert compositor.visible is False

    handle_key(ord('s'), controller, compositor, drawer, snapshot_path)
    saved = json.loads(open(snapshot_path).read())
    assert len(saved["regions"]) == 1

    handle_key(ord('c'), controller, compositor, drawer, snapshot_path)
    assert compositor.regions == []

    assert handle_key(ord('q'), controller, compositor, drawer, snapshot_path) is False


def test_fresh_compositor_has_no_frame_size():
    assert RegionCompositor().frame_size == (0, 0)


def test_load_regions_non_finite_file_keeps_state(compositor, tmp_path):
    compositor.add_region(0, 0, 10, 10)
    path = tmp_path / "regions.json"
    path.write_text('{"regions": [{"id": 1, "x": Infinity, "y": 0, "width": 5, "height": 5}]}')
    assert load_regions(compositor, str(path)) is False
    assert len(compositor.regions) == 1
