import pytest

from blurstream.navigation import FrameNavigator, PlaybackController


class FakeNavigator(FrameNavigator):
    def __init__(self, total=100, fps=25.0):
        self.total = total
        self.fps = fps
        self.seeks = []

    def seek_to_frame(self, frame_number):
        self.seeks.append(frame_number)
        return frame_number

    def get_total_frames(self):
        return self.total

    def get_frame_rate(self):
        return self.fps


def test_seek_is_clamped():
    nav = FakeNavigator(total=50)
    controller = PlaybackController(nav)
    assert controller.seek(-10) == 0
    assert controller.seek(500) == 49
    assert nav.seeks == [0, 49]


def test_step_and_skip():
    controller = PlaybackController(FakeNavigator(total=30))
    controller.step(10)
    controller.step(-3)
    assert controller.current_frame == 7
    assert controller.skip_to_end() == 29
    assert controller.skip_to_start() == 0


def test_seek_percent():
    controller = PlaybackController(FakeNavigator(total=101))
    assert controller.seek_percent(50) == 50
    assert controller.seek_percent(100) == 100


def test_speed_is_clamped():
    controller = PlaybackController(FakeNavigator(), speed=10)
    assert controller.speed == 4.0
    assert controller.set_speed(0) == 0.1


def test_frame_interval():
    controller = PlaybackController(FakeNavigator(fps=25.0), speed=2.0)
    assert controller.frame_interval() == pytest.approx(0.02)


def test_advance_only_while_playing():
    controller = PlaybackController(FakeNavigator(total=10))
    assert controller.advance() == 0
    controller.toggle_play()
    assert controller.advance() == 1


def test_advance_pauses_at_end():
    controller = PlaybackController(FakeNavigator(total=3))
    controller.skip_to_end()
    controller.toggle_play()
    assert controller.advance() == 2
    assert controller.playing is False


def test_advance_loops():
    controller = PlaybackController(FakeNavigator(total=3), looping=True)
    controller.skip_to_end()
    controller.toggle_play()
    assert controller.advance() == 0
    assert controller.playing is True


class ShortNavigator(FakeNavigator):
    """Reports more frames than it can actually decode."""

    def __init__(self, total=10, last_decodable=6):
        super().__init__(total=total)
        self.last_decodable = last_decodable
        self.shown = 0

    def seek_to_frame(self, frame_number):
        self.seeks.append(frame_number)
        if frame_number <= self.last_decodable:
            self.shown = frame_number
        return self.shown


def test_advance_pauses_when_decoding_stops_early():
    controller = PlaybackController(ShortNavigator(total=10, last_decodable=6))
    controller.seek(6)
    controller.toggle_play()

    assert controller.advance() == 6
    assert controller.playing is False
    assert controller.advance() == 6


def test_advance_loops_when_decoding_stops_early():
    nav = ShortNavigator(total=10, last_decodable=6)
    controller = PlaybackController(nav, looping=True)
    controller.seek(6)
    controller.toggle_play()

    assert controller.advance() == 0
    assert controller.playing is True
    assert controller.advance() == 1
