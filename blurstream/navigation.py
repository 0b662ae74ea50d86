"""
Frame navigation capability and a small playback controller on top of it.

The compositor never talks to the navigator. The host wires frame-change
notifications from the navigator into the compositor (or a RedrawScheduler).
"""

from abc import ABC, abstractmethod

MIN_SPEED = 0.1
MAX_SPEED = 4.0


class FrameNavigator(ABC):
    """What a video player must offer for frame-accurate scrubbing."""

    @abstractmethod
    def seek_to_frame(self, frame_number: int) -> int:
        """Show the given frame. Returns the frame actually shown."""

    @abstractmethod
    def get_total_frames(self) -> int:
        pass

    @abstractmethod
    def get_frame_rate(self) -> float:
        pass


class PlaybackController:
    """Play/pause, stepping, speed and looping over a FrameNavigator."""

    def __init__(self, navigator: FrameNavigator, speed=1.0, looping=False):
        self.navigator = navigator
        self.current_frame = 0
        self.playing = False
        self.looping = looping
        self.speed = 1.0
        self.set_speed(speed)

    @property
    def total_frames(self):
        return self.navigator.get_total_frames()

    def set_speed(self, speed):
        self.speed = max(MIN_SPEED, min(MAX_SPEED, float(speed)))
        return self.speed

    def frame_interval(self):
        """Seconds between playback ticks at the current speed."""
        fps = self.navigator.get_frame_rate() or 30.0
        return 1.0 / fps / self.speed

    def toggle_play(self):
        self.playing = not self.playing
        return self.playing

    def pause(self):
        self.playing = False

    def seek(self, frame_number):
        last = max(0, self.total_frames - 1)
        frame_number = max(0, min(last, int(frame_number)))
        self.current_frame = self.navigator.seek_to_frame(frame_number)
        return self.current_frame

    def step(self, steps):
        return self.seek(self.current_frame + steps)

    def seek_percent(self, percent):
        last = max(0, self.total_frames - 1)
        return self.seek(round(percent / 100 * last))

    def skip_to_start(self):
        return self.seek(0)

    def skip_to_end(self):
        return self.seek(self.total_frames - 1)

    def advance(self):
        """
        One playback tick.

        Moves forward a frame while playing. At the last frame, or when the next frame
        fails to decode, playback wraps to the start when looping and pauses
        otherwise.
        """
        if not self.playing:
            return self.current_frame

        if self.current_frame < self.total_frames - 1:
            previous = self.current_frame
            if self.step(1) != previous:
                return self.current_frame
            # Reported frame count overshot the decodable frames

        if self.looping:
            return self.skip_to_start()
        self.pause()
        return self.current_frame
