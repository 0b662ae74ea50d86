"""Coalesces render requests into at most one redraw per tick."""


class RedrawScheduler:
    """
    Dirty flag in front of a compositor.

    Frame changes, resizes and region edits call request(); the host's loop
    calls tick() once per iteration and the compositor renders only when
    something asked for it.
    """

    def __init__(self, compositor):
        self.compositor = compositor
        self._dirty = False

    @property
    def dirty(self):
        return self._dirty

    def request(self):
        self._dirty = True

    def frame_changed(self, frame_index=None):
        """Listener for VideoFileSource.add_listener()."""
        self.request()

    def tick(self):
        """Render if dirty. Returns True when a render happened."""
        if not self._dirty:
            return False
        self._dirty = False
        self.compositor.render()
        return True
