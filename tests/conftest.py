import numpy as np
import pytest

from blurstream.overlays import RegionCompositor
from blurstream.surfaces import ArrayFrameSurface


def gradient_frame(width, height):
    """Opaque RGBA frame whose colors vary with position."""
    ys, xs = np.mgrid[0:height, 0:width]
    frame = np.empty((height, width, 4), dtype=np.uint8)
    frame[:, :, 0] = (xs * 7 + ys * 3) % 256
    frame[:, :, 1] = (xs * 13) % 256
    frame[:, :, 2] = (ys * 11) % 256
    frame[:, :, 3] = 255
    return frame


@pytest.fixture
def surface():
    return ArrayFrameSurface(gradient_frame(100, 100))


@pytest.fixture
def compositor(surface):
    comp = RegionCompositor()
    comp.attach(surface)
    yield comp
    comp.teardown()


@pytest.fixture
def make_frame():
    return gradient_frame
