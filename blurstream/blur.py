"""
Separable box blur for rectangular RGBA pixel buffers.

The filter runs a horizontal pass followed by a vertical pass. Samples that
fall outside the buffer are left out of both the sum and the divisor, so
pixels near the edges are averaged over fewer samples than interior pixels.
Alpha is carried through untouched.
"""

import numpy as np

MIN_INTENSITY = 1
MAX_INTENSITY = 20
CHANNELS = 4  # RGBA


def clamp_intensity(intensity) -> int:
    """Clamp a user-facing intensity into [MIN_INTENSITY, MAX_INTENSITY]."""
    return max(MIN_INTENSITY, min(MAX_INTENSITY, int(intensity)))


def blur_radius(intensity: int) -> int:
    """
    Map intensity to sample radius.

    The radius is intensity // 2, except that intensities 1 and 2 both map to
    radius 0 so the two lowest settings leave pixels unchanged.
    """
    if intensity <= 2:
        return 0
    return intensity // 2


def window_counts(length: int, radius: int) -> np.ndarray:
    """Number of in-range samples for every position along an axis."""
    positions = np.arange(length)
    lo = np.maximum(positions - radius, 0)
    hi = np.minimum(positions + radius, length - 1)
    return hi - lo + 1


def _box_pass(channels: np.ndarray, radius: int, axis: int) -> np.ndarray:
    """Average `channels` along `axis` over a window of +/- radius."""
    data = np.moveaxis(channels, axis, 0)
    length = data.shape[0]

    # One extra leading zero so window sums are differences of prefix sums
    pad = [(0, 0)] * data.ndim
    pad[0] = (radius + 1, radius)
    prefix = np.cumsum(np.pad(data, pad), axis=0)

    window = 2 * radius + 1
    sums = prefix[window:window + length] - prefix[:length]

    counts = window_counts(length, radius).reshape((length,) + (1,) * (data.ndim - 1))
    return np.moveaxis(sums // counts, 0, axis)


def blur(pixels, width: int, height: int, intensity: int) -> np.ndarray:
    """
    Blur an RGBA buffer.

    Args:
        pixels: (height, width, 4) uint8 array, or any flat buffer of
            width * height * 4 bytes
        width: Buffer width in pixels (>= 1)
        height: Buffer height in pixels (>= 1)
        intensity: Blur strength in [1, 20]

    Returns:
        New (height, width, 4) uint8 array
    """
    if width < 1 or height < 1:
        raise ValueError(f"Invalid blur size {width}x{height}")

    if isinstance(pixels, (bytes, bytearray, memoryview)):
        source = np.frombuffer(pixels, dtype=np.uint8)
    else:
        source = np.asarray(pixels, dtype=np.uint8)
    expected = width * height * CHANNELS
    if source.size != expected:
        raise ValueError(f"Buffer holds {source.size} bytes, expected {expected} for {width}x{height}")
    source = source.reshape((height, width, CHANNELS))

    radius = blur_radius(clamp_intensity(intensity))
    if radius == 0:
        return source.copy()

    rgb = source[:, :, :3].astype(np.int32)
    rgb = _box_pass(rgb, radius, axis=1)  # horizontal
    rgb = _box_pass(rgb, radius, axis=0)  # vertical

    result = np.empty_like(source)
    result[:, :, :3] = np.clip(rgb, 0, 255)
    result[:, :, 3] = source[:, :, 3]
    return result
