"""
StackBlur - Functional Core

Software blur that needs nothing from the host. Two passes (horizontal,
then vertical) of a triangular-weighted sliding window:

    weight(i) = r + 1 - |i|    for i in [-r, r]

The window sum is maintained incrementally with "in" and "out" partial
sums, so each step costs O(1) regardless of radius. Normalization uses a
precomputed divisor table instead of per-pixel division.

Each pass slides along one axis and is vectorised with numpy across the
other, so the Python loop runs width + height steps in total.
"""

from functools import lru_cache

import numpy as np  # type: ignore

MAX_RADIUS = 254


@lru_cache(maxsize=16)
def divisor_table(radius: int) -> np.ndarray:
    """
    Lookup table dv[i] = i // divsum for every reachable weighted sum.

    divsum = ((div + 1) >> 1) ** 2 with div = 2r + 1, which equals
    (r + 1) ** 2, the total weight of the triangular kernel. The largest
    weighted sum of 8-bit samples is 255 * divsum, so 256 * divsum
    entries cover every index.

    Examples:
        >>> dv = divisor_table(2)
        >>> len(dv), int(dv[9 * 200])
        (2304, 200)
    """
    div = radius + radius + 1
    divsum = (div + 1) >> 1
    divsum *= divsum
    table = (np.arange(256 * divsum, dtype=np.int64) // divsum).astype(np.uint8)
    table.setflags(write=False)
    return table


def kernel_weights(radius: int) -> np.ndarray:
    """
    Triangular kernel weights for offsets -r..r.

    Examples:
        >>> kernel_weights(2).tolist()
        [1, 2, 3, 2, 1]
    """
    offsets = np.arange(-radius, radius + 1)
    return radius + 1 - np.abs(offsets)


def _blur_lines(lines: np.ndarray, radius: int, dv: np.ndarray) -> np.ndarray:
    """
    One StackBlur pass along axis 1 of a (n_lines, length, channels) array.

    Indices outside [0, length - 1] are clamped to the nearest edge sample.

    Returns:
        Blurred int64 array of the same shape
    """
    n_lines, length, channels = lines.shape
    last = length - 1
    div = radius + radius + 1
    r1 = radius + 1

    out = np.empty((n_lines, length, channels), dtype=np.int64)
    stack = np.empty((div, n_lines, channels), dtype=np.int64)

    total = np.zeros((n_lines, channels), dtype=np.int64)
    in_sum = np.zeros((n_lines, channels), dtype=np.int64)
    out_sum = np.zeros((n_lines, channels), dtype=np.int64)

    # Prime the window centered on sample 0
    for i in range(-radius, radius + 1):
        sample = lines[:, min(last, max(i, 0))]
        stack[i + radius] = sample
        total += sample * (r1 - abs(i))
        if i > 0:
            in_sum += sample
        else:
            out_sum += sample

    stack_pointer = radius
    for x in range(length):
        out[:, x] = dv[total]

        # Drop the trailing half of the window
        total -= out_sum
        slot = stack[(stack_pointer - radius + div) % div]
        out_sum -= slot

        # Pull in the next sample at the leading edge
        slot[...] = lines[:, min(x + r1, last)]
        in_sum += slot
        total += in_sum

        # Advance the center: it moves from the "in" half to the "out" half
        stack_pointer = (stack_pointer + 1) % div
        center = stack[stack_pointer]
        out_sum += center
        in_sum -= center

    return out


def stack_blur(pixels: np.ndarray, radius: int) -> np.ndarray:
    """
    Blur an RGB(A) uint8 array with StackBlur.

    Args:
        pixels: uint8 array (height, width, 3 or 4); alpha is ignored
        radius: Blur radius in pixels; < 1 returns an opaque copy,
                values above MAX_RADIUS are capped

    Returns:
        uint8 RGBA array (height, width, 4) with alpha forced to 255

    Examples:
        >>> img = np.full((1, 9, 3), 77, dtype=np.uint8)
        >>> stack_blur(img, 3)[0, :, 0].tolist()
        [77, 77, 77, 77, 77, 77, 77, 77, 77]
    """
    height, width = pixels.shape[:2]
    rgb = pixels[:, :, :3].astype(np.int64)

    result = np.empty((height, width, 4), dtype=np.uint8)
    result[:, :, 3] = 255

    radius = min(int(radius), MAX_RADIUS)
    if radius < 1:
        result[:, :, :3] = pixels[:, :, :3]
        return result

    dv = divisor_table(radius)

    # Horizontal pass: lines are rows, written to per-channel intermediates
    horizontal = _blur_lines(rgb, radius, dv)

    # Vertical pass: lines are columns
    vertical = _blur_lines(horizontal.transpose(1, 0, 2), radius, dv)

    result[:, :, :3] = vertical.transpose(1, 0, 2)
    return result
