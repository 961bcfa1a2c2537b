"""
Resampling and region helpers shared by the transform and mix processors.

All functions work on pixel arrays of shape (height, width, channels) and never modify their input.
"""
import logging
import math
from typing import Any, NamedTuple, Optional, Sequence

import numpy as np
import scipy.ndimage
from numpy.typing import NDArray

from pyimgtools.images.colorspace import filled, saturate
from pyimgtools.utils.enums import ColorSpace

log = logging.getLogger(__name__)

# tolerance for detecting right angles
ANGLE_EPS = 1e-3


class Region(NamedTuple):
    """Rectangle on a canvas together with the matching offset in the source image."""

    x: int
    y: int
    width: int
    height: int
    src_x: int
    src_y: int

    def overlaps(self, other: "Region") -> bool:
        return (
            self.x < other.x + other.width
            and other.x < self.x + self.width
            and self.y < other.y + other.height
            and other.y < self.y + self.height
        )


def round_half_away(value: float) -> int:
    """Round to nearest integer, with halves rounded away from zero."""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def _map_channels(data: NDArray[Any], func: Any, cval: Optional[Sequence[float]] = None) -> NDArray[Any]:
    """Applies a function to each channel plane as float64 and stacks the results."""
    planes = []
    for c in range(data.shape[2]):
        plane = data[:, :, c].astype(np.float64)
        planes.append(func(plane) if cval is None else func(plane, float(cval[c])))
    return saturate(np.stack(planes, axis=2), data.dtype)


def resize(data: NDArray[Any], width: int, height: int) -> NDArray[Any]:
    """Bilinear resampling with pixel centres at half-integer positions.

    Args:
        data: Pixel data.
        width: New width.
        height: New height.

    Returns:
        Resized pixel data.
    """
    h, w = data.shape[:2]
    if w == width and h == height:
        return data.copy()

    # scale from output to input
    sy, sx = h / height, w / width

    def resample(plane: NDArray[Any]) -> NDArray[Any]:
        return scipy.ndimage.affine_transform(
            plane,
            np.array([sy, sx]),
            offset=(0.5 * sy - 0.5, 0.5 * sx - 0.5),
            output_shape=(height, width),
            order=1,
            mode="nearest",
        )

    return _map_channels(data, resample)


def normalize_angle(angle: float) -> float:
    """Normalize angle to [0, 360), snapping values within tolerance of 360 to 0."""
    angle = float(angle) % 360.0
    return 0.0 if abs(angle - 360.0) < ANGLE_EPS else angle


def rotate(data: NDArray[Any], angle: float, fill: Sequence[float]) -> NDArray[Any]:
    """Rotates pixel data clockwise by the given angle in degrees.

    Multiples of 90 degrees are lossless. All other angles use bilinear resampling about the image centre on a
    canvas that is grown to the rotated bounding box, exposed pixels are filled with the given value.

    Args:
        data: Pixel data.
        angle: Rotation angle in degrees, clockwise.
        fill: Value per channel for exposed pixels.

    Returns:
        Rotated pixel data.
    """

    # right angles
    angle = normalize_angle(angle)
    for quarter in range(4):
        if abs(angle - 90.0 * quarter) < ANGLE_EPS:
            # np.rot90 turns counter-clockwise for positive k
            return np.ascontiguousarray(np.rot90(data, k=-quarter))

    # size of rotated bounding box
    h, w = data.shape[:2]
    theta = math.radians(angle)
    cos_a, sin_a = math.cos(theta), math.sin(theta)
    new_w = max(1, int(h * abs(sin_a) + w * abs(cos_a)))
    new_h = max(1, int(h * abs(cos_a) + w * abs(sin_a)))

    # maps (row, col) in output to (row, col) in input
    matrix = np.array([[cos_a, -sin_a], [sin_a, cos_a]])
    centre_in = np.array([(h - 1) / 2.0, (w - 1) / 2.0])
    centre_out = np.array([(new_h - 1) / 2.0, (new_w - 1) / 2.0])
    offset = centre_in - matrix @ centre_out

    def resample(plane: NDArray[Any], cval: float) -> NDArray[Any]:
        return scipy.ndimage.affine_transform(
            plane, matrix, offset=offset, output_shape=(new_h, new_w), order=1, mode="constant", cval=cval
        )

    return _map_channels(data, resample, cval=fill)


def pad(
    data: NDArray[Any], top: int, bottom: int, left: int, right: int, fill: Sequence[float], color_space: ColorSpace
) -> NDArray[Any]:
    """Adds borders of constant value around pixel data, negative margins count as zero.

    Args:
        data: Pixel data.
        top: Rows to add at the top.
        bottom: Rows to add at the bottom.
        left: Columns to add on the left.
        right: Columns to add on the right.
        fill: Border value per channel.
        color_space: Color space of data.

    Returns:
        Padded pixel data.
    """
    top, bottom, left, right = (max(0, int(v)) for v in (top, bottom, left, right))
    h, w = data.shape[:2]
    out = filled(w + left + right, h + top + bottom, tuple(fill), color_space, data.dtype)
    out[top : top + h, left : left + w] = data
    return out


def clip_region(x: int, y: int, width: int, height: int, canvas_width: int, canvas_height: int) -> Optional[Region]:
    """Intersects an image of given size placed at (x, y) with the canvas.

    Returns:
        Visible region or None, if the image lies completely outside of the canvas.
    """
    if x >= canvas_width or y >= canvas_height or x + width <= 0 or y + height <= 0:
        return None
    src_x, src_y = max(0, -x), max(0, -y)
    dst_x, dst_y = max(0, x), max(0, y)
    w = min(width - src_x, canvas_width - dst_x)
    h = min(height - src_y, canvas_height - dst_y)
    if w <= 0 or h <= 0:
        return None
    return Region(dst_x, dst_y, w, h, src_x, src_y)


def place(canvas: NDArray[Any], data: NDArray[Any], region: Region) -> None:
    """Copies the visible part of data into the canvas, modifying the canvas in place."""
    canvas[region.y : region.y + region.height, region.x : region.x + region.width] = data[
        region.src_y : region.src_y + region.height, region.src_x : region.src_x + region.width
    ]


__all__ = [
    "Region",
    "round_half_away",
    "resize",
    "normalize_angle",
    "rotate",
    "pad",
    "clip_region",
    "place",
]
