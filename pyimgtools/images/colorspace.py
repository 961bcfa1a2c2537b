"""
Conversion between channel layouts and negotiation of a common layout for several images.

Every pair of color spaces has an explicit rule in :data:`CONVERSIONS`, each one a pure function on the
(H, W, C) pixel array.
"""
import logging
from typing import Any, Callable, Dict, Iterable, List, Sequence, Tuple

import numpy as np
from numpy.typing import NDArray

from pyimgtools.images.image import Image
from pyimgtools.utils.colors import RGBColor
from pyimgtools.utils.enums import ColorSpace, SampleType
from pyimgtools.utils.exceptions import ProcessingError

log = logging.getLogger(__name__)

Conversion = Callable[[NDArray[Any]], NDArray[Any]]

# BT.601 luma weights for R, G, B
LUMA_WEIGHTS = (0.299, 0.587, 0.114)


def saturate(data: NDArray[Any], dtype: Any) -> NDArray[Any]:
    """Cast floating point data to the given dtype, rounding and clipping integer types to their range.

    Args:
        data: Data to cast.
        dtype: Target dtype.

    Returns:
        Cast data.
    """
    dtype = np.dtype(dtype)
    if np.issubdtype(dtype, np.integer):
        info = np.iinfo(dtype)
        return np.clip(np.rint(data), info.min, info.max).astype(dtype)
    return np.asarray(data, dtype=dtype)


def _alpha_like(data: NDArray[Any]) -> NDArray[Any]:
    """Fully opaque alpha plane for the sample type of data."""
    value = SampleType.from_dtype(data.dtype).max_value
    return np.full(data.shape[:2] + (1,), value, dtype=data.dtype)


def _identity(data: NDArray[Any]) -> NDArray[Any]:
    return data


def _swap_rb(data: NDArray[Any]) -> NDArray[Any]:
    return np.ascontiguousarray(data[:, :, [2, 1, 0]])


def _swap_rb_keep_alpha(data: NDArray[Any]) -> NDArray[Any]:
    return np.ascontiguousarray(data[:, :, [2, 1, 0, 3]])


def _drop_alpha(data: NDArray[Any]) -> NDArray[Any]:
    return np.ascontiguousarray(data[:, :, :3])


def _drop_alpha_swap(data: NDArray[Any]) -> NDArray[Any]:
    return np.ascontiguousarray(data[:, :, [2, 1, 0]])


def _add_alpha(data: NDArray[Any]) -> NDArray[Any]:
    return np.concatenate([data, _alpha_like(data)], axis=2)


def _add_alpha_swap(data: NDArray[Any]) -> NDArray[Any]:
    return np.concatenate([data[:, :, [2, 1, 0]], _alpha_like(data)], axis=2)


def _gray_from(order: Tuple[int, int, int]) -> Conversion:
    """Creates a conversion to gray for color data with R, G and B at the given channel indices."""

    def to_gray(data: NDArray[Any]) -> NDArray[Any]:
        r, g, b = (data[:, :, i].astype(np.float32) for i in order)
        gray = LUMA_WEIGHTS[0] * r + LUMA_WEIGHTS[1] * g + LUMA_WEIGHTS[2] * b
        return saturate(gray[:, :, np.newaxis], data.dtype)

    return to_gray


def _gray_to_color(data: NDArray[Any]) -> NDArray[Any]:
    return np.repeat(data, 3, axis=2)


def _gray_to_color_alpha(data: NDArray[Any]) -> NDArray[Any]:
    return np.concatenate([np.repeat(data, 3, axis=2), _alpha_like(data)], axis=2)


G, RGB, RGBA, BGR, BGRA = ColorSpace.GRAY, ColorSpace.RGB, ColorSpace.RGBA, ColorSpace.BGR, ColorSpace.BGRA

# order of preference when negotiating a common color space
PRIORITY = (RGBA, BGRA, RGB, BGR, G)

CONVERSIONS: Dict[Tuple[ColorSpace, ColorSpace], Conversion] = {
    (G, G): _identity,
    (G, RGB): _gray_to_color,
    (G, BGR): _gray_to_color,
    (G, RGBA): _gray_to_color_alpha,
    (G, BGRA): _gray_to_color_alpha,
    (RGB, G): _gray_from((0, 1, 2)),
    (RGB, RGB): _identity,
    (RGB, BGR): _swap_rb,
    (RGB, RGBA): _add_alpha,
    (RGB, BGRA): _add_alpha_swap,
    (BGR, G): _gray_from((2, 1, 0)),
    (BGR, BGR): _identity,
    (BGR, RGB): _swap_rb,
    (BGR, BGRA): _add_alpha,
    (BGR, RGBA): _add_alpha_swap,
    (RGBA, G): _gray_from((0, 1, 2)),
    (RGBA, RGB): _drop_alpha,
    (RGBA, BGR): _drop_alpha_swap,
    (RGBA, RGBA): _identity,
    (RGBA, BGRA): _swap_rb_keep_alpha,
    (BGRA, G): _gray_from((2, 1, 0)),
    (BGRA, BGR): _drop_alpha,
    (BGRA, RGB): _drop_alpha_swap,
    (BGRA, BGRA): _identity,
    (BGRA, RGBA): _swap_rb_keep_alpha,
}


def get_conversion(source: ColorSpace, target: ColorSpace) -> Conversion:
    """Returns the conversion function between two color spaces.

    Raises:
        ProcessingError: If no rule exists for the pair.
    """
    try:
        return CONVERSIONS[source, target]
    except KeyError:
        raise ProcessingError(f"No conversion from {source} to {target}.")


def convert(image: Image, target: ColorSpace) -> Image:
    """Converts an image into the given color space. Returns the image itself, if nothing needs to be done.

    Args:
        image: Image to convert.
        target: Color space to convert to.

    Returns:
        Converted image.
    """
    if image.color_space == target:
        return image
    return Image(get_conversion(image.color_space, target)(image.data), target)


def negotiate(color_spaces: Iterable[ColorSpace]) -> ColorSpace:
    """Select a common color space for the given list of color spaces.

    The first color space in the priority RGBA > BGRA > RGB > BGR > GRAY that is present among the inputs is
    chosen, regardless of how many inputs use it. An empty list gives RGB.

    Args:
        color_spaces: Color spaces of all inputs.

    Returns:
        Negotiated color space.
    """
    spaces = list(color_spaces)
    if len(spaces) == 0:
        return ColorSpace.RGB

    # first one present wins
    for color_space in PRIORITY:
        if color_space in spaces:
            return color_space
    return ColorSpace.GRAY


def unify(images: Sequence[Image]) -> Tuple[List[Image], ColorSpace]:
    """Converts all images into their negotiated color space.

    Args:
        images: Images to convert.

    Returns:
        Tuple of converted images and the negotiated color space.

    Raises:
        ProcessingError: If images have different sample types.
    """
    sample_types = set(img.sample_type for img in images)
    if len(sample_types) > 1:
        names = ", ".join(sorted(s.value for s in sample_types))
        raise ProcessingError(f"Cannot combine images with different sample types: {names}.")
    target = negotiate(img.color_space for img in images)
    log.debug("Negotiated color space %s for %d images.", target.value, len(images))
    return [convert(img, target) for img in images], target


def color_for(rgb: RGBColor, color_space: ColorSpace, sample_type: SampleType = SampleType.UINT8) -> Tuple[float, ...]:
    """Returns a color authored in RGB order as pixel value in the order and scale of the given buffer layout.

    Args:
        rgb: Color as (R, G, B) in [0, 255].
        color_space: Channel order of the target buffer.
        sample_type: Sample type of the target buffer.

    Returns:
        Tuple with one value per channel.
    """
    scale = sample_type.max_value / 255.0
    r, g, b = (c * scale for c in rgb)
    alpha = sample_type.max_value
    if color_space == ColorSpace.GRAY:
        value = LUMA_WEIGHTS[0] * r + LUMA_WEIGHTS[1] * g + LUMA_WEIGHTS[2] * b
        return (round(value) if sample_type.is_integer else value,)
    elif color_space == ColorSpace.RGB:
        return r, g, b
    elif color_space == ColorSpace.BGR:
        return b, g, r
    elif color_space == ColorSpace.RGBA:
        return r, g, b, alpha
    else:
        return b, g, r, alpha


def filled(width: int, height: int, color: Tuple[float, ...], color_space: ColorSpace, dtype: Any) -> NDArray[Any]:
    """Creates a pixel array of given size filled with a color as returned by :func:`color_for`."""
    data = np.empty((height, width, color_space.channels), dtype=dtype)
    data[:, :] = saturate(np.asarray(color, dtype=np.float64), dtype)
    return data


__all__ = ["CONVERSIONS", "get_conversion", "convert", "negotiate", "unify", "color_for", "filled", "saturate"]
