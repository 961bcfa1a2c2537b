import numpy as np
import pytest

from pyimgtools.images import Image
from pyimgtools.images.colorspace import CONVERSIONS, color_for, convert, filled, negotiate, unify
from pyimgtools.utils.enums import ColorSpace, SampleType
from pyimgtools.utils.exceptions import ProcessingError


def pixel(color_space: ColorSpace, values: list, dtype=np.uint8) -> Image:
    return Image(np.array([[values]], dtype=dtype), color_space)


def test_complete() -> None:
    for source in ColorSpace:
        for target in ColorSpace:
            assert (source, target) in CONVERSIONS


def test_swap() -> None:
    bgr = convert(pixel(ColorSpace.RGB, [10, 20, 30]), ColorSpace.BGR)
    assert bgr.color_space == ColorSpace.BGR
    assert list(bgr.data[0, 0]) == [30, 20, 10]


def test_add_alpha() -> None:
    rgba = convert(pixel(ColorSpace.BGR, [10, 20, 30]), ColorSpace.RGBA)
    assert list(rgba.data[0, 0]) == [30, 20, 10, 255]
    rgba16 = convert(pixel(ColorSpace.RGB, [1, 2, 3], np.uint16), ColorSpace.RGBA)
    assert rgba16.data[0, 0, 3] == 65535


def test_drop_alpha() -> None:
    rgb = convert(pixel(ColorSpace.BGRA, [10, 20, 30, 40]), ColorSpace.RGB)
    assert list(rgb.data[0, 0]) == [30, 20, 10]


def test_gray() -> None:
    gray = convert(pixel(ColorSpace.RGB, [255, 0, 0]), ColorSpace.GRAY)
    assert gray.data[0, 0, 0] == 76
    gray = convert(pixel(ColorSpace.BGR, [255, 0, 0]), ColorSpace.GRAY)
    assert gray.data[0, 0, 0] == 29
    color = convert(pixel(ColorSpace.GRAY, [100]), ColorSpace.BGRA)
    assert list(color.data[0, 0]) == [100, 100, 100, 255]


def test_identity() -> None:
    image = pixel(ColorSpace.RGB, [1, 2, 3])
    assert convert(image, ColorSpace.RGB) is image


@pytest.mark.parametrize(
    "spaces,expected",
    [
        ([], ColorSpace.RGB),
        ([ColorSpace.GRAY, ColorSpace.GRAY], ColorSpace.GRAY),
        ([ColorSpace.GRAY, ColorSpace.BGR], ColorSpace.BGR),
        ([ColorSpace.RGB, ColorSpace.BGRA], ColorSpace.BGRA),
        ([ColorSpace.RGBA, ColorSpace.BGRA, ColorSpace.BGRA], ColorSpace.RGBA),
        ([ColorSpace.BGRA, ColorSpace.BGRA, ColorSpace.RGBA], ColorSpace.RGBA),
        ([ColorSpace.RGB, ColorSpace.BGR], ColorSpace.RGB),
        ([ColorSpace.BGR, ColorSpace.BGR, ColorSpace.RGB], ColorSpace.RGB),
        ([ColorSpace.BGR, ColorSpace.GRAY, ColorSpace.GRAY], ColorSpace.BGR),
    ],
)
def test_negotiate(spaces: list, expected: ColorSpace) -> None:
    assert negotiate(spaces) == expected


def test_unify() -> None:
    images, color_space = unify([pixel(ColorSpace.GRAY, [5]), pixel(ColorSpace.RGBA, [1, 2, 3, 4])])
    assert color_space == ColorSpace.RGBA
    assert all(img.color_space == ColorSpace.RGBA for img in images)


def test_unify_mixed_sample_types() -> None:
    with pytest.raises(ProcessingError):
        unify([pixel(ColorSpace.RGB, [1, 2, 3]), pixel(ColorSpace.RGB, [1, 2, 3], np.uint16)])


def test_color_for() -> None:
    red = (255, 0, 0)
    assert color_for(red, ColorSpace.RGB) == (255, 0, 0)
    assert color_for(red, ColorSpace.BGR) == (0, 0, 255)
    assert color_for(red, ColorSpace.BGRA) == (0, 0, 255, 255)
    assert color_for(red, ColorSpace.GRAY) == (76,)
    assert color_for(red, ColorSpace.RGB, SampleType.FLOAT32) == (1.0, 0.0, 0.0)
    assert color_for(red, ColorSpace.RGBA, SampleType.UINT16) == (65535, 0, 0, 65535)


def test_filled() -> None:
    data = filled(3, 2, color_for((255, 128, 0), ColorSpace.BGR), ColorSpace.BGR, np.uint8)
    assert data.shape == (2, 3, 3)
    assert (data == [0, 128, 255]).all()
