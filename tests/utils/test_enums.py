import numpy as np
import pytest

from pyimgtools.utils.enums import ColorSpace, ConcatDirection, FilterType, ResizeMode, SampleType, parse_enum
from pyimgtools.utils.exceptions import InputError


def test_parse_enum() -> None:
    assert parse_enum(ResizeMode, "multiply") == ResizeMode.MULTIPLY
    assert parse_enum(ResizeMode, "AUTO") == ResizeMode.AUTO
    assert parse_enum(FilterType, FilterType.EDGE) == FilterType.EDGE
    assert parse_enum(ColorSpace, "bgra") == ColorSpace.BGRA


def test_parse_enum_invalid() -> None:
    with pytest.raises(InputError):
        parse_enum(FilterType, "median")
    with pytest.raises(InputError):
        parse_enum(FilterType, 3)


def test_color_space() -> None:
    assert ColorSpace.GRAY.channels == 1
    assert ColorSpace.BGR.channels == 3
    assert ColorSpace.RGBA.channels == 4
    assert ColorSpace.BGRA.has_alpha
    assert not ColorSpace.RGB.has_alpha
    assert ColorSpace.BGR.is_bgr
    assert not ColorSpace.RGBA.is_bgr


def test_color_space_from_channels() -> None:
    assert ColorSpace.from_channels(1) == ColorSpace.GRAY
    assert ColorSpace.from_channels(3) == ColorSpace.RGB
    assert ColorSpace.from_channels(4) == ColorSpace.RGBA
    with pytest.raises(InputError):
        ColorSpace.from_channels(2)


def test_sample_type() -> None:
    assert SampleType.UINT8.bytes_per_sample == 1
    assert SampleType.UINT16.bytes_per_sample == 2
    assert SampleType.FLOAT32.bytes_per_sample == 4
    assert SampleType.UINT16.max_value == 65535
    assert SampleType.from_dtype(np.float32) == SampleType.FLOAT32
    with pytest.raises(InputError):
        SampleType.from_dtype(np.int32)


def test_concat_direction() -> None:
    assert ConcatDirection.LEFT.is_horizontal
    assert not ConcatDirection.UP.is_horizontal
