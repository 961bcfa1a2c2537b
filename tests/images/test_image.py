import io

import numpy as np
import PIL.Image
import pytest

from pyimgtools.images import Image
from pyimgtools.utils.enums import ColorSpace, SampleType
from pyimgtools.utils.exceptions import InputError


def test_init() -> None:
    image = Image(np.zeros((4, 6), dtype=np.uint8))
    assert image.data.shape == (4, 6, 1)
    assert image.width == 6
    assert image.height == 4
    assert image.color_space == ColorSpace.GRAY
    assert image.sample_type == SampleType.UINT8


def test_init_invalid() -> None:
    with pytest.raises(InputError):
        Image(np.zeros((4, 6, 3), dtype=np.uint8), ColorSpace.RGBA)
    with pytest.raises(InputError):
        Image(np.zeros((0, 6, 3), dtype=np.uint8))
    with pytest.raises(InputError):
        Image(np.zeros((4, 6, 3), dtype=np.int32))


def test_from_raw() -> None:
    data = bytes(range(24))
    image = Image.from_raw({"data": data, "width": 4, "height": 2, "channels": 3, "colorSpace": "BGR"})
    assert image.color_space == ColorSpace.BGR
    assert image.data.shape == (2, 4, 3)
    assert image.data[1, 0, 2] == 14


def test_from_raw_infer_channels() -> None:
    image = Image.from_raw({"data": bytes(32), "width": 4, "height": 2})
    assert image.color_space == ColorSpace.RGBA


def test_from_raw_legacy_channels() -> None:
    data = np.arange(8, dtype=np.uint16).tobytes()
    image = Image.from_raw({"data": data, "width": 4, "height": 2, "channels": "int16_GRAY"})
    assert image.sample_type == SampleType.UINT16
    assert image.color_space == ColorSpace.GRAY
    assert image.data[1, 3, 0] == 7


def test_from_raw_float() -> None:
    data = np.full((2, 2, 3), 0.5, dtype=np.float32).tobytes()
    image = Image.from_raw({"data": data, "width": 2, "height": 2, "dtype": "float32"})
    assert image.sample_type == SampleType.FLOAT32
    assert image.channels == 3


@pytest.mark.parametrize("length", [23, 25, 0])
def test_from_raw_length_mismatch(length: int) -> None:
    with pytest.raises(InputError):
        Image.from_raw({"data": bytes(length), "width": 4, "height": 2, "channels": 3})


@pytest.mark.parametrize(
    "raw",
    [
        {"width": 4, "height": 2},
        {"data": bytes(8), "width": 0, "height": 2},
        {"data": bytes(8), "width": 4, "height": "two"},
        {"data": "abcdefgh", "width": 4, "height": 2},
        {"data": bytes(24), "width": 4, "height": 2, "channels": 3, "colorSpace": "RGBA"},
        {"data": bytes(24), "width": 4, "height": 2, "colorSpace": "CMYK"},
        {"data": bytes(24), "width": 4, "height": 2, "dtype": "int64"},
    ],
)
def test_from_raw_invalid(raw: dict) -> None:
    with pytest.raises(InputError):
        Image.from_raw(raw)


def test_from_bytes() -> None:
    # create png
    pixels = np.zeros((3, 5, 3), dtype=np.uint8)
    pixels[0, 0] = [255, 0, 0]
    with io.BytesIO() as bio:
        PIL.Image.fromarray(pixels).save(bio, format="PNG")
        buffer = bio.getvalue()

    # decode
    image = Image.from_input(buffer)
    assert image.color_space == ColorSpace.RGB
    assert image.width == 5
    assert image.height == 3
    np.testing.assert_array_equal(image.data, pixels)


def test_from_bytes_palette() -> None:
    pil = PIL.Image.new("P", (2, 2))
    with io.BytesIO() as bio:
        pil.save(bio, format="PNG")
        image = Image.from_bytes(bio.getvalue())
    assert image.color_space in (ColorSpace.RGB, ColorSpace.RGBA)


def test_from_bytes_invalid() -> None:
    with pytest.raises(InputError):
        Image.from_bytes(b"definitely not an image")


def test_from_input_invalid() -> None:
    with pytest.raises(InputError):
        Image.from_input(42)


def test_to_raw() -> None:
    image = Image(np.arange(12, dtype=np.uint8).reshape((2, 2, 3)), ColorSpace.BGR)
    raw = image.to_raw()
    assert raw["width"] == 2
    assert raw["height"] == 2
    assert raw["channels"] == 3
    assert raw["colorSpace"] == "BGR"
    assert raw["dtype"] == "uint8"
    assert len(raw["data"]) == raw["width"] * raw["height"] * raw["channels"]
    assert Image.from_raw(raw).color_space == ColorSpace.BGR


def test_copy() -> None:
    image = Image(np.zeros((2, 2, 3), dtype=np.uint8))
    copy = image.copy()
    copy.data[0, 0, 0] = 10
    assert image.data[0, 0, 0] == 0
