import numpy as np
import pytest

from pyimgtools.images import Image
from pyimgtools.images.processors.transform import Rotate
from pyimgtools.utils.enums import ColorSpace


async def test_quarter() -> None:
    image = Image(np.zeros((10, 20, 3), dtype=np.uint8))
    image.data[0, 0] = [1, 2, 3]
    result = await Rotate(angle=90)(image)
    assert (result.width, result.height) == (10, 20)

    # top left moves to top right
    assert list(result.data[0, 9]) == [1, 2, 3]


@pytest.mark.parametrize("angle", [90, 180, 270, -90, 450])
async def test_round_trip(angle: float) -> None:
    image = Image(np.random.randint(0, 255, size=(7, 12, 3), dtype=np.uint8))
    rotated = await Rotate(angle=angle)(image)
    result = await Rotate(angle=-angle)(rotated)
    np.testing.assert_array_equal(result.data, image.data)


async def test_pad_color_order() -> None:
    image = Image(np.full((10, 10, 3), 50, dtype=np.uint8), ColorSpace.BGR)
    result = await Rotate(angle=45, pad_color="#FF0000")(image)
    assert (result.width, result.height) == (14, 14)
    assert result.color_space == ColorSpace.BGR
    assert list(result.data[0, 0]) == [0, 0, 255]


async def test_alpha_fill() -> None:
    image = Image(np.full((10, 10, 4), 50, dtype=np.uint8), ColorSpace.RGBA)
    result = await Rotate(angle=30, pad_color="#00FF00")(image)
    assert list(result.data[0, 0]) == [0, 255, 0, 255]
