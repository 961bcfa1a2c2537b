import numpy as np
import pytest

from pyimgtools.images import Image
from pyimgtools.images.processors.mix import Mosaic, Placement
from pyimgtools.utils.enums import ColorSpace, SampleType
from pyimgtools.utils.exceptions import InputError, ProcessingError


def solid(width: int, height: int, value: int, color_space: ColorSpace = ColorSpace.RGB) -> Image:
    return Image(np.full((height, width, color_space.channels), value, dtype=np.uint8), color_space)


def test_placement() -> None:
    p = Placement.create({"sourceIndex": 1, "x": 2, "y": 3, "rotationDegrees": 45, "targetWidth": 10, "zIndex": 2})
    assert p == Placement(index=1, x=2.0, y=3.0, rotation=45.0, width=10, height=None, z_index=2)
    assert Placement.create({"arrayIndex": 4}).index == 4
    assert Placement.create(p) is p


@pytest.mark.parametrize("value", [{"x": 1}, {"index": "a"}, [0, 1, 2], None])
def test_placement_invalid(value: object) -> None:
    with pytest.raises(InputError):
        Placement.create(value)  # type: ignore


def test_invalid_canvas() -> None:
    with pytest.raises(ProcessingError):
        Mosaic(0, 10)


async def test_empty() -> None:
    result = await Mosaic(5, 4, background="#102030")([])
    assert result.color_space == ColorSpace.RGB
    assert result.sample_type == SampleType.UINT8
    assert (result.width, result.height) == (5, 4)
    assert (result.data == [16, 32, 48]).all()


async def test_place() -> None:
    placements = [{"sourceIndex": 0, "x": 1, "y": 1}, {"sourceIndex": 1, "x": 2, "y": 2}]
    result = await Mosaic(6, 6, placements=placements)([solid(2, 2, 10), solid(2, 2, 20)])
    assert result.data[0, 0, 0] == 0
    assert result.data[1, 1, 0] == 10

    # later placement wins
    assert result.data[2, 2, 0] == 20
    assert result.data[3, 3, 0] == 20


async def test_clip_and_skip() -> None:
    placements = [
        {"sourceIndex": 0, "x": -1, "y": 4},
        {"sourceIndex": 0, "x": 10, "y": 0},
        {"sourceIndex": 5, "x": 0, "y": 0},
    ]
    result = await Mosaic(6, 6, placements=placements)([solid(3, 3, 50)])
    assert (result.data[4:6, 0:2] == 50).all()
    assert int(result.data.astype(int).sum()) == 50 * 4 * 3


async def test_normalized() -> None:
    placements = [{"sourceIndex": 0, "x": 0.5, "y": 0.25}]
    result = await Mosaic(8, 8, placements=placements, normalized=True)([solid(1, 1, 99)])
    assert result.data[2, 4, 0] == 99


async def test_color_space_across_all_images() -> None:
    # second image is never placed, but still decides the canvas layout
    placements = [{"sourceIndex": 0, "x": 0, "y": 0}]
    result = await Mosaic(2, 2, background="#FF0000", placements=placements)(
        [solid(1, 1, 7, ColorSpace.GRAY), solid(1, 1, 0, ColorSpace.BGRA)]
    )
    assert result.color_space == ColorSpace.BGRA
    assert list(result.data[0, 0]) == [7, 7, 7, 255]
    assert list(result.data[1, 1]) == [0, 0, 255, 255]


async def test_color_space_priority() -> None:
    # a single RGB input outranks any number of BGR inputs
    placements = [{"sourceIndex": i, "x": i, "y": 0} for i in range(3)]
    bgr = Image(np.array([[[10, 20, 30]]], dtype=np.uint8), ColorSpace.BGR)
    result = await Mosaic(3, 1, placements=placements)([bgr, bgr, solid(1, 1, 5)])
    assert result.color_space == ColorSpace.RGB
    assert list(result.data[0, 0]) == [30, 20, 10]
    assert list(result.data[0, 2]) == [5, 5, 5]


async def test_parallel() -> None:
    images = [solid(2, 2, 10 * (i + 1)) for i in range(6)]
    placements = [{"sourceIndex": i, "x": 2 * i, "y": 0} for i in range(6)]
    parallel = await Mosaic(12, 2, placements=placements, parallel_threshold=2)(images)
    sequential = await Mosaic(12, 2, placements=placements, parallel_threshold=100)(images)
    np.testing.assert_array_equal(parallel.data, sequential.data)
    assert parallel.data[0, 11, 0] == 60


async def test_mixed_sample_types() -> None:
    wide = Image(np.zeros((2, 2, 3), dtype=np.uint16))
    with pytest.raises(ProcessingError):
        await Mosaic(4, 4)([solid(2, 2, 0), wide])
