import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, List

import numpy as np
import pytest

from pyimgtools.images import Image
from pyimgtools.images.encoder import OutputSpec
from pyimgtools.images.processors.mix import Blend
from pyimgtools.images.processors.transform import Crop, Padding
from pyimgtools.tasks import ImageTask, TaskState, Timing
from pyimgtools.utils import exceptions as exc
from pyimgtools.utils.exceptions import InputError, ProcessingError


def raw(width: int, height: int, value: int = 0) -> dict:
    return {"data": bytes([value]) * (width * height * 3), "width": width, "height": height, "channels": 3}


def test_timing() -> None:
    assert Timing(1.0, 2.0, 3.0).to_dict() == {"convertMs": 1.0, "taskMs": 2.0, "encodeMs": 3.0}


def test_ingest() -> None:
    task = ImageTask(Padding(), raw(4, 2))
    assert task.state == TaskState.QUEUED
    assert len(task.images) == 1
    assert task.images[0].width == 4
    assert task.timing.convert_ms >= 0.0


def test_ingest_invalid() -> None:
    with pytest.raises(InputError):
        ImageTask(Padding(), {"data": bytes(5), "width": 4, "height": 2, "channels": 3})


async def test_run() -> None:
    task = ImageTask(Padding(1, 1, 1, 1), raw(4, 2))
    result = await task.run()
    assert task.state == TaskState.COMPLETED
    assert result.image["width"] == 6
    assert result.image["height"] == 4
    assert set(result.to_dict()["timing"].keys()) == {"convertMs", "taskMs", "encodeMs"}


async def test_run_encoded() -> None:
    task = ImageTask(Crop(0, 0, 2, 2), raw(4, 4), OutputSpec("png"))
    result = await task.run()
    assert isinstance(result.image, bytes)
    assert result.image[:4] == b"\x89PNG"


async def test_run_composite() -> None:
    task = ImageTask(Blend(0.5), [raw(2, 2, 100), raw(2, 2, 200)])
    result = await task.run()
    assert result.image["data"] == bytes([150]) * 12


async def test_run_twice() -> None:
    task = ImageTask(Padding(), raw(2, 2))
    await task.run()
    with pytest.raises(ProcessingError):
        await task.run()


async def test_run_failed(caplog) -> None:
    task = ImageTask(Padding(), [raw(2, 2), raw(2, 2)])
    with caplog.at_level(logging.ERROR):
        with pytest.raises(InputError):
            await task.run()
    assert task.state == TaskState.FAILED
    assert isinstance(task.error, InputError)
    assert "Padding failed" in caplog.text


async def test_run_executor() -> None:
    with ThreadPoolExecutor(max_workers=1) as executor:
        result = await ImageTask(Padding(top=2), raw(2, 2)).run(executor)
    assert result.image["height"] == 4


async def test_submit() -> None:
    calls: List[Any] = []
    task = ImageTask(Padding(left=1), raw(2, 2)).submit(lambda err, res: calls.append((err, res)))
    await task
    await asyncio.sleep(0)
    assert len(calls) == 1
    error, result = calls[0]
    assert error is None
    assert result.image["width"] == 3


async def test_submit_error() -> None:
    calls: List[Any] = []
    task = ImageTask(Blend(), [raw(2, 2)]).submit(lambda err, res: calls.append((err, res)))
    with pytest.raises(InputError):
        await task
    await asyncio.sleep(0)
    assert len(calls) == 1
    assert isinstance(calls[0][0], InputError)
    assert calls[0][1] is None


def test_input_image_untouched() -> None:
    image = Image(np.zeros((2, 2, 3), dtype=np.uint8))
    task = ImageTask(Padding(1, 1, 1, 1, pad_color="#FFFFFF"), image)
    asyncio.run(task.run())
    assert (image.data == 0).all()


async def test_severe_errors_escalate() -> None:
    exc.register_exception(InputError, 1, throw=True)
    with pytest.raises(exc.SevereError):
        await ImageTask(Blend(), [raw(2, 2)]).run()
