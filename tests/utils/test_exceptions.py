import asyncio
import threading
from typing import List

import pytest

from pyimgtools.utils import exceptions as exc
from pyimgtools.utils.exceptions import ImageToolsError


def setup_function() -> None:
    exc.clear()


def test_str() -> None:
    assert str(exc.InputError("bad data")) == "<InputError> bad data"
    assert str(exc.ProcessingError()) == "<ProcessingError>"


def test_hierarchy() -> None:
    for cls in [exc.InputError, exc.ProcessingError, exc.EncodingError]:
        assert issubclass(cls, ImageToolsError)
    assert not issubclass(exc.InputError, exc.ProcessingError)


def test_log() -> None:
    exc.register_exception(exc.InputError, 5)
    exc.InputError()
    # only handled types are stored
    assert len(exc._local_exceptions) == 1
    assert len(exc._local_exceptions[exc.InputError]) == 1


def test_register() -> None:
    def cb(exception: ImageToolsError) -> None:
        pass

    exc.register_exception(exc.ProcessingError, 5, callback=cb)
    assert len(exc._handlers) == 1


def test_empty() -> None:
    assert len(exc._local_exceptions) == 0
    assert len(exc._handlers) == 0


def test_callback() -> None:
    called: List[ImageToolsError] = []

    # get triggered after 3 ProcessingErrors
    exc.register_exception(exc.ProcessingError, 3, callback=called.append)

    # 1st and 2nd are fine
    exc.ProcessingError()
    exc.ProcessingError()
    assert len(called) == 0

    # 3rd triggers callback
    exc.ProcessingError()
    assert len(called) == 1
    assert isinstance(called[0], exc.ProcessingError)


def test_other_type_does_not_trigger() -> None:
    called: List[ImageToolsError] = []
    exc.register_exception(exc.ProcessingError, 1, callback=called.append)
    exc.InputError()
    exc.EncodingError()
    assert len(called) == 0


def test_base_class_handler() -> None:
    exc.register_exception(ImageToolsError, 2, throw=True)
    exc.InputError()
    with pytest.raises(exc.SevereError) as exc_info:
        raise exc.EncodingError()
    assert isinstance(exc_info.value.exception, exc.EncodingError)


def test_raise() -> None:
    # get triggered after 2 EncodingErrors
    exc.register_exception(exc.EncodingError, 2, throw=True)

    # 1st is fine
    exc.EncodingError()

    # 2nd raises SevereError
    with pytest.raises(exc.SevereError) as exc_info:
        raise exc.EncodingError("failed")

    # nested exception is EncodingError
    assert isinstance(exc_info.value, exc.SevereError)
    assert isinstance(exc_info.value.exception, exc.EncodingError)


def test_severe_not_nested() -> None:
    inner = exc.SevereError(exc.InputError())
    outer = exc.SevereError(inner)
    assert isinstance(outer.exception, exc.InputError)


async def test_timespan() -> None:
    exc.register_exception(exc.ProcessingError, 3, timespan=0.1, throw=True)

    # raise two and wait a little
    exc.ProcessingError()
    exc.ProcessingError()
    await asyncio.sleep(0.11)
    exc.ProcessingError()

    # raise one more, still fine, then one that triggers
    exc.ProcessingError()
    with pytest.raises(exc.SevereError):
        raise exc.ProcessingError()


def test_threads() -> None:
    exc.register_exception(exc.ProcessingError, 1000)

    def create() -> None:
        for _ in range(100):
            exc.ProcessingError()

    threads = [threading.Thread(target=create) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert len(exc._local_exceptions[exc.ProcessingError]) == 400
