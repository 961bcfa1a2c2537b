import time

from pyimgtools.utils.time import Stopwatch


def test_stopwatch() -> None:
    with Stopwatch() as sw:
        time.sleep(0.01)
    assert sw.ms >= 9.0


def test_stopwatch_default() -> None:
    assert Stopwatch().ms == 0.0
