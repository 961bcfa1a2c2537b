from __future__ import annotations

import time
from types import TracebackType
from typing import Optional, Type


class Stopwatch:
    """Context manager measuring wall-clock time in milliseconds.

    .. code-block:: python

        with Stopwatch() as sw:
            do_something()
        print(sw.ms)
    """

    def __init__(self) -> None:
        self._start: Optional[float] = None
        self.ms: float = 0.0

    def __enter__(self) -> Stopwatch:
        self._start = time.perf_counter()
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        if self._start is not None:
            self.ms = (time.perf_counter() - self._start) * 1000.0


__all__ = ["Stopwatch"]
