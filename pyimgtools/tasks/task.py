from __future__ import annotations

import asyncio
import logging
from concurrent.futures import Executor
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Union

from pyimgtools.images.encoder import OutputSpec, encode
from pyimgtools.images.image import Image
from pyimgtools.images.processor import CompositeProcessor, ImageProcessor
from pyimgtools.utils.enums import TaskState
from pyimgtools.utils.exceptions import ProcessingError, SevereError
from pyimgtools.utils.time import Stopwatch

log = logging.getLogger(__name__)


@dataclass
class Timing:
    """Wall-clock milliseconds spent in each phase of a task.

    Attributes:
        convert_ms: Ingest and normalization of input.
        task_ms: The actual operation.
        encode_ms: Encoding of the result.
    """

    convert_ms: float = 0.0
    task_ms: float = 0.0
    encode_ms: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return {"convertMs": float(self.convert_ms), "taskMs": float(self.task_ms), "encodeMs": float(self.encode_ms)}


@dataclass
class TaskResult:
    """Result of a task.

    Attributes:
        image: Raw image object or encoded bytes, depending on the requested output format.
        timing: Time spent in each phase.
    """

    image: Union[Dict[str, Any], bytes]
    timing: Timing

    def to_dict(self) -> Dict[str, Any]:
        return {"image": self.image, "timing": self.timing.to_dict()}


Processor = Union[ImageProcessor, CompositeProcessor]
TaskCallback = Callable[[Optional[BaseException], Optional[TaskResult]], None]


class ImageTask:
    """A single call of an image processor: ingest, processing and encoding.

    Input is ingested on construction, so malformed input raises immediately on the calling thread. Processing and
    encoding run on a worker thread, when the task is run. A task goes through the states QUEUED, RUNNING and
    finally either COMPLETED or FAILED, and can only be run once.
    """

    __module__ = "pyimgtools.tasks"

    def __init__(self, processor: Processor, images: Union[Any, List[Any]], output: Optional[OutputSpec] = None):
        """Init a new task and ingest its input.

        Args:
            processor: Processor to run.
            images: A single image or a list of images, each one either an Image, a raw image object or a buffer
                containing an encoded image file.
            output: Requested output, defaults to raw.

        Raises:
            InputError: If any input image is invalid.
        """

        # store
        self.processor = processor
        self.output = OutputSpec() if output is None else output
        self.state = TaskState.QUEUED
        self.result: Optional[TaskResult] = None
        self.error: Optional[BaseException] = None

        # ingest
        with Stopwatch() as sw:
            inputs = images if isinstance(images, (list, tuple)) else [images]
            self.images: List[Image] = [Image.from_input(img) for img in inputs]
        self.timing = Timing(convert_ms=sw.ms)

    @property
    def name(self) -> str:
        return self.processor.__class__.__name__

    def _execute(self) -> TaskResult:
        """Processes and encodes, runs on a worker thread."""

        # process
        with Stopwatch() as sw:
            image = self.processor.execute(self.images)
        self.timing.task_ms = sw.ms

        # encode
        with Stopwatch() as sw:
            encoded = encode(image, self.output)
        self.timing.encode_ms = sw.ms

        return TaskResult(image=encoded, timing=self.timing)

    async def run(self, executor: Optional[Executor] = None) -> TaskResult:
        """Runs the task on a worker thread.

        Args:
            executor: Executor to run in, defaults to the one of the event loop.

        Returns:
            Result of task.

        Raises:
            ImageToolsError: If processing or encoding failed.
        """
        if self.state != TaskState.QUEUED:
            raise ProcessingError(f"Task {self.name} has already been run.")

        # run it
        self.state = TaskState.RUNNING
        loop = asyncio.get_running_loop()
        try:
            self.result = await loop.run_in_executor(executor, self._execute)
        except Exception as e:
            self.state = TaskState.FAILED
            self.error = e
            log.error("Task %s failed: %s", self.name, e)
            raise

        # finished
        self.state = TaskState.COMPLETED
        log.debug(
            "Task %s finished in %.2fms (convert), %.2fms (task), %.2fms (encode).",
            self.name,
            self.timing.convert_ms,
            self.timing.task_ms,
            self.timing.encode_ms,
        )
        return self.result

    def submit(self, callback: TaskCallback, executor: Optional[Executor] = None) -> asyncio.Task[TaskResult]:
        """Schedules the task and calls the callback with either an error or a result, when it is done.

        The callback is called on the thread of the event loop.

        Args:
            callback: Function called as callback(error, result).
            executor: Executor to run in, defaults to the one of the event loop.

        Returns:
            The scheduled asyncio task.
        """
        task = asyncio.ensure_future(self.run(executor))

        def done(fut: asyncio.Future[TaskResult]) -> None:
            if fut.cancelled():
                return
            exception = fut.exception()
            if exception is None:
                callback(None, fut.result())
            else:
                callback(exception, None)
                if isinstance(exception, SevereError):
                    raise exception

        task.add_done_callback(done)
        return task


__all__ = ["ImageTask", "TaskResult", "Timing"]
