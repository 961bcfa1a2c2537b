import asyncio
import logging
from abc import ABCMeta, abstractmethod
from typing import Any, Callable, List, Sequence, TypeVar

from pyimgtools.images.image import Image
from pyimgtools.object import Object
from pyimgtools.utils.exceptions import ImageToolsError, InputError, ProcessingError

log = logging.getLogger(__name__)

T = TypeVar("T")


def _guarded(processor: Object, func: Callable[[T], Image], arg: T) -> Image:
    """Runs a processing function, wrapping low level errors from numpy and scipy into a ProcessingError."""
    try:
        return func(arg)
    except ImageToolsError:
        raise
    except (ValueError, TypeError, IndexError, ArithmeticError, MemoryError) as e:
        raise ProcessingError(f"{processor.__class__.__name__} failed: {e}") from e


class ImageProcessor(Object, metaclass=ABCMeta):
    """Base class for all operations on a single image.

    Derived classes implement the synchronous :meth:`process`, which is run on a worker thread when the processor
    is awaited.
    """

    __module__ = "pyimgtools.images"

    def __init__(self, **kwargs: Any):
        """Init new image processor."""
        Object.__init__(self, **kwargs)

    @abstractmethod
    def process(self, image: Image) -> Image:
        """Processes an image.

        Args:
            image: Image to process.

        Returns:
            Processed image.
        """
        ...

    def execute(self, images: Sequence[Image]) -> Image:
        """Processes the single image in the given list, used by tasks.

        Raises:
            InputError: If not exactly one image is given.
            ProcessingError: If processing fails.
        """
        if len(images) != 1:
            raise InputError(f"{self.__class__.__name__} requires exactly one image, got {len(images)}.")
        return _guarded(self, self.process, images[0])

    async def __call__(self, image: Image) -> Image:
        """Processes an image on a worker thread.

        Args:
            image: Image to process.

        Returns:
            Processed image.
        """
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.execute, [image])

    async def reset(self) -> None:
        """Resets state of image processor"""
        pass


class CompositeProcessor(Object, metaclass=ABCMeta):
    """Base class for all operations that combine several images into one."""

    __module__ = "pyimgtools.images"

    def __init__(self, **kwargs: Any):
        """Init new composite processor."""
        Object.__init__(self, **kwargs)

    @abstractmethod
    def process(self, images: List[Image]) -> Image:
        """Combines images.

        Args:
            images: Images to combine.

        Returns:
            New image.
        """
        ...

    def execute(self, images: Sequence[Image]) -> Image:
        return _guarded(self, self.process, list(images))

    async def __call__(self, images: List[Image]) -> Image:
        """Combines images on a worker thread.

        Args:
            images: Images to combine.

        Returns:
            New image.
        """
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.execute, images)

    async def reset(self) -> None:
        """Resets state of composite processor"""
        pass


__all__ = ["ImageProcessor", "CompositeProcessor"]
