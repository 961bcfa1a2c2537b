"""
The :class:`~pyimgtools.engine.Engine` is the entry point for callers: each operation ingests its input on the
calling thread, runs the operation and the encoding on a worker thread of a bounded pool and returns a result of
the form ``{"image": ..., "timing": {"convertMs": ..., "taskMs": ..., "encodeMs": ...}}``.

.. code-block:: python

    async with Engine(max_workers=4) as engine:
        result = await engine.resize(raw, width=640, height_mode="auto", output_format="jpg")
"""
from __future__ import annotations

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from types import TracebackType
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Sequence, Type, Union

from pyimgtools.images.encoder import OutputSpec
from pyimgtools.images.image import Image
from pyimgtools.images.processors.mix import AdvancedMosaic, Blend, Concat, Mosaic, Placement
from pyimgtools.images.processors.transform import Crop, CropBoxes, Filter, Padding, Resize, Rotate
from pyimgtools.object import Object
from pyimgtools.tasks import ImageTask
from pyimgtools.tasks.task import Processor
from pyimgtools.utils.exceptions import InputError
from pyimgtools.utils.time import Stopwatch

log = logging.getLogger(__name__)

# operations that can be run as a batch
BATCH_OPERATIONS = ["resize", "rotate", "crop", "padding", "filter", "crop_boxes"]


class Engine(Object):
    """Runs image operations on a pool of worker threads."""

    __module__ = "pyimgtools"

    def __init__(self, max_workers: Optional[int] = None, parallel_threshold: int = 4, **kwargs: Any):
        """Init new engine.

        Args:
            max_workers: Maximum number of worker threads, defaults to the default of ThreadPoolExecutor.
            parallel_threshold: Mosaics with more placements than this copy them in parallel, if they do not overlap.
        """
        Object.__init__(self, **kwargs)

        # store
        self.parallel_threshold = parallel_threshold
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="pyimgtools")

    async def close(self) -> None:
        """Shuts down the worker threads."""
        await Object.close(self)
        self._executor.shutdown(wait=True)

    async def __aenter__(self) -> Engine:
        await self.open()
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        await self.close()

    async def process(
        self,
        processor: Processor,
        images: Union[Any, List[Any]],
        output_format: str = "raw",
        quality: int = 90,
        png_optimize: bool = False,
    ) -> Dict[str, Any]:
        """Runs any processor on the worker threads.

        Args:
            processor: Processor to run, e.g. a :class:`~pyimgtools.images.pipeline.Pipeline`.
            images: Single image for image processors, list of images for composite processors.
            output_format: One of raw, jpg, png or webp.
            quality: Quality for jpg and webp.
            png_optimize: Whether to optimize png output.

        Returns:
            Dictionary with image and timing.
        """
        task = ImageTask(processor, images, OutputSpec(output_format, quality, png_optimize))
        result = await task.run(self._executor)
        return result.to_dict()

    async def resize(
        self,
        image: Any,
        width_mode: str = "absolute",
        width: Optional[float] = None,
        height_mode: str = "absolute",
        height: Optional[float] = None,
        output_format: str = "raw",
        quality: int = 90,
        png_optimize: bool = False,
    ) -> Dict[str, Any]:
        """Resize an image, see :class:`~pyimgtools.images.processors.transform.Resize`."""
        processor = Resize(width_mode=width_mode, width=width, height_mode=height_mode, height=height)
        return await self.process(processor, image, output_format, quality, png_optimize)

    async def rotate(
        self,
        image: Any,
        angle: float,
        pad_color: str = "#000000",
        output_format: str = "raw",
        quality: int = 90,
        png_optimize: bool = False,
    ) -> Dict[str, Any]:
        """Rotate an image clockwise, see :class:`~pyimgtools.images.processors.transform.Rotate`."""
        return await self.process(Rotate(angle, pad_color), image, output_format, quality, png_optimize)

    async def crop(
        self,
        image: Any,
        x: float,
        y: float,
        width: float,
        height: float,
        normalized: bool = False,
        output_format: str = "raw",
        quality: int = 90,
        png_optimize: bool = False,
    ) -> Dict[str, Any]:
        """Crop a region, see :class:`~pyimgtools.images.processors.transform.Crop`."""
        processor = Crop(x, y, width, height, normalized)
        return await self.process(processor, image, output_format, quality, png_optimize)

    async def padding(
        self,
        image: Any,
        top: int = 0,
        bottom: int = 0,
        left: int = 0,
        right: int = 0,
        pad_color: str = "#000000",
        output_format: str = "raw",
        quality: int = 90,
        png_optimize: bool = False,
    ) -> Dict[str, Any]:
        """Add borders, see :class:`~pyimgtools.images.processors.transform.Padding`."""
        processor = Padding(top, bottom, left, right, pad_color)
        return await self.process(processor, image, output_format, quality, png_optimize)

    async def filter(
        self,
        image: Any,
        filter_type: str,
        kernel_size: int = 3,
        intensity: float = 1.0,
        output_format: str = "raw",
        quality: int = 90,
        png_optimize: bool = False,
    ) -> Dict[str, Any]:
        """Apply a kernel filter, see :class:`~pyimgtools.images.processors.transform.Filter`."""
        processor = Filter(filter_type, kernel_size, intensity)
        return await self.process(processor, image, output_format, quality, png_optimize)

    async def concat(
        self,
        images: List[Any],
        direction: str = "right",
        strategy: str = "resize",
        pad_color: str = "#000000",
        output_format: str = "raw",
        quality: int = 90,
        png_optimize: bool = False,
    ) -> Dict[str, Any]:
        """Join images, see :class:`~pyimgtools.images.processors.mix.Concat`."""
        processor = Concat(direction, strategy, pad_color)
        return await self.process(processor, list(images), output_format, quality, png_optimize)

    async def blend(
        self,
        image1: Any,
        image2: Any,
        opacity: float = 0.5,
        output_format: str = "raw",
        quality: int = 90,
        png_optimize: bool = False,
    ) -> Dict[str, Any]:
        """Blend two images, see :class:`~pyimgtools.images.processors.mix.Blend`."""
        return await self.process(Blend(opacity), [image1, image2], output_format, quality, png_optimize)

    async def mosaic(
        self,
        images: List[Any],
        width: int,
        height: int,
        background: str = "#000000",
        placements: Sequence[Union[Placement, Mapping[str, Any]]] = (),
        normalized: bool = False,
        output_format: str = "raw",
        quality: int = 90,
        png_optimize: bool = False,
    ) -> Dict[str, Any]:
        """Place images on a canvas, see :class:`~pyimgtools.images.processors.mix.Mosaic`."""
        processor = Mosaic(width, height, background, placements, normalized, self.parallel_threshold)
        return await self.process(processor, list(images), output_format, quality, png_optimize)

    async def advanced_mosaic(
        self,
        images: List[Any],
        width: int,
        height: int,
        background: str = "#000000",
        placements: Sequence[Union[Placement, Mapping[str, Any]]] = (),
        normalized: bool = False,
        output_format: str = "raw",
        quality: int = 90,
        png_optimize: bool = False,
    ) -> Dict[str, Any]:
        """Place transformed images on a canvas, see :class:`~pyimgtools.images.processors.mix.AdvancedMosaic`."""
        processor = AdvancedMosaic(width, height, background, placements, normalized)
        return await self.process(processor, list(images), output_format, quality, png_optimize)

    async def crop_boxes(
        self,
        image: Any,
        detections: Sequence[Any],
        min_confidence: float = 0.5,
        output_format: str = "raw",
        quality: int = 90,
        png_optimize: bool = False,
    ) -> List[Dict[str, Any]]:
        """Crop all object detections from an image, see :class:`~pyimgtools.images.processors.transform.CropBoxes`.

        Returns:
            List of dictionaries with image, tag and timing, one per valid detection.
        """

        # ingest once for all crops
        with Stopwatch() as sw:
            img = Image.from_input(image)
        boxes = CropBoxes(min_confidence).resolve(img.width, img.height, detections)

        # crop concurrently
        output = OutputSpec(output_format, quality, png_optimize)
        tasks = [ImageTask(box.crop, img, output) for box in boxes]
        results = await asyncio.gather(*[task.run(self._executor) for task in tasks])

        # add tags
        crops = []
        for box, result in zip(boxes, results):
            result.timing.convert_ms += sw.ms
            crops.append({"image": result.image, "tag": box.tag, "timing": result.timing.to_dict()})
        return crops

    async def batch(
        self, operation: Union[str, Callable[..., Awaitable[Any]]], images: Sequence[Any], *args: Any, **kwargs: Any
    ) -> List[Any]:
        """Runs a single-image operation on several images concurrently.

        Args:
            operation: Name of operation, e.g. "resize", or the bound method itself.
            images: Images to process.
            *args: Arguments for the operation.
            **kwargs: Keyword arguments for the operation.

        Returns:
            Results in the order of the given images.
        """
        if isinstance(operation, str):
            if operation not in BATCH_OPERATIONS:
                raise InputError(f"Unsupported batch operation: {operation}.")
            operation = getattr(self, operation)
        log.debug("Running batch of %d images.", len(images))
        return list(await asyncio.gather(*[operation(image, *args, **kwargs) for image in images]))


__all__ = ["Engine", "BATCH_OPERATIONS"]
