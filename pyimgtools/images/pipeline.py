import logging
from typing import Any, Dict, List, Optional, Union

from pyimgtools.images.image import Image
from pyimgtools.images.processor import ImageProcessor

log = logging.getLogger(__name__)


class Pipeline(ImageProcessor):
    """Chain of single-image processors, run one after the other on the same worker thread."""

    __module__ = "pyimgtools.images"

    def __init__(self, steps: Optional[List[Union[Dict[str, Any], ImageProcessor]]] = None, **kwargs: Any):
        """Init new pipeline.

        Args:
            steps: Pipeline steps to run on images, either processors or their configs.
        """
        ImageProcessor.__init__(self, **kwargs)

        # create steps
        steps = [] if steps is None else steps
        self.steps: List[ImageProcessor] = [self.add_child_object(step, ImageProcessor) for step in steps]

    def process(self, image: Image) -> Image:
        """Run the pipeline on the given image.

        Args:
            image: Image to run pipeline on.

        Returns:
            Image after pipeline run.
        """
        for step in self.steps:
            log.debug("Running pipeline step %s.", step.__class__.__name__)
            image = step.process(image)
        return image

    async def reset(self) -> None:
        """Resets all previous state of the involved image processors."""
        for step in self.steps:
            await step.reset()


__all__ = ["Pipeline"]
