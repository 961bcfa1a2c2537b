import logging
from typing import Any, Sequence, Union

from pyimgtools.images import Image
from pyimgtools.images.colorspace import color_for
from pyimgtools.images.geometry import pad
from pyimgtools.images.processor import ImageProcessor
from pyimgtools.utils.colors import parse_color

log = logging.getLogger(__name__)


class Padding(ImageProcessor):
    """Adds borders of a constant color around an image. Zero or negative margins leave that side unchanged."""

    __module__ = "pyimgtools.images.processors.transform"

    def __init__(
        self,
        top: int = 0,
        bottom: int = 0,
        left: int = 0,
        right: int = 0,
        pad_color: Union[str, Sequence[int], None] = "#000000",
        **kwargs: Any,
    ):
        """Init a new padding step.

        Args:
            top: Pixels to add at the top.
            bottom: Pixels to add at the bottom.
            left: Pixels to add on the left.
            right: Pixels to add on the right.
            pad_color: Border color in RGB order.
        """
        ImageProcessor.__init__(self, **kwargs)

        # store
        self.top = int(top)
        self.bottom = int(bottom)
        self.left = int(left)
        self.right = int(right)
        self.pad_color = parse_color(pad_color)

    def process(self, image: Image) -> Image:
        fill = color_for(self.pad_color, image.color_space, image.sample_type)
        data = pad(image.data, self.top, self.bottom, self.left, self.right, fill, image.color_space)
        return image.with_data(data)


__all__ = ["Padding"]
