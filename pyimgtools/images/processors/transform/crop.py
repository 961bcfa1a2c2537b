import logging
from typing import Any, NamedTuple

from pyimgtools.images import Image
from pyimgtools.images.geometry import round_half_away
from pyimgtools.images.processor import ImageProcessor

log = logging.getLogger(__name__)


class CropRect(NamedTuple):
    x: int
    y: int
    width: int
    height: int


class Crop(ImageProcessor):
    """
    Cut a rectangular region out of an image.

    The region is given either in pixels or, with ``normalized`` set, as fractions of the image size. After
    rounding, the origin is clamped into the image and width and height are clamped so that the region never
    exceeds the image bounds. The result is always at least 1x1 pixel, a region completely outside of the image
    yields its closest valid pixel instead of an error. The channel order is not changed.

    .. code-block:: yaml

       class: pyimgtools.images.processors.transform.Crop
       x: 0.25
       y: 0.25
       width: 0.5
       height: 0.5
       normalized: true
    """

    __module__ = "pyimgtools.images.processors.transform"

    def __init__(
        self,
        x: float,
        y: float,
        width: float,
        height: float,
        normalized: bool = False,
        **kwargs: Any,
    ):
        """Init a new crop step.

        Args:
            x: Left edge of region.
            y: Top edge of region.
            width: Width of region.
            height: Height of region.
            normalized: Whether values are fractions of the image size.
        """
        ImageProcessor.__init__(self, **kwargs)

        # store
        self.x = float(x)
        self.y = float(y)
        self.width = float(width)
        self.height = float(height)
        self.normalized = normalized

    def region(self, image_width: int, image_height: int) -> CropRect:
        """Resolves the clamped crop region for an image of given size."""

        # to pixels
        sx, sy = (image_width, image_height) if self.normalized else (1, 1)
        x = round_half_away(self.x * sx)
        y = round_half_away(self.y * sy)
        width = round_half_away(self.width * sx)
        height = round_half_away(self.height * sy)

        # clamp
        x = max(0, min(x, image_width - 1))
        y = max(0, min(y, image_height - 1))
        width = max(1, min(width, image_width - x))
        height = max(1, min(height, image_height - y))
        return CropRect(x, y, width, height)

    def process(self, image: Image) -> Image:
        rect = self.region(image.width, image.height)
        log.debug("Cropping region %s from %dx%d image.", rect, image.width, image.height)
        return image.with_data(image.data[rect.y : rect.y + rect.height, rect.x : rect.x + rect.width])


__all__ = ["Crop", "CropRect"]
