import logging
import math
from typing import Any, Optional, Tuple, Union

from pyimgtools.images import Image
from pyimgtools.images.geometry import resize, round_half_away
from pyimgtools.images.processor import ImageProcessor
from pyimgtools.utils.enums import ResizeMode, parse_enum
from pyimgtools.utils.exceptions import ProcessingError

log = logging.getLogger(__name__)


class Resize(ImageProcessor):
    """
    Resample an image to a new width and height using bilinear interpolation.

    Each dimension is given as a pair of mode and value. The mode decides how the value is interpreted:

    - ``absolute``: the value is the new size in pixels (rounded to the nearest integer).
    - ``multiply``: the value is a factor applied to the original size.
    - ``percentage``: the value is a percentage of the original size.
    - ``auto``: the dimension is derived from the other one, keeping the aspect ratio.

    A value of ``None`` or ``NaN`` counts as unspecified, just like mode ``auto``.

    :param str width_mode: Mode for the width. Default: ``"absolute"``.
    :param float width: Value for the width. Default: ``None``.
    :param str height_mode: Mode for the height. Default: ``"absolute"``.
    :param float height: Value for the height. Default: ``None``.
    :param kwargs: Additional keyword arguments forwarded to
                   :class:`pyimgtools.images.processor.ImageProcessor`.

    Behavior
    --------
    - If both dimensions are unspecified, a :class:`~pyimgtools.utils.exceptions.ProcessingError` is raised.
    - If only one dimension is given, the other one is computed from the aspect ratio of the input, but is at
      least one pixel.
    - A given dimension smaller than one pixel raises a :class:`~pyimgtools.utils.exceptions.ProcessingError`.
    - Resizing to the original size returns a copy of the input.
    - Channel layout and sample type are preserved.

    Configuration (YAML)
    --------------------
    Half the original width, height from aspect ratio:

    .. code-block:: yaml

       class: pyimgtools.images.processors.transform.Resize
       width_mode: multiply
       width: 0.5
       height_mode: auto

    Fixed size thumbnail:

    .. code-block:: yaml

       class: pyimgtools.images.processors.transform.Resize
       width: 320
       height: 240
    """

    __module__ = "pyimgtools.images.processors.transform"

    def __init__(
        self,
        width_mode: Union[str, ResizeMode] = ResizeMode.ABSOLUTE,
        width: Optional[float] = None,
        height_mode: Union[str, ResizeMode] = ResizeMode.ABSOLUTE,
        height: Optional[float] = None,
        **kwargs: Any,
    ):
        """Init a new resize step.

        Args:
            width_mode: How to interpret width.
            width: Value for width.
            height_mode: How to interpret height.
            height: Value for height.
        """
        ImageProcessor.__init__(self, **kwargs)

        # store
        self.width_mode = parse_enum(ResizeMode, width_mode)
        self.width = width
        self.height_mode = parse_enum(ResizeMode, height_mode)
        self.height = height

    def target_size(self, image_width: int, image_height: int) -> Tuple[int, int]:
        """Computes the new size for an image of the given size.

        Args:
            image_width: Original width.
            image_height: Original height.

        Returns:
            Tuple of new width and height.

        Raises:
            ProcessingError: If size cannot be determined.
        """
        width = _resolve(self.width_mode, self.width, image_width)
        height = _resolve(self.height_mode, self.height, image_height)

        # derive missing dimension from aspect ratio
        if width is None and height is None:
            raise ProcessingError("Both width and height are unspecified.")
        elif width is None:
            width = max(1, round_half_away(height * image_width / image_height))
        elif height is None:
            height = max(1, round_half_away(width * image_height / image_width))

        # check
        if width < 1 or height < 1:
            raise ProcessingError(f"Invalid target size {width}x{height}.")
        return width, height

    def process(self, image: Image) -> Image:
        """Resize an image.

        Args:
            image: Image to resize.

        Returns:
            Resized image.
        """
        width, height = self.target_size(image.width, image.height)
        log.debug("Resizing image from %dx%d to %dx%d.", image.width, image.height, width, height)
        return image.with_data(resize(image.data, width, height))


def _resolve(mode: ResizeMode, value: Optional[float], original: int) -> Optional[int]:
    if mode == ResizeMode.AUTO or value is None:
        return None
    value = float(value)
    if math.isnan(value):
        return None
    if mode == ResizeMode.MULTIPLY:
        value *= original
    elif mode == ResizeMode.PERCENTAGE:
        value *= original / 100.0
    return round_half_away(value)


__all__ = ["Resize"]
