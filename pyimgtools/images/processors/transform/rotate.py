import logging
from typing import Any, Sequence, Union

from pyimgtools.images import Image
from pyimgtools.images.colorspace import color_for
from pyimgtools.images.geometry import rotate
from pyimgtools.images.processor import ImageProcessor
from pyimgtools.utils.colors import parse_color

log = logging.getLogger(__name__)


class Rotate(ImageProcessor):
    """
    Rotate an image clockwise by an arbitrary angle.

    Angles are normalized to [0, 360). Multiples of 90 degrees are performed as lossless axis-aligned rotations,
    which swap width and height for 90 and 270 degrees. All other angles rotate about the image centre onto a
    canvas grown to the rotated bounding box, so that no content is cropped. Exposed pixels are filled with
    ``pad_color``, given in RGB order and converted to the channel order of the image.

    .. code-block:: yaml

       class: pyimgtools.images.processors.transform.Rotate
       angle: 30
       pad_color: "#FFFFFF"
    """

    __module__ = "pyimgtools.images.processors.transform"

    def __init__(self, angle: float = 0.0, pad_color: Union[str, Sequence[int], None] = "#000000", **kwargs: Any):
        """Init a new rotation step.

        Args:
            angle: Rotation angle in degrees, positive is clockwise.
            pad_color: Color for exposed pixels.
        """
        ImageProcessor.__init__(self, **kwargs)

        # store
        self.angle = float(angle)
        self.pad_color = parse_color(pad_color)

    def process(self, image: Image) -> Image:
        fill = color_for(self.pad_color, image.color_space, image.sample_type)
        return image.with_data(rotate(image.data, self.angle, fill))


__all__ = ["Rotate"]
