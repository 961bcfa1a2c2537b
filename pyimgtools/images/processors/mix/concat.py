import logging
from typing import Any, List, Sequence, Union

import numpy as np
from numpy.typing import NDArray

from pyimgtools.images import Image
from pyimgtools.images.colorspace import color_for, unify
from pyimgtools.images.geometry import pad, resize
from pyimgtools.images.processor import CompositeProcessor
from pyimgtools.utils.colors import parse_color
from pyimgtools.utils.enums import ConcatDirection, ConcatStrategy, parse_enum
from pyimgtools.utils.exceptions import InputError

log = logging.getLogger(__name__)


class Concat(CompositeProcessor):
    """
    Join several images side by side or on top of each other.

    :param str direction: One of ``right``, ``left``, ``down`` or ``up``. For ``right`` and ``down`` the first image
                          is at the left or top, for ``left`` and ``up`` the order of images is reversed.
                          Default: ``"right"``.
    :param str strategy: How images with different sizes across the joining axis are matched. Default:
                         ``"resize"``.
    :param str pad_color: Color for padding in RGB order. Default: ``"#000000"``.

    Behavior
    --------
    - All images are converted to a negotiated common color space first.
    - The baseline size is the maximum height for horizontal joins and the maximum width for vertical joins.
    - ``resize`` scales every image to the baseline, keeping its aspect ratio.
    - ``pad-start``, ``pad-end`` and ``pad-both`` add padding before, after or on both sides of smaller images.
      With ``pad-both``, the padding before is half of the difference, rounded down.

    Configuration (YAML)
    --------------------
    .. code-block:: yaml

       class: pyimgtools.images.processors.mix.Concat
       direction: down
       strategy: pad-both
       pad_color: "#FFFFFF"
    """

    __module__ = "pyimgtools.images.processors.mix"

    def __init__(
        self,
        direction: Union[str, ConcatDirection] = ConcatDirection.RIGHT,
        strategy: Union[str, ConcatStrategy] = ConcatStrategy.RESIZE,
        pad_color: Union[str, Sequence[int], None] = "#000000",
        **kwargs: Any,
    ):
        """Init a new concat step.

        Args:
            direction: Direction to join images in.
            strategy: Strategy for matching sizes.
            pad_color: Color for padding.
        """
        CompositeProcessor.__init__(self, **kwargs)

        # store
        self.direction = parse_enum(ConcatDirection, direction)
        self.strategy = parse_enum(ConcatStrategy, strategy)
        self.pad_color = parse_color(pad_color)

    def process(self, images: List[Image]) -> Image:
        """Join images.

        Args:
            images: Images to join.

        Returns:
            Joined image.
        """
        if len(images) == 0:
            raise InputError("No images to concatenate.")

        # common color space
        images, color_space = unify(images)
        horizontal = self.direction.is_horizontal
        baseline = max(img.height if horizontal else img.width for img in images)
        fill = color_for(self.pad_color, color_space, images[0].sample_type)

        # match sizes
        tiles = [self._match(img, baseline, horizontal, fill) for img in images]
        if self.direction in (ConcatDirection.LEFT, ConcatDirection.UP):
            tiles.reverse()

        # join
        return Image(np.concatenate(tiles, axis=1 if horizontal else 0), color_space)

    def _match(self, image: Image, baseline: int, horizontal: bool, fill: Sequence[float]) -> NDArray[Any]:
        cross = image.height if horizontal else image.width
        if cross == baseline:
            return image.data

        if self.strategy == ConcatStrategy.RESIZE:
            scale = baseline / cross
            if horizontal:
                return resize(image.data, max(1, int(image.width * scale)), baseline)
            return resize(image.data, baseline, max(1, int(image.height * scale)))

        # padding
        delta = baseline - cross
        if self.strategy == ConcatStrategy.PAD_START:
            before, after = delta, 0
        elif self.strategy == ConcatStrategy.PAD_END:
            before, after = 0, delta
        else:
            before = delta // 2
            after = delta - before
        if horizontal:
            return pad(image.data, before, after, 0, 0, fill, image.color_space)
        return pad(image.data, 0, 0, before, after, fill, image.color_space)


__all__ = ["Concat"]
