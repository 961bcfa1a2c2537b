import logging
from typing import Any, List

from pyimgtools.images import Image
from pyimgtools.images.colorspace import saturate, unify
from pyimgtools.images.geometry import resize
from pyimgtools.images.processor import CompositeProcessor
from pyimgtools.utils.exceptions import InputError

log = logging.getLogger(__name__)


class Blend(CompositeProcessor):
    """
    Linear blend of two images: ``first * opacity + second * (1 - opacity)``.

    Both images are converted to a negotiated common color space. If their sizes differ, both are resized to the
    maximum width and height of the two. The opacity is clamped to [0, 1].

    .. code-block:: yaml

       class: pyimgtools.images.processors.mix.Blend
       opacity: 0.3
    """

    __module__ = "pyimgtools.images.processors.mix"

    def __init__(self, opacity: float = 0.5, **kwargs: Any):
        """Init a new blend step.

        Args:
            opacity: Weight of the first image.
        """
        CompositeProcessor.__init__(self, **kwargs)
        self.opacity = max(0.0, min(float(opacity), 1.0))

    def process(self, images: List[Image]) -> Image:
        if len(images) != 2:
            raise InputError(f"Blending requires exactly two images, got {len(images)}.")
        (first, second), color_space = unify(images)

        # same size
        width, height = max(first.width, second.width), max(first.height, second.height)
        a = resize(first.data, width, height).astype(float)
        b = resize(second.data, width, height).astype(float)

        # blend
        data = saturate(a * self.opacity + b * (1.0 - self.opacity), first.data.dtype)
        return Image(data, color_space)


__all__ = ["Blend"]
