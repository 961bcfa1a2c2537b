import logging
from typing import Any, List

from pyimgtools.images import Image
from pyimgtools.images.colorspace import color_for, convert
from pyimgtools.images.geometry import clip_region, place, resize, rotate, round_half_away
from pyimgtools.images.processors.mix.mosaic import Mosaic, Placement

log = logging.getLogger(__name__)


class AdvancedMosaic(Mosaic):
    """
    Place images on a canvas, each one optionally resized and rotated first.

    In addition to the fields of :class:`~pyimgtools.images.processors.mix.Mosaic`, each placement may carry

    - ``targetWidth`` and/or ``targetHeight``: size in pixels to resize the image to. If only one is given, the
      other one follows from the aspect ratio.
    - ``rotationDegrees``: clockwise rotation, performed after resizing. Exposed pixels get the background color.
    - ``zIndex``: stacking order. Placements are drawn in ascending order, so higher values end up on top. Equal
      values keep their order in the list, the default is the position in the list.

    Placements are always drawn one after the other to honour the stacking order.

    .. code-block:: yaml

       class: pyimgtools.images.processors.mix.AdvancedMosaic
       width: 1024
       height: 768
       background: "#FFFFFF"
       placements:
         - {sourceIndex: 0, x: 0.1, y: 0.1, targetWidth: 300, rotationDegrees: 15, zIndex: 1}
         - {sourceIndex: 1, x: 0.2, y: 0.2, targetHeight: 200}
       normalized: true
    """

    __module__ = "pyimgtools.images.processors.mix"

    def process(self, images: List[Image]) -> Image:
        """Create mosaic.

        Args:
            images: Source images.

        Returns:
            Canvas with transformed and placed images.
        """
        canvas, color_space, sample_type = self.create_canvas(images)
        fill = color_for(self.background, color_space, sample_type)

        # sort by z index, stable for equal values
        order = sorted(
            enumerate(self.placements), key=lambda ip: ip[0] if ip[1].z_index is None else ip[1].z_index
        )

        for _, placement in order:
            if not 0 <= placement.index < len(images):
                log.debug("Skipping placement with invalid source index %d.", placement.index)
                continue

            # transform and place
            data = self._transform(convert(images[placement.index], color_space), placement, fill)
            x, y = self.position(placement)
            region = clip_region(x, y, data.shape[1], data.shape[0], self.width, self.height)
            if region is None:
                log.debug("Skipping placement of image %d outside of canvas at (%d, %d).", placement.index, x, y)
                continue
            place(canvas, data, region)

        return Image(canvas, color_space)

    @staticmethod
    def _transform(image: Image, placement: Placement, fill: Any) -> Any:
        data = image.data

        # resize
        width = placement.width if placement.width is not None and placement.width > 0 else None
        height = placement.height if placement.height is not None and placement.height > 0 else None
        if width is not None or height is not None:
            if height is None:
                height = max(1, round_half_away(width * image.height / image.width))
            elif width is None:
                width = max(1, round_half_away(height * image.width / image.height))
            data = resize(data, width, height)

        # rotate
        if abs(placement.rotation) > 1e-3:
            data = rotate(data, placement.rotation, fill)
        return data


__all__ = ["AdvancedMosaic"]
