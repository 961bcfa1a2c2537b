from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from numpy.typing import NDArray

from pyimgtools.images import Image
from pyimgtools.images.colorspace import color_for, convert, filled, negotiate
from pyimgtools.images.geometry import Region, clip_region, place, round_half_away
from pyimgtools.images.processor import CompositeProcessor
from pyimgtools.utils.colors import parse_color
from pyimgtools.utils.enums import ColorSpace, SampleType
from pyimgtools.utils.exceptions import InputError, ProcessingError

log = logging.getLogger(__name__)


# accepted keys for each placement field
_KEYS = {
    "index": ("sourceIndex", "source_index", "arrayIndex", "index"),
    "x": ("x",),
    "y": ("y",),
    "rotation": ("rotationDegrees", "rotation_degrees", "rotation"),
    "width": ("targetWidth", "target_width", "width"),
    "height": ("targetHeight", "target_height", "height"),
    "z_index": ("zIndex", "z_index"),
}


@dataclass
class Placement:
    """Position of a source image on a mosaic canvas.

    Attributes:
        index: Index of source image.
        x: Left edge on canvas, in pixels or normalized.
        y: Top edge on canvas, in pixels or normalized.
        rotation: Clockwise rotation in degrees before placing (advanced mosaic only).
        width: Width to resize to before placing, 0 or None to keep (advanced mosaic only).
        height: Height to resize to before placing, 0 or None to keep (advanced mosaic only).
        z_index: Stacking order, higher values are drawn later (advanced mosaic only).
    """

    index: int
    x: float = 0.0
    y: float = 0.0
    rotation: float = 0.0
    width: Optional[int] = None
    height: Optional[int] = None
    z_index: Optional[int] = None

    @staticmethod
    def create(value: Union[Placement, Mapping[str, Any]]) -> Placement:
        """Creates a placement from a mapping with either camelCase or snake_case keys."""
        if isinstance(value, Placement):
            return value
        if not isinstance(value, Mapping):
            raise InputError(f"Invalid placement: {value!r}.")

        # collect fields
        fields: Dict[str, Any] = {}
        for field, keys in _KEYS.items():
            for key in keys:
                if value.get(key) is not None:
                    fields[field] = value[key]
                    break
        if "index" not in fields:
            raise InputError(f"Placement is missing the source index: {value!r}.")

        try:
            return Placement(
                index=int(fields["index"]),
                x=float(fields.get("x", 0.0)),
                y=float(fields.get("y", 0.0)),
                rotation=float(fields.get("rotation", 0.0)),
                width=None if "width" not in fields else int(fields["width"]),
                height=None if "height" not in fields else int(fields["height"]),
                z_index=None if "z_index" not in fields else int(fields["z_index"]),
            )
        except (TypeError, ValueError) as e:
            raise InputError(f"Invalid placement {value!r}: {e}")


class Mosaic(CompositeProcessor):
    """
    Place images at fixed positions on a canvas of given size.

    :param int width: Width of canvas.
    :param int height: Height of canvas.
    :param str background: Background color in RGB order. Default: ``"#000000"``.
    :param list placements: List of placements, each a mapping with ``sourceIndex``, ``x`` and ``y``.
    :param bool normalized: Whether positions are fractions of the canvas size. Default: ``False``.
    :param int parallel_threshold: Placements are copied on several threads if there are more than this number
                                   and none of them overlap. Default: ``4``.

    Behavior
    --------
    - The canvas color space is negotiated across all input images, not only the placed ones.
    - Placements are clipped to the canvas. Placements completely outside the canvas or with an invalid
      source index are skipped.
    - Later placements are drawn over earlier ones.

    Configuration (YAML)
    --------------------
    .. code-block:: yaml

       class: pyimgtools.images.processors.mix.Mosaic
       width: 800
       height: 600
       background: "#202020"
       placements:
         - {sourceIndex: 0, x: 0, y: 0}
         - {sourceIndex: 1, x: 400, y: 0}
    """

    __module__ = "pyimgtools.images.processors.mix"

    def __init__(
        self,
        width: int,
        height: int,
        background: Union[str, Sequence[int], None] = "#000000",
        placements: Optional[Sequence[Union[Placement, Mapping[str, Any]]]] = None,
        normalized: bool = False,
        parallel_threshold: int = 4,
        **kwargs: Any,
    ):
        """Init a new mosaic step.

        Args:
            width: Width of canvas.
            height: Height of canvas.
            background: Background color.
            placements: Placements of source images.
            normalized: Whether positions are fractions of the canvas size.
            parallel_threshold: Minimum number of disjoint placements for parallel copying.
        """
        CompositeProcessor.__init__(self, **kwargs)

        # check canvas
        if int(width) <= 0 or int(height) <= 0:
            raise ProcessingError(f"Canvas dimensions must be positive, got {width}x{height}.")

        # store
        self.width = int(width)
        self.height = int(height)
        self.background = parse_color(background)
        self.placements = [Placement.create(p) for p in ([] if placements is None else placements)]
        self.normalized = normalized
        self.parallel_threshold = parallel_threshold

    def create_canvas(self, images: Sequence[Image]) -> Tuple[NDArray[Any], ColorSpace, SampleType]:
        """Creates the background canvas in the color space negotiated across all images.

        Returns:
            Tuple of canvas data, its color space and its sample type.
        """
        sample_types = set(img.sample_type for img in images)
        if len(sample_types) > 1:
            raise ProcessingError("Cannot combine images with different sample types.")
        sample_type = sample_types.pop() if sample_types else SampleType.UINT8
        color_space = negotiate(img.color_space for img in images)
        fill = color_for(self.background, color_space, sample_type)
        return filled(self.width, self.height, fill, color_space, sample_type.dtype), color_space, sample_type

    def position(self, placement: Placement) -> Tuple[int, int]:
        """Resolves the position of a placement in pixels."""
        if self.normalized:
            return round_half_away(placement.x * self.width), round_half_away(placement.y * self.height)
        return round_half_away(placement.x), round_half_away(placement.y)

    def process(self, images: List[Image]) -> Image:
        """Create mosaic.

        Args:
            images: Source images.

        Returns:
            Canvas with placed images.
        """
        canvas, color_space, _ = self.create_canvas(images)
        converted: Dict[int, Image] = {}

        # resolve placements
        jobs: List[Tuple[NDArray[Any], Region]] = []
        for placement in self.placements:
            if not 0 <= placement.index < len(images):
                log.debug("Skipping placement with invalid source index %d.", placement.index)
                continue
            if placement.index not in converted:
                converted[placement.index] = convert(images[placement.index], color_space)
            image = converted[placement.index]
            x, y = self.position(placement)
            region = clip_region(x, y, image.width, image.height, self.width, self.height)
            if region is None:
                log.debug("Skipping placement of image %d outside of canvas at (%d, %d).", placement.index, x, y)
                continue
            jobs.append((image.data, region))

        # place
        if len(jobs) > self.parallel_threshold and _disjoint([r for _, r in jobs]):
            log.debug("Placing %d images in parallel.", len(jobs))
            with ThreadPoolExecutor() as pool:
                list(pool.map(lambda job: place(canvas, job[0], job[1]), jobs))
        else:
            for data, region in jobs:
                place(canvas, data, region)
        return Image(canvas, color_space)


def _disjoint(regions: Sequence[Region]) -> bool:
    """Whether no two regions overlap."""
    for i, a in enumerate(regions):
        for b in regions[i + 1 :]:
            if a.overlaps(b):
                return False
    return True


__all__ = ["Mosaic", "Placement"]
