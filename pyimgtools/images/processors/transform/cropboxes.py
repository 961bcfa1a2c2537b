import asyncio
import logging
import math
from typing import Any, Dict, List, Mapping, NamedTuple, Optional, Sequence, Tuple

from pyimgtools.images import Image
from pyimgtools.images.geometry import round_half_away
from pyimgtools.object import Object
from pyimgtools.images.processors.transform.crop import Crop

log = logging.getLogger(__name__)


class BoxCrop(NamedTuple):
    """Crop step for a single detection together with its tag."""

    crop: Crop
    tag: Dict[str, Any]


class CropBoxes(Object):
    """
    Cut the regions of object detections out of an image.

    Each detection is a mapping with

    - ``box``: four corner points ``[[x1, y1], [x2, y1], [x2, y2], [x1, y2]]`` in normalized coordinates,
    - ``confidence``: optional, defaults to 1,
    - a label in ``class_name``, ``class_tag`` or ``label``, defaulting to "unknown".

    Detections below ``min_confidence``, with malformed or inconsistent corners or with an empty pixel region are
    skipped with a warning. All other boxes are converted to pixels, clipped to the image and cropped
    independently. Every crop comes with a tag containing label, confidence and the pixel and normalized box.

    .. code-block:: yaml

       class: pyimgtools.images.processors.transform.CropBoxes
       min_confidence: 0.7
    """

    __module__ = "pyimgtools.images.processors.transform"

    def __init__(self, min_confidence: float = 0.5, **kwargs: Any):
        """Init new bounding box cropper.

        Args:
            min_confidence: Minimum confidence for a detection to be cropped.
        """
        Object.__init__(self, **kwargs)
        self.min_confidence = float(min_confidence)

    def resolve(self, image_width: int, image_height: int, detections: Sequence[Any]) -> List[BoxCrop]:
        """Converts detections into crop steps for an image of the given size.

        Args:
            image_width: Width of image.
            image_height: Height of image.
            detections: List of detections.

        Returns:
            One crop step per valid detection, in order of detections.
        """
        crops = []
        for detection in detections:
            crop = self._parse_detection(detection, image_width, image_height)
            if crop is not None:
                crops.append(crop)
        if len(crops) == 0 and len(detections) > 0:
            log.warning("No valid bounding boxes found with confidence >= %.2f.", self.min_confidence)
        return crops

    async def __call__(self, image: Image, detections: Sequence[Any]) -> List[Tuple[Image, Dict[str, Any]]]:
        """Crops all detections from an image concurrently.

        Args:
            image: Image to crop from.
            detections: List of detections.

        Returns:
            List of cropped image and tag for each valid detection.
        """
        crops = self.resolve(image.width, image.height, detections)
        images = await asyncio.gather(*[c.crop(image) for c in crops])
        return [(img, c.tag) for img, c in zip(images, crops)]

    def _parse_detection(self, detection: Any, image_width: int, image_height: int) -> Optional[BoxCrop]:
        if not isinstance(detection, Mapping):
            log.warning("Invalid detection, expected a mapping: %r", detection)
            return None

        # confidence
        try:
            confidence = float(detection.get("confidence", 1.0) or 1.0)
        except (TypeError, ValueError):
            log.warning("Invalid confidence in detection: %r", detection.get("confidence"))
            return None
        if confidence < self.min_confidence:
            return None

        # label
        label = "unknown"
        for key in ["class_name", "class_tag", "label"]:
            if detection.get(key) not in (None, ""):
                label = str(detection[key])
                break

        # corners
        corners = _parse_corners(detection.get("box"))
        if corners is None:
            log.warning("Invalid box in detection, expected 4 consistent corner points: %r", detection.get("box"))
            return None
        x1, y1, x2, y2 = corners

        # to pixels
        x = round_half_away(x1 * image_width)
        y = round_half_away(y1 * image_height)
        width = round_half_away((x2 - x1) * image_width)
        height = round_half_away((y2 - y1) * image_height)
        if width <= 0 or height <= 0:
            log.warning("Invalid dimensions %dx%d for box %r.", width, height, detection.get("box"))
            return None

        # clip to image
        x = max(0, min(x, image_width - 1))
        y = max(0, min(y, image_height - 1))
        width = min(width, image_width - x)
        height = min(height, image_height - y)

        tag = {
            "label": label,
            "confidence": confidence,
            "bbox": {
                "x": x,
                "y": y,
                "width": width,
                "height": height,
                "normalized": {"x1": x1, "y1": y1, "x2": x2, "y2": y2},
            },
        }
        return BoxCrop(Crop(x, y, width, height), tag)


def _parse_corners(box: Any) -> Optional[Tuple[float, float, float, float]]:
    """Parses [[x1, y1], [x2, y1], [x2, y2], [x1, y2]] into (x1, y1, x2, y2), None if invalid."""
    if not isinstance(box, (list, tuple)) or len(box) != 4:
        return None
    try:
        points = [(float(p[0]), float(p[1])) for p in box]
    except (TypeError, ValueError, IndexError):
        return None
    (x1, y1), (x2, y1b), (x2b, y2), (x1b, y2b) = points
    if x1 != x1b or x2 != x2b or y1 != y1b or y2 != y2b:
        return None
    if not all(math.isfinite(v) for v in (x1, y1, x2, y2)):
        return None
    return x1, y1, x2, y2


__all__ = ["CropBoxes", "BoxCrop"]
