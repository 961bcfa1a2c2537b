"""
Serialization of images into the external result representation.

Raw output returns the image as a raw image object, compressed formats are written with Pillow into a bytes buffer.
"""
from __future__ import annotations

import io
import logging
from typing import Any, Dict, Union

import numpy as np
import PIL.Image
from numpy.typing import NDArray

from pyimgtools.images.colorspace import convert
from pyimgtools.images.image import Image
from pyimgtools.utils.enums import ColorSpace, OutputFormat, SampleType, parse_enum
from pyimgtools.utils.exceptions import EncodingError

log = logging.getLogger(__name__)

# Pillow format names
_PIL_FORMATS = {
    OutputFormat.JPG: "JPEG",
    OutputFormat.PNG: "PNG",
    OutputFormat.WEBP: "WEBP",
}


class OutputSpec:
    """Requested output encoding of a result."""

    def __init__(
        self, format: Union[str, OutputFormat] = OutputFormat.RAW, quality: int = 90, png_optimize: bool = False
    ):
        """Init a new output spec.

        Args:
            format: Output format, one of raw, jpg, png or webp.
            quality: Quality for jpg and webp, clamped to [1, 100].
            png_optimize: Use maximum compression and optimization for png.
        """
        self.format = parse_enum(OutputFormat, format)
        self.quality = max(1, min(int(quality), 100))
        self.png_optimize = bool(png_optimize)

    def __repr__(self) -> str:
        return f"<OutputSpec {self.format.value} quality={self.quality} png_optimize={self.png_optimize}>"


def to_8bit(image: Image) -> NDArray[np.uint8]:
    """Returns pixel data as 8 bit RGB (or gray) without alpha, as required by compressed formats.

    Works on a private copy, the data of the given image is never changed.
    """

    # channel order
    target = ColorSpace.GRAY if image.color_space == ColorSpace.GRAY else ColorSpace.RGB
    data = convert(image, target).data

    # sample depth
    if image.sample_type == SampleType.UINT16:
        data = np.rint(data / 257.0).astype(np.uint8)
    elif image.sample_type == SampleType.FLOAT32:
        data = np.rint(np.clip(data, 0.0, 1.0) * 255.0).astype(np.uint8)
    return np.ascontiguousarray(data)


def encode(image: Image, output: OutputSpec) -> Union[Dict[str, Any], bytes]:
    """Encodes an image.

    Args:
        image: Image to encode.
        output: Requested output.

    Returns:
        Raw image object for raw format, otherwise bytes of the encoded file.

    Raises:
        EncodingError: If encoding failed.
    """
    if output.format == OutputFormat.RAW:
        return image.to_raw()

    # to Pillow
    data = to_8bit(image)
    pil_image = PIL.Image.fromarray(data[:, :, 0] if data.shape[2] == 1 else data)

    # options
    options: Dict[str, Any] = {}
    if output.format in (OutputFormat.JPG, OutputFormat.WEBP):
        options["quality"] = output.quality
    elif output.png_optimize:
        options["compress_level"] = 9
        options["optimize"] = True

    # write
    try:
        with io.BytesIO() as bio:
            pil_image.save(bio, format=_PIL_FORMATS[output.format], **options)
            encoded = bio.getvalue()
    except (OSError, ValueError, KeyError) as e:
        raise EncodingError(f"Could not encode image as {output.format.value}: {e}")
    log.debug("Encoded %dx%d image as %s with %d bytes.", image.width, image.height, output.format.value, len(encoded))
    return encoded


__all__ = ["OutputSpec", "encode", "to_8bit"]
