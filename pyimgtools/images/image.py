from __future__ import annotations
import io
import logging
import math
from typing import Optional, Dict, Any, Mapping, Union

import numpy as np
import PIL.Image
from numpy.typing import NDArray

from pyimgtools.utils.enums import ColorSpace, SampleType
from pyimgtools.utils.exceptions import InputError

log = logging.getLogger(__name__)


# legacy "<dtype>_<SPACE>" prefixes
_LEGACY_DTYPES = {
    "int8": SampleType.UINT8,
    "uint8": SampleType.UINT8,
    "int16": SampleType.UINT16,
    "uint16": SampleType.UINT16,
    "float32": SampleType.FLOAT32,
}

# Pillow modes that can be ingested directly
_PIL_MODES = {
    "L": (ColorSpace.GRAY, np.uint8),
    "RGB": (ColorSpace.RGB, np.uint8),
    "RGBA": (ColorSpace.RGBA, np.uint8),
    "I;16": (ColorSpace.GRAY, np.uint16),
}


class Image:
    """Image class, i.e. a pixel buffer with its channel layout.

    Pixel data is always stored as a C-contiguous array of shape (height, width, channels), even for
    grayscale images.
    """

    __module__ = "pyimgtools.images"

    def __init__(self, data: NDArray[Any], color_space: Union[ColorSpace, str, None] = None):
        """Init a new image.

        Args:
            data: Numpy array containing data for image, either (H, W) or (H, W, C).
            color_space: Order of channels. If None, it is derived from the number of channels.

        Raises:
            InputError: If data and color space do not match.
        """

        # check shape
        if data.ndim == 2:
            data = data[:, :, np.newaxis]
        if data.ndim != 3:
            raise InputError(f"Invalid shape for image data: {data.shape}.")
        if data.shape[0] < 1 or data.shape[1] < 1:
            raise InputError(f"Image must have at least one pixel, got shape {data.shape}.")

        # check sample type
        self.sample_type = SampleType.from_dtype(data.dtype)

        # color space
        if color_space is None:
            self.color_space = ColorSpace.from_channels(data.shape[2])
        elif isinstance(color_space, ColorSpace):
            self.color_space = color_space
        else:
            self.color_space = _parse_color_space(color_space)
        if self.color_space.channels != data.shape[2]:
            raise InputError(
                f"Color space {self.color_space.value} requires {self.color_space.channels} channels, "
                f"got {data.shape[2]}."
            )

        # store
        self.data: NDArray[Any] = np.ascontiguousarray(data)

    @classmethod
    def from_input(cls, value: Any) -> Image:
        """Create image from any supported external representation.

        Args:
            value: Either an existing Image, a raw image mapping or a buffer containing an encoded image file.

        Returns:
            The new image.
        """
        if isinstance(value, Image):
            return value
        elif isinstance(value, (bytes, bytearray, memoryview)):
            return cls.from_bytes(value)
        elif isinstance(value, Mapping):
            return cls.from_raw(value)
        raise InputError(f"Invalid input: expected buffer or raw image object, got {type(value).__name__}.")

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any]) -> Image:
        """Create image from a raw image object.

        The object must contain ``data``, ``width`` and ``height``. Channel layout is taken from ``colorSpace``,
        ``channels`` (a number or a legacy string like "int8_RGB") and ``dtype``, missing values are inferred.

        Args:
            raw: Raw image object.

        Returns:
            The new image.
        """

        # required fields
        for key in ["data", "width", "height"]:
            if key not in raw or raw[key] is None:
                raise InputError(f"Raw image is missing field '{key}'.")
        width = _positive_int(raw["width"], "width")
        height = _positive_int(raw["height"], "height")
        try:
            buffer = memoryview(raw["data"]).cast("B")
        except TypeError:
            raise InputError("Raw image data is not a bytes-like object.")

        # parse channel information
        color_space: Optional[ColorSpace] = None
        channels: Optional[int] = None
        sample_type = SampleType.UINT8
        legacy = raw.get("channels")
        if isinstance(legacy, str):
            # legacy format, e.g. "int8_RGB"
            prefix, _, suffix = legacy.rpartition("_")
            color_space = _parse_color_space(suffix)
            if prefix != "":
                if prefix.lower() not in _LEGACY_DTYPES:
                    raise InputError(f"Unsupported sample type in channels string: {legacy}.")
                sample_type = _LEGACY_DTYPES[prefix.lower()]
        elif legacy is not None:
            channels = _positive_int(legacy, "channels")
        if raw.get("colorSpace") is not None:
            color_space = _parse_color_space(raw["colorSpace"])
        if raw.get("dtype") is not None:
            try:
                sample_type = SampleType(str(raw["dtype"]).lower())
            except ValueError:
                raise InputError(f"Unsupported sample type: {raw['dtype']}.")

        # infer channel count
        bps = sample_type.bytes_per_sample
        if channels is None:
            if color_space is not None:
                channels = color_space.channels
            else:
                pixels = width * height * bps
                if buffer.nbytes % pixels != 0:
                    raise InputError(
                        f"Cannot infer channels: {buffer.nbytes} bytes is not a multiple of {width}x{height} pixels."
                    )
                channels = buffer.nbytes // pixels

        # infer color space
        if color_space is None:
            color_space = ColorSpace.from_channels(channels)
        if color_space.channels != channels:
            raise InputError(f"Color space {color_space.value} does not match {channels} channels.")

        # validate size
        expected = width * height * channels * bps
        if buffer.nbytes != expected:
            raise InputError(
                f"Data length {buffer.nbytes} does not match {width}x{height}x{channels} {sample_type.value} "
                f"({expected} bytes)."
            )

        # wrap buffer without copying, images are never modified in place
        data = np.frombuffer(buffer, dtype=sample_type.dtype).reshape(height, width, channels)
        return cls(data, color_space)

    @classmethod
    def from_bytes(cls, data: Union[bytes, bytearray, memoryview]) -> Image:
        """Create Image from a bytes array containing an encoded image file (JPEG, PNG, WebP, BMP, ...).

        Args:
            data: Bytes array to create image from.

        Returns:
            The new image.
        """

        try:
            with io.BytesIO(bytes(data)) as bio:
                pil_image = PIL.Image.open(bio)
                pil_image.load()
        except (PIL.UnidentifiedImageError, OSError, ValueError) as e:
            raise InputError(f"Failed to decode image buffer: {e}")
        log.debug("Decoded %s image in mode %s with size %s.", pil_image.format, pil_image.mode, pil_image.size)
        return cls.from_pil(pil_image)

    @classmethod
    def from_pil(cls, pil_image: PIL.Image.Image) -> Image:
        """Create image from Pillow image, normalizing exotic modes to RGB(A).

        Args:
            pil_image: Pillow image.

        Returns:
            New image.
        """

        # convert unsupported modes
        if pil_image.mode not in _PIL_MODES:
            has_alpha = pil_image.mode in ("LA", "PA", "RGBa", "La") or "transparency" in pil_image.info
            pil_image = pil_image.convert("RGBA" if has_alpha else "RGB")

        color_space, dtype = _PIL_MODES[pil_image.mode]
        return cls(np.asarray(pil_image, dtype=dtype), color_space)

    @property
    def width(self) -> int:
        return int(self.data.shape[1])

    @property
    def height(self) -> int:
        return int(self.data.shape[0])

    @property
    def channels(self) -> int:
        return int(self.data.shape[2])

    @property
    def nbytes(self) -> int:
        """Size of pixel data in bytes."""
        return int(self.data.nbytes)

    def copy(self) -> Image:
        """Returns a copy of this image."""
        return Image(self.data.copy(), self.color_space)

    def with_data(self, data: NDArray[Any], color_space: Optional[ColorSpace] = None) -> Image:
        """Returns a new image with given data and the color space of this one (or the given one)."""
        return Image(data, self.color_space if color_space is None else color_space)

    def to_raw(self) -> Dict[str, Any]:
        """Returns the raw image object for this image."""
        return {
            "data": self.data.tobytes(),
            "width": self.width,
            "height": self.height,
            "channels": self.channels,
            "colorSpace": self.color_space.value,
            "dtype": self.sample_type.value,
        }

    def __repr__(self) -> str:
        return f"<Image {self.width}x{self.height} {self.color_space.value} {self.sample_type.value}>"


def _parse_color_space(value: Any) -> ColorSpace:
    try:
        return ColorSpace(str(value).upper())
    except ValueError:
        raise InputError(f"Unsupported color space: {value}.")


def _positive_int(value: Any, name: str) -> int:
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InputError(f"Field '{name}' is not a number: {value!r}.")
    if not math.isfinite(number) or number != int(number) or number < 1:
        raise InputError(f"Field '{name}' must be a positive integer, got {value!r}.")
    return int(number)


__all__ = ["Image"]
