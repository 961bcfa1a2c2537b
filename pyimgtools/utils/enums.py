"""
Enumerations shared by images, processors and tasks.
"""
__title__ = "Enumerations"

from enum import Enum
from typing import Any, Type, TypeVar

import numpy as np

from pyimgtools.utils.exceptions import InputError

E = TypeVar("E", bound=Enum)


def parse_enum(enum_class: Type[E], value: Any) -> E:
    """Converts a value (enum member, its value or its name) into a member of the given enum.

    Args:
        enum_class: Enum to convert to.
        value: Value to convert.

    Returns:
        Enum member.

    Raises:
        InputError: If value does not match any member.
    """
    if isinstance(value, enum_class):
        return value
    if isinstance(value, str):
        for member in enum_class:
            if value.lower() in (str(member.value).lower(), member.name.lower()):
                return member
    raise InputError(f"Invalid value {value!r} for {enum_class.__name__}.")


class ColorSpace(Enum):
    """Enumerator for the order and number of channels in a pixel.

    Attributes:
        GRAY: Single luminance channel.
        RGB: Red, green, blue.
        RGBA: Red, green, blue, alpha.
        BGR: Blue, green, red.
        BGRA: Blue, green, red, alpha.
    """

    GRAY = "GRAY"
    RGB = "RGB"
    RGBA = "RGBA"
    BGR = "BGR"
    BGRA = "BGRA"

    @property
    def channels(self) -> int:
        """Canonical number of channels."""
        return {"GRAY": 1, "RGB": 3, "BGR": 3, "RGBA": 4, "BGRA": 4}[self.value]

    @property
    def has_alpha(self) -> bool:
        return self.channels == 4

    @property
    def is_bgr(self) -> bool:
        """Whether blue is stored in the first channel."""
        return self in (ColorSpace.BGR, ColorSpace.BGRA)

    @staticmethod
    def from_channels(channels: int) -> "ColorSpace":
        """Default color space for a given number of channels."""
        if channels == 1:
            return ColorSpace.GRAY
        elif channels == 3:
            return ColorSpace.RGB
        elif channels == 4:
            return ColorSpace.RGBA
        raise InputError(f"Unsupported number of channels: {channels}.")


class SampleType(Enum):
    """Enumerator for sample types.

    Attributes:
        UINT8: 8 bit unsigned integer.
        UINT16: 16 bit unsigned integer.
        FLOAT32: 32 bit float, nominal range [0, 1].
    """

    UINT8 = "uint8"
    UINT16 = "uint16"
    FLOAT32 = "float32"

    @property
    def dtype(self) -> np.dtype:
        return np.dtype(self.value)

    @property
    def bytes_per_sample(self) -> int:
        return self.dtype.itemsize

    @property
    def max_value(self) -> float:
        """Nominal full-scale value."""
        return {"uint8": 255.0, "uint16": 65535.0, "float32": 1.0}[self.value]

    @property
    def is_integer(self) -> bool:
        return self != SampleType.FLOAT32

    @staticmethod
    def from_dtype(dtype: Any) -> "SampleType":
        try:
            return SampleType(np.dtype(dtype).name)
        except (TypeError, ValueError):
            raise InputError(f"Unsupported sample type: {dtype}.")


class OutputFormat(Enum):
    """Enumerator for result encodings.

    Attributes:
        RAW: Raw pixel object.
        JPG: JPEG file.
        PNG: PNG file.
        WEBP: WebP file.
    """

    RAW = "raw"
    JPG = "jpg"
    PNG = "png"
    WEBP = "webp"


class ResizeMode(Enum):
    """Enumerator for the interpretation of a resize value.

    Attributes:
        ABSOLUTE: Value is the new size in pixels.
        MULTIPLY: Value is a factor applied to the original size.
        PERCENTAGE: Value is a percentage of the original size.
        AUTO: Size is derived from the other dimension, keeping the aspect ratio.
    """

    ABSOLUTE = "absolute"
    MULTIPLY = "multiply"
    PERCENTAGE = "percentage"
    AUTO = "auto"


class ConcatDirection(Enum):
    RIGHT = "right"
    LEFT = "left"
    UP = "up"
    DOWN = "down"

    @property
    def is_horizontal(self) -> bool:
        return self in (ConcatDirection.RIGHT, ConcatDirection.LEFT)


class ConcatStrategy(Enum):
    """Enumerator for matching the cross-axis size of concatenated tiles.

    Attributes:
        RESIZE: Scale tiles to the largest cross-axis size.
        PAD_START: Pad before the tile.
        PAD_END: Pad after the tile.
        PAD_BOTH: Split the padding between both sides.
    """

    RESIZE = "resize"
    PAD_START = "pad-start"
    PAD_END = "pad-end"
    PAD_BOTH = "pad-both"


class FilterType(Enum):
    BLUR = "blur"
    SHARPEN = "sharpen"
    EDGE = "edge"
    EMBOSS = "emboss"
    GAUSSIAN = "gaussian"


class TaskState(Enum):
    """Enumerator for the state of an image task.

    Attributes:
        QUEUED: Task has been created, input is ingested.
        RUNNING: Task is processing on a worker thread.
        COMPLETED: Task finished with a result.
        FAILED: Task finished with an error.
    """

    QUEUED = "queued"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


__all__ = [
    "parse_enum",
    "ColorSpace",
    "SampleType",
    "OutputFormat",
    "ResizeMode",
    "ConcatDirection",
    "ConcatStrategy",
    "FilterType",
    "TaskState",
]
