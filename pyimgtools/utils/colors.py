import re
from typing import Optional, Sequence, Tuple, Union

from pyimgtools.utils.exceptions import InputError

RGBColor = Tuple[int, int, int]

_HEX_PATTERN = re.compile(r"^#?([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


def parse_color(color: Union[str, Sequence[int], None], default: str = "#000000") -> RGBColor:
    """Parses a hex color literal into an (R, G, B) tuple.

    Accepts ``#RRGGBB``, ``RRGGBB``, the short form ``#RGB`` and (R, G, B) sequences. Colors are always
    authored in RGB order, :func:`pyimgtools.images.colorspace.color_for` converts them to the order of a buffer.

    Args:
        color: Color literal or None for default.
        default: Color to use if none is given.

    Returns:
        Tuple of red, green and blue in [0, 255].

    Raises:
        InputError: If the literal is malformed.
    """

    if color is None or (isinstance(color, str) and color.strip() == ""):
        color = default

    if isinstance(color, (tuple, list)) and len(color) == 3:
        r, g, b = (int(c) for c in color)
        if not all(0 <= c <= 255 for c in (r, g, b)):
            raise InputError(f"Color components out of range: {color}.")
        return r, g, b

    if not isinstance(color, str):
        raise InputError(f"Invalid color: {color!r}.")
    m = _HEX_PATTERN.match(color.strip())
    if m is None:
        raise InputError(f"Invalid color literal: {color!r}.")

    digits = m.group(1)
    if len(digits) == 3:
        digits = "".join(d * 2 for d in digits)
    return int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16)


__all__ = ["parse_color", "RGBColor"]
