"""
*pyimgtools* is an image processing engine: it ingests raw pixel buffers or encoded image files, transforms and
composites them on worker threads and returns encoded results together with per-phase timings.
"""
__title__ = "pyimgtools"

from .version import version, __version__
from .engine import Engine
