"""
Images are pixel buffers of shape (height, width, channels) together with their channel layout, see
:class:`pyimgtools.images.Image`. Processors in :mod:`pyimgtools.images.processors` operate on them.
"""
__title__ = "Images"

from .image import Image
from .processor import ImageProcessor, CompositeProcessor
from .pipeline import Pipeline
