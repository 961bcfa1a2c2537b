__title__ = "Transform"

from .crop import Crop
from .cropboxes import CropBoxes
from .filter import Filter
from .padding import Padding
from .resize import Resize
from .rotate import Rotate
