__title__ = "Mix"

from .advancedmosaic import AdvancedMosaic
from .blend import Blend
from .concat import Concat
from .mosaic import Mosaic, Placement
