import logging
from typing import Any, Tuple, Union

import numpy as np
import scipy.ndimage
from numpy.typing import NDArray

from pyimgtools.images import Image
from pyimgtools.images.colorspace import convert, saturate
from pyimgtools.images.processor import ImageProcessor
from pyimgtools.utils.enums import ColorSpace, FilterType, parse_enum
from pyimgtools.utils.exceptions import InputError, ProcessingError

log = logging.getLogger(__name__)


def normalize_kernel_size(size: int) -> int:
    """Makes a kernel size odd and clamps it to [3, 15]."""
    size = int(size)
    if size % 2 == 0:
        size += 1
    return max(3, min(size, 15))


def sharpen_kernel(size: int, intensity: float) -> NDArray[np.float64]:
    """Sharpening kernel with a sum of one.

    For size 3 this is the classic Laplacian based kernel, for larger sizes the direct neighbours of the centre are
    weighted by their distance.
    """
    kernel = np.zeros((size, size))
    c = size // 2
    if size == 3:
        kernel[0, 1] = kernel[1, 0] = kernel[1, 2] = kernel[2, 1] = -intensity
        kernel[1, 1] = 1.0 + 4.0 * intensity
        return kernel

    for dy in (-1, 0, 1):
        for dx in (-1, 0, 1):
            if dx != 0 or dy != 0:
                kernel[c + dy, c + dx] = -intensity / (abs(dx) + abs(dy) + 1)
    kernel[c, c] = 1.0 - kernel.sum()
    return kernel


def emboss_kernel(intensity: float) -> NDArray[np.float64]:
    i = intensity
    return np.array([[-2 * i, -i, 0.0], [-i, 1.0, i], [0.0, i, 2 * i]])


def sobel_kernels(size: int) -> Tuple[NDArray[np.float64], NDArray[np.float64]]:
    """Sobel kernels for derivatives in x and y, built from binomial smoothing and a central difference."""
    smooth = np.array([1.0])
    for _ in range(size - 1):
        smooth = np.convolve(smooth, [1.0, 1.0])
    deriv = np.array([1.0])
    for _ in range(size - 3):
        deriv = np.convolve(deriv, [1.0, 1.0])
    deriv = np.convolve(deriv, [-1.0, 0.0, 1.0])
    return np.outer(smooth, deriv), np.outer(deriv, smooth)


class Filter(ImageProcessor):
    """
    Apply a convolution filter to an image.

    :param str filter_type: One of ``blur``, ``sharpen``, ``edge``, ``emboss`` or ``gaussian``.
    :param int kernel_size: Size of the kernel, made odd and clamped to [3, 15]. Default: ``3``.
    :param float intensity: Strength of the filter, clamped to [0, 2]. Default: ``1.0``.

    Behavior
    --------
    - ``blur``: box average. With an intensity below one, the result is blended with the original.
    - ``sharpen``: unsharp kernel whose neighbour weights scale with the intensity.
    - ``edge``: Sobel gradient magnitude of the grayscale image, horizontal and vertical derivatives
      combined with equal weights and scaled by the intensity. The result is gray in all color channels.
    - ``emboss``: directional kernel, shifted to mid-gray.
    - ``gaussian``: Gaussian blur with a standard deviation of ``kernel_size / 6 * intensity``.
    - Borders are mirrored without repeating the edge pixel.
    - Only color channels are filtered, an alpha channel is passed through unchanged.

    Configuration (YAML)
    --------------------
    .. code-block:: yaml

       class: pyimgtools.images.processors.transform.Filter
       filter_type: gaussian
       kernel_size: 7
       intensity: 1.5
    """

    __module__ = "pyimgtools.images.processors.transform"

    def __init__(
        self,
        filter_type: Union[str, FilterType] = FilterType.BLUR,
        kernel_size: int = 3,
        intensity: float = 1.0,
        **kwargs: Any,
    ):
        """Init a new filter step.

        Args:
            filter_type: Type of filter.
            kernel_size: Size of kernel.
            intensity: Strength of filter.
        """
        ImageProcessor.__init__(self, **kwargs)

        # store
        try:
            self.filter_type = parse_enum(FilterType, filter_type)
        except InputError:
            raise ProcessingError(f"Unsupported filter type: {filter_type}.")
        self.kernel_size = normalize_kernel_size(kernel_size)
        self.intensity = max(0.0, min(float(intensity), 2.0))

    def process(self, image: Image) -> Image:
        """Filter an image.

        Args:
            image: Image to filter.

        Returns:
            Filtered image.
        """

        # split off alpha
        color = image.data[:, :, :3] if image.color_space.has_alpha else image.data
        max_value = image.sample_type.max_value

        # filter color channels
        if self.filter_type == FilterType.EDGE:
            filtered = self._edge(image, max_value)
        else:
            planes = [self._filter_plane(color[:, :, c].astype(np.float64), max_value) for c in range(color.shape[2])]
            filtered = np.stack(planes, axis=2)
        result = saturate(filtered, image.data.dtype)

        # re-attach alpha
        if image.color_space.has_alpha:
            result = np.concatenate([result, image.data[:, :, 3:]], axis=2)
        return image.with_data(result)

    def _filter_plane(self, plane: NDArray[np.float64], max_value: float) -> NDArray[np.float64]:
        k, i = self.kernel_size, self.intensity

        if self.filter_type == FilterType.BLUR:
            blurred = scipy.ndimage.uniform_filter(plane, size=k, mode="mirror")
            return plane * (1.0 - i) + blurred * i if i < 1.0 else blurred

        elif self.filter_type == FilterType.SHARPEN:
            return scipy.ndimage.correlate(plane, sharpen_kernel(k, i), mode="mirror")

        elif self.filter_type == FilterType.EMBOSS:
            level = max_value * 128.0 / 255.0
            return scipy.ndimage.correlate(plane, emboss_kernel(i), mode="mirror") + level

        elif self.filter_type == FilterType.GAUSSIAN:
            sigma = k / 6.0 * i
            if sigma <= 0:
                sigma = 0.3 * ((k - 1) * 0.5 - 1) + 0.8
            return scipy.ndimage.gaussian_filter(plane, sigma, mode="mirror", truncate=(k // 2) / sigma)

        raise ProcessingError(f"Unsupported filter type: {self.filter_type}.")

    def _edge(self, image: Image, max_value: float) -> NDArray[np.float64]:
        # gradients on gray image
        gray = convert(image, ColorSpace.GRAY).data[:, :, 0].astype(np.float64)
        kx, ky = sobel_kernels(self.kernel_size)
        gx = np.clip(np.abs(scipy.ndimage.correlate(gray, kx, mode="mirror")), 0, max_value)
        gy = np.clip(np.abs(scipy.ndimage.correlate(gray, ky, mode="mirror")), 0, max_value)

        # combine and scale
        magnitude = np.clip((0.5 * gx + 0.5 * gy) * self.intensity, 0, max_value)
        channels = 1 if image.color_space == ColorSpace.GRAY else 3
        return np.repeat(magnitude[:, :, np.newaxis], channels, axis=2)


__all__ = ["Filter", "normalize_kernel_size", "sharpen_kernel", "emboss_kernel", "sobel_kernels"]
