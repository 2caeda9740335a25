"""Region-of-interest cropping.

Rows that carry channel signal have clearly non-zero intensity variance
along x; empty chip areas and the black border left by rectification do
not. The longest run of such rows is kept.
"""

import logging
import math
from typing import Optional, Tuple, TYPE_CHECKING

import numpy as np
import xarray as xr

from glide.core.volume import replace_data

if TYPE_CHECKING:
    from glide.schemas import InternalConfig

__all__ = ['ROICropper', 'find_signal_rows', 'longest_run']

logger = logging.getLogger(__name__)


def longest_run(mask: np.ndarray) -> Optional[Tuple[int, int]]:
    """Longest run of True values as ``(start, stop)``, stop exclusive.

    The first run wins ties. Returns None when no value is True.
    """
    best = None
    best_len = 0
    start = None
    for i, flag in enumerate(np.append(mask, False)):
        if flag and start is None:
            start = i
        elif not flag and start is not None:
            if i - start > best_len:
                best, best_len = (start, i), i - start
            start = None
    return best


def find_signal_rows(frame: np.ndarray, variance_threshold: float) -> Optional[Tuple[int, int]]:
    """Longest band ``[top, bottom)`` of rows with variance above the threshold."""
    row_variance = frame.var(axis=1)
    return longest_run(row_variance > variance_threshold)


class ROICropper:
    """Trims a rectified volume to the band that contains channels."""

    def __init__(self, config: "InternalConfig"):
        self.variance_threshold = config.cropper.variance_threshold

    def find_bounds(self, volume: xr.DataArray, slope: float) -> Tuple[int, int, int, int]:
        """Crop box ``(left, top, right, bottom)``; right and bottom exclusive.

        The first and the last frame are examined; the one with the longer
        signal band decides the vertical bounds. The horizontal bounds
        remove the slanted border introduced by rectification.
        """
        data = volume.values
        n_t, height, width = data.shape

        best = None
        for t in sorted({0, n_t - 1}):
            band = find_signal_rows(data[t], self.variance_threshold)
            if band is not None and (best is None or band[1] - band[0] > best[1] - best[0]):
                best = band

        if best is None:
            logger.info("No row above variance threshold %.4f, keeping full frame",
                        self.variance_threshold)
            return 0, 0, width, height

        top, bottom = best
        left = int(np.clip(math.floor(-slope * bottom), 0, width))
        right = int(np.clip(math.ceil(width + slope * (height - top)), 0, width))
        if left >= right:
            logger.warning("Degenerate horizontal crop [%d, %d), keeping full width", left, right)
            left, right = 0, width
        return left, top, right, bottom

    def crop(self, volume: xr.DataArray, slope: Optional[float] = None) -> xr.DataArray:
        """Crop every frame of ``volume``.

        Parameters
        ----------
        volume : xr.DataArray
            Rectified (t, y, x) volume.
        slope : float, optional
            Skew slope fitted by the rectifier. Defaults to
            ``volume.attrs["skew_slope"]`` or 0.

        Returns
        -------
        xr.DataArray
            New, cropped volume with ``attrs["crop_box"]`` set.
        """
        if slope is None:
            slope = float(volume.attrs.get("skew_slope", 0.0))
        left, top, right, bottom = self.find_bounds(volume, slope)
        cropped = volume.values[:, top:bottom, left:right]
        logger.info("Cropping to x=[%d, %d), y=[%d, %d)", left, right, top, bottom)
        return replace_data(volume, cropped, crop_box=(left, top, right, bottom))
