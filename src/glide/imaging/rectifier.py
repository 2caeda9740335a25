"""Geometric rectification.

Mother-machine chips are rarely mounted perfectly level. The tops of the
channels form a straight line across the first frame; its slope is fitted
and the whole stack is rotated about the line's center so that the line
becomes horizontal.
"""

import logging
import math
from typing import Tuple, TYPE_CHECKING

import numpy as np
import xarray as xr
from scipy import ndimage

from glide.contracts import require
from glide.core.volume import replace_data

if TYPE_CHECKING:
    from glide.schemas import InternalConfig

__all__ = ['GeometricRectifier', 'sample_channel_tops', 'fit_skew']

logger = logging.getLogger(__name__)


def sample_channel_tops(frame: np.ndarray, threshold_fraction: float) -> Tuple[np.ndarray, np.ndarray]:
    """Topmost bright row of every column.

    A pixel is bright when it exceeds ``min + threshold_fraction * (max - min)``
    of the frame. Columns without a bright pixel give no sample.

    Returns
    -------
    cols, rows : np.ndarray
        Sample coordinates.
    """
    lo = float(frame.min())
    hi = float(frame.max())
    bright = frame > lo + threshold_fraction * (hi - lo)
    has_bright = bright.any(axis=0)
    cols = np.flatnonzero(has_bright)
    rows = bright[:, cols].argmax(axis=0)
    return cols, rows


def fit_skew(cols: np.ndarray, rows: np.ndarray) -> Tuple[float, float]:
    """Least-squares line ``row = intercept + slope * col``.

    Returns (slope, intercept). Fewer than two samples give a flat line
    through the only sample, or through row 0 when there is none.
    """
    if len(cols) < 2:
        return 0.0, float(rows[0]) if len(rows) else 0.0
    slope, intercept = np.polyfit(cols.astype(np.float64), rows.astype(np.float64), 1)
    return float(slope), float(intercept)


class GeometricRectifier:
    """Estimates and removes the global channel skew.

    After :meth:`rectify` the fitted slope is available as ``slope`` and
    the rotation angle (radians) as ``angle``; the cropper needs the slope
    to trim the slanted borders. ``matrix`` and ``offset`` hold the affine
    map from output (y, x) to input (y, x) that was applied.
    """

    def __init__(self, config: "InternalConfig"):
        self.threshold_fraction = config.rectifier.threshold_fraction
        self.slope = 0.0
        self.angle = 0.0
        self.matrix = np.eye(2)
        self.offset = np.zeros(2)

    def estimate(self, frame: np.ndarray) -> Tuple[float, float]:
        """Fit the channel-top line on ``frame``; returns (slope, intercept)."""
        cols, rows = sample_channel_tops(frame, self.threshold_fraction)
        if len(cols) < 2:
            logger.warning("Only %d channel-top samples, assuming no skew", len(cols))
        return fit_skew(cols, rows)

    def rectify(self, volume: xr.DataArray) -> xr.DataArray:
        """Rotate every frame so that the channel tops are horizontal.

        Parameters
        ----------
        volume : xr.DataArray
            (t, y, x) volume. Only frame 0 is used for the fit.

        Returns
        -------
        xr.DataArray
            New volume, at least as large as the input. Pixels outside the
            original frame are 0. ``attrs["skew_slope"]`` holds the slope.

        Raises
        ------
        ContractViolation
            If the volume is not 3-dimensional.
        """
        require(
            volume.ndim == 3,
            f"Rectifier contract violated: got {volume.ndim} dims, expected 3 (t, y, x)"
        )
        data = volume.values
        n_t, height, width = data.shape

        slope, intercept = self.estimate(data[0])
        theta = math.atan(slope)
        self.slope = slope
        self.angle = theta

        center = np.array([intercept + slope * width / 2.0, width / 2.0])  # (y, x)
        cos_t, sin_t = math.cos(theta), math.sin(theta)
        # maps output (y, x) to input (y, x); rotation by +theta undoes the skew
        matrix = np.array([[cos_t, sin_t], [-sin_t, cos_t]])

        min_y, min_x, max_x = self._bounding_box(center, cos_t, sin_t, height, width)
        out_shape = (height - min_y, max_x - min_x)
        offset = matrix @ (np.array([min_y, min_x], dtype=np.float64) - center) + center
        self.matrix = matrix
        self.offset = offset

        logger.info("Rectifying: slope=%.4f (%.2f deg), %dx%d -> %dx%d",
                    slope, math.degrees(theta), width, height, out_shape[1], out_shape[0])

        out = np.empty((n_t,) + out_shape, dtype=np.float64)
        for t in range(n_t):
            out[t] = ndimage.affine_transform(
                data[t], matrix, offset=offset, output_shape=out_shape,
                order=1, mode="constant", cval=0.0,
            )
        return replace_data(volume, out, skew_slope=slope)

    @staticmethod
    def _bounding_box(center, cos_t, sin_t, height, width):
        """Forward-map the frame corners; grow left, right and up only."""
        cy, cx = center
        corners = np.array([[0, 0], [width, 0], [0, height], [width, height]], dtype=np.float64)
        dx = corners[:, 0] - cx
        dy = corners[:, 1] - cy
        xs = np.round(cos_t * dx + sin_t * dy + cx, 6)
        ys = np.round(-sin_t * dx + cos_t * dy + cy, 6)
        min_x = min(0, int(math.floor(xs.min())))
        max_x = max(width, int(math.ceil(xs.max())))
        min_y = min(0, int(math.floor(ys.min())))
        return min_y, min_x, max_x
