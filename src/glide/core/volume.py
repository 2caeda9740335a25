"""Volume helpers.

A volume is a dense 3-D float64 intensity field stored as an
``xarray.DataArray`` with dims ``("t", "y", "x")`` and integer pixel-index
coordinates. Stages never modify the volume they receive; they build a new
one with :func:`replace_data` and hand it on.

Stage metadata travels in ``attrs``:

- ``skew_slope`` : float, set by the rectifier
- ``crop_box`` : (left, top, right, bottom), set by the cropper
"""

import logging
from typing import Optional, Tuple

import numpy as np
import xarray as xr

from glide.contracts.base import require

__all__ = [
    "VOLUME_DIMS",
    "make_volume",
    "replace_data",
    "volume_size",
    "minmax_normalize",
    "normalize_frames",
]

logger = logging.getLogger(__name__)

VOLUME_DIMS = ("t", "y", "x")


def make_volume(data, attrs: Optional[dict] = None, name: str = "intensity") -> xr.DataArray:
    """Wrap a (t, y, x) array as a volume.

    Parameters
    ----------
    data : array_like
        Intensities, shape (frames, height, width). Converted to float64.
    attrs : dict, optional
        Stage metadata to attach.
    name : str
        DataArray name.

    Returns
    -------
    xr.DataArray
        New volume owning a float64 copy of ``data``.
    """
    values = np.array(data, dtype=np.float64, copy=True)
    require(
        values.ndim == 3,
        f"Volume contract violated: got {values.ndim} dims, expected 3 (t, y, x)"
    )
    n_t, n_y, n_x = values.shape
    return xr.DataArray(
        values,
        dims=VOLUME_DIMS,
        coords={"t": np.arange(n_t), "y": np.arange(n_y), "x": np.arange(n_x)},
        attrs=dict(attrs or {}),
        name=name,
    )


def replace_data(volume: xr.DataArray, data: np.ndarray, **attrs) -> xr.DataArray:
    """New volume with ``data``, carrying over and updating ``volume.attrs``."""
    merged = dict(volume.attrs)
    merged.update(attrs)
    return make_volume(data, attrs=merged, name=volume.name or "intensity")


def volume_size(volume: xr.DataArray) -> Tuple[int, int, int]:
    """Return (width, height, frames)."""
    return volume.sizes["x"], volume.sizes["y"], volume.sizes["t"]


def minmax_normalize(values: np.ndarray) -> np.ndarray:
    """Rescale ``values`` linearly onto [0, 1].

    A constant input has no defined range and is mapped to all zeros.
    """
    lo = float(np.min(values))
    hi = float(np.max(values))
    if hi <= lo:
        return np.zeros_like(values, dtype=np.float64)
    return (values - lo) / (hi - lo)


def normalize_frames(volume: xr.DataArray) -> xr.DataArray:
    """Min-max normalize every frame independently to [0, 1]."""
    data = volume.values
    out = np.empty_like(data)
    for t in range(data.shape[0]):
        out[t] = minmax_normalize(data[t])
    logger.debug("Normalized %d frames to [0, 1]", data.shape[0])
    return replace_data(volume, out)
