"""Volume contract.

Enforces the guarantee that every stage hands on a well-formed (t, y, x)
volume of finite float intensities.
"""

import numpy as np
import xarray as xr
from glide.contracts.base import require


def assert_volume(volume: xr.DataArray, stage: str = "volume") -> None:
    """Enforce the volume contract after ``stage``.

    Parameters
    ----------
    volume : xr.DataArray
        Output of a volume-producing stage.

    stage : str
        Stage name used in the error message.

    Raises
    ------
    ContractViolation
        If any invariant is violated
    """
    require(
        isinstance(volume, xr.DataArray),
        f"{stage} contract violated: output is {type(volume)}, expected DataArray"
    )
    require(
        volume.ndim == 3,
        f"{stage} contract violated: volume has {volume.ndim} dims, expected 3"
    )
    require(
        tuple(volume.dims) == ("t", "y", "x"),
        f"{stage} contract violated: dims are {tuple(volume.dims)}, expected ('t', 'y', 'x')"
    )
    require(
        all(n > 0 for n in volume.shape),
        f"{stage} contract violated: empty volume of shape {volume.shape}"
    )
    require(
        volume.dtype.kind == "f",
        f"{stage} contract violated: dtype is {volume.dtype}, expected float"
    )
    require(
        bool(np.isfinite(volume.values).all()),
        f"{stage} contract violated: volume contains NaN or inf"
    )
