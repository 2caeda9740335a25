"""Per-channel background removal.

Illumination across a mother-machine chip is uneven. For every detected
channel position the background of each row is estimated from two windows
of empty chip beside the channel, subtracted from the zone around the
channel, and the zone is rescaled to [0, 1].
"""

import logging
from typing import List, Optional, Sequence, Tuple, TYPE_CHECKING

import numpy as np
import xarray as xr

from glide.core.growth_line import GrowthLine
from glide.core.volume import minmax_normalize, replace_data

if TYPE_CHECKING:
    from glide.schemas import InternalConfig

__all__ = ['BackgroundNormalizer', 'background_windows', 'estimate_row_background']

logger = logging.getLogger(__name__)


def background_windows(x: int, xmin: int, xmax: int, width: int) -> List[Tuple[int, int]]:
    """Inclusive column windows left and right of ``x`` that lie inside the frame."""
    windows = []
    if x - xmax >= 0:
        windows.append((x - xmax, x - xmin))
    if x + xmax <= width - 1:
        windows.append((x + xmin, x + xmax))
    return windows


def estimate_row_background(frame: np.ndarray, windows: Sequence[Tuple[int, int]]) -> Optional[np.ndarray]:
    """Mean intensity per row over all window columns, None without windows."""
    if not windows:
        return None
    total = np.zeros(frame.shape[0], dtype=np.float64)
    n_cols = 0
    for lo, hi in windows:
        total += frame[:, lo:hi + 1].sum(axis=1)
        n_cols += hi - lo + 1
    return total / n_cols


class BackgroundNormalizer:
    """Subtracts a local row background around every channel and rescales it."""

    def __init__(self, config: "InternalConfig"):
        bg = config.background
        self.template_xmin = bg.template_xmin
        self.template_xmax = bg.template_xmax
        self.x_offset = bg.x_offset

    def normalize(self, volume: xr.DataArray, growth_lines: Sequence[GrowthLine]) -> xr.DataArray:
        """Background-correct every (growth line, frame) zone.

        Parameters
        ----------
        volume : xr.DataArray
            (t, y, x) volume the growth lines were detected on.
        growth_lines : sequence of GrowthLine
            Channel tracks; empty LineFrames are skipped.

        Returns
        -------
        xr.DataArray
            New volume. Every processed zone lies in [0, 1]; zones with no
            contrast are set to 0.
        """
        data = volume.values.copy()
        width = data.shape[2]
        n_zones = 0

        for i, gl in enumerate(growth_lines):
            for lf in gl:
                if lf.is_empty:
                    continue
                self._normalize_zone(data[lf.frame], lf.center_x, width, i)
                n_zones += 1

        logger.info("Background removed in %d channel zones", n_zones)
        return replace_data(volume, data)

    def _normalize_zone(self, frame: np.ndarray, x: int, width: int, line: int) -> None:
        windows = background_windows(x, self.template_xmin, self.template_xmax, width)
        background = estimate_row_background(frame, windows)

        lo = max(0, x - self.x_offset)
        hi = min(width - 1, x + self.x_offset)
        zone = frame[:, lo:hi + 1]
        if background is None:
            logger.debug("Growth line %d at x=%d: no background window inside frame", line, x)
        else:
            zone = np.maximum(zone - background[:, np.newaxis], 0.0)
        frame[:, lo:hi + 1] = minmax_normalize(zone)
