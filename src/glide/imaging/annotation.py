"""Annotation buffer.

An RGB copy of the raw volume in which detected centerline points are
painted, for visual inspection by whoever consumes the pipeline result.
"""

import logging
from typing import Sequence, Tuple

import numpy as np
import xarray as xr
from skimage import color, draw, util

from glide.core.growth_line import GrowthLine
from glide.core.volume import minmax_normalize

__all__ = ['make_annotation_buffer', 'empty_annotation_buffer', 'annotate_line_centers']

logger = logging.getLogger(__name__)

RED = (255, 0, 0)


def make_annotation_buffer(volume: xr.DataArray) -> np.ndarray:
    """RGB uint8 copy of ``volume``, shape (t, y, x, 3), rescaled over the whole volume."""
    gray = util.img_as_ubyte(minmax_normalize(volume.values))
    return color.gray2rgb(gray)


def empty_annotation_buffer(volume: xr.DataArray) -> np.ndarray:
    """All-black RGB buffer matching ``volume``."""
    return np.zeros(volume.shape + (3,), dtype=np.uint8)


def annotate_line_centers(buffer: np.ndarray, growth_lines: Sequence[GrowthLine],
                          rgb: Tuple[int, int, int] = RED) -> np.ndarray:
    """Copy of ``buffer`` with every growth line point painted in ``rgb``."""
    out = buffer.copy()
    n_points = 0
    for gl in growth_lines:
        for lf in gl:
            if lf.is_empty:
                continue
            rr = np.array([p.y for p in lf.points])
            cc = np.array([p.x for p in lf.points])
            draw.set_color(out[lf.frame], (rr, cc), rgb)
            n_points += len(rr)
    logger.debug("Annotated %d centerline points", n_points)
    return out
