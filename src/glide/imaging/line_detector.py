"""Growth line detection.

Blurs every frame anisotropically and collects, per image row, the local
intensity maxima along x. Channels are bright vertical stripes, so after a
wide horizontal blur each channel leaves one maximum per row near its
centerline.
"""

import logging
from typing import List, NamedTuple, TYPE_CHECKING

import numpy as np
import xarray as xr
from scipy import ndimage

from glide.core.volume import replace_data

if TYPE_CHECKING:
    from glide.schemas import InternalConfig

__all__ = ['FrameMaxima', 'LineDetector', 'find_local_maxima', 'blur_frame', 'blur_volume']

logger = logging.getLogger(__name__)

BLUR_ERRORS = (ValueError, RuntimeError, FloatingPointError)


class FrameMaxima(NamedTuple):
    """Row maxima of one frame.

    ``rows[y]`` lists the x positions of the maxima in row y, left to right.
    ``anchor_row`` is the row holding the most maxima.
    """
    frame: int
    rows: List[List[int]]
    anchor_row: int

    @property
    def channel_count(self) -> int:
        return len(self.rows[self.anchor_row]) if self.rows else 0


def find_local_maxima(row, plateau_rule: str = "strict") -> List[int]:
    """Indices of local maxima in a 1-D profile.

    Parameters
    ----------
    row : array_like
        Intensity profile.
    plateau_rule : {"strict", "center"}
        ``"strict"`` accepts only samples strictly greater than both
        neighbors. ``"center"`` additionally accepts the center sample of a
        flat run that is strictly higher than the samples bordering it.

    Returns
    -------
    list of int
        Increasing indices. The first and last sample are never maxima.

    Examples
    --------
    >>> find_local_maxima([0, 0, 1, 0, 0, 0, 2, 0, 0])
    [2, 6]
    """
    values = np.asarray(row, dtype=np.float64)
    n = values.size
    if n < 3:
        return []

    if plateau_rule == "strict":
        inner = values[1:-1]
        mask = (inner > values[:-2]) & (inner > values[2:])
        return [int(i) + 1 for i in np.flatnonzero(mask)]

    if plateau_rule != "center":
        raise ValueError(f"Unknown plateau rule: {plateau_rule}")

    maxima = []
    i = 1
    while i < n - 1:
        j = i
        while j + 1 < n and values[j + 1] == values[i]:
            j += 1
        # run [i, j] must be bordered on both sides and higher than both borders
        if j < n - 1 and values[i - 1] < values[i] and values[j + 1] < values[i]:
            maxima.append((i + j) // 2)
        i = j + 1
    return maxima


def blur_frame(frame: np.ndarray, sigma_x: float, sigma_y: float) -> np.ndarray:
    """Anisotropic Gaussian blur of one (y, x) frame with mirrored borders."""
    return ndimage.gaussian_filter(frame, sigma=(sigma_y, sigma_x), mode="reflect")


def blur_volume(volume: xr.DataArray, sigma_x: float, sigma_y: float) -> xr.DataArray:
    """Blur every frame of ``volume``; frames that fail to blur are kept as is."""
    data = volume.values
    out = np.empty_like(data)
    for t in range(data.shape[0]):
        try:
            out[t] = blur_frame(data[t], sigma_x, sigma_y)
        except BLUR_ERRORS as e:
            logger.warning("Blur failed on frame %d, keeping unblurred data: %s", t, e)
            out[t] = data[t]
    return replace_data(volume, out)


class LineDetector:
    """Config-driven per-row maxima detection."""

    def __init__(self, config: "InternalConfig"):
        """Store detection settings.

        Parameters
        ----------
        config : InternalConfig
            Uses the ``detection`` section: blur sigmas, lateral/top/bottom
            offsets and the plateau rule.
        """
        det = config.detection
        self.sigma_x = det.sigma_x
        self.sigma_y = det.sigma_y
        self.offset_lateral = det.offset_lateral
        self.offset_top = det.offset_top
        self.offset_bottom = det.offset_bottom
        self.plateau_rule = det.plateau_rule

        logger.info("LineDetector initialized: sigma=(%.1f, %.1f), offsets lateral=%d top=%d bottom=%d",
                    self.sigma_x, self.sigma_y, self.offset_lateral,
                    self.offset_top, self.offset_bottom)

    def detect(self, volume: xr.DataArray) -> List[FrameMaxima]:
        """Detect row maxima in every frame of ``volume``."""
        data = volume.values
        results = []
        for t in range(data.shape[0]):
            frame = self._blur(data[t], t)
            results.append(self.detect_frame(frame, t))
        return results

    def detect_frame(self, frame: np.ndarray, t: int) -> FrameMaxima:
        """Maxima of an already blurred frame, filtered by the configured offsets."""
        height, width = frame.shape
        first_row = self.offset_top
        last_row = height - 1 - self.offset_bottom

        rows = []
        for y in range(height):
            if y < first_row or y > last_row:
                rows.append([])
                continue
            xs = find_local_maxima(frame[y], self.plateau_rule)
            rows.append([x for x in xs
                         if self.offset_lateral <= x <= width - self.offset_lateral])

        counts = [len(xs) for xs in rows]
        anchor = int(np.argmax(counts)) if any(counts) else 0
        logger.debug("Frame %d: anchor row %d with %d maxima", t, anchor, counts[anchor] if counts else 0)
        return FrameMaxima(frame=t, rows=rows, anchor_row=anchor)

    def _blur(self, frame: np.ndarray, t: int) -> np.ndarray:
        try:
            return blur_frame(frame, self.sigma_x, self.sigma_y)
        except BLUR_ERRORS as e:
            logger.warning("Gaussian blur failed on frame %d, detecting on raw data: %s", t, e)
            return frame
