"""Interfaces of the external collaborators.

The pipeline only extracts growth lines. Where the data comes from, how
cells are segmented inside a growth line, and how the tracking model is
built and solved are supplied from outside through these interfaces.
"""

from abc import ABC, abstractmethod
from typing import Any

import xarray as xr

from glide.core.growth_line import GrowthLine, LineFrame

__all__ = ['VolumeSource', 'HypothesisGenerator', 'GrowthLineTracker']


class VolumeSource(ABC):
    """Provides the raw (t, y, x) volume."""

    @abstractmethod
    def load(self) -> xr.DataArray:
        """Return a new volume; the caller owns it."""


class HypothesisGenerator(ABC):
    """Segmentation collaborator.

    Called once per LineFrame with the normalized working volume. The
    result is opaque to the pipeline and returned to the caller as is.
    """

    @abstractmethod
    def generate_hypotheses(self, line_frame: LineFrame, volume: xr.DataArray) -> Any:
        """Segmentation hypotheses for one growth line in one frame."""


class GrowthLineTracker(ABC):
    """Tracking collaborator that builds and solves one model per growth line."""

    @abstractmethod
    def build_model(self, growth_line: GrowthLine) -> Any:
        """Build the tracking model for ``growth_line``."""

    @abstractmethod
    def solve(self, model: Any) -> Any:
        """Solve ``model`` and return its optimal labeling."""
