"""Growth line extraction stages.

Runs rectification, cropping, line detection and correspondence building,
checking the stage contracts in between.
"""

import logging
from typing import List, NamedTuple, TYPE_CHECKING

import xarray as xr

from glide.contracts import (
    ContractViolation,
    assert_volume,
    assert_frame_maxima,
    assert_growth_lines,
)
from glide.core.growth_line import GrowthLine
from glide.core.volume import volume_size
from glide.imaging.rectifier import GeometricRectifier
from glide.imaging.cropper import ROICropper
from glide.imaging.line_detector import FrameMaxima, LineDetector
from glide.imaging.correspondence import AlignmentDiagnostic, CorrespondenceBuilder

if TYPE_CHECKING:
    from glide.schemas import InternalConfig

__all__ = ['GrowthLineProcessor', 'Extraction']

logger = logging.getLogger(__name__)


class Extraction(NamedTuple):
    """Detection and correspondence output for one volume."""
    frame_maxima: List[FrameMaxima]
    growth_lines: List[GrowthLine]
    diagnostics: List[AlignmentDiagnostic]


class GrowthLineProcessor:
    """Runs the growth line extraction stages on a volume.

    Each stage returns a new volume; the input volume is never modified.
    Contract violations are logged as critical and re-raised, they point
    to a bug rather than to bad data.

    Example usage::

        processor = GrowthLineProcessor(config)
        volume = processor.prepare(raw)
        extraction = processor.extract(volume)
    """

    def __init__(self, config: "InternalConfig"):
        """Initialize processor with validated configuration.

        Parameters
        ----------
        config : InternalConfig
            Fully validated runtime configuration. ``pipeline.rectify`` and
            ``pipeline.crop`` switch the geometric stages.
        """
        self.config = config
        self.rectifier = GeometricRectifier(config)
        self.cropper = ROICropper(config)
        self.detector = LineDetector(config)
        self.builder = CorrespondenceBuilder(config)

    def prepare(self, volume: xr.DataArray) -> xr.DataArray:
        """Optional rectification followed by optional cropping."""
        try:
            assert_volume(volume, "load")
            slope = 0.0

            if self.config.pipeline.rectify:
                volume = self.rectifier.rectify(volume)
                slope = self.rectifier.slope
                assert_volume(volume, "rectify")
            else:
                logger.info("Rectification disabled")

            if self.config.pipeline.crop:
                volume = self.cropper.crop(volume, slope)
                assert_volume(volume, "crop")
            else:
                logger.info("Cropping disabled")

            return volume

        except ContractViolation as e:
            logger.critical("CRITICAL: Pipeline contract violated: %s", e)
            logger.critical("This indicates a bug in pipeline logic. Stopping pipeline.")
            raise

    def extract(self, volume: xr.DataArray) -> Extraction:
        """Detect row maxima and stitch them into growth lines."""
        try:
            width, height, n_frames = volume_size(volume)

            frame_maxima = self.detector.detect(volume)
            assert_frame_maxima(frame_maxima, n_frames, height, width)

            growth_lines = self.builder.build(frame_maxima)
            assert_growth_lines(growth_lines, n_frames)

            logger.info("Extracted %d growth lines", len(growth_lines))
            return Extraction(frame_maxima, growth_lines, list(self.builder.diagnostics))

        except ContractViolation as e:
            logger.critical("CRITICAL: Pipeline contract violated: %s", e)
            logger.critical("This indicates a bug in pipeline logic. Stopping pipeline.")
            raise
