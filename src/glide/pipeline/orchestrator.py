"""Pipeline orchestration.

Loads the volume, runs the growth line extraction, prepares the working
and annotation volumes, and hands the growth lines to the segmentation and
tracking collaborators.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple, TYPE_CHECKING

import numpy as np
import pandas as pd
import xarray as xr

from glide.contracts import assert_volume
from glide.core.growth_line import GrowthLine
from glide.core.volume import normalize_frames, replace_data
from glide.imaging.annotation import (
    annotate_line_centers,
    empty_annotation_buffer,
    make_annotation_buffer,
)
from glide.imaging.background import BackgroundNormalizer
from glide.imaging.correspondence import AlignmentDiagnostic
from glide.imaging.line_detector import FrameMaxima, blur_volume
from glide.pipeline.collaborators import GrowthLineTracker, HypothesisGenerator, VolumeSource
from glide.pipeline.processor import GrowthLineProcessor

if TYPE_CHECKING:
    from glide.schemas import InternalConfig

__all__ = ['PipelineOrchestrator', 'PipelineResult', 'summarize_tracks']

logger = logging.getLogger(__name__)

PRESEGMENTATION_MIN_SIGMA = 1e-6


@dataclass
class PipelineResult:
    """Everything the pipeline produced for one volume.

    ``raw`` is the rectified, cropped (and optionally background corrected)
    volume, ``working`` its normalized copy that the collaborators saw and
    ``annotated`` the RGB buffer with detected centers painted red.
    ``hypotheses`` is keyed by (growth line index, frame).
    """
    raw: xr.DataArray
    working: xr.DataArray
    annotated: np.ndarray
    growth_lines: List[GrowthLine]
    frame_maxima: List[FrameMaxima]
    diagnostics: List[AlignmentDiagnostic]
    summary: pd.DataFrame
    hypotheses: Dict[Tuple[int, int], Any] = field(default_factory=dict)
    labelings: List[Any] = field(default_factory=list)
    primary_labeling: Any = None


def summarize_tracks(growth_lines: Sequence[GrowthLine]) -> pd.DataFrame:
    """One row per (growth line, frame) with point count and position."""
    records = []
    for i, gl in enumerate(growth_lines):
        for lf in gl:
            first, last = lf.first_point, lf.last_point
            records.append({
                "line": i,
                "frame": lf.frame,
                "n_points": len(lf),
                "avg_x": lf.avg_x if lf.avg_x is not None else np.nan,
                "top_y": first.y if first is not None else np.nan,
                "bottom_y": last.y if last is not None else np.nan,
                "detected": not lf.is_empty,
            })
    columns = ["line", "frame", "n_points", "avg_x", "top_y", "bottom_y", "detected"]
    return pd.DataFrame.from_records(records, columns=columns)


class PipelineOrchestrator:
    """Runs the growth line pipeline for one volume.

    **Sequence:**

    1. Validate preconditions and set up logging.
    2. Load the volume from the input source.
    3. Rectify and crop (each switchable).
    4. Copy into a working volume and an RGB annotation buffer.
    5. Detect growth lines and paint their centers into the buffer.
    6. Optionally subtract the per-channel background from the raw volume;
       the working volume is reset to the corrected raw volume.
    7. Normalize every working frame to [0, 1].
    8. Blur the working volume when pre-segmentation sigmas are set.
    9. Segmentation collaborator once per LineFrame.
    10. Tracking collaborator: one model per growth line plus a primary
        model for the first growth line, then solve them in that order.

    Collaborators that are not supplied are skipped.

    Example usage::

        orch = PipelineOrchestrator(config, segmenter=MySegmenter(), tracker=MyTracker())
        result = orch.run()
        print(result.summary)
    """

    def __init__(self, config: "InternalConfig",
                 source: Optional[VolumeSource] = None,
                 segmenter: Optional[HypothesisGenerator] = None,
                 tracker: Optional[GrowthLineTracker] = None):
        """Initialize orchestrator.

        Parameters
        ----------
        config : InternalConfig
            Fully validated runtime configuration.

        source : VolumeSource, optional
            Input volume provider. Defaults to a TiffSequenceLoader over
            ``config.input.input_dir`` and ``config.input.file_filter``.

        segmenter : HypothesisGenerator, optional
            Segmentation collaborator.

        tracker : GrowthLineTracker, optional
            Tracking collaborator.
        """
        self.config = config
        self.source = source
        self.segmenter = segmenter
        self.tracker = tracker
        self.processor = GrowthLineProcessor(config)
        self.background = BackgroundNormalizer(config)
        self.log_path: Optional[Path] = None

    def _validate(self):
        """Fail before any work when the input cannot be resolved."""
        if self.source is None and self.config.input.input_dir is None:
            raise ValueError("No input source given and input.input_dir is not set")

    def _setup_logging(self):
        """Configure the root logger with file and console handlers.

        The log file goes to ``<output.base_dir>/logs/glide_<run_name>.log``;
        without a base directory only the console handler is installed.
        """
        log_level = getattr(logging, self.config.logging.level.upper(), logging.INFO)

        formatter = logging.Formatter(
            fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        # Clear existing handlers and add new ones
        root = logging.getLogger()
        root.setLevel(log_level)
        for handler in root.handlers[:]:
            root.removeHandler(handler)

        if self.config.output.base_dir is not None:
            log_dir = Path(self.config.output.base_dir) / "logs"
            log_dir.mkdir(parents=True, exist_ok=True)
            self.log_path = log_dir / f"glide_{self.config.output.run_name}.log"

            fh = logging.FileHandler(self.log_path)
            fh.setLevel(log_level)
            fh.setFormatter(formatter)
            root.addHandler(fh)

        ch = logging.StreamHandler()
        ch.setLevel(log_level)
        ch.setFormatter(formatter)
        root.addHandler(ch)

        logger.info("Logging: level=%s, file=%s", logging.getLevelName(log_level), self.log_path)

    def _load(self) -> xr.DataArray:
        if self.source is None:
            from glide.imaging.loader import TiffSequenceLoader
            self.source = TiffSequenceLoader.from_config(self.config)
        volume = self.source.load()
        assert_volume(volume, "load")
        return volume

    def _annotation_buffer(self, volume: xr.DataArray) -> np.ndarray:
        try:
            return make_annotation_buffer(volume)
        except (ValueError, TypeError):
            logger.exception("Could not build annotation buffer, continuing with a blank one")
            return empty_annotation_buffer(volume)

    def run(self, setup_logging: bool = True) -> PipelineResult:
        """Run the whole pipeline once.

        Parameters
        ----------
        setup_logging : bool, optional
            Install the file and console log handlers (default True).
            Embedding applications that configure logging themselves pass
            False.

        Returns
        -------
        PipelineResult

        Raises
        ------
        ValueError
            If there is no way to obtain an input volume.
        ContractViolation
            If a stage broke its output guarantees.
        """
        self._validate()
        if setup_logging:
            self._setup_logging()

        logger.info("=" * 60)
        logger.info("Starting growth line pipeline: %s", self.config.output.run_name)
        logger.info("=" * 60)

        raw = self.processor.prepare(self._load())

        working = replace_data(raw, raw.values)
        annotated = self._annotation_buffer(raw)

        extraction = self.processor.extract(working)
        growth_lines = extraction.growth_lines
        annotated = annotate_line_centers(annotated, growth_lines)

        if self.config.pipeline.subtract_background:
            raw = self.background.normalize(raw, growth_lines)
            working = replace_data(raw, raw.values)

        if self.config.pipeline.normalize_frames:
            working = normalize_frames(working)

        seg = self.config.segmentation
        if seg.sigma_x + seg.sigma_y > PRESEGMENTATION_MIN_SIGMA:
            logger.info("Pre-segmentation blur: sigma=(%.2f, %.2f)", seg.sigma_x, seg.sigma_y)
            working = blur_volume(working, seg.sigma_x, seg.sigma_y)

        result = PipelineResult(
            raw=raw,
            working=working,
            annotated=annotated,
            growth_lines=growth_lines,
            frame_maxima=extraction.frame_maxima,
            diagnostics=extraction.diagnostics,
            summary=summarize_tracks(growth_lines),
        )

        self._generate_hypotheses(result)
        self._track(result)

        logger.info("=" * 60)
        logger.info("Pipeline finished: %d growth lines, %d frames, %d diagnostics",
                    len(growth_lines), working.sizes["t"], len(result.diagnostics))
        logger.info("=" * 60)
        return result

    def _generate_hypotheses(self, result: PipelineResult):
        if self.segmenter is None:
            logger.info("No segmentation collaborator, skipping hypothesis generation")
            return
        for i, gl in enumerate(result.growth_lines):
            for lf in gl:
                result.hypotheses[(i, lf.frame)] = self.segmenter.generate_hypotheses(lf, result.working)
        logger.info("Generated hypotheses for %d LineFrames", len(result.hypotheses))

    def _track(self, result: PipelineResult):
        if self.tracker is None:
            logger.info("No tracking collaborator, skipping model building")
            return
        if not result.growth_lines:
            logger.info("No growth lines to track")
            return

        models = [self.tracker.build_model(gl) for gl in result.growth_lines]
        primary = self.tracker.build_model(result.growth_lines[0])

        result.labelings = [self.tracker.solve(m) for m in models]
        result.primary_labeling = self.tracker.solve(primary)
        logger.info("Solved %d tracking models plus the primary model", len(models))
