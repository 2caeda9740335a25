"""Bounded-shift nearest-neighbor alignment of row maxima into growth lines.

Two levels of stitching:

1. Within a frame, the maxima of the anchor row seed one LineFrame per
   channel. Walking up and then down from the anchor, each row is aligned
   to the LineFrames by the nearest-x rule on its leftmost maximum and its
   maxima are handed out positionally from there.
2. Across frames, the frame with the most channels is the reference. Every
   other frame is shifted by the offset in ``[0, ref_count - count]`` that
   best matches its leftmost LineFrame to a reference LineFrame.

Channels are assumed to appear or vanish only at the lateral extremes of
the field of view. The assumption is not enforced; large shifts, dropped
maxima and crossed LineFrames are reported as :class:`AlignmentDiagnostic`
records.
"""

import logging
from typing import List, NamedTuple, Optional, Sequence, TYPE_CHECKING

from glide.core.growth_line import GrowthLine, LineFrame, Point

if TYPE_CHECKING:
    from glide.imaging.line_detector import FrameMaxima
    from glide.schemas import InternalConfig

__all__ = ['AlignmentDiagnostic', 'CorrespondenceBuilder', 'nearest_offset']

logger = logging.getLogger(__name__)

GAP_STOP = "stop-at-first-gap"
GAP_SKIP = "skip-gaps"


class AlignmentDiagnostic(NamedTuple):
    """One suspicious alignment decision.

    kind is ``"row-shift"`` or ``"frame-shift"`` when a matched pair differs
    in x by more than the tolerance, ``"overflow"`` when row maxima had no
    LineFrame left to go to, ``"crossing"`` when two LineFrames of a frame
    end up out of left-to-right order. For a crossing ``offset`` is the
    index of the left LineFrame of the pair.
    """
    kind: str
    frame: int
    row: Optional[int]
    offset: int
    delta_x: float
    message: str


def nearest_offset(candidates: Sequence[float], x: float) -> int:
    """Index of the candidate nearest to ``x``; the first one wins ties."""
    best = 0
    best_dist = abs(candidates[0] - x)
    for i in range(1, len(candidates)):
        dist = abs(candidates[i] - x)
        if dist < best_dist:
            best, best_dist = i, dist
    return best


class CorrespondenceBuilder:
    """Builds GrowthLines from per-frame row maxima.

    Example usage::

        builder = CorrespondenceBuilder(config)
        growth_lines = builder.build(detector.detect(volume))
        for diag in builder.diagnostics:
            print(diag.message)
    """

    def __init__(self, config: "InternalConfig"):
        self.gap_policy = config.correspondence.gap_policy
        self.tolerance = config.correspondence.alignment_tolerance
        self.diagnostics: List[AlignmentDiagnostic] = []

        logger.info("CorrespondenceBuilder initialized: gap_policy=%s, tolerance=%.1f px",
                    self.gap_policy, self.tolerance)

    def build(self, frame_maxima: Sequence["FrameMaxima"]) -> List[GrowthLine]:
        """Stitch row maxima of all frames into growth lines.

        Parameters
        ----------
        frame_maxima : sequence of FrameMaxima
            One entry per frame, in frame order.

        Returns
        -------
        list of GrowthLine
            One per channel of the reference frame, left to right. Every
            GrowthLine holds exactly one LineFrame per frame; frames in
            which the channel was not matched get an empty LineFrame.
        """
        self.diagnostics = []
        per_frame = [self.build_frame(fm) for fm in frame_maxima]
        growth_lines = self.stitch(per_frame)

        if self.diagnostics:
            logger.warning("Correspondence finished with %d alignment diagnostics",
                           len(self.diagnostics))
        logger.info("Built %d growth lines over %d frames", len(growth_lines), len(per_frame))
        return growth_lines

    # ------------------------------------------------------------------
    # Within a frame
    # ------------------------------------------------------------------

    def build_frame(self, fm: "FrameMaxima") -> List[LineFrame]:
        """LineFrames of one frame, seeded at the anchor row."""
        t = fm.frame
        anchor = fm.anchor_row
        line_frames = [LineFrame(t, [Point(x, anchor, t)]) for x in fm.rows[anchor]] if fm.rows else []
        if not line_frames:
            logger.debug("Frame %d: no maxima in anchor row", t)
            return line_frames

        self._walk(line_frames, fm, range(anchor - 1, -1, -1), upward=True)
        self._walk(line_frames, fm, range(anchor + 1, len(fm.rows)), upward=False)

        for lf in line_frames:
            lf.sort_points()
        self._check_order(line_frames, t)
        logger.debug("Frame %d: %d LineFrames", t, len(line_frames))
        return line_frames

    def _check_order(self, line_frames: List[LineFrame], t: int) -> None:
        """Report neighbouring LineFrames whose average x is not increasing."""
        for i in range(len(line_frames) - 1):
            left, right = line_frames[i].avg_x, line_frames[i + 1].avg_x
            if left < right:
                continue
            self._report(
                "crossing", t, None, i, float(left - right),
                f"Frame {t}: LineFrame {i} at x={left:.1f} is not left of "
                f"LineFrame {i + 1} at x={right:.1f}"
            )

    def _walk(self, line_frames: List[LineFrame], fm: "FrameMaxima", rows, upward: bool) -> None:
        for y in rows:
            xs = fm.rows[y]
            if not xs:
                if self.gap_policy == GAP_STOP:
                    break
                continue
            self._assign_row(line_frames, xs, y, fm.frame, upward)

    def _assign_row(self, line_frames: List[LineFrame], xs: List[int], y: int, t: int,
                    upward: bool) -> None:
        ends = [lf.first_point if upward else lf.last_point for lf in line_frames]
        ref_x = [p.x for p in ends]
        offset = nearest_offset(ref_x, xs[0])

        for k, x in enumerate(xs):
            idx = offset + k
            if idx >= len(line_frames):
                dropped = xs[k:]
                self._report(
                    "overflow", t, y, offset, 0.0,
                    f"Frame {t}, row {y}: dropped maxima {dropped}, "
                    f"only {len(line_frames)} LineFrames"
                )
                break
            delta = abs(x - ref_x[idx])
            if delta > self.tolerance:
                self._report(
                    "row-shift", t, y, offset, float(delta),
                    f"Frame {t}, row {y}: maximum at x={x} assigned to LineFrame {idx} "
                    f"ending at x={ref_x[idx]}"
                )
            line_frames[idx].add_point(Point(x, y, t))

    # ------------------------------------------------------------------
    # Across frames
    # ------------------------------------------------------------------

    def stitch(self, per_frame: Sequence[List[LineFrame]]) -> List[GrowthLine]:
        """Align per-frame LineFrames to the reference frame.

        The backward walk prepends and the forward walk appends, so every
        GrowthLine ends up in frame order.
        """
        if not per_frame:
            return []

        counts = [len(lfs) for lfs in per_frame]
        ref_t = counts.index(max(counts))
        reference = per_frame[ref_t]
        if not reference:
            logger.warning("No growth lines detected in any frame")
            return []

        growth_lines = [GrowthLine([lf]) for lf in reference]
        logger.debug("Reference frame %d with %d channels", ref_t, len(reference))

        for t in range(ref_t - 1, -1, -1):
            for gl, lf in zip(growth_lines, self._place(reference, per_frame[t], t)):
                gl.prepend(lf)
        for t in range(ref_t + 1, len(per_frame)):
            for gl, lf in zip(growth_lines, self._place(reference, per_frame[t], t)):
                gl.append(lf)
        return growth_lines

    def _place(self, reference: List[LineFrame], line_frames: List[LineFrame], t: int) -> List[LineFrame]:
        """One LineFrame per reference channel for frame ``t``, empty where unmatched."""
        placed = [LineFrame(t) for _ in reference]
        if not line_frames:
            logger.debug("Frame %d: no channels, padding with empty LineFrames", t)
            return placed

        delta = len(reference) - len(line_frames)
        ref_x = [lf.avg_x for lf in reference[:delta + 1]]
        offset = nearest_offset(ref_x, line_frames[0].avg_x)

        for k, lf in enumerate(line_frames):
            i = offset + k
            shift = abs(lf.avg_x - reference[i].avg_x)
            if shift > self.tolerance:
                self._report(
                    "frame-shift", t, None, offset, float(shift),
                    f"Frame {t}: LineFrame at x={lf.avg_x:.1f} matched to channel {i} "
                    f"at x={reference[i].avg_x:.1f}"
                )
            placed[i] = lf
        return placed

    def _report(self, kind: str, t: int, row: Optional[int], offset: int,
                delta_x: float, message: str) -> None:
        self.diagnostics.append(AlignmentDiagnostic(kind, t, row, offset, delta_x, message))
        logger.warning("Alignment diagnostic (%s): %s", kind, message)
