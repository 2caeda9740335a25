"""Tests for within-frame and cross-frame growth line stitching."""

import logging

import pytest

from glide.contracts import assert_growth_lines
from glide.imaging.correspondence import CorrespondenceBuilder, nearest_offset
from tests.helpers.synthetic import make_frame_maxima, uniform_frames

pytestmark = pytest.mark.unit


def test_nearest_offset_first_wins_ties():
    assert nearest_offset([10, 50, 90], 30) == 0
    assert nearest_offset([10, 50, 90], 85) == 2


class TestStitching:

    def test_stable_channels(self, internal_config):
        builder = CorrespondenceBuilder(internal_config)
        lines = builder.build(uniform_frames(10, [10, 50, 90]))

        assert len(lines) == 3
        for gl, x in zip(lines, (10, 50, 90)):
            assert len(gl) == 10
            assert [lf.frame for lf in gl] == list(range(10))
            assert all(lf.avg_x == x for lf in gl)
            assert all(len(lf) == 20 for lf in gl)
        assert builder.diagnostics == []

    def test_channel_appearing_on_the_right(self, internal_config):
        frames = uniform_frames(10, [10, 50, 90])
        frames[5:] = uniform_frames(10, [10, 50, 90, 130])[5:]

        lines = CorrespondenceBuilder(internal_config).build(frames)

        assert len(lines) == 4
        assert all(len(gl) == 10 for gl in lines)
        assert lines[3].detected_frames == [5, 6, 7, 8, 9]
        assert all(lines[3][t].is_empty for t in range(5))
        for i, x in enumerate((10, 50, 90)):
            assert all(lf.avg_x == x for lf in lines[i])

    def test_channel_lost_on_the_left(self, internal_config):
        frames = uniform_frames(4, [10, 50, 90])
        frames[0] = uniform_frames(1, [50, 90])[0]

        lines = CorrespondenceBuilder(internal_config).build(frames)

        assert len(lines) == 3
        assert lines[0][0].is_empty
        assert lines[1][0].avg_x == 50
        assert lines[2][0].avg_x == 90

    def test_frame_without_channels_gets_empty_line_frames(self, internal_config):
        frames = uniform_frames(3, [10, 50])
        frames[1] = make_frame_maxima(1, [[] for _ in range(20)], anchor_row=0)

        lines = CorrespondenceBuilder(internal_config).build(frames)

        assert len(lines) == 2
        assert lines[0][1].is_empty and lines[1][1].is_empty
        assert lines[0].detected_frames == [0, 2]

    def test_no_channels_anywhere(self, internal_config, caplog):
        frames = [make_frame_maxima(t, [[], []], anchor_row=0) for t in range(3)]
        with caplog.at_level(logging.WARNING):
            lines = CorrespondenceBuilder(internal_config).build(frames)
        assert lines == []
        assert "No growth lines" in caplog.text

    def test_no_frames(self, internal_config):
        assert CorrespondenceBuilder(internal_config).build([]) == []

    def test_large_frame_shift_is_reported(self, internal_config, caplog):
        frames = [
            make_frame_maxima(0, [[10, 50, 90]], anchor_row=0),
            make_frame_maxima(1, [[30]], anchor_row=0),
        ]
        builder = CorrespondenceBuilder(internal_config)
        with caplog.at_level(logging.WARNING):
            lines = builder.build(frames)

        assert lines[0][1].avg_x == 30
        assert lines[1][1].is_empty
        kinds = [d.kind for d in builder.diagnostics]
        assert kinds == ["frame-shift"]
        assert builder.diagnostics[0].delta_x == pytest.approx(20.0)
        assert "Alignment diagnostic" in caplog.text


class TestWithinFrame:

    def test_points_sorted_by_y(self, internal_config):
        rows = [[12, 52]] * 3 + [[10, 50]] + [[11, 51]] * 3
        fm = make_frame_maxima(0, rows, anchor_row=3)

        line_frames = CorrespondenceBuilder(internal_config).build_frame(fm)

        assert len(line_frames) == 2
        assert [p.y for p in line_frames[0].points] == list(range(7))
        assert [p.x for p in line_frames[1].points] == [52, 52, 52, 50, 51, 51, 51]

    def test_row_with_fewer_maxima_aligns_to_nearest(self, internal_config):
        rows = [[10, 50, 90], [50, 90], [51]]
        fm = make_frame_maxima(0, rows, anchor_row=0)

        lfs = CorrespondenceBuilder(internal_config).build_frame(fm)

        assert [len(lf) for lf in lfs] == [1, 3, 2]
        assert [p.x for p in lfs[1].points] == [50, 50, 51]

    def _gapped_rows(self):
        rows = [[10, 50]] * 10
        rows[3] = []
        return rows

    def test_stop_at_first_gap(self, make_config):
        config = make_config(GAP_POLICY="stop-at-first-gap")
        fm = make_frame_maxima(0, self._gapped_rows(), anchor_row=5)

        lfs = CorrespondenceBuilder(config).build_frame(fm)

        assert [p.y for p in lfs[0].points] == [4, 5, 6, 7, 8, 9]

    def test_skip_gaps(self, make_config):
        config = make_config(GAP_POLICY="skip-gaps")
        fm = make_frame_maxima(0, self._gapped_rows(), anchor_row=5)

        lfs = CorrespondenceBuilder(config).build_frame(fm)

        assert [p.y for p in lfs[0].points] == [0, 1, 2, 4, 5, 6, 7, 8, 9]

    def test_overflow_is_dropped_and_reported(self, internal_config):
        fm = make_frame_maxima(0, [[10, 50], [50, 90, 130]], anchor_row=0)
        builder = CorrespondenceBuilder(internal_config)
        builder.diagnostics = []

        lfs = builder.build_frame(fm)

        assert [p.x for p in lfs[0].points] == [10]
        assert [p.x for p in lfs[1].points] == [50, 50]
        assert [d.kind for d in builder.diagnostics] == ["overflow"]
        assert builder.diagnostics[0].row == 1

    def test_row_shift_beyond_tolerance_is_reported(self, make_config):
        config = make_config(correspondence={"alignment_tolerance": 2.0})
        fm = make_frame_maxima(0, [[10, 50], [15, 50]], anchor_row=0)
        builder = CorrespondenceBuilder(config)

        builder.build_frame(fm)

        assert len(builder.diagnostics) == 1
        diag = builder.diagnostics[0]
        assert diag.kind == "row-shift"
        assert diag.delta_x == pytest.approx(5.0)

    def test_crossed_line_frames_are_reported(self, internal_config, caplog):
        # left channel drifts right above the anchor, right one drifts left below
        rows = [[28]] * 27 + [[27], [24], [19], [10, 30]] + [[21]] * 29
        frames = [make_frame_maxima(0, rows, anchor_row=30)]
        builder = CorrespondenceBuilder(internal_config)

        with caplog.at_level(logging.WARNING):
            lines = builder.build(frames)

        assert lines[0][0].avg_x == pytest.approx(836 / 31)
        assert lines[1][0].avg_x == pytest.approx(21.3)
        assert [d.kind for d in builder.diagnostics] == ["crossing"]
        diag = builder.diagnostics[0]
        assert diag.frame == 0
        assert diag.offset == 0
        assert diag.delta_x == pytest.approx(836 / 31 - 21.3)
        assert "crossing" in caplog.text
        assert_growth_lines(lines, n_frames=1)
