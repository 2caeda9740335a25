"""Tests for per-channel background removal."""

import numpy as np
import pytest

from glide.core.growth_line import GrowthLine, LineFrame, Point
from glide.core.volume import make_volume
from glide.imaging.background import (
    BackgroundNormalizer,
    background_windows,
    estimate_row_background,
)

pytestmark = pytest.mark.unit


def _line_at(x, frame=0, height=30):
    return GrowthLine([LineFrame(frame, [Point(x, y, frame) for y in range(height)])])


def _uneven_frame(height=30, width=200, channel_x=100):
    ys, xs = np.mgrid[0:height, 0:width]
    frame = 0.2 + 0.002 * xs + 0.01 * ys
    frame += 0.8 * np.exp(-((xs - channel_x) ** 2) / (2 * 3.0 ** 2))
    return frame


def test_windows_inside_frame():
    assert background_windows(100, 20, 35, 200) == [(65, 80), (120, 135)]


def test_windows_outside_frame_are_dropped():
    assert background_windows(30, 20, 35, 200) == [(50, 65)]
    assert background_windows(20, 20, 35, 40) == []


def test_row_background_is_mean_over_window_columns():
    frame = np.tile(np.arange(10.0), (3, 1))
    est = estimate_row_background(frame, [(0, 1), (8, 9)])
    np.testing.assert_allclose(est, [4.5, 4.5, 4.5])
    assert estimate_row_background(frame, []) is None


def test_zone_is_rescaled_to_unit_range(internal_config):
    vol = make_volume(_uneven_frame()[np.newaxis])

    out = BackgroundNormalizer(internal_config).normalize(vol, [_line_at(100)])

    zone = out.values[0, :, 65:136]
    assert zone.min() == pytest.approx(0.0)
    assert zone.max() == pytest.approx(1.0)
    assert np.argmax(zone[10]) == 35


def test_outside_zone_untouched_and_input_preserved(internal_config):
    vol = make_volume(_uneven_frame()[np.newaxis])
    before = vol.values.copy()

    out = BackgroundNormalizer(internal_config).normalize(vol, [_line_at(100)])

    np.testing.assert_array_equal(out.values[0, :, :65], before[0, :, :65])
    np.testing.assert_array_equal(out.values[0, :, 136:], before[0, :, 136:])
    np.testing.assert_array_equal(vol.values, before)


def test_no_window_still_normalizes(make_config):
    config = make_config(BGREM_X_OFFSET=5)
    frame = np.zeros((4, 40))
    frame[:, 20] = 3.0
    frame[:, 18] = 1.0
    vol = make_volume(frame[np.newaxis])

    out = BackgroundNormalizer(config).normalize(vol, [_line_at(20, height=4)])

    np.testing.assert_allclose(out.values[0, 0, 15:26],
                               [0, 0, 0, 1 / 3, 0, 1, 0, 0, 0, 0, 0])


def test_flat_zone_maps_to_zero(internal_config):
    vol = make_volume(np.full((1, 10, 200), 0.7))
    out = BackgroundNormalizer(internal_config).normalize(vol, [_line_at(100, height=10)])
    assert np.all(out.values[0, :, 65:136] == 0.0)


def test_empty_line_frames_are_skipped(internal_config):
    vol = make_volume(_uneven_frame()[np.newaxis])
    out = BackgroundNormalizer(internal_config).normalize(vol, [GrowthLine([LineFrame(0)])])
    np.testing.assert_array_equal(out.values, vol.values)
