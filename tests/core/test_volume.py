"""Tests for volume helpers."""

import numpy as np
import pytest

from glide.contracts import ContractViolation
from glide.core.volume import (
    make_volume,
    minmax_normalize,
    normalize_frames,
    replace_data,
    volume_size,
)

pytestmark = pytest.mark.unit


def test_make_volume_builds_float_txy_array():
    vol = make_volume(np.ones((2, 4, 5), dtype=np.uint16))
    assert vol.dims == ("t", "y", "x")
    assert vol.dtype == np.float64
    assert volume_size(vol) == (5, 4, 2)


def test_make_volume_copies_input():
    data = np.zeros((1, 3, 3))
    vol = make_volume(data)
    data[0, 0, 0] = 7.0
    assert vol.values[0, 0, 0] == 0.0


def test_make_volume_rejects_2d():
    with pytest.raises(ContractViolation, match="expected 3"):
        make_volume(np.zeros((4, 4)))


def test_replace_data_keeps_and_updates_attrs():
    vol = make_volume(np.zeros((1, 2, 2)), attrs={"skew_slope": 0.1})
    out = replace_data(vol, np.ones((1, 2, 3)), crop_box=(0, 0, 3, 2))
    assert out.attrs == {"skew_slope": 0.1, "crop_box": (0, 0, 3, 2)}
    assert vol.attrs == {"skew_slope": 0.1}
    assert out.shape == (1, 2, 3)


def test_minmax_normalize_constant_maps_to_zero():
    out = minmax_normalize(np.full((3, 3), 4.2))
    assert np.all(out == 0.0)


def test_normalize_frames_independently():
    data = np.stack([np.arange(4.0).reshape(2, 2), 10 * np.arange(4.0).reshape(2, 2)])
    out = normalize_frames(make_volume(data))
    for t in range(2):
        assert out.values[t].min() == 0.0
        assert out.values[t].max() == 1.0
