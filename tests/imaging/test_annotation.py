"""Tests for the RGB annotation buffer."""

import numpy as np
import pytest

from glide.core.growth_line import GrowthLine, LineFrame, Point
from glide.core.volume import make_volume
from glide.imaging.annotation import (
    annotate_line_centers,
    empty_annotation_buffer,
    make_annotation_buffer,
)

pytestmark = pytest.mark.unit


def test_buffer_is_rgb_uint8():
    vol = make_volume(np.linspace(0, 10, 2 * 4 * 5).reshape(2, 4, 5))
    buf = make_annotation_buffer(vol)

    assert buf.shape == (2, 4, 5, 3)
    assert buf.dtype == np.uint8
    assert buf.max() == 255
    assert buf.min() == 0
    assert np.all(buf[..., 0] == buf[..., 1])


def test_empty_buffer():
    buf = empty_annotation_buffer(make_volume(np.ones((1, 3, 3))))
    assert buf.shape == (1, 3, 3, 3)
    assert not buf.any()


def test_centers_painted_red():
    vol = make_volume(np.zeros((2, 5, 5)))
    buf = make_annotation_buffer(vol)
    gl = GrowthLine([
        LineFrame(0),
        LineFrame(1, [Point(2, 1, 1), Point(2, 3, 1)]),
    ])

    out = annotate_line_centers(buf, [gl])

    assert tuple(out[1, 1, 2]) == (255, 0, 0)
    assert tuple(out[1, 3, 2]) == (255, 0, 0)
    assert not out[0].any()
    assert not buf.any()
