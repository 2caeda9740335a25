import numpy as np

from glide.core.volume import make_volume
from glide.imaging.line_detector import FrameMaxima


def make_channel_stack(
    n_frames=3,
    height=200,
    width=100,
    channels=(30, 70),
    top=20,
    bottom=180,
    half_width=1,
    intensity=1.0,
):
    """
    Create a stack of bright vertical channels on a black chip.

    Channels cover rows [top, bottom) and columns
    [x - half_width, x + half_width] for every x in ``channels``.
    """
    data = np.zeros((n_frames, height, width))
    for x in channels:
        data[:, top:bottom, x - half_width:x + half_width + 1] = intensity
    return data


def make_channel_volume(**kwargs):
    return make_volume(make_channel_stack(**kwargs))


def make_skewed_frame(height=100, width=120, slope=0.1, top=30):
    """
    Frame that is bright below the line ``row = top + slope * col``.
    """
    rows = np.arange(height)[:, None]
    cols = np.arange(width)[None, :]
    return (rows >= top + slope * cols).astype(np.float64)


def make_frame_maxima(frame, rows, anchor_row):
    """
    FrameMaxima from a list of per-row x positions.
    """
    return FrameMaxima(frame=frame, rows=[list(xs) for xs in rows], anchor_row=anchor_row)


def uniform_frames(n_frames, positions, height=20, anchor_row=0):
    """
    ``n_frames`` FrameMaxima with the same maxima in every row.
    """
    return [
        make_frame_maxima(t, [positions] * height, anchor_row)
        for t in range(n_frames)
    ]
