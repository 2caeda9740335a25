"""Line detection contract.

Enforces the guarantee that after line detection there is exactly one
maxima record per frame, each row's maxima are strictly increasing in x,
and the anchor row points into the frame.
"""

from glide.contracts.base import require


def assert_frame_maxima(frame_maxima, n_frames: int, height: int, width: int) -> None:
    """Enforce line detection contract.

    Parameters
    ----------
    frame_maxima : list of FrameMaxima
        Output from LineDetector.detect()

    n_frames, height, width : int
        Size of the volume the maxima were detected on.

    Raises
    ------
    ContractViolation
        If structural requirements are violated
    """
    require(
        len(frame_maxima) == n_frames,
        f"Detection contract violated: got {len(frame_maxima)} frames, expected {n_frames}"
    )

    for t, fm in enumerate(frame_maxima):
        require(
            fm.frame == t,
            f"Detection contract violated: entry {t} belongs to frame {fm.frame}"
        )
        require(
            len(fm.rows) == height,
            f"Detection contract violated: frame {t} has {len(fm.rows)} rows, expected {height}"
        )
        require(
            0 <= fm.anchor_row < height,
            f"Detection contract violated: anchor row {fm.anchor_row} outside [0, {height})"
        )
        for y, xs in enumerate(fm.rows):
            require(
                all(a < b for a, b in zip(xs, xs[1:])),
                f"Detection contract violated: maxima in frame {t}, row {y} are not increasing"
            )
            require(
                all(0 <= x < width for x in xs),
                f"Detection contract violated: maxima in frame {t}, row {y} outside [0, {width})"
            )
