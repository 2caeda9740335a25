"""Growth line contract.

Enforces the guarantee that after correspondence building every growth
line carries exactly one LineFrame per frame, in frame order, with its
points sorted by y.
"""

from glide.contracts.base import require


def assert_growth_lines(growth_lines, n_frames: int) -> None:
    """Enforce growth line contract.

    Called after CorrespondenceBuilder.build(). We do NOT validate that the
    tracks follow the right channels or keep their left-to-right order -
    crossings come from the data and are reported through the builder's
    diagnostics. We only check structure.

    Parameters
    ----------
    growth_lines : list of GrowthLine
        Output from CorrespondenceBuilder.build()

    n_frames : int
        Number of processed frames.

    Raises
    ------
    ContractViolation
        If structural requirements are violated
    """
    for i, gl in enumerate(growth_lines):
        require(
            len(gl) == n_frames,
            f"Growth line contract violated: line {i} has {len(gl)} frames, expected {n_frames}"
        )
        for t, lf in enumerate(gl):
            require(
                lf.frame == t,
                f"Growth line contract violated: line {i} position {t} holds frame {lf.frame}"
            )
            ys = [p.y for p in lf.points]
            require(
                ys == sorted(ys),
                f"Growth line contract violated: line {i}, frame {t} points not sorted by y"
            )
