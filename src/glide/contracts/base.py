"""Base contract enforcement utilities.

The require() function is the single enforcement mechanism for all contracts.
"""

from glide.contracts.failure import ContractViolation


def require(condition: bool, message: str) -> None:
    """Enforce a pipeline contract.

    Called at stage boundaries to verify the preceding stage produced the
    guaranteed invariants. It is fail-fast: no recovery, no fallback.

    Parameters
    ----------
    condition : bool
        The invariant that must be true. If False, ContractViolation is raised.

    message : str
        Error message explaining the contract violation.

    Raises
    ------
    ContractViolation
        If condition is False.

    Examples
    --------
    >>> require(volume.ndim == 3, "Volume contract: expected (t, y, x)")
    >>> require(len(frame_maxima) == n_frames, "Detection contract: one entry per frame")
    """
    if not condition:
        raise ContractViolation(message)
