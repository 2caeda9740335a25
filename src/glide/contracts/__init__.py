"""Pipeline contracts: fail-fast enforcement of stage invariants.

This package enforces semantic guarantees between pipeline stages.
Contracts fail immediately and loudly when pipeline stages don't produce
their promised invariants.

Key principle:
- Pydantic validates config correctness
- Contracts validate pipeline correctness
- Algorithms handle imaging edge cases
"""

from glide.contracts.failure import ContractViolation
from glide.contracts.base import require
from glide.contracts.volume import assert_volume
from glide.contracts.detection import assert_frame_maxima
from glide.contracts.tracks import assert_growth_lines

__all__ = [
    "ContractViolation",
    "require",
    "assert_volume",
    "assert_frame_maxima",
    "assert_growth_lines",
]
