"""scan_normalizer.normalize

Scanner-agnostic normalization helpers: severity mapping and the
recommendation reducer.

Design constraints
------------------
* Pure functions only (no IO).
* Group-level problems degrade to diagnostics; they never raise.
"""

from __future__ import annotations

from .recommendations import (
    ReductionResult,
    build_policy_violation,
    policy_violation_category,
    reduce_recommendations,
)
from .severity import map_recommendation_level, max_severity

__all__ = [
    "ReductionResult",
    "build_policy_violation",
    "map_recommendation_level",
    "max_severity",
    "policy_violation_category",
    "reduce_recommendations",
]
