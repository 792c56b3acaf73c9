"""scan_normalizer.normalize.severity

Map scanner-reported recommendation levels onto :class:`Severity`.
"""

from __future__ import annotations

from typing import Any, Optional

from scan_normalizer.domain.finding import Severity

_LEVEL_SEVERITY = {
    "critical": Severity.HIGH,
    "warning": Severity.MEDIUM,
}


def map_recommendation_level(level: Any) -> Severity:
    """ssh-audit reports ``critical`` and ``warning`` recommendations.

    These are HIGH and MEDIUM, respectively. Matching is exact: anything else,
    including other spellings, None and non-strings, is LOW.
    """
    if not isinstance(level, str):
        return Severity.LOW
    return _LEVEL_SEVERITY.get(level, Severity.LOW)


def max_severity(a: Severity, b: Optional[Severity]) -> Severity:
    if b is None:
        return a
    return a if a.rank >= b.rank else b
