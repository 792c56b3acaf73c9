"""scan_normalizer.errors

Error taxonomy for the normalization core.

Two very different kinds of problems exist:

* ``ValidationError``: the scanner report is unusable at the top level (no
  target, wrong container types). This is fatal to one ``normalize`` call and
  nothing is emitted.
* ``SkippedGroup``: one recommendation group could not be turned into a
  finding. This is *not* an exception; it is a diagnostic record collected
  next to the findings so the caller can see every skip.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


class ValidationError(ValueError):
    """Raised when a scanner report fails top-level validation.

    ``problem`` uses the same short vocabulary as
    :meth:`scan_normalizer.domain.finding.Finding.validate_dict`
    (``missing:<field>``, ``invalid:<field>``, ``not_a_mapping``).
    """

    def __init__(self, problem: str, *, field: Optional[str] = None, detail: str = "") -> None:
        self.problem = problem
        self.field = field
        self.detail = detail
        msg = f"invalid scanner report: {problem}"
        if detail:
            msg += f" ({detail})"
        super().__init__(msg)


# Reasons a recommendation group can be skipped.
SKIP_NO_TEMPLATE = "no_template"
SKIP_MALFORMED = "malformed"
SKIP_EMPTY_GROUP = "empty_group"


@dataclass(frozen=True)
class SkippedGroup:
    """Diagnostic for one recommendation group excluded from the output."""

    reason: str
    level: Optional[str] = None
    action: Optional[str] = None
    category: Optional[str] = None
    detail: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "reason": self.reason,
            "level": self.level,
            "action": self.action,
            "category": self.category,
            "detail": self.detail,
        }
