"""scan_normalizer.normalize.recommendations

Turn a scanner's nested recommendation block into policy-violation findings.

Input shape (ssh-audit)::

    {
      "critical": {                 # recommendation level
        "del": {                    # action
          "mac": [                  # algorithm category
            {"name": "hmac-sha1", "notes": ""},
            ...
          ]
        }
      },
      "warning": {...}
    }

One finding is emitted per (level, action, category) group that has a rule
template. Groups are handled independently: a group without a template, or
with a broken shape, is skipped and reported as a :class:`SkippedGroup`; the
remaining groups are still processed.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple

from scan_normalizer.domain.finding import Finding, Severity
from scan_normalizer.errors import (
    SKIP_EMPTY_GROUP,
    SKIP_MALFORMED,
    SKIP_NO_TEMPLATE,
    SkippedGroup,
)
from scan_normalizer.rules.table import RuleTable, RuleTemplate

from .severity import map_recommendation_level, max_severity

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReductionResult:
    findings: Tuple[Finding, ...] = ()
    skipped: Tuple[SkippedGroup, ...] = ()


def policy_violation_category(domain: str) -> str:
    return f"{domain} Policy Violation"


def _flatten_items(items: Any) -> Tuple[List[str], Dict[str, str], Optional[str]]:
    """Return (names, notes, problem) for one category's item list.

    Items are ``{"name": ..., "notes": ...}`` objects (``note`` is accepted
    too); bare non-empty strings are taken as names. ``problem`` is set on the
    first item that fits neither form.
    """
    if not isinstance(items, (list, tuple)):
        return [], {}, f"expected array of items, got {type(items).__name__}"

    names: List[str] = []
    notes: Dict[str, str] = {}
    for i, item in enumerate(items):
        if isinstance(item, str) and item.strip():
            names.append(item)
            continue
        if not isinstance(item, Mapping):
            return [], {}, f"items[{i}]: expected object, got {type(item).__name__}"
        name = item.get("name")
        if not isinstance(name, str) or not name.strip():
            return [], {}, f"items[{i}]: missing:name"
        names.append(name)
        note = item.get("notes") or item.get("note")
        if isinstance(note, str) and note.strip():
            # Repeated names keep every distinct note.
            prev = notes.get(name)
            if prev is None:
                notes[name] = note
            elif note not in prev.split("; "):
                notes[name] = f"{prev}; {note}"
    return names, notes, None


def build_policy_violation(
    template: RuleTemplate,
    *,
    domain: str,
    level: str,
    severity: Severity,
    algorithms: List[str],
    notes: Mapping[str, str],
    location: Optional[str] = None,
    identified_at: Optional[str] = None,
) -> Finding:
    """Build a fresh Finding from a template's static fields."""
    return Finding(
        name=template.name,
        description=template.description,
        category=policy_violation_category(domain),
        severity=max_severity(severity, template.severity_hint),
        identified_at=identified_at,
        location=location,
        attributes={
            "recommendation_level": level,
            "action": template.action,
            "algorithm_type": template.category,
            "notes": dict(notes),
        },
        algorithms=tuple(algorithms),
        hint=template.hint,
    )


def reduce_recommendations(
    recommendations: Mapping[str, Any],
    *,
    rules: RuleTable,
    domain: str = "SSH",
    location: Optional[str] = None,
    identified_at: Optional[str] = None,
    suppress_empty: bool = False,
) -> ReductionResult:
    """Reduce a level -> action -> category -> items structure to findings.

    Output order follows input iteration order (level, then action, then
    category). Consumers should not depend on ordering across levels.

    ``suppress_empty`` controls groups that have a template but no items:
    by default they are emitted with empty ``algorithms``; when set they are
    skipped with reason ``empty_group``.
    """
    findings: List[Finding] = []
    skipped: List[SkippedGroup] = []

    def _skip(reason: str, level: Any, action: Any = None, category: Any = None, detail: str = "") -> None:
        sg = SkippedGroup(
            reason=reason,
            level=None if level is None else str(level),
            action=None if action is None else str(action),
            category=None if category is None else str(category),
            detail=detail,
        )
        skipped.append(sg)
        where = "/".join(x for x in (sg.level, sg.action, sg.category) if x is not None)
        if reason == SKIP_MALFORMED:
            logger.warning("Skipping malformed recommendation group %s: %s", where, detail)
        else:
            logger.info("Skipping recommendation group %s (%s)", where, reason)

    for level, actions in recommendations.items():
        severity = map_recommendation_level(level)
        if not isinstance(actions, Mapping):
            _skip(SKIP_MALFORMED, level, detail=f"expected object of actions, got {type(actions).__name__}")
            continue

        for action, categories in actions.items():
            if not isinstance(categories, Mapping):
                _skip(
                    SKIP_MALFORMED,
                    level,
                    action,
                    detail=f"expected object of categories, got {type(categories).__name__}",
                )
                continue

            for category, items in categories.items():
                template = rules.lookup(action, category)
                if template is None:
                    _skip(SKIP_NO_TEMPLATE, level, action, category)
                    continue

                names, notes, problem = _flatten_items(items)
                if problem:
                    _skip(SKIP_MALFORMED, level, action, category, detail=problem)
                    continue
                if not names and suppress_empty:
                    _skip(SKIP_EMPTY_GROUP, level, action, category)
                    continue

                findings.append(
                    build_policy_violation(
                        template,
                        domain=domain,
                        level=str(level),
                        severity=severity,
                        algorithms=names,
                        notes=notes,
                        location=location,
                        identified_at=identified_at,
                    )
                )

    return ReductionResult(findings=tuple(findings), skipped=tuple(skipped))
