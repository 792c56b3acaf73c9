"""scan_normalizer.domain.finding

Canonical representation of a *normalized* finding.

This is intentionally **scanner-agnostic**. The service extractor of every
scanner family and the recommendation reducer both produce this type, and the
downstream collector only ever sees its ``to_dict`` form.

Findings are frozen. Each one is built fresh from static inputs (a rule
template, a scanner report) and never updated afterwards; in particular
``identified_at`` is fixed at construction.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Dict, List, Mapping, Optional, Tuple


class Severity(str, Enum):
    INFORMATIONAL = "INFORMATIONAL"
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]

    @classmethod
    def coerce(cls, v: Any) -> "Severity":
        """Accept a Severity or its (case-insensitive) name; raise ValueError otherwise."""
        if isinstance(v, Severity):
            return v
        if isinstance(v, str):
            s = v.strip().upper()
            if s in cls.__members__:
                return cls[s]
        raise ValueError(f"invalid severity: {v!r}")


_SEVERITY_RANK: Dict[Severity, int] = {
    Severity.INFORMATIONAL: 0,
    Severity.LOW: 1,
    Severity.MEDIUM: 2,
    Severity.HIGH: 3,
    Severity.CRITICAL: 4,
}


class OsiLayer(str, Enum):
    APPLICATION = "APPLICATION"
    PRESENTATION = "PRESENTATION"
    SESSION = "SESSION"
    TRANSPORT = "TRANSPORT"
    NETWORK = "NETWORK"


def _none_if_empty_str(v: Any) -> Any:
    if v is None:
        return None
    if isinstance(v, str) and not v.strip():
        return None
    return v


def _as_tuple_of_str(v: Any) -> Optional[Tuple[str, ...]]:
    if v is None:
        return None
    if isinstance(v, (list, tuple)):
        return tuple(str(x) for x in v if x is not None)
    return (str(v),)


@dataclass(frozen=True)
class Finding:
    """Scanner-agnostic normalized finding."""

    # ---- Identity ----
    name: str
    category: str
    severity: Severity
    description: str = ""
    identified_at: Optional[str] = None

    # ---- Where ----
    location: Optional[str] = None
    osi_layer: Optional[OsiLayer] = None

    # ---- Evidence ----
    attributes: Dict[str, Any] = field(default_factory=dict)

    # Policy-violation findings only: offending names in input order.
    algorithms: Optional[Tuple[str, ...]] = None
    hint: Optional[str] = None

    # ---- Auxiliary ----
    reference: Dict[str, Any] = field(default_factory=dict)
    mitigation: Optional[str] = None

    REQUIRED_FIELDS: ClassVar[Tuple[str, ...]] = (
        "name",
        "category",
        "severity",
    )

    # attributes/reference are dicts; compare findings with ==, don't hash them.
    __hash__ = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        problems = Finding.validate_dict(
            {"name": self.name, "category": self.category, "severity": self.severity}
        )
        if problems:
            raise ValueError(f"invalid finding: {', '.join(problems)}")

        # Frozen dataclass: normalize field types via object.__setattr__.
        object.__setattr__(self, "severity", Severity.coerce(self.severity))
        if self.osi_layer is not None and not isinstance(self.osi_layer, OsiLayer):
            object.__setattr__(self, "osi_layer", OsiLayer(str(self.osi_layer).strip().upper()))
        if self.algorithms is not None and not isinstance(self.algorithms, tuple):
            object.__setattr__(self, "algorithms", _as_tuple_of_str(self.algorithms))

    @staticmethod
    def validate_dict(d: Mapping[str, Any]) -> List[str]:
        """Return a list of human-readable problems for this dict.

        Lightweight on purpose: callers that only want to *report* schema drift
        can use this without paying for an exception.
        """
        problems: List[str] = []
        if not isinstance(d, Mapping):
            return ["not_a_mapping"]
        for k in Finding.REQUIRED_FIELDS:
            v = d.get(k)
            if v is None or (isinstance(v, str) and not v.strip()):
                problems.append(f"missing:{k}")

        sev = d.get("severity")
        if sev not in (None, ""):
            try:
                Severity.coerce(sev)
            except ValueError:
                problems.append("invalid:severity")

        layer = d.get("osi_layer")
        if layer not in (None, "") and not isinstance(layer, OsiLayer):
            if str(layer).strip().upper() not in OsiLayer.__members__:
                problems.append("invalid:osi_layer")

        algs = d.get("algorithms")
        if algs is not None and not isinstance(algs, (list, tuple)):
            problems.append("invalid:algorithms")

        return problems

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "Finding":
        """Parse a dict (as emitted by ``to_dict``) back into a Finding."""
        if not isinstance(d, Mapping):
            raise TypeError(f"Finding.from_dict expected mapping, got {type(d)!r}")

        attrs = d.get("attributes")
        ref = d.get("reference")
        layer = _none_if_empty_str(d.get("osi_layer"))

        return cls(
            name=str(d.get("name") or ""),
            category=str(d.get("category") or ""),
            severity=d.get("severity"),
            description=str(d.get("description") or ""),
            identified_at=_none_if_empty_str(d.get("identified_at")),
            location=_none_if_empty_str(d.get("location")),
            osi_layer=layer,
            attributes=dict(attrs) if isinstance(attrs, Mapping) else {},
            algorithms=_as_tuple_of_str(d.get("algorithms")),
            hint=_none_if_empty_str(d.get("hint")),
            reference=dict(ref) if isinstance(ref, Mapping) else {},
            mitigation=_none_if_empty_str(d.get("mitigation")),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-serializable dict."""
        out: Dict[str, Any] = {
            "name": self.name,
            "description": self.description,
            "identified_at": self.identified_at,
            "category": self.category,
            "severity": self.severity.value,
            "osi_layer": self.osi_layer.value if self.osi_layer is not None else None,
            "location": self.location,
            "attributes": dict(self.attributes),
            "reference": dict(self.reference),
            "mitigation": self.mitigation,
        }
        if self.algorithms is not None:
            out["algorithms"] = list(self.algorithms)
        if self.hint is not None:
            out["hint"] = self.hint
        return out
