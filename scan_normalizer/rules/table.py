"""scan_normalizer.rules.table

Static rule table: (action, category) -> finding template.

A scanner's recommendation structure names an *action* (ssh-audit: ``del``,
``chg``, ``add``) and an algorithm *category* (``kex``, ``key``, ``mac``,
``enc``, ...). The rule table tells the reducer how to present a group of
flagged items as a policy-violation finding.

Tables are built once and never mutated. Lookups return the shared template
record; the reducer copies its static fields into a fresh Finding and never
writes back into it.

A missing (action, category) pair is normal: it means "no normalized template
defined for this group", and the reducer skips the group.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterable, Iterator, Mapping, Optional, Tuple

from scan_normalizer.domain.finding import Severity

RuleKey = Tuple[str, str]


@dataclass(frozen=True)
class RuleTemplate:
    """Presentation metadata for one class of policy violation."""

    action: str
    category: str
    name: str
    description: str = ""
    hint: Optional[str] = None

    # Optional floor for the emitted severity (see reduce_recommendations).
    severity_hint: Optional[Severity] = None

    @property
    def key(self) -> RuleKey:
        return (self.action, self.category)


class RuleTable:
    """Immutable index of RuleTemplates keyed by (action, category)."""

    def __init__(self, templates: Iterable[RuleTemplate] = ()) -> None:
        idx: Dict[RuleKey, RuleTemplate] = {}
        for t in templates:
            if t.key in idx:
                raise ValueError(f"duplicate rule template for {t.action}/{t.category}")
            idx[t.key] = t
        self._index: Mapping[RuleKey, RuleTemplate] = MappingProxyType(idx)

    def lookup(self, action: Any, category: Any) -> Optional[RuleTemplate]:
        if not isinstance(action, str) or not isinstance(category, str):
            return None
        return self._index.get((action, category))

    def __contains__(self, key: object) -> bool:
        return key in self._index

    def __iter__(self) -> Iterator[RuleKey]:
        return iter(self._index)

    def __len__(self) -> int:
        return len(self._index)

    def templates(self) -> Tuple[RuleTemplate, ...]:
        return tuple(self._index.values())

    def __repr__(self) -> str:
        keys = ", ".join(f"{a}/{c}" for a, c in self._index)
        return f"RuleTable([{keys}])"


# ---------------------------------------------------------------------------
# Built-in ssh-audit rules
# ---------------------------------------------------------------------------

SSH_AUDIT_RULES = RuleTable(
    [
        RuleTemplate(
            action="del",
            category="kex",
            name="Insecure SSH Kex Algorithms",
            description="The SSH server offers key exchange algorithms that should be removed",
            hint="Remove this Kex Algorithm",
        ),
        RuleTemplate(
            action="del",
            category="key",
            name="Insecure SSH Key Algorithms",
            description="The SSH server offers host key algorithms that should be removed",
            hint="Remove this Key Algorithm",
        ),
        RuleTemplate(
            action="del",
            category="mac",
            name="Insecure SSH MAC Algorithms",
            description="The SSH server offers MAC algorithms that should be removed",
            hint="Remove this MAC Algorithm",
        ),
        RuleTemplate(
            action="del",
            category="enc",
            name="Insecure SSH Encryption Algorithms",
            description="The SSH server offers encryption ciphers that should be removed",
            hint="Remove this Encryption Algorithm",
        ),
        RuleTemplate(
            action="chg",
            category="kex",
            name="Change SSH Kex Algorithm",
            description="The SSH server uses key exchange parameters that should be changed",
            hint="Change this Kex Algorithm",
        ),
        RuleTemplate(
            action="chg",
            category="key",
            name="Change SSH Key Algorithm",
            description="The SSH server uses host keys that should be changed (e.g. a larger key size)",
            hint="Change this Key Algorithm",
        ),
        RuleTemplate(
            action="add",
            category="kex",
            name="Missing SSH Kex Algorithms",
            description="Good / encouraged SSH key exchange algorithms are missing",
            hint="Add this Kex Algorithm",
        ),
        RuleTemplate(
            action="add",
            category="key",
            name="Missing SSH Key Algorithms",
            description="Good / encouraged SSH host key algorithms are missing",
            hint="Add this Key Algorithm",
        ),
        RuleTemplate(
            action="add",
            category="mac",
            name="Missing SSH MAC Algorithms",
            description="Good / encouraged SSH MAC algorithms are missing",
            hint="Add this MAC Algorithm",
        ),
        RuleTemplate(
            action="add",
            category="enc",
            name="Missing SSH Encryption Algorithms",
            description="Good / encouraged SSH encryption ciphers are missing",
            hint="Add this Encryption Algorithm",
        ),
    ]
)


# ---------------------------------------------------------------------------
# YAML rule tables
# ---------------------------------------------------------------------------


def _str_field(rule: Mapping[str, Any], key: str, idx: int, *, required: bool) -> Optional[str]:
    v = rule.get(key)
    if v is None:
        if required:
            raise ValueError(f"rules[{idx}]: missing:{key}")
        return None
    if not isinstance(v, str) or (required and not v.strip()):
        raise ValueError(f"rules[{idx}]: invalid:{key}")
    return v


def rule_table_from_dict(data: Any) -> RuleTable:
    """Build a RuleTable from a parsed rule document.

    Expected shape::

        version: 1
        rules:
          - action: del
            category: mac
            name: Insecure SSH MAC Algorithms
            description: ...
            hint: Remove this MAC Algorithm
            severity_hint: MEDIUM   # optional
    """
    if not isinstance(data, Mapping):
        raise ValueError("rule document: not_a_mapping")
    version = data.get("version", 1)
    if version != 1:
        raise ValueError(f"rule document: unsupported version {version!r}")
    rules = data.get("rules")
    if not isinstance(rules, list):
        raise ValueError("rule document: missing:rules")

    templates = []
    for i, rule in enumerate(rules):
        if not isinstance(rule, Mapping):
            raise ValueError(f"rules[{i}]: not_a_mapping")
        sev_raw = rule.get("severity_hint")
        try:
            sev = Severity.coerce(sev_raw) if sev_raw not in (None, "") else None
        except ValueError:
            raise ValueError(f"rules[{i}]: invalid:severity_hint") from None
        templates.append(
            RuleTemplate(
                action=_str_field(rule, "action", i, required=True),
                category=_str_field(rule, "category", i, required=True),
                name=_str_field(rule, "name", i, required=True),
                description=_str_field(rule, "description", i, required=False) or "",
                hint=_str_field(rule, "hint", i, required=False),
                severity_hint=sev,
            )
        )
    return RuleTable(templates)


def load_rule_table(path: Path) -> RuleTable:
    """Load a YAML rule table from disk (UTF-8)."""
    import yaml  # type: ignore

    path = Path(path)
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ValueError(f"rule document {path}: yaml_parse_error: {e}") from e
    return rule_table_from_dict(data)


def dump_rule_table(table: RuleTable) -> str:
    """Render a RuleTable as YAML (round-trips through load_rule_table)."""
    import yaml  # type: ignore

    rules = []
    for t in table.templates():
        r: Dict[str, Any] = {
            "action": t.action,
            "category": t.category,
            "name": t.name,
            "description": t.description,
        }
        if t.hint is not None:
            r["hint"] = t.hint
        if t.severity_hint is not None:
            r["severity_hint"] = t.severity_hint.value
        rules.append(r)

    # sort_keys=False keeps output stable and human-friendly.
    return yaml.safe_dump({"version": 1, "rules": rules}, sort_keys=False)
