"""scan_normalizer.scanners

Central registry of supported scanner families.

Why this exists
---------------
The pipeline itself is scanner-agnostic. The parts that vary per scanner
family are declared *once* here:

- which top-level list fields the report carries (validated as arrays)
- the domain label used in finding categories (``SSH`` -> "SSH Policy Violation")
- the service extractor that turns top-level facts into a service finding
- the default rule table for its recommendation block

Extractors must remain *pure*: no filesystem, no subprocess, no network.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from scan_normalizer.domain.finding import Finding
from scan_normalizer.domain.report import ScannerReport
from scan_normalizer.rules.table import SSH_AUDIT_RULES, RuleTable

from .ssh_audit import SSH_AUDIT_LIST_FIELDS, extract_service_finding

ServiceExtractor = Callable[..., Finding]


@dataclass(frozen=True)
class ScannerInfo:
    """Static metadata describing one scanner family."""

    key: str
    label: str
    domain: str
    list_fields: Tuple[str, ...]

    # Called as extract_service(report, identified_at=...).
    extract_service: ServiceExtractor
    rules: RuleTable

    def parse_report(self, raw: object) -> ScannerReport:
        return ScannerReport.from_dict(raw, list_fields=self.list_fields)


# Canonical registry.
#
# NOTE: dict insertion order is preserved, so list_scanners() follows
# registration order.
SCANNERS: Dict[str, ScannerInfo] = {
    "ssh-audit": ScannerInfo(
        key="ssh-audit",
        label="ssh-audit",
        domain="SSH",
        list_fields=SSH_AUDIT_LIST_FIELDS,
        extract_service=extract_service_finding,
        rules=SSH_AUDIT_RULES,
    ),
}

DEFAULT_SCANNER = "ssh-audit"


def register_scanner(info: ScannerInfo) -> ScannerInfo:
    if info.key in SCANNERS:
        raise ValueError(f"Scanner already registered: {info.key}")
    SCANNERS[info.key] = info
    return info


def unregister_scanner(key: str) -> Optional[ScannerInfo]:
    return SCANNERS.pop(key, None)


def get_scanner(key: str) -> ScannerInfo:
    if key not in SCANNERS:
        supported = ", ".join(SCANNERS) or "<none>"
        raise KeyError(f"Unknown scanner: {key} (supported: {supported})")
    return SCANNERS[key]


def list_scanners() -> List[ScannerInfo]:
    return list(SCANNERS.values())


__all__ = [
    "DEFAULT_SCANNER",
    "SCANNERS",
    "ScannerInfo",
    "extract_service_finding",
    "get_scanner",
    "list_scanners",
    "register_scanner",
    "unregister_scanner",
]
