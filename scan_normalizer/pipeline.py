"""scan_normalizer.pipeline

The normalization pipeline: the single front door of this package.

Flow for one scanner report::

    raw scanner JSON (already parsed)
          |
          v
    ScannerReport.from_dict      -- ValidationError here aborts the call;
          |                         nothing is emitted
          v
    service extractor            -- always exactly one finding
          |
          v
    recommendation reducer       -- zero or more policy-violation findings,
          |                         plus SkippedGroup diagnostics
          v
    [service finding, *policy violation findings]

All findings of one run share one ``identified_at`` taken from the clock
when the run starts. Apart from that timestamp, running the same input twice
yields equal findings.

A pipeline instance holds only immutable configuration, so one instance can
serve any number of concurrent calls.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

from scan_normalizer.domain.finding import Finding
from scan_normalizer.errors import SkippedGroup
from scan_normalizer.normalize.recommendations import reduce_recommendations
from scan_normalizer.rules.table import RuleTable
from scan_normalizer.scanners import DEFAULT_SCANNER, ScannerInfo, get_scanner

logger = logging.getLogger(__name__)

SCHEMA_VERSION = "1.0"

Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class NormalizationResult:
    """Findings of one run plus the diagnostics channel."""

    scanner: str
    target: str
    identified_at: str
    findings: Tuple[Finding, ...] = ()
    skipped: Tuple[SkippedGroup, ...] = field(default_factory=tuple)

    @property
    def service_finding(self) -> Finding:
        return self.findings[0]

    @property
    def policy_violations(self) -> Tuple[Finding, ...]:
        return self.findings[1:]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "schema_version": SCHEMA_VERSION,
            "scanner": self.scanner,
            "target": self.target,
            "identified_at": self.identified_at,
            "findings": [f.to_dict() for f in self.findings],
            "diagnostics": [s.to_dict() for s in self.skipped],
        }


class NormalizationPipeline:
    """Normalize one scanner family's reports into findings.

    Parameters
    ----------
    scanner:
        Registry key (see :mod:`scan_normalizer.scanners`).
    rules:
        Rule table overriding the scanner's built-in one.
    suppress_empty:
        Skip recommendation groups that have a template but no items instead
        of emitting a finding with empty ``algorithms``.
    clock:
        Returns the run timestamp; injectable for reproducible output.
    """

    def __init__(
        self,
        scanner: str = DEFAULT_SCANNER,
        *,
        rules: Optional[RuleTable] = None,
        suppress_empty: bool = False,
        clock: Optional[Clock] = None,
    ) -> None:
        self._scanner: ScannerInfo = get_scanner(scanner)
        self._rules: RuleTable = rules if rules is not None else self._scanner.rules
        self._suppress_empty = bool(suppress_empty)
        self._clock: Clock = clock or _utc_now

    @property
    def scanner(self) -> ScannerInfo:
        return self._scanner

    @property
    def rules(self) -> RuleTable:
        return self._rules

    @property
    def suppress_empty(self) -> bool:
        return self._suppress_empty

    def run(self, raw: Any) -> NormalizationResult:
        """Validate and normalize one report; raise ValidationError if unusable."""
        report = self._scanner.parse_report(raw)
        identified_at = self._clock().isoformat()

        service = self._scanner.extract_service(report, identified_at=identified_at)
        reduced = reduce_recommendations(
            report.recommendations,
            rules=self._rules,
            domain=self._scanner.domain,
            location=report.host,
            identified_at=identified_at,
            suppress_empty=self._suppress_empty,
        )

        logger.debug(
            "Normalized %s report for %s: %d policy findings, %d skipped groups",
            self._scanner.key,
            report.target,
            len(reduced.findings),
            len(reduced.skipped),
        )

        return NormalizationResult(
            scanner=self._scanner.key,
            target=report.target,
            identified_at=identified_at,
            findings=(service,) + reduced.findings,
            skipped=reduced.skipped,
        )

    def normalize(self, raw: Any, *, diagnostics: Optional[List[SkippedGroup]] = None) -> List[Finding]:
        """Return the ordered finding list; skipped groups go to ``diagnostics`` if given."""
        result = self.run(raw)
        if diagnostics is not None:
            diagnostics.extend(result.skipped)
        return list(result.findings)


def normalize(
    raw: Any,
    *,
    scanner: str = DEFAULT_SCANNER,
    rules: Optional[RuleTable] = None,
    suppress_empty: bool = False,
    clock: Optional[Clock] = None,
    diagnostics: Optional[List[SkippedGroup]] = None,
) -> List[Finding]:
    """One-shot convenience wrapper around :class:`NormalizationPipeline`."""
    pipeline = NormalizationPipeline(scanner, rules=rules, suppress_empty=suppress_empty, clock=clock)
    return pipeline.normalize(raw, diagnostics=diagnostics)
