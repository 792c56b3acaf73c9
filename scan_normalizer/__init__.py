"""scan_normalizer

Scanner-output normalization core.

Security scanners each speak their own JSON dialect. This package owns:

* domain types (the canonical finding contract for downstream collectors)
* the rule tables that turn scanner recommendations into policy violations
* the pipeline that validates one report and emits an ordered finding list

Running scanners, storing findings and rendering reports are left to the
callers; entrypoints such as ``normalize_cli.py`` stay thin composition roots.
"""

from __future__ import annotations

from .domain import Finding, OsiLayer, ScannerReport, Severity
from .errors import SkippedGroup, ValidationError
from .pipeline import NormalizationPipeline, NormalizationResult, normalize

__version__ = "0.1.0"

__all__ = [
    "Finding",
    "NormalizationPipeline",
    "NormalizationResult",
    "OsiLayer",
    "ScannerReport",
    "Severity",
    "SkippedGroup",
    "ValidationError",
    "normalize",
]
