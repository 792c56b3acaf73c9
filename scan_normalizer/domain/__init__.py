"""scan_normalizer.domain

Domain objects that form the *contract* between the normalization stages.

Key idea
--------
Scanners produce raw outputs in scanner-specific formats. The core validates
those into a :class:`ScannerReport` and emits scanner-agnostic
:class:`Finding` records so downstream collectors never see vendor quirks.
"""

from __future__ import annotations

from .finding import Finding, OsiLayer, Severity
from .report import ScannerReport, split_target

__all__ = [
    "Finding",
    "OsiLayer",
    "ScannerReport",
    "Severity",
    "split_target",
]
