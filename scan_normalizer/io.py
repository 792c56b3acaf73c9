"""scan_normalizer.io

Tiny JSON IO helpers used by the CLI.

This module contains ONLY IO (no normalization policy); the normalization
core in :mod:`scan_normalizer.pipeline` never touches the filesystem.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, TextIO


def write_json(path: Path, data: Any) -> None:
    """Write pretty JSON to disk (UTF-8)."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
        f.write("\n")


def dump_json(data: Any, stream: TextIO) -> None:
    """Write pretty JSON to an open text stream (e.g. stdout)."""
    json.dump(data, stream, indent=2, ensure_ascii=False)
    stream.write("\n")


def read_json(path: Path) -> Any:
    """Read JSON from disk (UTF-8)."""
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)
