#!/usr/bin/env python3
"""
Simple CLI wrapper around the normalization pipeline.

Reads one scanner report (JSON), writes the normalized finding envelope.

Usage:
  python normalize_cli.py --input ssh-audit.json
  python normalize_cli.py --input ssh-audit.json --output findings.json
  python normalize_cli.py --input ssh-audit.json --rules my_rules.yaml --suppress-empty

Exit codes:
  0  success
  1  input/output file could not be read or written
  2  invalid report or invalid configuration
"""

from __future__ import annotations

import argparse
from dataclasses import replace
import json
import logging
from pathlib import Path
import sys
from typing import List, Optional

from scan_normalizer.errors import ValidationError
from scan_normalizer.io import dump_json, read_json, write_json
from scan_normalizer.scanners import DEFAULT_SCANNER, SCANNERS
from scan_normalizer.wiring import (
    ENV_PATH,
    NormalizerConfig,
    build_pipeline,
    configure_logging,
    load_dotenv_if_present,
    parse_log_level,
)

logger = logging.getLogger("normalize_cli")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Normalize a security scanner report into findings.")

    parser.add_argument("--input", "-i", required=True, help="Scanner JSON output to normalize")
    parser.add_argument("--output", "-o", help="Where to write the findings envelope (default: stdout)")
    parser.add_argument(
        "--scanner",
        choices=sorted(SCANNERS.keys()),
        default=DEFAULT_SCANNER,
        help=f"Scanner family that produced the input (default: {DEFAULT_SCANNER})",
    )
    parser.add_argument("--rules", help="YAML rule table overriding the built-in rules")
    parser.add_argument(
        "--suppress-empty",
        action="store_true",
        help="Drop recommendation groups that list no algorithms",
    )
    parser.add_argument("--log-level", help="Logging level (default: SCAN_NORMALIZER_LOG_LEVEL or WARNING)")
    return parser.parse_args(argv)


def resolve_config(args: argparse.Namespace) -> NormalizerConfig:
    """Environment first, then CLI flags on top."""
    config = NormalizerConfig.from_env()
    config = replace(config, scanner=args.scanner)
    if args.rules:
        config = replace(config, rules_path=Path(args.rules))
    if args.suppress_empty:
        config = replace(config, suppress_empty=True)
    if args.log_level:
        config = replace(config, log_level=parse_log_level(args.log_level, source="--log-level"))
    return config


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv_if_present(ENV_PATH)
    args = parse_args(argv)

    try:
        config = resolve_config(args)
    except ValueError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 2

    configure_logging(config.log_level)

    try:
        pipeline = build_pipeline(config)
    except OSError as e:
        print(f"Could not read rule table: {e}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"Invalid rule table: {e}", file=sys.stderr)
        return 2

    in_path = Path(args.input)
    try:
        raw = read_json(in_path)
    except OSError as e:
        print(f"Could not read {in_path}: {e}", file=sys.stderr)
        return 1
    except json.JSONDecodeError as e:
        print(f"{in_path} is not valid JSON: {e}", file=sys.stderr)
        return 2
    except UnicodeDecodeError as e:
        print(f"{in_path} is not UTF-8 text: {e}", file=sys.stderr)
        return 2

    try:
        result = pipeline.run(raw)
    except ValidationError as e:
        print(f"{in_path}: {e}", file=sys.stderr)
        return 2

    for sg in result.skipped:
        logger.info("diagnostic: %s", sg.to_dict())

    envelope = result.to_dict()
    if args.output:
        try:
            write_json(Path(args.output), envelope)
        except OSError as e:
            print(f"Could not write {args.output}: {e}", file=sys.stderr)
            return 1
    else:
        dump_json(envelope, sys.stdout)

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
