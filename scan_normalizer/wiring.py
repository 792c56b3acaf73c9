"""scan_normalizer.wiring

This module is the **composition root** for the Python runtime.

"Composition root" means: the single place where we *assemble* the running
normalizer from its building blocks:

- load configuration / environment variables (optionally from ``.env``)
- configure logging
- pick the rule table (built-in or YAML override)
- build the :class:`~scan_normalizer.pipeline.NormalizationPipeline`

The normalization core never reads the environment itself; entrypoints (the
CLI, scripts, a collector service) go through here.

Environment
-----------
SCAN_NORMALIZER_RULES
    Path to a YAML rule table replacing the scanner's built-in rules.
SCAN_NORMALIZER_SUPPRESS_EMPTY
    Truthy (1/true/yes/y) to drop recommendation groups without items.
SCAN_NORMALIZER_LOG_LEVEL
    Logging level name (default WARNING).
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
import os
from pathlib import Path
import re
from typing import Mapping, Optional

from scan_normalizer.pipeline import NormalizationPipeline
from scan_normalizer.rules.table import load_rule_table
from scan_normalizer.scanners import DEFAULT_SCANNER

ENV_PATH: Path = Path.cwd() / ".env"

ENV_RULES = "SCAN_NORMALIZER_RULES"
ENV_SUPPRESS_EMPTY = "SCAN_NORMALIZER_SUPPRESS_EMPTY"
ENV_LOG_LEVEL = "SCAN_NORMALIZER_LOG_LEVEL"

_TRUTHY = {"1", "true", "yes", "y"}
_FALSY = {"", "0", "false", "no", "n"}

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


_QUOTES = ('"', "'")


def _dotenv_value(raw: str) -> str:
    v = raw.strip()
    if len(v) >= 2 and v[0] in _QUOTES and v[-1] == v[0]:
        return v[1:-1]
    # "/etc/rules.yaml  # team rules" -> "/etc/rules.yaml"; a bare '#' inside a path stays.
    return re.split(r"\s+#", v, maxsplit=1)[0].strip()


def load_dotenv_if_present(dotenv_path: Path = ENV_PATH) -> None:
    """Seed ``SCAN_NORMALIZER_*`` settings from a local ``.env`` file.

    Operators running the CLI next to a checked-out rule table usually keep
    ``SCAN_NORMALIZER_RULES`` and friends in ``.env``. Lines are
    ``[export ]KEY=VALUE``; ``#`` lines are comments. Anything already in the
    process environment wins, so a shell ``SCAN_NORMALIZER_LOG_LEVEL=DEBUG``
    overrides the file.
    """
    if not dotenv_path.exists():
        return

    for line in dotenv_path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        if not sep:
            continue
        key = key.strip()
        if key.startswith("export "):
            key = key[len("export ") :].strip()
        if key and key not in os.environ:
            os.environ[key] = _dotenv_value(value).replace("\r", "")


def _parse_bool(name: str, raw: Optional[str]) -> bool:
    s = (raw or "").strip().lower()
    if s in _TRUTHY:
        return True
    if s in _FALSY:
        return False
    raise ValueError(f"{name}: expected a boolean (1/0, true/false, yes/no), got {raw!r}")


def parse_log_level(raw: Optional[str], *, source: str = ENV_LOG_LEVEL) -> int:
    """Resolve a level name like ``info`` to its number; blank means WARNING."""
    s = (raw or "").strip().upper()
    if not s:
        return logging.WARNING
    level = logging.getLevelName(s)
    if not isinstance(level, int):
        raise ValueError(f"{source}: unknown logging level {raw!r}")
    return level


@dataclass(frozen=True)
class NormalizerConfig:
    """Runtime knobs resolved from the environment and/or CLI flags."""

    scanner: str = DEFAULT_SCANNER
    rules_path: Optional[Path] = None
    suppress_empty: bool = False
    log_level: int = logging.WARNING

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "NormalizerConfig":
        env = os.environ if environ is None else environ
        rules = (env.get(ENV_RULES) or "").strip()
        return cls(
            rules_path=Path(rules) if rules else None,
            suppress_empty=_parse_bool(ENV_SUPPRESS_EMPTY, env.get(ENV_SUPPRESS_EMPTY)),
            log_level=parse_log_level(env.get(ENV_LOG_LEVEL)),
        )


def configure_logging(level: int = logging.WARNING) -> None:
    """Log to stderr. Only entrypoints should call this."""
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger("scan_normalizer").setLevel(level)


def build_pipeline(config: Optional[NormalizerConfig] = None, *, load_dotenv: bool = True) -> NormalizationPipeline:
    """Build a pipeline from ``config`` (default: the environment)."""

    if config is None:
        if load_dotenv:
            load_dotenv_if_present(ENV_PATH)
        config = NormalizerConfig.from_env()

    rules = load_rule_table(config.rules_path) if config.rules_path is not None else None
    return NormalizationPipeline(config.scanner, rules=rules, suppress_empty=config.suppress_empty)
