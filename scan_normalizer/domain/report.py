"""scan_normalizer.domain.report

Validated view of one scanner invocation against one target.

The raw input is whatever an external adapter deserialized from the scanner's
JSON. ``ScannerReport.from_dict`` checks the *top-level* shape only and fails
on the first problem with :class:`~scan_normalizer.errors.ValidationError`.
Anything below the top level (individual recommendation groups, list
contents) is left to the reducer and extractors, which degrade per item.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from scan_normalizer.errors import ValidationError


def split_target(target: str) -> Tuple[str, Optional[int]]:
    """Split ``host[:port]`` into (host, port).

    IPv6 literals must be bracketed when a port is given: ``[::1]:22``.
    A bare IPv6 literal without brackets is returned as the host with no port.
    """
    t = target.strip()
    if not t:
        raise ValidationError("invalid:target", field="target", detail="empty target")

    if t.startswith("["):
        end = t.find("]")
        if end <= 1:
            raise ValidationError("invalid:target", field="target", detail=f"bad IPv6 literal {target!r}")
        host = t[1:end]
        rest = t[end + 1 :]
        if not rest:
            return host, None
        if not rest.startswith(":"):
            raise ValidationError("invalid:target", field="target", detail=f"unexpected {rest!r}")
        return host, _parse_port(rest[1:], target)

    # More than one colon and no brackets: unbracketed IPv6, no port.
    if t.count(":") > 1:
        return t, None

    host, sep, port = t.partition(":")
    if not host:
        raise ValidationError("invalid:target", field="target", detail=f"missing host in {target!r}")
    if not sep:
        return host, None
    return host, _parse_port(port, target)


def _parse_port(raw: str, target: str) -> int:
    s = raw.strip()
    if not s.isdigit():
        raise ValidationError("invalid:port", field="target", detail=f"non-numeric port in {target!r}")
    n = int(s)
    if not 0 < n < 65536:
        raise ValidationError("invalid:port", field="target", detail=f"port out of range in {target!r}")
    return n


@dataclass(frozen=True)
class ScannerReport:
    """Top-level-validated scanner output.

    Attributes
    ----------
    target:
        The raw ``host[:port]`` string as reported by the scanner.
    host / port:
        ``target`` split once at validation time.
    banner:
        Scanner banner/version block, or None when absent.
    lists:
        List-valued capability fields, keyed by the scanner's own field names
        (``enc``, ``kex``, ... for ssh-audit). Absent fields are empty lists.
        Contents are kept verbatim.
    recommendations:
        The nested recommendation structure (level -> action -> category ->
        items). Absent means empty.
    raw:
        The input mapping as received, for extractors needing scanner-specific
        keys beyond the common shape.
    """

    target: str
    host: str
    port: Optional[int] = None
    banner: Optional[Mapping[str, Any]] = None
    lists: Mapping[str, List[Any]] = field(default_factory=dict)
    recommendations: Mapping[str, Any] = field(default_factory=dict)
    raw: Mapping[str, Any] = field(default_factory=dict)

    def list_field(self, name: str) -> List[Any]:
        return list(self.lists.get(name) or [])

    @classmethod
    def from_dict(cls, d: Any, *, list_fields: Sequence[str] = ()) -> "ScannerReport":
        """Validate ``d`` and build a report; raise ValidationError on the first problem."""
        if not isinstance(d, Mapping):
            raise ValidationError("not_a_mapping", detail=f"got {type(d).__name__}")

        target = d.get("target")
        if target is None:
            raise ValidationError("missing:target", field="target")
        if not isinstance(target, str):
            raise ValidationError(
                "invalid:target", field="target", detail=f"expected string, got {type(target).__name__}"
            )
        host, port = split_target(target)

        banner = d.get("banner")
        if banner is not None and not isinstance(banner, Mapping):
            raise ValidationError(
                "invalid:banner", field="banner", detail=f"expected object, got {type(banner).__name__}"
            )

        lists: Dict[str, List[Any]] = {}
        for name in list_fields:
            v = d.get(name)
            if v is None:
                lists[name] = []
                continue
            if not isinstance(v, (list, tuple)):
                raise ValidationError(
                    f"invalid:{name}", field=name, detail=f"expected array, got {type(v).__name__}"
                )
            lists[name] = list(v)

        recs = d.get("recommendations")
        if recs is None:
            recs = {}
        if not isinstance(recs, Mapping):
            raise ValidationError(
                "invalid:recommendations",
                field="recommendations",
                detail=f"expected object, got {type(recs).__name__}",
            )

        return cls(
            target=target,
            host=host,
            port=port,
            banner=banner,
            lists=lists,
            recommendations=recs,
            raw=d,
        )
