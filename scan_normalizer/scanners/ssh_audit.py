"""scan_normalizer.scanners.ssh_audit

ssh-audit specific service extraction.

ssh-audit's JSON output carries the server banner, the offered algorithm
lists and the host key fingerprints at the top level. All of it is copied
verbatim into one informational "SSH Service" finding; nothing here judges
the algorithms (that is the recommendation reducer's job).
"""

from __future__ import annotations

import ipaddress
from typing import Any, Dict, Mapping, Optional

from scan_normalizer.domain.finding import Finding, OsiLayer, Severity
from scan_normalizer.domain.report import ScannerReport

SSH_AUDIT_LIST_FIELDS = ("enc", "kex", "key", "mac", "compression", "fingerprints")

SERVICE_NAME = "SSH Service"
SERVICE_DESCRIPTION = "SSH Service Information"
SERVICE_CATEGORY = "SSH Service"


def _ip_or_none(host: str) -> Optional[str]:
    try:
        return str(ipaddress.ip_address(host))
    except ValueError:
        return None


def _banner_fields(banner: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    if not banner:
        return {"server_banner": None, "ssh_version": None, "ssh_lib_cpe": None}

    protocol = banner.get("protocol")
    version = None
    if isinstance(protocol, (list, tuple)) and protocol:
        version = protocol[0]
    elif isinstance(protocol, (int, float, str)) and not isinstance(protocol, bool):
        version = protocol

    return {
        "server_banner": banner.get("raw") or None,
        "ssh_version": version,
        "ssh_lib_cpe": banner.get("software") or None,
    }


def extract_service_finding(report: ScannerReport, *, identified_at: Optional[str] = None) -> Finding:
    attributes: Dict[str, Any] = {
        "hostname": report.host or None,
        "port": report.port,
        "ip_address": _ip_or_none(report.host),
    }
    attributes.update(_banner_fields(report.banner))
    attributes.update(
        {
            "os_cpe": None,
            "key_algorithms": report.list_field("key"),
            "encryption_algorithms": report.list_field("enc"),
            "mac_algorithms": report.list_field("mac"),
            "compression_algorithms": report.list_field("compression"),
            "key_exchange_algorithms": report.list_field("kex"),
            "fingerprints": report.list_field("fingerprints"),
        }
    )

    return Finding(
        name=SERVICE_NAME,
        description=SERVICE_DESCRIPTION,
        category=SERVICE_CATEGORY,
        severity=Severity.INFORMATIONAL,
        identified_at=identified_at,
        location=report.host,
        osi_layer=OsiLayer.APPLICATION,
        attributes=attributes,
    )
