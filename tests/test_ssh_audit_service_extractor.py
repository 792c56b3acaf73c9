import json
import unittest
from pathlib import Path

from scan_normalizer.domain.finding import OsiLayer, Severity
from scan_normalizer.domain.report import ScannerReport
from scan_normalizer.scanners.ssh_audit import SSH_AUDIT_LIST_FIELDS, extract_service_finding

FIXTURE = Path(__file__).resolve().parent / "fixtures" / "ssh_audit_report.json"


def _report(raw):
    return ScannerReport.from_dict(raw, list_fields=SSH_AUDIT_LIST_FIELDS)


class TestSshAuditServiceExtractor(unittest.TestCase):
    def setUp(self) -> None:
        self.raw = json.loads(FIXTURE.read_text(encoding="utf-8"))

    def test_service_finding_from_full_report(self) -> None:
        f = extract_service_finding(_report(self.raw), identified_at="2024-05-01T12:00:00+00:00")

        self.assertEqual("SSH Service", f.name)
        self.assertEqual("SSH Service Information", f.description)
        self.assertEqual("SSH Service", f.category)
        self.assertEqual(Severity.INFORMATIONAL, f.severity)
        self.assertEqual(OsiLayer.APPLICATION, f.osi_layer)
        self.assertEqual("dummy-ssh.default.svc", f.location)
        self.assertEqual("2024-05-01T12:00:00+00:00", f.identified_at)
        self.assertIsNone(f.algorithms)

        a = f.attributes
        self.assertEqual("dummy-ssh.default.svc", a["hostname"])
        self.assertEqual(22, a["port"])
        self.assertIsNone(a["ip_address"])
        self.assertEqual("SSH-2.0-OpenSSH_7.2p2 Ubuntu-4ubuntu2.8", a["server_banner"])
        self.assertEqual(2, a["ssh_version"])
        self.assertEqual("OpenSSH_7.2p2", a["ssh_lib_cpe"])
        self.assertIsNone(a["os_cpe"])

    def test_algorithm_lists_and_fingerprints_are_verbatim(self) -> None:
        a = extract_service_finding(_report(self.raw)).attributes
        self.assertEqual(self.raw["key"], a["key_algorithms"])
        self.assertEqual(self.raw["enc"], a["encryption_algorithms"])
        self.assertEqual(self.raw["mac"], a["mac_algorithms"])
        self.assertEqual(self.raw["compression"], a["compression_algorithms"])
        self.assertEqual(self.raw["kex"], a["key_exchange_algorithms"])
        self.assertEqual(self.raw["fingerprints"], a["fingerprints"])

    def test_missing_optional_fields_become_none_or_empty(self) -> None:
        f = extract_service_finding(_report({"target": "192.0.2.10:22"}))
        a = f.attributes
        self.assertEqual("192.0.2.10", f.location)
        self.assertEqual("192.0.2.10", a["ip_address"])
        self.assertIsNone(a["server_banner"])
        self.assertIsNone(a["ssh_version"])
        self.assertIsNone(a["ssh_lib_cpe"])
        self.assertEqual([], a["fingerprints"])
        self.assertEqual([], a["key_exchange_algorithms"])

    def test_partial_banner(self) -> None:
        a = extract_service_finding(_report({"target": "h", "banner": {"protocol": []}})).attributes
        self.assertIsNone(a["ssh_version"])
        self.assertIsNone(a["server_banner"])
        self.assertIsNone(a["port"])

    def test_service_finding_does_not_share_report_lists(self) -> None:
        report = _report(self.raw)
        a = extract_service_finding(report).attributes
        a["mac_algorithms"].append("injected")
        self.assertNotIn("injected", report.list_field("mac"))


if __name__ == "__main__":
    unittest.main()
