import unittest

from scan_normalizer.domain.report import ScannerReport, split_target
from scan_normalizer.errors import ValidationError

LIST_FIELDS = ("enc", "kex", "key", "mac", "compression", "fingerprints")


class TestSplitTarget(unittest.TestCase):
    def test_host_and_port(self) -> None:
        self.assertEqual(("dummy-ssh.default.svc", 22), split_target("dummy-ssh.default.svc:22"))
        self.assertEqual(("10.0.0.5", 2222), split_target("10.0.0.5:2222"))

    def test_host_without_port(self) -> None:
        self.assertEqual(("example.org", None), split_target("example.org"))

    def test_ipv6(self) -> None:
        self.assertEqual(("::1", 22), split_target("[::1]:22"))
        self.assertEqual(("fe80::1", None), split_target("[fe80::1]"))
        self.assertEqual(("fe80::1", None), split_target("fe80::1"))

    def test_invalid_targets(self) -> None:
        cases = {
            "": "invalid:target",
            "   ": "invalid:target",
            ":22": "invalid:target",
            "host:ssh": "invalid:port",
            "host:0": "invalid:port",
            "host:70000": "invalid:port",
            "[::1": "invalid:target",
            "[::1]x": "invalid:target",
        }
        for target, problem in cases.items():
            with self.subTest(target=target):
                with self.assertRaises(ValidationError) as ctx:
                    split_target(target)
                self.assertEqual(problem, ctx.exception.problem)


class TestScannerReportValidation(unittest.TestCase):
    def test_minimal_report(self) -> None:
        r = ScannerReport.from_dict({"target": "h:22"}, list_fields=LIST_FIELDS)
        self.assertEqual("h", r.host)
        self.assertEqual(22, r.port)
        self.assertIsNone(r.banner)
        self.assertEqual({}, dict(r.recommendations))
        for name in LIST_FIELDS:
            self.assertEqual([], r.list_field(name))

    def test_lists_are_kept_verbatim(self) -> None:
        kex = [{"algorithm": "curve25519-sha256@libssh.org"}, {"algorithm": "dh", "keysize": 2048}]
        r = ScannerReport.from_dict({"target": "h:22", "kex": kex, "mac": ["hmac-sha1"]}, list_fields=LIST_FIELDS)
        self.assertEqual(kex, r.list_field("kex"))
        self.assertEqual(["hmac-sha1"], r.list_field("mac"))

    def test_first_problem_is_reported(self) -> None:
        cases = [
            (None, "not_a_mapping"),
            (["target"], "not_a_mapping"),
            ({}, "missing:target"),
            ({"banner": "x"}, "missing:target"),
            ({"target": 22}, "invalid:target"),
            ({"target": "h:22", "banner": "SSH-2.0"}, "invalid:banner"),
            ({"target": "h:22", "enc": "aes128-ctr"}, "invalid:enc"),
            ({"target": "h:22", "fingerprints": {"hash": "x"}}, "invalid:fingerprints"),
            ({"target": "h:22", "recommendations": []}, "invalid:recommendations"),
        ]
        for raw, problem in cases:
            with self.subTest(problem=problem, raw=raw):
                with self.assertRaises(ValidationError) as ctx:
                    ScannerReport.from_dict(raw, list_fields=LIST_FIELDS)
                self.assertEqual(problem, ctx.exception.problem)

    def test_validation_error_is_a_value_error(self) -> None:
        with self.assertRaises(ValueError):
            ScannerReport.from_dict({}, list_fields=LIST_FIELDS)


if __name__ == "__main__":
    unittest.main()
