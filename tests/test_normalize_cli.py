import contextlib
import io
import json
import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

import normalize_cli
from scan_normalizer.wiring import ENV_LOG_LEVEL, ENV_RULES, ENV_SUPPRESS_EMPTY

FIXTURE = Path(__file__).resolve().parent / "fixtures" / "ssh_audit_report.json"


class TestNormalizeCli(unittest.TestCase):
    def setUp(self) -> None:
        patcher = mock.patch.dict(os.environ, {}, clear=False)
        patcher.start()
        self.addCleanup(patcher.stop)
        for k in (ENV_RULES, ENV_SUPPRESS_EMPTY, ENV_LOG_LEVEL):
            os.environ.pop(k, None)

        # Keep a developer's .env out of the tests.
        dotenv = mock.patch.object(normalize_cli, "load_dotenv_if_present")
        dotenv.start()
        self.addCleanup(dotenv.stop)

    def _run(self, *argv):
        out, err = io.StringIO(), io.StringIO()
        with contextlib.redirect_stdout(out), contextlib.redirect_stderr(err):
            code = normalize_cli.main(list(argv))
        return code, out.getvalue(), err.getvalue()

    def test_writes_envelope_to_output_file(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            out_path = Path(td) / "nested" / "findings.json"
            code, _, _ = self._run("--input", str(FIXTURE), "--output", str(out_path))
            self.assertEqual(0, code)
            env = json.loads(out_path.read_text(encoding="utf-8"))

        self.assertEqual("ssh-audit", env["scanner"])
        self.assertEqual(5, len(env["findings"]))
        self.assertEqual("SSH Service", env["findings"][0]["name"])

    def test_writes_envelope_to_stdout(self) -> None:
        code, out, _ = self._run("--input", str(FIXTURE))
        self.assertEqual(0, code)
        self.assertEqual("dummy-ssh.default.svc:22", json.loads(out)["target"])

    def test_invalid_report_exits_2(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            p = Path(td) / "bad.json"
            p.write_text(json.dumps({"banner": {}}), encoding="utf-8")
            code, out, err = self._run("--input", str(p))
        self.assertEqual(2, code)
        self.assertEqual("", out)
        self.assertIn("missing:target", err)

    def test_non_json_input_exits_2(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            p = Path(td) / "bad.json"
            p.write_text("{not json", encoding="utf-8")
            code, _, err = self._run("--input", str(p))
        self.assertEqual(2, code)
        self.assertIn("not valid JSON", err)

    def test_non_utf8_input_exits_2(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            p = Path(td) / "bad.json"
            p.write_bytes(b'{"target": "h:22", "banner": "\xff\xfe"}')
            code, out, err = self._run("--input", str(p))
        self.assertEqual(2, code)
        self.assertEqual("", out)
        self.assertIn("not UTF-8", err)

    def test_missing_input_exits_1(self) -> None:
        code, _, err = self._run("--input", "/nonexistent/report.json")
        self.assertEqual(1, code)
        self.assertIn("Could not read", err)

    def test_rules_and_suppress_empty_flags(self) -> None:
        raw = json.loads(FIXTURE.read_text(encoding="utf-8"))
        raw["recommendations"] = {"critical": {"del": {"mac": [], "kex": ["diffie-hellman-group1-sha1"]}}}
        with tempfile.TemporaryDirectory() as td:
            report = Path(td) / "report.json"
            report.write_text(json.dumps(raw), encoding="utf-8")
            rules = Path(td) / "rules.yaml"
            rules.write_text(
                "version: 1\nrules:\n"
                "  - {action: del, category: mac, name: MAC rule}\n"
                "  - {action: del, category: kex, name: Kex rule}\n",
                encoding="utf-8",
            )
            code, out, _ = self._run("--input", str(report), "--rules", str(rules), "--suppress-empty")

        self.assertEqual(0, code)
        env = json.loads(out)
        self.assertEqual(["SSH Service", "Kex rule"], [f["name"] for f in env["findings"]])
        self.assertEqual(["empty_group"], [d["reason"] for d in env["diagnostics"]])

    def test_bad_log_level_exits_2(self) -> None:
        code, _, err = self._run("--input", str(FIXTURE), "--log-level", "LOUD")
        self.assertEqual(2, code)
        self.assertIn("Invalid configuration", err)


if __name__ == "__main__":
    unittest.main()
