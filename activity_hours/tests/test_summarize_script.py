import io
import json
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path

from activity_hours.scripts import summarize


class SummarizeScriptTests(unittest.TestCase):
    def setUp(self) -> None:
        self.tmpdir = tempfile.TemporaryDirectory()
        self.root = Path(self.tmpdir.name)
        self.export = self.root / "export.ndjson"
        self.export.write_text(
            "\n".join(
                [
                    json.dumps({"ts": "2024-01-01T10:00:00Z"}),
                    json.dumps({"ts": "2024-01-01T10:05:00Z"}),
                    json.dumps({"when": "2024-01-01T11:00:00Z"}),
                ]
            ),
            encoding="utf-8",
        )

    def tearDown(self) -> None:
        self.tmpdir.cleanup()

    def _run(self, *argv: str) -> tuple[int, str, str]:
        out, err = io.StringIO(), io.StringIO()
        with redirect_stdout(out), redirect_stderr(err):
            code = summarize.main(list(argv))
        return code, out.getvalue(), err.getvalue()

    def test_prints_human_summary(self) -> None:
        code, out, _ = self._run(str(self.export))
        self.assertEqual(code, 0)
        self.assertIn("events: 2", out)
        self.assertIn("sessions: 1", out)
        self.assertIn("first: 2024-01-01T10:00:00.000Z", out)

    def test_custom_keys_and_json_output(self) -> None:
        code, out, _ = self._run(str(self.export), "--keys", "ts,when", "--json")
        self.assertEqual(code, 0)
        data = json.loads(out)
        self.assertEqual(data["session_count"], 2)
        self.assertEqual(data["total_duration_ms"], 6 * 60_000)

    def test_compact_output(self) -> None:
        code, out, _ = self._run(str(self.export), "--compact", "--sample-limit", "1", "--gap-minutes", "10")
        self.assertEqual(code, 0)
        self.assertEqual(json.loads(out), {"timestamps": ["2024-01-01T10:00:00.000Z"], "gap_minutes": 10})

    def test_invalid_document_exits_non_zero(self) -> None:
        bad = self.root / "bad.json"
        bad.write_text("not json at all", encoding="utf-8")
        code, _, err = self._run(str(bad))
        self.assertEqual(code, 1)
        self.assertIn("not valid JSON", err)

    def test_missing_file_exits_non_zero(self) -> None:
        code, _, err = self._run(str(self.root / "missing.json"))
        self.assertEqual(code, 1)
        self.assertIn("cannot read", err)

    def test_non_positive_gap_exits_non_zero(self) -> None:
        code, _, err = self._run(str(self.export), "--gap-minutes", "0")
        self.assertEqual(code, 1)
        self.assertIn("positive", err)

    def test_out_of_range_gap_exits_non_zero(self) -> None:
        code, _, err = self._run(str(self.export), "--gap-minutes", "1e300")
        self.assertEqual(code, 1)
        self.assertIn("out of range", err)

    def test_too_deeply_nested_file_exits_non_zero(self) -> None:
        deep = self.root / "deep.json"
        deep.write_text("[" * 100000 + "]" * 100000, encoding="utf-8")
        code, _, err = self._run(str(deep))
        self.assertEqual(code, 1)
        self.assertIn("too deeply nested", err)


if __name__ == "__main__":
    unittest.main()
