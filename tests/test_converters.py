"""HTML, XML and NDJSON to JSON converters."""

import json
from datetime import datetime, timezone

import pytest

from buildsniff.converters.checkstyle_xml import extract_checkstyle_xml
from buildsniff.converters.jest_html import JEST_HTML_SUITE_DURATION_MS, extract_jest_json, parse_timestamp
from buildsniff.converters.ndjson import convert_mypy_text_to_ndjson, normalize_ndjson, parse_ndjson
from buildsniff.converters.pytest_html import extract_pytest_json, map_outcome, parse_duration
from buildsniff.converters.spotbugs_xml import extract_spotbugs_xml
from buildsniff.domain.errors import ConversionError
from buildsniff.validators.javascript import validate_jest_json
from buildsniff.validators.python import validate_mypy_ndjson, validate_pytest_json

LEGACY_PYTEST_HTML = """<html><head><title>report.html</title></head><body>
<p>Generated by <a href="https://pypi.python.org/pypi/pytest-html">pytest-html</a> v3.2.0</p>
<table id="results-table">
  <thead id="results-table-head"><tr><th>Result</th><th>Test</th><th>Duration</th></tr></thead>
  <tbody class="passed results-table-row">
    <tr><td class="col-result">Passed</td><td class="col-name">tests/test_a.py::test_ok</td><td class="col-duration">0.50</td></tr>
    <tr><td class="extra" colspan="3"><div class="empty log">No log output captured.</div></td></tr>
  </tbody>
  <tbody class="error results-table-row">
    <tr><td class="col-result">Error</td><td class="col-name">tests/test_a.py::test_err</td><td class="col-duration">0.10</td></tr>
    <tr><td class="extra" colspan="3"><div class="log">fixture 'db' not found</div></td></tr>
  </tbody>
</table></body></html>
"""


# ── pytest-html ───────────────────────────────────────────────────
def test_pytest_html_embedded_blob(fixture_path):
    report = extract_pytest_json(fixture_path("pytest.html"))
    tests = {t["nodeid"]: t for t in report["tests"]}

    assert set(tests) == {
        "tests/test_calc.py::test_add",
        "tests/test_calc.py::test_div",
        "tests/test_calc.py::test_flaky",
    }
    assert tests["tests/test_calc.py::test_add"]["outcome"] == "passed"
    assert tests["tests/test_calc.py::test_add"]["duration"] == 1.0
    assert tests["tests/test_calc.py::test_add"]["log"] == "No log output captured."
    assert tests["tests/test_calc.py::test_div"]["outcome"] == "failed"
    assert tests["tests/test_calc.py::test_div"]["duration"] == pytest.approx(0.012)
    # the last attempt of a rerun wins
    assert tests["tests/test_calc.py::test_flaky"]["outcome"] == "passed"
    assert report["exitCode"] == 1
    assert report["duration"] == pytest.approx(1.016)
    assert report["environment"]["Python"] == "3.11.6"
    assert report["created"] > 0


def test_pytest_html_output_validates_as_pytest_json(fixture_path):
    report = extract_pytest_json(fixture_path("pytest.html"))
    assert validate_pytest_json(json.dumps(report)).valid


def test_pytest_html_results_table(tmp_path):
    path = tmp_path / "report.html"
    path.write_text(LEGACY_PYTEST_HTML, encoding="utf-8")
    report = extract_pytest_json(path)

    assert [t["outcome"] for t in report["tests"]] == ["passed", "error"]
    assert report["tests"][0]["duration"] == 0.5
    assert report["tests"][1]["log"] == "fixture 'db' not found"
    assert report["exitCode"] == 1


def test_pytest_html_without_data_is_none(tmp_path):
    path = tmp_path / "report.html"
    path.write_text('<html><div id="data-container" data-jsonblob="{oops"></div></html>', encoding="utf-8")
    assert extract_pytest_json(path) is None


def test_pytest_html_unreadable_raises(tmp_path):
    with pytest.raises(ConversionError, match="Failed to extract JSON from pytest HTML"):
        extract_pytest_json(tmp_path / "missing.html")


@pytest.mark.parametrize(
    "value,seconds",
    [("00:01:02", 62.0), ("250 ms", 0.25), ("1.5s", 1.5), (3, 3.0), (None, 0.0), ("soon", 0.0)],
)
def test_parse_duration(value, seconds):
    assert parse_duration(value) == pytest.approx(seconds)


def test_map_outcome():
    assert map_outcome("Passed") == "passed"
    assert map_outcome("XFailed") == "failed"
    assert map_outcome("Skipped") == "skipped"
    assert map_outcome("Error") == "error"
    assert map_outcome("Rerun") == "rerun"


# ── jest-html ─────────────────────────────────────────────────────
def test_jest_html_dom_report(fixture_path):
    report = extract_jest_json(fixture_path("jest.html"))
    started = int(datetime(2025, 11, 4, 15, 57, 50, tzinfo=timezone.utc).timestamp() * 1000)

    assert report["startTime"] == started
    assert report["numTotalTests"] == 2
    assert report["numPassedTests"] == 1
    assert report["numFailedTests"] == 1
    assert report["numTotalTestSuites"] == 1
    assert report["success"] is False

    suite = report["testResults"][0]
    assert suite["name"] == "/repo/src/sum.test.js"
    assert suite["status"] == "failed"
    assert suite["endTime"] - suite["startTime"] == JEST_HTML_SUITE_DURATION_MS == 1000

    passed, failed = suite["assertionResults"]
    assert passed["status"] == "passed"
    assert passed["duration"] == 3
    assert passed["fullName"] == "sum adds numbers"
    assert failed["status"] == "failed"
    assert "Expected: -3" in failed["failureMessages"][0]
    assert failed["ancestorTitles"] == ["sum"]


def test_jest_html_output_validates_as_jest_json(fixture_path):
    report = extract_jest_json(fixture_path("jest.html"))
    assert validate_jest_json(json.dumps(report)).valid


def test_jest_html_prefers_embedded_results(tmp_path):
    embedded = {"numTotalTests": 7, "testResults": [{"name": "a.test.js"}]}
    path = tmp_path / "report.html"
    path.write_text(
        "<html><body><h1>Test Report</h1>"
        f'<script id="jest-results" type="application/json">{json.dumps(embedded)}</script>'
        "</body></html>",
        encoding="utf-8",
    )
    assert extract_jest_json(path) == embedded


def test_jest_html_counts_tests_without_summary(tmp_path):
    path = tmp_path / "report.html"
    path.write_text(
        "<html><body>"
        '<div class="test-result passed"><div class="test-title">a</div></div>'
        '<div class="test-result pending"><div class="test-title">b</div></div>'
        "</body></html>",
        encoding="utf-8",
    )
    report = extract_jest_json(path)
    assert report["numTotalTests"] == 2
    assert report["numPendingTests"] == 1
    assert report["testResults"][0]["name"] == "/unknown"


def test_jest_html_counts_follow_rendered_results(tmp_path, caplog):
    path = tmp_path / "report.html"
    path.write_text(
        "<html><body>"
        '<div id="test-summary"><div>Tests (3)</div><div>3 passed</div></div>'
        '<div class="test-result passed"><div class="test-title">a</div></div>'
        '<div class="test-result failed"><div class="test-title">b</div></div>'
        "</body></html>",
        encoding="utf-8",
    )
    with caplog.at_level("WARNING", logger="buildsniff.converters.jest_html"):
        report = extract_jest_json(path)

    items = report["testResults"][0]["assertionResults"]
    assert report["numPassedTests"] + report["numFailedTests"] + report["numPendingTests"] == len(items)
    assert report["numTotalTests"] == len(items) == 2
    assert report["numFailedTests"] == 1
    assert report["success"] is False
    assert "disagrees" in caplog.text


def test_jest_html_fixture_counts_partition_results(fixture_path):
    report = extract_jest_json(fixture_path("jest.html"))
    items = report["testResults"][0]["assertionResults"]
    for status in ("passed", "failed", "pending"):
        key = f"num{status.capitalize()}Tests"
        assert report[key] == sum(1 for a in items if a["status"] == status)
    assert report["numTotalTests"] == len(items)


def test_pytest_html_oversized_blob_falls_back(tmp_path):
    blob = '{"t": ' + "1" * 5000 + "}"
    path = tmp_path / "report.html"
    path.write_text(f"<html><div id=\"data-container\" data-jsonblob='{blob}'></div></html>", encoding="utf-8")
    assert extract_pytest_json(path) is None


def test_parse_timestamp_falls_back_to_now():
    before = int(datetime.now(timezone.utc).timestamp() * 1000)
    assert parse_timestamp("Started: yesterday") >= before


# ── checkstyle ────────────────────────────────────────────────────
def test_checkstyle_summary(fixture_path):
    report = extract_checkstyle_xml(fixture_path("checkstyle.xml"))
    summary = report["summary"]

    assert [f["name"] for f in report["files"]] == ["src/main/java/com/example/App.java"]
    assert summary["totalFiles"] == summary["filesWithViolations"] == 1
    assert summary["totalViolations"] == 3
    assert summary["errors"] + summary["warnings"] + summary["infos"] == summary["totalViolations"]
    assert (summary["errors"], summary["warnings"], summary["infos"]) == (1, 1, 1)

    first, second, _ = report["files"][0]["violations"]
    assert first == {
        "line": 3,
        "column": 1,
        "severity": "warning",
        "message": "Missing a Javadoc comment.",
        "source": "com.puppycrawl.tools.checkstyle.checks.javadoc.MissingJavadocTypeCheck",
    }
    assert second["column"] == 0


def test_checkstyle_malformed_xml(tmp_path):
    path = tmp_path / "checkstyle.xml"
    path.write_text("<checkstyle><file name='a'>", encoding="utf-8")
    with pytest.raises(ConversionError, match="Failed to extract Checkstyle XML"):
        extract_checkstyle_xml(path)


# ── spotbugs ──────────────────────────────────────────────────────
def test_spotbugs_bugs_and_summary(fixture_path):
    report = extract_spotbugs_xml(fixture_path("spotbugs.xml"))
    npe, encoding, inner = report["bugs"]

    assert npe["type"] == "NP_NULL_ON_SOME_PATH"
    assert npe["priority"] == 1
    assert npe["instanceLine"] == 14
    assert npe["sourceFile"] == "App.java"
    assert npe["instanceMessage"].startswith("Possible null pointer dereference of name")
    assert npe["classname"] == "com.example.App"
    assert npe["methodname"] == "run"

    assert encoding["instanceMessage"] == "Reliance on default encoding"
    assert encoding["instanceLine"] == 22
    assert "methodname" not in encoding

    assert inner["sourceFile"] == ""
    assert inner["instanceLine"] == 0

    assert report["summary"] == {"totalBugs": 3, "highPriority": 1, "mediumPriority": 1, "lowPriority": 1}


def test_spotbugs_malformed_xml(tmp_path):
    path = tmp_path / "spotbugs.xml"
    path.write_text("<BugCollection>", encoding="utf-8")
    with pytest.raises(ConversionError, match="Failed to extract SpotBugs XML"):
        extract_spotbugs_xml(path)


# ── NDJSON ────────────────────────────────────────────────────────
def test_ndjson_skips_unparsable_lines():
    content = '{"a": 1}\nnot json\n\n{"b": 2}\n'
    assert parse_ndjson(content) == [{"a": 1}, {"b": 2}]
    assert json.loads(normalize_ndjson(content)) == [{"a": 1}, {"b": 2}]


def test_ndjson_skips_lines_json_cannot_hold():
    content = '{"a": 1}\n{"b": ' + "1" * 5000 + '}\n{"c": 3}\n' + "[" * 100_000 + "\n"
    assert json.loads(normalize_ndjson(content)) == [{"a": 1}, {"c": 3}]


def test_ndjson_with_nothing_parsable_is_none():
    assert normalize_ndjson("garbage\n\n") is None


def test_mypy_text_to_ndjson(fixture_text):
    ndjson = convert_mypy_text_to_ndjson(fixture_text("mypy.txt"))
    records = [json.loads(line) for line in ndjson.splitlines()]

    assert len(records) == 2
    assert records[0] == {
        "file": "src/app.py",
        "line": 12,
        "column": 0,
        "message": 'Incompatible return value type (got "int", expected "str")',
        "code": "return-value",
        "severity": "error",
        "hint": None,
    }
    assert records[1]["code"] == "arg-type"
    assert records[1]["hint"] == "Consider using a cast"
    assert validate_mypy_ndjson(ndjson).valid


def test_mypy_notes_are_joined_and_orphans_dropped():
    text = (
        "a.py:1: note: orphan\n"
        "a.py:2:5: error: Name \"x\" is not defined  [name-defined]\n"
        "a.py:2: note: first\n"
        "a.py:2: note: second\n"
    )
    (record,) = [json.loads(line) for line in convert_mypy_text_to_ndjson(text).splitlines()]
    assert record["column"] == 5
    assert record["hint"] == "first\nsecond"


def test_mypy_note_on_another_file_is_dropped():
    text = (
        "a.py:2: error: Name \"x\" is not defined  [name-defined]\n"
        "b.py:7: note: unrelated\n"
    )
    (record,) = [json.loads(line) for line in convert_mypy_text_to_ndjson(text).splitlines()]
    assert record["file"] == "a.py"
    assert record["hint"] is None


def test_mypy_text_without_diagnostics_is_none():
    assert convert_mypy_text_to_ndjson("Success: no issues found in 3 source files") is None
