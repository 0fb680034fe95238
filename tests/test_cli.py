import io
import json

import pytest

from buildsniff.cli import guess_suffix, main

MYPY_CI_LOG = (
    "2024-05-01T10:00:00.0000000Z ##[group]Run mypy src\n"
    '2024-05-01T10:00:01.0000000Z src/app.py:12: error: Incompatible return value type (got "int", expected "str")  [return-value]\n'
    "2024-05-01T10:00:01.0000000Z Found 1 error in 1 file (checked 2 source files)\n"
)


def test_detect_text_output(capsys, fixture_path):
    assert main(["detect", str(fixture_path("junit.xml"))]) == 0
    out = capsys.readouterr().out.splitlines()
    assert out == ["Detected Type: junit-xml", "Format: xml", "Binary: no"]


def test_detect_with_description_and_validation(capsys, fixture_path):
    assert main(["detect", str(fixture_path("golangci-lint.json")), "--validate", "--show-description"]) == 0
    out = capsys.readouterr().out
    assert "Tool: https://golangci-lint.run/" in out
    assert "Format: .json" in out
    assert "Validation: Valid" in out


def test_detect_json_output(capsys, fixture_path):
    assert main(["detect", str(fixture_path("spotbugs.xml")), "--json"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data == {"detectedType": "spotbugs-xml", "originalFormat": "xml", "isBinary": False}


def test_detect_missing_file(capsys, tmp_path):
    assert main(["detect", str(tmp_path / "missing.json")]) == 2
    assert capsys.readouterr().err.strip() == f"Error: File not found: {tmp_path / 'missing.json'}"


def test_detect_from_stdin(capsys, monkeypatch, fixture_text):
    monkeypatch.setattr("sys.stdin", io.StringIO(fixture_text("eslint.json")))
    assert main(["detect", "-"]) == 0
    assert "Detected Type: eslint-json" in capsys.readouterr().out


def test_validate_ok(capsys, fixture_path):
    assert main(["validate", "cargo-test-txt", str(fixture_path("cargo-test.txt"))]) == 0
    assert capsys.readouterr().out.strip() == "Valid: cargo-test-txt"


def test_validate_invalid_exits_2(capsys, fixture_path):
    assert main(["validate", "cargo-test-txt", str(fixture_path("jest.txt"))]) == 2
    err = capsys.readouterr().err
    assert "Invalid: cargo-test-txt" in err
    assert "Missing 'running N tests' header" in err


def test_validate_unknown_type(capsys, fixture_path):
    assert main(["validate", "cobol-txt", str(fixture_path("jest.txt")), "--json"]) == 2
    data = json.loads(capsys.readouterr().out)
    assert data == {"valid": False, "error": "Unknown artifact type: cobol-txt"}


def test_validate_show_description(capsys, fixture_path):
    assert main(["validate", "black-txt", str(fixture_path("black.txt")), "--show-description"]) == 0
    err = capsys.readouterr().err
    assert "Parsing Guide (https://github.com/psf/black):" in err
    assert "All done" in err


def test_extract_to_stdout(capsys, tmp_path):
    log = tmp_path / "ci.log"
    log.write_text(MYPY_CI_LOG, encoding="utf-8")
    assert main(["extract", "mypy-txt", str(log)]) == 0
    out = capsys.readouterr().out
    assert out.startswith("src/app.py:12: error:")
    assert out.rstrip().endswith("(checked 2 source files)")


def test_extract_to_json_file(capsys, tmp_path):
    log = tmp_path / "ci.log"
    log.write_text(MYPY_CI_LOG, encoding="utf-8")
    output = tmp_path / "mypy.json"
    assert main(["extract", "mypy-txt", str(log), "--to-json", "--output", str(output)]) == 0
    records = json.loads(output.read_text(encoding="utf-8"))
    assert records[0]["code"] == "return-value"
    assert capsys.readouterr().out == ""


def test_extract_json_envelope(capsys, tmp_path):
    log = tmp_path / "ci.log"
    log.write_text(MYPY_CI_LOG, encoding="utf-8")
    assert main(["extract", "mypy-txt", str(log), "--to-json", "--json"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["effectiveType"] == "mypy-json"
    assert "artifact" not in data


def test_extract_nothing_found(capsys, tmp_path):
    log = tmp_path / "ci.log"
    log.write_text("nothing to see\n", encoding="utf-8")
    assert main(["extract", "tsc-txt", str(log)]) == 2
    assert capsys.readouterr().err.startswith("Error: No tsc-txt content found")


def test_extract_bad_marker(capsys, tmp_path):
    log = tmp_path / "ci.log"
    log.write_text(MYPY_CI_LOG, encoding="utf-8")
    assert main(["extract", "mypy-txt", str(log), "--start-marker", "["]) == 2
    assert "Invalid marker regex" in capsys.readouterr().err


def test_extract_with_validation_failure(capsys, tmp_path):
    log = tmp_path / "ci.log"
    log.write_text("BEGIN\nhello.py:1: something\nEND\n", encoding="utf-8")
    code = main(["extract", "flake8-txt", str(log), "--start-marker", "BEGIN", "--end-marker", "END", "--validate"])
    assert code == 2
    assert "is not valid flake8-txt" in capsys.readouterr().err


def test_extract_from_stdin(capsys, monkeypatch, fixture_text):
    monkeypatch.setattr("sys.stdin", io.StringIO(fixture_text("tsc.txt")))
    assert main(["extract", "tsc-txt", "-"]) == 0
    assert "error TS2322" in capsys.readouterr().out


def test_normalize_detected_type(capsys, fixture_path):
    assert main(["normalize", str(fixture_path("checkstyle.xml"))]) == 0
    report = json.loads(capsys.readouterr().out)
    assert report["summary"]["totalViolations"] == 3


def test_normalize_explicit_type_to_file(capsys, fixture_path, tmp_path):
    output = tmp_path / "out.json"
    assert main(["normalize", str(fixture_path("mypy.txt")), "--type", "mypy-txt", "-o", str(output)]) == 0
    assert len(json.loads(output.read_text(encoding="utf-8"))) == 2


def test_normalize_unconvertible(capsys, fixture_path):
    assert main(["normalize", str(fixture_path("rustfmt.txt")), "--type", "rustfmt-txt"]) == 2
    assert capsys.readouterr().err.strip() == "Error: Cannot normalize rustfmt-txt to JSON"


def test_normalize_undetectable(capsys, fixture_path):
    assert main(["normalize", str(fixture_path("black.txt"))]) == 2
    assert "Cannot normalize unknown to JSON" in capsys.readouterr().err


def test_normalize_unknown_type(capsys, fixture_path):
    assert main(["normalize", str(fixture_path("black.txt")), "--type", "cobol-txt"]) == 2
    assert "Unknown artifact type: cobol-txt" in capsys.readouterr().err


def test_normalize_from_stdin(capsys, monkeypatch, fixture_text, scratch_dir):
    monkeypatch.setattr("sys.stdin", io.StringIO(fixture_text("go-test.ndjson")))
    assert main(["normalize", "-"]) == 0
    events = json.loads(capsys.readouterr().out)
    assert events[-1]["Action"] == "pass"
    assert list(scratch_dir.iterdir()) == []


def test_types_lists_every_type(capsys):
    assert main(["types"]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert len(lines) == 37
    mypy_txt = next(line for line in lines if line.startswith("mypy-txt "))
    assert "-> mypy-json" in mypy_txt


def test_types_json_only(capsys):
    assert main(["types", "--json-only"]) == 0
    names = [line.split()[0] for line in capsys.readouterr().out.splitlines()]
    assert "rustfmt-txt" not in names
    assert "jest-html" in names


def test_requires_a_command(capsys):
    with pytest.raises(SystemExit):
        main([])


@pytest.mark.parametrize(
    "content,suffix",
    [
        ('{"a": 1}', ".json"),
        ("  [1, 2]", ".json"),
        ('<?xml version="1.0"?><testsuites/>', ".xml"),
        ("<checkstyle/>", ".xml"),
        ("<!DOCTYPE html><html></html>", ".html"),
        ("src/a.py:1:1: F401 x", ".txt"),
    ],
)
def test_guess_suffix(content, suffix):
    assert guess_suffix(content) == suffix
