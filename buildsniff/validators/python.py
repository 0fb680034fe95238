"""Validators for Python test runners, linters and formatters."""

from __future__ import annotations

import json
import re

from buildsniff.validators.base import InvalidArtifact, load_json, require_object, validator

_RUFF_MARKERS = re.compile(r"\[\*\]|fixable with the `--fix` option|Found\s+\d+\s+error")


@validator
def validate_pytest_json(content: str) -> None:
    data = require_object(load_json(content))
    if not isinstance(data.get("tests"), list):
        raise InvalidArtifact("Missing or invalid tests array")


@validator
def validate_pytest_html(content: str) -> None:
    if "pytest-html" not in content:
        raise InvalidArtifact('Missing pytest-html marker (link to "pytest-html" package)')


@validator
def validate_mypy_ndjson(content: str) -> None:
    lines = [line for line in content.strip().splitlines() if line.strip()]
    if not lines:
        raise InvalidArtifact("Mypy JSON output is empty")

    try:
        first = json.loads(lines[0])
    except (ValueError, RecursionError) as e:
        raise InvalidArtifact(f"First line is not valid JSON: {e}") from e
    if not isinstance(first, dict):
        raise InvalidArtifact("First line is not a JSON object")

    for field, kind in (("file", str), ("line", int), ("message", str), ("code", str)):
        value = first.get(field)
        if not isinstance(value, kind) or isinstance(value, bool):
            raise InvalidArtifact(f"Missing or invalid '{field}' field in first error")

    if len(lines) > 1:
        try:
            json.loads(lines[1])
        except (ValueError, RecursionError) as e:
            raise InvalidArtifact(f"Invalid JSON on line 2: {e}") from e


@validator
def validate_mypy_txt(content: str) -> None:
    has_diagnostic = re.search(r"\.py:\d+:(\d+:)?\s+(error|note):", content)
    has_summary = re.search(r"Found\s+\d+\s+error.+\(checked\s+\d+\s+source\s+file", content)
    if not (has_diagnostic or has_summary):
        raise InvalidArtifact("Does not match mypy output format")


@validator
def validate_ruff_txt(content: str) -> None:
    # "src/sample.py:2:8: F401 [*] `os` imported but unused"
    has_fixable_line = re.search(r"\.py:\d+:\d+:\s+[A-Z]+\d+\s+\[\*\]", content)
    has_summary = re.search(r"Found\s+\d+\s+error", content)
    has_fix_hint = "fixable with the `--fix` option" in content
    if not (has_fixable_line or (has_summary and has_fix_hint)):
        raise InvalidArtifact("Does not match ruff output format")


@validator
def validate_flake8_txt(content: str) -> None:
    # "./src/main.py:1:1: F401 'os' imported but unused"
    if not re.search(r"\.py:\d+:\d+:\s+[A-Z]\d{3}\s", content) or _RUFF_MARKERS.search(content):
        raise InvalidArtifact("Does not match flake8 output format")


@validator
def validate_isort_txt(content: str) -> None:
    if not re.search(r"ERROR:.*Imports are incorrectly sorted", content):
        raise InvalidArtifact("Missing isort 'Imports are incorrectly sorted' errors")


@validator
def validate_black_txt(content: str) -> None:
    if not re.search(r"All done!.*✨|would reformat|would be left unchanged", content):
        raise InvalidArtifact("Missing black check summary or 'would reformat' lines")
