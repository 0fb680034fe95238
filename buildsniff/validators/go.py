"""Validators for go test, golangci-lint and gofmt output."""

from __future__ import annotations

import json
import re

from buildsniff.validators.base import InvalidArtifact, load_json, require_object, validator


@validator
def validate_go_test_ndjson(content: str) -> None:
    if not content.strip():
        raise InvalidArtifact("Empty file")

    has_package_action = False
    has_test_output = False
    for line in content.splitlines():
        if not line.strip():
            continue
        try:
            obj = json.loads(line)
        except (ValueError, RecursionError):
            continue
        if not isinstance(obj, dict):
            continue
        if obj.get("Action") and obj.get("Package"):
            has_package_action = True
        if (obj.get("Test") or obj.get("Output")) and obj.get("Action"):
            has_test_output = True

    if not has_package_action:
        raise InvalidArtifact("Missing go test package and action fields")
    if not has_test_output:
        raise InvalidArtifact("No test output or results found")


@validator
def validate_golangci_lint_json(content: str) -> None:
    data = require_object(load_json(content))
    issues = data.get("Issues")
    report = data.get("Report")
    if not isinstance(issues, list) and not isinstance(report, dict):
        raise InvalidArtifact("Missing Issues array or Report object")
    if not (isinstance(issues, list) or isinstance(report.get("Linters"), list)):
        raise InvalidArtifact("Invalid golangci-lint structure")


@validator
def validate_gofmt_txt(content: str) -> None:
    if not content.strip():
        raise InvalidArtifact("Empty gofmt output")
    if "ERROR:" in content and "Imports are incorrectly sorted" in content:
        raise InvalidArtifact("Looks like isort output, not gofmt")

    has_headers = re.search(r"^---\s.*\.go", content, re.MULTILINE) and re.search(
        r"^\+\+\+\s.*\.go", content, re.MULTILINE
    )
    has_hunks = re.search(r"^@@ ", content, re.MULTILINE) or re.search(
        r"\n\s*[+-][^+-]", content
    )
    if not (has_headers and has_hunks):
        raise InvalidArtifact("Not valid gofmt diff output format")
