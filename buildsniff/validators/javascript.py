"""Validators for the JavaScript / TypeScript toolchain."""

from __future__ import annotations

import re

from buildsniff.validators.base import InvalidArtifact, load_json, require_object, validator


@validator
def validate_jest_json(content: str) -> None:
    data = require_object(load_json(content))
    if not isinstance(data.get("testResults"), list):
        raise InvalidArtifact("Missing or invalid testResults array")
    total = data.get("numTotalTests")
    if not isinstance(total, int) or isinstance(total, bool):
        raise InvalidArtifact("Missing or invalid numTotalTests")


@validator
def validate_jest_txt(content: str) -> None:
    if not re.search(r"^(PASS|FAIL)\s+\S+", content, re.MULTILINE):
        raise InvalidArtifact("No PASS/FAIL test file lines found")
    if not re.search(r"^Tests:\s+", content, re.MULTILINE):
        raise InvalidArtifact("Missing 'Tests:' summary line")


@validator
def validate_jest_html(content: str) -> None:
    lower = content.lower()
    if "<html" not in lower:
        raise InvalidArtifact("Not valid HTML format")
    if "jest-html" not in lower and not (
        "jest" in lower and ("test results" in lower or "test report" in lower)
    ):
        raise InvalidArtifact("Missing jest-html-reporter markers")


@validator
def validate_playwright_json(content: str) -> None:
    data = require_object(load_json(content))
    if not isinstance(data.get("config"), dict):
        raise InvalidArtifact("Missing or invalid config object")
    if not isinstance(data.get("suites"), list):
        raise InvalidArtifact("Missing or invalid suites array")


@validator
def validate_playwright_html(content: str) -> None:
    lower = content.lower()
    if "<html" not in lower and "<!doctype html" not in lower:
        raise InvalidArtifact("Not valid HTML format")
    if "playwright" not in lower:
        raise InvalidArtifact("Missing Playwright markers in HTML content")


@validator
def validate_eslint_json(content: str) -> None:
    data = load_json(content)
    if not isinstance(data, list):
        raise InvalidArtifact("Expected array of ESLint results")
    if not data:
        raise InvalidArtifact("ESLint results array is empty")

    first = data[0]
    if not isinstance(first, dict) or not isinstance(first.get("filePath"), str):
        raise InvalidArtifact("Missing or invalid filePath in first result")
    messages = first.get("messages")
    if not isinstance(messages, list):
        raise InvalidArtifact("Missing or invalid messages array in first result")
    if messages:
        msg = messages[0] if isinstance(messages[0], dict) else {}
        if not isinstance(msg.get("ruleId"), str):
            raise InvalidArtifact("Missing or invalid ruleId in message")
        if not isinstance(msg.get("message"), str):
            raise InvalidArtifact("Missing or invalid message text")


@validator
def validate_eslint_txt(content: str) -> None:
    # stylish formatter: "  12:5  error  'foo' is not defined  no-undef"
    has_error_line = re.search(r"\d+:\d+\s+(error|warning)", content)
    has_summary = re.search(r"\d+\s+problem", content)
    has_js_path = re.search(r"\S+\.(js|ts|jsx|tsx|mjs|cjs)\b", content)
    if not (has_js_path and (has_error_line or has_summary)):
        raise InvalidArtifact("Does not match ESLint output format")


@validator
def validate_tsc_txt(content: str) -> None:
    if not re.search(r"\.tsx?\(\d+,\d+\):\s+error\s+TS\d+", content):
        raise InvalidArtifact("Does not match TypeScript compiler output format")
