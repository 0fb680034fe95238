"""Validators for JVM report formats (JUnit, Checkstyle, SpotBugs, Surefire)."""

from __future__ import annotations

from buildsniff.validators.base import InvalidArtifact, load_json, require_object, validator

SARIF_VERSION = "2.1.0"


@validator
def validate_junit_xml(content: str) -> None:
    if "<testsuites" not in content and "<testsuite" not in content:
        raise InvalidArtifact("Missing <testsuites> or <testsuite> root element")
    if "<testcase" not in content:
        raise InvalidArtifact("Missing <testcase> elements")


@validator
def validate_checkstyle_xml(content: str) -> None:
    if "<checkstyle" not in content:
        raise InvalidArtifact("Missing <checkstyle> root element")
    if "<file" not in content and "</checkstyle>" not in content:
        raise InvalidArtifact("Missing <file> elements or closing </checkstyle> tag")


@validator
def validate_spotbugs_xml(content: str) -> None:
    if "<bugcollection" not in content.lower():
        raise InvalidArtifact("Missing <BugCollection> root element")
    if "</BugCollection>" not in content:
        raise InvalidArtifact("Missing closing </BugCollection> tag")


@validator
def validate_checkstyle_sarif_json(content: str) -> None:
    """SARIF 2.1.0 log whose first run is Checkstyle (or has results)."""
    data = require_object(load_json(content))
    if data.get("version") != SARIF_VERSION:
        raise InvalidArtifact(f"Missing or unsupported SARIF version (expected {SARIF_VERSION})")

    runs = data.get("runs")
    if not isinstance(runs, list) or not runs:
        raise InvalidArtifact("Missing or empty runs array")

    run = runs[0] if isinstance(runs[0], dict) else {}
    driver = (run.get("tool") or {}).get("driver") or {}
    name = str(driver.get("name") or "")
    results = run.get("results")
    if name.lower() == "checkstyle":
        return
    if isinstance(results, list) and results:
        return
    raise InvalidArtifact("SARIF run is not from Checkstyle and carries no results")


@validator
def validate_surefire_html(content: str) -> None:
    lower = content.lower()
    if "surefire" not in lower:
        raise InvalidArtifact("Missing surefire report markers")
    if "<html" not in lower:
        raise InvalidArtifact("Not valid HTML format")
    if "test" not in lower:
        raise InvalidArtifact("Missing test-related content")
