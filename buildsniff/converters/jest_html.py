"""jest-html-reporter page -> Jest ``--json`` shaped dict."""

from __future__ import annotations

import json
import logging
import re
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from bs4 import BeautifulSoup

from buildsniff.domain.errors import ConversionError

logger = logging.getLogger(__name__)

# The HTML report has no per-suite timestamps; endTime is startTime plus this.
JEST_HTML_SUITE_DURATION_MS = 1000

_NUMBER = re.compile(r"(\d+(?:\.\d+)?)")


def extract_jest_json(path: Path) -> dict[str, Any]:
    try:
        html = path.read_text(encoding="utf-8")
        soup = BeautifulSoup(html, "html.parser")

        embedded = _embedded_report(soup)
        if embedded is not None:
            return embedded
        return _report_from_dom(soup)
    except (OSError, ValueError, RecursionError) as e:
        raise ConversionError(f"Failed to extract JSON from jest HTML: {e}") from e


def _embedded_report(soup: BeautifulSoup) -> dict[str, Any] | None:
    candidates = soup.select("script#jest-results") + soup.select('script[type="application/json"]')
    for script in candidates:
        text = script.string or ""
        if "testResults" not in text:
            continue
        try:
            data = json.loads(text)
        except (ValueError, RecursionError):
            continue
        if isinstance(data, dict) and isinstance(data.get("testResults"), list):
            return data
    return None


def parse_timestamp(text: str) -> int:
    """``Started: 2025-11-04 15:57:50`` -> epoch milliseconds (UTC)."""
    m = re.search(r"Started:\s*(.+)", text)
    if m:
        raw = m.group(1).strip()
        for fmt in ("%Y-%m-%d %H:%M:%S", "%Y-%m-%dT%H:%M:%S"):
            try:
                parsed = datetime.strptime(raw, fmt).replace(tzinfo=timezone.utc)
            except ValueError:
                continue
            return int(parsed.timestamp() * 1000)
    return int(time.time() * 1000)


def _count(text: str) -> int:
    m = _NUMBER.search(text)
    return int(float(m.group(1))) if m else 0


def _suite_summary(soup: BeautifulSoup) -> dict[str, int]:
    summary = {"passed": 0, "failed": 0, "pending": 0}
    for div in soup.select("#suite-summary div"):
        text = div.get_text(" ", strip=True)
        for key in summary:
            if key in text:
                summary[key] = _count(text)
                break
    return summary


def _test_summary(soup: BeautifulSoup) -> dict[str, int] | None:
    divs = soup.select("#test-summary div")
    if not divs:
        return None
    summary = {"passed": 0, "failed": 0, "pending": 0, "total": 0}
    for div in divs:
        text = div.get_text(" ", strip=True)
        count = _count(text)
        if "total" in text or "Tests" in text:
            summary["total"] = count
        elif "passed" in text:
            summary["passed"] = count
        elif "failed" in text:
            summary["failed"] = count
        elif "pending" in text:
            summary["pending"] = count
    return summary


def _assertion_results(soup: BeautifulSoup) -> list[dict[str, Any]]:
    results: list[dict[str, Any]] = []
    for el in soup.select(".test-result"):
        classes = el.get("class") or []
        if "passed" in classes:
            status = "passed"
        elif "failed" in classes:
            status = "failed"
        else:
            status = "pending"

        info = el.select_one(".test-info") or el
        suite_el = info.select_one(".test-suitename")
        title_el = info.select_one(".test-title")
        duration_el = info.select_one(".test-duration")
        suite_name = suite_el.get_text(strip=True) if suite_el else ""
        title = title_el.get_text(strip=True) if title_el else ""

        duration = None
        if duration_el is not None:
            m = _NUMBER.search(duration_el.get_text(strip=True))
            if m:
                duration = round(float(m.group(1)) * 1000)

        failure_el = el.select_one(".failureMessages, .failure-messages")
        failures = [failure_el.get_text()] if failure_el is not None and status == "failed" else []

        results.append(
            {
                "title": title,
                "status": status,
                "duration": duration,
                "failureMessages": failures,
                "failureDetails": [],
                "ancestorTitles": [suite_name] if suite_name else [],
                "fullName": f"{suite_name} {title}" if suite_name else title,
                "numPassingAsserts": 1 if status == "passed" else 0,
                "location": None,
                "invocations": 1,
                "retryReasons": [],
            }
        )
    return results


def _report_from_dom(soup: BeautifulSoup) -> dict[str, Any]:
    timestamp_el = soup.select_one("#timestamp")
    start_time = parse_timestamp(timestamp_el.get_text() if timestamp_el else "")

    assertions = _assertion_results(soup)
    suites = _suite_summary(soup)
    tests = {
        status: sum(1 for a in assertions if a["status"] == status)
        for status in ("passed", "failed", "pending")
    }
    tests["total"] = len(assertions)

    # Counts always follow the rendered results; the summary block is only a cross-check
    summary = _test_summary(soup)
    if summary is not None and summary != tests:
        logger.warning(
            "jest HTML summary %s disagrees with %d rendered results",
            summary,
            len(assertions),
            extra={"artifact_type": "jest-html"},
        )

    success = tests["failed"] == 0 and suites["failed"] == 0

    suite_path_el = soup.select_one(".suite-info .suite-path")
    suite_path = (suite_path_el.get_text(strip=True) if suite_path_el else "") or "/unknown"

    suite = {
        "name": suite_path,
        "status": "passed" if success else "failed",
        "startTime": start_time,
        "endTime": start_time + JEST_HTML_SUITE_DURATION_MS,
        "message": "",
        "assertionResults": assertions,
    }

    return {
        "numFailedTestSuites": suites["failed"],
        "numPassedTestSuites": suites["passed"],
        "numPendingTestSuites": suites["pending"],
        "numFailedTests": tests["failed"],
        "numPassedTests": tests["passed"],
        "numPendingTests": tests["pending"],
        "numTotalTests": tests["total"],
        "numTotalTestSuites": suites["passed"] + suites["failed"] + suites["pending"],
        "startTime": start_time,
        "success": success,
        "testResults": [suite],
    }
