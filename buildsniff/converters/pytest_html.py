"""pytest-html report -> pytest-json-report shaped dict.

pytest-html 4.x embeds the whole run in ``#data-container[data-jsonblob]``;
older releases render a ``#results-table`` instead.
"""

from __future__ import annotations

import json
import logging
import time
from pathlib import Path
from typing import Any

from bs4 import BeautifulSoup

from buildsniff.domain.errors import ConversionError

logger = logging.getLogger(__name__)


def parse_duration(value: Any) -> float:
    """``"HH:MM:SS"``, ``"12 ms"`` or a number, in seconds."""
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)
    if not isinstance(value, str):
        return 0.0

    text = value.strip()
    if text.endswith("ms"):
        try:
            return float(text[:-2].strip()) / 1000
        except ValueError:
            return 0.0
    parts = text.split(":")
    try:
        if len(parts) == 3:
            return int(parts[0]) * 3600 + int(parts[1]) * 60 + float(parts[2])
        return float(text.rstrip("s"))
    except ValueError:
        return 0.0


def map_outcome(value: Any) -> str:
    result = str(value or "").lower()
    if "pass" in result:
        return "passed"
    if "fail" in result:
        return "failed"
    if "skip" in result:
        return "skipped"
    if "error" in result:
        return "error"
    return result


def extract_pytest_json(path: Path) -> dict[str, Any] | None:
    """Return the report, or ``None`` when the HTML carries no test data."""
    try:
        html = path.read_text(encoding="utf-8")
        soup = BeautifulSoup(html, "html.parser")

        container = soup.find(id="data-container")
        blob = container.get("data-jsonblob") if container is not None else None
        if blob:
            try:
                data = json.loads(blob)
            except (ValueError, RecursionError):
                logger.debug("data-jsonblob in %s is not JSON", path)
            else:
                if isinstance(data, dict):
                    return convert_embedded_data(data)

        rows = soup.select("table#results-table tbody.results-table-row")
        if rows:
            return convert_results_table(rows)
    except (OSError, UnicodeDecodeError) as e:
        raise ConversionError(f"Failed to extract JSON from pytest HTML: {e}") from e

    return None


def convert_embedded_data(data: dict[str, Any]) -> dict[str, Any]:
    tests: list[dict[str, Any]] = []
    total_duration = 0.0
    has_failed = False

    raw_tests = data.get("tests")
    if isinstance(raw_tests, dict):
        for nodeid, results in raw_tests.items():
            if not isinstance(results, list) or not results:
                continue
            # Retried tests keep one entry per attempt; the last one counts
            last = results[-1] if isinstance(results[-1], dict) else {}

            duration = parse_duration(last.get("duration"))
            total_duration += duration
            outcome = map_outcome(last.get("result") or last.get("outcome"))
            if outcome in ("failed", "error"):
                has_failed = True

            test: dict[str, Any] = {"nodeid": nodeid, "outcome": outcome, "duration": duration}
            if isinstance(last.get("log"), str):
                test["log"] = last["log"]
            if isinstance(last.get("extras"), list) and last["extras"]:
                test["extras"] = last["extras"]
            for stage in ("setup", "call", "teardown"):
                if isinstance(last.get(stage), dict):
                    test[stage] = last[stage]
            tests.append(test)

    return {
        "created": data.get("created") or time.time(),
        "duration": total_duration,
        "exitCode": 1 if has_failed else 0,
        "root": data.get("root") or "",
        "environment": data.get("environment") or {},
        "tests": tests,
    }


def convert_results_table(rows) -> dict[str, Any]:
    tests: list[dict[str, Any]] = []
    total_duration = 0.0
    has_failed = False

    for row in rows:
        result_cell = row.select_one("td.col-result")
        name_cell = row.select_one("td.col-name")
        if result_cell is None or name_cell is None:
            continue
        duration_cell = row.select_one("td.col-duration")
        duration = parse_duration(duration_cell.get_text(strip=True)) if duration_cell else 0.0
        outcome = map_outcome(result_cell.get_text(strip=True))
        if outcome in ("failed", "error"):
            has_failed = True
        total_duration += duration

        test: dict[str, Any] = {
            "nodeid": name_cell.get_text(strip=True),
            "outcome": outcome,
            "duration": duration,
        }
        log = row.select_one("div.log")
        if log is not None and log.get_text(strip=True):
            test["log"] = log.get_text()
        tests.append(test)

    return {
        "created": time.time(),
        "duration": total_duration,
        "exitCode": 1 if has_failed else 0,
        "root": "",
        "environment": {},
        "tests": tests,
    }
