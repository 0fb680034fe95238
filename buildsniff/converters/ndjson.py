"""Newline-delimited JSON helpers."""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any

# file:line[:col]: severity: message [code]
_MYPY_LINE = re.compile(
    r"^([^:]+):(\d+):(?:(\d+):)?\s+(error|warning|note):\s+(.+?)(?:\s+\[([^\]]+)\])?$"
)


def parse_ndjson(content: str) -> list[Any]:
    """Parse each non-blank line on its own; unparsable lines are skipped."""
    items: list[Any] = []
    for line in content.splitlines():
        line = line.strip()
        if not line:
            continue
        try:
            items.append(json.loads(line))
        except (ValueError, RecursionError):
            continue
    return items


def normalize_ndjson(content: str) -> str | None:
    """NDJSON text -> JSON array text, or ``None`` if no line parsed."""
    items = parse_ndjson(content)
    if not items:
        return None
    return json.dumps(items, indent=2)


def normalize_ndjson_file(path: Path) -> str | None:
    return normalize_ndjson(path.read_text(encoding="utf-8", errors="replace"))


def convert_mypy_text_to_ndjson(text: str) -> str | None:
    """Turn mypy's plain-text diagnostics into mypy ``-O json`` style NDJSON.

    A ``note`` line is folded into the error or warning before it as
    ``hint`` when both name the same file; other notes are dropped.
    """
    records: list[dict[str, Any]] = []
    current: dict[str, Any] | None = None

    for line in text.strip().splitlines():
        m = _MYPY_LINE.match(line.strip())
        if not m:
            continue
        file, line_no, column, severity, message, code = m.groups()

        if severity == "note":
            if current is not None and current["file"] == file:
                current["hint"] = message if current["hint"] is None else f"{current['hint']}\n{message}"
            continue

        if current is not None:
            records.append(current)
        current = {
            "file": file,
            "line": int(line_no),
            "column": int(column) if column else 0,
            "message": message,
            "code": code or "",
            "severity": severity,
            "hint": None,
        }

    if current is not None:
        records.append(current)

    if not records:
        return None
    return "\n".join(json.dumps(r) for r in records)
