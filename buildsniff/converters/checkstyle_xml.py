from __future__ import annotations

import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Any

from buildsniff.domain.errors import ConversionError


def _int_attr(el: ET.Element, name: str, default: int = 0) -> int:
    try:
        return int(el.get(name) or default)
    except ValueError:
        return default


def extract_checkstyle_xml(path: Path) -> dict[str, Any]:
    """Checkstyle XML -> ``{"files": [...], "summary": {...}}``.

    Only files with at least one violation are listed. Severities other
    than ``error`` and ``warning`` are counted as ``infos`` so that the
    three buckets always add up to ``totalViolations``.
    """
    try:
        root = ET.fromstring(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, ET.ParseError) as e:
        raise ConversionError(f"Failed to extract Checkstyle XML: {e}") from e

    files: list[dict[str, Any]] = []
    summary = {
        "totalFiles": 0,
        "filesWithViolations": 0,
        "totalViolations": 0,
        "errors": 0,
        "warnings": 0,
        "infos": 0,
    }

    for file_el in root.iter("file"):
        name = file_el.get("name")
        if not name:
            continue

        violations = []
        for err in file_el.iter("error"):
            severity = err.get("severity") or "warning"
            violations.append(
                {
                    "line": _int_attr(err, "line"),
                    "column": _int_attr(err, "column"),
                    "severity": severity,
                    "message": err.get("message") or "",
                    "source": err.get("source") or "",
                }
            )
            summary["totalViolations"] += 1
            if severity == "error":
                summary["errors"] += 1
            elif severity == "warning":
                summary["warnings"] += 1
            else:
                summary["infos"] += 1

        if violations:
            files.append({"name": name, "violations": violations})

    summary["totalFiles"] = summary["filesWithViolations"] = len({f["name"] for f in files})
    return {"files": files, "summary": summary}
