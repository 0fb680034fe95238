from __future__ import annotations

import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Any

from buildsniff.domain.errors import ConversionError


def _primary(bug: ET.Element, tag: str) -> ET.Element | None:
    first = None
    for el in bug.iter(tag):
        if el.get("primary") == "true":
            return el
        if first is None:
            first = el
    return first


def _int(value: str | None, default: int) -> int:
    try:
        return int(value) if value else default
    except ValueError:
        return default


def extract_spotbugs_xml(path: Path) -> dict[str, Any]:
    """SpotBugs ``BugCollection`` XML -> ``{"bugs": [...], "summary": {...}}``.

    Priority 1 is high, 2 is medium and anything else is low, so the
    three counters always add up to ``totalBugs``.
    """
    try:
        root = ET.fromstring(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, ET.ParseError) as e:
        raise ConversionError(f"Failed to extract SpotBugs XML: {e}") from e

    bugs: list[dict[str, Any]] = []
    summary = {"totalBugs": 0, "highPriority": 0, "mediumPriority": 0, "lowPriority": 0}

    for bug in root.iter("BugInstance"):
        priority = _int(bug.get("priority"), 3)
        message = bug.findtext("LongMessage") or bug.findtext("ShortMessage") or ""

        source = _primary(bug, "SourceLine")
        source_file = ""
        line = 0
        if source is not None:
            source_file = source.get("sourcefile") or ""
            line = _int(source.get("start"), 0)

        class_el = bug.find(".//Class[@primary='true']")
        method_el = bug.find(".//Method[@primary='true']")

        entry: dict[str, Any] = {
            "type": bug.get("type") or "",
            "priority": priority,
            "abbrev": bug.get("abbrev") or "",
            "category": bug.get("category") or "",
            "instanceLine": line,
            "instanceMessage": message.strip(),
            "sourceFile": source_file,
        }
        if class_el is not None and class_el.get("classname"):
            entry["classname"] = class_el.get("classname")
        if method_el is not None and method_el.get("name"):
            entry["methodname"] = method_el.get("name")
        bugs.append(entry)

        summary["totalBugs"] += 1
        if priority <= 1:
            summary["highPriority"] += 1
        elif priority == 2:
            summary["mediumPriority"] += 1
        else:
            summary["lowPriority"] += 1

    return {"bugs": bugs, "summary": summary}
