from __future__ import annotations

import re
from typing import Sequence

_ANSI = re.compile(r"\x1b\[[0-9;]*[A-Za-z]")
_TIMESTAMP = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d+)?Z\s*")
_GHA_MARKER = re.compile(r"^##\[(error|warning|notice|group|endgroup|debug)\]\s*")

_CI_MARKERS = (
    re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}", re.MULTILINE),
    re.compile(r"##\[(group|error|warning)\]"),
    re.compile(r"Current runner version|Runner Image|GITHUB_TOKEN"),
)


def clean_log_line(line: str) -> str:
    """Strip colour codes, a leading timestamp and a GitHub Actions marker."""
    cleaned = _ANSI.sub("", line)
    cleaned = _TIMESTAMP.sub("", cleaned)
    cleaned = _GHA_MARKER.sub("", cleaned)
    return cleaned.strip()


def has_ci_markers(lines: Sequence[str], window: int = 20) -> bool:
    """True when the first ``window`` lines look like a CI job transcript."""
    head = "\n".join(lines[:window])
    return any(p.search(head) for p in _CI_MARKERS)
