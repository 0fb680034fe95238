"""Generic start/end marker scanner shared by every tool extractor."""

from __future__ import annotations

import re
from typing import Iterable

from buildsniff.extractors.cleaner import clean_log_line


def _hits(pattern: re.Pattern[str] | None, raw: str, cleaned: str) -> bool:
    if pattern is None:
        return False
    return bool(pattern.search(raw) or pattern.search(cleaned))


def extract_section(
    lines: Iterable[str],
    start: re.Pattern[str],
    end: re.Pattern[str] | None = None,
    include_end: bool = True,
    stop: re.Pattern[str] | None = None,
    accept: re.Pattern[str] | None = None,
    continuation: bool = False,
) -> str | None:
    """Collect the cleaned lines of one tool's section in a CI log.

    Parameters
    ----------
    lines:
        Raw log lines.
    start:
        Lines are ignored until this matches. The start line itself is
        not part of the output.
    end:
        Terminates the section. The matching line is kept when
        ``include_end`` is true.
    stop:
        Terminates the section without keeping the matching line, e.g.
        the invocation of a sibling tool.
    accept:
        Line-acceptance predicate applied to cleaned lines. ``None``
        accepts every non-blank line.
    continuation:
        Keep non-matching lines once at least one line was accepted.

    Markers are searched in both the raw and the cleaned line so that
    timestamps in front of a summary line do not hide it.

    Returns
    -------
    The joined section, or ``None`` when nothing was collected.
    """
    out: list[str] = []
    in_section = False

    for raw in lines:
        cleaned = clean_log_line(raw)

        if not in_section:
            if _hits(start, raw, cleaned):
                in_section = True
            continue

        if _hits(stop, raw, cleaned):
            break

        if _hits(end, raw, cleaned):
            if include_end and cleaned:
                out.append(cleaned)
            break

        if not cleaned:
            continue

        if accept is None or accept.search(cleaned):
            out.append(cleaned)
        elif continuation and out:
            out.append(cleaned)

    return "\n".join(out) if out else None
