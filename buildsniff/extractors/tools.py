from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from buildsniff.domain.models import ExtractorConfig
from buildsniff.extractors.cleaner import clean_log_line, has_ci_markers
from buildsniff.extractors.section import extract_section

logger = logging.getLogger(__name__)

_PY_LOCATION = r"^[\w\-/.\\]+\.py:\d+"


@dataclass(frozen=True)
class ToolExtractor:
    """How to find one tool's output inside a CI log.

    ``raw_pattern`` is the tool's native line shape: an input without CI
    markers that contains such a line is bare tool output and is returned
    cleaned, line for line. Tools with ``raw_pattern=None`` and
    ``raw_when_no_ci=True`` treat any marker-free input as bare output.
    ``passthrough`` tools emit files that are never embedded in logs.
    """

    name: str
    start_marker: re.Pattern[str] | None = None
    end_marker: re.Pattern[str] | None = None
    include_end_marker: bool = True
    stop_marker: re.Pattern[str] | None = None
    accept: re.Pattern[str] | None = None
    continuation: bool = False
    raw_pattern: re.Pattern[str] | None = None
    raw_when_no_ci: bool = False
    passthrough: bool = False

    def is_raw_output(self, lines: list[str]) -> bool:
        if has_ci_markers(lines):
            return False
        if self.raw_pattern is None:
            return self.raw_when_no_ci
        return any(self.raw_pattern.search(clean_log_line(line)) for line in lines)

    def extract(self, lines: list[str], config: ExtractorConfig | None = None) -> str | None:
        if self.passthrough:
            text = "\n".join(lines).strip()
            return text or None

        overridden = config is not None and config.start_marker is not None
        if not overridden and self.is_raw_output(lines):
            logger.debug("%s: input is bare tool output", self.name)
            return _clean_all(lines)

        start = self.start_marker
        end = self.end_marker
        include_end = self.include_end_marker
        if config is not None:
            start = config.start_marker or start
            end = config.end_marker or end
            include_end = config.include_end_marker

        if start is None:
            return None
        return extract_section(
            lines,
            start=start,
            end=end,
            include_end=include_end,
            stop=self.stop_marker,
            accept=self.accept,
            continuation=self.continuation,
        )


def _clean_all(lines: list[str]) -> str | None:
    cleaned = [clean_log_line(line) for line in lines]
    while cleaned and not cleaned[0]:
        cleaned.pop(0)
    while cleaned and not cleaned[-1]:
        cleaned.pop()
    return "\n".join(cleaned) if cleaned else None


def _py_formatter(name: str, raw: str) -> ToolExtractor:
    return ToolExtractor(
        name=name,
        start_marker=re.compile(re.escape(name)),
        stop_marker=re.compile(r"^##\["),
        accept=re.compile(
            r"would reformat|would be (reformatted|left unchanged)|^ERROR:\s|^[\w\-/.\\]+\.py\b",
            re.IGNORECASE,
        ),
        raw_pattern=re.compile(raw),
    )


def _py_linter(name: str) -> ToolExtractor:
    return ToolExtractor(
        name=name,
        start_marker=re.compile(re.escape(name)),
        end_marker=re.compile(r"^##\[|^\d+\s+errors?\b", re.IGNORECASE),
        accept=re.compile(_PY_LOCATION),
        continuation=True,
        raw_pattern=re.compile(_PY_LOCATION + r":\d+:"),
    )


TOOL_EXTRACTORS: dict[str, ToolExtractor] = {
    t.name: t
    for t in (
        ToolExtractor(
            name="eslint",
            start_marker=re.compile(r"eslint.*\.(js|ts|jsx|tsx)|npm run lint", re.IGNORECASE),
            end_marker=re.compile(r"^(✖\s*)?\d+ problems?"),
            raw_when_no_ci=True,
        ),
        ToolExtractor(
            name="prettier",
            start_marker=re.compile(r"prettier|npm run format"),
            stop_marker=re.compile(r"^##\["),
            accept=re.compile(r"^(\[warn\]\s+)?[\w\-/.]+\.(js|ts|jsx|tsx|json|css|scss|md)\b"),
            raw_pattern=re.compile(r"^\[warn\]\s+[\w\-/.]+\.\w+$"),
        ),
        ToolExtractor(
            name="ruff",
            start_marker=re.compile(r"ruff check"),
            end_marker=re.compile(r"^Found \d+ errors?|^All checks passed", re.IGNORECASE),
            stop_marker=re.compile(r"##\[error\]|\+ mypy|\+ pytest"),
            accept=re.compile(_PY_LOCATION + r":\d+:"),
            continuation=True,
            raw_pattern=re.compile(_PY_LOCATION + r":\d+:"),
        ),
        _py_linter("flake8"),
        _py_linter("pylint"),
        ToolExtractor(
            name="tsc",
            start_marker=re.compile(r"tsc |type-check"),
            end_marker=re.compile(r"Found \d+ errors?"),
            accept=re.compile(r"^[\w\-/.]+\.tsx?[:(]\d+|error TS\d+:"),
            raw_pattern=re.compile(r"\.tsx?\(\d+,\d+\):\s+error\s+TS\d+"),
        ),
        _py_formatter("isort", r"^ERROR:.*Imports are incorrectly sorted"),
        _py_formatter("black", r"^would reformat\s"),
        ToolExtractor(
            name="mypy",
            start_marker=re.compile(r"mypy"),
            end_marker=re.compile(r"Found \d+ errors?|Success: no issues found"),
            accept=re.compile(_PY_LOCATION + r":(\d+:)?\s*(error|warning|note):"),
            raw_pattern=re.compile(_PY_LOCATION + r":(\d+:)?\s*(error|warning|note):"),
        ),
        ToolExtractor(
            name="clippy",
            start_marker=re.compile(r"clippy"),
            end_marker=re.compile(r"\d+\s+warnings?\s+emitted|generated \d+ warnings?"),
            accept=re.compile(r"^(warning|error)(\[[\w:]+\])?:|-->\s+\S+\.rs:\d+:\d+"),
            continuation=True,
            raw_pattern=re.compile(r"^(warning|error):\s|-->\s+\S+\.rs:\d+:\d+"),
        ),
        ToolExtractor(
            name="jest",
            start_marker=re.compile(r"\$ jest"),
            end_marker=re.compile(r"error Command failed"),
            stop_marker=re.compile(r"^##\[|Visit https://"),
            accept=re.compile(
                r"^(PASS|FAIL)\s+|^Test Suites:|^Tests:|^Snapshots:|^Time:"
                r"|Summary of all failing tests|^●|^expect\(|Expected:|Received:"
                r"|at Object\.<anonymous>|Ran all test suites"
            ),
            raw_pattern=re.compile(r"^(PASS|FAIL)\s+\S"),
        ),
        ToolExtractor(name="cargo-test", passthrough=True),
        ToolExtractor(name="rustfmt", passthrough=True),
        ToolExtractor(name="gofmt", passthrough=True),
    )
}


def tool_key(artifact_type: str) -> str:
    """``eslint-txt`` -> ``eslint``; ``clippy-json`` -> ``clippy``."""
    return re.sub(r"-(txt|json|ndjson)$", "", artifact_type)


def extract_linter_output(
    artifact_type: str,
    log_text: str,
    config: ExtractorConfig | None = None,
) -> str | None:
    """Carve one tool's output out of ``log_text``.

    Returns ``None`` for unsupported tools and when no section is found.
    """
    extractor = TOOL_EXTRACTORS.get(tool_key(artifact_type))
    if extractor is None:
        logger.debug("No extractor for %s", artifact_type)
        return None

    result = extractor.extract(log_text.splitlines(), config)
    if result is None:
        logger.debug("No %s section found", extractor.name, extra={"artifact_type": artifact_type})
    return result


# Order matters: earlier entries win when a log mentions several tools.
LINTER_PATTERNS: tuple[tuple[str, tuple[re.Pattern[str], ...]], ...] = (
    ("eslint", (re.compile(r"eslint", re.I), re.compile(r"npm run lint", re.I))),
    ("prettier", (re.compile(r"prettier", re.I), re.compile(r"npm run format", re.I))),
    ("ruff", (re.compile(r"ruff check", re.I), re.compile(r"ruff\s", re.I))),
    ("flake8", (re.compile(r"flake8", re.I),)),
    ("isort", (re.compile(r"isort", re.I),)),
    ("black", (re.compile(r"black --check", re.I), re.compile(r"black\s", re.I))),
    ("tsc", (re.compile(r"tsc --noEmit", re.I), re.compile(r"npm run type-check", re.I))),
    ("mypy", (re.compile(r"mypy", re.I),)),
    ("pylint", (re.compile(r"pylint", re.I),)),
    ("clippy", (re.compile(r"cargo clippy", re.I),)),
    ("jest", (re.compile(r"\$ jest"),)),
)


def detect_linter_type(job_name: str, log_text: str) -> str | None:
    """Guess the tool from a CI job name and the head of its log."""
    combined = f"{job_name}\n{log_text[:1000]}"
    for name, patterns in LINTER_PATTERNS:
        if any(p.search(combined) for p in patterns):
            return name
    return None
