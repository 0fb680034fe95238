"""Content-sniffing artifact type detection.

The serialization family comes from the file extension alone; content
sniffing only narrows the type within that family. Plain text is only
classified when it carries the ``file.py:line:col:`` signature, anything
else stays ``unknown`` and must be checked with an explicit type.
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any

from buildsniff.capabilities.registry import get_capabilities
from buildsniff.core.util import read_sample
from buildsniff.docs.descriptions import DescriptionCatalog
from buildsniff.domain.models import DetectionResult, OriginalFormat, ValidationResult
from buildsniff.validators.rust import CLIPPY_REASONS

logger = logging.getLogger(__name__)

BINARY_EXTENSIONS = frozenset(
    {
        ".png", ".jpg", ".jpeg", ".gif", ".webp", ".svg",
        ".mp4", ".webm", ".mov",
        ".zip", ".tar", ".gz", ".bz2",
        ".exe", ".dll", ".so", ".dylib",
    }
)

FORMAT_BY_EXTENSION: dict[str, OriginalFormat] = {
    ".json": "json",
    ".ndjson": "json",
    ".jsonl": "json",
    ".xml": "xml",
    ".html": "html",
    ".htm": "html",
    ".txt": "txt",
    ".log": "txt",
}

_FLAKE8_SIGNATURE = re.compile(r"\.py:\d+:\d+:")


def original_format(path: Path | str) -> OriginalFormat:
    suffix = Path(path).suffix.lower()
    if suffix in BINARY_EXTENSIONS:
        return "binary"
    return FORMAT_BY_EXTENSION.get(suffix, "binary")


def detect_artifact_type(
    path: Path | str,
    *,
    validate: bool = False,
    descriptions: DescriptionCatalog | None = None,
) -> DetectionResult:
    """Best-guess type of the file at ``path``. Never raises."""
    p = Path(path)
    suffix = p.suffix.lower()

    if suffix in BINARY_EXTENSIONS:
        return DetectionResult("binary", "binary", True)

    fmt = original_format(p)
    if fmt == "binary":
        return DetectionResult("unknown", "binary", True)

    try:
        sample = read_sample(p)
        detected = detect_by_content(sample, fmt)
    except (OSError, ValueError, RecursionError) as e:
        logger.debug("Cannot read %s: %s", p, e)
        return DetectionResult("unknown", fmt, False)

    artifact = descriptions.get(detected) if descriptions is not None else None
    validation = _validate_file(p, detected) if validate else None
    return DetectionResult(detected, fmt, False, artifact=artifact, validation=validation)


def _validate_file(path: Path, artifact_type: str) -> ValidationResult:
    validator = get_capabilities(artifact_type).validator
    if validator is None:
        return ValidationResult.fail(f"No validator available for type: {artifact_type}")
    try:
        content = path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        return ValidationResult.fail(f"Cannot read file: {e}")
    return validator(content)


def detect_by_content(content: str, fmt: OriginalFormat) -> str:
    if fmt == "html":
        return detect_html(content)
    if fmt == "json":
        return detect_json(content)
    if fmt == "xml":
        return detect_xml(content)
    if fmt == "txt":
        return detect_txt(content)
    return "unknown"


def detect_html(content: str) -> str:
    lower = content.lower()
    if "pytest-html" in lower:
        return "pytest-html"
    if "jest-html" in lower or ("jest" in lower and ("test results" in lower or "test report" in lower)):
        return "jest-html"
    if "surefire" in lower and "test" in lower:
        return "surefire-html"
    if "rspec" in lower:
        return "rspec-html"
    if "playwright" in lower and ("report" in lower or "test" in lower):
        return "playwright-html"
    return "unknown"


def _first_object_line(content: str) -> dict[str, Any] | None:
    for line in content.splitlines():
        line = line.strip()
        if not line.startswith("{"):
            continue
        try:
            obj = json.loads(line)
        except (ValueError, RecursionError):
            return None
        return obj if isinstance(obj, dict) else None
    return None


def _ndjson_type(obj: dict[str, Any]) -> str | None:
    if obj.get("reason") in CLIPPY_REASONS:
        return "clippy-ndjson"
    if (
        isinstance(obj.get("file"), str)
        and isinstance(obj.get("line"), int)
        and isinstance(obj.get("message"), str)
        and isinstance(obj.get("code"), str)
    ):
        return "mypy-ndjson"
    if isinstance(obj.get("Action"), str) and isinstance(obj.get("Package"), str):
        return "go-test-ndjson"
    return None


def _structural_type(data: Any) -> str | None:
    # Most specific shapes first
    if isinstance(data, list):
        first = data[0] if data else None
        if isinstance(first, dict) and "filePath" in first and isinstance(first.get("messages"), list):
            return "eslint-json"
        return None
    if not isinstance(data, dict):
        return None

    if "Issues" in data and isinstance(data.get("Report"), dict):
        return "golangci-lint-json"
    config = data.get("config")
    if isinstance(config, dict) and ("rootDir" in config or "version" in config) and isinstance(
        data.get("suites"), list
    ):
        return "playwright-json"
    if isinstance(data.get("testResults"), list):
        return "jest-json"
    if isinstance(data.get("examples"), list) and isinstance(data.get("summary"), dict):
        return "rspec-json"
    if isinstance(data.get("tests"), list):
        return "pytest-json"
    return None


_JSON_MENTIONS = (
    ("eslint", "eslint-json"),
    ("mypy", "mypy-ndjson"),
    ("playwright", "playwright-json"),
    ("jest", "jest-json"),
    ("pytest", "pytest-json"),
)


def detect_json(content: str) -> str:
    obj = _first_object_line(content)
    if obj is not None:
        ndjson = _ndjson_type(obj)
        if ndjson is not None:
            return ndjson

    try:
        structural = _structural_type(json.loads(content))
    except (ValueError, RecursionError):
        # Truncated sample or NDJSON that matched no known tool
        structural = None
    if structural is not None:
        return structural

    lower = content.lower()
    for needle, artifact_type in _JSON_MENTIONS:
        if needle in lower:
            return artifact_type
    return "unknown"


def detect_xml(content: str) -> str:
    lower = content.lower()
    if "<testsuite" in lower:
        return "junit-xml"
    if "<checkstyle" in lower:
        return "checkstyle-xml"
    if "<bugcollection" in lower:
        return "spotbugs-xml"
    return "unknown"


def detect_txt(content: str) -> str:
    if _FLAKE8_SIGNATURE.search(content):
        return "flake8-txt"
    return "unknown"
