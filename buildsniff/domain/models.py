from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Literal, get_args

ArtifactType = Literal[
    # test frameworks
    "jest-json",
    "jest-html",
    "jest-txt",
    "playwright-json",
    "playwright-html",
    "pytest-json",
    "pytest-html",
    "junit-xml",
    "surefire-html",
    "cargo-test-txt",
    "go-test-ndjson",
    "go-test-json",
    "rspec-json",
    "rspec-html",
    # linters and analysers
    "eslint-json",
    "eslint-txt",
    "tsc-txt",
    "mypy-ndjson",
    "mypy-txt",
    "mypy-json",
    "ruff-txt",
    "flake8-txt",
    "clippy-ndjson",
    "clippy-json",
    "clippy-txt",
    "golangci-lint-json",
    "checkstyle-xml",
    "checkstyle-json",
    "checkstyle-sarif-json",
    "spotbugs-xml",
    "spotbugs-json",
    # formatters
    "rustfmt-txt",
    "gofmt-txt",
    "isort-txt",
    "black-txt",
    # sentinels
    "binary",
    "unknown",
]
OriginalFormat = Literal["json", "xml", "html", "txt", "binary"]

ARTIFACT_TYPES: tuple[str, ...] = get_args(ArtifactType)
SENTINEL_TYPES: frozenset[str] = frozenset({"binary", "unknown"})


@dataclass(frozen=True)
class ArtifactDescription:
    type: str
    file_extension: str
    short_description: str
    tool_url: str | None = None
    format_url: str | None = None
    parsing_guide: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "artifactType": self.type,
            "fileExtension": self.file_extension,
            "shortDescription": self.short_description,
            "toolUrl": self.tool_url,
            "formatUrl": self.format_url,
            "parsingGuide": self.parsing_guide,
        }


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    error: str | None = None
    description: ArtifactDescription | None = None

    def __post_init__(self) -> None:
        if self.valid == (self.error is not None):
            raise ValueError("ValidationResult.error must be set iff valid is False")

    @classmethod
    def ok(cls, description: ArtifactDescription | None = None) -> ValidationResult:
        return cls(valid=True, description=description)

    @classmethod
    def fail(cls, error: str) -> ValidationResult:
        return cls(valid=False, error=error)

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"valid": self.valid}
        if self.error is not None:
            d["error"] = self.error
        if self.description is not None:
            d["description"] = self.description.to_dict()
        return d


@dataclass(frozen=True)
class DetectionResult:
    detected_type: str
    original_format: OriginalFormat
    is_binary: bool
    artifact: ArtifactDescription | None = None
    validation: ValidationResult | None = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "detectedType": self.detected_type,
            "originalFormat": self.original_format,
            "isBinary": self.is_binary,
        }
        if self.artifact is not None:
            d["artifact"] = self.artifact.to_dict()
        if self.validation is not None:
            d["validationResult"] = self.validation.to_dict()
        return d


@dataclass(frozen=True)
class ExtractorConfig:
    """Caller overrides for log section scanning."""

    start_marker: re.Pattern[str] | None = None
    end_marker: re.Pattern[str] | None = None
    include_end_marker: bool = True

    @classmethod
    def from_strings(
        cls,
        start: str | None = None,
        end: str | None = None,
        include_end_marker: bool = True,
    ) -> ExtractorConfig:
        """Compile user-supplied patterns; raises ``re.error`` on bad input."""
        return cls(
            start_marker=re.compile(start) if start else None,
            end_marker=re.compile(end) if end else None,
            include_end_marker=include_end_marker,
        )


@dataclass(frozen=True)
class ExtractionResult:
    content: str
    effective_type: str
    description: ArtifactDescription | None = field(default=None, compare=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "content": self.content,
            "effectiveType": self.effective_type,
            "artifact": self.description.to_dict() if self.description else None,
        }
