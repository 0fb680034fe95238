"""Single source of truth for which operations are legal for which type."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Mapping, Optional

from buildsniff.capabilities.base import ArtifactCapabilities
from buildsniff.converters.checkstyle_xml import extract_checkstyle_xml
from buildsniff.converters.jest_html import extract_jest_json
from buildsniff.converters.ndjson import (
    convert_mypy_text_to_ndjson,
    normalize_ndjson,
    normalize_ndjson_file,
)
from buildsniff.converters.pytest_html import extract_pytest_json
from buildsniff.converters.spotbugs_xml import extract_spotbugs_xml
from buildsniff.domain.errors import ConversionError, RegistryError
from buildsniff.domain.models import ARTIFACT_TYPES, ExtractorConfig
from buildsniff.extractors.tools import extract_linter_output
from buildsniff.validators import go, java, javascript, python, ruby, rust

logger = logging.getLogger(__name__)


def extract_linter_text(
    artifact_type: str, content: str, config: Optional[ExtractorConfig] = None
) -> str | None:
    return extract_linter_output(artifact_type, content, config)


def _report_normalizer(converter, artifact_type: str):
    def normalize(path: Path) -> str | None:
        try:
            report = converter(path)
        except ConversionError as e:
            logger.warning("%s", e, extra={"artifact_type": artifact_type})
            return None
        return json.dumps(report, indent=2) if report is not None else None

    normalize.__name__ = f"normalize_{artifact_type.replace('-', '_')}"
    return normalize


def _ndjson_normalizer(artifact_type: str):
    def normalize(path: Path) -> str | None:
        try:
            return normalize_ndjson_file(path)
        except OSError as e:
            logger.warning("Cannot read %s: %s", path, e, extra={"artifact_type": artifact_type})
            return None

    normalize.__name__ = f"normalize_{artifact_type.replace('-', '_')}"
    return normalize


def normalize_mypy_txt(path: Path) -> str | None:
    try:
        text = path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        logger.warning("Cannot read %s: %s", path, e, extra={"artifact_type": "mypy-txt"})
        return None
    extracted = extract_linter_output("mypy-txt", text)
    if extracted is None:
        return None
    ndjson = convert_mypy_text_to_ndjson(extracted)
    return normalize_ndjson(ndjson) if ndjson else None


_C = ArtifactCapabilities
_ARTIFICIAL = _C(artificial_type=True, is_json=True)

ARTIFACT_TYPE_REGISTRY: Mapping[str, ArtifactCapabilities] = {
    # test frameworks
    "jest-json": _C(supports_auto_detection=True, validator=javascript.validate_jest_json, is_json=True),
    "jest-html": _C(
        supports_auto_detection=True,
        validator=javascript.validate_jest_html,
        normalize=_report_normalizer(extract_jest_json, "jest-html"),
        normalizes_to="jest-json",
    ),
    "jest-txt": _C(validator=javascript.validate_jest_txt, extract=extract_linter_text),
    "playwright-json": _C(
        supports_auto_detection=True, validator=javascript.validate_playwright_json, is_json=True
    ),
    "playwright-html": _C(supports_auto_detection=True, validator=javascript.validate_playwright_html),
    "pytest-json": _C(supports_auto_detection=True, validator=python.validate_pytest_json, is_json=True),
    "pytest-html": _C(
        supports_auto_detection=True,
        validator=python.validate_pytest_html,
        normalize=_report_normalizer(extract_pytest_json, "pytest-html"),
        normalizes_to="pytest-json",
    ),
    "junit-xml": _C(supports_auto_detection=True, validator=java.validate_junit_xml),
    "surefire-html": _C(supports_auto_detection=True, validator=java.validate_surefire_html),
    "cargo-test-txt": _C(validator=rust.validate_cargo_test_txt, extract=extract_linter_text),
    "go-test-ndjson": _C(
        supports_auto_detection=True,
        validator=go.validate_go_test_ndjson,
        normalize=_ndjson_normalizer("go-test-ndjson"),
        normalizes_to="go-test-json",
    ),
    "go-test-json": _ARTIFICIAL,
    "rspec-json": _C(supports_auto_detection=True, validator=ruby.validate_rspec_json, is_json=True),
    "rspec-html": _C(supports_auto_detection=True, validator=ruby.validate_rspec_html),
    # linters and analysers
    "eslint-json": _C(supports_auto_detection=True, validator=javascript.validate_eslint_json, is_json=True),
    "eslint-txt": _C(validator=javascript.validate_eslint_txt, extract=extract_linter_text),
    "tsc-txt": _C(validator=javascript.validate_tsc_txt, extract=extract_linter_text),
    "mypy-ndjson": _C(
        supports_auto_detection=True,
        validator=python.validate_mypy_ndjson,
        normalize=_ndjson_normalizer("mypy-ndjson"),
        normalizes_to="mypy-json",
    ),
    "mypy-txt": _C(
        validator=python.validate_mypy_txt,
        extract=extract_linter_text,
        normalize=normalize_mypy_txt,
        normalizes_to="mypy-json",
    ),
    "mypy-json": _ARTIFICIAL,
    "ruff-txt": _C(validator=python.validate_ruff_txt, extract=extract_linter_text),
    "flake8-txt": _C(
        supports_auto_detection=True, validator=python.validate_flake8_txt, extract=extract_linter_text
    ),
    "clippy-ndjson": _C(
        supports_auto_detection=True,
        validator=rust.validate_clippy_ndjson,
        normalize=_ndjson_normalizer("clippy-ndjson"),
        normalizes_to="clippy-json",
    ),
    "clippy-json": _ARTIFICIAL,
    "clippy-txt": _C(validator=rust.validate_clippy_txt, extract=extract_linter_text),
    "golangci-lint-json": _C(
        supports_auto_detection=True, validator=go.validate_golangci_lint_json, is_json=True
    ),
    "checkstyle-xml": _C(
        supports_auto_detection=True,
        validator=java.validate_checkstyle_xml,
        normalize=_report_normalizer(extract_checkstyle_xml, "checkstyle-xml"),
        normalizes_to="checkstyle-json",
    ),
    "checkstyle-json": _ARTIFICIAL,
    # SARIF is shared by many tools, so the type must be asserted by the caller
    "checkstyle-sarif-json": _C(validator=java.validate_checkstyle_sarif_json, is_json=True),
    "spotbugs-xml": _C(
        supports_auto_detection=True,
        validator=java.validate_spotbugs_xml,
        normalize=_report_normalizer(extract_spotbugs_xml, "spotbugs-xml"),
        normalizes_to="spotbugs-json",
    ),
    "spotbugs-json": _ARTIFICIAL,
    # formatters
    "rustfmt-txt": _C(validator=rust.validate_rustfmt_txt, extract=extract_linter_text),
    "gofmt-txt": _C(validator=go.validate_gofmt_txt, extract=extract_linter_text),
    "isort-txt": _C(validator=python.validate_isort_txt, extract=extract_linter_text),
    "black-txt": _C(validator=python.validate_black_txt, extract=extract_linter_text),
    # sentinels
    "binary": _C(supports_auto_detection=True),
    "unknown": _C(),
}


def check_registry(registry: Mapping[str, ArtifactCapabilities]) -> None:
    """Raise ``RegistryError`` unless the registry covers every type and
    every normalizer targets a registered JSON type."""
    missing = set(ARTIFACT_TYPES) - set(registry)
    extra = set(registry) - set(ARTIFACT_TYPES)
    if missing or extra:
        raise RegistryError(
            f"Registry does not match ArtifactType: missing={sorted(missing)} extra={sorted(extra)}"
        )

    for type_, caps in registry.items():
        if caps.normalizes_to is None:
            continue
        target = registry.get(caps.normalizes_to)
        if target is None or not target.is_json:
            raise RegistryError(f"{type_} normalizes to {caps.normalizes_to!r}, which is not a JSON type")


check_registry(ARTIFACT_TYPE_REGISTRY)


def get_capabilities(artifact_type: str) -> ArtifactCapabilities:
    """Look up a registered type; unknown tags raise ``KeyError``."""
    return ARTIFACT_TYPE_REGISTRY[artifact_type]


def is_registered(artifact_type: str) -> bool:
    return artifact_type in ARTIFACT_TYPE_REGISTRY


def is_json(artifact_type: str) -> bool:
    caps = ARTIFACT_TYPE_REGISTRY.get(artifact_type)
    return bool(caps and caps.is_json)


def can_convert_to_json(artifact_type: str) -> bool:
    caps = ARTIFACT_TYPE_REGISTRY.get(artifact_type)
    return bool(caps and caps.can_convert_to_json)


def list_types() -> list[str]:
    return sorted(ARTIFACT_TYPE_REGISTRY)
