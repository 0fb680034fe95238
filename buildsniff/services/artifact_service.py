from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Mapping

from buildsniff.capabilities.base import ArtifactCapabilities
from buildsniff.core.util import materialize, suffix_for
from buildsniff.detectors.type_detector import detect_artifact_type
from buildsniff.docs.descriptions import DescriptionCatalog
from buildsniff.domain.models import (
    ArtifactDescription,
    DetectionResult,
    ExtractionResult,
    ExtractorConfig,
    ValidationResult,
)

logger = logging.getLogger(__name__)


class ArtifactService:
    """
    Orchestrates: detect → validate → extract from log → normalize to JSON.

    Every decision about what is legal for a type is read from the
    capability registry passed in.
    """

    def __init__(
        self,
        registry: Mapping[str, ArtifactCapabilities],
        descriptions: DescriptionCatalog,
    ):
        self.registry = registry
        self.descriptions = descriptions

    def describe(self, artifact_type: str) -> ArtifactDescription | None:
        return self.descriptions.get(artifact_type)

    def list_types(self) -> list[str]:
        return sorted(self.registry)

    # ── detect ────────────────────────────────────────────────────
    def detect(self, path: Path | str, validate: bool = False) -> DetectionResult:
        result = detect_artifact_type(path, validate=validate, descriptions=self.descriptions)
        logger.info(
            "Detected %s as %s",
            Path(path).name,
            result.detected_type,
            extra={"artifact_type": result.detected_type},
        )
        return result

    # ── validate ──────────────────────────────────────────────────
    def validate(self, artifact_type: str, content: str) -> ValidationResult:
        caps = self.registry.get(artifact_type)
        if caps is None:
            return ValidationResult.fail(f"Unknown artifact type: {artifact_type}")
        if caps.validator is None:
            return ValidationResult.fail(f"No validator available for type: {artifact_type}")

        result = caps.validator(content)
        if not result.valid:
            logger.debug("Validation failed: %s", result.error, extra={"artifact_type": artifact_type})
            return result
        return ValidationResult.ok(self.describe(artifact_type))

    # ── extract ───────────────────────────────────────────────────
    def extract_artifact_from_log(
        self,
        artifact_type: str,
        log_text: str,
        config: ExtractorConfig | None = None,
    ) -> str | None:
        """Carve the artifact out of a CI log; ``None`` if nothing matched
        or the type has no extractor."""
        caps = self.registry.get(artifact_type)
        if caps is None or caps.extract is None:
            return None
        return caps.extract(artifact_type, log_text, config)

    def extract(
        self,
        artifact_type: str,
        log_text: str,
        config: ExtractorConfig | None = None,
    ) -> ExtractionResult | None:
        content = self.extract_artifact_from_log(artifact_type, log_text, config)
        if content is None:
            return None
        return ExtractionResult(content, artifact_type, self.describe(artifact_type))

    def extract_artifact_to_json(
        self,
        artifact_type: str,
        log_text: str,
        config: ExtractorConfig | None = None,
    ) -> ExtractionResult | None:
        """Extract (when the type has an extractor), then return JSON text.

        Native JSON is checked and returned verbatim. Other types are
        written to a temporary file for their normalizer and come back
        retargeted to ``normalizes_to``.
        """
        caps = self.registry.get(artifact_type)
        if caps is None:
            return None

        content = log_text
        if caps.extract is not None:
            content = caps.extract(artifact_type, log_text, config)
            if content is None:
                return None

        if caps.is_json:
            try:
                json.loads(content)
            except (ValueError, RecursionError):
                logger.debug("Extracted content is not JSON", extra={"artifact_type": artifact_type})
                return None
            return ExtractionResult(content, artifact_type, self.describe(artifact_type))

        if caps.normalize is None or caps.normalizes_to is None:
            return None

        with materialize(content, suffix=suffix_for(artifact_type)) as tmp:
            normalized = caps.normalize(tmp)
        if normalized is None:
            return None
        return ExtractionResult(normalized, caps.normalizes_to, self.describe(caps.normalizes_to))

    # ── convert ───────────────────────────────────────────────────
    def convert_to_json(self, artifact_type: str, path: Path | str) -> ExtractionResult | None:
        """JSON for the file at ``path``: verbatim for native JSON, through
        the normalizer otherwise, ``None`` when the type cannot become JSON."""
        p = Path(path)
        caps = self.registry.get(artifact_type)
        if caps is None:
            return None

        if caps.is_json:
            try:
                content = p.read_text(encoding="utf-8")
                json.loads(content)
            except (OSError, ValueError, RecursionError) as e:
                logger.warning("Cannot read %s as JSON: %s", p, e, extra={"artifact_type": artifact_type})
                return None
            return ExtractionResult(content, artifact_type, self.describe(artifact_type))

        if caps.normalize is None or caps.normalizes_to is None:
            return None

        normalized = caps.normalize(p)
        if normalized is None:
            return None
        logger.info(
            "Normalized %s to %s",
            p.name,
            caps.normalizes_to,
            extra={"artifact_type": artifact_type},
        )
        return ExtractionResult(normalized, caps.normalizes_to, self.describe(caps.normalizes_to))
