"""Read-only lookup of human-facing artifact descriptions."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator, Mapping

import yaml

from buildsniff.domain.models import ArtifactDescription

logger = logging.getLogger(__name__)

DEFAULT_DESCRIPTIONS_PATH = Path(__file__).with_name("artifact_descriptions.yml")


class DescriptionCatalog:
    """Static table of ``ArtifactDescription`` keyed by artifact type.

    Built once (see ``buildsniff.core.containers``) and handed to whoever
    needs it. A missing key is not an error: ``get`` returns ``None``.
    """

    def __init__(self, descriptions: Mapping[str, ArtifactDescription]):
        self._by_type = dict(descriptions)

    @classmethod
    def load(cls, path: Path | str | None = None) -> DescriptionCatalog:
        p = Path(path) if path else DEFAULT_DESCRIPTIONS_PATH
        raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
        if not isinstance(raw, dict):
            raise ValueError(f"{p}: expected a mapping of artifact types")

        descriptions = {}
        for type_, data in raw.items():
            data = data or {}
            descriptions[type_] = ArtifactDescription(
                type=type_,
                file_extension=data.get("fileExtension", "other"),
                short_description=(data.get("shortDescription") or "").strip(),
                tool_url=data.get("toolUrl"),
                format_url=data.get("formatUrl"),
                parsing_guide=data.get("parsingGuide"),
            )
        logger.debug("Loaded %d artifact descriptions from %s", len(descriptions), p)
        return cls(descriptions)

    def get(self, artifact_type: str) -> ArtifactDescription | None:
        return self._by_type.get(artifact_type)

    def types(self) -> list[str]:
        return sorted(self._by_type)

    def __contains__(self, artifact_type: object) -> bool:
        return artifact_type in self._by_type

    def __iter__(self) -> Iterator[ArtifactDescription]:
        return iter(self._by_type.values())

    def __len__(self) -> int:
        return len(self._by_type)
