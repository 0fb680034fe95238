from __future__ import annotations

from typing import Mapping

from buildsniff.capabilities.base import ArtifactCapabilities
from buildsniff.capabilities.registry import ARTIFACT_TYPE_REGISTRY
from buildsniff.core.config import settings
from buildsniff.docs.descriptions import DescriptionCatalog
from buildsniff.services.artifact_service import ArtifactService


def build_registry() -> Mapping[str, ArtifactCapabilities]:
    return ARTIFACT_TYPE_REGISTRY


def build_description_catalog() -> DescriptionCatalog:
    """Load the description table once.

    ``DESCRIPTIONS_PATH`` points at an alternate YAML file; the packaged
    ``artifact_descriptions.yml`` is used otherwise.
    """
    return DescriptionCatalog.load(settings.DESCRIPTIONS_PATH)


def build_artifact_service() -> ArtifactService:
    return ArtifactService(build_registry(), build_description_catalog())
