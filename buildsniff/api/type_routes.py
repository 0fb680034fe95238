from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from buildsniff.capabilities.base import ArtifactCapabilities
from buildsniff.core.containers import build_artifact_service

router = APIRouter(prefix="/api/types", tags=["types"])

_artifact_service = build_artifact_service()


# ── Response schemas ──────────────────────────────────────────────
class TypeCapabilities(BaseModel):
    """Which operations are legal for one artifact type."""

    type: str
    supportsAutoDetection: bool
    hasValidator: bool
    hasExtractor: bool
    isJSON: bool
    canConvertToJSON: bool
    normalizesTo: str | None = None
    artificialType: bool


class TypeDetail(TypeCapabilities):
    description: dict[str, Any] | None = Field(
        None, description="Tool URL, format URL and parsing guide, when available."
    )


def _capabilities(artifact_type: str, caps: ArtifactCapabilities) -> dict[str, Any]:
    return {
        "type": artifact_type,
        "supportsAutoDetection": caps.supports_auto_detection,
        "hasValidator": caps.validator is not None,
        "hasExtractor": caps.extract is not None,
        "isJSON": caps.is_json,
        "canConvertToJSON": caps.can_convert_to_json,
        "normalizesTo": caps.normalizes_to,
        "artificialType": caps.artificial_type,
    }


# ── Endpoints ─────────────────────────────────────────────────────
@router.get(
    "",
    response_model=list[TypeCapabilities],
    summary="List artifact types",
    response_description="Every registered type with its capabilities",
)
def list_types() -> list[dict[str, Any]]:
    registry = _artifact_service.registry
    return [_capabilities(t, registry[t]) for t in _artifact_service.list_types()]


@router.get("/{artifact_type}", response_model=TypeDetail, summary="Describe one artifact type")
def get_type(artifact_type: str) -> dict[str, Any]:
    caps = _artifact_service.registry.get(artifact_type)
    if caps is None:
        raise HTTPException(status_code=404, detail=f"Unknown artifact type: {artifact_type}")
    description = _artifact_service.describe(artifact_type)
    return {
        **_capabilities(artifact_type, caps),
        "description": description.to_dict() if description else None,
    }
