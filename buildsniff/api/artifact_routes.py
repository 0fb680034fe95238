from __future__ import annotations

import re
from pathlib import PurePath
from typing import Any

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from buildsniff.core.containers import build_artifact_service
from buildsniff.core.util import materialize, suffix_for
from buildsniff.domain.models import ExtractorConfig

router = APIRouter(prefix="/api", tags=["artifacts"])

# Build once at module level
_artifact_service = build_artifact_service()


# ── Request / Response schemas ────────────────────────────────────
class DetectRequest(BaseModel):
    """Request body for content-sniffing detection."""

    filename: str = Field(
        ...,
        description="Original file name; its extension decides the serialization family.",
        json_schema_extra={"examples": ["report.json", "lint.log", "video.mp4"]},
    )
    content: str = Field("", description="File content as text. Ignored for binary extensions.")
    validate_content: bool = Field(
        False,
        alias="validate",
        description="Also run the detected type's validator.",
    )


class DetectResponse(BaseModel):
    detectedType: str
    originalFormat: str
    isBinary: bool
    artifact: dict[str, Any] | None = None
    validationResult: dict[str, Any] | None = None


class ValidateRequest(BaseModel):
    type: str = Field(..., description="Artifact type to validate against, e.g. `jest-json`.")
    content: str


class ValidateResponse(BaseModel):
    valid: bool
    error: str | None = None
    description: dict[str, Any] | None = None


class ExtractRequest(BaseModel):
    """Request body for carving a tool's output out of a CI log."""

    type: str = Field(..., description="Artifact type to extract, e.g. `eslint-txt`.")
    content: str = Field(..., description="Full CI log text.")
    start_marker: str | None = Field(None, description="Regex overriding the default section start.")
    end_marker: str | None = Field(None, description="Regex overriding the default section end.")
    include_end_marker: bool = True
    to_json: bool = Field(False, description="Normalize the extracted artifact to JSON.")


class NormalizeRequest(BaseModel):
    filename: str
    content: str
    type: str | None = Field(None, description="Artifact type. Detected from content when omitted.")


class ExtractionResponse(BaseModel):
    content: str
    effectiveType: str
    artifact: dict[str, Any] | None = None


# ── Endpoints ─────────────────────────────────────────────────────
@router.post(
    "/detect",
    response_model=DetectResponse,
    response_model_exclude_none=True,
    summary="Detect artifact type",
    response_description="Detected type, serialization family and binary flag",
)
def detect(req: DetectRequest) -> dict[str, Any]:
    """Sniff the artifact type of uploaded content.

    The extension of `filename` picks the family (json, xml, html, txt);
    content sniffing narrows the type within it. Binary extensions are
    answered without looking at the content.
    """
    suffix = PurePath(req.filename).suffix or ".txt"
    with materialize(req.content, suffix=suffix) as tmp:
        result = _artifact_service.detect(tmp, validate=req.validate_content)
    return result.to_dict()


@router.post(
    "/validate",
    response_model=ValidateResponse,
    response_model_exclude_none=True,
    summary="Validate content against a type",
)
def validate(req: ValidateRequest) -> dict[str, Any]:
    """Check that `content` is structurally valid for `type`.

    Unknown types are reported as `valid: false`, not as an HTTP error.
    """
    return _artifact_service.validate(req.type, req.content).to_dict()


@router.post(
    "/extract",
    response_model=ExtractionResponse,
    summary="Extract a tool's output from a CI log",
    response_description="Extracted content and its effective type",
)
def extract(req: ExtractRequest) -> dict[str, Any]:
    """Carve one tool's section out of a CI log.

    With `to_json`, the extracted text is normalized into JSON and
    `effectiveType` names the resulting type (e.g. `mypy-txt` → `mypy-json`).
    """
    try:
        config = ExtractorConfig.from_strings(req.start_marker, req.end_marker, req.include_end_marker)
    except re.error as e:
        raise HTTPException(status_code=422, detail=f"Invalid marker regex: {e}")

    if req.to_json:
        result = _artifact_service.extract_artifact_to_json(req.type, req.content, config)
    else:
        result = _artifact_service.extract(req.type, req.content, config)
    if result is None:
        raise HTTPException(status_code=404, detail=f"No {req.type} content found")
    return result.to_dict()


@router.post(
    "/normalize",
    response_model=ExtractionResponse,
    summary="Convert an artifact to JSON",
)
def normalize(req: NormalizeRequest) -> dict[str, Any]:
    """Convert an artifact to its canonical JSON form.

    Native JSON types are returned verbatim; HTML, XML, NDJSON and mypy
    text are converted. Types without a JSON form are rejected with 400.
    """
    suffix = PurePath(req.filename).suffix or (suffix_for(req.type) if req.type else ".txt")
    with materialize(req.content, suffix=suffix) as tmp:
        artifact_type = req.type or _artifact_service.detect(tmp).detected_type
        result = _artifact_service.convert_to_json(artifact_type, tmp)
    if result is None:
        raise HTTPException(status_code=400, detail=f"Cannot convert {artifact_type} to JSON")
    return result.to_dict()
