from __future__ import annotations

from buildsniff.validators.base import InvalidArtifact, load_json, require_object, validator


@validator
def validate_rspec_json(content: str) -> None:
    data = require_object(load_json(content))
    if not isinstance(data.get("examples"), list):
        raise InvalidArtifact("Missing or invalid examples array")
    if not isinstance(data.get("summary"), dict):
        raise InvalidArtifact("Missing or invalid summary object")


@validator
def validate_rspec_html(content: str) -> None:
    if "<html" not in content.lower():
        raise InvalidArtifact("Not valid HTML format")
    if "RSpec" not in content:
        raise InvalidArtifact("Missing RSpec marker")
