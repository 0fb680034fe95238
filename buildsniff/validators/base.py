from __future__ import annotations

import functools
import json
from typing import Any, Callable

from buildsniff.domain.models import ValidationResult

Validator = Callable[[str], ValidationResult]


class InvalidArtifact(Exception):
    """Raised inside a validator to short-circuit with a failure message."""


def load_json(content: str) -> Any:
    try:
        return json.loads(content)
    except (ValueError, RecursionError) as e:
        raise InvalidArtifact(f"Invalid JSON: {e}") from e


def require_object(data: Any, what: str = "Root object expected") -> dict[str, Any]:
    if not isinstance(data, dict):
        raise InvalidArtifact(what)
    return data


def validator(fn: Callable[[str], None]) -> Validator:
    """Turn a checker that raises ``InvalidArtifact`` into a ``Validator``."""

    @functools.wraps(fn)
    def run(content: str) -> ValidationResult:
        try:
            fn(content)
        except InvalidArtifact as e:
            return ValidationResult.fail(str(e))
        return ValidationResult.ok()

    return run
