from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from buildsniff.domain.errors import RegistryError
from buildsniff.domain.models import ExtractorConfig, ValidationResult

ValidatorFn = Callable[[str], ValidationResult]
ExtractFn = Callable[[str, str, Optional[ExtractorConfig]], Optional[str]]
NormalizeFn = Callable[[Path], Optional[str]]


@dataclass(frozen=True)
class ArtifactCapabilities:
    """What may be done with one artifact type.

    ``normalize`` turns a file of this type into JSON text of type
    ``normalizes_to``. Artificial types only exist as such targets.
    """

    supports_auto_detection: bool = False
    validator: ValidatorFn | None = None
    extract: ExtractFn | None = None
    normalize: NormalizeFn | None = None
    normalizes_to: str | None = None
    artificial_type: bool = False
    is_json: bool = False

    def __post_init__(self) -> None:
        if self.is_json and self.normalize is not None:
            raise RegistryError("JSON types must not declare a normalizer")
        if (self.normalize is None) != (self.normalizes_to is None):
            raise RegistryError("normalize and normalizes_to must be set together")
        if self.artificial_type and (self.supports_auto_detection or self.validator is not None):
            raise RegistryError("artificial types cannot be auto-detected or validated")

    @property
    def can_convert_to_json(self) -> bool:
        return self.is_json or self.normalize is not None
