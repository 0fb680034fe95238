from __future__ import annotations

import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from buildsniff.core.config import settings


@contextmanager
def materialize(content: str, suffix: str = ".txt") -> Iterator[Path]:
    """Write ``content`` to a temporary file and yield its path.

    The file is removed when the block exits, whether it returns normally
    or raises.
    """
    fd, name = tempfile.mkstemp(prefix="buildsniff-", suffix=suffix, dir=settings.TMP_DIR)
    path = Path(name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(content)
        yield path
    finally:
        path.unlink(missing_ok=True)


def read_sample(path: Path, size: int | None = None) -> str:
    """Read at most ``size`` bytes from the head of ``path`` as text."""
    limit = size if size is not None else settings.CONTENT_SAMPLE_SIZE
    with path.open("rb") as fh:
        raw = fh.read(limit)
    return raw.decode("utf-8", errors="replace")


def suffix_for(artifact_type: str) -> str:
    """File suffix matching the serialization family named in a type tag."""
    family = artifact_type.rsplit("-", 1)[-1]
    return {
        "json": ".json",
        "ndjson": ".json",
        "xml": ".xml",
        "html": ".html",
    }.get(family, ".txt")
