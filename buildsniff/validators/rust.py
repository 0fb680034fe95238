"""Validators for cargo test, clippy and rustfmt output."""

from __future__ import annotations

import json
import re

from buildsniff.validators.base import InvalidArtifact, validator

CLIPPY_REASONS = frozenset({"compiler-message", "compiler-artifact", "build-script-executed", "build-finished"})


@validator
def validate_cargo_test_txt(content: str) -> None:
    if not re.search(r"running \d+ tests?", content):
        raise InvalidArtifact("Missing 'running N tests' header")
    if not re.search(r"test result: (ok|FAILED)\.", content):
        raise InvalidArtifact("Missing 'test result:' summary")


@validator
def validate_clippy_ndjson(content: str) -> None:
    saw_json = False
    for line in content.splitlines():
        line = line.strip()
        if not line.startswith("{"):
            continue
        try:
            obj = json.loads(line)
        except (ValueError, RecursionError):
            continue
        saw_json = True
        if isinstance(obj, dict) and obj.get("reason") in CLIPPY_REASONS:
            return
    if not saw_json:
        raise InvalidArtifact("No JSON lines found")
    raise InvalidArtifact("No cargo message with a known 'reason' field")


@validator
def validate_clippy_txt(content: str) -> None:
    if not re.search(r"^(warning|error)(\[[\w:]+\])?:\s", content, re.MULTILINE):
        raise InvalidArtifact("No clippy warning or error lines found")
    if not re.search(r"-->\s+\S+\.rs:\d+:\d+", content):
        raise InvalidArtifact("No Rust source span ('--> file.rs:line:col') found")


@validator
def validate_rustfmt_txt(content: str) -> None:
    # `cargo fmt --check` prints nothing when the tree is formatted
    if not content.strip():
        return
    if not re.search(r"Diff\s+in\s+\S+\.rs\s+at\s+line", content, re.IGNORECASE):
        raise InvalidArtifact("Missing rustfmt 'Diff in <file>.rs at line' markers")
