#!/usr/bin/env python3
"""buildsniff command line.

    buildsniff detect report.json --validate
    buildsniff validate eslint-txt lint.log
    buildsniff extract mypy-txt ci.log --to-json
    buildsniff normalize results.html --output results.json

``-`` reads the input from stdin. Exit status is 0 on success and 2 on
validation or runtime failure.
"""

from __future__ import annotations

import argparse
import json
import re
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Sequence

from buildsniff.core.config import APP_VERSION
from buildsniff.core.containers import build_artifact_service
from buildsniff.core.logging import setup_logging
from buildsniff.core.util import materialize
from buildsniff.domain.models import ArtifactDescription, ExtractionResult, ExtractorConfig
from buildsniff.services.artifact_service import ArtifactService

EXIT_OK = 0
EXIT_FAILURE = 2


class CliError(Exception):
    pass


def guess_suffix(content: str) -> str:
    """Extension for stdin content, so detection can pick a format family."""
    head = content.lstrip()[:512].lower()
    if head.startswith(("{", "[")):
        return ".json"
    if head.startswith("<?xml") or head.startswith(("<testsuite", "<checkstyle", "<bugcollection")):
        return ".xml"
    if head.startswith(("<!doctype html", "<html")):
        return ".html"
    return ".txt"


def read_input(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    try:
        return Path(path).read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        raise CliError(f"Cannot read {path}: {e.strerror or e}") from e


@contextmanager
def input_path(path: str) -> Iterator[Path]:
    """A real file for ``path``; stdin is spooled to a temporary one."""
    if path != "-":
        p = Path(path)
        if not p.exists():
            raise CliError(f"File not found: {path}")
        yield p
        return
    content = sys.stdin.read()
    with materialize(content, suffix=guess_suffix(content)) as tmp:
        yield tmp


def write_output(content: str, output: str | None) -> None:
    if output:
        Path(output).write_text(content if content.endswith("\n") else content + "\n", encoding="utf-8")
        return
    sys.stdout.write(content if content.endswith("\n") else content + "\n")


def print_description(desc: ArtifactDescription | None) -> None:
    if desc is None:
        return
    print(file=sys.stderr)
    print(f"Parsing Guide ({desc.tool_url or 'unknown'}):", file=sys.stderr)
    print((desc.parsing_guide or "").rstrip(), file=sys.stderr)


# ── commands ──────────────────────────────────────────────────────
def cmd_detect(service: ArtifactService, args: argparse.Namespace) -> int:
    with input_path(args.file) as p:
        result = service.detect(p, validate=args.validate)

    if args.json:
        data = result.to_dict()
        if not args.show_description:
            data.pop("artifact", None)
        write_output(json.dumps(data, indent=2), None)
    else:
        print(f"Detected Type: {result.detected_type}")
        print(f"Format: {result.original_format}")
        print(f"Binary: {'yes' if result.is_binary else 'no'}")
        if args.show_description and result.artifact is not None:
            print()
            print(f"Tool: {result.artifact.tool_url or 'unknown'}")
            print(f"Format: .{result.artifact.file_extension}")
        if result.validation is not None:
            print()
            print(f"Validation: {'Valid' if result.validation.valid else 'Invalid'}")
            if result.validation.error:
                print(f"  {result.validation.error}")
    return EXIT_OK


def cmd_validate(service: ArtifactService, args: argparse.Namespace) -> int:
    content = read_input(args.file)
    result = service.validate(args.type, content)

    if args.json:
        data = result.to_dict()
        if not args.show_description:
            data.pop("description", None)
        write_output(json.dumps(data, indent=2), None)
    elif result.valid:
        print(f"Valid: {args.type}")
    else:
        print(f"Invalid: {args.type}", file=sys.stderr)
        print(f"  {result.error}", file=sys.stderr)

    if result.valid and args.show_description and not args.json:
        print_description(result.description)
    return EXIT_OK if result.valid else EXIT_FAILURE


def cmd_extract(service: ArtifactService, args: argparse.Namespace) -> int:
    try:
        config = ExtractorConfig.from_strings(
            args.start_marker, args.end_marker, include_end_marker=not args.exclude_end_marker
        )
    except re.error as e:
        raise CliError(f"Invalid marker regex: {e}") from e
    has_overrides = bool(args.start_marker or args.end_marker or args.exclude_end_marker)

    log_text = read_input(args.log)
    if args.to_json:
        result = service.extract_artifact_to_json(args.type, log_text, config if has_overrides else None)
    else:
        result = service.extract(args.type, log_text, config if has_overrides else None)
    if result is None:
        raise CliError(f"No {args.type} content found in {args.log}")

    if args.validate and not args.to_json:
        validation = service.validate(args.type, result.content)
        if not validation.valid:
            raise CliError(f"Extracted content is not valid {args.type}: {validation.error}")

    _emit_extraction(result, args)
    return EXIT_OK


def cmd_normalize(service: ArtifactService, args: argparse.Namespace) -> int:
    with input_path(args.file) as p:
        artifact_type = args.type or service.detect(p).detected_type
        if artifact_type not in service.registry:
            raise CliError(f"Unknown artifact type: {artifact_type}")
        result = service.convert_to_json(artifact_type, p)
    if result is None:
        raise CliError(f"Cannot normalize {artifact_type} to JSON")

    write_output(result.content, args.output)
    if args.show_description:
        print_description(result.description)
    return EXIT_OK


def cmd_types(service: ArtifactService, args: argparse.Namespace) -> int:
    for t in service.list_types():
        caps = service.registry[t]
        if args.json_only and not caps.can_convert_to_json:
            continue
        flags = []
        if caps.supports_auto_detection:
            flags.append("detect")
        if caps.validator is not None:
            flags.append("validate")
        if caps.extract is not None:
            flags.append("extract")
        if caps.is_json:
            flags.append("json")
        elif caps.normalizes_to:
            flags.append(f"-> {caps.normalizes_to}")
        print(f"{t:24} {' '.join(flags)}")
    return EXIT_OK


def cmd_serve(service: ArtifactService, args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run("buildsniff.main:app", host=args.host, port=args.port)
    return EXIT_OK


def _emit_extraction(result: ExtractionResult, args: argparse.Namespace) -> None:
    if args.json:
        data = result.to_dict()
        if not args.show_description:
            data.pop("artifact", None)
        write_output(json.dumps(data, indent=2), args.output)
    else:
        write_output(result.content, args.output)
    if args.show_description:
        print_description(result.description)


# ── parser ────────────────────────────────────────────────────────
def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="buildsniff",
        description="Classify, validate, extract and normalize CI build artifacts.",
    )
    ap.add_argument("--version", action="version", version=f"%(prog)s {APP_VERSION}")
    ap.add_argument("--log-level", default=None, help="Override LOG_LEVEL for this run.")
    sub = ap.add_subparsers(dest="command", required=True)

    p = sub.add_parser("detect", help="Detect the artifact type of a file.")
    p.add_argument("file", help="File to inspect, or - for stdin.")
    p.add_argument("--json", action="store_true", help="Print the result as JSON.")
    p.add_argument("--validate", action="store_true", help="Also validate against the detected type.")
    p.add_argument("--show-description", action="store_true")
    p.set_defaults(func=cmd_detect)

    p = sub.add_parser("validate", help="Validate a file against an artifact type.")
    p.add_argument("type")
    p.add_argument("file", help="File to validate, or - for stdin.")
    p.add_argument("--json", action="store_true")
    p.add_argument("--show-description", action="store_true")
    p.set_defaults(func=cmd_validate)

    p = sub.add_parser("extract", help="Extract a tool's output from a CI log.")
    p.add_argument("type")
    p.add_argument("log", help="CI log file, or - for stdin.")
    p.add_argument("--output", "-o", help="Write to this file instead of stdout.")
    p.add_argument("--json", action="store_true", help="Wrap the result with its effective type.")
    p.add_argument("--to-json", action="store_true", help="Normalize the extracted artifact to JSON.")
    p.add_argument("--validate", action="store_true", help="Fail unless the extracted text validates.")
    p.add_argument("--start-marker", help="Regex that starts the section.")
    p.add_argument("--end-marker", help="Regex that ends the section.")
    p.add_argument("--exclude-end-marker", action="store_true", help="Drop the end marker line.")
    p.add_argument("--show-description", action="store_true")
    p.set_defaults(func=cmd_extract)

    p = sub.add_parser("normalize", help="Convert an artifact to JSON.")
    p.add_argument("file", help="Artifact file, or - for stdin.")
    p.add_argument("--type", help="Artifact type; detected when omitted.")
    p.add_argument("--output", "-o")
    p.add_argument("--show-description", action="store_true")
    p.set_defaults(func=cmd_normalize)

    p = sub.add_parser("types", help="List artifact types and their capabilities.")
    p.add_argument("--json-only", action="store_true", help="Only types that can become JSON.")
    p.set_defaults(func=cmd_types)

    p = sub.add_parser("serve", help="Run the HTTP API.")
    p.add_argument("--host", default="127.0.0.1")
    p.add_argument("--port", type=int, default=8000)
    p.set_defaults(func=cmd_serve)

    return ap


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level or "WARNING")

    service = build_artifact_service()
    try:
        return args.func(service, args)
    except CliError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
