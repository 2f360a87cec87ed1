"""Command-line interface for converting versioned JSON documents.

WHY: Operators occasionally need to migrate stored documents, or produce
an old-version document for a consumer that has not upgraded, without
writing a script. The CLI wires the registry and engine behind a single
command.

HOW: Uses argparse with two subcommands:
  convert:  upgrade each JSON file to the model's current version, then
             emit it at --to (default: the model's default serialize-to
             version)
  describe: print the model's registered version configuration
The model is given as ``module:Class``; importing the module runs its
versioned_model() registrations. Documents go to stdout (or --output-dir),
status messages to stderr.

RULES:
- --model is required and must name a registered versioned model
- Conversion works on document trees only; nothing is bound, so
  converter-added debug fields survive
- Output naming in --output-dir: {stem}-v{version}.json
- Exit code 1 on any versioning, input, or import error
"""

from __future__ import annotations

import argparse
import importlib
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from model_versioning import __version__, config
from model_versioning.core.engine import VersioningEngine
from model_versioning.core.errors import VersioningError
from model_versioning.core.registry import default_registry
from model_versioning.core.tree import DocumentTree


class CLIError(Exception):
    """A user-facing error: printed as ``Error: ...`` with exit code 1."""


def _status(msg: str) -> None:
    """Print a status message to stderr so stdout stays pipeable."""
    print(msg, file=sys.stderr, flush=True)


def load_model(reference: str) -> type:
    """Import a model class from a ``module:Class`` reference.

    WHY: Registration happens when the model's module is imported, so the
    CLI must import it before looking it up.

    RULES:
    - Nested classes are allowed: ``pkg.models:Outer.Inner``
    - Raises CLIError for malformed references, import failures, and
      unregistered classes
    """
    module_name, sep, qualname = reference.partition(":")
    if not sep or not module_name or not qualname:
        raise CLIError("Model must be given as 'module:Class', got '{}'".format(reference))

    try:
        obj = importlib.import_module(module_name)
    except ImportError as exc:
        raise CLIError("Cannot import module '{}': {}".format(module_name, exc)) from exc

    for part in qualname.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError:
            raise CLIError("Module '{}' has no attribute '{}'".format(module_name, qualname)) from None

    if not isinstance(obj, type):
        raise CLIError("'{}' is not a class".format(reference))
    if default_registry.lookup(obj) is None:
        raise CLIError("'{}' is not a registered versioned model".format(reference))
    return obj


def _read_document(path: Path) -> DocumentTree:
    if not path.is_file():
        raise CLIError("File not found: {}".format(path))
    try:
        return DocumentTree.from_json(path.read_bytes())
    except ValueError as exc:
        raise CLIError("Invalid JSON document {}: {}".format(path, exc)) from exc


def _convert(args: argparse.Namespace) -> None:
    model_type = load_model(args.model)
    engine = VersioningEngine()
    model_config = engine.registry.lookup(model_type)

    output_dir = Path(args.output_dir).resolve() if args.output_dir else None
    if output_dir is not None and not output_dir.is_dir():
        raise CLIError("Output directory does not exist: {}".format(output_dir))

    for file_name in args.files:
        path = Path(file_name)
        document = _read_document(path)
        current = engine.to_current(document, model_type)
        emitted = engine.to_version(current, model_type, args.to)
        text = emitted.to_json(indent=args.indent)

        if output_dir is None:
            print(text)
            continue

        version = emitted.get(model_config.property_name)
        target_path = output_dir / "{}-v{}.json".format(path.stem, version)
        target_path.write_text(text + "\n", encoding="utf-8")
        _status("Converted {} -> {}".format(path, target_path))


def _describe(args: argparse.Namespace) -> None:
    model_type = load_model(args.model)
    model_config = default_registry.lookup(model_type)
    summary = {"model": args.model}
    summary.update(model_config.describe())
    print(json.dumps(summary, indent=args.indent))


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser (separate from main() for testability)."""
    parser = argparse.ArgumentParser(
        prog="model-versioning",
        description="Convert versioned JSON documents between model versions.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version="%(prog)s {}".format(__version__),
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    convert = subparsers.add_parser(
        "convert",
        help="Upgrade documents to the current version and emit them at a target version.",
    )
    convert.add_argument("files", nargs="+", help="JSON documents to convert.")
    convert.add_argument(
        "--model",
        required=True,
        help="Versioned model as 'module:Class'.",
    )
    convert.add_argument(
        "--to",
        default=None,
        help="Version to emit (default: the model's default serialize-to version).",
    )
    convert.add_argument(
        "--output-dir",
        default=None,
        help="Write {stem}-v{version}.json files here instead of printing to stdout.",
    )
    convert.add_argument(
        "--indent",
        type=int,
        default=config.DEFAULT_JSON_INDENT,
        help="JSON indentation (default: compact).",
    )
    convert.set_defaults(handler=_convert)

    describe = subparsers.add_parser(
        "describe",
        help="Print a model's registered version configuration.",
    )
    describe.add_argument(
        "--model",
        required=True,
        help="Versioned model as 'module:Class'.",
    )
    describe.add_argument("--indent", type=int, default=2, help="JSON indentation.")
    describe.set_defaults(handler=_describe)

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for ``python -m model_versioning`` and ``model-versioning``.

    RULES:
    - argv=None means use sys.argv (normal CLI invocation)
    - Explicit argv is for testing
    """
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(levelname)s %(name)s: %(message)s",
    )
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        args.handler(args)
    except (CLIError, VersioningError) as e:
        print("Error: {}".format(e), file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
