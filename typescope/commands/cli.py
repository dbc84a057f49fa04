"""typescope command-line interface."""

from __future__ import annotations

import argparse
import ast
import importlib
import json
import sys
from pathlib import Path
from typing import Any, Sequence

import yaml

from typescope.introspection import create_instance, list_marked_fields, list_method_names
from typescope.records import codec
from typescope.telemetry import get_logger
from typescope.utils.config import OUTPUT_FORMATS, OutputSettings, load_config

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[2] / "configs" / "typescope" / "default.yaml"

_LOGGER = get_logger("typescope.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="typescope", description="Inspect and construct Python types")
    parser.add_argument(
        "--config",
        type=Path,
        default=DEFAULT_CONFIG_PATH if DEFAULT_CONFIG_PATH.exists() else None,
        help="Optional path to a typescope configuration YAML file.",
    )
    parser.add_argument(
        "--format",
        choices=OUTPUT_FORMATS,
        help="Output format for name listings (overrides output.format).",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    fields_parser = subparsers.add_parser("fields", help="List fields tagged with a marker")
    fields_parser.add_argument("type", help="Class reference, e.g. package.module:Class")
    fields_parser.add_argument("marker", help="Marker kind reference, e.g. package.module:Id")

    methods_parser = subparsers.add_parser(
        "methods", help="List methods declared on a class and its direct interfaces"
    )
    methods_parser.add_argument("type", help="Class reference, e.g. package.module:Class")

    create_parser = subparsers.add_parser("create", help="Construct an instance of a class")
    create_parser.add_argument("type", help="Class reference, e.g. package.module:Class")
    create_parser.add_argument(
        "args",
        nargs="*",
        metavar="ARG",
        help="Positional arguments; Python literals are evaluated, anything else is a string.",
    )

    product_parser = subparsers.add_parser(
        "product", help="Normalise a product JSON document into canonical form"
    )
    product_parser.add_argument("path", type=Path, help="Path to the product JSON document")

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    try:
        settings = _load_settings(args.config, args.format)
        if args.command == "fields":
            names = list_marked_fields(resolve_reference(args.type), resolve_reference(args.marker))
            print(_render_names(names, settings))
            return 0
        if args.command == "methods":
            print(_render_names(list_method_names(resolve_reference(args.type)), settings))
            return 0
        if args.command == "create":
            target = resolve_reference(args.type)
            instance = create_instance(target, *(_coerce_literal(item) for item in args.args))
            print(repr(instance))
            return 0
        if args.command == "product":
            record = codec.from_json(args.path.read_text(encoding="utf-8"))
            print(codec.to_json(record, indent=settings.indent))
            return 0
    except Exception as exc:
        _LOGGER.error("command %s failed", args.command, exc_info=True)
        print(f"[typescope] error: {exc}", file=sys.stderr)
        return 1

    parser.print_help()
    return 1


def resolve_reference(reference: str) -> Any:
    """Import ``module:QualName`` (or ``module.QualName``) and return the object."""

    module_name, sep, qualname = reference.partition(":")
    if not sep:
        module_name, _, qualname = reference.rpartition(".")
    if not module_name or not qualname:
        raise ValueError(f"reference '{reference}' must look like 'module:QualName'")
    target: Any = importlib.import_module(module_name)
    for part in qualname.split("."):
        try:
            target = getattr(target, part)
        except AttributeError as exc:
            raise ValueError(f"'{module_name}' has no attribute '{qualname}'") from exc
    return target


# ---------------------------------------------------------------------------
# Helpers


def _load_settings(config_path: Path | None, fmt: str | None) -> OutputSettings:
    data = load_config(config_path) if config_path is not None else {}
    settings = OutputSettings.from_mapping(data)
    if fmt is not None:
        settings = OutputSettings(format=fmt, indent=settings.indent)
    return settings


def _render_names(names: Sequence[str], settings: OutputSettings) -> str:
    if settings.format == "json":
        return json.dumps(list(names), indent=settings.indent)
    if settings.format == "yaml":
        return yaml.safe_dump(list(names), default_flow_style=False).rstrip("\n")
    return "\n".join(names)


def _coerce_literal(value: str) -> Any:
    try:
        return ast.literal_eval(value)
    except (ValueError, SyntaxError):
        return value


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())
