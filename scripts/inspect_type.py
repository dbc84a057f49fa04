#!/usr/bin/env python3
"""Print the marked fields, method names, or a fresh instance of a class."""

from __future__ import annotations

import argparse

from typescope.commands import cli

_FORMAT_CHOICES = ("json", "yaml", "text")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Inspect a Python class")
    parser.add_argument("type", help="Class reference, e.g. package.module:Class")
    parser.add_argument("--marker", help="List fields tagged with this marker kind")
    parser.add_argument(
        "--create",
        nargs="*",
        metavar="ARG",
        help="Construct an instance with the given positional arguments",
    )
    parser.add_argument("--format", choices=_FORMAT_CHOICES, help="Output format for listings")

    args = parser.parse_args(argv)

    cli_args: list[str] = []
    if args.format:
        cli_args.extend(["--format", args.format])

    if args.create is not None:
        cli_args.extend(["create", args.type, *args.create])
    elif args.marker:
        cli_args.extend(["fields", args.type, args.marker])
    else:
        cli_args.extend(["methods", args.type])

    return cli.main(cli_args)


if __name__ == "__main__":  # pragma: no cover - script entry point
    raise SystemExit(main())
