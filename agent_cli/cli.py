"""Command-line flags."""

import argparse
from typing import Sequence


def split_names(values: list[str] | None) -> list[str] | None:
    """Flatten repeated flags and comma-separated values into one list of names."""
    if values is None:
        return None
    names: list[str] = []
    for value in values:
        names.extend(part.strip() for part in value.split(",") if part.strip())
    return names


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="agent-cli",
        description="Command-line agent with workspace and user extensions",
    )
    parser.add_argument(
        "--extensions", "-e",
        action="extend",
        nargs="+",
        default=None,
        metavar="NAME",
        help="Use only these extensions (comma-separated or repeated). 'none' disables all",
    )
    parser.add_argument(
        "--enable-extension",
        action="extend",
        nargs="+",
        default=None,
        metavar="NAME",
        help="Enable extensions that are disabled by default in their manifest",
    )
    parser.add_argument(
        "--list-extensions", "-l",
        action="store_true",
        help="List discovered extensions and exit",
    )
    parser.add_argument(
        "--workspace",
        default=None,
        help="Workspace directory (default: current dir)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging to the console",
    )
    return parser


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    args = build_parser().parse_args(argv)
    args.extensions = split_names(args.extensions)
    args.enable_extension = split_names(args.enable_extension)
    return args
