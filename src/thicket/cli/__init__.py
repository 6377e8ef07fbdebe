"""Thicket CLI: compile a site root into a server package.

Entry point registered as ``thicket`` in ``pyproject.toml``::

    [project.scripts]
    thicket = "thicket.cli:main"
"""

import argparse
import sys

from thicket.config import DEFAULT_GEN_PACKAGE, DEFAULT_SERVER_BIND


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``thicket`` command."""
    parser = argparse.ArgumentParser(
        prog="thicket",
        description="Thicket: compile page-resources into a Python site server.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- thicket build ----------------------------------------------------
    build_parser = subparsers.add_parser("build", help="Generate (and compile) a site")
    build_parser.add_argument(
        "-w",
        "--www-root",
        required=True,
        help="Site root holding the page-resources",
    )
    build_parser.add_argument(
        "-o",
        "--output-root",
        default=".",
        help="Directory receiving src/, docroot/ and bin/ (default: .)",
    )
    build_parser.add_argument(
        "-P",
        "--package",
        default=DEFAULT_GEN_PACKAGE,
        help=f"Generated package name (default: {DEFAULT_GEN_PACKAGE})",
    )
    build_parser.add_argument(
        "-b",
        "--bind",
        default=DEFAULT_SERVER_BIND,
        help=f"Server bind address, [host]:port (default: {DEFAULT_SERVER_BIND})",
    )
    build_parser.add_argument(
        "--format",
        action="store_true",
        help="Normalize generated sources with ruff format",
    )
    build_parser.add_argument(
        "--compile",
        action="store_true",
        help="Compile the generated package into bin/<package>-http-server",
    )
    build_parser.add_argument(
        "--mkdir",
        action="store_true",
        help="Create the output root if it does not exist",
    )
    build_parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log every file visited",
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "build":
        from thicket.cli._build import run_build

        run_build(args)
