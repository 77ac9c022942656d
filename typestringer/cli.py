"""CLI entrypoint for typestringer."""

from __future__ import annotations

import argparse
import contextlib
import os
import sys
from pathlib import Path
from typing import Any, Dict, TextIO

from .config import DEFAULT_HEADER, ConfigError, FileConfig, GeneratorConfig, load_config
from .loader import LoadError
from .logging import configure_logging, get_logger
from .orchestrator import GenerationError, Orchestrator

logger = get_logger("cli")


def _add_verbose_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Increase log verbosity for troubleshooting.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="typestringer",
        description="Generate a __str__ stub for every type declared in Python packages.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "--log-file",
        type=Path,
        metavar="PATH",
        help="Also write debug logs to PATH.",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Discard the diagnostics trace normally written to stderr.",
    )
    parser.add_argument(
        "patterns",
        nargs="+",
        metavar="PATTERN",
        help="Package directory, source file, glob or dotted import path.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=Path("."),
        help="Path to .typestringer.yml or its directory (defaults to current directory).",
    )
    parser.add_argument(
        "--include",
        action="append",
        default=[],
        metavar="REGEX",
        help="Only generate types matching REGEX. May be repeated.",
    )
    parser.add_argument(
        "--ignore",
        action="append",
        default=[],
        metavar="REGEX",
        help="Skip types matching REGEX; wins over --include. May be repeated.",
    )
    parser.add_argument(
        "--format",
        dest="stub_format",
        help="Stub template with two replacement fields, both receiving the type name.",
    )
    parser.add_argument("--header", help="Text written at the top of every generated file.")
    parser.add_argument(
        "--no-header",
        action="store_true",
        help="Do not write any header.",
    )
    parser.add_argument(
        "--preamble",
        help="Text written after the package clause, e.g. imports.",
    )
    parser.add_argument(
        "--package-format",
        help="Package clause template; the operand is the package name.",
    )
    parser.add_argument(
        "--import-format",
        help="Import template written per type; the operands are the module and the type name.",
    )
    parser.add_argument(
        "--filename-format",
        help="Generated file name template; the operand is the package name.",
    )
    parser.add_argument(
        "--no-package",
        action="store_true",
        help="Do not write the package clause.",
    )
    parser.add_argument(
        "--output",
        metavar="PATH",
        help="Write every package into PATH instead of per-package files ('-' for stdout).",
    )
    return parser


def _with_newline(value: str) -> str:
    return value if value.endswith("\n") else f"{value}\n"


def _build_config(
    args: argparse.Namespace,
    file_config: FileConfig,
    *,
    output: TextIO | None,
    diagnostic_output: TextIO | None,
) -> GeneratorConfig:
    options: Dict[str, Any] = {"header": DEFAULT_HEADER}
    options.update(file_config.options())

    if args.stub_format is not None:
        options["stub_format"] = _with_newline(args.stub_format)
    if args.header is not None:
        options["header"] = _with_newline(args.header)
    if args.no_header:
        options["header"] = None
    for key in ("preamble", "package_format", "import_format", "filename_format"):
        value = getattr(args, key)
        if value is not None:
            options[key] = value
    if args.no_package:
        options["no_package"] = True
    if output is not None:
        options["output"] = output
        options["no_close"] = True

    return GeneratorConfig(
        patterns=tuple(args.patterns),
        includes=[*file_config.includes, *args.include],
        ignores=[*file_config.ignores, *args.ignore],
        diagnostic_output=diagnostic_output,
        **options,
    )


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for typestringer."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file)

    with contextlib.ExitStack() as stack:
        diagnostic_output: TextIO | None = None
        if args.quiet:
            diagnostic_output = stack.enter_context(open(os.devnull, "w", encoding="utf-8"))

        output: TextIO | None = None
        if args.output == "-":
            output = sys.stdout
        elif args.output:
            try:
                output = stack.enter_context(
                    open(args.output, "w", encoding="utf-8", newline="\n")
                )
            except OSError as exc:
                parser.exit(1, f"typestringer: cannot open output: {exc}\n")

        try:
            file_config = load_config(args.config)
            config = _build_config(
                args, file_config, output=output, diagnostic_output=diagnostic_output
            )
        except ConfigError as exc:
            parser.exit(1, f"typestringer: {exc}\n")

        try:
            Orchestrator(config).generate()
        except LoadError as exc:
            parser.exit(1, f"typestringer: {exc}\n")
        except GenerationError as exc:
            details = "".join(f"  {error}\n" for error in exc.exceptions)
            parser.exit(1, f"typestringer: {exc.message}\n{details}")
        logger.debug("Generation finished for %d patterns", len(config.patterns))


if __name__ == "__main__":
    main(sys.argv[1:])
