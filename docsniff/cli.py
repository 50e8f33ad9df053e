"""Command line entry point for docsniff.

Subcommands
-----------
``check``
    Report violations; exit 1 when an error-severity violation remains.
``fix``
    Fix to convergence and write the files (``--dry-run`` skips writing).
``diff``
    Print a unified diff of the fixes without writing.
``codes``
    List every violation code with its severity and fixability.
"""

from __future__ import annotations

import argparse
import enum
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING, cast
from uuid import uuid4

from docsniff._shared.error_codes import format_error_message
from docsniff._shared.logging import CorrelationContext, get_logger, setup_logging, with_fields
from docsniff._shared.problem_details import render_problem
from docsniff.config import load_config_with_selection
from docsniff.errors import (
    AllowlistError,
    ConfigurationError,
    DocsniffError,
    ErrorCode,
    SourceReadError,
)
from docsniff.models import CODE_CATALOG
from docsniff.policy import PolicyEngine, load_allowlist
from docsniff.report import build_run_report, render_codes, render_json, render_text
from docsniff.runner import RunMode, iter_source_files, process_file, unified_diff
from docsniff.settings import load_settings

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from docsniff.policy import PolicyException
    from docsniff.runner import FileResult
    from docsniff.settings import RuntimeSettings

    CommandHandler = Callable[[argparse.Namespace, RuntimeSettings], int]

__all__ = ["ExitStatus", "build_parser", "main"]

LOGGER = get_logger(__name__)
CLI_COMMAND = "docsniff"


class ExitStatus(enum.IntEnum):
    """Standardised exit codes for CLI subcommands."""

    SUCCESS = 0
    VIOLATION = 1
    CONFIG = 2
    ERROR = 3


def _error(code: str, message: str) -> None:
    print(format_error_message(code, message), file=sys.stderr)


def _fail(args: argparse.Namespace, code: str, exc: DocsniffError) -> None:
    """Report ``exc`` on stderr and, in JSON mode, as Problem Details on stdout."""
    _error(code, exc.message)
    if getattr(args, "json_output", False):
        instance = f"urn:docsniff:cli:{args.invoked_subcommand}"
        sys.stdout.write(render_problem(exc.to_problem_details(instance=instance)) + "\n")


def _command_codes(args: argparse.Namespace, settings: RuntimeSettings) -> int:
    del args, settings
    sys.stdout.write(render_codes(CODE_CATALOG))
    return int(ExitStatus.SUCCESS)


def _command_check(args: argparse.Namespace, settings: RuntimeSettings) -> int:
    return _run(args, settings, RunMode.CHECK)


def _command_fix(args: argparse.Namespace, settings: RuntimeSettings) -> int:
    return _run(args, settings, RunMode.FIX)


def _command_diff(args: argparse.Namespace, settings: RuntimeSettings) -> int:
    return _run(args, settings, RunMode.DIFF)


def _exit_status(mode: RunMode, results: Sequence[FileResult]) -> ExitStatus:
    if any(result.error is not None for result in results):
        return ExitStatus.ERROR
    if any(result.error_count for result in results):
        return ExitStatus.VIOLATION
    if mode is RunMode.DIFF and any(result.changed for result in results):
        return ExitStatus.VIOLATION
    return ExitStatus.SUCCESS


def _run(args: argparse.Namespace, settings: RuntimeSettings, mode: RunMode) -> int:
    env = {"DOCSNIFF_CONFIG": str(settings.config_path)} if settings.config_path else {}
    try:
        config, selection = load_config_with_selection(args.config, env=env)
    except ConfigurationError as exc:
        _fail(args, "DSN-CFG-001", exc)
        return int(ExitStatus.CONFIG)
    LOGGER.info("Active config: %s (%s)", selection.path, selection.source)

    exceptions: list[PolicyException] = []
    if args.allowlist:
        try:
            exceptions = load_allowlist(Path(args.allowlist))
        except AllowlistError as exc:
            _fail(args, "DSN-CFG-002", exc)
            return int(ExitStatus.CONFIG)
    try:
        policy = PolicyEngine(overrides=config.severity_overrides, exceptions=exceptions)
    except ConfigurationError as exc:
        _fail(args, "DSN-CFG-001", exc)
        return int(ExitStatus.CONFIG)

    roots = [Path(raw) for raw in (args.paths or ["."])]
    dry_run = bool(getattr(args, "dry_run", False))
    try:
        results = [
            process_file(path, config, policy, mode=mode, dry_run=dry_run)
            for path in iter_source_files(roots, config)
        ]
    except SourceReadError as exc:
        _fail(args, "DSN-SRC-001", exc)
        return int(ExitStatus.ERROR)

    for result in results:
        if result.error is not None:
            tokenize_failed = result.error.code is ErrorCode.TOKENIZE_FAILED
            code = "DSN-SRC-002" if tokenize_failed else "DSN-SRC-001"
            _error(code, result.error.message)

    if mode is RunMode.DIFF and not args.json_output:
        for result in results:
            if result.changed:
                sys.stdout.write(unified_diff(result.path, result.original, result.text))

    report = build_run_report(
        str(mode),
        results,
        config_source=selection.source,
        config_hash=config.config_hash,
        suppressed=policy.suppressed,
    )
    if args.json_output:
        sys.stdout.write(render_json(report) + "\n")
    else:
        sys.stdout.write(render_text(report))
    return int(_exit_status(mode, results))


def _add_path_argument(subparser: argparse.ArgumentParser) -> None:
    subparser.add_argument(
        "paths",
        nargs="*",
        help="Files or directories to process (default: current directory)",
    )


def _configure_fix_subparser(subparser: argparse.ArgumentParser) -> None:
    subparser.add_argument(
        "--dry-run",
        dest="dry_run",
        action="store_true",
        help="Compute fixes and report them without writing files",
    )


SUBCOMMAND_SPECS: tuple[dict[str, object], ...] = (
    {
        "name": "check",
        "help_text": "Report doc comment violations",
        "handler": _command_check,
        "include_paths": True,
    },
    {
        "name": "fix",
        "help_text": "Fix violations in place until the files converge",
        "handler": _command_fix,
        "include_paths": True,
        "configure": _configure_fix_subparser,
    },
    {
        "name": "diff",
        "help_text": "Show the fixes as a unified diff without writing",
        "handler": _command_diff,
        "include_paths": True,
    },
    {
        "name": "codes",
        "help_text": "List every violation code",
        "handler": _command_codes,
    },
)


def _register_subcommand(
    subparsers: argparse._SubParsersAction[argparse.ArgumentParser],
    spec: dict[str, object],
) -> None:
    name = str(spec["name"])
    subparser = subparsers.add_parser(name, help=str(spec.get("help_text", "")))
    if spec.get("include_paths"):
        _add_path_argument(subparser)
    configure = cast("Callable[[argparse.ArgumentParser], None] | None", spec.get("configure"))
    if configure is not None:
        configure(subparser)
    subparser.set_defaults(func=spec["handler"], invoked_subcommand=name)


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level argument parser.

    Returns
    -------
    argparse.ArgumentParser
        Parser with global options and all subcommands registered.
    """
    parser = argparse.ArgumentParser(
        prog=CLI_COMMAND, description="Lint and fix structured doc comments."
    )
    parser.add_argument("--config", help="Path to docsniff.toml or pyproject.toml")
    parser.add_argument("--allowlist", help="YAML file of allowlisted violations")
    parser.add_argument(
        "--json", dest="json_output", action="store_true", help="Emit a JSON report"
    )
    parser.add_argument(
        "--log-level",
        dest="log_level",
        choices=("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"),
        type=str.upper,
        help="Override DOCSNIFF_LOG_LEVEL",
    )
    subparsers = parser.add_subparsers(dest="subcommand")
    for spec in SUBCOMMAND_SPECS:
        _register_subcommand(subparsers, spec)
    return parser


def main(argv: list[str] | None = None) -> int:
    """Execute the docsniff CLI.

    Parameters
    ----------
    argv : list[str] | None, optional
        Command-line arguments. If None, uses sys.argv.

    Returns
    -------
    int
        Exit code as defined by :class:`ExitStatus`.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    if not hasattr(args, "func"):
        parser.print_help()
        return int(ExitStatus.CONFIG)
    try:
        settings = load_settings()
    except ConfigurationError as exc:
        _fail(args, "DSN-CFG-003", exc)
        return int(ExitStatus.CONFIG)
    level = settings.level_number
    if args.log_level is not None:
        level = logging.getLevelNamesMapping()[args.log_level]
    setup_logging(level, json_format=settings.log_json)

    correlation_id = str(uuid4())
    operation_logger = with_fields(
        LOGGER, command=CLI_COMMAND, subcommand=args.invoked_subcommand
    )
    handler = cast("CommandHandler", args.func)
    with CorrelationContext(correlation_id):
        operation_logger.debug("Starting docsniff command", extra={"status": "start"})
        exit_code = handler(args, settings)
        operation_logger.debug(
            "Finished docsniff command", extra={"status": ExitStatus(exit_code).name.lower()}
        )
    return exit_code


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
