"""File selection and per-file processing for the command line.

The engine works on text; this module reads and writes files, applies the
policy layer and turns operational failures into per-file results so one bad
file does not stop a run.
"""

from __future__ import annotations

import difflib
import fnmatch
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from typing import TYPE_CHECKING

from docsniff._shared.logging import get_logger, with_fields
from docsniff.engine import check_text, fix_text
from docsniff.errors import DocsniffError, SourceReadError
from docsniff.models import Severity

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from docsniff.config import LinterConfig
    from docsniff.models import Violation
    from docsniff.policy import PolicyEngine

__all__ = [
    "FileResult",
    "RunMode",
    "iter_source_files",
    "process_file",
    "read_source",
    "unified_diff",
    "write_source",
]

LOGGER = get_logger(__name__)


class RunMode(StrEnum):
    """What :func:`process_file` does with a file."""

    CHECK = "check"
    FIX = "fix"
    DIFF = "diff"


@dataclass(slots=True)
class FileResult:
    """Outcome of processing one file."""

    path: str
    violations: list[Violation] = field(default_factory=list)
    original: str = ""
    text: str = ""
    fixed_count: int = 0
    passes: int = 0
    converged: bool = True
    written: bool = False
    error: DocsniffError | None = None

    @property
    def changed(self) -> bool:
        return self.text != self.original

    @property
    def error_count(self) -> int:
        return sum(1 for violation in self.violations if violation.severity is Severity.ERROR)

    @property
    def warning_count(self) -> int:
        return sum(1 for violation in self.violations if violation.severity is Severity.WARNING)


def _is_excluded(relative: str, patterns: Iterable[str]) -> bool:
    return any(fnmatch.fnmatch(relative, pattern) for pattern in patterns)


def iter_source_files(paths: Iterable[Path], config: LinterConfig) -> Iterator[Path]:
    """Yield the files to lint below ``paths``.

    Explicit files are always yielded. Directories are walked recursively and
    contribute the files whose suffix is one of ``config.extensions`` and whose
    path relative to the directory matches none of ``config.exclude``.

    Raises
    ------
    SourceReadError
        If a path does not exist.
    """
    seen: set[Path] = set()
    for root in paths:
        if root.is_file():
            candidates: Iterable[Path] = [root]
        elif root.is_dir():
            candidates = (
                candidate
                for candidate in sorted(root.rglob("*"))
                if candidate.is_file()
                and candidate.suffix.lstrip(".").lower() in config.extensions
                and not _is_excluded(candidate.relative_to(root).as_posix(), config.exclude)
            )
        else:
            message = f"Path does not exist: {root}"
            raise SourceReadError(message, context={"path": str(root)})
        for candidate in candidates:
            if candidate not in seen:
                seen.add(candidate)
                yield candidate


def read_source(path: Path) -> str:
    """Return the text of ``path`` with its line endings untouched.

    Raises
    ------
    SourceReadError
        If the file cannot be read or is not UTF-8.
    """
    try:
        with path.open(encoding="utf-8", newline="") as handle:
            return handle.read()
    except (OSError, UnicodeDecodeError) as exc:
        message = f"Cannot read {path}: {exc}"
        raise SourceReadError(message, cause=exc, context={"path": str(path)}) from exc


def write_source(path: Path, text: str) -> None:
    """Write ``text`` to ``path`` without translating line endings.

    Raises
    ------
    SourceReadError
        If the file cannot be written.
    """
    try:
        with path.open("w", encoding="utf-8", newline="") as handle:
            handle.write(text)
    except OSError as exc:
        message = f"Cannot write {path}: {exc}"
        raise SourceReadError(message, cause=exc, context={"path": str(path)}) from exc


def unified_diff(path: str, before: str, after: str) -> str:
    """Return a unified diff between ``before`` and ``after``."""
    return "".join(
        difflib.unified_diff(
            before.splitlines(keepends=True),
            after.splitlines(keepends=True),
            fromfile=f"a/{path}",
            tofile=f"b/{path}",
        )
    )


def process_file(
    path: Path,
    config: LinterConfig,
    policy: PolicyEngine,
    *,
    mode: RunMode = RunMode.CHECK,
    dry_run: bool = False,
) -> FileResult:
    """Lint or fix one file and apply ``policy`` to what remains.

    Parameters
    ----------
    path : Path
        File to process.
    config : LinterConfig
        Active configuration.
    policy : PolicyEngine
        Overrides and allowlist applied to the remaining violations.
    mode : RunMode, optional
        ``CHECK`` reports only; ``FIX`` and ``DIFF`` run the fixer.
    dry_run : bool, optional
        In ``FIX`` mode, compute the fixes without writing the file.

    Returns
    -------
    FileResult
        Result for the file. Read, write and tokenize failures are stored in
        :attr:`FileResult.error` instead of being raised.
    """
    display = path.as_posix()
    logger = with_fields(LOGGER, operation=str(mode), path=display)
    result = FileResult(path=display)
    try:
        result.original = read_source(path)
        if mode is RunMode.CHECK:
            result.text = result.original
            violations = check_text(result.original, config)
        else:
            outcome = fix_text(result.original, config)
            result.text = outcome.text
            result.fixed_count = outcome.fixed_count
            result.passes = outcome.passes
            result.converged = outcome.converged
            violations = outcome.violations
            if mode is RunMode.FIX and not dry_run and result.changed:
                write_source(path, result.text)
                result.written = True
    except DocsniffError as exc:
        logger.warning("Skipping %s: %s", display, exc.message, extra={"status": "error"})
        result.error = exc
        return result
    result.violations = policy.apply(display, violations)
    logger.debug(
        "Processed %s: %s errors, %s warnings, %s fixes",
        display,
        result.error_count,
        result.warning_count,
        result.fixed_count,
    )
    return result
