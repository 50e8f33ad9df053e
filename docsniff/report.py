"""Text and JSON reports for a run.

JSON reports are pydantic models dumped by alias; text reports are rendered
from a Jinja2 template, one ``path:line:column`` line per violation.
"""

from __future__ import annotations

import datetime as _dt
import json
from typing import TYPE_CHECKING

from jinja2 import Environment, StrictUndefined
from pydantic import BaseModel, ConfigDict, Field

from docsniff.models import Severity

if TYPE_CHECKING:
    from collections.abc import Iterable

    from jinja2 import Template

    from docsniff.models import CodeInfo, Violation
    from docsniff.runner import FileResult

__all__ = [
    "REPORT_SCHEMA_VERSION",
    "FileReportModel",
    "RunReportModel",
    "TotalsModel",
    "ViolationModel",
    "build_run_report",
    "render_codes",
    "render_json",
    "render_text",
]

REPORT_SCHEMA_VERSION = "1.0"

_TEXT_TEMPLATE = """\
{% for file in report.files %}{% if file.error %}\
{{ file.path }}: {{ file.error.title }}: {{ file.error.detail }}
{% endif %}{% for violation in file.violations %}\
{{ file.path }}:{{ violation.line }}:{{ violation.column }}: \
{{ violation.severity }}: {{ violation.message }} [{{ violation.source }}]\
{% if violation.fixable %} (fixable){% endif %}
{% endfor %}{% if file.fixed_count %}\
{{ file.path }}: {{ file.fixed_count }} fix(es) applied in {{ file.passes }} pass(es)\
{% if not file.converged %}, not converged{% endif %}
{% endif %}{% endfor %}\
{{ report.totals.files }} file(s) checked: {{ report.totals.errors }} error(s), \
{{ report.totals.warnings }} warning(s), {{ report.totals.fixed }} fixed, \
{{ report.totals.suppressed }} suppressed
"""

_CODES_TEMPLATE = """\
{% for info in codes %}{{ "%-42s"|format(info.source) }} {{ "%-7s"|format(info.severity) }} \
{{ "fixable" if info.fixable else "       " }}  {{ info.summary }}
{% endfor %}"""


def _build_environment() -> Environment:
    return Environment(
        undefined=StrictUndefined,
        trim_blocks=False,
        lstrip_blocks=False,
        autoescape=False,
        keep_trailing_newline=True,
    )


_ENV = _build_environment()
_TEXT: Template = _ENV.from_string(_TEXT_TEMPLATE)
_CODES: Template = _ENV.from_string(_CODES_TEMPLATE)


class ViolationModel(BaseModel):
    """Serialized violation."""

    model_config = ConfigDict(populate_by_name=True)

    source: str
    message: str
    line: int
    column: int
    severity: Severity
    fixable: bool

    @classmethod
    def from_violation(cls, violation: Violation) -> ViolationModel:
        return cls(
            source=violation.source,
            message=violation.message,
            line=violation.line,
            column=violation.column,
            severity=violation.severity,
            fixable=violation.fixable,
        )


class FileReportModel(BaseModel):
    """Serialized result of one file."""

    model_config = ConfigDict(populate_by_name=True)

    path: str
    violations: list[ViolationModel] = Field(default_factory=list)
    fixed_count: int = Field(0, alias="fixedCount")
    passes: int = 0
    converged: bool = True
    written: bool = False
    error: dict[str, object] | None = None


class TotalsModel(BaseModel):
    """Counters over every file of a run."""

    files: int = 0
    errors: int = 0
    warnings: int = 0
    fixed: int = 0
    suppressed: int = 0
    failed: int = 0


class RunReportModel(BaseModel):
    """Serialized report of a whole run."""

    model_config = ConfigDict(populate_by_name=True)

    schema_version: str = Field(REPORT_SCHEMA_VERSION, alias="schemaVersion")
    generated_at: str = Field(
        default_factory=lambda: _dt.datetime.now(tz=_dt.UTC).isoformat(timespec="seconds"),
        alias="generatedAt",
    )
    command: str
    config_source: str = Field("builtin", alias="configSource")
    config_hash: str = Field("", alias="configHash")
    files: list[FileReportModel] = Field(default_factory=list)
    totals: TotalsModel = Field(default_factory=TotalsModel)


def _file_model(result: FileResult) -> FileReportModel:
    error = None
    if result.error is not None:
        error = dict(result.error.to_problem_details(instance=f"urn:docsniff:file:{result.path}"))
    return FileReportModel(
        path=result.path,
        violations=[ViolationModel.from_violation(item) for item in result.violations],
        fixed_count=result.fixed_count,
        passes=result.passes,
        converged=result.converged,
        written=result.written,
        error=error,
    )


def build_run_report(
    command: str,
    results: Iterable[FileResult],
    *,
    config_source: str = "builtin",
    config_hash: str = "",
    suppressed: int = 0,
) -> RunReportModel:
    """Collect per-file results into a :class:`RunReportModel`.

    Parameters
    ----------
    command : str
        Subcommand that produced the results.
    results : Iterable[FileResult]
        Per-file results in processing order.
    config_source : str, optional
        Provenance of the active configuration.
    config_hash : str, optional
        Hash of the active configuration.
    suppressed : int, optional
        Number of violations removed by the policy layer.

    Returns
    -------
    RunReportModel
        Report with per-file entries and totals.
    """
    files: list[FileReportModel] = []
    totals = TotalsModel(suppressed=suppressed)
    for result in results:
        files.append(_file_model(result))
        totals.files += 1
        totals.errors += result.error_count
        totals.warnings += result.warning_count
        totals.fixed += result.fixed_count
        if result.error is not None:
            totals.failed += 1
    return RunReportModel(
        command=command,
        config_source=config_source,
        config_hash=config_hash,
        files=files,
        totals=totals,
    )


def render_text(report: RunReportModel) -> str:
    """Render ``report`` as human-readable text."""
    return _TEXT.render(report=report)


def render_json(report: RunReportModel) -> str:
    """Render ``report`` as indented JSON using field aliases."""
    return json.dumps(report.model_dump(mode="json", by_alias=True), indent=2)


def render_codes(codes: Iterable[CodeInfo]) -> str:
    """Render the violation code catalog as an aligned table."""
    return _CODES.render(codes=list(codes))
