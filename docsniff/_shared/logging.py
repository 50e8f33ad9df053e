"""Structured logging helpers with correlation IDs.

Every module in :mod:`docsniff` obtains its logger through :func:`get_logger`.
The returned :class:`LoggerAdapter` injects ``operation`` and ``status`` fields
(and the active correlation ID) into each record's ``extra`` mapping. Library
loggers only carry a :class:`logging.NullHandler`; handlers are configured at
the CLI boundary through :func:`setup_logging`.

Examples
--------
>>> from docsniff._shared.logging import get_logger, with_fields
>>> logger = get_logger(__name__)
>>> logger.info("Sniff started", extra={"operation": "check", "status": "started"})
>>> adapter = with_fields(logger, correlation_id="run-123", operation="fix")
>>> adapter.info("Processing files", extra={"file_count": 10})
"""

from __future__ import annotations

import contextvars
import datetime as _dt
import json
import logging
import sys
from typing import TYPE_CHECKING, Any, Self, TypeAlias

if TYPE_CHECKING:
    from collections.abc import MutableMapping
    from types import TracebackType

__all__ = [
    "CorrelationContext",
    "JsonFormatter",
    "LogValue",
    "LoggerAdapter",
    "get_correlation_id",
    "get_logger",
    "set_correlation_id",
    "setup_logging",
    "with_fields",
]

LogValue: TypeAlias = Any

_correlation_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "docsniff_correlation_id", default=None
)

_STRUCTURED_FIELDS = ("correlation_id", "operation", "status", "duration_ms")

# Attributes every LogRecord carries; anything else came in through ``extra``.
_RECORD_ATTRIBUTES = frozenset(
    {
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "message",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "thread",
        "threadName",
        "taskName",
        "exc_info",
        "exc_text",
        "stack_info",
    }
)


class JsonFormatter(logging.Formatter):
    """Format log records as single-line JSON objects.

    The payload always contains ``ts``, ``level``, ``name`` and ``message``.
    Structured fields and any JSON-friendly ``extra`` values are copied over;
    the correlation ID falls back to the context variable when the record does
    not carry one.

    Examples
    --------
    >>> import logging
    >>> handler = logging.StreamHandler()
    >>> handler.setFormatter(JsonFormatter())
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format ``record`` as JSON.

        Parameters
        ----------
        record : logging.LogRecord
            Record to format.

        Returns
        -------
        str
            JSON-encoded log entry.
        """
        data: dict[str, object] = {
            "ts": _dt.datetime.fromtimestamp(record.created, tz=_dt.UTC)
            .isoformat(timespec="milliseconds")
            .replace("+00:00", "Z"),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }
        for field in _STRUCTURED_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                data[field] = value
        if "correlation_id" not in data:
            ctx_correlation_id = _correlation_id.get()
            if ctx_correlation_id is not None:
                data["correlation_id"] = ctx_correlation_id
        for key, value in record.__dict__.items():
            if (
                key not in _RECORD_ATTRIBUTES
                and key not in data
                and not key.startswith("_")
                and value is not None
                and isinstance(value, (str, int, float, bool, list, dict))
            ):
                data[key] = value
        if record.exc_info:
            data["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(data, default=str)


class LoggerAdapter(logging.LoggerAdapter):  # type: ignore[type-arg]
    """Logger adapter that injects structured context fields.

    Fields bound at construction time (see :func:`with_fields`) are merged
    into every call's ``extra`` without overriding per-call values. Missing
    ``operation`` and ``status`` fields are defaulted so every record can be
    indexed the same way.

    Parameters
    ----------
    logger : logging.Logger
        Base logger instance to wrap.
    extra : Mapping[str, object] | None, optional
        Structured fields to inject into log entries.
    """

    logger: logging.Logger

    def process(
        self, msg: object, kwargs: MutableMapping[str, Any]
    ) -> tuple[object, MutableMapping[str, Any]]:
        """Merge bound fields, correlation ID and defaults into ``extra``.

        Parameters
        ----------
        msg : object
            Log message.
        kwargs : MutableMapping[str, Any]
            Keyword arguments of the logging call.

        Returns
        -------
        tuple[object, MutableMapping[str, Any]]
            Message and kwargs with the enriched ``extra`` mapping.
        """
        extra = dict(kwargs.get("extra") or {})
        if self.extra:
            for key, value in self.extra.items():
                extra.setdefault(key, value)
        if "correlation_id" not in extra:
            ctx_correlation_id = _correlation_id.get()
            if ctx_correlation_id is not None:
                extra["correlation_id"] = ctx_correlation_id
        extra.setdefault("operation", "unknown")
        extra.setdefault("status", "ok")
        kwargs["extra"] = extra
        return msg, kwargs


def get_logger(name: str) -> LoggerAdapter:
    """Return a structured logger adapter for ``name``.

    Parameters
    ----------
    name : str
        Logger name (typically ``__name__``).

    Returns
    -------
    LoggerAdapter
        Adapter injecting structured fields.
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        logger.addHandler(logging.NullHandler())
    return LoggerAdapter(logger, {})


def with_fields(logger: logging.Logger | LoggerAdapter, **fields: LogValue) -> LoggerAdapter:
    """Return an adapter bound to ``fields``.

    Parameters
    ----------
    logger : logging.Logger | LoggerAdapter
        Base logger to wrap (may already be an adapter).
    **fields : LogValue
        Structured fields injected into all log entries of the adapter.

    Returns
    -------
    LoggerAdapter
        Logger adapter with bound fields.
    """
    if isinstance(logger, LoggerAdapter):
        merged: dict[str, object] = dict(logger.extra or {})
        merged.update(fields)
        return LoggerAdapter(logger.logger, merged)
    return LoggerAdapter(logger, dict(fields))


def setup_logging(level: int = logging.INFO, *, json_format: bool = False) -> None:
    """Configure the root logger for CLI use.

    Parameters
    ----------
    level : int, optional
        Logging level threshold. Defaults to ``logging.INFO``.
    json_format : bool, optional
        Emit JSON lines through :class:`JsonFormatter` instead of the plain
        ``[LEVEL] message`` format.
    """
    handler = logging.StreamHandler(sys.stderr)
    if json_format:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
    logging.basicConfig(level=level, handlers=[handler], force=True)


def set_correlation_id(correlation_id: str | None) -> None:
    """Set the correlation ID for the current context."""
    _correlation_id.set(correlation_id)


def get_correlation_id() -> str | None:
    """Return the correlation ID of the current context, if any."""
    return _correlation_id.get()


class CorrelationContext:
    """Context manager scoping a correlation ID.

    Parameters
    ----------
    correlation_id : str | None
        Correlation ID injected into every record emitted inside the block.

    Examples
    --------
    >>> with CorrelationContext("run-42"):
    ...     get_correlation_id()
    'run-42'
    """

    def __init__(self, correlation_id: str | None) -> None:
        self.correlation_id = correlation_id
        self._token: contextvars.Token[str | None] | None = None

    def __enter__(self) -> Self:
        self._token = _correlation_id.set(self.correlation_id)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if self._token is not None:
            _correlation_id.reset(self._token)
        del exc_type, exc_val, exc_tb
