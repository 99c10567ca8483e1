"""
Copyright (c) 2025 Eric C. Mumford (@heymumford)
This file is part of IndexSmith, licensed under the MIT License.
See LICENSE file for details.
"""

"""Logging infrastructure with contextual error tracking.

Every analysis run gets a correlation ID so that the decisions made for the
tables of one schema can be picked out of a shared log. Records may carry a
``context_data`` mapping (entity, table, index name, ...) which the JSON and
Rich formatters render next to the message.

Typical use::

    logger = get_logger(__name__)
    with correlation_id(), log_operation(logger, "index analysis"):
        logger.info("analyzing", context={"table": "orders"})
"""

import json
import logging
import os
import sys
import time
import uuid
from collections import Counter
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime
from typing import Any

from rich.logging import RichHandler

CORRELATION_PREFIX = "indexsmith"
PACKAGE_LOGGER = "indexsmith"

# Context variables are per thread and per asyncio task
_current_correlation_id: ContextVar[str | None] = ContextVar(
    "indexsmith_correlation_id", default=None,
)


def new_correlation_id() -> str:
    return f"{CORRELATION_PREFIX}-{uuid.uuid4()}"


class CorrelationIdManager:
    """Reads the correlation ID of the current thread or task."""

    def get_correlation_id(self) -> str:
        """Return the current ID, creating one on first use."""
        current = _current_correlation_id.get()
        if current is None:
            current = new_correlation_id()
            _current_correlation_id.set(current)
        return current


correlation_manager = CorrelationIdManager()


@contextmanager
def correlation_id(value: str | None = None) -> Iterator[str]:
    """
    Run a block under its own correlation ID.

    The previous ID (or its absence) is restored on exit, so runs can nest.

    Args:
    ----
        value: ID to use, or None to generate a new one

    Yields:
    ------
        str: The active correlation ID

    """
    token = _current_correlation_id.set(value or new_correlation_id())
    try:
        yield _current_correlation_id.get()
    finally:
        _current_correlation_id.reset(token)


def context_extra(context: dict[str, Any] | None) -> dict[str, Any]:
    """
    Build the ``extra`` mapping that carries context data on a log record.

    Works with any :class:`logging.Logger`, not only :class:`StructuredLogger`.
    """
    extra: dict[str, Any] = {"correlation_id": correlation_manager.get_correlation_id()}
    if context:
        extra["context_data"] = dict(context)
    return extra


class CorrelationIdFilter(logging.Filter):
    """Stamps the current correlation ID on records that lack one."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "correlation_id"):
            record.correlation_id = correlation_manager.get_correlation_id()
        return True


class StructuredLogger(logging.Logger):
    """
    Logger whose calls accept a ``context`` keyword.

    ``logger.info("created", context={"index": "IX_Orders_Status"})`` stores the
    mapping in ``record.context_data``; the correlation ID is always attached.
    """

    def _log(
        self,
        level: int,
        msg: Any,
        args: tuple,
        exc_info: bool | tuple | BaseException | None = None,
        extra: dict[str, Any] | None = None,
        stack_info: bool = False,
        stacklevel: int = 1,
        context: dict[str, Any] | None = None,
    ) -> None:
        merged = dict(extra or {})
        if context:
            merged["context_data"] = {**merged.get("context_data", {}), **context}
        merged.setdefault("correlation_id", correlation_manager.get_correlation_id())
        # One extra frame so records point at the caller, not at this override
        super()._log(level, msg, args, exc_info, merged, stack_info, stacklevel + 1)


def _exception_details(formatter: logging.Formatter, exc_info: tuple) -> dict[str, str]:
    exc_type, exc_value, _ = exc_info
    return {
        "type": exc_type.__name__,
        "message": str(exc_value),
        "traceback": formatter.formatException(exc_info),
    }


class JSONFormatter(logging.Formatter):
    """Renders each record as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}:{record.funcName}:{record.lineno}",
        }

        correlation = getattr(record, "correlation_id", None)
        if correlation:
            payload["correlation_id"] = correlation

        context = getattr(record, "context_data", None)
        if context:
            payload["context"] = context

        if record.exc_info:
            payload["exception"] = _exception_details(self, record.exc_info)

        return json.dumps(payload, default=str)


class RichContextFormatter(logging.Formatter):
    """Appends ``[key=value]`` pairs from the record context to the message."""

    def format(self, record: logging.LogRecord) -> str:
        text = super().format(record)
        context = getattr(record, "context_data", None) or {}
        pairs = [f"[{key}={value}]" for key, value in context.items()]
        return " ".join([text, *pairs])


@contextmanager
def log_operation(
    logger: logging.Logger,
    operation_name: str,
    level: int = logging.INFO,
    context: dict[str, Any] | None = None,
) -> Iterator[None]:
    """
    Log the start, end and duration of an operation.

    Failures are logged at ERROR with the exception type and message added to
    the context, then re-raised.

    Args:
    ----
        logger: Logger to write to
        operation_name: Human readable name, e.g. "index analysis"
        level: Level for the start and completion records
        context: Extra context attached to every record of the operation

    """
    context = {**(context or {}), "operation_id": uuid.uuid4().hex[:8]}
    started = time.perf_counter()
    # Three frames up: this generator, contextlib, then the caller
    logger.log(level, f"Starting {operation_name}", extra=context_extra(context), stacklevel=3)

    try:
        yield
    except Exception as e:
        elapsed = time.perf_counter() - started
        failure = {**context, "error_type": type(e).__name__, "error": str(e), "duration": f"{elapsed:.2f}s"}
        logger.error(
            f"Failed {operation_name} after {elapsed:.2f}s",
            extra=context_extra(failure), exc_info=True, stacklevel=3,
        )
        raise

    elapsed = time.perf_counter() - started
    logger.log(level, f"Completed {operation_name} in {elapsed:.2f}s", extra=context_extra(context), stacklevel=3)


class ErrorTracker:
    """
    Collects errors raised while processing a schema.

    The model convention wraps each entity in :meth:`track_errors` with
    ``reraise=False``; a failing table is recorded here and the run moves on.
    """

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.errors: list[dict[str, Any]] = []
        self.logger = logger or get_logger("indexsmith.error_tracker")

    def add_error(self, error: Exception, context: dict[str, Any] | None = None, log: bool = True) -> None:
        """Record an error with its context and, unless ``log`` is False, log it."""
        entry = {
            "error_type": type(error).__name__,
            "message": str(error),
            "timestamp": datetime.now().isoformat(),
            "correlation_id": correlation_manager.get_correlation_id(),
            "context": dict(context or {}),
        }
        self.errors.append(entry)

        if log:
            self.logger.error(
                f"Error tracked: {entry['error_type']}: {entry['message']}",
                extra=context_extra(context),
                exc_info=error,
            )

    @contextmanager
    def track_errors(
        self, context: dict[str, Any] | None = None, log: bool = True, reraise: bool = True,
    ) -> Iterator["ErrorTracker"]:
        """Record any exception raised in the block; re-raise it unless ``reraise`` is False."""
        try:
            yield self
        except Exception as e:
            self.add_error(e, context=context, log=log)
            if reraise:
                raise

    def has_errors(self) -> bool:
        return bool(self.errors)

    def get_error_summary(self) -> dict[str, Any]:
        """
        Summarize the tracked errors.

        Returns
        -------
            total_errors, error_types (count per exception type), first_error
            and last_error

        """
        return {
            "total_errors": len(self.errors),
            "error_types": dict(Counter(entry["error_type"] for entry in self.errors)),
            "first_error": self.errors[0] if self.errors else None,
            "last_error": self.errors[-1] if self.errors else None,
        }


def _text_formatter(include_timestamp: bool) -> logging.Formatter:
    prefix = "%(asctime)s " if include_timestamp else ""
    return logging.Formatter(f"{prefix}[%(levelname)s] %(name)s: %(message)s")


def _record_formatter(json_format: bool, include_timestamp: bool) -> logging.Formatter:
    return JSONFormatter() if json_format else _text_formatter(include_timestamp)


def _console_handler(use_rich: bool, json_format: bool, include_timestamp: bool) -> logging.Handler:
    if use_rich and not json_format:
        handler: logging.Handler = RichHandler(rich_tracebacks=True, markup=False, show_time=include_timestamp)
        handler.setFormatter(RichContextFormatter("%(message)s"))
        return handler

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(_record_formatter(json_format, include_timestamp))
    return handler


def _file_handler(log_file: str, json_format: bool, include_timestamp: bool) -> logging.Handler:
    directory = os.path.dirname(os.path.abspath(log_file))
    os.makedirs(directory, exist_ok=True)
    handler = logging.FileHandler(log_file)
    handler.setFormatter(_record_formatter(json_format, include_timestamp))
    return handler


def configure_logging(
    level: int | str = logging.INFO,
    log_file: str | None = None,
    json_format: bool = False,
    include_timestamp: bool = True,
    use_rich: bool = True,
    debug: bool = False,
) -> None:
    """
    Configure the ``indexsmith`` logger hierarchy.

    Handlers are replaced, not added, so calling this twice is safe. Records do
    not propagate to the root logger once configured.

    Args:
    ----
        level: Level name or number
        log_file: Also write records to this file
        json_format: Emit JSON lines instead of text
        include_timestamp: Prefix text records with a timestamp
        use_rich: Use rich for console output (ignored for JSON)
        debug: Force DEBUG level

    """
    if debug:
        level = logging.DEBUG
    elif isinstance(level, str):
        level = logging.getLevelName(level.upper())

    logging.setLoggerClass(StructuredLogger)

    handlers = [_console_handler(use_rich, json_format, include_timestamp)]
    if log_file:
        handlers.append(_file_handler(log_file, json_format, include_timestamp))

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    for old in list(package_logger.handlers):
        package_logger.removeHandler(old)
        old.close()
    for handler in handlers:
        handler.addFilter(CorrelationIdFilter())
        package_logger.addHandler(handler)

    package_logger.setLevel(level)
    package_logger.propagate = False
    package_logger.debug(f"Logging configured with level {logging.getLevelName(level)}")


def get_logger(name: str) -> StructuredLogger:
    """
    Return a :class:`StructuredLogger` for ``name``.

    The logger class is switched only for the duration of the lookup. A logger
    that already exists under that name is returned unchanged.
    """
    previous_class = logging.getLoggerClass()
    logging.setLoggerClass(StructuredLogger)
    try:
        return logging.getLogger(name)
    finally:
        logging.setLoggerClass(previous_class)
