# ============================================================================
# STRUCTURED LOGGING
# ============================================================================
# STATUS: Core - Structured logging with context
# PURPOSE: Consistent, queryable logging across the build pipeline
# CREATED: 19 OCT 2026
# ============================================================================
"""
Structured Logging

Build-pipeline logging with a thread-local context of catalog, schema,
table and operation. Records render as JSON (LOG_FORMAT=json) or as one
human-readable line.

Usage:
    from core.logging import get_logger, log_context

    logger = get_logger(__name__, ComponentType.LOADER)

    with log_context(catalog="shop", table="public.orders"):
        logger.info("Loading foreign keys", extra={"count": 2})

Library code only emits records; configure_logging() is for entry points.
"""

import json
import logging
import os
import sys
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field, fields, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Union


class ComponentType(str, Enum):
    """Pipeline stage a logger belongs to."""
    LOADER = "loader"
    RESOLVER = "resolver"
    CLI = "cli"


@dataclass(frozen=True)
class LogContext:
    """Contextual fields attached to every record inside log_context()."""
    catalog: Optional[str] = None
    schema: Optional[str] = None
    table: Optional[str] = None
    operation: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def merged(self, **kwargs) -> "LogContext":
        """Child context: given fields override, extra dicts combine."""
        extra = {**self.extra, **kwargs.pop("extra", {})}
        return replace(self, extra=extra, **kwargs)

    def to_dict(self) -> Dict[str, Any]:
        """Set fields only, with extra flattened in."""
        result = {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if f.name != "extra" and getattr(self, f.name) is not None
        }
        result.update(self.extra)
        return result


_local = threading.local()
_EMPTY = LogContext()


def _stack() -> list:
    if not hasattr(_local, "stack"):
        _local.stack = []
    return _local.stack


def get_current_context() -> LogContext:
    stack = _stack()
    return stack[-1] if stack else _EMPTY


@contextmanager
def log_context(**kwargs):
    """
    Push context fields for the duration of the block.

    Example:
        with log_context(schema="public", table="public.orders"):
            logger.info("Resolving triggers")
    """
    stack = _stack()
    context = get_current_context().merged(**kwargs)
    stack.append(context)
    try:
        yield context
    finally:
        stack.pop()


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _record_data(record: logging.LogRecord) -> Optional[Dict[str, Any]]:
    return getattr(record, "extra", None) or None


class StructuredFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": _timestamp(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        context = get_current_context().to_dict()
        if context:
            payload["context"] = context

        data = _record_data(record)
        if data:
            payload["data"] = data

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        payload["source"] = {"file": record.filename, "line": record.lineno}
        return json.dumps(payload, default=str)


class HumanFormatter(logging.Formatter):
    """
    Single-line output for terminals.

    Shows the table when one is set, otherwise the schema.
    """

    def format(self, record: logging.LogRecord) -> str:
        context = get_current_context()
        where = []
        if context.catalog:
            where.append(f"catalog={context.catalog}")
        if context.table:
            where.append(f"table={context.table}")
        elif context.schema:
            where.append(f"schema={context.schema}")

        line = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")
        line += f" {record.levelname:<8} {record.name}"
        if where:
            line += f" [{', '.join(where)}]"
        line += f": {record.getMessage()}"

        data = _record_data(record)
        if data:
            line += f" {data}"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


class ContextLogger(logging.LoggerAdapter):
    """
    Adapter that folds the current log context and the logger's component
    into record.extra, where both formatters read it.
    """

    def process(self, msg, kwargs):
        extra = dict(kwargs.get("extra") or {})
        extra.update(get_current_context().to_dict())
        component = (self.extra or {}).get("component")
        if component:
            extra.setdefault("component", component)
        kwargs["extra"] = {"extra": extra}
        return msg, kwargs


def get_logger(name: str, component: Optional[ComponentType] = None) -> ContextLogger:
    return ContextLogger(
        logging.getLogger(name), {"component": component.value if component else None}
    )


def configure_logging(level: Union[str, int] = "INFO", json_output: bool = False) -> None:
    """
    Route the root logger to stderr.

    Args:
        level: Log level name or number
        json_output: JSON records instead of human lines; LOG_FORMAT=json
            has the same effect
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    use_json = json_output or os.getenv("LOG_FORMAT", "").lower() == "json"

    # stdout carries command output
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(StructuredFormatter() if use_json else HumanFormatter())

    root = logging.getLogger()
    root.setLevel(level)
    for existing in root.handlers[:]:
        root.removeHandler(existing)
    root.addHandler(handler)


# ============================================================================
# CHECKPOINT LOGGING
# ============================================================================

def log_checkpoint(
    name: str,
    data: Optional[Dict[str, Any]] = None,
    logger: Optional[logging.Logger] = None,
) -> None:
    """Log a named build milestone (e.g. "functions_loaded", "graph_built")."""
    context = get_current_context()
    checkpoint: Dict[str, Any] = {"checkpoint": name, "timestamp": _timestamp()}
    for key in ("catalog", "schema", "table"):
        value = getattr(context, key)
        if value:
            checkpoint[key] = value
    if data:
        checkpoint["data"] = data

    (logger or logging.getLogger("checkpoint")).info(
        f"CHECKPOINT: {name}", extra={"extra": checkpoint}
    )


__all__ = [
    "ComponentType",
    "LogContext",
    "StructuredFormatter",
    "HumanFormatter",
    "ContextLogger",
    "get_logger",
    "configure_logging",
    "log_context",
    "get_current_context",
    "log_checkpoint",
]
