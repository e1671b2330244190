"""
Structured JSON logging for the coffee liquidation kernel.

Every record under the ``coffee_kernel`` logger is written as one JSON
line.  Records carry the contract scope bound by the liquidation
workspace (contract, company, harvest year) plus whatever the call site
passes in ``extra``.  Amounts may be passed as Decimal and are written
in fixed-point notation.  Kernel errors are written under an ``error``
object holding their code and context attributes.
"""

__all__ = [
    "StructuredFormatter",
    "LogContext",
    "get_logger",
    "configure_logging",
    "reset_logging",
]

import json
import logging
import sys
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, TextIO

from coffee_kernel.exceptions import CoffeeKernelError

_LOGGER_PREFIX = "coffee_kernel"
_HANDLER_NAME = "coffee_kernel.structured"

_SCOPE_FIELDS = ("correlation_id", "contract_id", "company", "harvest_year")

_scope: ContextVar[Mapping[str, str]] = ContextVar("coffee_log_scope", default={})


def _merged_scope(fields: dict[str, str | None]) -> dict[str, str]:
    unknown = set(fields) - set(_SCOPE_FIELDS)
    if unknown:
        raise TypeError(f"Unknown log context field(s): {', '.join(sorted(unknown))}")
    merged = dict(_scope.get())
    merged.update({k: v for k, v in fields.items() if v is not None})
    return merged


class LogContext:
    """Contract scope attached to every log line written in the current context."""

    @staticmethod
    def set(**fields: str | None) -> None:
        """Set scope fields. None values leave the current value in place."""
        _scope.set(_merged_scope(fields))

    @staticmethod
    def get_all() -> dict[str, str]:
        return dict(_scope.get())

    @staticmethod
    def clear() -> None:
        _scope.set({})

    @staticmethod
    @contextmanager
    def bind(**fields: str | None) -> Iterator[None]:
        """Set scope fields for the duration of a ``with`` block."""
        token = _scope.set(_merged_scope(fields))
        try:
            yield
        finally:
            _scope.reset(token)


# ---------------------------------------------------------------------------
# JSON formatter
# ---------------------------------------------------------------------------

_RESERVED_ATTRS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "taskName"}


def _json_default(obj: Any) -> Any:
    if isinstance(obj, Decimal):
        return format(obj, "f")
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (set, frozenset)):
        return sorted(obj, key=str)
    return str(obj)


def _error_payload(exc: BaseException) -> dict[str, Any]:
    error: dict[str, Any] = {"type": type(exc).__name__, "message": str(exc)}
    if isinstance(exc, CoffeeKernelError):
        error["code"] = exc.code
        error.update(
            (name, value) for name, value in vars(exc).items() if not name.startswith("_")
        )
    return error


class StructuredFormatter(logging.Formatter):
    """Formats each log record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **_scope.get(),
        }
        for key, value in vars(record).items():
            if key not in _RESERVED_ATTRS:
                payload.setdefault(key, value)

        if record.exc_info and record.exc_info[1] is not None:
            payload["error"] = _error_payload(record.exc_info[1])
            payload["traceback"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=_json_default)


# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the coffee_kernel namespace."""
    return logging.getLogger(f"{_LOGGER_PREFIX}.{name}")


def configure_logging(
    *,
    level: int = logging.INFO,
    stream: TextIO | None = None,
) -> logging.Handler:
    """
    Attach the JSON handler to the coffee_kernel logger.

    Calling it again only updates the level; the existing handler is
    returned so that a second call never duplicates output.
    """
    root = logging.getLogger(_LOGGER_PREFIX)
    root.setLevel(level)
    root.propagate = False
    for handler in root.handlers:
        if handler.get_name() == _HANDLER_NAME:
            return handler

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(StructuredFormatter())
    root.addHandler(handler)
    return handler


def reset_logging() -> None:
    """Detach all handlers from the coffee_kernel logger (tests only)."""
    root = logging.getLogger(_LOGGER_PREFIX)
    for handler in list(root.handlers):
        root.removeHandler(handler)
    root.setLevel(logging.WARNING)
