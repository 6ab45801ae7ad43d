"""
Structured Logging Configuration for BonFire

Every record carries the ids of whatever it happened inside of:
- request_id: set by the API middleware from X-Request-ID
- workflow_id / node_id: bound by the executor around a run and each node
- integration_id: bound by the tester around a connectivity check

Ids are bound with ``log_context(...)`` and live in a ContextVar, so they
follow the current async task and never leak between concurrent requests.

Two output formats:
- JSON, one object per line (production)
- "[time] LEVEL - logger - message [k=v ...]" (development)
"""

import json
import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, Optional

# Bound ids for the current task; None means nothing is bound
_log_context: ContextVar[Optional[Dict[str, Any]]] = ContextVar("bonfire_log_context", default=None)

# Order in which bound ids are rendered
CONTEXT_KEYS = ("request_id", "workflow_id", "node_id", "integration_id")

# Loggers that are chatty at INFO and say nothing about workflows
_NOISY_LOGGERS = ("httpx", "httpcore", "sqlalchemy.engine")

_RESERVED_ATTRS = frozenset(logging.LogRecord(
    "", logging.INFO, "", 0, "", (), None
).__dict__) | {"message", "asctime", "taskName"}


def get_log_context() -> Dict[str, Any]:
    """Return a copy of the ids bound in the current context."""
    return dict(_log_context.get() or {})


@contextmanager
def log_context(**fields: Any) -> Iterator[None]:
    """
    Bind ids for every record logged inside the block.

    Nested blocks add to (and may shadow) the outer ids; leaving a block
    restores exactly what was bound before it. ``None`` values are skipped.

    Example:
        with log_context(workflow_id=workflow.id):
            with log_context(node_id=node.id):
                logger.info("Executing node")
    """
    merged = get_log_context()
    merged.update({k: v for k, v in fields.items() if v is not None})
    token = _log_context.set(merged)
    try:
        yield
    finally:
        _log_context.reset(token)


def set_request_id(request_id: str) -> None:
    """Start a fresh context for an incoming request."""
    _log_context.set({"request_id": request_id})


def clear_request_id() -> None:
    """Drop every bound id once the request is answered."""
    _log_context.set(None)


def _record_context(record: logging.LogRecord) -> Dict[str, Any]:
    context = get_log_context()
    # Ids passed through extra={...} win over bound ones
    for key in CONTEXT_KEYS:
        value = getattr(record, key, None)
        if value is not None:
            context[key] = value
    return context


class JSONFormatter(logging.Formatter):
    """
    One JSON object per line.

    Top-level keys: timestamp (UTC, Z suffix), level, logger, message, the
    bound ids present, exception (if any), and ``extra`` for any other
    fields passed via ``extra={...}``.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc)
            .isoformat()
            .replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        log_data.update(_record_context(record))

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        extra = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RESERVED_ATTRS and key not in CONTEXT_KEYS
        }
        if extra:
            log_data["extra"] = extra

        return json.dumps(log_data, ensure_ascii=True, default=str)


class StandardFormatter(logging.Formatter):
    """Human-readable line with the bound ids appended in brackets."""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created, timezone.utc).strftime("%Y-%m-%d %H:%M:%S")
        line = f"[{timestamp}] {record.levelname:8s} - {record.name} - {record.getMessage()}"

        context = _record_context(record)
        if context:
            ids = " ".join(f"{key}={context[key]}" for key in CONTEXT_KEYS if key in context)
            line += f" [{ids}]"

        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)

        return line


def setup_logging(
    level: str = "INFO",
    json_logs: bool = False,
    log_file: Optional[str] = None,
) -> None:
    """
    Install one console handler (and optionally a file handler) on the root logger.

    Values come from ``Settings`` (LOG_LEVEL, JSON_LOGS, LOG_FILE); this
    function does not read the environment itself. Calling it again replaces
    the handlers it installed before.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    formatter = JSONFormatter() if json_logs else StandardFormatter()

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    for handler in [h for h in root_logger.handlers if getattr(h, "_bonfire", False)]:
        root_logger.removeHandler(handler)
        handler.close()

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    for handler in handlers:
        handler._bonfire = True
        handler.setLevel(numeric_level)
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))

    logging.getLogger(__name__).debug(
        f"Logging configured: level={level.upper()} json={json_logs} file={log_file or 'none'}"
    )
