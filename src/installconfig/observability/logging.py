"""Queue-backed logging for installconfig runs.

Records are handed to a ``QueueListener`` that fans out to an optional per-run
JSON-lines file and a stderr sink (text or JSON). Correlation fields bound with
:func:`correlation_scope` are stamped on every record, and pull secret ``auth``
values, credentials, and private keys are masked before anything is written.
"""

from __future__ import annotations

import contextvars
import json
import logging
import logging.handlers
import queue
import re
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Final, Literal

JSONValue = str | int | float | bool | None | list["JSONValue"] | dict[str, "JSONValue"]
LogFormat = Literal["json", "text"]

LOG_FILENAME: Final[str] = "installconfig.jsonl"
_REDACTED: Final[str] = "***REDACTED***"
_CORRELATION_KEYS: Final[tuple[str, ...]] = ("run_id", "asset", "command")
_SENSITIVE_KEY_TERMS: Final[tuple[str, ...]] = (
    "secret",
    "token",
    "password",
    "passphrase",
    "auth",
    "credential",
    "private_key",
    "privatekey",
)

_AUTH_FIELD = re.compile(r'(?i)("(?:auth|password|identitytoken)"\s*:\s*")[^"]*(")')
_ASSIGNMENT = re.compile(
    r"(?i)\b(pull[_-]?secret|token|password|secret|authorization)\b\s*([:=])\s*([^\s,;]+)"
)
_PRIVATE_KEY_BLOCK = re.compile(
    r"-----BEGIN [A-Z ]*PRIVATE KEY-----.*?-----END [A-Z ]*PRIVATE KEY-----", re.DOTALL
)

# Attributes every LogRecord carries; anything else arrived through ``extra=``.
_RECORD_ATTRS: Final[frozenset[str]] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", None, None))
) | {"message", "asctime", "correlation"}

_CORRELATION: contextvars.ContextVar[Mapping[str, str]] = contextvars.ContextVar(
    "installconfig_correlation", default={}
)

_active_handle: StructuredLoggingHandle | None = None


@dataclass(frozen=True, slots=True)
class LoggingConfig:
    """Settings for one structured logging session.

    ``base_log_dir=None`` disables the per-run log file.
    """

    run_id: str
    base_log_dir: Path | str | None = None
    logger_name: str = "installconfig"
    level: int | str = "WARNING"
    log_format: LogFormat = "text"
    log_to_stderr: bool = True
    redact: bool = True


def setup_logging(
    logging_settings: Mapping[str, object] | None = None,
    *,
    run_id: str,
    logger_name: str = "installconfig",
) -> StructuredLoggingHandle:
    """Configure logging from the ``[logging]`` section of ``installer.toml``."""

    cfg = dict(logging_settings or {})
    raw_level = cfg.get("level", "WARNING")
    raw_log_dir = cfg.get("log_dir")
    log_dir = raw_log_dir if isinstance(raw_log_dir, (Path, str)) and raw_log_dir else None
    return setup_structured_logging(
        LoggingConfig(
            run_id=run_id,
            base_log_dir=log_dir,
            logger_name=logger_name,
            level=raw_level if isinstance(raw_level, (int, str)) else "WARNING",
            log_format="json" if cfg.get("format") == "json" else "text",
            log_to_stderr=bool(cfg.get("log_to_stderr", True)),
            redact=bool(cfg.get("redact_secrets", True)),
        )
    )


class _CorrelatingQueueHandler(logging.handlers.QueueHandler):
    def prepare(self, record: logging.LogRecord) -> logging.LogRecord:
        # Bind the caller's context before the record crosses to the listener thread.
        record.correlation = dict(_CORRELATION.get())
        prepared: logging.LogRecord = super().prepare(record)
        return prepared


class _JsonLineFormatter(logging.Formatter):
    def __init__(self, *, run_id: str, redact: bool) -> None:
        super().__init__()
        self._run_id = run_id
        self._redact = redact

    def format(self, record: logging.LogRecord) -> str:
        event: dict[str, JSONValue] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC)
            .isoformat(timespec="milliseconds")
            .replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": _mask(record.getMessage(), self._redact),
            "run_id": self._run_id,
        }
        event.update(_correlation_of(record))
        extras = {
            key: _jsonable(value)
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRS and key not in _CORRELATION_KEYS
        }
        if extras:
            event["fields"] = _mask(extras, self._redact)
        if record.exc_info is not None:
            event["exception"] = _mask(self.formatException(record.exc_info), self._redact)
        return json.dumps(event, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


class _TextLineFormatter(logging.Formatter):
    def __init__(self, *, redact: bool) -> None:
        super().__init__()
        self._redact = redact

    def format(self, record: logging.LogRecord) -> str:
        line = f"{record.levelname} {record.name}: {_mask(record.getMessage(), self._redact)}"
        if record.exc_info is not None:
            line = f"{line}\n{_mask(self.formatException(record.exc_info), self._redact)}"
        return line


class StructuredLoggingHandle:
    """An active logging session; :func:`shutdown_logging` undoes it."""

    def __init__(
        self,
        *,
        logger: logging.Logger,
        log_path: Path | None,
        queue_handler: logging.Handler,
        listener: logging.handlers.QueueListener,
        sinks: tuple[logging.Handler, ...],
        previous_level: int,
        previous_propagate: bool,
    ) -> None:
        self.logger = logger
        self.log_path = log_path
        self._queue_handler = queue_handler
        self._listener = listener
        self._sinks = sinks
        self._previous_level = previous_level
        self._previous_propagate = previous_propagate
        self.is_shutdown = False

    def shutdown(self) -> None:
        if self.is_shutdown:
            return
        # stop() drains the queue before returning.
        self._listener.stop()
        self.logger.removeHandler(self._queue_handler)
        self._queue_handler.close()
        self.logger.setLevel(self._previous_level)
        self.logger.propagate = self._previous_propagate
        for sink in self._sinks:
            sink.close()
        self.is_shutdown = True


def setup_structured_logging(config: LoggingConfig) -> StructuredLoggingHandle:
    """Start a logging session, replacing any session that is still active."""

    global _active_handle
    run_id = config.run_id.strip()
    if not run_id:
        raise ValueError("run_id must not be empty")
    level = _parse_level(config.level)
    shutdown_logging()

    json_formatter = _JsonLineFormatter(run_id=run_id, redact=config.redact)
    sinks: list[logging.Handler] = []
    log_path: Path | None = None
    if config.base_log_dir is not None:
        run_dir = Path(config.base_log_dir) / run_id
        run_dir.mkdir(parents=True, exist_ok=True)
        log_path = run_dir / LOG_FILENAME
        file_sink = logging.FileHandler(log_path, encoding="utf-8")
        file_sink.setFormatter(json_formatter)
        sinks.append(file_sink)
    if config.log_to_stderr:
        stream_sink = logging.StreamHandler()
        stream_sink.setFormatter(
            json_formatter
            if config.log_format == "json"
            else _TextLineFormatter(redact=config.redact)
        )
        sinks.append(stream_sink)

    logger = logging.getLogger(config.logger_name)
    previous_level, previous_propagate = logger.level, logger.propagate
    for existing in list(logger.handlers):
        logger.removeHandler(existing)
        existing.close()
    logger.setLevel(level)
    logger.propagate = False

    log_queue: queue.SimpleQueue[logging.LogRecord] = queue.SimpleQueue()
    queue_handler = _CorrelatingQueueHandler(log_queue)
    listener = logging.handlers.QueueListener(log_queue, *sinks)
    listener.start()
    logger.addHandler(queue_handler)

    _active_handle = StructuredLoggingHandle(
        logger=logger,
        log_path=log_path,
        queue_handler=queue_handler,
        listener=listener,
        sinks=tuple(sinks),
        previous_level=previous_level,
        previous_propagate=previous_propagate,
    )
    return _active_handle


def shutdown_logging(handle: StructuredLoggingHandle | None = None) -> None:
    """Drain and close ``handle`` (default: the active session) and restore its logger."""

    global _active_handle
    target = handle if handle is not None else _active_handle
    if target is None:
        return
    target.shutdown()
    if _active_handle is target:
        _active_handle = None


def get_active_logging_handle() -> StructuredLoggingHandle | None:
    return _active_handle


@contextmanager
def correlation_scope(**fields: str) -> Iterator[None]:
    """Bind correlation fields to every record logged inside the block."""

    merged = dict(_CORRELATION.get())
    merged.update({key: value for key, value in fields.items() if value})
    token = _CORRELATION.set(merged)
    try:
        yield
    finally:
        _CORRELATION.reset(token)


def default_log_redactor(value: JSONValue) -> JSONValue:
    """Mask pull secret auth values, credentials, and private keys in ``value``."""

    return _redact(value, key=None)


def _parse_level(value: int | str) -> int:
    if isinstance(value, int):
        return value
    parsed = logging.getLevelName(value.strip().upper())
    if not isinstance(parsed, int):
        raise ValueError(f"unsupported logging level {value!r}")
    return parsed


def _correlation_of(record: logging.LogRecord) -> dict[str, str]:
    fields = dict(getattr(record, "correlation", {}))
    for key in _CORRELATION_KEYS:
        value = getattr(record, key, None)
        if isinstance(value, str) and value.strip():
            fields[key] = value.strip()
    return fields


def _jsonable(value: object) -> JSONValue:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, Mapping):
        return {str(key): _jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(item) for item in value]
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


def _mask(value: JSONValue, enabled: bool) -> JSONValue:
    return default_log_redactor(value) if enabled else value


def _redact(value: JSONValue, *, key: str | None) -> JSONValue:
    if key is not None and _is_sensitive_key(key):
        return _REDACTED
    if isinstance(value, str):
        redacted = _PRIVATE_KEY_BLOCK.sub(_REDACTED, value)
        redacted = _AUTH_FIELD.sub(rf"\g<1>{_REDACTED}\g<2>", redacted)
        return _ASSIGNMENT.sub(rf"\g<1>\g<2>{_REDACTED}", redacted)
    if isinstance(value, list):
        return [_redact(item, key=None) for item in value]
    if isinstance(value, dict):
        return {name: _redact(item, key=name) for name, item in value.items()}
    return value


def _is_sensitive_key(key: str) -> bool:
    normalized = key.lower().replace("-", "_")
    return normalized in {"pullsecret", "pull_secret"} or any(
        term in normalized for term in _SENSITIVE_KEY_TERMS
    )


__all__ = [
    "LogFormat",
    "LoggingConfig",
    "StructuredLoggingHandle",
    "correlation_scope",
    "default_log_redactor",
    "get_active_logging_handle",
    "setup_logging",
    "setup_structured_logging",
    "shutdown_logging",
]
