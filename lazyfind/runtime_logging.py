"""JSONL diagnostics for a process whose terminal belongs to the UI.

Every record is one JSON object: ``ts``, ``level``, ``event``, ``pid``,
``thread`` plus the caller's fields. Event names are dotted by subsystem::

    index.started / index.finished / index.failed / index.disconnected
    watch.file.attached / watch.file.detached / watch.file.failed / watch.file.lost
    watch.root.attached / watch.root.detached / watch.root.failed / watch.root.lost
    refresh.applied / refresh.failed / reload.applied / reload.conflict
    session.started / session.stopped / editor.opened / create.applied / gitignore.query_failed

The background indexer, the watchdog observer threads and the driver loop
share one logger; writes are serialized by its lock.
"""

from __future__ import annotations

import json
import os
import threading
import time
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Literal

from platformdirs import user_log_dir

APP_NAME = "lazyfind"
LOG_LEVEL_ENV = "LAZYFIND_LOG_LEVEL"
LOG_FILE_ENV = "LAZYFIND_LOG_FILE"
DEFAULT_LEVEL = "warning"

LogLevel = Literal["off", "error", "warning", "info", "debug"]

# Most severe first; a logger at level L writes L and everything before it.
LOG_LEVELS: tuple[str, ...] = ("off", "error", "warning", "info", "debug")
_LEVEL_ALIASES = {"warn": "warning", "none": "off", "disabled": "off", "0": "off"}

_runtime_logger: "RuntimeLogger | None" = None


def parse_level(value: str | None, default: LogLevel = DEFAULT_LEVEL) -> LogLevel:
    """Normalize a user-supplied level name; unknown names give ``default``."""
    if not value:
        return default
    name = value.strip().lower()
    name = _LEVEL_ALIASES.get(name, name)
    return name if name in LOG_LEVELS else default  # type: ignore[return-value]


def resolve_log_file(path: str | Path | None) -> Path:
    if path is None:
        return Path(user_log_dir(APP_NAME, appauthor=False)) / f"{APP_NAME}.runtime.jsonl"
    return Path(path).expanduser().resolve()


@dataclass(slots=True)
class RuntimeLogger:
    level: LogLevel
    sink_path: Path
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def enabled(self, level: str) -> bool:
        if self.level == "off" or level not in LOG_LEVELS:
            return False
        return LOG_LEVELS.index(level) <= LOG_LEVELS.index(self.level)

    def log(self, level: str, event: str, **fields: Any) -> None:
        if not self.enabled(level):
            return
        record = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": level,
            "event": event,
            "pid": os.getpid(),
            "thread": threading.current_thread().name,
        }
        record.update(fields)
        line = json.dumps(record, sort_keys=True, default=str) + "\n"
        with self._lock:
            try:
                self.sink_path.parent.mkdir(parents=True, exist_ok=True)
                with self.sink_path.open("a", encoding="utf-8") as handle:
                    handle.write(line)
            except OSError:
                # best-effort
                pass

    @contextmanager
    def timed(self, event: str, level: str = "info", **fields: Any) -> Iterator[dict[str, Any]]:
        """Log ``event`` with ``duration_ms`` once the block completes.

        The yielded dict may be filled with result fields inside the block.
        Nothing is logged when the block raises.
        """
        extra: dict[str, Any] = {}
        started = time.perf_counter()
        yield extra
        duration_ms = round((time.perf_counter() - started) * 1000, 1)
        self.log(level, event, duration_ms=duration_ms, **fields, **extra)

    def debug(self, event: str, **fields: Any) -> None:
        self.log("debug", event, **fields)

    def info(self, event: str, **fields: Any) -> None:
        self.log("info", event, **fields)

    def warning(self, event: str, **fields: Any) -> None:
        self.log("warning", event, **fields)

    def error(self, event: str, **fields: Any) -> None:
        self.log("error", event, **fields)


class _DisabledLogger(RuntimeLogger):
    def __init__(self) -> None:
        super().__init__(level="off", sink_path=Path(os.devnull))

    def log(self, level: str, event: str, **fields: Any) -> None:  # noqa: ARG002
        return


def configure_runtime_logging(
    *,
    level: str | None = None,
    log_file: str | Path | None = None,
) -> RuntimeLogger:
    """Install the process-wide logger.

    Explicit arguments win over ``LAZYFIND_LOG_LEVEL`` / ``LAZYFIND_LOG_FILE``.
    """
    global _runtime_logger

    effective_level = parse_level(level or os.getenv(LOG_LEVEL_ENV))
    effective_file = resolve_log_file(log_file or os.getenv(LOG_FILE_ENV))
    if effective_level == "off":
        _runtime_logger = _DisabledLogger()
        return _runtime_logger

    _runtime_logger = RuntimeLogger(level=effective_level, sink_path=effective_file)
    _runtime_logger.info("logging.configured", configured_level=effective_level, sink_path=str(effective_file))
    return _runtime_logger


def get_runtime_logger() -> RuntimeLogger:
    global _runtime_logger
    if _runtime_logger is None:
        _runtime_logger = configure_runtime_logging()
    return _runtime_logger


__all__ = [
    "LOG_LEVELS",
    "RuntimeLogger",
    "configure_runtime_logging",
    "get_runtime_logger",
    "parse_level",
    "resolve_log_file",
]
