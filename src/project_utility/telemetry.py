from __future__ import annotations

"""Telemetry for panel decisions: structlog-rendered JSONL file, Rich console table, in-process listeners.

Events are plain dicts: ``event_type``, ``level``, ``timestamp``, free keyword fields
(``request_id``, ``channel``, ``target``...) and a ``payload`` mapping. The JSONL file sink is
only attached once `setup_telemetry()` has run; listeners and the console work from import time.
"""

import json
import os
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

import structlog
from rich.console import Console
from rich.table import Table
from rich.text import Text

from project_utility.config.paths import get_log_root

TelemetryListener = Callable[[Mapping[str, Any]], None]

TELEMETRY_FILENAME = "telemetry.jsonl"

_LEVELS = {"debug": 10, "info": 20, "warning": 30, "error": 40, "critical": 50}
_CONSOLE_STYLES = {
    "debug": "dim",
    "info": "bold cyan",
    "warning": "yellow",
    "error": "bold red",
    "critical": "bold white on red",
}
# Fields summarised on the console line, top-level first, then from the payload.
_SUMMARY_FIELDS = ("request_id", "channel", "target", "tier")
_SUMMARY_PAYLOAD_FIELDS = ("phase", "state", "generation", "is_open", "status")


def _level_value(level: str) -> int:
    return _LEVELS.get(level, _LEVELS["info"])


def _shorten(value: str, limit: int = 160) -> str:
    return value if len(value) <= limit else value[: limit - 3] + "..."


class _Listeners:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._callbacks: List[TelemetryListener] = []

    def add(self, callback: TelemetryListener) -> None:
        with self._lock:
            if callback not in self._callbacks:
                self._callbacks.append(callback)

    def discard(self, callback: TelemetryListener) -> None:
        with self._lock:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

    def dispatch(self, event: Mapping[str, Any]) -> None:
        with self._lock:
            callbacks = list(self._callbacks)
        if not callbacks:
            return
        # Each listener gets a JSON-clean copy it may keep or mutate.
        snapshot = json.loads(json.dumps(event, ensure_ascii=False, default=str))
        for callback in callbacks:
            try:
                callback(snapshot)
            except Exception:
                continue


_LISTENERS = _Listeners()


class _FileSink:
    def __init__(self, path: Path, threshold: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        self.path = path
        self._threshold = _level_value(threshold)
        self._lock = threading.Lock()
        self._logger = structlog.get_logger("scene.telemetry")

    def write(self, event: Mapping[str, Any]) -> None:
        if _level_value(event["level"]) < self._threshold:
            return
        line = json.dumps(event, ensure_ascii=False, default=str)
        with self._lock, self.path.open("a", encoding="utf-8") as handle:
            handle.write(line + "\n")
        fields = {key: value for key, value in event.items() if key not in ("event_type", "level")}
        self._logger.debug(event["event_type"], **fields)


class _ConsoleSink:
    def __init__(self, threshold: str) -> None:
        self._threshold = _level_value(threshold)
        self._console = Console(stderr=True)

    def write(self, event: Mapping[str, Any], sensitive: Sequence[str]) -> None:
        if _level_value(event["level"]) < self._threshold:
            return
        payload = dict(event.get("payload") or {})
        for key in sensitive:
            if payload.get(key) is not None:
                payload[key] = _shorten(str(payload[key]))

        summary = [f"{key}={event[key]}" for key in _SUMMARY_FIELDS if event.get(key)]
        summary += [f"{key}={payload[key]}" for key in _SUMMARY_PAYLOAD_FIELDS if payload.get(key) is not None]
        grid = Table.grid(padding=(0, 1))
        grid.add_row(
            Text(f"[{event['level'].upper()}] {event['event_type']}", style=_CONSOLE_STYLES.get(event["level"], "white")),
            Text(str(event.get("timestamp", "")), style="dim"),
        )
        grid.add_row(" ".join(summary) or "-")
        error = payload.get("error")
        if isinstance(error, str) and error:
            grid.add_row(f"error={_shorten(error)}")
        self._console.print(grid)


class TelemetryEmitter:
    def __init__(self) -> None:
        self._console = _ConsoleSink(os.getenv("TELEMETRY_CONSOLE_LEVEL", "warning").lower())
        self._file: Optional[_FileSink] = None
        self._prefixes = tuple(
            part.strip() for part in (os.getenv("TELEMETRY_EVENT_FILTER") or "").split(",") if part.strip()
        )

    @property
    def file_path(self) -> Optional[Path]:
        return self._file.path if self._file is not None else None

    def configure(self, *, log_root: Optional[Path] = None) -> None:
        root = (log_root or get_log_root()).resolve()
        structlog.configure(
            processors=[
                structlog.processors.TimeStamper(fmt="iso", utc=True),
                structlog.processors.add_log_level,
                structlog.processors.dict_tracebacks,
                structlog.processors.JSONRenderer(ensure_ascii=False),
            ],
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=True,
        )
        self._file = _FileSink(root / TELEMETRY_FILENAME, os.getenv("TELEMETRY_FILE_LEVEL", "debug").lower())

    def emit(
        self,
        event_type: str,
        *,
        level: str = "info",
        payload: Optional[Mapping[str, Any]] = None,
        sensitive: Optional[Sequence[str]] = None,
        **fields: Any,
    ) -> None:
        if self._prefixes and not event_type.startswith(self._prefixes):
            return
        event: Dict[str, Any] = {
            "event_type": event_type,
            "level": level.lower(),
            "timestamp": datetime.now(timezone.utc).isoformat(),
            **fields,
            "payload": dict(payload or {}),
        }
        if self._file is not None:
            self._file.write(event)
        self._console.write(event, list(sensitive or ()))
        _LISTENERS.dispatch(event)


_EMITTER: Optional[TelemetryEmitter] = None
_EMITTER_LOCK = threading.Lock()


def get_telemetry() -> TelemetryEmitter:
    global _EMITTER
    with _EMITTER_LOCK:
        if _EMITTER is None:
            _EMITTER = TelemetryEmitter()
        return _EMITTER


def setup_telemetry(log_root: Optional[Path] = None) -> None:
    get_telemetry().configure(log_root=log_root)


def emit(event_type: str, **kwargs: Any) -> None:
    get_telemetry().emit(event_type, **kwargs)


def register_listener(callback: TelemetryListener) -> None:
    _LISTENERS.add(callback)


def unregister_listener(callback: TelemetryListener) -> None:
    _LISTENERS.discard(callback)


__all__ = [
    "TELEMETRY_FILENAME",
    "TelemetryEmitter",
    "emit",
    "get_telemetry",
    "register_listener",
    "setup_telemetry",
    "unregister_listener",
]
