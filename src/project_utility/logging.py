"""
Rich-backed logging for the scene panel service.

Panel code logs event-style messages (``panel.transition``) and puts the interesting values in
``extra=``. The console shows info records as a small tree of those values and warnings as one
alert line, repeated alerts folded for a minute. Everything also lands in two rotating files under
the log root: ``scene-info.log`` (up to INFO) and ``scene-error.log`` (WARNING and above).
"""

from __future__ import annotations

import logging
import time
import traceback
from dataclasses import dataclass, field
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from rich.console import Console
from rich.text import Text
from rich.tree import Tree

from project_utility.config.paths import get_log_root
from project_utility.telemetry import setup_telemetry

INFO_LOG_FILENAME = "scene-info.log"
ERROR_LOG_FILENAME = "scene-error.log"

# Record attributes rendered under an info line, in this order.
TREE_FIELDS = (
    "request_id",
    "event_type",
    "target",
    "tier",
    "state",
    "generation",
    "is_open",
    "channel",
    "status",
)
ALERT_FIELDS = ("request_id", "channel", "target", "state", "error")

ALERT_HINTS = {
    "scene_event.subscription_failed": "场景事件订阅失败，面板仅响应 HTTP 注入",
    "modal_state.publish_failed": "模态状态广播失败",
}


def _record_fields(record: logging.LogRecord, names: Sequence[str]) -> List[Tuple[str, str]]:
    pairs: List[Tuple[str, str]] = []
    for name in names:
        value = getattr(record, name, None)
        if value is None or value == "" or value == [] or value == {}:
            continue
        pairs.append((name, str(value)))
    return pairs


def _record_error(record: logging.LogRecord) -> Optional[str]:
    if record.exc_info:
        return "".join(traceback.format_exception(*record.exc_info)).rstrip()
    if record.stack_info:
        return record.stack_info.rstrip()
    error = getattr(record, "error", None)
    return None if error is None else str(error)


class _PanelTreeHandler(logging.Handler):
    """DEBUG/INFO records as a headline plus one branch per structured field."""

    STYLES = {logging.DEBUG: "dim", logging.INFO: "bold cyan"}

    def __init__(self, console: Console) -> None:
        super().__init__(level=logging.INFO)
        self._console = console

    def emit(self, record: logging.LogRecord) -> None:
        if record.levelno >= logging.WARNING or getattr(logging, "_shutdown", False):
            return
        try:
            headline = Text()
            stamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S.%f")[:-3]
            headline.append(stamp, style="dim")
            headline.append(f" {record.levelname:<8} ", style=self.STYLES.get(record.levelno, "white"))
            headline.append(f"[{record.name}] ", style="bold white")
            headline.append(record.getMessage())

            fields = _record_fields(record, TREE_FIELDS)
            error = _record_error(record)
            if not fields and error is None:
                self._console.print(headline)
                return
            tree = Tree(headline, guide_style="dim")
            for name, value in fields:
                tree.add(Text.assemble((f"{name}: ", "dim"), value))
            if error is not None:
                tree.add(Text.assemble(("error: ", "dim"), (error, "italic red")))
            self._console.print(tree)
        except Exception:
            self.handleError(record)


@dataclass
class _AlertWindow:
    """Folds identical alerts raised within `seconds` of the first one."""

    seconds: float = 60.0
    _seen: Dict[str, List[float]] = field(default_factory=dict)

    def admit(self, key: str) -> Optional[int]:
        """Return how many repeats were folded since the last shown alert, or None to drop it."""

        now = time.monotonic()
        entry = self._seen.get(key)
        if entry is not None and now - entry[0] < self.seconds:
            entry[1] += 1
            return None
        folded = int(entry[1]) if entry is not None else 0
        self._seen[key] = [now, 0]
        return folded


class _PanelAlertHandler(logging.Handler):
    """WARNING+ records as a single line with a Chinese hint for known failures."""

    def __init__(self, console: Console, window: Optional[_AlertWindow] = None) -> None:
        super().__init__(level=logging.WARNING)
        self._console = console
        self._window = window or _AlertWindow()

    def emit(self, record: logging.LogRecord) -> None:
        if getattr(logging, "_shutdown", False):
            return
        try:
            message = record.getMessage()
            key = f"{record.name}|{message}|{getattr(record, 'channel', '')}|{getattr(record, 'error', '')}"
            folded = self._window.admit(key)
            if folded is None:
                return
            hint = ALERT_HINTS.get(message)
            if hint:
                message = f"{message} | {hint}"
            if folded:
                message = f"{message} (+{folded} suppressed)"
            style = "yellow" if record.levelno == logging.WARNING else "red"
            line = Text(time.strftime("%H:%M:%S"), style="dim")
            line.append(f" {record.levelname:<8} ", style=f"bold {style}")
            line.append(f"[{record.name}] ", style="bold white")
            line.append(message, style=style)
            fields = _record_fields(record, ALERT_FIELDS)
            if fields:
                line.append(" :: ", style="dim")
                line.append(" ".join(f"{name}={value}" for name, value in fields))
            self._console.print(line)
        except Exception:
            self.handleError(record)


class _LevelBand(logging.Filter):
    def __init__(self, upper: int) -> None:
        super().__init__()
        self._upper = upper

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno <= self._upper


def _file_handler(path: Path, *, lower: int = logging.INFO, upper: Optional[int] = None) -> logging.Handler:
    handler = RotatingFileHandler(path, maxBytes=2 * 1024 * 1024, backupCount=10, encoding="utf-8")
    handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)-8s %(name)s :: %(message)s", "%Y-%m-%d %H:%M:%S")
    )
    handler.setLevel(lower)
    if upper is not None:
        handler.addFilter(_LevelBand(upper))
    return handler


def configure_logging(
    *,
    log_root: Optional[Path] = None,
    extra_loggers: Optional[Dict[str, Dict[str, Any]]] = None,
) -> Dict[str, logging.Logger]:
    """
    Install console and file handlers on the root logger and point telemetry at the same root.

    `extra_loggers` maps logger names to ``{"level": ..., "handlers": [...]}`` overrides; the
    configured loggers are returned by name.
    """

    logging.captureWarnings(True)
    root = (log_root or get_log_root()).resolve()
    root.mkdir(parents=True, exist_ok=True)
    setup_telemetry(log_root=root)

    console = Console()
    logging.basicConfig(
        level=logging.INFO,
        handlers=[
            _PanelTreeHandler(console),
            _PanelAlertHandler(console),
            _file_handler(root / INFO_LOG_FILENAME, upper=logging.INFO),
            _file_handler(root / ERROR_LOG_FILENAME, lower=logging.WARNING),
        ],
        force=True,
    )

    configured: Dict[str, logging.Logger] = {}
    for name, options in (extra_loggers or {}).items():
        logger = logging.getLogger(name)
        if "level" in options:
            logger.setLevel(options["level"])
        for handler in options.get("handlers", []):
            logger.addHandler(handler)
        configured[name] = logger
    return configured


__all__ = ["ERROR_LOG_FILENAME", "INFO_LOG_FILENAME", "configure_logging"]
