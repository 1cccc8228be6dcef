"""Structured logging setup for HabitStack.

This module configures a Rich-powered console logger, optionally alongside a
JSONL file sink, and exposes helpers for creating context-aware structlog
loggers. The scheduling engine only ever logs; nothing it computes depends on
logging being configured.
"""

from __future__ import annotations

import logging
import time
import uuid
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, Optional

import structlog
from structlog.contextvars import bound_contextvars, merge_contextvars
from rich.console import Console

from habitstack.utils.config import get_config
from habitstack.utils.display import format_duration
from habitstack.utils.exceptions import ConfigurationError

__all__ = [
    "configure_logging",
    "get_logger",
    "logger",
    "run_context",
]

_CONFIGURED = False
_CONSOLE = Console(soft_wrap=True, stderr=True)

_LEVEL_STYLES: Dict[str, str] = {
    "CRITICAL": "bold white on red",
    "ERROR": "bold red",
    "WARNING": "bold yellow",
    "INFO": "bold blue",
    "DEBUG": "dim cyan",
    "NOTSET": "dim",
}

_LEVEL_ICONS: Dict[str, str] = {
    "CRITICAL": "✗",
    "ERROR": "✗",
    "WARNING": "⚠",
    "INFO": "ℹ",
    "DEBUG": "⚙",
    "NOTSET": "·",
}


class ThirdPartyFilter(logging.Filter):
    """Suppress noisy INFO logs from third-party libraries."""

    def filter(self, record: logging.LogRecord) -> bool:  # pragma: no cover - noise reduction
        if record.name.startswith("habitstack"):
            return True
        return record.levelno >= logging.WARNING


class RichConsoleHandler(logging.Handler):
    """Stream handler that delegates rendering to Rich."""

    def __init__(self) -> None:
        super().__init__()
        self.console = _CONSOLE

    def emit(self, record: logging.LogRecord) -> None:  # pragma: no cover - thin wrapper
        try:
            message = self.format(record)
            self.console.print(message, markup=True, highlight=False, overflow="ignore")
        except Exception:  # pragma: no cover - safety net
            self.handleError(record)


class EventDelta:
    """Add time delta since previous log entry for the same logger name."""

    def __init__(self) -> None:
        self._last_seen: Dict[str, float] = {}

    def __call__(
        self,
        logger: Any,
        name: str,
        event_dict: Dict[str, Any],
    ) -> Dict[str, Any]:
        now = time.monotonic()
        last = self._last_seen.get(name, now)
        event_dict["delta_ms"] = int((now - last) * 1000)
        self._last_seen[name] = now
        return event_dict


def _level_markup(level: str) -> str:
    style = _LEVEL_STYLES.get(level, "white")
    icon = _LEVEL_ICONS.get(level, "·")
    short_level = level[:4] if level != "WARNING" else "WARN"
    return f"[{style}]{icon} {short_level:<4}[/]"


def _format_delta(delta_ms: Optional[int]) -> str:
    if delta_ms is None:
        return "+000ms"
    if delta_ms >= 1000:
        return f"+{delta_ms / 1000:.1f}s"
    return f"+{delta_ms:03d}ms"


def _format_pairs(pairs: Iterable[tuple[str, Any]]) -> str:
    formatted = []
    for key, value in pairs:
        # Durations are logged in seconds under a `_s` suffix.
        if key.endswith("_s") and isinstance(value, (int, float)):
            formatted.append(f"{key[:-2]}={format_duration(value)}")
        elif isinstance(value, float):
            formatted.append(f"{key}={value:.2f}")
        elif isinstance(value, (dict, list, tuple)):
            formatted.append(f"{key}={value!r}")
        elif isinstance(value, str) and " " in value:
            formatted.append(f"{key}=\"{value}\"")
        else:
            formatted.append(f"{key}={value}")
    return " ".join(formatted)


def _console_renderer(
    logger: logging.Logger,
    name: str,
    event_dict: Dict[str, Any],
) -> str:
    timestamp = event_dict.pop("timestamp", None)
    level = event_dict.pop("level", "INFO").upper()
    delta_ms = event_dict.pop("delta_ms", None)
    component = event_dict.pop("logger", name)
    event = event_dict.pop("event", "")

    if isinstance(timestamp, str):
        ts_text = timestamp.split("T")[-1]
        if "." in ts_text:
            ts_text = ts_text.rsplit(".", 1)[0]
    else:
        ts_text = datetime.now().strftime("%H:%M:%S")

    if component.startswith("habitstack."):
        component = component.replace("habitstack.", "")

    pairs = _format_pairs(sorted(event_dict.items()))

    prefix = " | ".join(
        (
            f"[dim white]{ts_text}[/]",
            _level_markup(level),
            f"[bold magenta]{component}[/]",
            f"[dim cyan]{_format_delta(delta_ms)}[/]",
        )
    )

    if pairs:
        return f"{prefix} | [white]{event}[/] [dim]{pairs}[/]"
    return f"{prefix} | [white]{event}[/]"


def _json_renderer(
    logger: logging.Logger,
    name: str,
    event_dict: Dict[str, Any],
) -> str:
    return structlog.processors.JSONRenderer(sort_keys=False)(logger, name, event_dict)


def _common_processors() -> list[Any]:
    """Return processors shared by structlog and foreign (stdlib) loggers.

    wrap_for_formatter is appended only in the structlog.configure() chain,
    never in foreign_pre_chain.
    """
    return [
        merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", key="timestamp"),
        EventDelta(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]


def configure_logging(
    level: Optional[str] = None,
    log_dir: Optional[Path | str] = None,
) -> None:
    """Configure console (and optional file) logging once per process.

    Unset arguments fall back to the `logging` section of the config, which
    `HABITSTACK_LOG_LEVEL` and `HABITSTACK_LOG_DIR` override.
    """
    global _CONFIGURED
    if _CONFIGURED:
        return

    config_error: Optional[ConfigurationError] = None
    try:
        settings = get_config().section("logging")
    except ConfigurationError as exc:
        # Logging still comes up; callers that need the config see the error.
        settings, config_error = {}, exc
    resolved_level = str(level or settings.get("level") or "INFO").upper()
    resolved_dir = log_dir or settings.get("log_dir")

    console_handler = RichConsoleHandler()
    console_handler.setLevel(resolved_level)
    console_handler.addFilter(ThirdPartyFilter())
    console_handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=_console_renderer,
            foreign_pre_chain=_common_processors(),
        )
    )
    handlers: list[logging.Handler] = [console_handler]

    if resolved_dir:
        directory = Path(resolved_dir).expanduser().resolve()
        directory.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(directory / f"{datetime.now():%Y%m%d}.log", encoding="utf-8")
        file_handler.setLevel(resolved_level)
        file_handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                processor=_json_renderer,
                foreign_pre_chain=_common_processors(),
            )
        )
        handlers.append(file_handler)

    logging.basicConfig(
        level=getattr(logging, resolved_level, logging.INFO),
        handlers=handlers,
        force=True,
    )

    structlog.configure(
        processors=_common_processors() + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    _CONFIGURED = True
    if config_error is not None:
        structlog.get_logger("habitstack").warning("logging.config_invalid", error=str(config_error))


def get_logger(name: Optional[str] = None, **context: Any) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger bound to the given name and context."""
    configure_logging()
    base = structlog.get_logger(name or "habitstack")
    if context:
        return base.bind(**context)
    return base


@contextmanager
def run_context(strategy: str) -> Iterator[str]:
    """Tag every log line emitted during one scheduling run with a short run ID."""
    run_id = uuid.uuid4().hex[:8]
    with bound_contextvars(run=run_id, strategy=strategy):
        yield run_id


# Provide a default logger for modules that import `logger` directly.
logger = get_logger()
