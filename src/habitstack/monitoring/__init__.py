"""Observability - structured logging."""

from .logging import configure_logging, get_logger, run_context

__all__ = ["configure_logging", "get_logger", "run_context"]
