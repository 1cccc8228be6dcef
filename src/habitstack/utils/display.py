"""Shared formatting utilities for human-readable schedule output."""

from __future__ import annotations

from typing import Optional


def format_duration(seconds: Optional[float]) -> str:
    """Turn seconds into a compact human-readable duration string."""
    if seconds is None:
        return "—"

    seconds = int(abs(seconds))
    hours, remainder = divmod(seconds, 3600)
    minutes, secs = divmod(remainder, 60)

    parts: list[str] = []
    if hours:
        parts.append(f"{hours}h")
    if minutes:
        parts.append(f"{minutes}m")
    if secs or not parts:
        parts.append(f"{secs}s")
    return " ".join(parts)


def relative_time(elapsed: Optional[float], default: str = "never") -> str:
    """Describe ``elapsed`` seconds relative to now (e.g., '5m ago')."""
    if elapsed is None:
        return default

    suffix = "ago" if elapsed >= 0 else "from now"
    return f"{format_duration(elapsed)} {suffix}"


__all__ = [
    "format_duration",
    "relative_time",
]
