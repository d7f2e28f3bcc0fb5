"""Runtime logging bootstrap helpers."""

from __future__ import annotations

from dataclasses import dataclass

from ..core.config import Settings
from ..util.log import Log, LogFormat, LogLevel


@dataclass(frozen=True)
class LogSettings:
    level: LogLevel
    format: LogFormat
    console: bool
    file: bool
    access_log: bool


def resolve_log_settings(settings: Settings) -> LogSettings:
    return LogSettings(
        level=LogLevel.parse(settings.log_level),
        format=LogFormat.parse(settings.log_format),
        console=True,
        file=settings.log_file,
        access_log=settings.access_log,
    )


def bootstrap_logging(settings: Settings) -> LogSettings:
    """Apply logging settings to the process logger."""
    resolved = resolve_log_settings(settings)
    Log.configure(
        level=resolved.level,
        format=resolved.format,
        console=resolved.console,
        file=resolved.file,
    )
    return resolved
