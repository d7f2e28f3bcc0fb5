"""Serve command - run the startup pipeline and serve until interrupted."""

from __future__ import annotations

import os

from ...runtime.pipeline import run


def env_with_overrides(
    base: dict[str, str],
    *,
    host: str | None = None,
    port: int | None = None,
    log_level: str | None = None,
    log_format: str | None = None,
    access_log: bool | None = None,
) -> dict[str, str]:
    env = dict(base)
    overrides = {
        "HOST": host,
        "PORT": None if port is None else str(port),
        "LOG_LEVEL": log_level,
        "LOG_FORMAT": log_format,
        "ACCESS_LOG": None if access_log is None else str(access_log).lower(),
    }
    env.update({key: value for key, value in overrides.items() if value is not None})
    return env


def serve_command(
    *,
    host: str | None,
    port: int | None,
    log_level: str | None,
    log_format: str | None,
    access_log: bool | None,
) -> None:
    env = env_with_overrides(
        dict(os.environ),
        host=host,
        port=port,
        log_level=log_level,
        log_format=log_format,
        access_log=access_log,
    )
    run(env)
