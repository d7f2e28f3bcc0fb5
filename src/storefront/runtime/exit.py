"""Top-level failure sink."""

from __future__ import annotations

import sys
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any, NoReturn

from rich.console import Console
from rich.markup import escape

from ..core.errors import ConfigurationError
from ..util.error import find_cause, format_cause_chain, format_unknown_error, root_cause
from ..util.log import Logger

EX_SOFTWARE = 1
EX_CONFIG = 78

UNTAGGED_STAGE = "unhandled"


def _now() -> datetime:
    return datetime.now(timezone.utc)


class ExitHandler:
    """Logs a fatal error with its stage tag and terminates the process."""

    def __init__(
        self,
        logger: Logger,
        *,
        clock: Callable[[], datetime] = _now,
        terminate: Callable[[int], Any] = sys.exit,
        console: Console | None = None,
    ) -> None:
        self.logger = logger
        self.clock = clock
        self.terminate = terminate
        self.console = console or Console(stderr=True)

    @staticmethod
    def status_for(error: BaseException) -> int:
        if find_cause(error, ConfigurationError) is not None:
            return EX_CONFIG
        return EX_SOFTWARE

    def __call__(self, error: BaseException) -> NoReturn:
        stage = getattr(error, "stage", None) or UNTAGGED_STAGE
        status = self.status_for(error)
        self.logger.error(
            "startup failed",
            {
                "stage": stage,
                "timestamp": self.clock().isoformat(),
                "error_type": type(error).__name__,
                "error": format_cause_chain(error),
                "status": status,
            },
        )
        self.logger.debug("startup failure traceback", {"traceback": format_unknown_error(error)})
        shown = find_cause(error, ConfigurationError) or root_cause(error)
        self.console.print(f"[red]startup failed[/red] ({stage}): {escape(str(shown))}")
        self.terminate(status)
        raise SystemExit(status)
