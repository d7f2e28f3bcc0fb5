"""Runtime context and its composer."""

from __future__ import annotations

import os
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from ..core.config import Settings
from ..core.errors import StartupError
from ..util.log import Log, Logger
from .logging import bootstrap_logging

ResolverBindings = Mapping[str, Callable[..., Any]]
ResolverFactory = Callable[["RuntimeContext"], ResolverBindings]


@dataclass(frozen=True)
class RouteSpec:
    """One HTTP route: method, path and endpoint callable."""

    method: str
    path: str
    handler: Callable[..., Any]
    name: str | None = None

    @property
    def key(self) -> tuple[str, str]:
        return self.method.upper(), self.path


class RuntimeContext:
    """State built up by the startup pipeline.

    One instance exists per start.  Each stage receives it, appends to the
    ordered registries, and passes it on.  Once sealed, the registries are
    read-only.
    """

    __slots__ = (
        "env",
        "settings",
        "logger",
        "_resolver_factories",
        "_routes",
        "_services",
        "_sealed",
    )

    def __init__(self, env: Mapping[str, str], settings: Settings, logger: Logger) -> None:
        self.env = dict(env)
        self.settings = settings
        self.logger = logger
        self._resolver_factories: list[ResolverFactory] = []
        self._routes: list[RouteSpec] = []
        self._services: dict[str, Any] = {}
        self._sealed = False

    @property
    def resolver_factories(self) -> tuple[ResolverFactory, ...]:
        return tuple(self._resolver_factories)

    @property
    def routes(self) -> tuple[RouteSpec, ...]:
        return tuple(self._routes)

    @property
    def sealed(self) -> bool:
        return self._sealed

    def _check_open(self, what: str) -> None:
        if self._sealed:
            raise RuntimeError(f"runtime context is sealed; cannot {what}")

    def add_resolver_factory(self, factory: ResolverFactory) -> None:
        self._check_open("add resolver factory")
        self._resolver_factories.append(factory)

    def add_route(self, method: str, path: str, handler: Callable[..., Any], name: str | None = None) -> None:
        self._check_open(f"add route {method} {path}")
        self._routes.append(RouteSpec(method=method.upper(), path=path, handler=handler, name=name))

    def provide(self, name: str, service: Any) -> None:
        """Publish a domain service for later domains and resolvers."""
        self._check_open(f"provide service {name!r}")
        if name in self._services:
            raise RuntimeError(f"service {name!r} is already provided")
        self._services[name] = service

    def service(self, name: str) -> Any:
        try:
            return self._services[name]
        except KeyError:
            raise LookupError(f"service {name!r} is not available") from None

    def has_service(self, name: str) -> bool:
        return name in self._services

    def seal(self) -> "RuntimeContext":
        self._sealed = True
        return self


async def compose_context(env: Mapping[str, str] | None = None) -> RuntimeContext:
    """Validate the environment and build a fresh runtime context."""
    snapshot = dict(os.environ if env is None else env)
    try:
        settings = Settings.from_env(snapshot)
        bootstrap_logging(settings)
    except Exception as exc:
        raise StartupError("compose_context_failed", exc) from exc

    logger = Log.create({"service": "runtime"})
    ctx = RuntimeContext(snapshot, settings, logger)
    logger.emit("compose_context_complete", "trace", "compose_context_complete")
    return ctx
