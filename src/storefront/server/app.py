"""FastAPI application assembly."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from fastapi import APIRouter, Depends, FastAPI
from fastapi.routing import APIRoute

from .. import __version__
from ..core.config import Settings
from ..core.errors import AppAssemblyError, StartupError
from ..runtime.context import ResolverFactory, RouteSpec, RuntimeContext
from ..util.log import Log
from .errors import register_error_handlers
from .middleware import AccessLogMiddleware
from .routes import query, system
from .schemas import ErrorResponse

log = Log.create({"service": "server.app"})


class ResolverSchema(Mapping[str, Callable[..., Any]]):
    """Read-only mapping of query field name to resolver."""

    def __init__(self, fields: Mapping[str, Callable[..., Any]]) -> None:
        self._fields = MappingProxyType(dict(fields))

    def __getitem__(self, name: str) -> Callable[..., Any]:
        return self._fields[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)


@dataclass(frozen=True)
class ServableApp:
    asgi: FastAPI
    schema: ResolverSchema
    settings: Settings
    routes: tuple[RouteSpec, ...]


def build_schema(factories: Iterable[ResolverFactory], ctx: RuntimeContext) -> ResolverSchema:
    fields: dict[str, Callable[..., Any]] = {}
    for factory in factories:
        for name, resolver in factory(ctx).items():
            if name in fields:
                raise AppAssemblyError(f"resolver field '{name}' is registered more than once")
            fields[name] = resolver
    return ResolverSchema(fields)


BUILTIN_ROUTERS: tuple[APIRouter, ...] = (system.router, query.router)
SESSION_GUARD = "session_guard"


def _route_keys(routers: Iterable[APIRouter]) -> set[tuple[str, str]]:
    keys: set[tuple[str, str]] = set()
    for route in (r for router in routers for r in router.routes):
        if isinstance(route, APIRoute):
            keys.update((method, route.path) for method in route.methods)
    return keys


def _query_dependencies(ctx: RuntimeContext) -> list[Any]:
    if not ctx.settings.query_requires_session:
        return []
    if not ctx.has_service(SESSION_GUARD):
        raise AppAssemblyError("QUERY_REQUIRES_SESSION is set but no session guard is provided")
    return [Depends(ctx.service(SESSION_GUARD))]


def _assemble(ctx: RuntimeContext) -> ServableApp:
    settings = ctx.settings
    routes = ctx.routes
    schema = build_schema(ctx.resolver_factories, ctx)

    app = FastAPI(
        title="Storefront API",
        version=__version__,
        responses={
            400: {"model": ErrorResponse},
            401: {"model": ErrorResponse},
            404: {"model": ErrorResponse},
            422: {"model": ErrorResponse},
            500: {"model": ErrorResponse},
        },
    )
    app.state.schema = schema
    app.add_middleware(AccessLogMiddleware, enabled=settings.access_log)
    register_error_handlers(app)

    app.include_router(system.router)
    app.include_router(query.router, dependencies=_query_dependencies(ctx))

    seen = _route_keys(BUILTIN_ROUTERS)
    for spec in routes:
        if spec.key in seen:
            raise AppAssemblyError(f"route {spec.method} {spec.path} is registered more than once")
        seen.add(spec.key)
        app.add_api_route(spec.path, spec.handler, methods=[spec.method], name=spec.name)

    log.info("app composed", {"routes": len(routes), "fields": sorted(schema)})
    return ServableApp(asgi=app, schema=schema, settings=settings, routes=routes)


def compose_app(ctx: RuntimeContext) -> ServableApp:
    """Turn the composed context into a servable application.

    Reads the context's registries without changing them.
    """
    try:
        return _assemble(ctx)
    except Exception as exc:
        raise StartupError("compose_app_failed", exc) from exc
