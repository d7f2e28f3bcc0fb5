"""Runtime context exports."""

from .context import RouteSpec, RuntimeContext, compose_context

__all__ = ["RouteSpec", "RuntimeContext", "compose_context"]
