"""Error formatting utilities."""

import json
import traceback
from typing import Any, TypeVar

E = TypeVar("E", bound=BaseException)


def root_cause(error: BaseException) -> BaseException:
    """Follow the explicit ``__cause__`` chain down to the original error."""
    seen: set[int] = set()
    current = error
    while current.__cause__ is not None and id(current) not in seen:
        seen.add(id(current))
        current = current.__cause__
    return current


def find_cause(error: BaseException, kind: type[E]) -> E | None:
    """First error of type ``kind`` in the ``__cause__`` chain, starting at ``error``."""
    seen: set[int] = set()
    current: BaseException | None = error
    while current is not None and id(current) not in seen:
        if isinstance(current, kind):
            return current
        seen.add(id(current))
        current = current.__cause__
    return None


def format_cause_chain(error: BaseException) -> str:
    """One-line rendering of an error and everything it was raised from."""
    parts: list[str] = []
    current: BaseException | None = error
    while current is not None and len(parts) < 10:
        text = str(current)
        parts.append(f"{type(current).__name__}: {text}" if text else type(current).__name__)
        current = current.__cause__
    return " <- ".join(parts)


def format_unknown_error(error: Any) -> str:
    """Format any error into a string representation.

    Handles exceptions (with traceback when available), serializable
    containers, and primitives.
    """
    if isinstance(error, BaseException):
        if error.__traceback__:
            return "".join(traceback.format_exception(type(error), error, error.__traceback__))
        return f"{error.__class__.__name__}: {error}"

    if isinstance(error, (dict, list)):
        try:
            return json.dumps(error, indent=2)
        except (TypeError, ValueError):
            return "Unexpected error (unserializable)"

    return str(error)
