"""Utility modules."""

from .log import Log
from .error import find_cause, format_cause_chain, format_unknown_error, root_cause

__all__ = ["Log", "find_cause", "format_cause_chain", "format_unknown_error", "root_cause"]
