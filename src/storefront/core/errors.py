"""Error taxonomy shared by the bootstrap pipeline and the transport layer."""

from __future__ import annotations

from collections.abc import Sequence


class ConfigurationError(ValueError):
    """Raised when required environment inputs are missing or invalid."""

    def __init__(self, problems: Sequence[tuple[str, str]]):
        self.problems = list(problems)
        detail = "; ".join(f"{name}: {message}" for name, message in self.problems)
        super().__init__(f"invalid configuration: {detail}" if detail else "invalid configuration")


class StartupError(Exception):
    """A pipeline stage failed.

    ``stage`` is a tag such as ``compose_domains_failed``.  The original
    exception is kept both as ``cause`` and as ``__cause__``.
    """

    def __init__(self, stage: str, cause: BaseException | None = None, message: str | None = None):
        self.stage = stage
        self.cause = cause
        text = message or (f"{stage}: {cause}" if cause is not None else stage)
        super().__init__(text)
        if cause is not None:
            self.__cause__ = cause


class ComposeDomainsError(StartupError):
    """A domain failed to load or register."""

    STAGE = "compose_domains_failed"

    def __init__(self, domain: str, index: int, cause: BaseException):
        self.domain = domain
        self.index = index
        super().__init__(
            self.STAGE,
            cause,
            message=f"{self.STAGE}: domain '{domain}' (#{index}) failed: {cause}",
        )


class AppAssemblyError(ValueError):
    """Conflicting routes or resolver fields found while assembling the app."""


class AuthError(Exception):
    """Invalid, missing, or unmatched authorization credential.

    ``clear_cookies`` names client cookies that are known to be stale and
    should be removed on the rejection response.
    """

    def __init__(self, reason: str, message: str | None = None, *, clear_cookies: tuple[str, ...] = ()):
        self.reason = reason
        self.clear_cookies = clear_cookies
        super().__init__(message or reason.replace("_", " "))


class NotFoundError(Exception):
    """Raised when an API resource is not found."""

    def __init__(self, resource: str, id: str | None = None):
        self.resource = resource
        self.id = id
        super().__init__(f"{resource} '{id}' not found" if id is not None else f"{resource} not found")
