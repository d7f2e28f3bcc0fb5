"""Process configuration.

Settings are read from an environment mapping (normally a snapshot of
``os.environ``) and validated with pydantic.  Field aliases are the
environment variable names.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Literal, Optional
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ConfigurationError


def _normalize_origin(value: str, *, name: str) -> str:
    text = value.strip().rstrip("/")
    parts = urlsplit(text)
    if parts.scheme not in {"http", "https"} or not parts.netloc:
        raise ValueError(f"{name} must be an absolute http(s) URL")
    return text


class Settings(BaseModel):
    """Validated runtime settings."""

    client_origin: str = Field(alias="CLIENT_ORIGIN")
    host: str = Field("127.0.0.1", alias="HOST")
    port: int = Field(3001, alias="PORT", ge=0, le=65535)

    authorization_endpoint: Optional[str] = Field(None, alias="AUTHORIZATION_ENDPOINT")
    deauthorization_endpoint: Optional[str] = Field(None, alias="DEAUTHORIZATION_ENDPOINT")
    pending_ttl: float = Field(600.0, alias="AUTH_PENDING_TTL", gt=0)
    session_ttl: float = Field(86400.0, alias="SESSION_TTL", gt=0)
    trust_proxy: bool = Field(True, alias="TRUST_PROXY")

    users_file: Optional[str] = Field(None, alias="USERS_FILE")

    log_level: Literal["trace", "debug", "info", "warn", "warning", "error"] = Field("info", alias="LOG_LEVEL")
    log_format: Literal["kv", "json", "pretty"] = Field("kv", alias="LOG_FORMAT")
    log_file: bool = Field(False, alias="LOG_FILE")
    access_log: bool = Field(True, alias="ACCESS_LOG")

    query_requires_session: bool = Field(False, alias="QUERY_REQUIRES_SESSION")

    verify_timeout: float = Field(5.0, alias="VERIFY_TIMEOUT", gt=0)

    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)

    @field_validator("client_origin")
    @classmethod
    def _check_client_origin(cls, value: str) -> str:
        return _normalize_origin(value, name="CLIENT_ORIGIN")

    @field_validator("authorization_endpoint", "deauthorization_endpoint")
    @classmethod
    def _check_endpoint(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return _normalize_origin(value, name="endpoint")

    @field_validator("host")
    @classmethod
    def _check_host(cls, value: str) -> str:
        text = value.strip()
        if not text:
            raise ValueError("HOST must not be empty")
        return text

    @field_validator("log_level", "log_format", mode="before")
    @classmethod
    def _lower(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @classmethod
    def from_env(cls, env: Mapping[str, str]) -> "Settings":
        """Build settings from an environment mapping.

        Blank values count as unset.  Raises ``ConfigurationError`` naming
        every offending variable.
        """
        aliases = {field.alias for field in cls.model_fields.values() if field.alias}
        data = {
            key: value
            for key, value in env.items()
            if key in aliases and value is not None and str(value).strip() != ""
        }
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            problems = []
            for item in exc.errors():
                loc = item.get("loc") or ("?",)
                name = str(loc[0])
                message = "is required" if item.get("type") == "missing" else str(item.get("msg"))
                problems.append((name, message))
            raise ConfigurationError(problems) from exc
