"""Pydantic schemas for the FastAPI transport layer."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ErrorInfo(BaseModel):
    code: str
    message: str
    details: dict[str, object] | list[object] | str | None = None


class ErrorResponse(BaseModel):
    error: ErrorInfo


class HealthResponse(BaseModel):
    status: str = "ok"


class LoginRequest(BaseModel):
    email: str

    model_config = ConfigDict(extra="ignore")

    @field_validator("email")
    @classmethod
    def _check_email(cls, value: str) -> str:
        text = value.strip()
        local, sep, domain = text.partition("@")
        if not sep or not local or not domain:
            raise ValueError("email must be an address")
        return text


class SessionStatusResponse(BaseModel):
    valid: bool
    email: str | None = None
    terminating: bool = False


class QueryRequest(BaseModel):
    field: str
    args: dict[str, Any] = Field(default_factory=dict)


class QueryResponse(BaseModel):
    data: Any = None
