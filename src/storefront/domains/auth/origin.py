"""Proxy-aware origin detection.

The origin a client perceived is derived per request from, in order:

1. the first element of an RFC 7239 ``Forwarded`` header (``proto``/``host``),
2. ``X-Forwarded-Proto`` / ``X-Forwarded-Host`` (first value of each list),
3. the raw request scheme and ``Host``.

``X-Forwarded-Prefix`` is appended when the origin came from a proxy header.
Proxy headers are ignored unless the proxy is trusted.
"""

from __future__ import annotations

import re
from collections.abc import Mapping

from starlette.requests import Request

_SCHEMES = {"http", "https"}
_HOST_RE = re.compile(r"^[A-Za-z0-9.\-_~%]+(:\d{1,5})?$|^\[[0-9A-Fa-f:.]+\](:\d{1,5})?$")


def _first(value: str | None) -> str | None:
    if not value:
        return None
    head = value.split(",", 1)[0].strip()
    return head or None


def _clean_scheme(value: str | None) -> str | None:
    if not value:
        return None
    text = value.strip().strip('"').lower()
    return text if text in _SCHEMES else None


def _clean_host(value: str | None) -> str | None:
    if not value:
        return None
    text = value.strip().strip('"')
    return text if _HOST_RE.match(text) else None


def _clean_prefix(value: str | None) -> str:
    text = _first(value)
    if not text:
        return ""
    text = "/" + text.strip("/")
    if text == "/" or any(ch.isspace() for ch in text) or "//" in text:
        return ""
    return text


def parse_forwarded(value: str | None) -> dict[str, str]:
    """Parse the first element of an RFC 7239 ``Forwarded`` header."""
    element = _first(value)
    if not element:
        return {}
    result: dict[str, str] = {}
    for pair in element.split(";"):
        key, sep, val = pair.partition("=")
        if not sep:
            continue
        result[key.strip().lower()] = val.strip().strip('"')
    return result


def perceived_origin(
    headers: Mapping[str, str],
    scheme: str,
    host: str,
    *,
    trust_proxy: bool = True,
) -> str:
    """Compute ``scheme://host[/prefix]`` as seen by the client."""
    if trust_proxy:
        forwarded = parse_forwarded(headers.get("forwarded"))
        f_scheme = _clean_scheme(forwarded.get("proto"))
        f_host = _clean_host(forwarded.get("host"))
        if not (f_scheme or f_host):
            f_scheme = _clean_scheme(_first(headers.get("x-forwarded-proto")))
            f_host = _clean_host(_first(headers.get("x-forwarded-host")))
        if f_scheme or f_host:
            origin = f"{f_scheme or scheme.lower()}://{f_host or host}"
            return origin + _clean_prefix(headers.get("x-forwarded-prefix"))
    return f"{scheme.lower()}://{host}"


def request_origin(request: Request, *, trust_proxy: bool = True) -> str:
    return perceived_origin(
        request.headers,
        request.url.scheme,
        request.headers.get("host") or request.url.netloc,
        trust_proxy=trust_proxy,
    )
