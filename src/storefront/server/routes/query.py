"""Resolver query route.

Runs a single resolver from the composed schema::

    POST /query {"field": "user", "args": {"email": "shopper1@95729.com"}}
"""

from __future__ import annotations

import inspect

from fastapi import APIRouter, Body, Request

from ...core.errors import NotFoundError
from ..schemas import QueryRequest, QueryResponse

router = APIRouter(tags=["query"])


@router.post("/query", response_model=QueryResponse)
async def run_query(request: Request, payload: QueryRequest = Body(...)) -> QueryResponse:
    schema = request.app.state.schema
    resolver = schema.get(payload.field)
    if resolver is None:
        raise NotFoundError("Field", payload.field)
    try:
        bound = inspect.signature(resolver).bind(**payload.args)
    except TypeError as exc:
        raise ValueError(f"invalid arguments for '{payload.field}': {exc}") from exc
    result = resolver(*bound.args, **bound.kwargs)
    if inspect.isawaitable(result):
        result = await result
    return QueryResponse(data=result)
