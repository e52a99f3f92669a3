# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# FastAPI dependency injection for shared request parsing.
# These are injected into route handlers using Depends().
# =============================================================================

import json
from typing import Annotated, Any

from fastapi import Depends, Request

from app.exceptions import MalformedBodyError


def _is_json(content_type: str) -> bool:
    media_type = content_type.split(";", 1)[0].strip().lower()
    return media_type == "application/json" or media_type.endswith("+json")


async def get_json_body(request: Request) -> dict[str, Any]:
    """
    Parse the request body as a JSON object.

    Bodies with a non-JSON content type are ignored and read as {}, as is
    an empty body. Malformed JSON and non-object JSON raise MalformedBodyError.
    """
    if not _is_json(request.headers.get("content-type", "")):
        return {}

    raw = await request.body()
    if not raw.strip():
        return {}

    try:
        payload = json.loads(raw)
    except ValueError as e:
        raise MalformedBodyError(f"Invalid JSON body: {e}")

    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise MalformedBodyError("Request body must be a JSON object")

    return payload


# Type alias for dependency injection
JsonBody = Annotated[dict[str, Any], Depends(get_json_body)]
