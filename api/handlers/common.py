"""
Helpers shared by the request handlers.
"""

import json
from typing import TypeVar

import pydantic
from aiohttp import web

from api.app_keys import SESSION_MAKER
from app.schemas.base import BaseRequestSchema
from app.services.commission.config import CommissionConfig, load_commission_config
from app.utils.exceptions import ValidationError


SchemaT = TypeVar("SchemaT", bound=BaseRequestSchema)


async def parse_body(
    request: web.Request, schema: type[SchemaT], required: bool = True
) -> SchemaT:
    """
    Read and validate a JSON request body.

    Args:
        request: Incoming request
        schema: Pydantic model for the body
        required: Whether an empty body is an error

    Returns:
        Validated schema instance

    Raises:
        ValidationError: Invalid JSON or fields
    """
    raw = await request.text()
    if not raw.strip():
        if required:
            raise ValidationError("Request body is required")
        return schema()

    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValidationError(f"Invalid JSON body: {e.msg}") from e

    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")

    try:
        return schema.model_validate(payload)
    except pydantic.ValidationError as e:
        raise ValidationError(describe_validation_error(e)) from e


def describe_validation_error(exc: pydantic.ValidationError) -> str:
    """Flatten pydantic errors into one message."""
    missing = [
        ".".join(str(part) for part in err["loc"])
        for err in exc.errors()
        if err["type"] == "missing"
    ]
    if missing:
        return f"Missing required fields: {', '.join(missing)}"

    err = exc.errors()[0]
    location = ".".join(str(part) for part in err["loc"])
    return f"Invalid field {location}: {err['msg']}"


async def request_config(request: web.Request) -> CommissionConfig:
    """Load the commission config once for this request."""
    async with request.app[SESSION_MAKER]() as session:
        return await load_commission_config(session)
