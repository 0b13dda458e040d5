"""
Base schema classes.

Response schemas read ORM objects (from_attributes) and dump JSON-safe
values: decimals as numbers, datetimes as ISO strings.
"""

from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, ConfigDict, PlainSerializer


# Decimal that is written to JSON as a number instead of a string
JsonDecimal = Annotated[
    Decimal, PlainSerializer(float, return_type=float, when_used="json")
]


class BaseResponseSchema(BaseModel):
    """
    Base class for response schemas that read from ORM models.

    Usage:
        UnifiedUserResponse.model_validate(user).model_dump(mode="json")
    """

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class BaseRequestSchema(BaseModel):
    """Base class for request bodies (unknown fields are ignored)."""

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)
