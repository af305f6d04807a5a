"""Shared response shapes."""

from datetime import datetime, timezone
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator


def _to_unix(value: Any) -> Any:
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return int(value.timestamp())
    return value


# Stored datetimes are naive UTC; responses carry Unix seconds.
Timestamp = Annotated[int, BeforeValidator(_to_unix)]


class SuccessResponse(BaseModel):
    success: bool = True


class ExistsResponse(BaseModel):
    exists: bool


class ErrorResponse(BaseModel):
    error: str
