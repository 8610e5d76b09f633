"""
Shared API Schemas

Response envelopes used across modules. Fields are snake_case in Python
and camelCase on the wire.
"""

from datetime import datetime
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class ApiModel(BaseModel):
    """Base model serializing to camelCase JSON."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ErrorResponse(ApiModel):
    """Error envelope returned by every failure path."""

    code: str
    message: str
    details: Any | None = None


class Page(ApiModel, Generic[T]):
    """Paginated listing envelope."""

    items: list[T] = Field(default_factory=list)
    page: int = Field(1, gt=0)
    page_size: int = Field(..., gt=0)
    total: int = Field(0, ge=0)


class HealthResponse(ApiModel):
    status: str
    timestamp: datetime
