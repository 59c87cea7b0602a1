"""Common schemas used across multiple endpoints."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model that reads and writes camelCase JSON keys."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ErrorResponse(BaseModel):
    """Response model for errors."""
    model_config = ConfigDict(extra="allow")

    error: str
    code: str
    details: Optional[Any] = None


class MessageResponse(CamelModel):
    """Response model for simple acknowledgements."""
    message: str
    id: Optional[int] = None
