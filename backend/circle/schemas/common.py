"""Common Schemas — pagination envelope shared by every listing."""

from typing import Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class Page(BaseModel, Generic[T]):
    """Data + total item count + total page count."""
    data: list[T] = Field(default_factory=list)
    count: int = 0
    pages: int = 0
