"""Shared API schemas: pagination envelope."""

from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class PageResponse(BaseModel, Generic[T]):
    """One page of items plus the total count matching the filter."""

    items: list[T]
    total: int
    skip: int
    limit: int
