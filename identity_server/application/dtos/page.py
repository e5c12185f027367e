"""Generic paginated result."""

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Page(Generic[T]):
    """One page of results plus the total matching count."""

    items: list[T]
    total: int
    skip: int
    limit: int
