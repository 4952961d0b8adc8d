from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class PageParams:
    page: int = 1
    limit: int = 20

    @classmethod
    def clamp(cls, page: int | None, limit: int | None, *, default_limit: int, max_limit: int) -> PageParams:
        page = max(page or 1, 1)
        limit = default_limit if limit is None else limit
        return cls(page=page, limit=min(max(limit, 1), max_limit))

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass(frozen=True, slots=True)
class Page(Generic[T]):
    items: list[T]
    total: int
    params: PageParams
