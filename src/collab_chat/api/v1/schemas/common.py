from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Wire models use camelCase, matching the socket payloads."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PaginatedResponse(CamelModel, Generic[T]):
    page: int
    limit: int
    total: int
    items: list[T]  # type: ignore[type-var]
