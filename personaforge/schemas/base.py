"""Base Pydantic schemas with CamelCase conversion."""

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict
from humps import camelize


def to_camel(string: str) -> str:
    """Convert snake_case to camelCase."""
    return camelize(string)


class CamelModel(BaseModel):
    """
    Base model that converts snake_case fields to camelCase in JSON responses.

    Usage:
        class MyResponse(CamelModel):
            first_name: str  # JSON: firstName
            posts_count: int # JSON: postsCount
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


T = TypeVar("T")


class PaginationMeta(CamelModel):
    """Offset pagination metadata."""

    limit: int
    offset: int
    total: int


class PaginatedResponse(CamelModel, Generic[T]):
    """
    Generic paginated response wrapper.

    Usage:
        PaginatedResponse[IdentityListItem](
            data=[...],
            meta=PaginationMeta(limit=20, offset=0, total=100)
        )
    """

    data: list[T]
    meta: PaginationMeta


class MessageResponse(CamelModel):
    """Plain acknowledgement."""

    message: str
