from __future__ import annotations

from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class Link(BaseModel):
    href: str
    rel: str
    method: str = "GET"


class Resource(BaseModel, Generic[T]):
    """Réponse HATEOAS : la donnée + ses liens."""

    model_config = ConfigDict(populate_by_name=True)

    data: T
    links: List[Link] = Field(default_factory=list, alias="_links")


class PaginationMeta(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    page: int
    per_page: int
    total_pages: int
    total_items: int


class Page(BaseModel, Generic[T]):
    model_config = ConfigDict(populate_by_name=True)

    data: List[Resource[T]]
    pagination: PaginationMeta
    links: List[Link] = Field(default_factory=list, alias="_links")


class APIResponse(BaseModel):
    """Corps d'erreur stable renvoyé par l'API."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    code: int
    type: str = "error"
    error: str
    message: str
    missing_product_ids: Optional[List[str]] = None
