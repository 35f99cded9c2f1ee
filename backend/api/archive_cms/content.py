"""
Dashboard content rows.

Articles and photographs are owned by external APIs. Here they are parsed into
a tagged union (`kind` is the discriminant) so one feed can be sorted and
rendered uniformly. Anything that reads kind-specific fields goes through the
helpers below, which match every kind explicitly.
"""

from __future__ import annotations

from datetime import datetime, timezone
from itertools import chain
from typing import Annotated, Any, Iterable, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

ContentKind = Literal["article", "photograph"]
CONTENT_KINDS: tuple[str, ...] = ("article", "photograph")


class _ContentBase(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True,
        frozen=True,
    )

    id: str
    title: str
    author: str = ""
    created_at: datetime
    updated_at: datetime

    @property
    def display_key(self) -> str:
        return f"{self.kind}-{self.id}"


class ArticleItem(_ContentBase):
    kind: Literal["article"] = "article"
    slug: str = ""
    published_at: Optional[datetime] = None


class PhotographItem(_ContentBase):
    kind: Literal["photograph"] = "photograph"
    description: str = ""
    photo_date: Optional[datetime] = None


ContentItem = Annotated[Union[ArticleItem, PhotographItem], Field(discriminator="kind")]


def tag_records(kind: str, records: Iterable[dict[str, Any]]) -> List[ArticleItem | PhotographItem]:
    """
    Parse raw API records as `kind`. Any `kind`/`type` key on the record is
    overwritten so the source decides the tag, not the payload.
    """
    if kind == "article":
        return [ArticleItem.model_validate({**r, "kind": "article"}) for r in records]
    if kind == "photograph":
        return [PhotographItem.model_validate({**r, "kind": "photograph"}) for r in records]
    raise ValueError(f"Unknown content kind: {kind}")


def _as_utc(ts: datetime) -> datetime:
    # Naive timestamps are taken as UTC so mixed sources still compare.
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts


def merge_by_updated(*groups: Iterable[ArticleItem | PhotographItem]) -> List[ArticleItem | PhotographItem]:
    """Most recently updated first. Ties keep source order."""
    return sorted(chain(*groups), key=lambda item: _as_utc(item.updated_at), reverse=True)


def secondary_text(item: ArticleItem | PhotographItem) -> str:
    if isinstance(item, ArticleItem):
        return item.slug
    if isinstance(item, PhotographItem):
        return item.description
    raise TypeError(f"Unhandled content item: {type(item).__name__}")


def effective_date(item: ArticleItem | PhotographItem) -> Optional[datetime]:
    if isinstance(item, ArticleItem):
        return item.published_at
    if isinstance(item, PhotographItem):
        return item.photo_date
    raise TypeError(f"Unhandled content item: {type(item).__name__}")


def api_path(kind: str) -> str:
    if kind == "article":
        return "/api/articles"
    if kind == "photograph":
        return "/api/photographs"
    raise ValueError(f"Unknown content kind: {kind}")
