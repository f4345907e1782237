"""Content models for the microCMS blog API.

The wire format uses camelCase keys (``publishedAt``, ``totalCount``); the
models expose snake_case attributes and accept either spelling on input.

- `Article`: one content item with body fragments, timestamps, categories
- `Category`: a taxonomy entry
- `ArticleList`: one fetched page of articles plus the pagination metadata
  stamped onto it before it is handed to the index template
- `CategoryList`: the authoritative category listing
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from microblogen.pagination import PageInfo

_WIRE = ConfigDict(populate_by_name=True, extra="ignore")


class Body(BaseModel):
    """A named HTML fragment of an article body (a microCMS repeater field)."""

    model_config = _WIRE

    field_id: str = Field(default="", alias="fieldId")
    body: str = ""


class Event(BaseModel):
    model_config = _WIRE

    event_text: str = Field(default="", alias="eventText")
    event_link: str = Field(default="", alias="eventLink")


class Category(BaseModel):
    model_config = _WIRE

    id: str
    name: str = ""


class Article(BaseModel):
    """A single blog article.

    Optional fields are absent when the listing was fetched with a reduced
    field set (the "latest" listing carries no body or event).
    """

    model_config = _WIRE

    id: str
    title: str = ""
    body: list[Body] = Field(default_factory=list)
    published_at: datetime | None = Field(default=None, alias="publishedAt")
    updated_at: datetime | None = Field(default=None, alias="updatedAt")
    category: list[Category] = Field(default_factory=list)
    event: Event | None = None

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_defaults=True)


class ArticleList(BaseModel):
    """One page of articles as returned by the source, plus navigation fields."""

    model_config = _WIRE

    articles: list[Article] = Field(default_factory=list, alias="contents")
    total_count: int = Field(default=0, alias="totalCount")
    offset: int = 0
    limit: int = 0

    next_page: int = 0
    current_page: int = 0
    prev_page: int = 0
    all_page: int = 0
    root: str = "/"
    is_index: bool = False
    archive_name: str = ""

    @property
    def has_prev(self) -> bool:
        return self._info().has_prev

    @property
    def has_next(self) -> bool:
        return self._info().has_next

    def _info(self) -> PageInfo:
        return PageInfo(
            current_page=self.current_page,
            prev_page=self.prev_page,
            next_page=self.next_page,
            all_page=self.all_page,
        )

    def stamp(
        self,
        info: PageInfo,
        *,
        root: str,
        is_index: bool,
        archive_name: str = "",
    ) -> ArticleList:
        """Attach navigation metadata in place and return self."""
        self.current_page = info.current_page
        self.prev_page = info.prev_page
        self.next_page = info.next_page
        self.all_page = info.all_page
        self.root = root
        self.is_index = is_index
        self.archive_name = archive_name
        return self


class CategoryList(BaseModel):
    model_config = _WIRE

    categories: list[Category] = Field(default_factory=list, alias="contents")
    total_count: int = Field(default=0, alias="totalCount")
    offset: int = 0
    limit: int = 0


__all__ = ["Article", "ArticleList", "Body", "Category", "CategoryList", "Event"]
