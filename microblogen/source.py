"""Content source boundary: bounded list queries against a headless CMS.

The pipeline depends only on the :class:`ContentSource` protocol. The
production implementation, :class:`MicroCMSClient`, talks to the microCMS
list API over httpx. Any failure surfaces as :class:`FetchError`; nothing is
retried, a failed fetch ends the build.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol

import httpx
from pydantic import ValidationError

from microblogen.errors import FetchError
from microblogen.log import get_logger
from microblogen.models import ArticleList, CategoryList

logger = get_logger(__name__)

ARTICLE_ENDPOINT = "article"
CATEGORY_ENDPOINT = "category"

LATEST_FIELDS = ("id", "title", "publishedAt", "updatedAt", "category.id", "category.name")
FULL_FIELDS = (
    "id",
    "title",
    "event",
    "body",
    "publishedAt",
    "updatedAt",
    "category.id",
    "category.name",
)
PROBE_FIELDS = ("id",)
CATEGORY_FIELDS = ("id", "name")

NEWEST_FIRST = ("-publishedAt",)
CATEGORY_LIST_LIMIT = 10000
PROBE_LIMIT = 1


def category_filter(category_id: str) -> str:
    return f"category[contains]{category_id}"


@dataclass
class ListResponse:
    """One page of raw items plus the source's authoritative total."""

    contents: list[dict[str, Any]] = field(default_factory=list)
    total_count: int = 0
    offset: int = 0
    limit: int = 0


class ContentSource(Protocol):
    def list(
        self,
        endpoint: str,
        *,
        fields: Sequence[str] = (),
        limit: int | None = None,
        offset: int = 0,
        orders: Sequence[str] = (),
        filters: str | None = None,
    ) -> ListResponse: ...


class MicroCMSClient:
    """Synchronous microCMS list client.

    Safe to share between worker threads: a single ``httpx.Client`` pools
    connections for all of them.
    """

    def __init__(
        self,
        service_domain: str,
        api_key: str,
        *,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.service_domain = service_domain
        self._client = httpx.Client(
            base_url=f"https://{service_domain}.microcms.io/api/v1/",
            headers={"X-MICROCMS-API-KEY": api_key},
            timeout=timeout,
            transport=transport,
        )

    def __enter__(self) -> MicroCMSClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def list(
        self,
        endpoint: str,
        *,
        fields: Sequence[str] = (),
        limit: int | None = None,
        offset: int = 0,
        orders: Sequence[str] = (),
        filters: str | None = None,
    ) -> ListResponse:
        params: dict[str, str | int] = {}
        if fields:
            params["fields"] = ",".join(fields)
        if limit is not None:
            params["limit"] = limit
        if offset:
            params["offset"] = offset
        if orders:
            params["orders"] = ",".join(orders)
        if filters:
            params["filters"] = filters

        logger.debug("GET %s %s", endpoint, params)
        try:
            response = self._client.get(endpoint, params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            raise FetchError(
                f"microCMS returned HTTP {status} for '{endpoint}': {exc.response.text[:200]}",
                endpoint=endpoint,
                status=status,
            ) from exc
        except httpx.HTTPError as exc:
            raise FetchError(f"Request to '{endpoint}' failed: {exc}", endpoint=endpoint) from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise FetchError(f"Response for '{endpoint}' is not JSON", endpoint=endpoint) from exc
        return _parse_list_payload(payload, endpoint)


def _parse_list_payload(payload: Any, endpoint: str) -> ListResponse:
    if not isinstance(payload, dict):
        raise FetchError(f"Response for '{endpoint}' is not an object", endpoint=endpoint)
    contents = payload.get("contents")
    total = payload.get("totalCount")
    if not isinstance(contents, list) or not isinstance(total, int):
        raise FetchError(
            f"Response for '{endpoint}' lacks 'contents' or 'totalCount'", endpoint=endpoint
        )
    return ListResponse(
        contents=contents,
        total_count=total,
        offset=int(payload.get("offset") or 0),
        limit=int(payload.get("limit") or 0),
    )


def fetch_articles(
    source: ContentSource,
    *,
    fields: Sequence[str],
    limit: int,
    offset: int = 0,
    filters: str | None = None,
) -> ArticleList:
    """List articles newest first and validate them into an :class:`ArticleList`."""
    response = source.list(
        ARTICLE_ENDPOINT,
        fields=fields,
        limit=limit,
        offset=offset,
        orders=NEWEST_FIRST,
        filters=filters,
    )
    try:
        return ArticleList(
            articles=response.contents,
            total_count=response.total_count,
            offset=response.offset or offset,
            limit=response.limit or limit,
        )
    except ValidationError as exc:
        raise FetchError(f"Malformed article listing: {exc}", endpoint=ARTICLE_ENDPOINT) from exc


def count_articles(source: ContentSource, *, filters: str | None = None) -> int:
    """Total number of articles matching ``filters`` via a minimal id-only probe."""
    response = source.list(
        ARTICLE_ENDPOINT,
        fields=PROBE_FIELDS,
        limit=PROBE_LIMIT,
        orders=NEWEST_FIRST,
        filters=filters,
    )
    return response.total_count


def fetch_categories(source: ContentSource) -> CategoryList:
    response = source.list(CATEGORY_ENDPOINT, fields=CATEGORY_FIELDS, limit=CATEGORY_LIST_LIMIT)
    try:
        return CategoryList(
            categories=response.contents,
            total_count=response.total_count,
            offset=response.offset,
            limit=response.limit,
        )
    except ValidationError as exc:
        raise FetchError(f"Malformed category listing: {exc}", endpoint=CATEGORY_ENDPOINT) from exc


__all__ = [
    "ContentSource",
    "ListResponse",
    "MicroCMSClient",
    "category_filter",
    "count_articles",
    "fetch_articles",
    "fetch_categories",
]
