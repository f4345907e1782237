"""Render stages: main index pages with their articles, category listings, singles.

Each stage fans out with :func:`fan_out` and returns only after every task
it launched has finished. Any error raised by a task ends the stage and
propagates to the caller unchanged.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

import jinja2

from microblogen.concurrency import fan_out
from microblogen.log import get_logger
from microblogen.models import Article, Category
from microblogen.pagination import page_count, page_info
from microblogen.paths import article_path, category_dir, category_root, index_page_path
from microblogen.progress import BuildProgress, EmptyCategories
from microblogen.source import (
    FULL_FIELDS,
    ContentSource,
    category_filter,
    count_articles,
    fetch_articles,
)
from microblogen.templating import TemplateEngine

logger = get_logger(__name__)

INDEX_TEMPLATE = "index.html"
ARTICLE_TEMPLATE = "article.html"
TEMPLATE_SUFFIX = ".html"


@dataclass(frozen=True)
class BlogTemplates:
    """The compiled listing and article templates plus the engine that renders them."""

    engine: TemplateEngine
    index: jinja2.Template
    article: jinja2.Template

    @classmethod
    def load(cls, engine: TemplateEngine) -> BlogTemplates:
        return cls(
            engine=engine,
            index=engine.compile(INDEX_TEMPLATE),
            article=engine.compile(ARTICLE_TEMPLATE),
        )


@dataclass(frozen=True)
class MainPagesResult:
    pages: int
    articles: int


@dataclass(frozen=True)
class CategoryPagesResult:
    rendered: int
    pages: int


def render_main_pages_and_articles(
    source: ContentSource,
    templates: BlogTemplates,
    *,
    export: Path,
    total_count: int,
    per_page: int,
    progress: BuildProgress,
    max_workers: int,
) -> MainPagesResult:
    """Render every main listing page, then that page's articles concurrently.

    Pages go strictly in order; page ``i + 1`` is not fetched until every
    article of page ``i`` has been written.
    """
    all_page = page_count(total_count, per_page)
    rendered = 0

    def _render_article(article: Article) -> None:
        templates.engine.render_to(
            templates.article, article_path(export, article.id), article=article
        )
        n = progress.article_rendered()
        logger.info("- Rendered articles %d / %d", n, total_count)

    for i in range(all_page):
        logger.info("Rendering mainpage %d / %d", i + 1, all_page)
        page = fetch_articles(source, fields=FULL_FIELDS, limit=per_page, offset=per_page * i)
        page.total_count = total_count
        page.stamp(page_info(i, all_page), root="/", is_index=True)
        templates.engine.render_to(templates.index, index_page_path(export, i), page=page)

        fan_out(_render_article, page.articles, max_workers=max_workers)
        rendered += len(page.articles)

    return MainPagesResult(pages=all_page, articles=rendered)


def render_category_pages(
    source: ContentSource,
    templates: BlogTemplates,
    categories: Sequence[Category],
    *,
    export: Path,
    per_page: int,
    tag_name: str,
    progress: BuildProgress,
    empty: EmptyCategories,
    max_workers: int,
) -> CategoryPagesResult:
    """Render paginated listings for every category that has articles.

    Categories are probed concurrently. One with no articles is recorded
    in ``empty`` and produces no output.
    """
    total = len(categories)

    def _render_category(category: Category) -> int:
        filters = category_filter(category.id)
        count = count_articles(source, filters=filters)
        if count == 0:
            empty.add(category.id)
            n = progress.category_done()
            logger.info(
                "No articles found in category %d / %d '%s'. Skipped rendering.",
                n,
                total,
                category.id,
            )
            return 0

        base = category_dir(export, category.id)
        all_page = page_count(count, per_page)
        for i in range(all_page):
            page = fetch_articles(
                source,
                fields=FULL_FIELDS,
                limit=per_page,
                offset=per_page * i,
                filters=filters,
            )
            page.total_count = count
            page.stamp(
                page_info(i, all_page),
                root=category_root(category.id),
                is_index=False,
                archive_name=f"{tag_name}: {category.name}",
            )
            templates.engine.render_to(templates.index, index_page_path(base, i), page=page)

        n = progress.category_done()
        logger.info("Rendered category %d / %d '%s'", n, total, category.id)
        return all_page

    pages = fan_out(_render_category, categories, max_workers=max_workers)
    return CategoryPagesResult(rendered=sum(1 for p in pages if p), pages=sum(pages))


def filter_categories(categories: Sequence[Category], empty: EmptyCategories) -> list[Category]:
    """New list of ``categories`` without the ones recorded as empty."""
    pruned = empty.snapshot()
    return [c for c in categories if c.id not in pruned]


def discover_single_templates(root: Path) -> list[str]:
    """Relative ``/``-separated paths of every ``.html`` file under ``root``, sorted."""
    if not root.is_dir():
        logger.warning("Singles template directory %s not found. No single pages will be rendered.", root)
        return []
    return sorted(
        p.relative_to(root).as_posix()
        for p in root.rglob(f"*{TEMPLATE_SUFFIX}")
        if p.is_file()
    )


def render_single_pages(
    engine: TemplateEngine,
    single_templates: Sequence[str],
    *,
    export: Path,
    latest: Sequence[Article],
    categories: Sequence[Category],
    progress: BuildProgress,
    max_workers: int,
) -> int:
    """Render each single template to the same relative path under ``export``."""
    logger.info(">> Rendering singles pages")
    total = len(single_templates)
    latest = list(latest)
    categories = list(categories)

    def _render_single(rel: str) -> None:
        template = engine.compile(rel)
        engine.render_to(template, export / rel, latest=latest, categories=categories)
        n = progress.single_rendered()
        logger.info("Rendered single %d / %d '%s'", n, total, rel)

    fan_out(_render_single, single_templates, max_workers=max_workers)
    return total


__all__ = [
    "BlogTemplates",
    "CategoryPagesResult",
    "MainPagesResult",
    "discover_single_templates",
    "filter_categories",
    "render_category_pages",
    "render_main_pages_and_articles",
    "render_single_pages",
]
