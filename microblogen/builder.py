"""Site build orchestration.

One :class:`SiteBuilder` run walks the stages of :class:`BuildStage` in
order. Concurrent work inside a stage always joins before the next stage
begins, and the first error from any stage ends the run; the half-written
export tree is left as is.
"""

from __future__ import annotations

import time
from enum import Enum
from pathlib import Path

from pydantic import BaseModel

from microblogen.config import BuildSettings, PathSettings
from microblogen.log import bind_stage, clear_stage, get_logger
from microblogen.paths import copy_static_assets, recreate_directory
from microblogen.progress import BuildProgress, EmptyCategories
from microblogen.render import (
    BlogTemplates,
    discover_single_templates,
    filter_categories,
    render_category_pages,
    render_main_pages_and_articles,
    render_single_pages,
)
from microblogen.snapshot import write_category_json, write_latest_json
from microblogen.source import LATEST_FIELDS, ContentSource, fetch_articles, fetch_categories
from microblogen.templating import TemplateEngine, TemplateHelpers

logger = get_logger(__name__)


class BuildStage(str, Enum):
    INIT = "init"
    TEMPLATES_VERIFIED = "templates_verified"
    OUTPUT_RECREATED = "output_recreated"
    LATEST_FETCHED = "latest_fetched"
    MAIN_PAGES_RENDERED = "main_pages_rendered"
    CATEGORIES_FETCHED = "categories_fetched"
    CATEGORIES_RENDERED = "categories_rendered"
    CATEGORIES_FILTERED = "categories_filtered"
    SNAPSHOTS_WRITTEN = "snapshots_written"
    SINGLES_RENDERED = "singles_rendered"
    DONE = "done"


class BuildReport(BaseModel):
    pages: int = 0
    articles: int = 0
    categories_rendered: int = 0
    categories_pruned: list[str] = []
    category_pages: int = 0
    singles: int = 0
    initialized: bool = False
    duration_ms: int = 0


def init_resources(paths: PathSettings) -> None:
    """Create an empty resources skeleton for the user to fill in."""
    logger.info("Resources directory not found. Creating resources directory at %s", paths.resources)
    for directory in (paths.static, paths.blog_templates, paths.singles_templates, paths.components):
        directory.mkdir(parents=True, exist_ok=True)
    logger.info("Resources directory created successfully.")
    logger.info("Please prepare the templates and static files in the resources directory.")


class SiteBuilder:
    """Builds the whole site from a content source into the export directory."""

    def __init__(
        self,
        settings: BuildSettings,
        source: ContentSource,
        *,
        helpers: TemplateHelpers | None = None,
    ) -> None:
        self.settings = settings
        self.source = source
        self.paths = settings.paths
        self.helpers = helpers or TemplateHelpers(tz=settings.tz)
        self.stage = BuildStage.INIT

    def _begin(self, step: str) -> None:
        """Tag log lines with the step now running."""
        bind_stage(step)

    def _enter(self, stage: BuildStage) -> None:
        self.stage = stage
        logger.debug("Reached stage %s", stage.value)

    def _engine(self, template_dir: Path) -> TemplateEngine:
        return TemplateEngine([template_dir, self.paths.components], self.helpers)

    def build(self) -> BuildReport:
        start = time.perf_counter()
        report = BuildReport()
        try:
            if not self.paths.resources.exists():
                init_resources(self.paths)
                report.initialized = True
                return report
            self._run(report)
        finally:
            clear_stage()
        report.duration_ms = int((time.perf_counter() - start) * 1000)
        return report

    def _run(self, report: BuildReport) -> None:
        settings = self.settings
        paths = self.paths
        workers = settings.max_workers
        progress = BuildProgress()
        empty = EmptyCategories()

        if not paths.components.is_dir():
            logger.warning(
                "Components directory not found. The directory will be automatically generated."
            )
            paths.components.mkdir(parents=True, exist_ok=True)

        self._begin("templates")
        logger.info(">> Parsing templates")
        blog = BlogTemplates.load(self._engine(paths.blog_templates))
        self._enter(BuildStage.TEMPLATES_VERIFIED)

        self._begin("output")
        logger.info(">> Generating export directory")
        recreate_directory(paths.export)
        logger.info(">> Copying static assets to export directory")
        copied = copy_static_assets(paths.static, paths.export)
        logger.debug("Copied %d static files", copied)
        self._enter(BuildStage.OUTPUT_RECREATED)

        self._begin("latest")
        latest = fetch_articles(self.source, fields=LATEST_FIELDS, limit=settings.latest_articles)
        self._enter(BuildStage.LATEST_FETCHED)

        self._begin("main_pages")
        logger.info(">> Rendering start")
        main = render_main_pages_and_articles(
            self.source,
            blog,
            export=paths.export,
            total_count=latest.total_count,
            per_page=settings.articles_per_page,
            progress=progress,
            max_workers=workers,
        )
        report.pages = main.pages
        report.articles = main.articles
        self._enter(BuildStage.MAIN_PAGES_RENDERED)

        self._begin("categories")
        categories = fetch_categories(self.source).categories
        self._enter(BuildStage.CATEGORIES_FETCHED)

        self._begin("category_pages")
        result = render_category_pages(
            self.source,
            blog,
            categories,
            export=paths.export,
            per_page=settings.articles_per_page,
            tag_name=settings.category_tag_name,
            progress=progress,
            empty=empty,
            max_workers=workers,
        )
        report.categories_rendered = result.rendered
        report.category_pages = result.pages
        self._enter(BuildStage.CATEGORIES_RENDERED)

        self._begin("filter")
        kept = filter_categories(categories, empty)
        report.categories_pruned = sorted(empty.snapshot())
        logger.info("Pruned %d empty categories", len(empty))
        self._enter(BuildStage.CATEGORIES_FILTERED)

        self._begin("snapshots")
        write_latest_json(paths.export, latest.articles)
        write_category_json(paths.export, kept)
        self._enter(BuildStage.SNAPSHOTS_WRITTEN)

        self._begin("singles")
        report.singles = render_single_pages(
            self._engine(paths.singles_templates),
            discover_single_templates(paths.singles_templates),
            export=paths.export,
            latest=latest.articles,
            categories=kept,
            progress=progress,
            max_workers=workers,
        )
        self._enter(BuildStage.SINGLES_RENDERED)

        self._enter(BuildStage.DONE)
        self._begin("done")
        logger.info(
            "Rendering done! %d articles, %d categories, %d singles",
            progress.articles,
            progress.categories,
            progress.singles,
        )


__all__ = ["BuildReport", "BuildStage", "SiteBuilder", "init_resources"]
