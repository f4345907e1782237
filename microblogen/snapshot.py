"""JSON snapshots written next to the HTML output."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from microblogen.jsonutil import models_to_json
from microblogen.log import get_logger
from microblogen.models import Article, Category
from microblogen.paths import write_bytes

logger = get_logger(__name__)

LATEST_FILE = "latest.json"
CATEGORY_FILE = "category.json"


def write_latest_json(export: Path, articles: Sequence[Article]) -> Path:
    """Write the latest-articles listing to ``{export}/latest.json``.

    Articles keep whatever categories they were fetched with, including any
    category later pruned from ``category.json``.
    """
    path = export / LATEST_FILE
    write_bytes(path, models_to_json(articles))
    logger.debug("Wrote %s (%d articles)", path, len(articles))
    return path


def write_category_json(export: Path, categories: Sequence[Category]) -> Path:
    path = export / CATEGORY_FILE
    write_bytes(path, models_to_json(categories))
    logger.debug("Wrote %s (%d categories)", path, len(categories))
    return path


__all__ = ["CATEGORY_FILE", "LATEST_FILE", "write_category_json", "write_latest_json"]
