"""Output tree layout and filesystem helpers for one build."""

from __future__ import annotations

import shutil
from pathlib import Path

from microblogen.errors import OutputError

ARTICLES_DIR = "articles"
CATEGORY_DIR = "category"
PAGE_DIR = "page"
INDEX_FILE = "index.html"


def is_within_root(path: Path, root: Path) -> bool:
    """Return True if path resolves within root."""
    try:
        path.resolve(strict=False).relative_to(root.resolve(strict=False))
    except ValueError:
        return False
    return True


def _contained(path: Path, root: Path, what: str) -> Path:
    if not is_within_root(path, root):
        raise OutputError(f"{what} would be written outside {root}: {path}", path=str(path))
    return path


def _single_component(content_id: str, root: Path, what: str) -> str:
    """Reject ids that are not one plain path segment under ``root``."""
    if not content_id or content_id in (".", "..") or "/" in content_id or "\\" in content_id:
        raise OutputError(f"{what} id {content_id!r} is not a plain name under {root}", path=str(root))
    return content_id


def index_page_path(base: Path, index: int) -> Path:
    """``base/index.html`` for the first page, ``base/page/{n}/index.html`` after it.

    ``index`` is 0-based; ``n`` is the 1-based page number.
    """
    if index == 0:
        return base / INDEX_FILE
    return base / PAGE_DIR / str(index + 1) / INDEX_FILE


def article_path(export: Path, article_id: str) -> Path:
    root = export / ARTICLES_DIR
    name = _single_component(article_id, root, "Article")
    return _contained(root / f"{name}.html", root, "Article")


def category_root(category_id: str) -> str:
    """Site-relative URL prefix used for links on a category's listing pages."""
    return f"/{ARTICLES_DIR}/{CATEGORY_DIR}/{category_id}/"


def category_dir(export: Path, category_id: str) -> Path:
    root = export / ARTICLES_DIR / CATEGORY_DIR
    name = _single_component(category_id, root, "Category")
    return _contained(root / name, root, "Category")


def recreate_directory(path: Path) -> None:
    """Remove ``path`` and everything under it, then create it empty."""
    try:
        if path.exists():
            shutil.rmtree(path)
        path.mkdir(parents=True)
    except OSError as exc:
        raise OutputError(f"Cannot recreate {path}: {exc}", path=str(path)) from exc


def copy_static_assets(static: Path, export: Path) -> int:
    """Copy the static tree into the export root; returns the number of files copied."""
    if not static.is_dir():
        return 0
    try:
        shutil.copytree(static, export, dirs_exist_ok=True)
    except (OSError, shutil.Error) as exc:
        raise OutputError(f"Cannot copy static assets from {static}: {exc}", path=str(static)) from exc
    return sum(1 for p in static.rglob("*") if p.is_file())


def write_text(path: Path, text: str) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    except OSError as exc:
        raise OutputError(f"Cannot write {path}: {exc}", path=str(path)) from exc


def write_bytes(path: Path, data: bytes) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
    except OSError as exc:
        raise OutputError(f"Cannot write {path}: {exc}", path=str(path)) from exc


__all__ = [
    "article_path",
    "category_dir",
    "category_root",
    "copy_static_assets",
    "index_page_path",
    "is_within_root",
    "recreate_directory",
    "write_bytes",
    "write_text",
]
