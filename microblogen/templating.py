"""Jinja2 template engine and the helper functions exposed to templates.

Every template is compiled against a loader that searches its own directory
first and then the shared components directory, so components can be pulled
in with ``{% include %}``, ``{% import %}`` or ``{% extends %}``.

The helper set is fixed (see ``HELPER_NAMES``); each helper is registered
both as a global function and as a filter:

    {{ article.published_at | format_time }}
    {% for n in get_pagination(page.current_page, page.all_page, 5) %}...
    {{ article.body[0].body | replace_webp }}
"""

from __future__ import annotations

import re
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone, tzinfo
from pathlib import Path
from typing import Any

import jinja2

from microblogen.errors import TemplateError
from microblogen.pagination import page_window, total_pages
from microblogen.paths import is_within_root, write_text

MICROCMS_ASSET_PREFIX = "https://images.microcms-assets.io/assets/"
WEBP_SOURCE_SUFFIXES = (".jpg", ".png")
WEBP_QUERY = "?fm=webp"
SAMPLE_LENGTH = 100
SAMPLE_ELLIPSIS = "…"

_IMG_SRC_RE = re.compile(r"""<img[^>]*\bsrc\s*=\s*['"]?([^'">]+)['"]?[^>]*>""")
_HTML_TAG_RE = re.compile(r"<[^>]*>")

HELPER_NAMES = (
    "format_time",
    "total_greater",
    "is_not_first",
    "is_not_last",
    "trim_sample",
    "sub",
    "replace_webp",
    "build_time",
    "get_pagination",
    "get_total_pages",
)


def convert_webp(html: str) -> str:
    """Request WebP renditions of microCMS-hosted JPEG/PNG images.

    Only ``<img>`` tags whose ``src`` (double-, single- or un-quoted) starts
    with :data:`MICROCMS_ASSET_PREFIX` and ends in ``.jpg``/``.png`` are
    touched; ``?fm=webp`` is appended to the URL. URLs that already carry a
    query string do not end in an image suffix and are left alone.
    """

    def _rewrite(match: re.Match[str]) -> str:
        tag, url = match.group(0), match.group(1)
        if url.startswith(MICROCMS_ASSET_PREFIX) and url.endswith(WEBP_SOURCE_SUFFIXES):
            return tag.replace(url, url + WEBP_QUERY)
        return tag

    return _IMG_SRC_RE.sub(_rewrite, html)


def trim_sample(body: str) -> str:
    """Plain-text teaser: tags stripped, first 100 characters, then an ellipsis."""
    text = _HTML_TAG_RE.sub("", body or "")
    return text[:SAMPLE_LENGTH] + SAMPLE_ELLIPSIS


@dataclass(frozen=True)
class TemplateHelpers:
    """The functions templates may call.

    Everything except :meth:`build_time` is pure, so two builds from the
    same content produce the same bytes unless a template prints the build
    time.
    """

    tz: tzinfo = timezone.utc
    clock: Callable[[], float] = field(default=time.time, compare=False)

    def format_time(self, value: datetime | None) -> str:
        if value is None:
            return ""
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(self.tz).strftime("%Y-%m-%d")

    @staticmethod
    def total_greater(total: int, limit: int) -> bool:
        return total > limit

    @staticmethod
    def is_not_first(offset: int) -> bool:
        return offset != 0

    @staticmethod
    def is_not_last(limit: int, offset: int, total: int) -> bool:
        return limit + offset < total

    @staticmethod
    def trim_sample(body: str) -> str:
        return trim_sample(body)

    @staticmethod
    def sub(a: int, b: int) -> int:
        return a - b

    @staticmethod
    def replace_webp(html: str) -> str:
        return convert_webp(html)

    def build_time(self) -> str:
        return str(int(self.clock()))

    @staticmethod
    def get_pagination(current: int, total: int, size: int) -> list[int]:
        return page_window(current, total, size)

    @staticmethod
    def get_total_pages(total: int, per_page: int) -> int:
        return total_pages(total, per_page)

    def as_namespace(self) -> dict[str, Callable[..., Any]]:
        return {name: getattr(self, name) for name in HELPER_NAMES}


class TemplateEngine:
    """Compiles templates from a set of search paths and renders them to files."""

    def __init__(self, search_paths: Sequence[Path], helpers: TemplateHelpers) -> None:
        self.search_paths = [Path(p) for p in search_paths]
        self.env = jinja2.Environment(
            loader=jinja2.FileSystemLoader([str(p) for p in self.search_paths]),
            undefined=jinja2.StrictUndefined,
            autoescape=False,
            keep_trailing_newline=True,
        )
        namespace = helpers.as_namespace()
        self.env.globals.update(namespace)
        self.env.filters.update(namespace)

    def compile(self, name: str) -> jinja2.Template:
        """Load and parse ``name`` (a ``/``-separated path relative to the first search path).

        Only the first search path supplies top-level templates; the others
        serve includes. A same-named component does not stand in for a
        missing top-level template.

        Raises:
            TemplateError: The template is missing or has a syntax error.
        """
        own_dir = self.search_paths[0]
        try:
            template = self.env.get_template(name)
        except jinja2.TemplateNotFound as exc:
            searched = ", ".join(str(p) for p in self.search_paths)
            raise TemplateError(f"Template '{name}' not found in {searched}", template=name) from exc
        except jinja2.TemplateError as exc:
            raise TemplateError(f"Cannot parse template '{name}': {exc}", template=name) from exc
        if template.filename is None or not is_within_root(Path(template.filename), own_dir):
            raise TemplateError(f"Template '{name}' not found in {own_dir}", template=name)
        return template

    def render(self, template: jinja2.Template, **context: Any) -> str:
        name = template.name or "<template>"
        try:
            return template.render(**context)
        except jinja2.TemplateError as exc:
            raise TemplateError(f"Cannot render template '{name}': {exc}", template=name) from exc
        except (TypeError, ValueError, AttributeError, LookupError, ArithmeticError) as exc:
            raise TemplateError(f"Cannot render template '{name}': {exc}", template=name) from exc

    def render_to(self, template: jinja2.Template, output_path: Path, **context: Any) -> None:
        """Render ``template`` and write the result, creating parent directories."""
        write_text(output_path, self.render(template, **context))


__all__ = [
    "HELPER_NAMES",
    "TemplateEngine",
    "TemplateHelpers",
    "convert_webp",
    "trim_sample",
]
