from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from microblogen.config import BuildSettings

# =============================================================================
# Resources
# =============================================================================

INDEX_TEMPLATE = """{% include "header.html" %}
Page: {{ page.prev_page }} - {{ page.next_page }} / {{ page.all_page }}
nav prev={{ page.has_prev }} next={{ page.has_next }}
root={{ page.root }} index={{ page.is_index }} archive={{ page.archive_name }} total={{ page.total_count }}
{% for a in page.articles %}<a href="/articles/{{ a.id }}.html">{{ a.title }}</a> {{ a.published_at | format_time }}
{% endfor %}{% for n in get_pagination(page.current_page, page.all_page, 3) %}[{{ n }}]{% endfor %}
"""

ARTICLE_TEMPLATE = """{% include "header.html" %}
<h1>{{ article.title }}</h1>
<time>{{ format_time(article.published_at) }}</time>
{% for b in article.body %}{{ b.body | replace_webp }}{% endfor %}
<p>{{ trim_sample(article.body[0].body) }}</p>
{% for c in article.category %}<a href="/articles/category/{{ c.id }}/">{{ c.name }}</a>{% endfor %}
"""

HEADER_COMPONENT = "<header>microblogen test site</header>"

ABOUT_TEMPLATE = """{% include "header.html" %}
{% for c in categories %}{{ c.id }}:{{ c.name }};{% endfor %}
{% for a in latest %}{{ a.id }},{% endfor %}
"""

GUIDE_TEMPLATE = """guide {{ latest | length }} built {{ build_time() }}
"""


@pytest.fixture
def resources(tmp_path: Path) -> Path:
    root = tmp_path / "resources"
    templates = root / "templates"
    files = {
        templates / "blog" / "index.html": INDEX_TEMPLATE,
        templates / "blog" / "article.html": ARTICLE_TEMPLATE,
        templates / "components" / "header.html": HEADER_COMPONENT,
        templates / "singles" / "about.html": ABOUT_TEMPLATE,
        templates / "singles" / "docs" / "guide.html": GUIDE_TEMPLATE,
        templates / "singles" / "robots.txt": "User-agent: *\n",
        root / "static" / "css" / "site.css": "body { color: black; }\n",
    }
    for path, text in files.items():
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    return root


@pytest.fixture
def make_settings(tmp_path: Path, resources: Path, monkeypatch) -> Callable[..., BuildSettings]:
    monkeypatch.chdir(tmp_path)

    def _make(**overrides: Any) -> BuildSettings:
        values: dict[str, Any] = {
            "api_key": "test-key",
            "service_domain": "demo",
            "resources_path": resources,
            "export_path": tmp_path / "output",
            "articles_per_page": 2,
            "latest_articles": 5,
            "timezone": "UTC",
            "max_workers": 4,
        }
        values.update(overrides)
        return BuildSettings(**values)

    return _make


@pytest.fixture
def settings(make_settings) -> BuildSettings:
    return make_settings()


@pytest.fixture
def export_dir(settings: BuildSettings) -> Path:
    return settings.paths.export
