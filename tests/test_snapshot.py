"""Tests for snapshot JSON encoding."""

from __future__ import annotations

from decimal import Decimal

import pytest

from microblogen import jsonutil
from microblogen.errors import OutputError
from microblogen.models import Article, ArticleList, Category
from microblogen.pagination import page_info
from microblogen.snapshot import write_category_json, write_latest_json
from tests.factories import make_article


class TestJsonUtil:
    def test_compact_output(self):
        assert jsonutil.dumps({"a": [1, 2]}) == '{"a":[1,2]}'

    def test_decimal_becomes_float(self):
        assert jsonutil.loads(jsonutil.dumps({"v": Decimal("1.25")})) == {"v": 1.25}

    def test_models_use_wire_names(self):
        article = Article.model_validate(make_article(4, ("news", "News")))
        data = jsonutil.loads(jsonutil.models_to_json([article]))[0]

        assert list(data) == ["id", "title", "body", "publishedAt", "updatedAt", "category", "event"]
        assert data["body"] == [{"fieldId": "content", "body": "<p>Body of article 4</p>"}]
        assert data["event"] == {"eventText": "Event 4", "eventLink": "https://example.com/4"}

    def test_article_omits_unset_fields(self):
        data = jsonutil.wire_dict(Article(id="x"))
        assert data == {"id": "x"}

    def test_category_always_has_name(self):
        assert jsonutil.wire_dict(Category(id="c")) == {"id": "c", "name": ""}

    def test_unknown_type_raises(self):
        with pytest.raises(TypeError):
            jsonutil.dumps_bytes({"x": object()})


class TestArticleList:
    def test_accepts_wire_keys(self):
        listing = ArticleList.model_validate(
            {"contents": [make_article(0)], "totalCount": 12, "offset": 10, "limit": 10}
        )
        assert listing.total_count == 12
        assert listing.articles[0].id == "a000"
        assert listing.root == "/"

    def test_navigation_flags_follow_stamp(self):
        listing = ArticleList().stamp(page_info(1, 3), root="/", is_index=True)
        assert listing.has_prev and listing.has_next

        last = ArticleList().stamp(page_info(2, 3), root="/", is_index=True)
        assert last.has_prev and not last.has_next


class TestSnapshotFiles:
    def test_latest_json(self, tmp_path):
        articles = [Article(id="b", title="B"), Article(id="a", title="A")]
        path = write_latest_json(tmp_path, articles)

        assert path == tmp_path / "latest.json"
        assert path.read_bytes() == b'[{"id":"b","title":"B"},{"id":"a","title":"A"}]'

    def test_category_json(self, tmp_path):
        path = write_category_json(tmp_path, [Category(id="a", name="A")])
        assert path.read_bytes() == b'[{"id":"a","name":"A"}]'

    def test_empty_lists(self, tmp_path):
        assert write_latest_json(tmp_path, []).read_bytes() == b"[]"
        assert write_category_json(tmp_path, []).read_bytes() == b"[]"

    def test_stable_bytes(self, tmp_path):
        articles = [Article.model_validate(make_article(i, ("c", "C"))) for i in range(5)]
        first = write_latest_json(tmp_path / "one", articles).read_bytes()
        second = write_latest_json(tmp_path / "two", articles).read_bytes()
        assert first == second

    def test_unwritable_export(self, tmp_path):
        blocker = tmp_path / "export"
        blocker.write_text("not a directory", encoding="utf-8")
        with pytest.raises(OutputError):
            write_category_json(blocker, [])
