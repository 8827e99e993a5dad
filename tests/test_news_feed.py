"""Tests for the markdown news feed."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import pytest

from ges_annex.core.news_feed import NewsFeed, NewsFeedError, parse_article, slug_for

BUNDLED_NEWS = Path(__file__).resolve().parents[1] / "ges_annex" / "data" / "news"


def _write(directory: Path, name: str, title: str, date: str, body: str = "Body") -> None:
    (directory / name).write_text(
        f"---\ntitle: {title}\ndate: {date}\n---\n{body}\n", encoding="utf-8"
    )


def test_parse_article_reads_front_matter():
    article = parse_article(
        "---\n"
        'title: "Mock exams"\n'
        "date: 2025-03-01 09:30:00\n"
        "image: /images/mock.jpg\n"
        "imageAlt: Students writing\n"
        "---\n"
        "Exams start **Monday**.\n",
        slug="mock-exams",
    )

    assert article.title == "Mock exams"
    assert article.published_at == datetime(2025, 3, 1, 9, 30, tzinfo=timezone.utc)
    assert article.image == "/images/mock.jpg"
    assert article.image_alt == "Students writing"
    assert article.body == "Exams start **Monday**."


@pytest.mark.parametrize(
    "text",
    [
        "no front matter",
        "---\ntitle: Unterminated\n",
        "---\ndate: 2025-01-01 00:00:00\n---\nbody",
        "---\ntitle: No date\n---\nbody",
        "---\ntitle: Bad date\ndate: yesterday\n---\nbody",
        "---\ntitle: |\n  Two line\n  title\ndate: 2025-01-01 00:00:00\n---\nbody",
        "---\ntitle: Folded\ndate: 2025-01-01 00:00:00\nimageAlt: >-\n  long text\n---\nbody",
        "---\ntitle: Tagged\ndate: 2025-01-01 00:00:00\ntags:\n  - exams\n---\nbody",
    ],
)
def test_invalid_articles_raise(text):
    with pytest.raises(NewsFeedError):
        parse_article(text, slug="broken")


def test_lists_newest_first_and_skips_broken_files(tmp_path):
    _write(tmp_path, "2025-01-10-older.md", "Older", "2025-01-10 08:00:00")
    _write(tmp_path, "2025-02-10-newer.md", "Newer", "2025-02-10 08:00:00")
    (tmp_path / "2025-03-01-broken.md").write_text("no front matter", encoding="utf-8")

    articles = NewsFeed(tmp_path).list_articles()

    assert [article.slug for article in articles] == ["newer", "older"]


def test_get_article_and_render_body(tmp_path):
    _write(tmp_path, "2025-01-10-hello.md", "Hello", "2025-01-10 08:00:00", body="**Bold** news")
    feed = NewsFeed(tmp_path)

    article = feed.get_article("hello")

    assert "<strong>Bold</strong>" in NewsFeed.render_body(article)
    assert feed.get_article("missing") is None


def test_missing_directory_gives_empty_feed(tmp_path):
    assert NewsFeed(tmp_path / "nope").list_articles() == []


def test_slug_strips_date_prefix():
    assert slug_for(Path("2025-01-13-welcome-to-ges-annex.md")) == "welcome-to-ges-annex"
    assert slug_for(Path("about.md")) == "about"


def test_bundled_news_parses():
    assert len(NewsFeed(BUNDLED_NEWS).list_articles()) >= 2
