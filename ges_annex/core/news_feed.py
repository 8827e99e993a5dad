"""News feed read from the markdown files the CMS publishes.

Each article is a file named ``{year}-{month}-{day}-{slug}.md`` with front
matter followed by the markdown body:

    ---
    title: Mock exams start Monday
    date: 2025-03-01 09:30:00
    image: /images/mock-exams.jpg
    imageAlt: Students writing an exam
    ---
    Body text in **markdown**.

Front matter values are single-line `key: value` pairs, optionally quoted.
Indented continuation lines, lists and YAML block scalars are rejected.
"""

from __future__ import annotations

from datetime import datetime, timezone
import logging
from pathlib import Path
import re

from ges_annex.core.markdown_math_renderer import renderer
from ges_annex.core.models import NewsArticle

logger = logging.getLogger(__name__)

_FILENAME_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}-(?P<slug>.+)$")
_CMS_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_FRONT_MATTER_DELIMITER = "---"
_BLOCK_SCALAR_PATTERN = re.compile(r"^[|>][+-]?[0-9]?$")


class NewsFeedError(Exception):
    """Raised when a news article file cannot be parsed."""


def parse_article(text: str, slug: str) -> NewsArticle:
    lines = text.splitlines()
    if not lines or lines[0].strip() != _FRONT_MATTER_DELIMITER:
        raise NewsFeedError(f"Article '{slug}' is missing front matter.")
    try:
        end = next(
            index
            for index, line in enumerate(lines[1:], start=1)
            if line.strip() == _FRONT_MATTER_DELIMITER
        )
    except StopIteration as exc:
        raise NewsFeedError(f"Article '{slug}' has unterminated front matter.") from exc

    fields: dict[str, str] = {}
    for line in lines[1:end]:
        if not line.strip() or line.lstrip().startswith("#"):
            continue
        key, separator, value = line.partition(":")
        if not separator or line[0].isspace() or line.startswith("-"):
            raise NewsFeedError(f"Article '{slug}' has a malformed front matter line: '{line}'.")
        value = value.strip()
        if _BLOCK_SCALAR_PATTERN.match(value):
            raise NewsFeedError(
                f"Article '{slug}' uses a multi-line value for '{key.strip()}'; keep it on one line."
            )
        fields[key.strip()] = _unquote(value)

    title = fields.get("title", "")
    if not title:
        raise NewsFeedError(f"Article '{slug}' needs a title.")
    if "date" not in fields:
        raise NewsFeedError(f"Article '{slug}' needs a publish date.")

    return NewsArticle(
        slug=slug,
        title=title,
        published_at=_parse_date(fields["date"], slug),
        body="\n".join(lines[end + 1:]).strip(),
        image=fields.get("image") or None,
        image_alt=fields.get("imageAlt") or None,
    )


class NewsFeed:
    """Lists news articles from a directory, newest first."""

    def __init__(self, news_dir: Path) -> None:
        self.news_dir = Path(news_dir)

    def list_articles(self) -> list[NewsArticle]:
        if not self.news_dir.is_dir():
            logger.warning("News directory %s does not exist", self.news_dir)
            return []
        articles: list[NewsArticle] = []
        for path in sorted(self.news_dir.glob("*.md")):
            try:
                articles.append(parse_article(path.read_text(encoding="utf-8"), slug_for(path)))
            except (OSError, NewsFeedError) as exc:
                logger.warning("Skipping news article %s: %s", path.name, exc)
        articles.sort(key=lambda article: article.published_at, reverse=True)
        return articles

    def get_article(self, slug: str) -> NewsArticle | None:
        return next((article for article in self.list_articles() if article.slug == slug), None)

    @staticmethod
    def render_body(article: NewsArticle) -> str:
        return renderer.render_fragment(article.body)


def slug_for(path: Path) -> str:
    match = _FILENAME_PATTERN.match(path.stem)
    return match.group("slug") if match else path.stem


def _parse_date(raw_value: str, slug: str) -> datetime:
    try:
        parsed = datetime.strptime(raw_value, _CMS_DATE_FORMAT)
    except ValueError:
        try:
            parsed = datetime.fromisoformat(raw_value)
        except ValueError as exc:
            raise NewsFeedError(f"Article '{slug}' has an invalid date '{raw_value}'.") from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value
