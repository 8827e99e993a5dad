"""Component for reading the news feed."""

from __future__ import annotations

from html import escape

from PySide6.QtCore import Qt
from PySide6.QtWebEngineWidgets import QWebEngineView
from PySide6.QtWidgets import QHBoxLayout, QListWidget, QListWidgetItem, QWidget

from ges_annex.core.markdown_math_renderer import renderer
from ges_annex.core.news_feed import NewsFeed


class NewsPanel(QWidget):
    """Article list on the left, rendered article on the right."""

    def __init__(self, news_feed: NewsFeed, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.news_feed = news_feed
        self._build_ui()

    def _build_ui(self) -> None:
        layout = QHBoxLayout()
        self.setLayout(layout)

        self.article_list = QListWidget(self)
        self.article_list.setMinimumWidth(240)
        self.article_list.currentItemChanged.connect(self._handle_article_changed)
        layout.addWidget(self.article_list, stretch=1)

        self.article_view = QWebEngineView(self)
        layout.addWidget(self.article_view, stretch=3)

    def refresh(self) -> None:
        self.article_list.clear()
        for article in self.news_feed.list_articles():
            item = QListWidgetItem(
                f"{article.title}\n{article.published_at:%d %b %Y}", self.article_list
            )
            item.setData(Qt.UserRole, article.slug)
        if self.article_list.count():
            self.article_list.setCurrentRow(0)
        else:
            self.article_view.setHtml(renderer.render_full_document("No news yet."))

    def _handle_article_changed(self, current: QListWidgetItem | None, _previous) -> None:
        if current is None:
            return
        article = self.news_feed.get_article(current.data(Qt.UserRole))
        if article is None:
            return
        body = NewsFeed.render_body(article)
        if article.image:
            alt = escape(article.image_alt or article.title)
            body = f'<img src="{escape(article.image)}" alt="{alt}" />' + body
        heading = f"<h2>{renderer.render_inline(article.title)}</h2>"
        self.article_view.setHtml(renderer.wrap_with_mathjax(heading + body, title=article.title))
