"""News article lookups: single article, recent-by-tag feed, search."""

import logging
import uuid
from datetime import datetime, timedelta, timezone

from config import NEWS, RECENT_NEWS_DAYS, RECENT_NEWS_LIMIT, SEARCH_LIMIT
from core.records import Article, format_timestamp
from core.users import load_user
from db.store import DocumentStore
from errors import InvalidInputError, NewsquestError, NotFoundError
from tagging import tag_article

logger = logging.getLogger(__name__)


def load_article(store: DocumentStore, news_id: str) -> Article:
    """Read an article document, raising NotFoundError if it is missing."""
    doc = store.get_document(NEWS, news_id)
    if doc is None:
        raise NotFoundError(NEWS, news_id)
    return Article.from_document(doc)


def get_article(store: DocumentStore, news_id: str) -> Article | None:
    try:
        return load_article(store, news_id)
    except NewsquestError as e:
        logger.error("Error fetching article %s: %s", news_id, e)
        return None


def add_article(
    store: DocumentStore,
    title: str,
    content_short: str = "",
    content_long: str = "",
    tags: list[str] | None = None,
    date: datetime | None = None,
    news_id: str | None = None,
) -> Article | None:
    """Store a new article. Untagged articles get keyword tags."""
    try:
        if not title or not title.strip():
            raise InvalidInputError("article title is required")
        if not tags:
            tags = tag_article(title, f"{content_short}\n{content_long}")
        article = Article(
            id=news_id or uuid.uuid4().hex,
            title=title.strip(),
            date=date or datetime.now(timezone.utc),
            tags=list(dict.fromkeys(tags)),
            content_short=content_short,
            content_long=content_long,
        )
        store.set_document(NEWS, article.id, article.to_document())
        logger.debug("Added article %s with tags %s", article.id, article.tags)
        return article
    except NewsquestError as e:
        logger.error("Error adding article %r: %s", title, e)
        return None


def get_recent_news_by_tags(
    store: DocumentStore,
    tags: list[str],
    days: int = RECENT_NEWS_DAYS,
    limit: int = RECENT_NEWS_LIMIT,
    now: datetime | None = None,
) -> list[Article]:
    """Articles from the last `days` days carrying any of `tags`, newest first."""
    if not tags:
        return []
    cutoff = format_timestamp((now or datetime.now(timezone.utc)) - timedelta(days=days))
    try:
        docs = store.query_by_field(
            NEWS, "tags", "array-contains-any", tags, order_by="date", descending=True
        )
        recent = [d for d in docs if d.get("date") and d["date"] >= cutoff]
        return [Article.from_document(d) for d in recent[:limit]]
    except NewsquestError as e:
        logger.error("Error fetching recent news for %s: %s", tags, e)
        return []


def search_news(
    store: DocumentStore,
    text: str,
    tag: str | None = None,
    limit: int = SEARCH_LIMIT,
) -> list[Article]:
    """Case-insensitive search over title and short content, newest first."""
    needle = (text or "").strip().lower()
    if not needle:
        return []
    try:
        if tag:
            docs = store.query_by_field(NEWS, "tags", "array-contains", tag, order_by="date", descending=True)
        else:
            docs = store.list_documents(NEWS, order_by="date", descending=True)
        results = [
            d for d in docs
            if needle in (d.get("title") or "").lower()
            or needle in (d.get("content_short") or "").lower()
        ]
        return [Article.from_document(d) for d in results[:limit]]
    except NewsquestError as e:
        logger.error("Error searching news for %r: %s", text, e)
        return []


def get_liked_news(store: DocumentStore, user_id: str) -> list[Article]:
    """The user's liked articles that still exist, in the order they were liked."""
    try:
        user = load_user(store, user_id)
        liked = []
        for news_id in user.liked_news:
            doc = store.get_document(NEWS, news_id)
            if doc is not None:
                liked.append(Article.from_document(doc))
        return liked
    except NewsquestError as e:
        logger.error("Error fetching liked news for %s: %s", user_id, e)
        return []
