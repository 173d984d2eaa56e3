"""Tag-weighted news recommendations.

Each user carries a weight per topic tag. Likes push the weights of an
article's tags up, dislikes push them down, always within
[TAG_WEIGHT_MIN, TAG_WEIGHT_MAX]. A feed is filled tag by tag, heaviest first,
each tag getting a share of the remaining quota proportional to its weight
(capped at the whole quota), then topped up with the newest unwatched articles.
"""

import logging
import math
from typing import Any

from config import (
    DEFAULT_RECOMMENDATION_COUNT,
    NEWS,
    TAG_WEIGHT_DEFAULT,
    TAG_WEIGHT_MAX,
    TAG_WEIGHT_MIN,
    TAG_WEIGHT_STEP,
    USERS,
)
from core.news import load_article
from core.records import Article, Interaction
from core.users import load_user
from db.store import DocumentStore
from errors import InvalidInputError, NewsquestError

logger = logging.getLogger(__name__)


def initialize_tag_weights(tags: list[str]) -> dict[str, float]:
    """Every preferred tag starts at the neutral weight."""
    return {tag: TAG_WEIGHT_DEFAULT for tag in tags}


def sort_tags_by_weight(tag_weights: dict[str, float]) -> list[tuple[str, float]]:
    """(tag, weight) pairs, heaviest first; ties keep their stored order."""
    return sorted(tag_weights.items(), key=lambda item: item[1], reverse=True)


def update_tag_weights(
    current: dict[str, float],
    article_tags: list[str],
    interaction: Interaction,
) -> dict[str, float]:
    """Return new weights after a like or dislike of an article with `article_tags`.

    Known tags move by one step and are clamped. Unknown tags are added one
    step off neutral in the direction of the interaction.
    """
    delta = TAG_WEIGHT_STEP if interaction is Interaction.LIKE else -TAG_WEIGHT_STEP
    updated = dict(current)
    for tag in dict.fromkeys(article_tags):
        if tag in updated:
            weight = min(TAG_WEIGHT_MAX, updated[tag] + delta)
            updated[tag] = round(max(TAG_WEIGHT_MIN, weight), 2)
        else:
            updated[tag] = round(TAG_WEIGHT_DEFAULT + delta, 2)
    return updated


def _tag_quota(remaining: int, weight: float) -> int:
    # Rounded first so 10 * 0.9 doesn't become ceil(9.000000000000002)
    return math.ceil(round(remaining * min(1.0, weight), 6))


class RecommendationEngine:
    """Builds personalised feeds and learns tag weights from reactions."""

    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    def _fresh(self, docs: list[dict[str, Any]], excluded: set[str], limit: int) -> list[Article]:
        """Up to `limit` valid articles from `docs` not in `excluded`.

        Every document looked at is added to `excluded`. Malformed ones are
        skipped so they neither fill the quota nor get looked at again.
        """
        picked: list[Article] = []
        for doc in docs:
            if len(picked) >= limit:
                break
            if doc["id"] in excluded:
                continue
            excluded.add(doc["id"])
            try:
                picked.append(Article.from_document(doc))
            except InvalidInputError as e:
                logger.warning("Skipping article: %s", e)
        return picked

    def get_personalized_news(
        self, user_id: str, max_results: int = DEFAULT_RECOMMENDATION_COUNT
    ) -> list[Article]:
        """Up to `max_results` unwatched articles, biased toward heavier tags.

        Never raises: a missing user, bad input or store failure yields [].
        """
        try:
            if max_results <= 0:
                raise InvalidInputError(f"max_results must be positive, got {max_results}")
            user = load_user(self.store, user_id)
            tag_weights = (
                user.tag_weights if user.tag_weights is not None
                else initialize_tag_weights(user.tags)
            )
            excluded = set(user.watched_news)
            collected: list[Article] = []

            for tag, weight in sort_tags_by_weight(tag_weights):
                remaining = max_results - len(collected)
                if remaining <= 0:
                    break
                quota = _tag_quota(remaining, weight)
                docs = self.store.query_by_field(
                    NEWS, "tags", "array-contains", tag, order_by="date", descending=True
                )
                picked = self._fresh(docs, excluded, quota)
                collected.extend(picked)
                logger.debug("Tag %s (weight %.2f): %d/%d articles", tag, weight, len(picked), quota)

            remaining = max_results - len(collected)
            if remaining > 0:
                docs = self.store.list_documents(NEWS, order_by="date", descending=True)
                backfill = self._fresh(docs, excluded, remaining)
                collected.extend(backfill)
                logger.debug("Backfilled %d articles for %s", len(backfill), user_id)

            return collected
        except NewsquestError as e:
            logger.error("Error getting personalized news for %s: %s", user_id, e)
            return []

    def process_news_interaction(
        self, user_id: str, news_id: str, interaction: Interaction | str
    ) -> bool:
        """Adjust the user's tag weights for a like or dislike of `news_id`.

        Only `tag_weights` is written; liked/watched lists are recorded by
        core.users. Returns False on any lookup or write failure.
        """
        try:
            try:
                interaction = Interaction(interaction)
            except ValueError:
                raise InvalidInputError(f"Unknown interaction: {interaction!r}") from None
            article = load_article(self.store, news_id)
            user = load_user(self.store, user_id)
            current = (
                user.tag_weights if user.tag_weights is not None
                else initialize_tag_weights(user.tags)
            )
            updated = update_tag_weights(current, article.tags, interaction)
            self.store.update_fields(USERS, user_id, {"tag_weights": updated})
            logger.info("Updated tag weights for %s after %s on %s", user_id, interaction.value, news_id)
            return True
        except NewsquestError as e:
            logger.error("Error processing news interaction for %s: %s", user_id, e)
            return False

    def save_recommendation_settings(self, user_id: str, tag_weights: dict[str, float]) -> bool:
        """Overwrite the user's tag weights, clamping each into range."""
        try:
            clamped = {
                tag: round(min(TAG_WEIGHT_MAX, max(TAG_WEIGHT_MIN, float(w))), 2)
                for tag, w in tag_weights.items()
            }
            self.store.update_fields(USERS, user_id, {"tag_weights": clamped})
            return True
        except (NewsquestError, TypeError, ValueError) as e:
            logger.error("Error saving recommendation settings for %s: %s", user_id, e)
            return False
