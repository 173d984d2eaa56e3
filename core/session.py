"""Per-user session: the entry point the app layer calls for one signed-in user."""

import logging
from datetime import datetime, tzinfo

from config import DEFAULT_RECOMMENDATION_COUNT
from core import news, users
from core.achievements import AchievementEvaluator
from core.notifications import NotificationService
from core.progression import ProgressionTracker
from core.recommendation import RecommendationEngine
from core.records import Article, Interaction, Notification, ReactionChange
from db.store import DocumentStore

logger = logging.getLogger(__name__)


class UserSession:
    """Binds a user ID to the store and the components that act on it.

    Create one per signed-in user and pass it where the current user is
    needed; there is no process-wide current user.
    """

    def __init__(self, user_id: str, store: DocumentStore, tz: tzinfo | None = None) -> None:
        self.user_id = user_id
        self.store = store
        self.engine = RecommendationEngine(store)
        self.tracker = ProgressionTracker(store, tz)
        self.notifications = NotificationService(store)
        self.achievements = AchievementEvaluator(store, self.tracker, self.notifications)

    def login(self, now: datetime | None = None) -> bool:
        """Credit the day's login, then award any achievements now reached."""
        if not self.tracker.handle_login(self.user_id, now):
            return False
        self.achievements.check_all_achievements(self.user_id)
        return True

    def recommendations(self, max_results: int = DEFAULT_RECOMMENDATION_COUNT) -> list[Article]:
        return self.engine.get_personalized_news(self.user_id, max_results)

    def mark_watched(self, news_id: str) -> bool:
        return users.add_watched_news(self.store, self.user_id, news_id)

    def react(self, news_id: str, interaction: Interaction | str) -> bool:
        """Record a like or dislike and learn from it.

        The reaction itself (liked/disliked and watched lists, article
        counters) is what the return value reports; weight learning,
        notification and achievement checks follow on a best-effort basis,
        and only when the reaction changed.
        """
        try:
            interaction = Interaction(interaction)
        except ValueError:
            logger.error("Unknown interaction %r from %s", interaction, self.user_id)
            return False

        change = users.record_reaction(self.store, self.user_id, news_id, interaction)
        if change is None:
            return False
        if change is ReactionChange.UNCHANGED:
            return True

        self.engine.process_news_interaction(self.user_id, news_id, interaction)
        article = news.get_article(self.store, news_id)
        if article is not None:
            if interaction is Interaction.LIKE:
                self.notifications.article_liked(self.user_id, news_id, article.title)
            else:
                self.notifications.article_disliked(self.user_id, news_id, article.title)
        self.achievements.check_all_achievements(self.user_id)
        return True

    def like(self, news_id: str) -> bool:
        return self.react(news_id, Interaction.LIKE)

    def dislike(self, news_id: str) -> bool:
        return self.react(news_id, Interaction.DISLIKE)

    def unlike(self, news_id: str) -> bool:
        return users.remove_liked_news(self.store, self.user_id, news_id)

    def undislike(self, news_id: str) -> bool:
        return users.remove_disliked_news(self.store, self.user_id, news_id)

    def get_notifications(self) -> list[Notification]:
        return self.notifications.get_all(self.user_id)

    def unseen_notifications(self) -> int:
        return self.notifications.unseen_count(self.user_id)

    def mark_notification_seen(self, notification_id: str) -> bool:
        return self.notifications.mark_seen(self.user_id, notification_id)

    def delete_notification(self, notification_id: str) -> bool:
        return self.notifications.delete(self.user_id, notification_id)

    def clear_notifications(self) -> bool:
        return self.notifications.clear_all(self.user_id)
