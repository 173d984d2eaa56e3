"""In-app notifications kept on the user document."""

import logging
import uuid
from datetime import datetime, timezone

from config import USERS
from core.records import Notification
from core.users import load_user
from db.store import ArrayUnion, DocumentStore
from errors import InvalidInputError, NewsquestError, NotFoundError

logger = logging.getLogger(__name__)


def create_notification(
    description: str, news_id: str | None = None, now: datetime | None = None
) -> Notification:
    """Build an unseen notification with a fresh ID."""
    created = now or datetime.now(timezone.utc)
    return Notification(
        id=f"notif_{int(created.timestamp() * 1000)}_{uuid.uuid4().hex[:8]}",
        created_at=created,
        description=description,
        news_id=news_id,
    )


class NotificationService:
    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    def add(self, user_id: str, notification: Notification) -> bool:
        try:
            if not notification.description.strip():
                raise InvalidInputError("notification description is empty")
            self.store.update_fields(
                USERS, user_id, {"notifications": ArrayUnion(notification.model_dump(mode="json"))}
            )
            logger.debug("Notification %s added for %s", notification.id, user_id)
            return True
        except NewsquestError as e:
            logger.error("Error adding notification for %s: %s", user_id, e)
            return False

    def notify(self, user_id: str, description: str, news_id: str | None = None) -> bool:
        return self.add(user_id, create_notification(description, news_id))

    def get_all(self, user_id: str) -> list[Notification]:
        """The user's notifications, newest first."""
        try:
            user = load_user(self.store, user_id)
        except NewsquestError as e:
            logger.error("Error getting notifications for %s: %s", user_id, e)
            return []
        return sorted(user.notifications, key=lambda n: n.created_at, reverse=True)

    def unseen_count(self, user_id: str) -> int:
        return sum(1 for n in self.get_all(user_id) if not n.is_seen)

    def mark_seen(self, user_id: str, notification_id: str) -> bool:
        try:
            user = load_user(self.store, user_id)
            if not any(n.id == notification_id for n in user.notifications):
                raise NotFoundError(f"{USERS}/{user_id}/notifications", notification_id)
            updated = [
                n.model_copy(update={"is_seen": True}) if n.id == notification_id else n
                for n in user.notifications
            ]
            self.store.update_fields(
                USERS, user_id, {"notifications": [n.model_dump(mode="json") for n in updated]}
            )
            return True
        except NewsquestError as e:
            logger.error("Error marking notification %s as seen: %s", notification_id, e)
            return False

    def delete(self, user_id: str, notification_id: str) -> bool:
        try:
            user = load_user(self.store, user_id)
            kept = [n for n in user.notifications if n.id != notification_id]
            if len(kept) == len(user.notifications):
                raise NotFoundError(f"{USERS}/{user_id}/notifications", notification_id)
            self.store.update_fields(
                USERS, user_id, {"notifications": [n.model_dump(mode="json") for n in kept]}
            )
            logger.debug("Notification %s deleted for %s", notification_id, user_id)
            return True
        except NewsquestError as e:
            logger.error("Error deleting notification %s: %s", notification_id, e)
            return False

    def clear_all(self, user_id: str) -> bool:
        try:
            self.store.update_fields(USERS, user_id, {"notifications": []})
            logger.info("All notifications cleared for %s", user_id)
            return True
        except NewsquestError as e:
            logger.error("Error clearing notifications for %s: %s", user_id, e)
            return False

    def article_liked(self, user_id: str, news_id: str, title: str) -> bool:
        return self.notify(user_id, f"You liked the article: {title}", news_id)

    def article_disliked(self, user_id: str, news_id: str, title: str) -> bool:
        return self.notify(user_id, f"You disliked the article: {title}", news_id)

    def new_article(self, user_id: str, news_id: str, title: str) -> bool:
        return self.notify(user_id, f"New article available: {title}", news_id)

    def achievement_unlocked(self, user_id: str, name: str, xp_reward: int) -> bool:
        return self.notify(user_id, f"Achievement unlocked: {name} (+{xp_reward} XP)")
