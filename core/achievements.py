"""Achievement definitions and awarding."""

import logging
from typing import Any

from config import ACHIEVEMENTS, USERS
from core.notifications import NotificationService
from core.progression import ProgressionTracker
from core.records import Achievement, UserProfile
from core.users import load_user
from db.store import ArrayUnion, DocumentStore
from errors import InvalidInputError, NewsquestError, NotFoundError

logger = logging.getLogger(__name__)


def meets_requirements(user: UserProfile, achievement: Achievement) -> bool:
    """Already-earned achievements count as met."""
    return achievement.id in user.achievements or achievement.is_met_by(user)


class AchievementEvaluator:
    """Awards achievements whose thresholds a user has reached.

    Awarding appends the achievement ID first and grants XP second. The
    append is authoritative: if the XP grant fails the achievement stays
    awarded.
    """

    def __init__(
        self,
        store: DocumentStore,
        tracker: ProgressionTracker,
        notifications: NotificationService | None = None,
    ) -> None:
        self.store = store
        self.tracker = tracker
        self.notifications = notifications

    def load_achievement(self, achievement_id: str) -> Achievement:
        doc = self.store.get_document(ACHIEVEMENTS, achievement_id)
        if doc is None:
            raise NotFoundError(ACHIEVEMENTS, achievement_id)
        return Achievement.from_document(doc)

    def all_achievements(self) -> list[Achievement]:
        try:
            return [Achievement.from_document(d) for d in self.store.list_documents(ACHIEVEMENTS)]
        except NewsquestError as e:
            logger.error("Error fetching achievements: %s", e)
            return []

    def create_achievement(self, achievement: Achievement) -> bool:
        try:
            self.store.set_document(ACHIEVEMENTS, achievement.id, achievement.to_document())
            return True
        except NewsquestError as e:
            logger.error("Error creating achievement %s: %s", achievement.id, e)
            return False

    def update_achievement(self, achievement_id: str, fields: dict[str, Any]) -> bool:
        """Patch a definition. The merged definition must still validate."""
        try:
            if not fields:
                raise InvalidInputError("no fields to update")
            current = self.load_achievement(achievement_id)
            merged = Achievement.from_document(
                {**current.model_dump(), **fields, "id": achievement_id}
            )
            body = merged.to_document()
            self.store.update_fields(
                ACHIEVEMENTS, achievement_id, {k: body[k] for k in fields if k in body}
            )
            logger.info("Achievement %s updated", achievement_id)
            return True
        except NewsquestError as e:
            logger.error("Error updating achievement %s: %s", achievement_id, e)
            return False

    def check_and_award_achievement(self, user_id: str, achievement_id: str) -> bool:
        """Award `achievement_id` if the user qualifies.

        True if awarded now or earlier, False if not qualified or on failure.
        XP is granted only on the call that performs the award.
        """
        try:
            user = load_user(self.store, user_id)
            achievement = self.load_achievement(achievement_id)
            if achievement.id in user.achievements:
                return True
            if not meets_requirements(user, achievement):
                return False
            self.store.update_fields(USERS, user_id, {"achievements": ArrayUnion(achievement.id)})
        except NewsquestError as e:
            logger.error("Error checking achievement %s for %s: %s", achievement_id, user_id, e)
            return False

        logger.info("User %s earned achievement %s", user_id, achievement.id)
        if achievement.xp_reward and not self.tracker.add_experience(user_id, achievement.xp_reward):
            logger.warning(
                "Achievement %s awarded to %s but %d XP was not granted",
                achievement.id, user_id, achievement.xp_reward,
            )
        if self.notifications is not None:
            self.notifications.achievement_unlocked(user_id, achievement.name, achievement.xp_reward)
        return True

    def check_all_achievements(self, user_id: str) -> None:
        """Try every known achievement for the user; failures don't stop the loop."""
        for achievement in self.all_achievements():
            self.check_and_award_achievement(user_id, achievement.id)
