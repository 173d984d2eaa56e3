"""Login streaks, experience and levels."""

import logging
from datetime import datetime, timezone, tzinfo
from zoneinfo import ZoneInfo

from config import LOGIN_XP, TIMEZONE, USERS, XP_PER_LEVEL
from core.records import StreakChange, format_timestamp
from core.users import load_user
from db.store import DocumentStore
from errors import InvalidInputError, NewsquestError

logger = logging.getLogger(__name__)


def apply_experience(experience: int, level: int, points: int) -> tuple[int, int]:
    """Return (experience, level) after adding `points`, rolling every 100 XP into a level."""
    total = experience + points
    return total % XP_PER_LEVEL, level + total // XP_PER_LEVEL


class ProgressionTracker:
    """Keeps streak, experience and level consistent across repeated calls.

    Streak days are calendar dates in `tz`. Reads and writes are not
    transactional: two concurrent updates of the same user can lose one.
    """

    def __init__(self, store: DocumentStore, tz: tzinfo | None = None) -> None:
        self.store = store
        self.tz = tz or ZoneInfo(TIMEZONE)

    def _day(self, moment: datetime):
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)
        return moment.astimezone(self.tz).date()

    def update_streak(self, user_id: str, now: datetime | None = None) -> StreakChange | None:
        """Credit today's login once.

        Returns how the streak changed, or None if the user could not be read
        or written. Credited logins also award LOGIN_XP; streak, last_login,
        experience and level are written in a single update.
        """
        now = now or datetime.now(timezone.utc)
        try:
            user = load_user(self.store, user_id)
            today = self._day(now)

            if user.last_login is None:
                change = StreakChange.RESET
            else:
                gap = (today - self._day(user.last_login)).days
                if gap <= 0:
                    # Same day, or a last_login ahead of our clock
                    return StreakChange.UNCHANGED
                change = StreakChange.EXTENDED if gap == 1 else StreakChange.RESET

            streak = user.streak + 1 if change is StreakChange.EXTENDED else 1
            experience, level = apply_experience(user.experience, user.level, LOGIN_XP)
            self.store.update_fields(
                USERS,
                user_id,
                {
                    "streak": streak,
                    "last_login": format_timestamp(now),
                    "experience": experience,
                    "level": level,
                },
            )
            logger.info("Login for %s: streak %s -> %d (%s)", user_id, user.streak, streak, change.value)
            return change
        except NewsquestError as e:
            logger.error("Error updating streak for %s: %s", user_id, e)
            return None

    def handle_login(self, user_id: str, now: datetime | None = None) -> bool:
        """True when the login was processed, including a same-day repeat."""
        return self.update_streak(user_id, now) is not None

    def add_experience(self, user_id: str, points: int) -> bool:
        """Add `points` XP, converting every full 100 into a level.

        Additive: calling twice grants twice. Negative or non-integer points
        are rejected without touching the store.
        """
        try:
            if isinstance(points, bool) or not isinstance(points, int) or points < 0:
                raise InvalidInputError(f"points must be a non-negative integer, got {points!r}")
            user = load_user(self.store, user_id)
            experience, level = apply_experience(user.experience, user.level, points)
            self.store.update_fields(USERS, user_id, {"experience": experience, "level": level})
            if level > user.level:
                logger.info("User %s reached level %d", user_id, level)
            return True
        except NewsquestError as e:
            logger.error("Error adding %r experience for %s: %s", points, user_id, e)
            return False
