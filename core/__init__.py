from core.achievements import AchievementEvaluator
from core.notifications import NotificationService
from core.progression import ProgressionTracker
from core.recommendation import RecommendationEngine
from core.records import (
    Achievement,
    Article,
    Interaction,
    Notification,
    ReactionChange,
    StreakChange,
    UserProfile,
)
from core.session import UserSession

__all__ = [
    "AchievementEvaluator",
    "NotificationService",
    "ProgressionTracker",
    "RecommendationEngine",
    "UserSession",
    "Achievement",
    "Article",
    "Interaction",
    "Notification",
    "ReactionChange",
    "StreakChange",
    "UserProfile",
]
