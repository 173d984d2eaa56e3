"""newsquest configuration."""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).parent / ".env")

# --- Paths ---
BASE_DIR = Path(__file__).parent
DATA_DIR = BASE_DIR / "data"
DB_PATH = Path(os.getenv("NEWSQUEST_DB_PATH", str(DATA_DIR / "newsquest.db")))

# --- Collections ---
USERS = "users"
NEWS = "news"
ACHIEVEMENTS = "achievements"

# --- Progression ---
# Calendar days for streaks are counted in this zone
TIMEZONE: str = os.getenv("NEWSQUEST_TIMEZONE", "UTC")
LOGIN_XP: int = 10
XP_PER_LEVEL: int = 100

# --- Recommendations ---
TAG_WEIGHT_DEFAULT: float = 1.0
TAG_WEIGHT_MIN: float = 0.1
TAG_WEIGHT_MAX: float = 2.0
TAG_WEIGHT_STEP: float = 0.1
DEFAULT_RECOMMENDATION_COUNT: int = 10
DEFAULT_USER_TAGS: list[str] = ["Technology", "Sports", "Health", "Business"]

# --- News feed ---
RECENT_NEWS_DAYS: int = 14
RECENT_NEWS_LIMIT: int = 10
SEARCH_LIMIT: int = 50
LEADERBOARD_LIMIT: int = 50

# --- Achievements (seeded by scripts/seed_data.py) ---
DEFAULT_ACHIEVEMENTS: list[dict] = [
    {"id": "first_like", "name": "First Like", "required_likes": 1, "xp_reward": 10},
    {"id": "critic", "name": "Critic", "required_dislikes": 10, "xp_reward": 25},
    {"id": "enthusiast", "name": "Enthusiast", "required_likes": 25, "xp_reward": 50},
    {"id": "streak_3", "name": "Warming Up", "required_streak": 3, "xp_reward": 20},
    {"id": "streak_7", "name": "Week Streak", "required_streak": 7, "xp_reward": 50},
    {"id": "streak_30", "name": "Monthly Reader", "required_streak": 30, "xp_reward": 150},
    {
        "id": "well_rounded",
        "name": "Well Rounded",
        "required_streak": 5,
        "required_likes": 10,
        "required_dislikes": 5,
        "xp_reward": 75,
    },
]
