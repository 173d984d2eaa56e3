"""Typed records for documents in the users, news and achievements collections."""

import enum
from datetime import datetime, timezone
from typing import Annotated, Any

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, PlainSerializer, ValidationError

from errors import InvalidInputError


def _as_utc(value: datetime) -> datetime:
    # Naive timestamps are taken to be UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def format_timestamp(value: datetime) -> str:
    """ISO-8601 UTC, second precision; sorts lexicographically."""
    return _as_utc(value).replace(microsecond=0).isoformat()


Timestamp = Annotated[
    datetime,
    AfterValidator(_as_utc),
    PlainSerializer(format_timestamp, return_type=str, when_used="json"),
]


class Interaction(str, enum.Enum):
    LIKE = "like"
    DISLIKE = "dislike"


class StreakChange(str, enum.Enum):
    UNCHANGED = "unchanged"  # already credited today
    EXTENDED = "extended"
    RESET = "reset"


class ReactionChange(str, enum.Enum):
    RECORDED = "recorded"
    SWITCHED = "switched"  # replaced the opposite reaction
    UNCHANGED = "unchanged"


class Record(BaseModel):
    """Base for stored records. The document ID is not part of the stored body."""

    model_config = ConfigDict(extra="ignore")

    id: str

    @classmethod
    def from_document(cls, doc: dict[str, Any]):
        try:
            return cls.model_validate(doc)
        except ValidationError as e:
            raise InvalidInputError(f"Malformed {cls.__name__} document {doc.get('id')!r}: {e}") from e

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude={"id"})


class Notification(BaseModel):
    """In-app notification stored inline on the user document."""

    model_config = ConfigDict(extra="ignore")

    id: str
    created_at: Timestamp
    description: str
    news_id: str | None = None
    is_seen: bool = False


class UserProfile(Record):
    profile_name: str = ""
    experience: int = Field(default=0, ge=0, lt=100)
    level: int = Field(default=1, ge=1)
    tags: list[str] = Field(default_factory=list)
    # None until the first like/dislike
    tag_weights: dict[str, float] | None = None
    liked_news: list[str] = Field(default_factory=list)
    disliked_news: list[str] = Field(default_factory=list)
    watched_news: list[str] = Field(default_factory=list)
    streak: int = Field(default=0, ge=0)
    last_login: Timestamp | None = None
    achievements: list[str] = Field(default_factory=list)
    notifications: list[Notification] = Field(default_factory=list)


class Article(Record):
    title: str
    date: Timestamp
    tags: list[str] = Field(default_factory=list)
    likes: int = Field(default=0, ge=0)
    dislikes: int = Field(default=0, ge=0)
    content_short: str = ""
    content_long: str = ""


class Achievement(Record):
    """Achievement definition. Thresholds left as None are not checked."""

    name: str
    photo: str | None = None
    required_streak: int | None = Field(default=None, ge=0)
    required_likes: int | None = Field(default=None, ge=0)
    required_dislikes: int | None = Field(default=None, ge=0)
    xp_reward: int = Field(default=0, ge=0)

    def is_met_by(self, user: UserProfile) -> bool:
        if self.required_streak is not None and user.streak < self.required_streak:
            return False
        if self.required_likes is not None and len(user.liked_news) < self.required_likes:
            return False
        if self.required_dislikes is not None and len(user.disliked_news) < self.required_dislikes:
            return False
        return True
