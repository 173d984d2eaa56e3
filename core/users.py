"""User profile management: creation, preferences, reading history, leaderboard."""

import logging
from typing import Any

from config import DEFAULT_USER_TAGS, LEADERBOARD_LIMIT, NEWS, USERS
from core.records import Interaction, ReactionChange, UserProfile
from db.store import ArrayRemove, ArrayUnion, DocumentStore, Increment
from errors import InvalidInputError, NewsquestError, NotFoundError

logger = logging.getLogger(__name__)


def load_user(store: DocumentStore, user_id: str) -> UserProfile:
    """Read a user document, raising NotFoundError if it is missing."""
    doc = store.get_document(USERS, user_id)
    if doc is None:
        raise NotFoundError(USERS, user_id)
    return UserProfile.from_document(doc)


def create_user(
    store: DocumentStore,
    user_id: str,
    profile_name: str,
    tags: list[str] | None = None,
) -> bool:
    """Create the profile document for a newly registered user.

    Returns False if the input is empty, the user already exists or the
    write fails.
    """
    try:
        if not user_id or not profile_name or not profile_name.strip():
            raise InvalidInputError("user_id and profile_name are required")
        if store.get_document(USERS, user_id) is not None:
            logger.info("User %s already exists, not overwriting", user_id)
            return False
        user = UserProfile(
            id=user_id,
            profile_name=profile_name.strip(),
            tags=list(dict.fromkeys(tags if tags else DEFAULT_USER_TAGS)),
        )
        store.set_document(USERS, user_id, user.to_document())
        logger.info("Created user %s with tags %s", user_id, user.tags)
        return True
    except NewsquestError as e:
        logger.error("Error creating user %s: %s", user_id, e)
        return False


def get_user(store: DocumentStore, user_id: str) -> UserProfile | None:
    try:
        return load_user(store, user_id)
    except NewsquestError as e:
        logger.error("Error fetching user %s: %s", user_id, e)
        return None


def update_preferences(store: DocumentStore, user_id: str, tags: list[str]) -> bool:
    """Replace the user's preferred tags. Existing tag weights are kept."""
    try:
        cleaned = list(dict.fromkeys(t.strip() for t in tags if t and t.strip()))
        if not cleaned:
            raise InvalidInputError("at least one tag is required")
        store.update_fields(USERS, user_id, {"tags": cleaned})
        logger.info("Updated preferences for %s: %s", user_id, cleaned)
        return True
    except NewsquestError as e:
        logger.error("Error updating preferences for %s: %s", user_id, e)
        return False


def add_watched_news(store: DocumentStore, user_id: str, news_id: str) -> bool:
    try:
        store.update_fields(USERS, user_id, {"watched_news": ArrayUnion(news_id)})
        return True
    except NewsquestError as e:
        logger.error("Error adding watched news %s for %s: %s", news_id, user_id, e)
        return False


# (user list, article counter) per reaction
_REACTION_FIELDS = {
    Interaction.LIKE: ("liked_news", "likes"),
    Interaction.DISLIKE: ("disliked_news", "dislikes"),
}


def _decrement(article_doc: dict[str, Any], counter: str) -> Increment | None:
    # Counters never go below 0
    current = article_doc.get(counter)
    if isinstance(current, int) and current > 0:
        return Increment(-1)
    return None


def record_reaction(
    store: DocumentStore, user_id: str, news_id: str, interaction: Interaction | str
) -> ReactionChange | None:
    """Record a like or dislike of `news_id`.

    The article is added to the matching list and to the watched list, and
    its counter is bumped once. An opposite reaction already on record is
    withdrawn in the same user write and its counter decremented. Repeating
    the same reaction writes nothing and returns UNCHANGED.

    Returns None on unknown interaction, missing user or article, or store failure.
    """
    try:
        try:
            interaction = Interaction(interaction)
        except ValueError:
            raise InvalidInputError(f"Unknown interaction: {interaction!r}") from None
        list_field, counter = _REACTION_FIELDS[interaction]
        other = Interaction.DISLIKE if interaction is Interaction.LIKE else Interaction.LIKE
        other_field, other_counter = _REACTION_FIELDS[other]

        user = load_user(store, user_id)
        article_doc = store.get_document(NEWS, news_id)
        if article_doc is None:
            raise NotFoundError(NEWS, news_id)
        if news_id in getattr(user, list_field):
            return ReactionChange.UNCHANGED

        switched = news_id in getattr(user, other_field)
        user_fields: dict[str, Any] = {
            list_field: ArrayUnion(news_id),
            "watched_news": ArrayUnion(news_id),
        }
        article_fields: dict[str, Any] = {counter: Increment(1)}
        if switched:
            user_fields[other_field] = ArrayRemove(news_id)
            decrement = _decrement(article_doc, other_counter)
            if decrement is not None:
                article_fields[other_counter] = decrement

        store.update_fields(USERS, user_id, user_fields)
        store.update_fields(NEWS, news_id, article_fields)
        if switched:
            logger.info("User %s switched to %s on %s", user_id, interaction.value, news_id)
            return ReactionChange.SWITCHED
        return ReactionChange.RECORDED
    except NewsquestError as e:
        logger.error("Error recording %s on %s for %s: %s", interaction, news_id, user_id, e)
        return None


def add_liked_news(store: DocumentStore, user_id: str, news_id: str) -> bool:
    """Record a like: append to liked and watched lists, bump the article's likes."""
    return record_reaction(store, user_id, news_id, Interaction.LIKE) is not None


def add_disliked_news(store: DocumentStore, user_id: str, news_id: str) -> bool:
    """Record a dislike: append to disliked and watched lists, bump the article's dislikes."""
    return record_reaction(store, user_id, news_id, Interaction.DISLIKE) is not None


def _remove_reaction(store: DocumentStore, user_id: str, news_id: str, interaction: Interaction) -> bool:
    list_field, counter = _REACTION_FIELDS[interaction]
    try:
        user = load_user(store, user_id)
        if news_id not in getattr(user, list_field):
            return True
        store.update_fields(USERS, user_id, {list_field: ArrayRemove(news_id)})
        article_doc = store.get_document(NEWS, news_id)
        decrement = _decrement(article_doc, counter) if article_doc is not None else None
        if decrement is not None:
            store.update_fields(NEWS, news_id, {counter: decrement})
        return True
    except NewsquestError as e:
        logger.error("Error removing %s %s for %s: %s", list_field, news_id, user_id, e)
        return False


def remove_liked_news(store: DocumentStore, user_id: str, news_id: str) -> bool:
    """Withdraw a like. The article stays in the watched list."""
    return _remove_reaction(store, user_id, news_id, Interaction.LIKE)


def remove_disliked_news(store: DocumentStore, user_id: str, news_id: str) -> bool:
    """Withdraw a dislike. The article stays in the watched list."""
    return _remove_reaction(store, user_id, news_id, Interaction.DISLIKE)


def get_leaderboard(store: DocumentStore, limit: int = LEADERBOARD_LIMIT) -> list[dict[str, Any]]:
    """Users ranked by level, then experience, highest first."""
    try:
        users = [UserProfile.from_document(d) for d in store.list_documents(USERS)]
    except NewsquestError as e:
        logger.error("Error building leaderboard: %s", e)
        return []

    users.sort(key=lambda u: (u.level, u.experience), reverse=True)
    return [
        {
            "rank": rank,
            "id": u.id,
            "profile_name": u.profile_name,
            "level": u.level,
            "experience": u.experience,
            "streak": u.streak,
        }
        for rank, u in enumerate(users[:limit], start=1)
    ]
