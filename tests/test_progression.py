"""Tests for login streaks, XP and levels."""

from datetime import datetime, timedelta, timezone
from unittest.mock import patch
from zoneinfo import ZoneInfo

import pytest

from config import USERS
from core.progression import ProgressionTracker, apply_experience
from core.records import StreakChange
from errors import StoreUnavailableError

DAY_ONE = datetime(2026, 3, 10, 9, 30, tzinfo=timezone.utc)


@pytest.fixture
def tracker(store):
    return ProgressionTracker(store, tz=ZoneInfo("UTC"))


def _user(store, user_id="u1"):
    return store.get_document(USERS, user_id)


# --- apply_experience ---


@pytest.mark.parametrize(
    "experience, level, points, expected",
    [
        (0, 1, 0, (0, 1)),
        (10, 1, 50, (60, 1)),
        (95, 3, 20, (15, 4)),
        (99, 1, 1, (0, 2)),
        (50, 2, 250, (0, 5)),
        (0, 7, 1234, (34, 19)),
    ],
)
def test_apply_experience(experience, level, points, expected):
    assert apply_experience(experience, level, points) == expected


def test_apply_experience_invariant():
    for e0 in range(0, 100, 7):
        for p in range(0, 450, 13):
            experience, level = apply_experience(e0, 1, p)
            assert 0 <= experience < 100
            assert level == 1 + (e0 + p) // 100
            assert experience == (e0 + p) % 100


# --- add_experience ---


def test_add_experience_example(store, tracker, make_user):
    make_user("u1", experience=95, level=3)
    assert tracker.add_experience("u1", 20)
    doc = _user(store)
    assert (doc["level"], doc["experience"]) == (4, 15)


def test_add_experience_is_additive(store, tracker, make_user):
    make_user("u1", experience=0, level=1)
    tracker.add_experience("u1", 30)
    tracker.add_experience("u1", 30)
    assert _user(store)["experience"] == 60


@pytest.mark.parametrize("points", [-1, 2.5, "10", None, True])
def test_add_experience_rejects_bad_points(store, tracker, make_user, points):
    make_user("u1", experience=5, level=1)
    with patch.object(store, "get_document", wraps=store.get_document) as reads:
        assert tracker.add_experience("u1", points) is False
        reads.assert_not_called()
    assert _user(store)["experience"] == 5


def test_add_experience_missing_user(tracker):
    assert tracker.add_experience("ghost", 10) is False


def test_add_experience_write_failure_leaves_state(store, tracker, make_user):
    make_user("u1", experience=90, level=2)
    with patch.object(store, "update_fields", side_effect=StoreUnavailableError("down")):
        assert tracker.add_experience("u1", 20) is False
    doc = _user(store)
    assert (doc["experience"], doc["level"]) == (90, 2)


def test_add_experience_writes_level_and_experience_together(store, tracker, make_user):
    make_user("u1", experience=95, level=3)
    with patch.object(store, "update_fields", wraps=store.update_fields) as update:
        tracker.add_experience("u1", 20)
    update.assert_called_once_with(USERS, "u1", {"experience": 15, "level": 4})


def test_concurrent_add_experience_can_lose_an_update(store, tracker, make_user):
    """Read-modify-write without a transaction: a stale read overwrites a newer write."""
    make_user("u1", experience=10, level=1)
    stale = store.get_document(USERS, "u1")

    assert tracker.add_experience("u1", 30)
    with patch.object(store, "get_document", return_value=stale):
        assert tracker.add_experience("u1", 5)

    # 10 + 30 + 5 would be 45; the second writer never saw the +30
    assert _user(store)["experience"] == 15


# --- update_streak / handle_login ---


def test_first_login_starts_streak(store, tracker, make_user):
    make_user("u1")
    assert tracker.update_streak("u1", DAY_ONE) is StreakChange.RESET
    doc = _user(store)
    assert doc["streak"] == 1
    assert doc["experience"] == 10
    assert doc["last_login"] == "2026-03-10T09:30:00+00:00"


def test_same_day_login_is_noop(store, tracker, make_user):
    make_user("u1")
    tracker.update_streak("u1", DAY_ONE)
    before = _user(store)

    assert tracker.update_streak("u1", DAY_ONE + timedelta(hours=10)) is StreakChange.UNCHANGED
    assert tracker.handle_login("u1", DAY_ONE + timedelta(hours=14))
    assert _user(store) == before


def test_next_day_login_extends_streak(store, tracker, make_user):
    make_user("u1", streak=4, experience=20, last_login=DAY_ONE.isoformat())
    assert tracker.update_streak("u1", DAY_ONE + timedelta(days=1)) is StreakChange.EXTENDED
    doc = _user(store)
    assert doc["streak"] == 5
    assert doc["experience"] == 30


def test_next_calendar_day_counts_even_under_24_hours(store, tracker, make_user):
    late = datetime(2026, 3, 10, 23, 50, tzinfo=timezone.utc)
    make_user("u1", streak=2, last_login=late.isoformat())
    assert tracker.update_streak("u1", late + timedelta(minutes=20)) is StreakChange.EXTENDED
    assert _user(store)["streak"] == 3


def test_gap_resets_streak(store, tracker, make_user):
    make_user("u1", streak=9, experience=0, last_login=DAY_ONE.isoformat())
    assert tracker.update_streak("u1", DAY_ONE + timedelta(days=5)) is StreakChange.RESET
    doc = _user(store)
    assert doc["streak"] == 1
    assert doc["experience"] == 10


def test_login_xp_rolls_over_into_level(store, tracker, make_user):
    make_user("u1", streak=1, experience=95, level=2, last_login=DAY_ONE.isoformat())
    tracker.update_streak("u1", DAY_ONE + timedelta(days=1))
    doc = _user(store)
    assert (doc["experience"], doc["level"]) == (5, 3)


def test_future_last_login_is_not_credited(store, tracker, make_user):
    make_user("u1", streak=3, last_login=(DAY_ONE + timedelta(days=2)).isoformat())
    assert tracker.update_streak("u1", DAY_ONE) is StreakChange.UNCHANGED
    assert _user(store)["streak"] == 3


def test_day_boundary_follows_configured_timezone(store, make_user):
    # 03:00 UTC on the 11th is still the 10th in New York
    tracker = ProgressionTracker(store, tz=ZoneInfo("America/New_York"))
    make_user("u1", streak=2, last_login=datetime(2026, 3, 10, 14, 0, tzinfo=timezone.utc).isoformat())
    now = datetime(2026, 3, 11, 3, 0, tzinfo=timezone.utc)
    assert tracker.update_streak("u1", now) is StreakChange.UNCHANGED

    utc_tracker = ProgressionTracker(store, tz=ZoneInfo("UTC"))
    assert utc_tracker.update_streak("u1", now) is StreakChange.EXTENDED


def test_naive_now_is_treated_as_utc(store, tracker, make_user):
    make_user("u1", streak=1, last_login=DAY_ONE.isoformat())
    assert tracker.update_streak("u1", datetime(2026, 3, 11, 8, 0)) is StreakChange.EXTENDED


def test_login_missing_user(tracker):
    assert tracker.update_streak("ghost", DAY_ONE) is None
    assert tracker.handle_login("ghost", DAY_ONE) is False


def test_login_write_failure_persists_nothing(store, tracker, make_user):
    make_user("u1", streak=4, experience=20, last_login=DAY_ONE.isoformat())
    before = _user(store)
    with patch.object(store, "update_fields", side_effect=StoreUnavailableError("down")):
        assert tracker.handle_login("u1", DAY_ONE + timedelta(days=1)) is False
    assert _user(store) == before
