"""Tests for in-app notifications."""

from datetime import datetime, timedelta, timezone

import pytest

from config import USERS
from core.notifications import NotificationService, create_notification

T0 = datetime(2026, 3, 10, 8, 0, tzinfo=timezone.utc)


@pytest.fixture
def service(store):
    return NotificationService(store)


def test_create_notification_defaults():
    note = create_notification("Hello", news_id="n1", now=T0)
    assert note.id.startswith("notif_")
    assert note.created_at == T0
    assert note.news_id == "n1"
    assert note.is_seen is False


def test_list_newest_first(service, make_user):
    make_user("u1")
    service.add("u1", create_notification("first", now=T0))
    service.add("u1", create_notification("third", now=T0 + timedelta(hours=2)))
    service.add("u1", create_notification("second", now=T0 + timedelta(hours=1)))

    assert [n.description for n in service.get_all("u1")] == ["third", "second", "first"]
    assert service.unseen_count("u1") == 3


def test_mark_seen(store, service, make_user):
    make_user("u1")
    keep = create_notification("keep", now=T0)
    read = create_notification("read", now=T0 + timedelta(minutes=1))
    service.add("u1", keep)
    service.add("u1", read)

    assert service.mark_seen("u1", read.id)
    assert service.mark_seen("u1", read.id)
    seen = {n.id: n.is_seen for n in service.get_all("u1")}
    assert seen == {keep.id: False, read.id: True}
    assert service.unseen_count("u1") == 1
    assert len(store.get_document(USERS, "u1")["notifications"]) == 2


def test_mark_seen_unknown_notification(service, make_user):
    make_user("u1")
    assert service.mark_seen("u1", "nope") is False
    assert service.mark_seen("ghost", "nope") is False


def test_delete_one(store, service, make_user):
    make_user("u1")
    keep = create_notification("keep", now=T0)
    drop = create_notification("drop", now=T0 + timedelta(minutes=1))
    service.add("u1", keep)
    service.add("u1", drop)

    assert service.delete("u1", drop.id)
    assert [n.id for n in service.get_all("u1")] == [keep.id]
    assert service.delete("u1", drop.id) is False
    assert service.delete("ghost", keep.id) is False
    assert len(store.get_document(USERS, "u1")["notifications"]) == 1


def test_clear_all(service, make_user):
    make_user("u1")
    service.notify("u1", "one")
    service.notify("u1", "two")
    assert service.clear_all("u1")
    assert service.get_all("u1") == []


def test_empty_description_rejected(service, make_user):
    make_user("u1")
    assert service.notify("u1", "   ") is False
    assert service.get_all("u1") == []


def test_missing_user(service):
    assert service.notify("ghost", "hi") is False
    assert service.get_all("ghost") == []
    assert service.clear_all("ghost") is False


def test_article_notifications(service, make_user):
    make_user("u1")
    service.article_liked("u1", "n1", "Big Game")
    service.article_disliked("u1", "n2", "Dull Story")
    service.new_article("u1", "n3", "Fresh News")
    texts = {n.news_id: n.description for n in service.get_all("u1")}
    assert texts == {
        "n1": "You liked the article: Big Game",
        "n2": "You disliked the article: Dull Story",
        "n3": "New article available: Fresh News",
    }
