"""Shared fixtures: a temporary database and helpers to seed documents."""

from datetime import datetime, timedelta, timezone

import pytest

from config import NEWS, USERS
from db.database import init_db
from db.store import DocumentStore

BASE_TIME = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def store(tmp_path, monkeypatch):
    """Use a temporary database for each test."""
    db_path = tmp_path / "test.db"
    # Patch in both config and db.database (which imports by value)
    monkeypatch.setattr("config.DB_PATH", db_path)
    monkeypatch.setattr("db.database.DB_PATH", db_path)

    import db.database as db_mod
    db_mod.reset_engine()

    init_db()
    yield DocumentStore()

    db_mod.reset_engine()


@pytest.fixture
def make_user(store):
    def _make(user_id="u1", **fields):
        doc = {"profile_name": user_id.title(), "tags": ["Sports", "Tech"]}
        doc.update(fields)
        store.set_document(USERS, user_id, doc)
        return user_id
    return _make


@pytest.fixture
def make_article(store):
    """Articles get dates one hour apart so that later calls are newer."""
    counter = {"n": 0}

    def _make(news_id, tags, age_hours=None, **fields):
        counter["n"] += 1
        hours = age_hours if age_hours is not None else 1000 - counter["n"]
        doc = {
            "title": fields.pop("title", f"Article {news_id}"),
            "date": (BASE_TIME - timedelta(hours=hours)).isoformat(),
            "tags": tags,
            "likes": 0,
            "dislikes": 0,
        }
        doc.update(fields)
        store.set_document(NEWS, news_id, doc)
        return news_id
    return _make
