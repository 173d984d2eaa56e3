#!/usr/bin/env python3
"""Print a user's personalised feed, optionally crediting a login first."""

import argparse
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from config import DEFAULT_RECOMMENDATION_COUNT
from core import users
from core.session import UserSession
from db.database import init_db
from db.store import DocumentStore


def main() -> None:
    parser = argparse.ArgumentParser(description="Show recommendations for a user")
    parser.add_argument("user_id", help="User ID")
    parser.add_argument("--limit", type=int, default=DEFAULT_RECOMMENDATION_COUNT, help="Max articles")
    parser.add_argument("--create", metavar="NAME", help="Create the user with this profile name if missing")
    parser.add_argument("--login", action="store_true", help="Credit today's login before recommending")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    init_db()
    store = DocumentStore()
    if args.create:
        users.create_user(store, args.user_id, args.create)

    session = UserSession(args.user_id, store)
    if args.login and not session.login():
        logging.warning("Login for %s was not credited", args.user_id)

    profile = users.get_user(store, args.user_id)
    if profile is None:
        logging.error("No such user: %s", args.user_id)
        sys.exit(1)

    logging.info(
        "%s: level %d, %d XP, streak %d, weights %s",
        profile.profile_name, profile.level, profile.experience, profile.streak, profile.tag_weights,
    )
    for i, article in enumerate(session.recommendations(args.limit), start=1):
        print(f"{i:2d}. [{', '.join(article.tags)}] {article.title} ({article.date:%Y-%m-%d}) id={article.id}")


if __name__ == "__main__":
    main()
