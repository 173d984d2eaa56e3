#!/usr/bin/env python3
"""Seed the store with news articles and the default achievement definitions."""

import argparse
import json
import logging
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from config import DEFAULT_ACHIEVEMENTS
from core.achievements import AchievementEvaluator
from core.news import add_article
from core.progression import ProgressionTracker
from core.records import Achievement
from db.database import init_db
from db.store import DocumentStore

logger = logging.getLogger(__name__)

SAMPLE_NEWS: list[dict] = [
    {
        "title": "Breaking: Market Crash Expected",
        "content_short": "Markets may crash soon!",
        "content_long": "Stock markets are predicted to fall drastically due to global economic instability.",
        "tags": ["Finance", "Business"],
    },
    {
        "title": "Tech Giants Release New AI",
        "content_short": "New AI models announced!",
        "content_long": "Several major tech companies have unveiled their latest AI models.",
        "tags": ["Technology", "AI"],
    },
    {
        "title": "Sports Finals: Historic Victory",
        "content_short": "Underdogs win big!",
        "content_long": "The underdogs secured a last-minute victory in the championship finals.",
        "tags": ["Sports"],
    },
    {
        "title": "New Vaccine Trial Shows Promise",
        "content_short": "Early results are encouraging.",
        "content_long": "Doctors report strong results from a hospital study of a new vaccine.",
    },
    {
        "title": "Mars Rover Finds Traces of Ancient Water",
        "content_short": "Scientists are excited.",
        "content_long": "NASA scientists say the research changes what we know about Mars.",
    },
]


def _parse_date(raw: str | None, fallback: datetime) -> datetime:
    if not raw:
        return fallback
    try:
        return datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        logger.warning("Bad date %r, using %s", raw, fallback.isoformat())
        return fallback


def load_news(store: DocumentStore, items: list[dict]) -> int:
    """Add articles from dicts; the first item is the newest. Returns count saved."""
    now = datetime.now(timezone.utc)
    saved = 0
    for i, item in enumerate(items):
        article = add_article(
            store,
            title=item.get("title", ""),
            content_short=item.get("content_short", ""),
            content_long=item.get("content_long", ""),
            tags=item.get("tags"),
            date=_parse_date(item.get("date"), now - timedelta(minutes=i)),
            news_id=item.get("id"),
        )
        if article is not None:
            saved += 1
    return saved


def load_achievements(store: DocumentStore) -> int:
    evaluator = AchievementEvaluator(store, ProgressionTracker(store))
    return sum(
        1 for definition in DEFAULT_ACHIEVEMENTS
        if evaluator.create_achievement(Achievement.model_validate(definition))
    )


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed newsquest with news and achievements")
    parser.add_argument("--news-file", type=Path, help="JSON array of articles (default: built-in samples)")
    parser.add_argument("--skip-achievements", action="store_true", help="Don't write achievement definitions")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    init_db()
    store = DocumentStore()

    if args.news_file:
        with open(args.news_file, "r", encoding="utf-8") as f:
            items = json.load(f)
    else:
        items = SAMPLE_NEWS

    saved = load_news(store, items)
    logger.info("Loaded %d of %d articles", saved, len(items))

    if not args.skip_achievements:
        logger.info("Loaded %d achievement definitions", load_achievements(store))


if __name__ == "__main__":
    main()
