"""Keyword-based topic tagger for articles that arrive without tags."""

import re

# Tag → list of (pattern, weight) tuples
# Patterns are compiled regexes for word-boundary matching
_TAG_RULES: dict[str, list[tuple[re.Pattern, int]]] = {}

_RAW_RULES: dict[str, list[str]] = {
    "Technology": [
        "tech", "technology", "software", "smartphone", "app", "gadget",
        "startup", "cloud", "cybersecurity", "chip", "semiconductor",
    ],
    "AI": [
        "ai", "artificial intelligence", "machine learning", "llm", "gpt",
        "neural network", "chatbot", "deep learning",
    ],
    "Sports": [
        "football", "soccer", "basketball", "tennis", "olympic", "league",
        "championship", "finals", "match", "tournament", "goal",
    ],
    "Health": [
        "health", "medical", "vaccine", "hospital", "disease", "fitness",
        "nutrition", "mental health", "doctor", "virus",
    ],
    "Business": [
        "business", "company", "ceo", "merger", "acquisition", "earnings",
        "revenue", "layoffs", "retail",
    ],
    "Finance": [
        "market", "stocks", "stock", "investor", "bank", "inflation",
        "interest rate", "crypto", "bitcoin", "economy",
    ],
    "Science": [
        "science", "research", "study", "scientists", "space", "nasa",
        "mars", "physics", "quantum", "climate",
    ],
    "Politics": [
        "election", "government", "president", "parliament", "senate",
        "policy", "minister", "vote", "sanctions",
    ],
    "Entertainment": [
        "movie", "film", "music", "album", "celebrity", "series",
        "streaming", "concert", "box office",
    ],
}


def _compile_rules() -> None:
    """Compile keyword patterns into regexes (called once at import)."""
    for tag, keywords in _RAW_RULES.items():
        _TAG_RULES[tag] = [
            (re.compile(r"(?<!\w)" + re.escape(kw) + r"(?!\w)", re.IGNORECASE), 1)
            for kw in keywords
        ]


_compile_rules()


def tag_article(title: str | None, content: str | None, max_tags: int = 3) -> list[str]:
    """Score and return top topic tags for an article.

    Title matches are weighted 3x. Content is truncated to first 2000 chars.
    Returns up to max_tags sorted by score descending.
    """
    title = (title or "").strip()
    content = (content or "").strip()[:2000]

    scores: dict[str, int] = {}
    for tag, patterns in _TAG_RULES.items():
        total = 0
        for pattern, weight in patterns:
            title_matches = len(pattern.findall(title))
            content_matches = len(pattern.findall(content))
            total += (title_matches * 3 + content_matches) * weight
        if total > 0:
            scores[tag] = total

    sorted_tags = sorted(scores, key=lambda t: scores[t], reverse=True)
    return sorted_tags[:max_tags]
