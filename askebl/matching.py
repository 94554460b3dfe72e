"""Keyword scoring and intent routing for free-text questions."""

import re
from collections.abc import Iterable, Sequence

from .config import config
from .knowledge import ChoiceFlow
from .models import CatalogItem, KnowledgeEntry

logger = config.get_logger(__name__)

MIN_TOKEN_LENGTH = 3

QUESTION_TOKEN_SCORE = 2
KEYWORD_SCORE = 3
PHRASE_BONUS = 5


def tokenize(text: str, min_length: int = MIN_TOKEN_LENGTH) -> list[str]:
    """Split lowercased text on whitespace, dropping short tokens.

    Returns:
        Tokens of at least ``min_length`` characters, in input order.
    """
    return [word for word in text.lower().split() if len(word) >= min_length]


def score_entry(query: str, entry: KnowledgeEntry) -> int:
    """Score how well ``entry`` answers ``query``.

    Each query token found inside the question adds 2, each (token, keyword)
    pair where one contains the other adds 3, and the whole query appearing
    in the question (or the question in the query) adds 5.

    Returns:
        Non-negative integer score.
    """
    phrase = query.lower().strip()
    question = entry.question.lower()
    words = tokenize(phrase)

    score = sum(QUESTION_TOKEN_SCORE for word in words if word in question)

    for keyword in entry.keywords:
        lowered = keyword.lower()
        for word in words:
            if word in lowered or lowered in word:
                score += KEYWORD_SCORE

    if phrase and (phrase in question or question in phrase):
        score += PHRASE_BONUS

    return score


def find_best_match(
    query: str,
    entries: Iterable[KnowledgeEntry],
    threshold: int | None = None,
) -> KnowledgeEntry | None:
    """Return the highest-scoring entry whose score exceeds ``threshold``.

    Entries are scanned in order and only a strictly higher score replaces
    the current best, so the first entry to reach the top score wins ties.

    Returns:
        The best entry, or None when no entry scores above the threshold.
    """
    if threshold is None:
        threshold = config.MATCH_THRESHOLD

    best_match: KnowledgeEntry | None = None
    highest_score = 0
    for entry in entries:
        score = score_entry(query, entry)
        if score > highest_score:
            highest_score = score
            best_match = entry

    if best_match is None or highest_score <= threshold:
        logger.debug("No match above threshold %d for: %s", threshold, query)
        return None

    logger.debug("Matched '%s' with score %d", best_match.question, highest_score)
    return best_match


def contains_keyword(text: str, keyword: str) -> bool:
    """Check whether ``keyword`` occurs in ``text`` as whole words, ignoring case."""
    pattern = rf"\b{re.escape(keyword.lower())}\b"
    return re.search(pattern, text.lower()) is not None


def classify_intent(text: str, flows: Sequence[ChoiceFlow]) -> ChoiceFlow | None:
    """Return the first flow with a keyword occurring in ``text``."""
    for flow in flows:
        if any(contains_keyword(text, keyword) for keyword in flow.keywords):
            return flow
    return None


def resolve_choice(
    text: str, options: Sequence[CatalogItem]
) -> CatalogItem | None:
    """Resolve a selection reply against a catalog.

    An exact (case-insensitive) name wins, then the longest option name the
    reply contains, then the first option whose name contains the reply.

    Returns:
        The selected catalog item, or None if nothing matches.
    """
    reply = text.strip().lower()
    if not reply:
        return None

    for item in options:
        if item.name.lower() == reply:
            return item

    contained = [item for item in options if item.name.lower() in reply]
    if contained:
        return max(contained, key=lambda item: len(item.name))

    for item in options:
        if reply in item.name.lower():
            return item

    return None
