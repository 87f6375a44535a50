"""
Sentence allocation rule.

A sentence is offered to a contributor only while it is "open":

- the contributor has not recorded it yet, and
- fewer than ``MAX_CONTRIBUTORS_PER_SENTENCE`` distinct contributors
  have recorded it.

The rule is evaluated over rows fetched wholesale from the database
(every sentence, every ``(sentence, user_id)`` recording pair); there
is no database constraint behind it.
"""

import random
from collections import defaultdict
from collections.abc import Iterable, Sequence
from datetime import date, datetime, timedelta

MAX_CONTRIBUTORS_PER_SENTENCE = 3


def build_contributor_map(pairs: Iterable[tuple[str, str]]) -> dict[str, set[str]]:
    """Map each sentence text to the set of user IDs that recorded it.

    Args:
        pairs: ``(sentence, user_id)`` tuples, one per recording.
    """
    contributors: dict[str, set[str]] = defaultdict(set)
    for sentence, user_id in pairs:
        contributors[sentence].add(user_id)
    return dict(contributors)


def can_record(
    contributors: set[str] | None,
    user_id: str,
    cap: int = MAX_CONTRIBUTORS_PER_SENTENCE,
) -> bool:
    """Return True if *user_id* may record a sentence with these *contributors*."""
    if not contributors:
        return True
    if user_id in contributors:
        return False
    return len(contributors) < cap


def filter_available_sentences(
    sentences: Iterable[str],
    contributor_map: dict[str, set[str]],
    user_id: str,
    cap: int = MAX_CONTRIBUTORS_PER_SENTENCE,
) -> list[str]:
    """Return the sentences still open to *user_id*, preserving input order."""
    return [s for s in sentences if can_record(contributor_map.get(s), user_id, cap)]


def pick_next_sentence(
    available: Sequence[str],
    current: str | None = None,
    rng: random.Random | None = None,
) -> str | None:
    """Choose the next prompt at random, avoiding *current* when there is a choice."""
    if not available:
        return None
    rng = rng or random.Random()
    candidates = [s for s in available if s != current] or list(available)
    return rng.choice(candidates)


def calculate_streak_days(activity: Iterable[datetime | date], today: date) -> int:
    """Count consecutive days with activity, walking back from *today*.

    A day without activity ends the streak, so a user who has not
    contributed today has a streak of 0.
    """
    days = {a.date() if isinstance(a, datetime) else a for a in activity}
    streak = 0
    cursor = today
    while cursor in days:
        streak += 1
        cursor -= timedelta(days=1)
    return streak
