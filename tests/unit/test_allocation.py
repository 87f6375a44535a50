"""Tests for the sentence allocation helpers."""

import random
from datetime import date, datetime

from src.services.allocation import (
    build_contributor_map,
    calculate_streak_days,
    can_record,
    filter_available_sentences,
    pick_next_sentence,
)


class TestContributorMap:
    def test_groups_distinct_users(self) -> None:
        """Repeat recordings by one user count once."""
        pairs = [("A", "u1"), ("A", "u2"), ("A", "u1"), ("B", "u3")]
        assert build_contributor_map(pairs) == {"A": {"u1", "u2"}, "B": {"u3"}}


class TestCanRecord:
    def test_unrecorded_sentence_is_open(self) -> None:
        assert can_record(None, "u1") is True
        assert can_record(set(), "u1") is True

    def test_own_sentence_is_closed(self) -> None:
        assert can_record({"u1"}, "u1") is False

    def test_cap_reached(self) -> None:
        """Three distinct contributors close the sentence for a fourth."""
        assert can_record({"u1", "u2"}, "u9") is True
        assert can_record({"u1", "u2", "u3"}, "u9") is False

    def test_custom_cap(self) -> None:
        assert can_record({"u1"}, "u2", cap=1) is False


class TestFilterAvailable:
    def test_preserves_order(self) -> None:
        contributors = {"B": {"u1"}, "C": {"u2", "u3", "u4"}}
        available = filter_available_sentences(["A", "B", "C", "D"], contributors, "u1")
        assert available == ["A", "D"]


class TestPickNextSentence:
    def test_empty_pool(self) -> None:
        assert pick_next_sentence([]) is None

    def test_avoids_current_when_possible(self) -> None:
        """With more than one sentence left, the current one is never picked again."""
        rng = random.Random(7)
        for _ in range(20):
            assert pick_next_sentence(["A", "B"], current="A", rng=rng) == "B"

    def test_single_sentence_repeats(self) -> None:
        assert pick_next_sentence(["A"], current="A") == "A"


class TestStreak:
    def test_consecutive_days(self) -> None:
        activity = [
            datetime(2024, 5, 10, 9, 0),
            datetime(2024, 5, 10, 18, 0),
            date(2024, 5, 9),
            datetime(2024, 5, 8, 12, 0),
            date(2024, 5, 6),
        ]
        assert calculate_streak_days(activity, date(2024, 5, 10)) == 3

    def test_no_activity_today(self) -> None:
        """The streak is broken when nothing happened today."""
        assert calculate_streak_days([date(2024, 5, 9)], date(2024, 5, 10)) == 0

    def test_empty(self) -> None:
        assert calculate_streak_days([], date(2024, 5, 10)) == 0
