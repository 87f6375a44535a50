"""Tests for the reviewer's in-memory recording queue."""

import random

import pytest

from src.services.review_queue import APPROVED_NOTE, CONFIDENCE_RANGE, REJECTED_NOTE, ReviewQueue


class FakeClock:
    """Manually advanced seconds source."""

    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


def _recs(*ids: str) -> list[dict]:
    return [{"id": i, "sentence": f"Sentence {i}"} for i in ids]


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def queue(clock: FakeClock) -> ReviewQueue:
    return ReviewQueue(_recs("a", "b", "c"), reviewer_id="rev-1", clock=clock, rng=random.Random(1))


class TestNavigation:
    def test_starts_at_first(self, queue: ReviewQueue) -> None:
        assert queue.current["id"] == "a"
        assert queue.position == 1
        assert queue.remaining == 3

    def test_empty_queue(self) -> None:
        queue = ReviewQueue([], reviewer_id="rev-1")
        assert queue.current is None
        assert queue.position == 0
        assert queue.skip() is None
        assert queue.advance() is None

    def test_advance_wraps(self, queue: ReviewQueue) -> None:
        """Advancing past the last recording wraps to the first."""
        assert queue.advance()["id"] == "b"
        assert queue.advance()["id"] == "c"
        assert queue.advance()["id"] == "a"
        assert queue.remaining == 3

    def test_skip_drops_recording(self, queue: ReviewQueue) -> None:
        assert queue.skip()["id"] == "b"
        assert queue.remaining == 2
        assert [queue.current["id"], queue.advance()["id"]] == ["b", "c"]

    def test_skip_last_wraps_to_start(self, queue: ReviewQueue) -> None:
        queue.advance()
        queue.advance()
        assert queue.skip()["id"] == "a"

    def test_previous_returns_to_left_item(self, queue: ReviewQueue) -> None:
        queue.advance()
        assert queue.previous()["id"] == "a"

    def test_previous_requeues_reviewed(self, queue: ReviewQueue) -> None:
        """Going back to a reviewed recording puts it back in the queue."""
        queue.mark_reviewed()
        assert queue.remaining == 2
        assert queue.previous()["id"] == "a"
        assert queue.remaining == 3

    def test_previous_without_history(self, queue: ReviewQueue) -> None:
        assert queue.previous()["id"] == "a"


class TestBuildReview:
    def test_payload(self, queue: ReviewQueue, clock: FakeClock) -> None:
        """The payload carries the recording, reviewer and whole seconds spent."""
        clock.now += 12.7
        payload = queue.build_review("approved", confidence=88, notes="Clear")
        assert payload == {
            "recording_id": "a",
            "reviewer_id": "rev-1",
            "decision": "approved",
            "confidence": 88,
            "time_spent": 12,
            "notes": "Clear",
        }

    def test_defaults(self, queue: ReviewQueue) -> None:
        """Without input the confidence is drawn from the suggested range and notes follow the decision."""
        approved = queue.build_review("approved")
        rejected = queue.build_review("rejected")
        assert CONFIDENCE_RANGE[0] <= approved["confidence"] <= CONFIDENCE_RANGE[1]
        assert approved["notes"] == APPROVED_NOTE
        assert rejected["notes"] == REJECTED_NOTE

    def test_timer_restarts_on_move(self, queue: ReviewQueue, clock: FakeClock) -> None:
        clock.now += 30
        queue.advance()
        clock.now += 5
        assert queue.build_review("approved")["time_spent"] == 5

    def test_empty_queue_raises(self) -> None:
        with pytest.raises(LookupError):
            ReviewQueue([], reviewer_id="rev-1").build_review("approved")


class TestMarkReviewed:
    def test_counts_and_moves_on(self) -> None:
        queue = ReviewQueue(_recs("a", "b"), reviewer_id="rev-1", reviews_completed=4, session_reviews=1)
        assert queue.mark_reviewed()["id"] == "b"
        assert queue.reviews_completed == 5
        assert queue.session_reviews == 2
        assert queue.remaining == 1

    def test_complete(self, queue: ReviewQueue) -> None:
        payload = queue.complete("rejected", confidence=70)
        assert payload["recording_id"] == "a"
        assert queue.current["id"] == "b"
        assert [h["id"] for h in queue.history] == ["a"]
