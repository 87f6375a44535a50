"""
In-memory queue of pending recordings for one reviewer session.

The listen page loads every pending recording at once and walks through
them here. Nothing is written back until a review payload built by the
queue is posted to the API.
"""

import random
import time
from collections.abc import Callable

APPROVED_NOTE = "Good quality recording"
REJECTED_NOTE = "Quality issues detected"

# Suggested confidence for a review when the reviewer does not set one
CONFIDENCE_RANGE = (80, 99)


class ReviewQueue:
    """Cursor over pending recordings with skip, wrap-around and history.

    Args:
        recordings: Pending recordings as dicts with at least an ``id`` key.
        reviewer_id: The reviewer the review payloads are attributed to.
        clock: Seconds source used to measure ``time_spent``.
        rng: Random source for the default confidence.
        reviews_completed: Reviews the reviewer has saved before this session.
        session_reviews: Reviews the reviewer has saved today.
    """

    def __init__(
        self,
        recordings: list[dict],
        reviewer_id: str,
        clock: Callable[[], float] = time.monotonic,
        rng: random.Random | None = None,
        reviews_completed: int = 0,
        session_reviews: int = 0,
    ) -> None:
        self._pending = list(recordings)
        self._index = 0
        self.reviewer_id = reviewer_id
        self._clock = clock
        self._rng = rng or random.Random()
        self.history: list[dict] = []
        self.reviews_completed = reviews_completed
        self.session_reviews = session_reviews
        self._started_at = clock()

    @property
    def current(self) -> dict | None:
        if not self._pending:
            return None
        return self._pending[self._index]

    @property
    def remaining(self) -> int:
        return len(self._pending)

    @property
    def position(self) -> int:
        """1-based position of the current item, or 0 when the queue is empty."""
        return self._index + 1 if self._pending else 0

    def _restart_timer(self) -> None:
        self._started_at = self._clock()

    def _drop_current(self) -> dict | None:
        if not self._pending:
            return None
        item = self._pending.pop(self._index)
        if self._index >= len(self._pending):
            self._index = 0
        self._restart_timer()
        return item

    def skip(self) -> dict | None:
        """Drop the current recording without reviewing it. Returns the new current."""
        self._drop_current()
        return self.current

    def advance(self) -> dict | None:
        """Move to the next recording, wrapping around, keeping the current one queued."""
        if len(self._pending) > 1:
            current = self.current
            if current is not None and all(h["id"] != current["id"] for h in self.history):
                self.history.append(current)
            self._index = (self._index + 1) % len(self._pending)
            self._restart_timer()
        return self.current

    def previous(self) -> dict | None:
        """Go back to the most recently left recording, re-queueing it if needed."""
        if not self.history or self.current is None:
            return self.current
        prior = self.history.pop()
        ids = [r["id"] for r in self._pending]
        if prior["id"] in ids:
            self._index = ids.index(prior["id"])
        else:
            self._pending.insert(self._index, prior)
        self._restart_timer()
        return self.current

    def elapsed(self) -> int:
        """Whole seconds spent on the current recording."""
        return max(int(self._clock() - self._started_at), 0)

    def build_review(
        self,
        decision: str,
        confidence: int | None = None,
        notes: str | None = None,
    ) -> dict:
        """Return the review payload for the current recording.

        Raises:
            LookupError: If the queue is empty.
        """
        current = self.current
        if current is None:
            raise LookupError("No recording to review")
        if confidence is None:
            confidence = self._rng.randint(*CONFIDENCE_RANGE)
        if notes is None:
            notes = APPROVED_NOTE if decision == "approved" else REJECTED_NOTE
        return {
            "recording_id": current["id"],
            "reviewer_id": self.reviewer_id,
            "decision": decision,
            "confidence": confidence,
            "time_spent": self.elapsed(),
            "notes": notes,
        }

    def mark_reviewed(self) -> dict | None:
        """Move the current recording to history after its review was saved."""
        item = self._drop_current()
        if item is not None:
            if all(h["id"] != item["id"] for h in self.history):
                self.history.append(item)
            self.reviews_completed += 1
            self.session_reviews += 1
        return self.current

    def complete(
        self,
        decision: str,
        confidence: int | None = None,
        notes: str | None = None,
    ) -> dict:
        """Build the review payload and move on in one step."""
        payload = self.build_review(decision, confidence, notes)
        self.mark_reviewed()
        return payload
