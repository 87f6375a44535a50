"""
Sentence prompts for one contributor session on the speak page.

Sentences come from the user's available list; after a successful
submission the recorded sentence leaves the pool, since the same
contributor may not record it again.
"""

import random
from datetime import date, datetime

from src.services.allocation import pick_next_sentence


class SentenceQueue:
    """Current prompt plus back-history over the contributor's open sentences.

    Args:
        available: Sentences the contributor may still record.
        total_recordings: Recordings the contributor has made so far.
        today_recordings: Recordings the contributor has made today.
        rng: Random source for choosing the next prompt.
    """

    def __init__(
        self,
        available: list[str],
        total_recordings: int = 0,
        today_recordings: int = 0,
        rng: random.Random | None = None,
    ) -> None:
        self.available = list(available)
        self.history: list[str] = []
        self.current: str | None = self.available[0] if self.available else None
        self.total_recordings = total_recordings
        self.session_recordings = today_recordings
        self.submitted = 0
        self._rng = rng or random.Random()

    @property
    def can_go_back(self) -> bool:
        return bool(self.history)

    def _move_on(self) -> str | None:
        if self.current and self.current not in self.history:
            self.history.append(self.current)
        self.current = pick_next_sentence(self.available, self.current, self._rng)
        return self.current

    def next(self) -> str | None:
        """Show another random sentence."""
        return self._move_on()

    def skip(self) -> str | None:
        """Same as ``next``; skipped sentences stay in the pool."""
        return self._move_on()

    def previous(self) -> str | None:
        """Return to the sentence shown before the current one."""
        if not self.history:
            return self.current
        self.current = self.history.pop()
        return self.current

    def mark_recorded(self) -> str | None:
        """Retire the current sentence after its recording was saved and move on."""
        recorded = self.current
        if recorded is None:
            return None
        self.available = [s for s in self.available if s != recorded]
        self.history = [s for s in self.history if s != recorded]
        self.submitted += 1
        self.total_recordings += 1
        self.session_recordings += 1
        self.current = pick_next_sentence(self.available, recorded, self._rng)
        return self.current


def count_today(recordings: list[dict], today: date) -> int:
    """Number of *recordings* whose ``created_at`` falls on *today*."""
    count = 0
    for rec in recordings:
        created = rec.get("created_at")
        if isinstance(created, str):
            created = datetime.fromisoformat(created)
        if created is not None and created.date() == today:
            count += 1
    return count
