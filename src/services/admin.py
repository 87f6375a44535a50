"""
Admin dashboard table state.

The admin page fetches users, recordings, reviews and stats wholesale and
then filters, paginates and patches that snapshot locally after each
action, so the tables update without another round of fetches.
"""

import math
from dataclasses import dataclass, field
from typing import Any

ALL = "all"


@dataclass
class Page:
    """One page of a filtered table."""

    items: list
    page: int
    total_pages: int
    total: int


def paginate(items: list, page: int = 1, per_page: int = 10) -> Page:
    """Slice *items* to 1-based *page*, clamping the page into range."""
    total = len(items)
    total_pages = math.ceil(total / per_page) if per_page > 0 else 0
    page = min(max(page, 1), max(total_pages, 1))
    start = (page - 1) * per_page
    return Page(items=items[start : start + per_page], page=page, total_pages=total_pages, total=total)


def _contains(value: str | None, term: str) -> bool:
    return bool(value) and term in value.lower()


def _dec(stats: dict, key: str, by: int = 1) -> None:
    stats[key] = max(stats.get(key, 0) - by, 0)


@dataclass
class AdminSnapshot:
    """Users, recordings, reviews and stats as last fetched by the admin page."""

    users: list[dict[str, Any]] = field(default_factory=list)
    recordings: list[dict[str, Any]] = field(default_factory=list)
    reviews: list[dict[str, Any]] = field(default_factory=list)
    user_stats: list[dict[str, Any]] = field(default_factory=list)
    system_stats: dict[str, Any] = field(default_factory=dict)

    def user(self, user_id: str) -> dict[str, Any] | None:
        return next((u for u in self.users if u["id"] == user_id), None)

    def users_by_id(self) -> dict[str, dict[str, Any]]:
        return {u["id"]: u for u in self.users}

    def stats_by_id(self) -> dict[str, dict[str, Any]]:
        return {s["user_id"]: s for s in self.user_stats}

    def stats_for(self, user_id: str) -> dict[str, Any] | None:
        return self.stats_by_id().get(user_id)

    def recordings_for(self, user_id: str) -> list[dict[str, Any]]:
        return [r for r in self.recordings if r["user_id"] == user_id]

    def reviews_for(self, reviewer_id: str) -> list[dict[str, Any]]:
        return [r for r in self.reviews if r["reviewer_id"] == reviewer_id]

    # ------------------------------------------------------------------
    # Filters
    # ------------------------------------------------------------------

    def filter_users(self, search: str = "", role: str = ALL, status: str = ALL) -> list[dict[str, Any]]:
        """Users matching *search* (name or email) and the role and status filters."""
        term = search.strip().lower()
        return [
            u
            for u in self.users
            if (not term or _contains(u.get("name"), term) or _contains(u.get("email"), term))
            and (role == ALL or u.get("role") == role)
            and (status == ALL or u.get("status") == status)
        ]

    def filter_recordings(self, search: str = "", status: str = ALL) -> list[dict[str, Any]]:
        """Recordings matching *status* and *search*.

        ``status="reviewed"`` matches both approved and rejected recordings.
        The search looks at the sentence and at the contributor's name and email.
        """
        term = search.strip().lower()
        users = self.users_by_id()

        def status_ok(rec: dict) -> bool:
            if status == ALL:
                return True
            if status == "reviewed":
                return rec.get("status") in ("approved", "rejected")
            return rec.get("status") == status

        def search_ok(rec: dict) -> bool:
            if not term:
                return True
            owner = users.get(rec["user_id"], {})
            return (
                _contains(rec.get("sentence"), term)
                or _contains(owner.get("name"), term)
                or _contains(owner.get("email"), term)
            )

        return [r for r in self.recordings if status_ok(r) and search_ok(r)]

    # ------------------------------------------------------------------
    # Local updates after admin actions
    # ------------------------------------------------------------------

    def approve_reviewer(self, user_id: str) -> dict[str, Any]:
        """Mark a reviewer active and move them out of the pending count."""
        user = self.user(user_id)
        if user is None:
            raise KeyError(user_id)
        stats = self.system_stats
        if user.get("status") == "pending":
            _dec(stats, "pending_reviewers")
        if user.get("role") == "reviewer" and user.get("status") != "active":
            stats["reviewers"] = stats.get("reviewers", 0) + 1
        if not user.get("is_active"):
            stats["active_users"] = stats.get("active_users", 0) + 1
        user.update(status="active", is_active=True)
        return user

    def reject_reviewer(self, user_id: str) -> dict[str, Any]:
        """Mark a reviewer rejected and deactivated."""
        user = self.user(user_id)
        if user is None:
            raise KeyError(user_id)
        stats = self.system_stats
        if user.get("status") == "pending":
            _dec(stats, "pending_reviewers")
        elif user.get("role") == "reviewer" and user.get("status") == "active":
            _dec(stats, "reviewers")
        if user.get("is_active"):
            _dec(stats, "active_users")
        user.update(status="rejected", is_active=False)
        return user

    def remove_user(self, user_id: str) -> dict[str, Any]:
        """Drop a user together with their recordings and authored reviews.

        Returns the removed user.
        """
        user = self.user(user_id)
        if user is None:
            raise KeyError(user_id)

        stats = self.system_stats
        _dec(stats, "total_users")
        if user.get("role") == "contributor":
            _dec(stats, "contributors")
        elif user.get("role") == "reviewer":
            if user.get("status") == "active":
                _dec(stats, "reviewers")
            elif user.get("status") == "pending":
                _dec(stats, "pending_reviewers")
        if user.get("is_active"):
            _dec(stats, "active_users")

        own_recordings = self.recordings_for(user_id)
        removed_ids = {r["id"] for r in own_recordings}
        for rec in own_recordings:
            _dec(stats, "total_recordings")
            if rec.get("status") in ("pending", "approved", "rejected"):
                _dec(stats, f"{rec['status']}_recordings")

        kept_reviews = [
            r
            for r in self.reviews
            if r["reviewer_id"] != user_id and r["recording_id"] not in removed_ids
        ]
        _dec(stats, "total_reviews", len(self.reviews) - len(kept_reviews))

        self.users = [u for u in self.users if u["id"] != user_id]
        self.recordings = [r for r in self.recordings if r["user_id"] != user_id]
        self.reviews = kept_reviews
        self.user_stats = [s for s in self.user_stats if s["user_id"] != user_id]
        return user
