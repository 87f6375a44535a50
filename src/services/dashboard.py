"""
Role-specific dashboard figures.

Contributors see their recordings, reviewers their reviews, and admins
the whole system. The seven-day activity chart counts the same things.
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta

from src.core.utils import format_duration, format_minutes

# Contributions per day that fill a bar to 100%
DAILY_TARGETS = {"contributor": 10, "reviewer": 20, "admin": 15}


@dataclass
class DayActivity:
    day: date
    contributions: int
    target: int
    trend: str  # "up" or "down" compared with the day before

    @property
    def label(self) -> str:
        return self.day.strftime("%a")

    @property
    def percentage(self) -> int:
        return round(self.contributions / self.target * 100) if self.target else 0


@dataclass
class Card:
    title: str
    value: str
    caption: str = ""


def _day(value) -> date | None:
    if value is None:
        return None
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    return value.date() if isinstance(value, datetime) else value


def _counts_by_day(role: str, user_id: str, recordings: list[dict], reviews: list[dict]) -> dict[date, int]:
    if role == "contributor":
        items = [r["created_at"] for r in recordings if r["user_id"] == user_id]
    elif role == "reviewer":
        items = [r["created_at"] for r in reviews if r["reviewer_id"] == user_id]
    else:
        items = [r["created_at"] for r in recordings] + [r["created_at"] for r in reviews]

    counts: dict[date, int] = {}
    for created in items:
        day = _day(created)
        if day is not None:
            counts[day] = counts.get(day, 0) + 1
    return counts


def weekly_activity(
    role: str,
    user_id: str,
    recordings: list[dict],
    reviews: list[dict],
    today: date,
) -> list[DayActivity]:
    """Contributions for each of the last seven days, oldest first."""
    counts = _counts_by_day(role, user_id, recordings, reviews)
    target = DAILY_TARGETS.get(role, DAILY_TARGETS["admin"])
    days = []
    for offset in range(6, -1, -1):
        day = today - timedelta(days=offset)
        contributions = counts.get(day, 0)
        if offset == 6:
            trend = "up"
        else:
            trend = "up" if contributions >= counts.get(day - timedelta(days=1), 0) else "down"
        days.append(DayActivity(day=day, contributions=contributions, target=target, trend=trend))
    return days


def summary_cards(role: str, user_stats: dict | None, system_stats: dict) -> list[Card]:
    """The four headline cards for a user's dashboard."""
    if role == "contributor":
        s = user_stats or {}
        return [
            Card("Recordings Submitted", str(s.get("total_recordings", 0))),
            Card("Recordings Approved", str(s.get("approved_recordings", 0))),
            Card("Recordings Rejected", str(s.get("rejected_recordings", 0))),
            Card("Total Time", format_minutes(s.get("total_time_contributed", 0.0))),
        ]
    if role == "reviewer":
        s = user_stats or {}
        review_minutes = s.get("average_review_time", 0.0) * s.get("total_reviews", 0) / 60
        return [
            Card("Recordings Accepted", str(s.get("approved_reviews", 0))),
            Card("Recordings Rejected", str(s.get("rejected_reviews", 0))),
            Card(
                "Total Reviews",
                str(s.get("total_reviews", 0)),
                f"{int(s.get('accuracy_rate', 0))}% accuracy · {s.get('streak_days', 0)} day streak",
            ),
            Card("Total Time Reviewed", format_minutes(review_minutes)),
        ]
    return [
        Card("Total Users", str(system_stats.get("total_users", 0))),
        Card("Pending Reviewers", str(system_stats.get("pending_reviewers", 0))),
        Card("Total Recordings", str(system_stats.get("total_recordings", 0))),
        Card("System Time", format_duration(system_stats.get("total_system_time", 0.0))),
    ]
