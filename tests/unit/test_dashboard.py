"""Tests for the role-specific dashboard figures."""

from datetime import date

from src.services.dashboard import DAILY_TARGETS, DayActivity, summary_cards, weekly_activity

TODAY = date(2024, 5, 10)  # a Friday


class TestWeeklyActivity:
    def test_contributor_counts_own_recordings(self) -> None:
        """Only the contributor's own recordings are counted, oldest day first."""
        recordings = [
            {"user_id": "me", "created_at": "2024-05-10T09:00:00"},
            {"user_id": "me", "created_at": "2024-05-10T10:00:00"},
            {"user_id": "me", "created_at": "2024-05-08T10:00:00+00:00"},
            {"user_id": "other", "created_at": "2024-05-10T10:00:00"},
            {"user_id": "me", "created_at": "2024-05-01T10:00:00"},
        ]
        days = weekly_activity("contributor", "me", recordings, [], TODAY)

        assert [d.day for d in days][0] == date(2024, 5, 4)
        assert days[-1].day == TODAY
        assert [d.contributions for d in days] == [0, 0, 0, 0, 1, 0, 2]
        assert all(d.target == DAILY_TARGETS["contributor"] for d in days)

    def test_trend(self) -> None:
        """A day trends up when it matches or beats the day before."""
        recordings = [{"user_id": "me", "created_at": "2024-05-08T10:00:00"}]
        days = weekly_activity("contributor", "me", recordings, [], TODAY)
        assert [d.trend for d in days] == ["up", "up", "up", "up", "up", "down", "up"]

    def test_reviewer_counts_reviews(self) -> None:
        reviews = [
            {"reviewer_id": "me", "created_at": "2024-05-09T10:00:00"},
            {"reviewer_id": "x", "created_at": "2024-05-09T10:00:00"},
        ]
        days = weekly_activity("reviewer", "me", [], reviews, TODAY)
        assert sum(d.contributions for d in days) == 1

    def test_admin_counts_everything(self) -> None:
        recordings = [{"user_id": "a", "created_at": "2024-05-10T09:00:00"}]
        reviews = [{"reviewer_id": "b", "created_at": "2024-05-10T09:30:00"}]
        days = weekly_activity("admin", "admin-id", recordings, reviews, TODAY)
        assert days[-1].contributions == 2
        assert days[-1].target == 15


class TestDayActivity:
    def test_label_and_percentage(self) -> None:
        day = DayActivity(day=TODAY, contributions=5, target=20, trend="up")
        assert day.label == "Fri"
        assert day.percentage == 25

    def test_zero_target(self) -> None:
        assert DayActivity(day=TODAY, contributions=5, target=0, trend="up").percentage == 0


class TestSummaryCards:
    def test_contributor(self) -> None:
        stats = {"total_recordings": 12, "approved_recordings": 9, "rejected_recordings": 1, "total_time_contributed": 1.5}
        cards = summary_cards("contributor", stats, {})
        assert [c.value for c in cards] == ["12", "9", "1", "0h 1m 30s"]

    def test_reviewer(self) -> None:
        """Review time is the average per review times the number of reviews."""
        stats = {
            "approved_reviews": 6,
            "rejected_reviews": 4,
            "total_reviews": 10,
            "average_review_time": 36.0,
            "accuracy_rate": 72.9,
            "streak_days": 3,
        }
        cards = summary_cards("reviewer", stats, {})
        assert cards[0].value == "6"
        assert cards[2].caption == "72% accuracy · 3 day streak"
        assert cards[3].value == "0h 6m 0s"

    def test_admin(self) -> None:
        system = {"total_users": 40, "pending_reviewers": 2, "total_recordings": 300, "total_system_time": 3725.0}
        cards = summary_cards("admin", None, system)
        assert [c.title for c in cards] == ["Total Users", "Pending Reviewers", "Total Recordings", "System Time"]
        assert cards[3].value == "1h 2m 5s"

    def test_missing_stats(self) -> None:
        cards = summary_cards("contributor", None, {})
        assert cards[3].value == "0h 0m 0s"
