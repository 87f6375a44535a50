"""
CSV export of the admin users and recordings tables.

Rows are the already-filtered dicts the admin page displays, so a file
always has exactly one data row per visible row.
"""

import csv
import io
from collections.abc import Mapping, Sequence
from datetime import date, datetime
from typing import Any

NA = "N/A"

USER_COLUMNS = [
    "Name",
    "Email",
    "Role",
    "Status",
    "Join Date",
    "Profile Complete",
    "Age",
    "Gender",
    "Phone Number",
    "Location",
    "Educational Background",
    "Employment Status",
    "Language Dialect",
    "Languages",
    "Total Recordings",
    "Approved Recordings",
    "Rejected Recordings",
    "Total Reviews",
    "Approved Reviews",
    "Rejected Reviews",
    "Accuracy Rate",
]

RECORDING_COLUMNS = [
    "Contributor",
    "Contributor Email",
    "Sentence",
    "Duration (s)",
    "Status",
    "Reviewer",
    "Review Date",
    "Created Date",
    "Quality",
    "Audio URL",
]


def _date(value: str | datetime | None) -> str:
    """Render a timestamp (datetime or ISO string) as ``YYYY-MM-DD``."""
    if not value:
        return NA
    if isinstance(value, datetime):
        return value.date().isoformat()
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00")).date().isoformat()
    except ValueError:
        return str(value)


def _or_na(value: Any) -> Any:
    return value if value not in (None, "") else NA


def _render(header: list[str], rows: list[list[Any]]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(header)
    writer.writerows(rows)
    return buf.getvalue()


def export_users_csv(
    users: Sequence[Mapping[str, Any]],
    stats_by_id: Mapping[str, Mapping[str, Any]],
) -> str:
    """Return the users table as CSV text with per-user contribution stats."""
    rows = []
    for user in users:
        stats = stats_by_id.get(user["id"]) or {}
        languages = user.get("languages") or []
        accuracy = stats.get("accuracy_rate")
        rows.append(
            [
                _or_na(user.get("name")),
                user["email"],
                user.get("role"),
                user.get("status"),
                _date(user.get("created_at")),
                "Yes" if user.get("profile_complete") else "No",
                _or_na(user.get("age")),
                _or_na(user.get("gender")),
                _or_na(user.get("phone_number")),
                _or_na(user.get("location")),
                _or_na(user.get("educational_background")),
                _or_na(user.get("employment_status")),
                _or_na(user.get("language_dialect")),
                "; ".join(languages) if languages else NA,
                stats.get("total_recordings", 0),
                stats.get("approved_recordings", 0),
                stats.get("rejected_recordings", 0),
                stats.get("total_reviews", 0),
                stats.get("approved_reviews", 0),
                stats.get("rejected_reviews", 0),
                f"{accuracy:.1f}%" if accuracy is not None else NA,
            ]
        )
    return _render(USER_COLUMNS, rows)


def export_recordings_csv(
    recordings: Sequence[Mapping[str, Any]],
    users: Sequence[Mapping[str, Any]],
) -> str:
    """Return the recordings table as CSV text, resolving contributor and reviewer names."""
    by_id = {u["id"]: u for u in users}
    rows = []
    for rec in recordings:
        contributor = by_id.get(rec["user_id"]) or {}
        reviewer = by_id.get(rec.get("reviewed_by")) if rec.get("reviewed_by") else None
        if reviewer is not None:
            reviewer_label = reviewer.get("name") or reviewer.get("email")
        else:
            reviewer_label = "Not reviewed"
        rows.append(
            [
                _or_na(contributor.get("name")),
                _or_na(contributor.get("email")),
                rec["sentence"],
                f"{float(rec.get('duration') or 0):.1f}",
                rec.get("status"),
                reviewer_label,
                _date(rec.get("reviewed_at")),
                _date(rec.get("created_at")),
                _or_na(rec.get("quality")),
                "Yes" if rec.get("audio_url") else "No",
            ]
        )
    return _render(RECORDING_COLUMNS, rows)


def export_filename(kind: str, today: date) -> str:
    """Return ``<kind>_export_YYYY-MM-DD.csv``."""
    return f"{kind}_export_{today.isoformat()}.csv"
