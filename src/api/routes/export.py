"""
CSV export endpoints.

Both exports accept the admin table filters, so the file holds exactly
the rows the admin is looking at.
"""

from datetime import UTC, datetime

from fastapi import APIRouter, Query
from fastapi.responses import Response

from src.core.models import RecordingResponse, UserResponse
from src.services.admin import ALL, AdminSnapshot
from src.services.export import export_filename, export_recordings_csv, export_users_csv
from src.services.storage.database import get_session
from src.services.storage.repository import VoiceRepository

router = APIRouter(prefix="/export", tags=["export"])


def _csv_response(content: str, kind: str, rows: int) -> Response:
    filename = export_filename(kind, datetime.now(UTC).date())
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"',
            "X-Row-Count": str(rows),
        },
    )


@router.get("/users.csv")
async def export_users(
    search: str = Query(""),
    role: str = Query(ALL),
    status: str = Query(ALL),
):
    async with get_session() as session:
        repo = VoiceRepository(session)
        users = [UserResponse.model_validate(u).model_dump(mode="json") for u in await repo.get_all_users()]
        stats = [s.model_dump(mode="json") for s in await repo.get_all_user_stats()]

    snapshot = AdminSnapshot(users=users, user_stats=stats)
    rows = snapshot.filter_users(search=search, role=role, status=status)
    return _csv_response(export_users_csv(rows, snapshot.stats_by_id()), "users", len(rows))


@router.get("/recordings.csv")
async def export_recordings(
    search: str = Query(""),
    status: str = Query(ALL),
):
    async with get_session() as session:
        repo = VoiceRepository(session)
        users = [UserResponse.model_validate(u).model_dump(mode="json") for u in await repo.get_all_users()]
        recordings = [
            RecordingResponse.model_validate(r).model_dump(mode="json")
            for r in await repo.get_all_recordings()
        ]

    snapshot = AdminSnapshot(users=users, recordings=recordings)
    rows = snapshot.filter_recordings(search=search, status=status)
    return _csv_response(export_recordings_csv(rows, users), "recordings", len(rows))
