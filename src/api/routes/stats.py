"""
Dashboard statistics endpoints.
"""

from fastapi import APIRouter, Query

from src.core.models import ActivityItem, RankedUser, SystemStats, UserResponse, UserStats
from src.services.storage.database import get_session
from src.services.storage.repository import VoiceRepository

router = APIRouter(prefix="/stats", tags=["stats"])


def _ranked(pairs) -> list[RankedUser]:
    return [RankedUser(user=UserResponse.model_validate(u), stats=s) for u, s in pairs]


@router.get("/system", response_model=SystemStats)
async def system_stats():
    async with get_session() as session:
        return await VoiceRepository(session).get_system_stats()


@router.get("/users", response_model=list[UserStats])
async def all_user_stats():
    async with get_session() as session:
        return await VoiceRepository(session).get_all_user_stats()


@router.get("/top-contributors", response_model=list[RankedUser])
async def top_contributors(limit: int = Query(10, ge=1, le=100)):
    async with get_session() as session:
        pairs = await VoiceRepository(session).get_top_contributors(limit)
        return _ranked(pairs)


@router.get("/top-reviewers", response_model=list[RankedUser])
async def top_reviewers(limit: int = Query(10, ge=1, le=100)):
    async with get_session() as session:
        pairs = await VoiceRepository(session).get_top_reviewers(limit)
        return _ranked(pairs)


@router.get("/activity", response_model=list[ActivityItem])
async def recent_activity(limit: int = Query(20, ge=1, le=100)):
    """Latest recordings, reviews and sign-ups, newest first."""
    async with get_session() as session:
        items = await VoiceRepository(session).get_recent_activity(limit)
        return [
            ActivityItem(
                type=item["type"],
                user=UserResponse.model_validate(item["user"]),
                data=item["data"],
                timestamp=item["timestamp"],
            )
            for item in items
        ]
