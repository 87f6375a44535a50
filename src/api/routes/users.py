"""
User REST endpoints.

CRUD over the ``users`` table, reviewer approval, profile updates and
the per-user views (stats, recordings, reviews, open sentences).
"""

import logging

from fastapi import APIRouter, Query

from src.core.config import get_settings
from src.core.exceptions import InvalidRequestError, UserNotFoundError
from src.core.models import (
    DeleteUserResponse,
    ProfileUpdate,
    RecordingResponse,
    ReviewResponse,
    UserResponse,
    UserRole,
    UserStats,
    UserStatus,
    UserUpdate,
)
from src.services.auth import AuthService
from src.services.storage.database import get_session
from src.services.storage.repository import VoiceRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=list[UserResponse])
async def list_users(
    role: UserRole | None = Query(None),
    status: UserStatus | None = Query(None),
):
    """List users newest first, optionally filtered by role and status."""
    async with get_session() as session:
        repo = VoiceRepository(session)
        if role is not None:
            users = await repo.get_users_by_role(role)
        elif status is not None:
            users = await repo.get_users_by_status(status)
        else:
            users = await repo.get_all_users()
    if role is not None and status is not None:
        users = [u for u in users if u.status == status]
    return [UserResponse.model_validate(u) for u in users]


@router.get("/by-email", response_model=UserResponse)
async def get_user_by_email(email: str = Query(..., min_length=1)):
    async with get_session() as session:
        user = await VoiceRepository(session).get_user_by_email(email)
    if user is None:
        raise UserNotFoundError(email)
    return UserResponse.model_validate(user)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(user_id: str):
    async with get_session() as session:
        user = await VoiceRepository(session).get_user(user_id)
    return UserResponse.model_validate(user)


@router.patch("/{user_id}", response_model=UserResponse)
async def update_user(user_id: str, body: UserUpdate):
    """Admin-side update of any non-credential field."""
    fields = body.model_dump(exclude_unset=True)
    if not fields:
        raise InvalidRequestError("No fields to update")
    async with get_session() as session:
        user = await VoiceRepository(session).update_user(user_id, **fields)
    return UserResponse.model_validate(user)


@router.delete("/{user_id}", response_model=DeleteUserResponse)
async def delete_user(user_id: str):
    """Delete a user along with their recordings and reviews."""
    async with get_session() as session:
        counts = await VoiceRepository(session).delete_user(user_id)
    return DeleteUserResponse(user_id=user_id, **counts)


@router.patch("/{user_id}/profile", response_model=UserResponse)
async def update_profile(user_id: str, body: ProfileUpdate):
    settings = get_settings()
    async with get_session() as session:
        service = AuthService(
            VoiceRepository(session),
            admin_email=settings.admin_email,
            admin_password=settings.admin_password,
        )
        return await service.update_profile(user_id, body)


@router.post("/{user_id}/approve", response_model=UserResponse)
async def approve_reviewer(user_id: str):
    async with get_session() as session:
        user = await VoiceRepository(session).update_user(user_id, status="active", is_active=True)
    logger.info("Approved reviewer %s", user_id)
    return UserResponse.model_validate(user)


@router.post("/{user_id}/reject", response_model=UserResponse)
async def reject_reviewer(user_id: str):
    async with get_session() as session:
        user = await VoiceRepository(session).update_user(
            user_id, status="rejected", is_active=False
        )
    logger.info("Rejected reviewer %s", user_id)
    return UserResponse.model_validate(user)


@router.get("/{user_id}/stats", response_model=UserStats)
async def get_user_stats(user_id: str):
    async with get_session() as session:
        repo = VoiceRepository(session)
        await repo.get_user(user_id)
        stats = await repo.get_user_stats(user_id)
    return stats


@router.get("/{user_id}/recordings", response_model=list[RecordingResponse])
async def get_user_recordings(user_id: str):
    async with get_session() as session:
        recordings = await VoiceRepository(session).get_recordings_by_user(user_id)
    return [RecordingResponse.model_validate(r) for r in recordings]


@router.get("/{user_id}/reviews", response_model=list[ReviewResponse])
async def get_user_reviews(user_id: str):
    async with get_session() as session:
        reviews = await VoiceRepository(session).get_reviews_by_reviewer(user_id)
    return [ReviewResponse.model_validate(r) for r in reviews]


@router.get("/{user_id}/available-sentences", response_model=list[str])
async def get_available_sentences(user_id: str, language_code: str | None = Query(None)):
    """Sentences this user may still record."""
    language = language_code or get_settings().language_code
    async with get_session() as session:
        return await VoiceRepository(session).get_available_sentences_for_user(user_id, language)
