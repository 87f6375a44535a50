"""
Review REST endpoints.

Creating a review also stamps the recording with the decision, reviewer
and review time.
"""

from fastapi import APIRouter, Query

from src.core.models import ReviewCreate, ReviewResponse
from src.services.storage.database import get_session
from src.services.storage.repository import VoiceRepository

router = APIRouter(prefix="/reviews", tags=["reviews"])


@router.post("", response_model=ReviewResponse, status_code=201)
async def create_review(body: ReviewCreate):
    async with get_session() as session:
        review = await VoiceRepository(session).create_review(
            recording_id=body.recording_id,
            reviewer_id=body.reviewer_id,
            decision=body.decision,
            confidence=body.confidence,
            time_spent=body.time_spent,
            notes=body.notes,
        )
    return ReviewResponse.model_validate(review)


@router.get("", response_model=list[ReviewResponse])
async def list_reviews(
    reviewer_id: str | None = Query(None),
    recording_id: str | None = Query(None),
):
    """List reviews newest first, optionally for one reviewer or recording."""
    async with get_session() as session:
        repo = VoiceRepository(session)
        if reviewer_id is not None:
            reviews = await repo.get_reviews_by_reviewer(reviewer_id)
        elif recording_id is not None:
            reviews = await repo.get_reviews_by_recording(recording_id)
        else:
            reviews = await repo.get_all_reviews()
    if reviewer_id is not None and recording_id is not None:
        reviews = [r for r in reviews if r.recording_id == recording_id]
    return [ReviewResponse.model_validate(r) for r in reviews]
