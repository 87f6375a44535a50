"""
Sentence corpus endpoints: the local ``sentences`` table and the
allocation checks that run over it.
"""

from fastapi import APIRouter, Query

from src.core.config import get_settings
from src.core.models import (
    CanRecordResponse,
    SentenceCreate,
    SentenceImportResult,
    SentenceResponse,
    SentenceStats,
)
from src.services.storage.database import get_session
from src.services.storage.repository import VoiceRepository

router = APIRouter(prefix="/sentences", tags=["sentences"])


@router.get("", response_model=list[SentenceResponse])
async def list_sentences(
    language_code: str | None = Query(None),
    active_only: bool = Query(True),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
):
    language = language_code or get_settings().language_code
    async with get_session() as session:
        sentences = await VoiceRepository(session).list_sentences(
            language_code=language, active_only=active_only, limit=limit, offset=offset
        )
    return [SentenceResponse.model_validate(s) for s in sentences]


@router.post("", response_model=SentenceResponse, status_code=201)
async def create_sentence(body: SentenceCreate):
    async with get_session() as session:
        sentence = await VoiceRepository(session).create_sentence(**body.model_dump())
    return SentenceResponse.model_validate(sentence)


@router.post("/bulk", response_model=SentenceImportResult)
async def bulk_create_sentences(body: list[SentenceCreate]):
    """Insert many sentences, skipping ``mozilla_id`` values already stored."""
    async with get_session() as session:
        result = await VoiceRepository(session).import_sentences(
            [item.model_dump() for item in body]
        )
    return SentenceImportResult(**result)


@router.get("/stats", response_model=SentenceStats)
async def sentence_stats(sentence: str = Query(..., min_length=1)):
    """How many recordings and distinct contributors a sentence has."""
    async with get_session() as session:
        return await VoiceRepository(session).get_sentence_stats(sentence)


@router.get("/can-record", response_model=CanRecordResponse)
async def can_record(user_id: str = Query(...), sentence: str = Query(..., min_length=1)):
    async with get_session() as session:
        allowed = await VoiceRepository(session).can_user_record_sentence(user_id, sentence)
    return CanRecordResponse(can_record=allowed)
