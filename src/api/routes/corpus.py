"""
Common Voice corpus endpoints: browse remote sentences and import them
into the local ``sentences`` table.
"""

import logging

from fastapi import APIRouter, Query

from src.core.config import get_settings
from src.core.exceptions import CorpusAPIError
from src.core.models import CorpusSentencesResponse, SentenceImportResult
from src.core.utils import clean_error_message
from src.services.corpus import CommonVoiceClient
from src.services.storage.database import get_session
from src.services.storage.repository import VoiceRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/corpus", tags=["corpus"])


@router.get("/sentences", response_model=CorpusSentencesResponse)
async def list_corpus_sentences(language_code: str | None = Query(None)):
    """Fetch every remote sentence for the language.

    A failure is reported in the ``error`` field rather than as an HTTP
    error, so the admin page can show it next to an empty list.
    """
    language = language_code or get_settings().language_code
    try:
        async with CommonVoiceClient() as client:
            sentences = await client.fetch_all_sentences(language)
    except CorpusAPIError as exc:
        logger.warning("Failed to load statements: %s", exc.detail)
        return CorpusSentencesResponse(count=0, error=clean_error_message(exc.detail))
    texts = [s.text for s in sentences]
    return CorpusSentencesResponse(count=len(texts), sentences=texts)


@router.post("/import", response_model=SentenceImportResult)
async def import_corpus(language_code: str | None = Query(None)):
    """Fetch remote sentences and store the ones not already imported."""
    language = language_code or get_settings().language_code
    async with CommonVoiceClient() as client:
        sentences = await client.fetch_all_sentences(language)

    items = [
        {
            "text": s.text,
            "mozilla_id": s.id or None,
            "language_code": s.language_code or language,
            "source": s.source,
            "bucket": s.bucket,
            "hash": s.hash,
            "version": s.version,
            "taxonomy": s.taxonomy,
            "clips_count": s.clips_count,
            "has_valid_clip": s.has_valid_clip,
            "is_validated": s.is_validated,
        }
        for s in sentences
    ]
    async with get_session() as session:
        result = await VoiceRepository(session).import_sentences(items)
    return SentenceImportResult(**result)
