"""
Recording REST endpoints.

Creation enforces the sentence allocation rule (409 when the user may not
record the sentence). Audio travels as a base64 data URL in JSON, or as
a multipart upload that is encoded into one here.
"""

import logging

from fastapi import APIRouter, File, Form, Header, Query, UploadFile
from fastapi.responses import Response

from src.core.config import get_settings
from src.core.exceptions import (
    AudioTooLargeError,
    InvalidIdentifierError,
    SentenceUnavailableError,
)
from src.core.models import RecordingCreate, RecordingResponse, RecordingStatus, RecordingUpdate
from src.core.utils import is_valid_uuid
from src.services.audio import (
    classify_quality,
    decode_data_url,
    detect_client,
    encode_data_url,
    is_silent,
    probe_duration,
    waveform_peaks,
)
from src.services.storage.database import get_session
from src.services.storage.repository import VoiceRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/recordings", tags=["recordings"])


def _check_size(size: int) -> None:
    limit = get_settings().max_audio_bytes
    if size > limit:
        raise AudioTooLargeError(size, limit)


async def _create(repo: VoiceRepository, body: RecordingCreate):
    if not is_valid_uuid(body.user_id):
        raise InvalidIdentifierError("user ID", body.user_id)
    if not await repo.can_user_record_sentence(body.user_id, body.sentence):
        raise SentenceUnavailableError(body.sentence)
    return await repo.create_recording(
        user_id=body.user_id,
        sentence=body.sentence,
        audio_url=body.audio_url,
        duration=body.duration,
        status=body.status,
        quality=body.quality,
        metadata=body.metadata,
    )


@router.post("", response_model=RecordingResponse, status_code=201)
async def create_recording(body: RecordingCreate):
    """Store a recording whose audio is already a base64 data URL."""
    # Base64 inflates the payload by 4/3
    _check_size(len(body.audio_url) * 3 // 4)
    async with get_session() as session:
        recording = await _create(VoiceRepository(session), body)
    return RecordingResponse.model_validate(recording)


@router.post("/upload", response_model=RecordingResponse, status_code=201)
async def upload_recording(
    user_id: str = Form(...),
    sentence: str = Form(..., min_length=1),
    duration: float | None = Form(None, ge=0),
    audio: UploadFile = File(..., description="Recorded clip (webm, ogg, mp4 or wav)"),
    user_agent: str | None = Header(None),
):
    """Store an uploaded clip, encoding it as a data URL.

    Duration is read from the file when the client does not send one.
    A silent take is stored with quality *poor*.
    """
    audio_bytes = await audio.read()
    _check_size(len(audio_bytes))
    mime_type = audio.content_type or "audio/wav"

    if duration is None:
        duration = probe_duration(audio_bytes)
    quality = "poor" if is_silent(audio_bytes) else classify_quality(duration)
    metadata = {**detect_client(user_agent), "mimeType": mime_type, "size": len(audio_bytes)}

    logger.info("Upload from %s: %d bytes (%s, %.1fs)", user_id, len(audio_bytes), mime_type, duration)
    body = RecordingCreate(
        user_id=user_id,
        sentence=sentence,
        audio_url=encode_data_url(audio_bytes, mime_type),
        duration=duration,
        quality=quality,
        metadata=metadata,
    )
    async with get_session() as session:
        recording = await _create(VoiceRepository(session), body)
    return RecordingResponse.model_validate(recording)


@router.get("", response_model=list[RecordingResponse])
async def list_recordings(
    status: RecordingStatus | None = Query(None),
    user_id: str | None = Query(None),
    reviewer_id: str | None = Query(None),
    include_audio: bool = Query(True),
):
    """List recordings newest first, filtered by status, contributor or reviewer."""
    async with get_session() as session:
        repo = VoiceRepository(session)
        if user_id is not None:
            recordings = await repo.get_recordings_by_user(user_id)
        elif reviewer_id is not None:
            recordings = await repo.get_recordings_by_reviewer(reviewer_id)
        elif status is not None:
            recordings = await repo.get_recordings_by_status(status)
        else:
            recordings = await repo.get_all_recordings()
    if status is not None and (user_id is not None or reviewer_id is not None):
        recordings = [r for r in recordings if r.status == status]

    responses = [RecordingResponse.model_validate(r) for r in recordings]
    if not include_audio:
        for resp in responses:
            resp.audio_url = None
    return responses


@router.get("/{recording_id}", response_model=RecordingResponse)
async def get_recording(recording_id: str):
    async with get_session() as session:
        recording = await VoiceRepository(session).get_recording(recording_id)
    return RecordingResponse.model_validate(recording)


@router.patch("/{recording_id}", response_model=RecordingResponse)
async def update_recording(recording_id: str, body: RecordingUpdate):
    async with get_session() as session:
        recording = await VoiceRepository(session).update_recording(
            recording_id, **body.model_dump(exclude_unset=True)
        )
    return RecordingResponse.model_validate(recording)


@router.get("/{recording_id}/audio")
async def get_recording_audio(recording_id: str):
    """Serve the decoded audio bytes with their original MIME type."""
    async with get_session() as session:
        recording = await VoiceRepository(session).get_recording(recording_id)
    audio_bytes, mime_type = decode_data_url(recording.audio_url)
    return Response(content=audio_bytes, media_type=mime_type.split(";")[0])


@router.get("/{recording_id}/waveform", response_model=list[float])
async def get_recording_waveform(recording_id: str, bins: int = Query(50, ge=1, le=500)):
    """Normalized peak amplitudes for drawing the waveform."""
    async with get_session() as session:
        recording = await VoiceRepository(session).get_recording(recording_id)
    audio_bytes, _ = decode_data_url(recording.audio_url)
    return waveform_peaks(audio_bytes, bins)
