"""
VoiceCollect exception hierarchy.

All application-specific exceptions inherit from VoiceCollectError,
enabling centralized error handling in the API middleware layer.
"""

from datetime import UTC, datetime


class VoiceCollectError(Exception):
    """Base exception for all VoiceCollect errors."""

    def __init__(
        self,
        detail: str = "An unexpected error occurred",
        code: str = "VOICECOLLECT_ERROR",
        status_code: int = 500,
    ) -> None:
        self.detail = detail
        self.code = code
        self.status_code = status_code
        self.timestamp = datetime.now(UTC).isoformat()
        super().__init__(detail)


class UserNotFoundError(VoiceCollectError):
    """Raised when a user ID or email does not exist."""

    def __init__(self, user_ref: str) -> None:
        super().__init__(
            detail=f"User not found: {user_ref}",
            code="USER_NOT_FOUND",
            status_code=404,
        )


class RecordingNotFoundError(VoiceCollectError):
    """Raised when a recording ID does not exist."""

    def __init__(self, recording_id: str) -> None:
        super().__init__(
            detail=f"Recording not found: {recording_id}",
            code="RECORDING_NOT_FOUND",
            status_code=404,
        )


class InvalidIdentifierError(VoiceCollectError):
    """Raised when an ID is not a well-formed UUID."""

    def __init__(self, what: str, value: object) -> None:
        super().__init__(
            detail=f"Invalid {what} provided: {value!r}",
            code="INVALID_ID",
            status_code=400,
        )


class InvalidRequestError(VoiceCollectError):
    """Raised for malformed input that passes schema validation."""

    def __init__(self, detail: str) -> None:
        super().__init__(detail=detail, code="INVALID_REQUEST", status_code=400)


class AuthenticationError(VoiceCollectError):
    """Raised when credentials do not match."""

    def __init__(self, detail: str = "Invalid email or password") -> None:
        super().__init__(detail=detail, code="AUTH_FAILED", status_code=401)


class AccountAccessError(VoiceCollectError):
    """Raised when an account exists but may not sign in (pending, rejected, inactive)."""

    def __init__(self, detail: str, code: str = "ACCOUNT_BLOCKED") -> None:
        super().__init__(detail=detail, code=code, status_code=403)


class DuplicateEmailError(VoiceCollectError):
    """Raised on signup with an email that is already registered."""

    def __init__(self) -> None:
        super().__init__(
            detail="An account with this email already exists",
            code="DUPLICATE_EMAIL",
            status_code=409,
        )


class SentenceUnavailableError(VoiceCollectError):
    """Raised when a user may not record a sentence (already recorded or at cap)."""

    def __init__(self, sentence: str) -> None:
        preview = sentence if len(sentence) <= 60 else sentence[:57] + "..."
        super().__init__(
            detail=f"Sentence is not available for recording: {preview}",
            code="SENTENCE_UNAVAILABLE",
            status_code=409,
        )


class AudioTooLargeError(VoiceCollectError):
    """Raised when an uploaded recording exceeds ``max_audio_bytes``."""

    def __init__(self, size: int, limit: int) -> None:
        super().__init__(
            detail=f"audio_url too large: {size} bytes (limit {limit})",
            code="AUDIO_TOO_LARGE",
            status_code=413,
        )


class AudioDecodeError(VoiceCollectError):
    """Raised when an audio data URL cannot be decoded."""

    def __init__(self, detail: str = "Audio data URL could not be decoded") -> None:
        super().__init__(detail=detail, code="AUDIO_DECODE_ERROR", status_code=400)


class CorpusAPIError(VoiceCollectError):
    """Raised when the Common Voice sentence API fails."""

    def __init__(self, detail: str = "request failed") -> None:
        super().__init__(
            detail=f"Common Voice API error: {detail}",
            code="CORPUS_API_ERROR",
            status_code=502,
        )
