"""
Pydantic v2 request / response models used across the API layer.

Users & auth, Recordings, Reviews, Sentences, Statistics, Corpus API.
"""

from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


class HealthResponse(BaseModel):
    """GET /health response."""

    status: str = "ok"
    version: str = "0.1.0"
    timestamp: datetime


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class UserRole(StrEnum):
    """What a user does in the collection workflow."""

    contributor = "contributor"
    reviewer = "reviewer"
    admin = "admin"


class UserStatus(StrEnum):
    """Account approval state. Only reviewers start out *pending*."""

    active = "active"
    pending = "pending"
    rejected = "rejected"


class RecordingStatus(StrEnum):
    """Validation state of a recording."""

    pending = "pending"
    approved = "approved"
    rejected = "rejected"


class RecordingQuality(StrEnum):
    good = "good"
    fair = "fair"
    poor = "poor"


class ReviewDecision(StrEnum):
    approved = "approved"
    rejected = "rejected"


class DifficultyLevel(StrEnum):
    basic = "basic"
    medium = "medium"
    advanced = "advanced"


# ---------------------------------------------------------------------------
# Users & auth
# ---------------------------------------------------------------------------


class UserResponse(BaseModel):
    """A user as seen by clients. The password never leaves the server."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    role: UserRole
    status: UserStatus
    profile_complete: bool = False
    name: str | None = None
    age: str | None = None
    gender: str | None = None
    languages: list[str] | None = None
    location: str | None = None
    constituency: str | None = None
    language_dialect: str | None = None
    educational_background: str | None = None
    employment_status: str | None = None
    phone_number: str | None = None
    is_active: bool = True
    created_at: datetime
    updated_at: datetime
    last_login_at: datetime | None = None


class SignupRequest(BaseModel):
    """POST /auth/signup request body."""

    email: str
    password: str
    role: UserRole = UserRole.contributor


class LoginRequest(BaseModel):
    """POST /auth/login and /auth/admin-login request body."""

    email: str
    password: str


class AuthResponse(BaseModel):
    """Result of a sign-in / sign-up: the session user and where to go next.

    ``user`` is ``None`` when the account was created but may not sign in yet
    (a new reviewer awaiting approval).
    """

    user: UserResponse | None = None
    redirect: str
    message: str = ""


class GuardRequest(BaseModel):
    """POST /auth/guard request body."""

    user_id: str | None = None
    page: str


class GuardResponse(BaseModel):
    allowed: bool
    redirect: str | None = None


class ProfileUpdate(BaseModel):
    """Demographic fields a user fills in on the profile setup page."""

    name: str | None = None
    age: str | None = None
    gender: str | None = None
    languages: list[str] | None = None
    location: str | None = None
    constituency: str | None = None
    language_dialect: str | None = None
    educational_background: str | None = None
    employment_status: str | None = None
    phone_number: str | None = None
    profile_complete: bool | None = None


class UserUpdate(ProfileUpdate):
    """PATCH /users/{id}: admin-side update of any non-credential field."""

    role: UserRole | None = None
    status: UserStatus | None = None
    is_active: bool | None = None


class DeleteUserResponse(BaseModel):
    user_id: str
    recordings_deleted: int = 0
    reviews_deleted: int = 0


# ---------------------------------------------------------------------------
# Recordings
# ---------------------------------------------------------------------------


class RecordingCreate(BaseModel):
    """POST /recordings request body.

    ``audio_url`` is a base64 ``data:`` URL; there is no object storage.
    """

    user_id: str
    sentence: str = Field(min_length=1)
    audio_url: str = Field(min_length=1)
    duration: float = Field(ge=0)
    status: RecordingStatus = RecordingStatus.pending
    quality: RecordingQuality | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class RecordingUpdate(BaseModel):
    status: RecordingStatus | None = None
    quality: RecordingQuality | None = None
    reviewed_by: str | None = None
    reviewed_at: datetime | None = None
    metadata: dict[str, Any] | None = None


class RecordingResponse(BaseModel):
    """Standard recording representation returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    sentence: str
    audio_url: str | None = None
    duration: float = 0.0
    status: RecordingStatus
    quality: RecordingQuality
    reviewed_by: str | None = None
    reviewed_at: datetime | None = None
    # The ORM attribute is ``meta`` because ``metadata`` is reserved by SQLAlchemy
    metadata: dict[str, Any] = Field(
        default_factory=dict, validation_alias=AliasChoices("meta", "metadata")
    )
    created_at: datetime
    updated_at: datetime


# ---------------------------------------------------------------------------
# Reviews
# ---------------------------------------------------------------------------


class ReviewCreate(BaseModel):
    """POST /reviews request body."""

    recording_id: str
    reviewer_id: str
    decision: ReviewDecision
    confidence: int = Field(default=90, ge=0, le=100)
    time_spent: int = Field(default=0, ge=0)
    notes: str | None = None


class ReviewResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    recording_id: str
    reviewer_id: str
    decision: ReviewDecision
    confidence: int
    time_spent: int
    notes: str | None = None
    created_at: datetime


# ---------------------------------------------------------------------------
# Sentences
# ---------------------------------------------------------------------------


class SentenceCreate(BaseModel):
    """A corpus sentence to store locally."""

    text: str = Field(min_length=1)
    mozilla_id: str | None = None
    language_code: str = "luo"
    source: str | None = None
    bucket: str | None = None
    hash: str | None = None
    version: int = 1
    taxonomy: dict[str, Any] = Field(default_factory=dict)
    difficulty_level: DifficultyLevel = DifficultyLevel.basic
    is_active: bool = True


class SentenceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    mozilla_id: str
    text: str
    language_code: str
    source: str | None = None
    clips_count: int = 0
    is_active: bool = True
    difficulty_level: DifficultyLevel
    word_count: int | None = None
    character_count: int | None = None
    created_at: datetime


class SentenceImportResult(BaseModel):
    created: int = 0
    skipped: int = 0


class SentenceStats(BaseModel):
    """Usage of one sentence across all recordings."""

    total_recordings: int = 0
    unique_contributors: int = 0


class CanRecordResponse(BaseModel):
    can_record: bool


# ---------------------------------------------------------------------------
# Statistics
# ---------------------------------------------------------------------------


class SystemStats(BaseModel):
    """Site-wide counters shown on the admin overview."""

    total_users: int = 0
    contributors: int = 0
    reviewers: int = 0
    pending_reviewers: int = 0
    total_recordings: int = 0
    pending_recordings: int = 0
    approved_recordings: int = 0
    rejected_recordings: int = 0
    total_reviews: int = 0
    active_users: int = 0
    average_recording_duration: float = 0.0
    average_review_time: float = 0.0
    total_recording_time: float = 0.0
    total_review_time: float = 0.0
    total_system_time: float = 0.0


class UserStats(BaseModel):
    """Per-user contribution and review counters."""

    user_id: str
    total_recordings: int = 0
    approved_recordings: int = 0
    rejected_recordings: int = 0
    pending_recordings: int = 0
    total_reviews: int = 0
    approved_reviews: int = 0
    rejected_reviews: int = 0
    average_review_time: float = 0.0
    accuracy_rate: float = 0.0
    streak_days: int = 0
    total_time_contributed: float = 0.0  # minutes
    last_activity_at: datetime | None = None


class RankedUser(BaseModel):
    """Leaderboard entry: a user plus their stats."""

    user: UserResponse
    stats: UserStats


class ActivityType(StrEnum):
    recording = "recording"
    review = "review"
    user_joined = "user_joined"


class ActivityItem(BaseModel):
    type: ActivityType
    user: UserResponse
    data: dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime


# ---------------------------------------------------------------------------
# Common Voice corpus
# ---------------------------------------------------------------------------


class CorpusSentence(BaseModel):
    """One sentence as returned by the Common Voice sentence API."""

    model_config = ConfigDict(extra="ignore")

    id: str = ""
    text: str
    language_code: str = ""
    source: str | None = None
    bucket: str | None = None
    hash: str | None = None
    version: int = 1
    clips_count: int = 0
    has_valid_clip: bool = False
    is_validated: bool = False
    taxonomy: dict[str, Any] = Field(default_factory=dict)


class CorpusSentencesResponse(BaseModel):
    count: int
    sentences: list[str] = Field(default_factory=list)
    error: str | None = None
