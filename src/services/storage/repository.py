"""
CRUD repository for all VoiceCollect tables.

``VoiceRepository`` receives an ``AsyncSession`` and provides all
data-access methods.  It calls ``flush()`` rather than ``commit()`` so
that transaction boundaries are controlled by the caller (typically
:func:`get_session`).
"""

import logging
from collections.abc import Iterable
from datetime import UTC, datetime

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config import get_settings
from src.core.exceptions import (
    InvalidIdentifierError,
    InvalidRequestError,
    RecordingNotFoundError,
    UserNotFoundError,
)
from src.core.models import ActivityType, SentenceStats, SystemStats, UserStats
from src.core.utils import is_valid_uuid, normalize_email
from src.services.allocation import (
    build_contributor_map,
    calculate_streak_days,
    can_record,
    filter_available_sentences,
)
from src.services.audio import classify_quality
from src.services.storage.models_db import Recording, Review, Sentence, User

logger = logging.getLogger(__name__)

# Columns that ``update_user`` is allowed to touch
_USER_FIELDS = {
    "name",
    "age",
    "gender",
    "languages",
    "location",
    "constituency",
    "language_dialect",
    "educational_background",
    "employment_status",
    "phone_number",
    "profile_complete",
    "role",
    "status",
    "is_active",
    "last_login_at",
}

_RECORDING_FIELDS = {"status", "quality", "reviewed_by", "reviewed_at", "duration", "audio_url", "meta"}

# A review with confidence above this counts toward the accuracy rate
_ACCURATE_CONFIDENCE = 80


def _naive(dt: datetime) -> datetime:
    # SQLite returns naive datetimes; strip tzinfo for safe comparison
    return dt.replace(tzinfo=None)


def _build_user_stats(
    user_id: str,
    recordings: list[Recording],
    reviews: list[Review],
    now: datetime,
) -> UserStats:
    """Aggregate one user's recordings and authored reviews into :class:`UserStats`."""
    total_reviews = len(reviews)
    review_time = sum(r.time_spent or 0 for r in reviews)
    accurate = sum(1 for r in reviews if (r.confidence or 0) > _ACCURATE_CONFIDENCE)
    activity = [r.created_at for r in recordings] + [r.created_at for r in reviews]

    return UserStats(
        user_id=user_id,
        total_recordings=len(recordings),
        approved_recordings=sum(1 for r in recordings if r.status == "approved"),
        rejected_recordings=sum(1 for r in recordings if r.status == "rejected"),
        pending_recordings=sum(1 for r in recordings if r.status == "pending"),
        total_reviews=total_reviews,
        approved_reviews=sum(1 for r in reviews if r.decision == "approved"),
        rejected_reviews=sum(1 for r in reviews if r.decision == "rejected"),
        average_review_time=review_time / total_reviews if total_reviews else 0.0,
        accuracy_rate=accurate / total_reviews * 100 if total_reviews else 0.0,
        streak_days=calculate_streak_days((r.created_at for r in recordings), now.date()),
        total_time_contributed=sum(r.duration or 0.0 for r in recordings) / 60,
        last_activity_at=max(activity, key=_naive) if activity else None,
    )


class VoiceRepository:
    """Data-access layer for the VoiceCollect schema.

    All methods use ``flush()`` instead of ``commit()`` so transaction
    boundaries are controlled by the caller (typically ``get_session()``
    context manager which commits on clean exit).

    Args:
        session: An active SQLAlchemy ``AsyncSession``.
        max_contributors: Distinct contributors after which a sentence
            is no longer offered for recording (falls back to settings).
    """

    def __init__(
        self,
        session: AsyncSession,
        max_contributors: int | None = None,
    ) -> None:
        self._session = session
        self._max_contributors = max_contributors or get_settings().max_contributors_per_sentence

    async def _scalars(self, stmt) -> list:
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    async def create_user(
        self,
        email: str,
        password: str,
        role: str,
        status: str | None = None,
        profile_complete: bool = False,
        name: str | None = None,
        is_active: bool = True,
    ) -> User:
        """Create and return a user.

        Reviewers start out *pending* unless *status* says otherwise;
        everyone else starts *active*.
        """
        if status is None:
            status = "pending" if role == "reviewer" else "active"
        user = User(
            email=normalize_email(email),
            password=password,
            role=role,
            status=status,
            profile_complete=profile_complete,
            name=name,
            is_active=is_active,
        )
        self._session.add(user)
        await self._session.flush()
        logger.info("Created %s user %s (status=%s)", role, user.id, status)
        return user

    async def get_user_by_email(self, email: str) -> User | None:
        """Return the user with *email* (case-insensitive), or ``None``."""
        if not email or not email.strip():
            raise InvalidRequestError("Email is required")
        stmt = select(User).where(User.email == normalize_email(email))
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_user_by_id(self, user_id: str) -> User | None:
        """Return a user by ID, or ``None`` for a missing row or malformed ID."""
        if not is_valid_uuid(user_id):
            logger.warning("Invalid user ID provided: %r", user_id)
            return None
        return await self._session.get(User, user_id)

    async def get_user(self, user_id: str) -> User:
        """Return a user by ID or raise :class:`UserNotFoundError`."""
        user = await self.get_user_by_id(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    async def update_user(self, user_id: str, **fields) -> User:
        """Apply *fields* to a user. Unknown field names are ignored."""
        user = await self.get_user(user_id)
        for key, value in fields.items():
            if key in _USER_FIELDS:
                setattr(user, key, value)
        user.updated_at = datetime.now(UTC)
        await self._session.flush()
        return user

    async def delete_user(self, user_id: str) -> dict[str, int]:
        """Delete a user together with their recordings and authored reviews.

        Reviews left by other reviewers on the deleted recordings go too,
        and recordings this user reviewed lose their ``reviewed_by`` link.

        Returns:
            ``{"recordings_deleted": n, "reviews_deleted": m}``
        """
        user = await self.get_user(user_id)

        recording_ids = list(
            (await self._session.execute(select(Recording.id).where(Recording.user_id == user_id)))
            .scalars()
            .all()
        )
        authored = await self._session.execute(delete(Review).where(Review.reviewer_id == user_id))
        reviews_deleted = authored.rowcount or 0
        if recording_ids:
            on_recordings = await self._session.execute(
                delete(Review).where(Review.recording_id.in_(recording_ids))
            )
            reviews_deleted += on_recordings.rowcount or 0
            await self._session.execute(delete(Recording).where(Recording.id.in_(recording_ids)))
        await self._session.execute(
            update(Recording).where(Recording.reviewed_by == user_id).values(reviewed_by=None)
        )
        await self._session.delete(user)
        await self._session.flush()

        logger.info(
            "Deleted user %s (%d recordings, %d reviews)",
            user_id,
            len(recording_ids),
            reviews_deleted,
        )
        return {"recordings_deleted": len(recording_ids), "reviews_deleted": reviews_deleted}

    async def get_all_users(self) -> list[User]:
        """Return every user, newest first."""
        return await self._scalars(select(User).order_by(User.created_at.desc()))

    async def get_users_by_role(self, role: str) -> list[User]:
        stmt = select(User).where(User.role == role).order_by(User.created_at.desc())
        return await self._scalars(stmt)

    async def get_users_by_status(self, status: str) -> list[User]:
        stmt = select(User).where(User.status == status).order_by(User.created_at.desc())
        return await self._scalars(stmt)

    # ------------------------------------------------------------------
    # Recordings
    # ------------------------------------------------------------------

    async def create_recording(
        self,
        user_id: str,
        sentence: str,
        audio_url: str,
        duration: float,
        status: str = "pending",
        quality: str | None = None,
        metadata: dict | None = None,
    ) -> Recording:
        """Create and return a recording.

        ``quality`` defaults to the duration rule of :func:`classify_quality`.

        Raises:
            InvalidIdentifierError: If *user_id* is not a valid UUID.
            UserNotFoundError: If the user does not exist.
        """
        if not is_valid_uuid(user_id):
            raise InvalidIdentifierError("user ID", user_id)
        await self.get_user(user_id)

        recording = Recording(
            user_id=user_id,
            sentence=sentence,
            audio_url=audio_url,
            duration=duration,
            status=status,
            quality=quality or classify_quality(duration),
            meta=metadata or {},
        )
        self._session.add(recording)
        await self._session.flush()
        logger.info("Created recording %s for user %s (%.1fs)", recording.id, user_id, duration)
        return recording

    async def get_recording_by_id(self, recording_id: str) -> Recording | None:
        if not is_valid_uuid(recording_id):
            return None
        return await self._session.get(Recording, recording_id)

    async def get_recording(self, recording_id: str) -> Recording:
        """Return a recording by ID or raise :class:`RecordingNotFoundError`."""
        recording = await self.get_recording_by_id(recording_id)
        if recording is None:
            raise RecordingNotFoundError(recording_id)
        return recording

    async def get_recordings_by_user(self, user_id: str) -> list[Recording]:
        if not is_valid_uuid(user_id):
            return []
        stmt = select(Recording).where(Recording.user_id == user_id).order_by(Recording.created_at.desc())
        return await self._scalars(stmt)

    async def get_recordings_by_status(self, status: str) -> list[Recording]:
        stmt = select(Recording).where(Recording.status == status).order_by(Recording.created_at.desc())
        return await self._scalars(stmt)

    async def get_recordings_by_reviewer(self, reviewer_id: str) -> list[Recording]:
        """Return the recordings *reviewer_id* has reviewed, most recently reviewed first."""
        if not is_valid_uuid(reviewer_id):
            return []
        stmt = (
            select(Recording)
            .where(Recording.reviewed_by == reviewer_id)
            .order_by(Recording.reviewed_at.desc())
        )
        return await self._scalars(stmt)

    async def get_all_recordings(self) -> list[Recording]:
        return await self._scalars(select(Recording).order_by(Recording.created_at.desc()))

    async def update_recording(self, recording_id: str, **fields) -> Recording:
        """Apply *fields* to a recording. ``metadata`` is accepted for ``meta``."""
        recording = await self.get_recording(recording_id)
        if "metadata" in fields:
            fields["meta"] = fields.pop("metadata")
        for key, value in fields.items():
            if key in _RECORDING_FIELDS:
                setattr(recording, key, value)
        recording.updated_at = datetime.now(UTC)
        await self._session.flush()
        return recording

    # ------------------------------------------------------------------
    # Reviews
    # ------------------------------------------------------------------

    async def create_review(
        self,
        recording_id: str,
        reviewer_id: str,
        decision: str,
        confidence: int,
        time_spent: int,
        notes: str | None = None,
    ) -> Review:
        """Insert a review, then copy its decision onto the recording.

        The review is flushed before the recording is touched, so a failed
        recording update leaves the review in the same uncommitted session.
        """
        if not is_valid_uuid(recording_id):
            raise InvalidIdentifierError("recording ID", recording_id)
        if not is_valid_uuid(reviewer_id):
            raise InvalidIdentifierError("reviewer ID", reviewer_id)
        recording = await self.get_recording(recording_id)
        await self.get_user(reviewer_id)

        review = Review(
            recording_id=recording_id,
            reviewer_id=reviewer_id,
            decision=decision,
            confidence=confidence,
            time_spent=time_spent,
            notes=notes,
        )
        self._session.add(review)
        await self._session.flush()

        now = datetime.now(UTC)
        recording.status = decision
        recording.reviewed_by = reviewer_id
        recording.reviewed_at = now
        recording.updated_at = now
        await self._session.flush()

        logger.info("Recording %s %s by %s", recording_id, decision, reviewer_id)
        return review

    async def get_reviews_by_reviewer(self, reviewer_id: str) -> list[Review]:
        if not is_valid_uuid(reviewer_id):
            return []
        stmt = select(Review).where(Review.reviewer_id == reviewer_id).order_by(Review.created_at.desc())
        return await self._scalars(stmt)

    async def get_reviews_by_recording(self, recording_id: str) -> list[Review]:
        if not is_valid_uuid(recording_id):
            return []
        stmt = select(Review).where(Review.recording_id == recording_id).order_by(Review.created_at.desc())
        return await self._scalars(stmt)

    async def get_all_reviews(self) -> list[Review]:
        return await self._scalars(select(Review).order_by(Review.created_at.desc()))

    # ------------------------------------------------------------------
    # Sentences
    # ------------------------------------------------------------------

    async def create_sentence(
        self,
        text: str,
        mozilla_id: str | None = None,
        language_code: str = "luo",
        source: str | None = None,
        bucket: str | None = None,
        hash: str | None = None,
        version: int = 1,
        taxonomy: dict | None = None,
        difficulty_level: str = "basic",
        is_active: bool = True,
        clips_count: int = 0,
        has_valid_clip: bool = False,
        is_validated: bool = False,
    ) -> Sentence:
        """Create and return a sentence with its word and character counts."""
        text = text.strip()
        sentence = Sentence(
            text=text,
            language_code=language_code,
            source=source,
            bucket=bucket,
            hash=hash,
            version=version,
            taxonomy=taxonomy or {},
            difficulty_level=difficulty_level,
            is_active=is_active,
            clips_count=clips_count,
            has_valid_clip=has_valid_clip,
            is_validated=is_validated,
            word_count=len(text.split()),
            character_count=len(text),
        )
        if mozilla_id:
            sentence.mozilla_id = mozilla_id
        self._session.add(sentence)
        await self._session.flush()
        return sentence

    async def list_sentences(
        self,
        language_code: str | None = None,
        active_only: bool = True,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[Sentence]:
        """Return sentences in insertion order, optionally filtered."""
        stmt = select(Sentence).order_by(Sentence.created_at, Sentence.id).offset(offset)
        if language_code is not None:
            stmt = stmt.where(Sentence.language_code == language_code)
        if active_only:
            stmt = stmt.where(Sentence.is_active.is_(True))
        if limit is not None:
            stmt = stmt.limit(limit)
        return await self._scalars(stmt)

    async def get_sentence_by_mozilla_id(self, mozilla_id: str) -> Sentence | None:
        stmt = select(Sentence).where(Sentence.mozilla_id == mozilla_id)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def import_sentences(self, items: Iterable[dict]) -> dict[str, int]:
        """Insert corpus sentences not already stored, keyed by ``mozilla_id``.

        Items without text, or whose ``mozilla_id`` is already present
        (in the table or earlier in *items*), are skipped.

        Returns:
            ``{"created": n, "skipped": m}``
        """
        existing = set(
            (await self._session.execute(select(Sentence.mozilla_id))).scalars().all()
        )
        created = skipped = 0
        for item in items:
            text = (item.get("text") or "").strip()
            mozilla_id = item.get("mozilla_id") or item.get("id") or None
            if not text or (mozilla_id and mozilla_id in existing):
                skipped += 1
                continue
            fields = {
                k: item[k]
                for k in (
                    "language_code",
                    "source",
                    "bucket",
                    "hash",
                    "version",
                    "taxonomy",
                    "difficulty_level",
                    "is_active",
                    "clips_count",
                    "has_valid_clip",
                    "is_validated",
                )
                if item.get(k) is not None
            }
            sentence = await self.create_sentence(text, mozilla_id=mozilla_id, **fields)
            existing.add(sentence.mozilla_id)
            created += 1

        logger.info("Imported sentences: %d created, %d skipped", created, skipped)
        return {"created": created, "skipped": skipped}

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------

    async def get_system_stats(self) -> SystemStats:
        """Return site-wide counters for the admin overview."""
        users = (await self._session.execute(select(User.role, User.status, User.is_active))).all()
        recordings = (await self._session.execute(select(Recording.status, Recording.duration))).all()
        review_times = list(
            (await self._session.execute(select(Review.time_spent))).scalars().all()
        )

        total_recording_time = sum(duration or 0.0 for _, duration in recordings)
        total_review_time = float(sum(t or 0 for t in review_times))

        return SystemStats(
            total_users=len(users),
            contributors=sum(1 for role, _, _ in users if role == "contributor"),
            reviewers=sum(1 for role, status, _ in users if role == "reviewer" and status == "active"),
            pending_reviewers=sum(
                1 for role, status, _ in users if role == "reviewer" and status == "pending"
            ),
            total_recordings=len(recordings),
            pending_recordings=sum(1 for status, _ in recordings if status == "pending"),
            approved_recordings=sum(1 for status, _ in recordings if status == "approved"),
            rejected_recordings=sum(1 for status, _ in recordings if status == "rejected"),
            total_reviews=len(review_times),
            active_users=sum(1 for _, _, active in users if active),
            average_recording_duration=total_recording_time / len(recordings) if recordings else 0.0,
            average_review_time=total_review_time / len(review_times) if review_times else 0.0,
            total_recording_time=total_recording_time,
            total_review_time=total_review_time,
            total_system_time=total_recording_time + total_review_time,
        )

    async def get_user_stats(self, user_id: str) -> UserStats | None:
        """Return one user's stats, or ``None`` for a malformed ID."""
        if not is_valid_uuid(user_id):
            return None
        recordings = await self.get_recordings_by_user(user_id)
        reviews = await self.get_reviews_by_reviewer(user_id)
        return _build_user_stats(user_id, recordings, reviews, datetime.now(UTC))

    async def get_all_user_stats(self) -> list[UserStats]:
        """Return stats for every user, computed from one pass over each table."""
        users = await self.get_all_users()
        recordings = await self.get_all_recordings()
        reviews = await self.get_all_reviews()

        by_user: dict[str, list[Recording]] = {}
        for rec in recordings:
            by_user.setdefault(rec.user_id, []).append(rec)
        by_reviewer: dict[str, list[Review]] = {}
        for rev in reviews:
            by_reviewer.setdefault(rev.reviewer_id, []).append(rev)

        now = datetime.now(UTC)
        return [
            _build_user_stats(u.id, by_user.get(u.id, []), by_reviewer.get(u.id, []), now)
            for u in users
        ]

    async def _ranked(self, users: list[User], key: str, limit: int) -> list[tuple[User, UserStats]]:
        stats = {s.user_id: s for s in await self.get_all_user_stats()}
        ranked = [(u, stats[u.id]) for u in users if u.id in stats]
        ranked.sort(key=lambda pair: getattr(pair[1], key), reverse=True)
        return ranked[:limit]

    async def get_top_contributors(self, limit: int = 10) -> list[tuple[User, UserStats]]:
        """Return contributors with the most recordings."""
        contributors = await self.get_users_by_role("contributor")
        return await self._ranked(contributors, "total_recordings", limit)

    async def get_top_reviewers(self, limit: int = 10) -> list[tuple[User, UserStats]]:
        """Return active reviewers with the most reviews."""
        reviewers = [u for u in await self.get_users_by_role("reviewer") if u.status == "active"]
        return await self._ranked(reviewers, "total_reviews", limit)

    async def get_recent_activity(self, limit: int = 20) -> list[dict]:
        """Merge the latest recordings, reviews and sign-ups into one feed.

        Takes the 10 newest of each kind (admins excluded from sign-ups)
        and returns up to *limit* items, newest first. Each item is a dict
        with ``type``, ``user``, ``data`` and ``timestamp`` keys.
        """
        recordings = await self._scalars(select(Recording).order_by(Recording.created_at.desc()).limit(10))
        reviews = await self._scalars(select(Review).order_by(Review.created_at.desc()).limit(10))
        users = await self._scalars(
            select(User).where(User.role != "admin").order_by(User.created_at.desc()).limit(10)
        )

        actor_ids = {r.user_id for r in recordings} | {r.reviewer_id for r in reviews}
        actors = {u.id: u for u in users}
        missing = actor_ids - actors.keys()
        if missing:
            for u in await self._scalars(select(User).where(User.id.in_(missing))):
                actors[u.id] = u

        activities: list[dict] = []
        for rec in recordings:
            if rec.user_id in actors:
                activities.append(
                    {
                        "type": ActivityType.recording,
                        "user": actors[rec.user_id],
                        "data": {
                            "id": rec.id,
                            "sentence": rec.sentence,
                            "status": rec.status,
                            "duration": rec.duration,
                        },
                        "timestamp": rec.created_at,
                    }
                )
        for rev in reviews:
            if rev.reviewer_id in actors:
                activities.append(
                    {
                        "type": ActivityType.review,
                        "user": actors[rev.reviewer_id],
                        "data": {
                            "id": rev.id,
                            "recording_id": rev.recording_id,
                            "decision": rev.decision,
                            "confidence": rev.confidence,
                        },
                        "timestamp": rev.created_at,
                    }
                )
        for user in users:
            activities.append(
                {
                    "type": ActivityType.user_joined,
                    "user": user,
                    "data": {"id": user.id, "email": user.email, "role": user.role},
                    "timestamp": user.created_at,
                }
            )

        activities.sort(key=lambda a: _naive(a["timestamp"]), reverse=True)
        return activities[:limit]

    # ------------------------------------------------------------------
    # Sentence allocation
    # ------------------------------------------------------------------

    async def get_available_sentences_for_user(
        self, user_id: str, language_code: str = "luo"
    ) -> list[str]:
        """Return the active sentences *user_id* may still record."""
        if not is_valid_uuid(user_id):
            return []
        stmt = (
            select(Sentence.text)
            .where(Sentence.is_active.is_(True), Sentence.language_code == language_code)
            .order_by(Sentence.created_at, Sentence.id)
        )
        sentences = list((await self._session.execute(stmt)).scalars().all())
        if not sentences:
            return []

        pairs = (await self._session.execute(select(Recording.sentence, Recording.user_id))).all()
        contributors = build_contributor_map((s, u) for s, u in pairs)
        available = filter_available_sentences(sentences, contributors, user_id, self._max_contributors)
        logger.debug(
            "User %s: %d of %d sentences available", user_id, len(available), len(sentences)
        )
        return available

    async def can_user_record_sentence(self, user_id: str, sentence: str) -> bool:
        if not is_valid_uuid(user_id) or not sentence:
            return False
        stmt = select(Recording.user_id).where(Recording.sentence == sentence)
        contributors = set((await self._session.execute(stmt)).scalars().all())
        return can_record(contributors, user_id, self._max_contributors)

    async def get_sentence_stats(self, sentence: str) -> SentenceStats:
        stmt = select(Recording.user_id).where(Recording.sentence == sentence)
        user_ids = list((await self._session.execute(stmt)).scalars().all())
        return SentenceStats(total_recordings=len(user_ids), unique_contributors=len(set(user_ids)))
