"""End-to-end tests for the REST API over an in-memory database.

Covers sign-up and sign-in, reviewer approval, the sentence allocation
cap, recording upload and review, cascading deletes, CSV export, the
corpus import and the JSON error envelope.
"""

import csv
import io

import pytest

from src.api.routes import corpus as corpus_routes
from src.core.exceptions import CorpusAPIError
from src.core.models import CorpusSentence

AUDIO = "data:audio/wav;base64,UklGRiQAAABXQVZF"


async def _admin(async_client) -> dict:
    resp = await async_client.post(
        "/api/v1/auth/admin-login", json={"email": "admin@commonvoice.org", "password": "admin123"}
    )
    assert resp.status_code == 200, resp.text
    return resp.json()["user"]


async def _record(async_client, user_id: str, sentence: str, duration: float = 3.0):
    return await async_client.post(
        "/api/v1/recordings",
        json={"user_id": user_id, "sentence": sentence, "audio_url": AUDIO, "duration": duration},
    )


async def _approved_reviewer(async_client, signup, email: str = "rev@example.com") -> dict:
    await signup(email, role="reviewer")
    admin = await _admin(async_client)
    assert admin["role"] == "admin"
    users = (await async_client.get("/api/v1/users", params={"role": "reviewer"})).json()
    reviewer = next(u for u in users if u["email"] == email)
    resp = await async_client.post(f"/api/v1/users/{reviewer['id']}/approve")
    assert resp.status_code == 200
    return resp.json()


# ===================================================================
# Health
# ===================================================================


class TestHealth:
    async def test_health(self, async_client) -> None:
        resp = await async_client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"


# ===================================================================
# Auth
# ===================================================================


class TestAuthFlow:
    async def test_contributor_signup_and_login(self, async_client, signup) -> None:
        """A contributor is signed in at once and sent to profile setup, then to speak."""
        created = await signup("Achieng@Example.com")
        assert created["user"]["email"] == "achieng@example.com"
        assert created["redirect"] == "/profile/setup"
        assert "password" not in created["user"]

        user_id = created["user"]["id"]
        resp = await async_client.patch(
            f"/api/v1/users/{user_id}/profile", json={"name": "Achieng", "profile_complete": True}
        )
        assert resp.status_code == 200

        login = await async_client.post(
            "/api/v1/auth/login", json={"email": "achieng@example.com", "password": "secret1"}
        )
        assert login.status_code == 200
        assert login.json()["redirect"] == "/speak"
        assert login.json()["user"]["last_login_at"] is not None

    async def test_duplicate_signup(self, async_client, signup) -> None:
        await signup("dup@example.com")
        resp = await async_client.post(
            "/api/v1/auth/signup", json={"email": "DUP@example.com", "password": "secret1"}
        )
        assert resp.status_code == 409
        assert resp.json()["code"] == "DUPLICATE_EMAIL"

    async def test_short_password(self, async_client) -> None:
        resp = await async_client.post(
            "/api/v1/auth/signup", json={"email": "a@example.com", "password": "123"}
        )
        assert resp.status_code == 400
        assert resp.json()["code"] == "INVALID_REQUEST"

    async def test_bad_credentials(self, async_client, signup) -> None:
        await signup("me@example.com")
        resp = await async_client.post(
            "/api/v1/auth/login", json={"email": "me@example.com", "password": "wrong-one"}
        )
        assert resp.status_code == 401
        assert resp.json()["code"] == "AUTH_FAILED"

    async def test_reviewer_needs_approval(self, async_client, signup) -> None:
        """A reviewer cannot sign in or open pages until an admin approves them."""
        created = await signup("rev@example.com", role="reviewer")
        assert created["user"] is None
        assert created["redirect"] == "/auth/signin"
        assert "approval" in created["message"]

        login = await async_client.post(
            "/api/v1/auth/login", json={"email": "rev@example.com", "password": "secret1"}
        )
        assert login.status_code == 403
        assert login.json()["code"] == "ACCOUNT_PENDING"

        users = (await async_client.get("/api/v1/users", params={"status": "pending"})).json()
        reviewer_id = users[0]["id"]
        guard = await async_client.post("/api/v1/auth/guard", json={"user_id": reviewer_id, "page": "/listen"})
        assert guard.json() == {"allowed": False, "redirect": "/auth/signin"}

        await _admin(async_client)
        await async_client.post(f"/api/v1/users/{reviewer_id}/approve")
        login = await async_client.post(
            "/api/v1/auth/login", json={"email": "rev@example.com", "password": "secret1"}
        )
        assert login.status_code == 200
        assert login.json()["redirect"] == "/profile/setup"

    async def test_rejected_reviewer(self, async_client, signup) -> None:
        await signup("no@example.com", role="reviewer")
        users = (await async_client.get("/api/v1/users", params={"role": "reviewer"})).json()
        resp = await async_client.post(f"/api/v1/users/{users[0]['id']}/reject")
        assert resp.json()["status"] == "rejected"
        assert resp.json()["is_active"] is False

        login = await async_client.post(
            "/api/v1/auth/login", json={"email": "no@example.com", "password": "secret1"}
        )
        assert login.json()["code"] == "ACCOUNT_REJECTED"

    async def test_admin_login_creates_admin_once(self, async_client) -> None:
        first = await _admin(async_client)
        second = await _admin(async_client)
        assert first["id"] == second["id"]
        assert first["name"] == "System Administrator"

    async def test_admin_must_use_admin_login(self, async_client) -> None:
        await _admin(async_client)
        resp = await async_client.post(
            "/api/v1/auth/login", json={"email": "admin@commonvoice.org", "password": "admin123"}
        )
        assert resp.status_code == 403
        assert resp.json()["code"] == "ADMIN_LOGIN_REQUIRED"

    async def test_restore_session(self, async_client, signup) -> None:
        created = await signup("s@example.com")
        user_id = created["user"]["id"]
        resp = await async_client.get(f"/api/v1/auth/session/{user_id}")
        assert resp.status_code == 200
        assert resp.json()["user"]["id"] == user_id

        await async_client.delete(f"/api/v1/users/{user_id}")
        gone = await async_client.get(f"/api/v1/auth/session/{user_id}")
        assert gone.status_code == 404

    async def test_restore_session_pending_reviewer(self, async_client, signup) -> None:
        """A restored reviewer still awaiting approval is sent to sign-in, not /listen."""
        await signup("wait@example.com", role="reviewer")
        users = (await async_client.get("/api/v1/users", params={"status": "pending"})).json()
        reviewer_id = users[0]["id"]
        await async_client.patch(f"/api/v1/users/{reviewer_id}/profile", json={"profile_complete": True})

        resp = await async_client.get(f"/api/v1/auth/session/{reviewer_id}")
        assert resp.status_code == 200
        assert resp.json()["user"]["status"] == "pending"
        assert resp.json()["redirect"] == "/auth/signin"


# ===================================================================
# Recordings and allocation
# ===================================================================


class TestRecordings:
    async def test_sentence_cap(self, async_client, signup, seed_sentences) -> None:
        """After three distinct contributors a sentence is closed to a fourth."""
        await seed_sentences("Popular", "Quiet")
        users = [(await signup(f"c{i}@example.com"))["user"]["id"] for i in range(4)]
        for user_id in users[:3]:
            assert (await _record(async_client, user_id, "Popular")).status_code == 201

        available = (await async_client.get(f"/api/v1/users/{users[3]}/available-sentences")).json()
        assert available == ["Quiet"]

        resp = await _record(async_client, users[3], "Popular")
        assert resp.status_code == 409
        assert resp.json()["code"] == "SENTENCE_UNAVAILABLE"

        stats = (await async_client.get("/api/v1/sentences/stats", params={"sentence": "Popular"})).json()
        assert stats == {"total_recordings": 3, "unique_contributors": 3}

    async def test_same_user_twice(self, async_client, signup, seed_sentences) -> None:
        await seed_sentences("Once")
        user_id = (await signup("once@example.com"))["user"]["id"]
        assert (await _record(async_client, user_id, "Once")).status_code == 201
        assert (await _record(async_client, user_id, "Once")).status_code == 409

        check = await async_client.get(
            "/api/v1/sentences/can-record", params={"user_id": user_id, "sentence": "Once"}
        )
        assert check.json() == {"can_record": False}

    async def test_invalid_user_id(self, async_client) -> None:
        resp = await _record(async_client, "user-1", "Anything")
        assert resp.status_code == 400
        assert resp.json()["code"] == "INVALID_ID"

    async def test_upload_multipart(self, async_client, signup, sine_wav_bytes) -> None:
        """An uploaded WAV is stored as a data URL with probed duration and client metadata."""
        user_id = (await signup("up@example.com"))["user"]["id"]
        resp = await async_client.post(
            "/api/v1/recordings/upload",
            data={"user_id": user_id, "sentence": "Wan wadhi dala."},
            files={"audio": ("recording.wav", sine_wav_bytes, "audio/wav")},
            headers={"User-Agent": "Mozilla/5.0 (X11; Linux x86_64) Firefox/125.0"},
        )
        assert resp.status_code == 201, resp.text
        rec = resp.json()
        assert rec["duration"] == pytest.approx(2.0)
        assert rec["quality"] == "good"
        assert rec["audio_url"].startswith("data:audio/wav;base64,")
        assert rec["metadata"]["browserType"] == "firefox"
        assert rec["metadata"]["deviceType"] == "desktop"
        assert rec["metadata"]["size"] == len(sine_wav_bytes)

        audio = await async_client.get(f"/api/v1/recordings/{rec['id']}/audio")
        assert audio.content == sine_wav_bytes
        assert audio.headers["content-type"].startswith("audio/wav")

        peaks = (await async_client.get(f"/api/v1/recordings/{rec['id']}/waveform", params={"bins": 10})).json()
        assert len(peaks) == 10

    async def test_silent_upload_is_poor(self, async_client, signup, silent_wav_bytes) -> None:
        user_id = (await signup("quiet@example.com"))["user"]["id"]
        resp = await async_client.post(
            "/api/v1/recordings/upload",
            data={"user_id": user_id, "sentence": "Silence", "duration": "1.5"},
            files={"audio": ("recording.wav", silent_wav_bytes, "audio/wav")},
        )
        assert resp.status_code == 201
        assert resp.json()["quality"] == "poor"
        assert resp.json()["duration"] == pytest.approx(1.5)

    async def test_list_without_audio(self, async_client, signup) -> None:
        user_id = (await signup("l@example.com"))["user"]["id"]
        await _record(async_client, user_id, "A")
        listed = (await async_client.get("/api/v1/recordings", params={"include_audio": "false"})).json()
        assert listed[0]["audio_url"] is None
        assert listed[0]["status"] == "pending"


# ===================================================================
# Reviews
# ===================================================================


class TestReviews:
    async def test_review_updates_recording(self, async_client, signup) -> None:
        contributor_id = (await signup("c@example.com"))["user"]["id"]
        reviewer = await _approved_reviewer(async_client, signup)
        rec = (await _record(async_client, contributor_id, "Review me")).json()

        resp = await async_client.post(
            "/api/v1/reviews",
            json={
                "recording_id": rec["id"],
                "reviewer_id": reviewer["id"],
                "decision": "approved",
                "confidence": 92,
                "time_spent": 14,
            },
        )
        assert resp.status_code == 201

        updated = (await async_client.get(f"/api/v1/recordings/{rec['id']}")).json()
        assert updated["status"] == "approved"
        assert updated["reviewed_by"] == reviewer["id"]
        assert updated["reviewed_at"] is not None

        pending = (await async_client.get("/api/v1/recordings", params={"status": "pending"})).json()
        assert pending == []

        stats = (await async_client.get(f"/api/v1/users/{reviewer['id']}/stats")).json()
        assert stats["total_reviews"] == 1
        assert stats["accuracy_rate"] == pytest.approx(100.0)

    async def test_review_unknown_recording(self, async_client, signup) -> None:
        reviewer = await _approved_reviewer(async_client, signup)
        resp = await async_client.post(
            "/api/v1/reviews",
            json={
                "recording_id": "00000000-0000-4000-8000-000000000000",
                "reviewer_id": reviewer["id"],
                "decision": "rejected",
            },
        )
        assert resp.status_code == 404
        assert resp.json()["code"] == "RECORDING_NOT_FOUND"


# ===================================================================
# Admin: deletes, stats and export
# ===================================================================


class TestAdmin:
    async def test_delete_user_cascades(self, async_client, signup) -> None:
        contributor_id = (await signup("gone@example.com"))["user"]["id"]
        reviewer = await _approved_reviewer(async_client, signup)
        rec = (await _record(async_client, contributor_id, "Bye")).json()
        await async_client.post(
            "/api/v1/reviews",
            json={"recording_id": rec["id"], "reviewer_id": reviewer["id"], "decision": "approved"},
        )

        resp = await async_client.delete(f"/api/v1/users/{contributor_id}")
        assert resp.status_code == 200
        assert resp.json() == {"user_id": contributor_id, "recordings_deleted": 1, "reviews_deleted": 1}

        assert (await async_client.get(f"/api/v1/recordings/{rec['id']}")).status_code == 404
        assert (await async_client.get("/api/v1/reviews")).json() == []

    async def test_system_stats_and_leaderboards(self, async_client, signup) -> None:
        contributor_id = (await signup("top@example.com"))["user"]["id"]
        await signup("waiting@example.com", role="reviewer")
        await _record(async_client, contributor_id, "One", duration=4.0)

        stats = (await async_client.get("/api/v1/stats/system")).json()
        assert stats["total_users"] == 2
        assert stats["pending_reviewers"] == 1
        assert stats["total_recording_time"] == pytest.approx(4.0)

        top = (await async_client.get("/api/v1/stats/top-contributors", params={"limit": 5})).json()
        assert top[0]["user"]["id"] == contributor_id
        assert top[0]["stats"]["total_recordings"] == 1

        activity = (await async_client.get("/api/v1/stats/activity")).json()
        assert {item["type"] for item in activity} == {"recording", "user_joined"}

    async def test_export_users_row_count(self, async_client, signup) -> None:
        """The CSV holds exactly the filtered rows."""
        await signup("a@example.com")
        await signup("b@example.com")
        await signup("r@example.com", role="reviewer")

        resp = await async_client.get("/api/v1/export/users.csv", params={"role": "contributor"})
        assert resp.status_code == 200
        assert resp.headers["x-row-count"] == "2"
        assert "users_export_" in resp.headers["content-disposition"]
        rows = list(csv.reader(io.StringIO(resp.text)))
        assert len(rows) == 3
        assert rows[0][0] == "Name"

    async def test_export_recordings(self, async_client, signup) -> None:
        user_id = (await signup("rec@example.com"))["user"]["id"]
        await _record(async_client, user_id, "A")
        await _record(async_client, user_id, "B")

        resp = await async_client.get("/api/v1/export/recordings.csv", params={"status": "reviewed"})
        assert resp.headers["x-row-count"] == "0"
        resp = await async_client.get("/api/v1/export/recordings.csv")
        assert resp.headers["x-row-count"] == "2"


# ===================================================================
# Corpus
# ===================================================================


class FakeCorpusClient:
    """Stands in for CommonVoiceClient inside the corpus routes."""

    sentences: list[CorpusSentence] = []
    error: CorpusAPIError | None = None

    def __init__(self, *args, **kwargs) -> None:
        pass

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info) -> None:
        return None

    async def fetch_all_sentences(self, language_code: str = "luo", *args, **kwargs):
        if self.error is not None:
            raise self.error
        return list(self.sentences)


@pytest.fixture
def fake_corpus(monkeypatch):
    FakeCorpusClient.sentences = [
        CorpusSentence(id="cv-1", text="Nyathi nindo.", language_code="luo"),
        CorpusSentence(id="cv-2", text="Dhiang' chamo lum.", language_code="luo"),
    ]
    FakeCorpusClient.error = None
    monkeypatch.setattr(corpus_routes, "CommonVoiceClient", FakeCorpusClient)
    return FakeCorpusClient


class TestCorpus:
    async def test_list(self, async_client, fake_corpus) -> None:
        resp = await async_client.get("/api/v1/corpus/sentences")
        assert resp.json() == {"count": 2, "sentences": ["Nyathi nindo.", "Dhiang' chamo lum."], "error": None}

    async def test_list_error_reported(self, async_client, fake_corpus) -> None:
        """A failed fetch comes back as an empty list with the error message."""
        fake_corpus.error = CorpusAPIError("HTTP 503 from /sentences")
        resp = await async_client.get("/api/v1/corpus/sentences")
        assert resp.status_code == 200
        assert resp.json() == {"count": 0, "sentences": [], "error": "HTTP 503 from /sentences"}

    async def test_import_is_idempotent(self, async_client, fake_corpus) -> None:
        first = (await async_client.post("/api/v1/corpus/import")).json()
        second = (await async_client.post("/api/v1/corpus/import")).json()
        assert first == {"created": 2, "skipped": 0}
        assert second == {"created": 0, "skipped": 2}

        sentences = (await async_client.get("/api/v1/sentences")).json()
        assert {s["mozilla_id"] for s in sentences} == {"cv-1", "cv-2"}

    async def test_import_error(self, async_client, fake_corpus) -> None:
        fake_corpus.error = CorpusAPIError("HTTP 500 from /sentences")
        resp = await async_client.post("/api/v1/corpus/import")
        assert resp.status_code == 502
        assert resp.json()["code"] == "CORPUS_API_ERROR"


# ===================================================================
# Error envelope
# ===================================================================


class TestErrorEnvelope:
    async def test_not_found(self, async_client) -> None:
        resp = await async_client.get("/api/v1/users/00000000-0000-4000-8000-000000000000")
        body = resp.json()
        assert resp.status_code == 404
        assert body["code"] == "USER_NOT_FOUND"
        assert set(body) == {"detail", "code", "timestamp"}

    async def test_validation(self, async_client) -> None:
        resp = await async_client.post("/api/v1/recordings", json={"sentence": ""})
        assert resp.status_code == 422
        assert resp.json()["code"] == "VALIDATION_ERROR"
        assert "user_id" in resp.json()["detail"]
