"""
Synchronous HTTP client for the VoiceCollect backend API.

Uses ``httpx.Client`` (sync) because Streamlit scripts run synchronously.
"""

import logging

import httpx
import streamlit as st

logger = logging.getLogger(__name__)


class APIError(Exception):
    """User-friendly API error with categorized message.

    Categories: "connection", "timeout", "http", "network", "unknown".
    ``status_code`` and ``code`` are set for "http" errors so pages can
    tell a missing user (404) from a blocked account (403).
    """

    def __init__(
        self,
        message: str,
        category: str = "unknown",
        status_code: int | None = None,
        code: str | None = None,
    ) -> None:
        self.message = message
        self.category = category
        self.status_code = status_code
        self.code = code
        super().__init__(message)


class APIClient:
    """Thin synchronous wrapper around httpx for calling the FastAPI backend.

    All methods return parsed JSON (or raw bytes for audio and CSV) or
    raise ``APIError`` with user-friendly messages for display in the UI.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        admin_api_key: str = "",
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the HTTP client.

        Args:
            base_url: Base URL of the VoiceCollect FastAPI backend.
            admin_api_key: Bearer token for admin paths, when the API requires one.
            transport: Optional httpx transport override (tests).
        """
        self._base_url = base_url.rstrip("/")
        headers = {"Authorization": f"Bearer {admin_api_key}"} if admin_api_key else None
        self._client = httpx.Client(
            base_url=self._base_url, timeout=30.0, headers=headers, transport=transport
        )

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        """Execute an HTTP request with user-friendly error handling.

        Raises:
            APIError: On connection, timeout, HTTP status, or network errors.
        """
        try:
            resp = getattr(self._client, method)(path, **kwargs)
            resp.raise_for_status()
            return resp
        except httpx.ConnectError:
            raise APIError(
                "Backend server is not running. "
                "Start it with: `uvicorn src.api.app:app --reload --port 8000`",
                category="connection",
            ) from None
        except httpx.TimeoutException:
            raise APIError(
                "Request timed out. The server may be overloaded.",
                category="timeout",
            ) from None
        except httpx.HTTPStatusError as exc:
            code = None
            try:
                body = exc.response.json()
                detail = body.get("detail", exc.response.text)
                code = body.get("code")
            except Exception:
                detail = exc.response.text or str(exc)
            raise APIError(
                str(detail), category="http", status_code=exc.response.status_code, code=code
            ) from None
        except httpx.HTTPError as exc:
            raise APIError(f"Network error: {exc}", category="network") from None

    # -- health --

    def health_check(self) -> dict:
        return self._request("get", "/health").json()

    def check_connection(self) -> tuple[bool, str]:
        """Check if the backend is reachable. Returns (ok, message)."""
        try:
            self.health_check()
            return True, "Connected"
        except APIError as exc:
            return False, exc.message

    # -- auth --

    def signup(self, email: str, password: str, role: str = "contributor") -> dict:
        body = {"email": email, "password": password, "role": role}
        return self._request("post", "/api/v1/auth/signup", json=body).json()

    def login(self, email: str, password: str) -> dict:
        body = {"email": email, "password": password}
        return self._request("post", "/api/v1/auth/login", json=body).json()

    def admin_login(self, email: str, password: str) -> dict:
        body = {"email": email, "password": password}
        return self._request("post", "/api/v1/auth/admin-login", json=body).json()

    def restore_session(self, user_id: str) -> dict:
        return self._request("get", f"/api/v1/auth/session/{user_id}").json()

    # -- users --

    def list_users(self, role: str | None = None, status: str | None = None) -> list[dict]:
        params: dict = {}
        if role:
            params["role"] = role
        if status:
            params["status"] = status
        return self._request("get", "/api/v1/users", params=params).json()

    def get_user(self, user_id: str) -> dict:
        return self._request("get", f"/api/v1/users/{user_id}").json()

    def update_profile(self, user_id: str, profile: dict) -> dict:
        return self._request("patch", f"/api/v1/users/{user_id}/profile", json=profile).json()

    def approve_reviewer(self, user_id: str) -> dict:
        return self._request("post", f"/api/v1/users/{user_id}/approve").json()

    def reject_reviewer(self, user_id: str) -> dict:
        return self._request("post", f"/api/v1/users/{user_id}/reject").json()

    def delete_user(self, user_id: str) -> dict:
        return self._request("delete", f"/api/v1/users/{user_id}").json()

    def get_user_stats(self, user_id: str) -> dict:
        return self._request("get", f"/api/v1/users/{user_id}/stats").json()

    def get_user_recordings(self, user_id: str) -> list[dict]:
        return self._request("get", f"/api/v1/users/{user_id}/recordings").json()

    def get_user_reviews(self, user_id: str) -> list[dict]:
        return self._request("get", f"/api/v1/users/{user_id}/reviews").json()

    def get_available_sentences(self, user_id: str) -> list[str]:
        return self._request("get", f"/api/v1/users/{user_id}/available-sentences").json()

    # -- recordings --

    def upload_recording(
        self,
        user_id: str,
        sentence: str,
        audio_bytes: bytes,
        mime_type: str = "audio/wav",
        duration: float | None = None,
        user_agent: str | None = None,
    ) -> dict:
        """Upload a captured clip as multipart form data."""
        data: dict = {"user_id": user_id, "sentence": sentence}
        if duration is not None:
            data["duration"] = str(duration)
        files = {"audio": ("recording", audio_bytes, mime_type)}
        headers = {"User-Agent": user_agent} if user_agent else None
        return self._request(
            "post", "/api/v1/recordings/upload", data=data, files=files, headers=headers
        ).json()

    def list_recordings(self, status: str | None = None, include_audio: bool = True) -> list[dict]:
        params: dict = {"include_audio": include_audio}
        if status:
            params["status"] = status
        return self._request("get", "/api/v1/recordings", params=params).json()

    def download_audio(self, recording_id: str) -> bytes | None:
        """Fetch raw audio bytes for a recording. Returns None on error."""
        try:
            resp = self._request("get", f"/api/v1/recordings/{recording_id}/audio")
            return resp.content
        except APIError:
            return None

    def get_waveform(self, recording_id: str, bins: int = 50) -> list[float]:
        return self._request(
            "get", f"/api/v1/recordings/{recording_id}/waveform", params={"bins": bins}
        ).json()

    # -- reviews --

    def create_review(self, payload: dict) -> dict:
        return self._request("post", "/api/v1/reviews", json=payload).json()

    def list_reviews(self, recording_id: str | None = None) -> list[dict]:
        params = {"recording_id": recording_id} if recording_id else None
        return self._request("get", "/api/v1/reviews", params=params).json()

    # -- stats --

    def get_system_stats(self) -> dict:
        return self._request("get", "/api/v1/stats/system").json()

    def get_all_user_stats(self) -> list[dict]:
        return self._request("get", "/api/v1/stats/users").json()

    def get_top_contributors(self, limit: int = 10) -> list[dict]:
        return self._request("get", "/api/v1/stats/top-contributors", params={"limit": limit}).json()

    def get_top_reviewers(self, limit: int = 10) -> list[dict]:
        return self._request("get", "/api/v1/stats/top-reviewers", params={"limit": limit}).json()

    def get_recent_activity(self, limit: int = 20) -> list[dict]:
        return self._request("get", "/api/v1/stats/activity", params={"limit": limit}).json()

    # -- corpus --

    def list_corpus_sentences(self) -> dict:
        return self._request("get", "/api/v1/corpus/sentences", timeout=300.0).json()

    def import_corpus(self) -> dict:
        return self._request("post", "/api/v1/corpus/import", timeout=300.0).json()


@st.cache_resource
def get_api_client(base_url: str = "http://localhost:8000", admin_api_key: str = "") -> APIClient:
    """Return a cached APIClient, keyed by base_url and key.

    Uses Streamlit's ``cache_resource`` to persist the client across reruns.
    """
    return APIClient(base_url=base_url, admin_api_key=admin_api_key)
