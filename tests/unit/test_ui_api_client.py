"""Unit tests for the Streamlit UI API client.

Requests are answered by ``httpx.MockTransport``; no backend is started.
"""

import httpx
import pytest

from src.ui.api_client import APIClient, APIError


def _client(handler, admin_api_key: str = "") -> APIClient:
    return APIClient("http://backend.test/", admin_api_key=admin_api_key, transport=httpx.MockTransport(handler))


# ---------------------------------------------------------------------------
# Error mapping
# ---------------------------------------------------------------------------


class TestErrors:
    def test_connect_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(APIError) as exc_info:
            _client(handler).health_check()
        assert exc_info.value.category == "connection"

    def test_timeout(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("slow", request=request)

        with pytest.raises(APIError) as exc_info:
            _client(handler).health_check()
        assert exc_info.value.category == "timeout"

    def test_http_error_envelope(self) -> None:
        """The backend's detail and code are surfaced on the APIError."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                403,
                json={"detail": "Your reviewer account is pending approval.", "code": "ACCOUNT_PENDING"},
            )

        with pytest.raises(APIError) as exc_info:
            _client(handler).login("rev@example.com", "secret1")
        err = exc_info.value
        assert err.category == "http"
        assert err.status_code == 403
        assert err.code == "ACCOUNT_PENDING"
        assert err.message == "Your reviewer account is pending approval."

    def test_http_error_plain_text(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(502, text="Bad gateway")

        with pytest.raises(APIError) as exc_info:
            _client(handler).get_system_stats()
        assert exc_info.value.message == "Bad gateway"
        assert exc_info.value.code is None

    def test_check_connection(self) -> None:
        ok = _client(lambda r: httpx.Response(200, json={"status": "ok"}))
        assert ok.check_connection() == (True, "Connected")

        def down(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        reachable, message = _client(down).check_connection()
        assert reachable is False
        assert "not running" in message


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class TestRequests:
    def test_admin_key_header(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=[])

        _client(handler, admin_api_key="k").list_users(role="reviewer", status="pending")
        assert seen[0].headers["authorization"] == "Bearer k"
        assert seen[0].url.path == "/api/v1/users"
        assert dict(seen[0].url.params) == {"role": "reviewer", "status": "pending"}

    def test_no_key_no_header(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=[])

        _client(handler).list_reviews()
        assert "authorization" not in seen[0].headers

    def test_upload_recording_multipart(self) -> None:
        """Clips go up as multipart form data with the browser's User-Agent."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(201, json={"id": "rec-1"})

        result = _client(handler).upload_recording(
            "user-1", "Nyathi nindo.", b"RIFFdata", "audio/wav", duration=2.5, user_agent="Firefox/125.0"
        )
        request = seen[0]
        body = request.read()
        assert result == {"id": "rec-1"}
        assert request.url.path == "/api/v1/recordings/upload"
        assert request.headers["content-type"].startswith("multipart/form-data")
        assert request.headers["user-agent"] == "Firefox/125.0"
        assert b'name="sentence"' in body
        assert b"Nyathi nindo." in body
        assert b'name="audio"' in body
        assert b"RIFFdata" in body

    def test_list_recordings_params(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=[])

        _client(handler).list_recordings(status="pending", include_audio=False)
        assert seen[0].url.params["status"] == "pending"
        assert seen[0].url.params["include_audio"] == "false"

    def test_download_audio(self) -> None:
        audio = _client(lambda r: httpx.Response(200, content=b"RIFF", headers={"content-type": "audio/wav"}))
        assert audio.download_audio("rec-1") == b"RIFF"

        missing = _client(lambda r: httpx.Response(404, json={"detail": "Recording not found: rec-1"}))
        assert missing.download_audio("rec-1") is None

    def test_update_profile(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"id": "u1", "profile_complete": True})

        result = _client(handler).update_profile("u1", {"name": "Akinyi", "profile_complete": True})
        assert seen[0].method == "PATCH"
        assert seen[0].url.path == "/api/v1/users/u1/profile"
        assert result["profile_complete"] is True
