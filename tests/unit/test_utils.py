"""Tests for the shared utility helpers."""

import uuid

import pytest

from src.core.utils import (
    clean_error_message,
    format_duration,
    format_minutes,
    is_valid_email,
    is_valid_uuid,
    normalize_email,
)


class TestUuid:
    def test_valid(self) -> None:
        assert is_valid_uuid(str(uuid.uuid4())) is True
        assert is_valid_uuid(str(uuid.uuid4()).upper()) is True

    @pytest.mark.parametrize("value", [None, "", "abc", 42, "00000000-0000-0000-0000-000000000000"])
    def test_invalid(self, value) -> None:
        assert is_valid_uuid(value) is False


def test_normalize_email() -> None:
    assert normalize_email("  Jane@Example.COM ") == "jane@example.com"


@pytest.mark.parametrize(
    ("email", "valid"),
    [("a@b.co", True), ("a@b", False), ("a b@c.de", False), ("@c.de", False)],
)
def test_is_valid_email(email: str, valid: bool) -> None:
    assert is_valid_email(email) is valid


def test_clean_error_message() -> None:
    assert clean_error_message("Common Voice API error: HTTP 500 from /sentences") == "HTTP 500 from /sentences"
    assert clean_error_message("API error: timeout") == "timeout"
    assert clean_error_message("plain message") == "plain message"


class TestFormatting:
    @pytest.mark.parametrize(
        ("seconds", "text"),
        [(0, "0h 0m 0s"), (0.9, "0h 0m 0s"), (59.9, "0h 0m 59s"), (3661, "1h 1m 1s")],
    )
    def test_format_duration(self, seconds: float, text: str) -> None:
        assert format_duration(seconds) == text

    @pytest.mark.parametrize(
        ("minutes", "text"),
        [(0, "0h 0m 0s"), (-1, "0h 0m 0s"), (0.5, "0h 0m 30s"), (61.25, "1h 1m 15s")],
    )
    def test_format_minutes(self, minutes: float, text: str) -> None:
        assert format_minutes(minutes) == text
