"""Shared utility functions for VoiceCollect."""

import re
import uuid

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_API_ERROR_PREFIX_RE = re.compile(r"^(?:[\w ]+ )?api error:\s*", re.IGNORECASE)


def is_valid_uuid(value: object) -> bool:
    """Return True if *value* is a string holding a version 1-5 UUID."""
    if not isinstance(value, str) or not value:
        return False
    try:
        parsed = uuid.UUID(value)
    except ValueError:
        return False
    return 1 <= (parsed.version or 0) <= 5 and str(parsed) == value.lower()


def normalize_email(email: str) -> str:
    """Lower-case and trim an email address."""
    return email.strip().lower()


def is_valid_email(email: str) -> bool:
    return bool(_EMAIL_RE.match(email))


def clean_error_message(message: str) -> str:
    """Strip a leading ``"<Service> API error:"`` prefix from an error message."""
    return _API_ERROR_PREFIX_RE.sub("", message, count=1)


def format_duration(total_seconds: float) -> str:
    """Format seconds as ``Xh Ym Zs``; anything under a second is ``0h 0m 0s``."""
    if total_seconds < 1:
        return "0h 0m 0s"
    total = int(total_seconds)
    return f"{total // 3600}h {(total % 3600) // 60}m {total % 60}s"


def format_minutes(total_minutes: float) -> str:
    """Format a minute count as ``Xh Ym Zs``, rounding to the nearest second."""
    if total_minutes <= 0:
        return "0h 0m 0s"
    total = round(total_minutes * 60)
    return f"{total // 3600}h {(total % 3600) // 60}m {total % 60}s"
