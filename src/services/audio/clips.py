"""
Audio glue between captured clips and the ``recordings.audio_url`` column.

Recordings are stored as base64 ``data:`` URLs rather than files, so this
module converts raw bytes to and from that form and extracts the few
properties the app needs (duration, waveform peaks, quality label).
"""

import base64
import binascii
import io
import logging
import re

import numpy as np
import soundfile as sf

from src.core.exceptions import AudioDecodeError

logger = logging.getLogger(__name__)

# MediaRecorder formats in order of preference; WAV is the fallback
PREFERRED_MIME_TYPES = (
    "audio/webm;codecs=opus",
    "audio/webm",
    "audio/ogg;codecs=opus",
    "audio/ogg",
    "audio/mp4",
)
FALLBACK_MIME_TYPE = "audio/wav"

_DATA_URL_RE = re.compile(r"^data:(?P<mime>[\w/+.\-]+(?:;[\w\-]+=[\w\-]+)*)?;base64,(?P<data>.*)$", re.S)

_MOBILE_RE = re.compile(r"Mobile|Android|iPhone|iPad")


def encode_data_url(audio_bytes: bytes, mime_type: str = FALLBACK_MIME_TYPE) -> str:
    """Encode raw audio bytes as a base64 data URL.

    Raises:
        AudioDecodeError: If *audio_bytes* is empty.
    """
    if not audio_bytes:
        raise AudioDecodeError("Audio blob is empty - recording may be corrupted")
    payload = base64.b64encode(audio_bytes).decode("ascii")
    return f"data:{mime_type};base64,{payload}"


def decode_data_url(url: str) -> tuple[bytes, str]:
    """Decode a base64 data URL into ``(audio_bytes, mime_type)``.

    Raises:
        AudioDecodeError: If the URL is not a base64 data URL or is empty.
    """
    match = _DATA_URL_RE.match(url or "")
    if match is None:
        raise AudioDecodeError("Audio URL is not a base64 data URL")
    try:
        audio_bytes = base64.b64decode(match.group("data"), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise AudioDecodeError(f"Invalid base64 audio payload: {exc}") from exc
    if not audio_bytes:
        raise AudioDecodeError("Audio blob is empty - recording may be corrupted")
    return audio_bytes, match.group("mime") or "application/octet-stream"


def probe_duration(audio_bytes: bytes) -> float:
    """Return the clip duration in seconds, or 0.0 if the container is unreadable."""
    try:
        info = sf.info(io.BytesIO(audio_bytes))
    except Exception:
        logger.debug("Could not read audio header (%d bytes)", len(audio_bytes))
        return 0.0
    return float(info.duration)


def waveform_peaks(audio_bytes: bytes, bins: int = 50) -> list[float]:
    """Return *bins* peak amplitudes normalized to [0, 1] for a waveform display.

    Unreadable audio yields a flat line of zeros.
    """
    try:
        data, _ = sf.read(io.BytesIO(audio_bytes), dtype="float32")
    except Exception:
        return [0.0] * bins
    if data.ndim > 1:
        data = data.mean(axis=1)
    if data.size == 0:
        return [0.0] * bins

    chunks = np.array_split(np.abs(data), bins)
    peaks = np.array([chunk.max() if chunk.size else 0.0 for chunk in chunks])
    top = peaks.max()
    if top <= 0:
        return [0.0] * bins
    return [round(float(p), 4) for p in peaks / top]


def is_silent(audio_bytes: bytes, threshold: float = 0.01) -> bool:
    """Check if a clip is silence based on RMS energy.

    Args:
        audio_bytes: Encoded audio (any container ``soundfile`` reads).
        threshold: RMS energy below this value is considered silence.

    Returns:
        True if the clip is silence. Unreadable audio is not reported as
        silent, since its content is unknown.
    """
    try:
        data, _ = sf.read(io.BytesIO(audio_bytes), dtype="float32")
    except Exception:
        return False
    if data.size == 0:
        return True
    rms = np.sqrt(np.mean(np.square(data)))
    return float(rms) < threshold


def classify_quality(duration: float) -> str:
    """Label a take *good* when it lasts between 1 and 15 seconds, else *fair*."""
    return "good" if 1 < duration < 15 else "fair"


def detect_client(user_agent: str | None) -> dict[str, str]:
    """Derive the ``deviceType`` / ``browserType`` recording metadata from a User-Agent."""
    ua = user_agent or ""
    device = "mobile" if _MOBILE_RE.search(ua) else "desktop"
    if "Chrome" in ua:
        browser = "chrome"
    elif "Firefox" in ua:
        browser = "firefox"
    elif "Safari" in ua:
        browser = "safari"
    else:
        browser = "other"
    return {"deviceType": device, "browserType": browser}


def choose_mime_type(supported: set[str] | frozenset[str]) -> str:
    """Return the first preferred recorder MIME type that is *supported*."""
    for mime in PREFERRED_MIME_TYPES:
        if mime in supported:
            return mime
    return FALLBACK_MIME_TYPE
