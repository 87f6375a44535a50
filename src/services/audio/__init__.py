"""
Audio module - data URL encoding and clip inspection.
"""

from .clips import (
    FALLBACK_MIME_TYPE,
    PREFERRED_MIME_TYPES,
    choose_mime_type,
    classify_quality,
    decode_data_url,
    detect_client,
    encode_data_url,
    is_silent,
    probe_duration,
    waveform_peaks,
)

__all__ = [
    "FALLBACK_MIME_TYPE",
    "PREFERRED_MIME_TYPES",
    "choose_mime_type",
    "classify_quality",
    "decode_data_url",
    "detect_client",
    "encode_data_url",
    "is_silent",
    "probe_duration",
    "waveform_peaks",
]
