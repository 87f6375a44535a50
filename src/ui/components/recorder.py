"""
Recorder component: capture one clip for the current sentence.

States: empty -> captured -> submitting -> (next sentence)
"""

import io
import logging
from dataclasses import dataclass

import numpy as np
import soundfile as sf
import streamlit as st

from src.services.audio import FALLBACK_MIME_TYPE, choose_mime_type, classify_quality, is_silent
from src.ui.utils import sentence_html

logger = logging.getLogger(__name__)

# Clips longer than this are almost always a forgotten stop button
MAX_CLIP_SECONDS = 15.0


@dataclass
class Clip:
    audio: bytes
    mime_type: str
    duration: float
    sample_rate: int
    peak: float
    silent: bool

    @property
    def quality(self) -> str:
        return "poor" if self.silent else classify_quality(self.duration)


def read_clip(audio_bytes: bytes, mime_type: str = FALLBACK_MIME_TYPE) -> Clip:
    """Measure a captured clip. Unreadable audio gets zero duration."""
    try:
        data, sample_rate = sf.read(io.BytesIO(audio_bytes), dtype="float32")
    except Exception as exc:
        logger.warning("Could not read captured audio: %s", exc)
        return Clip(audio_bytes, mime_type, 0.0, 0, 0.0, False)

    # Convert to mono if stereo
    if data.ndim > 1:
        data = data.mean(axis=1)

    duration = len(data) / sample_rate if sample_rate else 0.0
    peak = float(np.abs(data).max()) if data.size else 0.0
    return Clip(
        audio=audio_bytes,
        mime_type=mime_type,
        duration=round(duration, 2),
        sample_rate=sample_rate,
        peak=peak,
        silent=is_silent(audio_bytes),
    )


def render_recorder(sentence: str, key: str) -> Clip | None:
    """Show the sentence and a microphone input; return the captured clip."""
    st.markdown(
        sentence_html(sentence),
        unsafe_allow_html=True,
    )
    recorded = st.audio_input("Record yourself reading the sentence aloud", key=key)
    if recorded is None:
        return None

    clip = read_clip(recorded.getvalue(), choose_mime_type({recorded.type} if recorded.type else set()))
    cols = st.columns(3)
    cols[0].metric("Duration", f"{clip.duration:.1f}s")
    cols[1].metric("Peak level", f"{clip.peak:.0%}")
    cols[2].metric("Quality", clip.quality.title())

    if clip.silent:
        st.warning("The recording sounds silent. Check your microphone and record again.")
    elif clip.duration > MAX_CLIP_SECONDS:
        st.warning("The recording is quite long. Keep it to the sentence only.")
    return clip
