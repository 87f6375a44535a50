"""Review player component: one pending recording with audio and waveform."""

import streamlit as st

from src.ui.api_client import APIClient, APIError
from src.ui.utils import sentence_html


def render_review_player(client: APIClient, recording: dict, position: int, total: int) -> None:
    """Render the sentence, an audio player and the clip's waveform."""
    st.caption(f"Recording {position} of {total}")
    st.markdown(
        sentence_html(recording["sentence"], font_size="1.4rem", padding="1rem 0"),
        unsafe_allow_html=True,
    )

    audio = client.download_audio(recording["id"])
    if audio is None:
        st.warning("Audio for this recording could not be loaded.")
        return

    meta = recording.get("metadata") or {}
    st.audio(audio, format=meta.get("mimeType", "audio/wav"))

    try:
        peaks = client.get_waveform(recording["id"])
    except APIError:
        peaks = []
    if peaks:
        st.bar_chart(peaks, height=120)

    details = [f"{recording.get('duration', 0):.1f}s", recording.get("quality", "").title()]
    if meta.get("deviceType"):
        details.append(meta["deviceType"])
    st.caption(" · ".join(d for d in details if d))
