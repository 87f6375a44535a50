"""
Speak page: contributors read sentences aloud and submit the recordings.

Features: random sentence from the contributor's open list, skip / next /
previous navigation, clip checks before submit, session and total counters.
"""

# Ensure project root is on sys.path (Streamlit page files need this).
import sys as _sys
from pathlib import Path as _Path

_r = str(_Path(__file__).resolve().parents[3])
_r in _sys.path or _sys.path.insert(0, _r)  # noqa: E702,I001

from datetime import date  # noqa: E402

import streamlit as st  # noqa: E402

from src.services.recording_queue import SentenceQueue, count_today  # noqa: E402
from src.ui.api_client import APIError  # noqa: E402
from src.ui.components.recorder import render_recorder  # noqa: E402
from src.ui.utils import client, friendly_submit_error, require_page  # noqa: E402

user = require_page("/speak")
api = client()


def _load_queue() -> SentenceQueue | None:
    try:
        available = api.get_available_sentences(user.id)
        recordings = api.get_user_recordings(user.id)
    except APIError as exc:
        st.error(f"Could not load sentences: {exc.message}")
        return None
    return SentenceQueue(
        available,
        total_recordings=len(recordings),
        today_recordings=count_today(recordings, date.today()),
    )


queue: SentenceQueue | None = st.session_state.get("sentence_queue")
if queue is None:
    with st.spinner("Loading sentences..."):
        queue = _load_queue()
    if queue is None:
        st.stop()
    st.session_state.sentence_queue = queue
    if queue.available:
        st.toast(f"Loaded {len(queue.available)} sentences")

col_title, col_refresh = st.columns([6, 1])
with col_title:
    st.header("Speak")
with col_refresh:
    st.markdown("")  # vertical spacer
    if st.button("Refresh", key="speak_refresh"):
        st.session_state.pop("sentence_queue", None)
        st.rerun()

c1, c2, c3 = st.columns(3)
c1.metric("Total recordings", queue.total_recordings)
c2.metric("Today", queue.session_recordings)
c3.metric("Sentences left", len(queue.available))

if "_speak_toast" in st.session_state:
    st.success(st.session_state.pop("_speak_toast"))

if queue.current is None:
    st.info(
        "You have recorded every sentence that is still open. "
        "Thank you! Check back later for new sentences."
    )
    st.stop()

with st.expander("Recording guidelines"):
    st.markdown(
        "- Read the sentence exactly as written, in a natural voice.\n"
        "- Record in a quiet place and keep the microphone close.\n"
        "- Skip any sentence you find difficult to read."
    )

# A fresh widget key per sentence clears the previous take.
clip = render_recorder(queue.current, key=f"clip_{queue.submitted}_{queue.current}")

nav_prev, nav_skip, nav_next, nav_submit = st.columns(4)
with nav_prev:
    if st.button("Previous", disabled=not queue.can_go_back, use_container_width=True):
        queue.previous()
        st.rerun()
with nav_skip:
    if st.button("Skip", use_container_width=True):
        queue.skip()
        st.session_state["_speak_toast"] = "Sentence skipped. You can skip any sentence you find difficult."
        st.rerun()
with nav_next:
    if st.button("Next", use_container_width=True):
        queue.next()
        st.rerun()
with nav_submit:
    submit = st.button(
        "Submit",
        type="primary",
        disabled=clip is None or clip.duration <= 0,
        use_container_width=True,
    )

if submit and clip is not None:
    with st.spinner("Submitting recording..."):
        try:
            api.upload_recording(
                user_id=user.id,
                sentence=queue.current,
                audio_bytes=clip.audio,
                mime_type=clip.mime_type,
                duration=clip.duration,
                user_agent=st.context.headers.get("User-Agent"),
            )
        except APIError as exc:
            st.error(friendly_submit_error(exc))
        else:
            queue.mark_recorded()
            st.session_state["_speak_toast"] = "Recording submitted successfully!"
            st.rerun()
