"""
Listen page: reviewers approve or reject pending recordings.
"""

# Ensure project root is on sys.path (Streamlit page files need this).
import sys as _sys
from pathlib import Path as _Path

_r = str(_Path(__file__).resolve().parents[3])
_r in _sys.path or _sys.path.insert(0, _r)  # noqa: E702,I001

from datetime import date  # noqa: E402

import streamlit as st  # noqa: E402

from src.services.recording_queue import count_today  # noqa: E402
from src.services.review_queue import ReviewQueue  # noqa: E402
from src.ui.api_client import APIError  # noqa: E402
from src.ui.components.review_player import render_review_player  # noqa: E402
from src.ui.utils import client, require_page  # noqa: E402

# Reviews per round shown in the progress bar
ROUND_SIZE = 10

user = require_page("/listen")
api = client()


def _load_queue() -> ReviewQueue | None:
    try:
        pending = api.list_recordings(status="pending", include_audio=False)
        past_reviews = api.get_user_reviews(user.id)
    except APIError as exc:
        st.error(f"Could not load recordings: {exc.message}")
        return None
    return ReviewQueue(
        pending,
        reviewer_id=user.id,
        reviews_completed=len(past_reviews),
        session_reviews=count_today(past_reviews, date.today()),
    )


queue: ReviewQueue | None = st.session_state.get("review_queue")
if queue is None:
    with st.spinner("Loading recordings..."):
        queue = _load_queue()
    if queue is None:
        st.stop()
    st.session_state.review_queue = queue

col_title, col_refresh = st.columns([6, 1])
with col_title:
    st.header("Listen")
with col_refresh:
    st.markdown("")  # vertical spacer
    if st.button("Refresh", key="listen_refresh"):
        st.session_state.review_queue = None
        st.rerun()

c1, c2, c3 = st.columns(3)
c1.metric("Reviews completed", queue.reviews_completed)
c2.metric("Today", queue.session_reviews)
c3.metric("Pending", queue.remaining)

done_in_round = queue.reviews_completed % ROUND_SIZE
st.progress(done_in_round / ROUND_SIZE, text=f"{done_in_round} of {ROUND_SIZE} in this round")

if "_listen_toast" in st.session_state:
    st.success(st.session_state.pop("_listen_toast"))

current = queue.current
if current is None:
    st.info("No recordings are waiting for review. Great work!")
    st.stop()

render_review_player(api, current, queue.position, queue.remaining)

with st.expander("Adjust confidence and notes"):
    confidence = st.slider("Confidence", 0, 100, 90, key=f"conf_{current['id']}")
    custom_conf = st.checkbox("Use this confidence", key=f"use_conf_{current['id']}")
    notes = st.text_area("Notes (optional)", key=f"notes_{current['id']}")

col_prev, col_skip, col_next = st.columns(3)
with col_prev:
    if st.button("Previous", disabled=not queue.history, use_container_width=True):
        queue.previous()
        st.rerun()
with col_skip:
    if st.button("Skip", use_container_width=True):
        queue.skip()
        st.rerun()
with col_next:
    if st.button("Next", use_container_width=True):
        queue.advance()
        st.rerun()

col_reject, col_approve = st.columns(2)
decision = None
with col_reject:
    if st.button("Reject", use_container_width=True):
        decision = "rejected"
with col_approve:
    if st.button("Approve", type="primary", use_container_width=True):
        decision = "approved"

if decision is not None:
    payload = queue.build_review(
        decision,
        confidence=confidence if custom_conf else None,
        notes=notes.strip() or None,
    )
    try:
        api.create_review(payload)
    except APIError as exc:
        st.error(f"Failed to submit review: {exc.message}")
    else:
        queue.mark_reviewed()
        st.session_state["_listen_toast"] = f"Recording {decision}."
        st.rerun()
