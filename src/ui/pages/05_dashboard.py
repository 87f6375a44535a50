"""
Dashboard page: headline stats, the last seven days of activity,
leaderboards and the recent activity feed.
"""

# Ensure project root is on sys.path (Streamlit page files need this).
import sys as _sys
from pathlib import Path as _Path

_r = str(_Path(__file__).resolve().parents[3])
_r in _sys.path or _sys.path.insert(0, _r)  # noqa: E702,I001

from datetime import date  # noqa: E402

import streamlit as st  # noqa: E402

from src.services.dashboard import summary_cards, weekly_activity  # noqa: E402
from src.ui.api_client import APIError  # noqa: E402
from src.ui.components.stats_cards import (  # noqa: E402
    render_activity_feed,
    render_cards,
    render_leaderboard,
    render_weekly_activity,
)
from src.ui.utils import client, require_page  # noqa: E402

user = require_page("/dashboard")
api = client()
role = user.role.value

st.header(f"Welcome back, {user.name or user.email}")

try:
    if role == "contributor":
        user_stats = api.get_user_stats(user.id)
        recordings = api.get_user_recordings(user.id)
        reviews: list[dict] = []
        system_stats: dict = {}
    elif role == "reviewer":
        user_stats = api.get_user_stats(user.id)
        recordings = []
        reviews = api.get_user_reviews(user.id)
        system_stats = {}
    else:
        user_stats = None
        recordings = api.list_recordings(include_audio=False)
        reviews = api.list_reviews()
        system_stats = api.get_system_stats()
except APIError as exc:
    st.error(f"Could not load dashboard: {exc.message}")
    st.stop()

render_cards(summary_cards(role, user_stats, system_stats))

st.divider()
st.subheader("Recent Activity")
st.caption("Your contribution activity over the last 7 days")
render_weekly_activity(weekly_activity(role, user.id, recordings, reviews, date.today()))

st.divider()
col_quick, col_feed = st.columns([1, 2])
with col_quick:
    st.subheader("Quick Actions")
    if role == "contributor":
        st.page_link("pages/03_speak.py", label="Record sentences", icon="\U0001f3a4")
    elif role == "reviewer":
        st.page_link("pages/04_listen.py", label="Review recordings", icon="\U0001f3a7")
    else:
        st.page_link("pages/06_admin.py", label="Manage users and recordings", icon="\U0001f6e0️")
    st.page_link("pages/02_profile_setup.py", label="Edit profile", icon="\U0001f464")
with col_feed:
    st.subheader("Community Activity")
    try:
        render_activity_feed(api.get_recent_activity(limit=10))
    except APIError as exc:
        st.caption(f"Activity unavailable: {exc.message}")

col_top_c, col_top_r = st.columns(2)
try:
    with col_top_c:
        render_leaderboard("Top Contributors", api.get_top_contributors(5), "total_recordings", "recordings")
    with col_top_r:
        render_leaderboard("Top Reviewers", api.get_top_reviewers(5), "total_reviews", "reviews")
except APIError as exc:
    st.caption(f"Leaderboards unavailable: {exc.message}")
