"""
Admin page: overview, user management, recordings, Common Voice statements
and reviewer analytics.

Data is fetched wholesale into an ``AdminSnapshot``; filters, pagination
and the effect of approve / reject / delete are applied to the snapshot so
the tables update without a full reload.
"""

# Ensure project root is on sys.path (Streamlit page files need this).
import sys as _sys
from pathlib import Path as _Path

_r = str(_Path(__file__).resolve().parents[3])
_r in _sys.path or _sys.path.insert(0, _r)  # noqa: E702,I001

import math  # noqa: E402
from datetime import date  # noqa: E402

import streamlit as st  # noqa: E402

from src.core.config import get_settings  # noqa: E402
from src.core.utils import format_duration  # noqa: E402
from src.services.admin import ALL, AdminSnapshot, paginate  # noqa: E402
from src.services.export import export_filename, export_recordings_csv, export_users_csv  # noqa: E402
from src.ui.api_client import APIClient, APIError  # noqa: E402
from src.ui.utils import client, require_page  # noqa: E402

user = require_page("/admin")
api = client()
PAGE_SIZE = get_settings().page_size


def _load_snapshot(api: APIClient) -> AdminSnapshot:
    return AdminSnapshot(
        users=api.list_users(),
        recordings=api.list_recordings(include_audio=False),
        reviews=api.list_reviews(),
        user_stats=api.get_all_user_stats(),
        system_stats=api.get_system_stats(),
    )


def _pager(key: str, item_count: int) -> int:
    """Page number input; returns the requested 1-based page."""
    total_pages = max(math.ceil(item_count / PAGE_SIZE), 1)
    if total_pages == 1:
        return 1
    if st.session_state.get(key, 1) > total_pages:
        st.session_state[key] = total_pages
    return st.number_input("Page", min_value=1, max_value=total_pages, step=1, key=key)


def _name(u: dict | None) -> str:
    if u is None:
        return "Unknown"
    return u.get("name") or u.get("email", "Unknown")


col_title, col_refresh = st.columns([6, 1])
with col_title:
    st.header("Admin")
with col_refresh:
    st.markdown("")  # vertical spacer
    refresh = st.button("Refresh", key="admin_refresh")

snapshot: AdminSnapshot | None = st.session_state.get("admin_snapshot")
if snapshot is None or refresh:
    with st.spinner("Loading users and recordings..."):
        try:
            snapshot = _load_snapshot(api)
        except APIError as exc:
            st.error(f"Could not load admin data: {exc.message}")
            st.stop()
    st.session_state.admin_snapshot = snapshot

if "_admin_toast" in st.session_state:
    st.success(st.session_state.pop("_admin_toast"))

stats = snapshot.system_stats
users_by_id = snapshot.users_by_id()

tab_overview, tab_users, tab_recordings, tab_statements, tab_analytics = st.tabs(
    ["Overview", "User Management", "Recordings", "API Statements", "Analytics"]
)

# ---------------------------------------------------------------------------
# Overview
# ---------------------------------------------------------------------------
with tab_overview:
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Total users", stats.get("total_users", 0))
    c2.metric("Pending reviewers", stats.get("pending_reviewers", 0))
    c3.metric("Total recordings", stats.get("total_recordings", 0))
    c4.metric("System time", format_duration(stats.get("total_system_time", 0.0)))

    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Pending", stats.get("pending_recordings", 0))
    c2.metric("Approved", stats.get("approved_recordings", 0))
    c3.metric("Rejected", stats.get("rejected_recordings", 0))
    c4.metric("Reviews", stats.get("total_reviews", 0))

    col_recent, col_pending = st.columns(2)
    with col_recent:
        st.subheader("Recent recordings")
        for rec in snapshot.recordings[:5]:
            st.markdown(f"**{_name(users_by_id.get(rec['user_id']))}** · {rec['status']}  \n_{rec['sentence']}_")
        if not snapshot.recordings:
            st.caption("No recordings yet.")
    with col_pending:
        st.subheader("Reviewers awaiting approval")
        pending = snapshot.filter_users(role="reviewer", status="pending")
        for u in pending[:5]:
            st.markdown(f"**{_name(u)}** · {u['email']}")
        if not pending:
            st.caption("Nobody is waiting.")

# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------
with tab_users:
    f1, f2, f3 = st.columns([3, 1, 1])
    search = f1.text_input("Search by name or email", key="user_search")
    role = f2.selectbox("Role", [ALL, "contributor", "reviewer", "admin"], key="user_role")
    status = f3.selectbox("Status", [ALL, "active", "pending", "rejected"], key="user_status")

    rows = snapshot.filter_users(search=search, role=role, status=status)
    st.download_button(
        f"Export {len(rows)} users (CSV)",
        data=export_users_csv(rows, snapshot.stats_by_id()),
        file_name=export_filename("users", date.today()),
        mime="text/csv",
    )

    page = paginate(rows, _pager("admin_users_page", len(rows)), PAGE_SIZE)
    st.caption(f"Showing {len(page.items)} of {page.total} users · page {page.page} of {max(page.total_pages, 1)}")

    for u in page.items:
        u_stats = snapshot.stats_for(u["id"]) or {}
        with st.expander(f"{_name(u)} · {u['role']} · {u['status']}"):
            st.write(
                {
                    "Email": u["email"],
                    "Joined": u["created_at"][:10],
                    "Profile complete": u.get("profile_complete", False),
                    "Location": u.get("location") or "N/A",
                    "Dialect": u.get("language_dialect") or "N/A",
                    "Recordings": u_stats.get("total_recordings", 0),
                    "Reviews": u_stats.get("total_reviews", 0),
                }
            )
            if u["role"] == "reviewer":
                recent = snapshot.reviews_for(u["id"])[:5]
                if recent:
                    st.caption("Latest reviews: " + ", ".join(r["decision"] for r in recent))
            elif u["role"] == "contributor":
                recent = snapshot.recordings_for(u["id"])[:5]
                for rec in recent:
                    st.caption(f"{rec['status']}: {rec['sentence']}")

            a1, a2, a3 = st.columns(3)
            if u["role"] == "reviewer" and u["status"] != "active":
                if a1.button("Approve", key=f"approve_{u['id']}", type="primary"):
                    try:
                        api.approve_reviewer(u["id"])
                    except APIError as exc:
                        st.error(exc.message)
                    else:
                        snapshot.approve_reviewer(u["id"])
                        st.session_state["_admin_toast"] = f"Approved {_name(u)}"
                        st.rerun()
            if u["role"] == "reviewer" and u["status"] != "rejected":
                if a2.button("Reject", key=f"reject_{u['id']}"):
                    try:
                        api.reject_reviewer(u["id"])
                    except APIError as exc:
                        st.error(exc.message)
                    else:
                        snapshot.reject_reviewer(u["id"])
                        st.session_state["_admin_toast"] = f"Rejected {_name(u)}"
                        st.rerun()
            if u["id"] != user.id:
                confirm = a3.checkbox("Confirm delete", key=f"confirm_{u['id']}")
                if a3.button("Delete", key=f"delete_{u['id']}", disabled=not confirm):
                    try:
                        result = api.delete_user(u["id"])
                    except APIError as exc:
                        st.error(exc.message)
                    else:
                        snapshot.remove_user(u["id"])
                        st.session_state["_admin_toast"] = (
                            f"Deleted {_name(u)} with {result['recordings_deleted']} recordings "
                            f"and {result['reviews_deleted']} reviews"
                        )
                        st.rerun()

# ---------------------------------------------------------------------------
# Recordings
# ---------------------------------------------------------------------------
with tab_recordings:
    f1, f2 = st.columns([3, 1])
    rec_search = f1.text_input("Search by sentence or contributor", key="rec_search")
    rec_status = f2.selectbox("Status", [ALL, "pending", "approved", "rejected", "reviewed"], key="rec_status")

    rec_rows = snapshot.filter_recordings(search=rec_search, status=rec_status)
    st.download_button(
        f"Export {len(rec_rows)} recordings (CSV)",
        data=export_recordings_csv(rec_rows, snapshot.users),
        file_name=export_filename("recordings", date.today()),
        mime="text/csv",
    )

    rec_page = paginate(
        rec_rows, _pager("admin_recordings_page", len(rec_rows)), PAGE_SIZE
    )
    st.caption(
        f"Showing {len(rec_page.items)} of {rec_page.total} recordings "
        f"· page {rec_page.page} of {max(rec_page.total_pages, 1)}"
    )
    for rec in rec_page.items:
        owner = users_by_id.get(rec["user_id"])
        reviewer = users_by_id.get(rec.get("reviewed_by") or "")
        with st.expander(f"{rec['sentence'][:60]} · {rec['status']}"):
            st.markdown(
                f"**Contributor:** {_name(owner)}  \n"
                f"**Duration:** {rec.get('duration', 0):.1f}s · **Quality:** {rec.get('quality')}  \n"
                f"**Reviewer:** {_name(reviewer) if reviewer else 'Not reviewed'}"
            )
            if st.button("Load audio", key=f"audio_{rec['id']}"):
                audio = api.download_audio(rec["id"])
                if audio is None:
                    st.warning("Audio unavailable")
                else:
                    st.audio(audio, format=(rec.get("metadata") or {}).get("mimeType", "audio/wav"))

# ---------------------------------------------------------------------------
# Common Voice statements
# ---------------------------------------------------------------------------
with tab_statements:
    st.subheader("Mozilla API Statements")
    s1, s2 = st.columns(2)
    if s1.button("Load statements"):
        with st.spinner("Fetching all statements from Mozilla Common Voice API..."):
            try:
                st.session_state.admin_statements = api.list_corpus_sentences()
            except APIError as exc:
                st.session_state.admin_statements = {"count": 0, "sentences": [], "error": exc.message}
    if s2.button("Import into sentence table"):
        with st.spinner("Importing statements..."):
            try:
                result = api.import_corpus()
            except APIError as exc:
                st.error(f"Import failed: {exc.message}")
            else:
                st.success(f"Imported {result['created']} new sentences ({result['skipped']} already present)")

    loaded = st.session_state.get("admin_statements")
    if loaded:
        if loaded.get("error"):
            st.error(f"Failed to load statements: {loaded['error']}")
        statements = loaded.get("sentences", [])
        st.caption(f"{loaded.get('count', len(statements))} statements loaded")
        st_page = paginate(
            statements, _pager("admin_statements_page", len(statements)), PAGE_SIZE
        )
        start = (st_page.page - 1) * PAGE_SIZE
        for i, text in enumerate(st_page.items, start=start + 1):
            st.markdown(f"{i}. {text}")

# ---------------------------------------------------------------------------
# Analytics
# ---------------------------------------------------------------------------
with tab_analytics:
    col_perf, col_health = st.columns(2)
    with col_perf:
        st.subheader("Reviewer Performance")
        reviewers = snapshot.filter_users(role="reviewer", status="active")
        if not reviewers:
            st.caption("No active reviewers.")
        for r in reviewers:
            r_stats = snapshot.stats_for(r["id"]) or {}
            total = r_stats.get("total_reviews", 0)
            rate = r_stats.get("approved_reviews", 0) / total * 100 if total else 0.0
            st.markdown(f"**{_name(r)}**: {total} reviews · {rate:.1f}% approved")
            st.progress(rate / 100)
    with col_health:
        st.subheader("System Health")
        st.metric("Average recording", f"{stats.get('average_recording_duration', 0.0):.1f}s")
        st.metric("Average review time", f"{stats.get('average_review_time', 0.0):.1f}s")
        st.metric("Recording time", format_duration(stats.get("total_recording_time", 0.0)))
        st.metric("Review time", format_duration(stats.get("total_review_time", 0.0)))
        st.metric("Active users", stats.get("active_users", 0))
