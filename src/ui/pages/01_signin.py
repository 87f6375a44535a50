"""
Sign-in page: contributor and reviewer sign-in, sign-up, and admin login.
"""

# Ensure project root is on sys.path (Streamlit page files need this).
import sys as _sys
from pathlib import Path as _Path

_r = str(_Path(__file__).resolve().parents[3])
_r in _sys.path or _sys.path.insert(0, _r)  # noqa: E702,I001

import streamlit as st  # noqa: E402

from src.services.auth import MIN_PASSWORD_LENGTH, guard_page, landing_page  # noqa: E402
from src.ui.api_client import APIError  # noqa: E402
from src.ui.utils import client, current_user, go, go_home, sign_in  # noqa: E402

_user = current_user()
if _user is not None and guard_page(_user, landing_page(_user)) is None:
    go_home(_user)

st.header("Welcome to VoiceCollect")
st.caption("Help build an open Dholuo voice dataset by recording and reviewing sentences.")

if "_signin_notice" in st.session_state:
    st.info(st.session_state.pop("_signin_notice"))


def _finish(result: dict) -> None:
    """Store the signed-in user and move to their landing page."""
    if result.get("user") is None:
        st.session_state["_signin_notice"] = result.get("message", "")
        st.rerun()
        return
    sign_in(result["user"])
    go(result["redirect"])


tab_signin, tab_signup, tab_admin = st.tabs(["Sign in", "Sign up", "Admin"])

with tab_signin:
    with st.form("signin_form"):
        email = st.text_input("Email")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Sign in", type="primary")
    if submitted:
        try:
            _finish(client().login(email, password))
        except APIError as exc:
            st.error(exc.message)

with tab_signup:
    with st.form("signup_form"):
        email = st.text_input("Email", key="signup_email")
        password = st.text_input(
            "Password",
            type="password",
            key="signup_password",
            help=f"At least {MIN_PASSWORD_LENGTH} characters",
        )
        confirm = st.text_input("Confirm password", type="password")
        role = st.radio(
            "I want to",
            options=["contributor", "reviewer"],
            format_func=lambda r: "Record sentences" if r == "contributor" else "Review recordings",
            horizontal=True,
        )
        submitted = st.form_submit_button("Create account", type="primary")
    if submitted:
        if password != confirm:
            st.error("Passwords do not match")
        elif len(password) < MIN_PASSWORD_LENGTH:
            st.error(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        else:
            try:
                _finish(client().signup(email, password, role))
            except APIError as exc:
                st.error(exc.message)
    st.caption("Reviewer accounts need admin approval before first sign-in.")

with tab_admin:
    with st.form("admin_form"):
        email = st.text_input("Admin email", key="admin_email")
        password = st.text_input("Admin password", type="password", key="admin_password")
        submitted = st.form_submit_button("Sign in as admin")
    if submitted:
        try:
            result = client().admin_login(email, password)
            _finish(result)
        except APIError as exc:
            st.error(exc.message)
