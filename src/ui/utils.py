"""UI utility functions: session user, page guards and formatting."""

import html
import logging

import streamlit as st

from src.core.config import get_settings
from src.core.models import UserResponse
from src.services.auth import DictSessionStore, guard_page, landing_page
from src.ui.api_client import APIClient, APIError, get_api_client

logger = logging.getLogger(__name__)

# Route -> page script, relative to src/ui/app.py
PAGES = {
    "/auth/signin": "pages/01_signin.py",
    "/profile/setup": "pages/02_profile_setup.py",
    "/speak": "pages/03_speak.py",
    "/listen": "pages/04_listen.py",
    "/dashboard": "pages/05_dashboard.py",
    "/admin": "pages/06_admin.py",
}


def client() -> APIClient:
    settings = get_settings()
    base_url = st.session_state.get("api_base_url", settings.api_base_url)
    return get_api_client(base_url, settings.admin_api_key)


def session_store() -> DictSessionStore:
    return DictSessionStore(st.session_state)


def current_user() -> UserResponse | None:
    saved = session_store().load()
    return UserResponse.model_validate(saved) if saved else None


# Per-user page state dropped when the signed-in user changes
_USER_STATE = ("sentence_queue", "review_queue", "admin_snapshot", "admin_statements")


def _reset_user_state() -> None:
    for key in _USER_STATE:
        st.session_state[key] = None


def sign_in(user: dict) -> None:
    saved = session_store().load()
    if not saved or saved.get("id") != user.get("id"):
        _reset_user_state()
    session_store().save(user)
    st.session_state["_session_checked"] = True


def sign_out() -> None:
    session_store().clear()
    _reset_user_state()
    st.session_state.pop("_session_checked", None)


def restore_session() -> None:
    """Refresh the saved user from the backend once per browser session.

    A 404 clears the saved user; any other failure keeps it.
    """
    saved = session_store().load()
    if not saved or st.session_state.get("_session_checked"):
        return
    try:
        result = client().restore_session(saved.get("id", ""))
        session_store().save(result["user"])
    except APIError as exc:
        if exc.status_code in (400, 404):
            logger.info("Saved user %s no longer valid; clearing session", saved.get("id"))
            session_store().clear()
        else:
            logger.warning("Could not validate saved session: %s", exc.message)
    st.session_state["_session_checked"] = True


def go(route: str) -> None:
    """Switch to the page for *route* and stop the current script."""
    st.switch_page(PAGES.get(route, PAGES["/dashboard"]))


def go_home(user: UserResponse) -> None:
    go(landing_page(user))


def require_page(route: str) -> UserResponse:
    """Return the current user if they may view *route*, else redirect."""
    user = current_user()
    redirect = guard_page(user, route)
    if redirect is not None:
        go(redirect)
        st.stop()
    return user


def friendly_submit_error(exc: APIError) -> str:
    """Map a recording submission error to the message shown to contributors."""
    if "audio_url" in exc.message:
        return "Audio file is too large. Please record a shorter audio clip."
    if exc.code == "SENTENCE_UNAVAILABLE":
        return exc.message
    if "user_id" in exc.message:
        return "Authentication error. Please log in again."
    if "sentence" in exc.message:
        return "Invalid sentence data. Please try again."
    if exc.category == "http":
        return "Failed to submit recording. Please try again."
    return exc.message


def sentence_html(sentence: str, font_size: str = "1.6rem", padding: str = "1.5rem 0") -> str:
    """Centered block for a prompt sentence; the text is HTML-escaped."""
    return (
        f"<div style='font-size:{font_size};text-align:center;padding:{padding}'>"
        f"{html.escape(sentence)}</div>"
    )
