"""
VoiceCollect Streamlit UI: main entry point.

Run with: ``streamlit run src/ui/app.py``
"""

# ---------------------------------------------------------------------------
# Ensure project root is on sys.path so ``from src.xxx`` imports work.
# Streamlit replaces sys.path[0] with the script directory (src/ui/).
# ---------------------------------------------------------------------------
import sys  # noqa: E402
from pathlib import Path  # noqa: E402

_project_root = str(Path(__file__).resolve().parent.parent.parent)
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

import streamlit as st  # noqa: E402

from src.core.config import get_settings  # noqa: E402
from src.ui.utils import client, current_user, restore_session, sign_out  # noqa: E402

# ---------------------------------------------------------------------------
# Page config (must be first Streamlit call)
# ---------------------------------------------------------------------------
st.set_page_config(
    page_title="VoiceCollect",
    page_icon="\U0001f399️",
    layout="wide",
)

# ---------------------------------------------------------------------------
# Session state defaults
# ---------------------------------------------------------------------------
_DEFAULTS = {
    "api_base_url": get_settings().api_base_url,
    "sentence_queue": None,
    "review_queue": None,
    "admin_snapshot": None,
    "admin_statements": None,
}

for key, value in _DEFAULTS.items():
    if key not in st.session_state:
        st.session_state[key] = value

restore_session()

# ---------------------------------------------------------------------------
# Sidebar
# ---------------------------------------------------------------------------
with st.sidebar:
    st.title("\U0001f399️ VoiceCollect")
    st.caption("Dholuo voices for Common Voice")
    st.divider()

    _user = current_user()
    if _user is not None:
        st.markdown(f"**{_user.name or _user.email}**")
        st.caption(f"{_user.role.value.title()} · {_user.email}")
        if st.button("Sign out", use_container_width=True):
            sign_out()
            st.switch_page("pages/01_signin.py")
        st.divider()

    st.session_state.api_base_url = st.text_input(
        "Backend API URL",
        value=st.session_state.api_base_url,
        help="URL of the VoiceCollect FastAPI backend server (default: http://localhost:8000)",
    )

    # Connection status indicator
    _conn_ok, _conn_msg = client().check_connection()
    if _conn_ok:
        st.success(f"Backend: {_conn_msg}")
    else:
        st.error(f"Backend: {_conn_msg}")

# ---------------------------------------------------------------------------
# Navigation (multipage)
# ---------------------------------------------------------------------------
signin_page = st.Page("pages/01_signin.py", title="Sign in", icon="\U0001f511", default=True)
profile_page = st.Page("pages/02_profile_setup.py", title="Profile", icon="\U0001f464")
speak_page = st.Page("pages/03_speak.py", title="Speak", icon="\U0001f3a4")
listen_page = st.Page("pages/04_listen.py", title="Listen", icon="\U0001f3a7")
dashboard_page = st.Page("pages/05_dashboard.py", title="Dashboard", icon="\U0001f4ca")
admin_page = st.Page("pages/06_admin.py", title="Admin", icon="\U0001f6e0️")

nav = st.navigation([signin_page, profile_page, speak_page, listen_page, dashboard_page, admin_page])
nav.run()
