"""
Profile setup page: demographic details every user fills in once before
recording or reviewing.
"""

# Ensure project root is on sys.path (Streamlit page files need this).
import sys as _sys
from pathlib import Path as _Path

_r = str(_Path(__file__).resolve().parents[3])
_r in _sys.path or _sys.path.insert(0, _r)  # noqa: E702,I001

import streamlit as st  # noqa: E402

from src.core.models import UserResponse  # noqa: E402
from src.services.auth import PROFILE_SETUP_PAGE, landing_page  # noqa: E402
from src.services.profile import (  # noqa: E402
    AGE_RANGES,
    COUNTY_CONSTITUENCIES,
    DIALECTS,
    EDUCATION_LEVELS,
    EMPLOYMENT_STATUSES,
    GENDERS,
    completion_percent,
    missing_fields,
    slugify,
)
from src.ui.api_client import APIError  # noqa: E402
from src.ui.utils import client, go, require_page, sign_in  # noqa: E402

user = require_page(PROFILE_SETUP_PAGE)

st.header("Complete your profile")
st.caption("These details help balance the dataset across ages, regions and dialects.")


def _index(options: list[str], value: str | None) -> int | None:
    return options.index(value) if value in options else None


counties = sorted(COUNTY_CONSTITUENCIES)

# County sits outside the form so the constituency list follows it.
county = st.selectbox(
    "County (Kenya)",
    options=counties,
    index=_index(counties, user.location),
    format_func=lambda c: c.replace("-", " ").title(),
)
constituencies = [slugify(c) for c in COUNTY_CONSTITUENCIES.get(county or "", [])]
labels = {slugify(c): c for c in COUNTY_CONSTITUENCIES.get(county or "", [])}

with st.form("profile_form"):
    name = st.text_input("Display name", value=user.name or "")
    col_age, col_gender = st.columns(2)
    with col_age:
        age = st.selectbox("Age range", AGE_RANGES, index=_index(AGE_RANGES, user.age))
    with col_gender:
        gender = st.selectbox(
            "Gender identity",
            list(GENDERS),
            index=_index(list(GENDERS), user.gender),
            format_func=GENDERS.get,
        )
    constituency = st.selectbox(
        "Constituency",
        constituencies,
        index=_index(constituencies, user.constituency),
        format_func=lambda c: labels.get(c, c),
    )
    phone_number = st.text_input("Phone number", value=user.phone_number or "")
    dialect = st.selectbox("Language dialect", DIALECTS, index=_index(DIALECTS, user.language_dialect))
    col_edu, col_emp = st.columns(2)
    with col_edu:
        education = st.selectbox(
            "Education level",
            EDUCATION_LEVELS,
            index=_index(EDUCATION_LEVELS, user.educational_background),
            format_func=str.title,
        )
    with col_emp:
        employment = st.selectbox(
            "Employment status",
            EMPLOYMENT_STATUSES,
            index=_index(EMPLOYMENT_STATUSES, user.employment_status),
            format_func=lambda s: s.replace("-", " ").capitalize(),
        )
    submitted = st.form_submit_button("Save profile", type="primary")

profile = {
    "name": name.strip() or None,
    "age": age,
    "gender": gender,
    "location": county,
    "constituency": constituency,
    "phone_number": phone_number.strip() or None,
    "language_dialect": dialect,
    "educational_background": education,
    "employment_status": employment,
    "languages": ["luo"],
}
st.progress(completion_percent(profile) / 100, text=f"{completion_percent(profile)}% complete")

if submitted:
    missing = missing_fields(profile)
    if missing:
        st.error("Please fill in: " + ", ".join(f.replace("_", " ") for f in missing))
    else:
        try:
            result = client().update_profile(user.id, {**profile, "profile_complete": True})
            sign_in(result)
            st.toast("Profile saved")
            go(landing_page(UserResponse.model_validate(result)))
        except APIError as exc:
            st.error(exc.message)
