"""
Account sign-in, sign-up and page routing.

Sessions are not a server concern: the signed-in user is a plain dict
kept by the client in a :class:`SessionStore` under ``SESSION_KEY``.
:class:`AuthService` checks credentials against the ``users`` table and
fills that store; :func:`landing_page` and :func:`guard_page` decide
where a user may go.
"""

import logging
from collections.abc import MutableMapping
from datetime import UTC, datetime
from typing import Any, Protocol

from sqlalchemy.exc import SQLAlchemyError

from src.core.exceptions import (
    AccountAccessError,
    AuthenticationError,
    DuplicateEmailError,
    InvalidRequestError,
)
from src.core.models import AuthResponse, ProfileUpdate, UserResponse
from src.core.utils import is_valid_email, is_valid_uuid, normalize_email
from src.services.storage.repository import VoiceRepository

logger = logging.getLogger(__name__)

SESSION_KEY = "cv_current_user"

MIN_PASSWORD_LENGTH = 6

SIGNIN_PAGE = "/auth/signin"
PROFILE_SETUP_PAGE = "/profile/setup"

REVIEWER_PENDING_MESSAGE = (
    "Reviewer account created successfully! Please wait for admin approval "
    "before you can access the system."
)


class SessionStore(Protocol):
    """Holder for the signed-in user (the browser's local storage, server side)."""

    def load(self) -> dict[str, Any] | None: ...

    def save(self, user: dict[str, Any]) -> None: ...

    def clear(self) -> None: ...


class DictSessionStore:
    """A :class:`SessionStore` over any mutable mapping.

    Streamlit passes ``st.session_state``; tests pass nothing and get a
    private dict.
    """

    def __init__(self, backing: MutableMapping | None = None, key: str = SESSION_KEY) -> None:
        self._backing = backing if backing is not None else {}
        self._key = key

    def load(self) -> dict[str, Any] | None:
        return self._backing.get(self._key)

    def save(self, user: dict[str, Any]) -> None:
        self._backing[self._key] = user

    def clear(self) -> None:
        self._backing.pop(self._key, None)


def to_session_user(user) -> dict[str, Any]:
    """Serialize a user row into the JSON-safe session dict (no password)."""
    return UserResponse.model_validate(user).model_dump(mode="json")


# ---------------------------------------------------------------------------
# Routing
# ---------------------------------------------------------------------------


def landing_page(user) -> str:
    """Return the page a user lands on after signing in.

    Deactivated accounts and reviewers awaiting approval go back to sign-in.
    """
    if not user.is_active or (user.role == "reviewer" and user.status != "active"):
        return SIGNIN_PAGE
    if not user.profile_complete:
        return PROFILE_SETUP_PAGE
    return {
        "contributor": "/speak",
        "reviewer": "/listen",
        "admin": "/admin",
    }.get(str(user.role), "/dashboard")


def guard_page(user, page: str) -> str | None:
    """Return ``None`` if *user* may view *page*, else the page to redirect to."""
    if user is None or not user.is_active:
        return SIGNIN_PAGE
    if user.role == "reviewer" and user.status != "active":
        return SIGNIN_PAGE
    if not user.profile_complete:
        return None if page == PROFILE_SETUP_PAGE else PROFILE_SETUP_PAGE
    if page.startswith("/admin") and user.role != "admin":
        return "/dashboard"
    if page == "/speak" and user.role != "contributor":
        return landing_page(user)
    if page == "/listen" and user.role != "reviewer":
        return landing_page(user)
    return None


# ---------------------------------------------------------------------------
# Auth service
# ---------------------------------------------------------------------------


class AuthService:
    """Credential checks and session bookkeeping over :class:`VoiceRepository`.

    Args:
        repository: Repository bound to the current DB session.
        admin_email: Built-in admin account, created on first admin login.
        admin_password: Password for the built-in admin account.
    """

    def __init__(
        self,
        repository: VoiceRepository,
        admin_email: str = "admin@commonvoice.org",
        admin_password: str = "admin123",
    ) -> None:
        self._repo = repository
        self._admin_email = normalize_email(admin_email)
        self._admin_password = admin_password

    async def _start_session(self, user, store: SessionStore | None) -> UserResponse:
        user = await self._repo.update_user(user.id, last_login_at=datetime.now(UTC))
        session_user = UserResponse.model_validate(user)
        if store is not None:
            store.save(session_user.model_dump(mode="json"))
        return session_user

    async def login(
        self, email: str, password: str, store: SessionStore | None = None
    ) -> AuthResponse:
        """Sign in a contributor or reviewer.

        Raises:
            InvalidRequestError: If email or password is missing.
            AuthenticationError: If the credentials do not match.
            AccountAccessError: If the account may not sign in here.
        """
        if not email or not password:
            raise InvalidRequestError("Email and password are required")

        user = await self._repo.get_user_by_email(email)
        if user is None or user.password != password:
            raise AuthenticationError()
        if user.role == "admin":
            raise AccountAccessError("Admin users must use admin login", code="ADMIN_LOGIN_REQUIRED")
        if user.role == "reviewer" and user.status == "pending":
            raise AccountAccessError(
                "Your reviewer account is pending approval. Please wait for admin approval.",
                code="ACCOUNT_PENDING",
            )
        if user.role == "reviewer" and user.status == "rejected":
            raise AccountAccessError(
                "Your reviewer application has been rejected.", code="ACCOUNT_REJECTED"
            )
        if not user.is_active:
            raise AccountAccessError(
                "Your account has been deactivated. Please contact support.",
                code="ACCOUNT_DEACTIVATED",
            )

        session_user = await self._start_session(user, store)
        logger.info("User %s signed in as %s", session_user.id, session_user.role)
        return AuthResponse(user=session_user, redirect=landing_page(session_user))

    async def admin_login(
        self, email: str, password: str, store: SessionStore | None = None
    ) -> AuthResponse:
        """Sign in an admin.

        The configured admin credentials always work and create the admin
        row on first use; any other stored admin signs in with its own
        password.
        """
        if not email or not password:
            raise InvalidRequestError("Email and password are required")

        email = normalize_email(email)
        if email == self._admin_email and password == self._admin_password:
            user = await self._repo.get_user_by_email(email)
            if user is None:
                logger.info("Creating built-in admin account %s", email)
                user = await self._repo.create_user(
                    email=email,
                    password=password,
                    role="admin",
                    status="active",
                    profile_complete=True,
                    name="System Administrator",
                )
        else:
            user = await self._repo.get_user_by_email(email)
            if user is None or user.password != password or user.role != "admin":
                raise AuthenticationError("Invalid admin credentials")
            if not user.is_active:
                raise AccountAccessError(
                    "Admin account has been deactivated", code="ACCOUNT_DEACTIVATED"
                )

        session_user = await self._start_session(user, store)
        logger.info("Admin %s signed in", session_user.id)
        return AuthResponse(user=session_user, redirect="/admin")

    async def signup(
        self,
        email: str,
        password: str,
        role: str = "contributor",
        store: SessionStore | None = None,
    ) -> AuthResponse:
        """Create a contributor or reviewer account.

        Contributors are signed in straight away. Reviewers are created
        *pending* and sent back to the sign-in page until an admin
        approves them.
        """
        if not email or not password:
            raise InvalidRequestError("Email and password are required")
        if role not in ("contributor", "reviewer"):
            raise InvalidRequestError(f"Cannot sign up with role {role!r}")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise InvalidRequestError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
            )
        if not is_valid_email(email):
            raise InvalidRequestError("Please enter a valid email address")
        if await self._repo.get_user_by_email(email) is not None:
            raise DuplicateEmailError()

        user = await self._repo.create_user(
            email=email,
            password=password,
            role=role,
            status="pending" if role == "reviewer" else "active",
            profile_complete=False,
            is_active=True,
        )
        if role == "reviewer":
            return AuthResponse(user=None, redirect=SIGNIN_PAGE, message=REVIEWER_PENDING_MESSAGE)

        session_user = UserResponse.model_validate(user)
        if store is not None:
            store.save(session_user.model_dump(mode="json"))
        return AuthResponse(user=session_user, redirect=landing_page(session_user))

    async def update_profile(
        self, user_id: str, profile: ProfileUpdate, store: SessionStore | None = None
    ) -> UserResponse:
        """Write the profile fields that were provided and refresh the session user."""
        if not is_valid_uuid(user_id):
            raise InvalidRequestError("Invalid user ID")
        user = await self._repo.update_user(user_id, **profile.model_dump(exclude_unset=True))
        session_user = UserResponse.model_validate(user)
        if store is not None:
            store.save(session_user.model_dump(mode="json"))
        return session_user

    async def restore_session(self, store: SessionStore) -> dict[str, Any] | None:
        """Re-validate the saved session user against the database.

        The saved user is replaced with fresh data when found and cleared
        when missing or malformed. A database error leaves the saved
        session in place.
        """
        saved = store.load()
        if not saved:
            return None
        if not isinstance(saved, dict) or not is_valid_uuid(saved.get("id")):
            logger.info("Clearing malformed saved session")
            store.clear()
            return None

        try:
            user = await self._repo.get_user_by_id(saved["id"])
        except SQLAlchemyError:
            logger.exception("Could not validate saved session for %s; keeping it", saved["id"])
            return saved

        if user is None:
            logger.info("Saved user %s no longer exists; clearing session", saved["id"])
            store.clear()
            return None

        session_user = to_session_user(user)
        store.save(session_user)
        return session_user

    @staticmethod
    def logout(store: SessionStore) -> None:
        store.clear()
