"""
Sign-in, sign-up and page-guard endpoints.

The API keeps no session: responses carry the session user and the page
to go to, and the client stores the user itself.
"""

import logging

from fastapi import APIRouter

from src.core.config import get_settings
from src.core.exceptions import UserNotFoundError
from src.core.models import (
    AuthResponse,
    GuardRequest,
    GuardResponse,
    LoginRequest,
    SignupRequest,
    UserResponse,
)
from src.services.auth import AuthService, DictSessionStore, guard_page, landing_page
from src.services.storage.database import get_session
from src.services.storage.repository import VoiceRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _service(session) -> AuthService:
    settings = get_settings()
    return AuthService(
        VoiceRepository(session),
        admin_email=settings.admin_email,
        admin_password=settings.admin_password,
    )


@router.post("/signup", response_model=AuthResponse, status_code=201)
async def signup(body: SignupRequest):
    """Create a contributor (signed in) or a reviewer (pending approval)."""
    async with get_session() as session:
        return await _service(session).signup(body.email, body.password, body.role)


@router.post("/login", response_model=AuthResponse)
async def login(body: LoginRequest):
    async with get_session() as session:
        return await _service(session).login(body.email, body.password)


@router.post("/admin-login", response_model=AuthResponse)
async def admin_login(body: LoginRequest):
    async with get_session() as session:
        return await _service(session).admin_login(body.email, body.password)


@router.get("/session/{user_id}", response_model=AuthResponse)
async def restore_session(user_id: str):
    """Refresh a saved session user from the database.

    Returns 404 when the user no longer exists, so the client clears its
    saved session.
    """
    store = DictSessionStore()
    store.save({"id": user_id})
    async with get_session() as session:
        restored = await _service(session).restore_session(store)
    if restored is None or store.load() is None:
        raise UserNotFoundError(user_id)
    user = UserResponse.model_validate(restored)
    return AuthResponse(user=user, redirect=landing_page(user))


@router.post("/guard", response_model=GuardResponse)
async def guard(body: GuardRequest):
    """Decide whether the given user may open *page*."""
    user = None
    if body.user_id:
        async with get_session() as session:
            row = await VoiceRepository(session).get_user_by_id(body.user_id)
            if row is not None:
                user = UserResponse.model_validate(row)
    redirect = guard_page(user, body.page)
    return GuardResponse(allowed=redirect is None, redirect=redirect)
