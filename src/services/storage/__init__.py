"""
Storage module - Database engine, ORM models and repository.
"""

from src.services.storage.database import (
    Base,
    close_db,
    get_engine,
    get_session,
    init_db,
    reset_engine,
)
from src.services.storage.models_db import Recording, Review, Sentence, User
from src.services.storage.repository import VoiceRepository

__all__ = [
    "Base",
    "Recording",
    "Review",
    "Sentence",
    "User",
    "VoiceRepository",
    "close_db",
    "get_engine",
    "get_session",
    "init_db",
    "reset_engine",
]
