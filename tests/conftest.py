"""Shared pytest fixtures for the VoiceCollect test suite.

Provides the in-memory database, a repository bound to it, a few seeded
users, and WAV clips for the audio helpers.
"""

import io
import math
import struct
import wave

import pytest

# ---------------------------------------------------------------------------
# Audio Fixtures
# ---------------------------------------------------------------------------

SAMPLE_RATE = 16000


def _wav(frames: bytes, sample_rate: int = SAMPLE_RATE) -> bytes:
    buf = io.BytesIO()
    with wave.open(buf, "wb") as wf:
        wf.setnchannels(1)
        wf.setsampwidth(2)
        wf.setframerate(sample_rate)
        wf.writeframes(frames)
    return buf.getvalue()


@pytest.fixture
def sine_wav_bytes():
    """Two seconds of a 440Hz tone as a 16kHz mono 16-bit WAV file.

    Returns:
        bytes: Complete WAV file contents.
    """
    amplitude = 16000  # ~50% of max int16
    samples = [
        struct.pack("<h", int(amplitude * math.sin(2 * math.pi * 440.0 * i / SAMPLE_RATE)))
        for i in range(SAMPLE_RATE * 2)
    ]
    return _wav(b"".join(samples))


@pytest.fixture
def silent_wav_bytes():
    """One second of digital silence as a WAV file."""
    return _wav(b"\x00\x00" * SAMPLE_RATE)


# ---------------------------------------------------------------------------
# Database Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
async def db_engine():
    """Create an in-memory SQLite async engine with tables, dispose after test."""
    from sqlalchemy.ext.asyncio import create_async_engine

    from src.services.storage.database import Base

    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def db_session(db_engine):
    """Yield an AsyncSession bound to the test engine; rolls back after test."""
    from sqlalchemy.ext.asyncio import async_sessionmaker

    factory = async_sessionmaker(db_engine, expire_on_commit=False)
    async with factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def repository(db_session):
    """Return a VoiceRepository bound to the test session (3 contributors per sentence)."""
    from src.services.storage.repository import VoiceRepository

    return VoiceRepository(db_session, max_contributors=3)


@pytest.fixture
async def contributor(repository):
    """An active contributor with a completed profile."""
    return await repository.create_user(
        "Achieng@Example.com", "secret1", "contributor", profile_complete=True, name="Achieng"
    )


@pytest.fixture
async def reviewer(repository):
    """An approved (active) reviewer with a completed profile."""
    return await repository.create_user(
        "otieno@example.com", "secret1", "reviewer", status="active", profile_complete=True, name="Otieno"
    )
