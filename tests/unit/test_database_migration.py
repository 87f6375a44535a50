"""Tests for idempotent column migrations in init_db().

Verifies that _apply_migrations() adds the columns introduced after the
first deployed schema (users.constituency, users.last_login_at,
sentences.imported_at) to pre-existing databases without breaking fresh
databases or losing existing rows.
"""

import pytest
from sqlalchemy import DateTime, text
from sqlalchemy.ext.asyncio import create_async_engine

from src.services.storage.database import Base, init_db


def _column_names(rows: list) -> set[str]:
    """Extract column names from PRAGMA table_info result rows."""
    return {row[1] for row in rows}


@pytest.fixture
async def legacy_engine(tmp_path):
    """Create a DB with the first schema (no constituency / login / import columns)."""
    db_path = tmp_path / "legacy.db"
    engine = create_async_engine(f"sqlite+aiosqlite:///{db_path}", echo=False)
    async with engine.begin() as conn:
        await conn.execute(
            text("""
            CREATE TABLE users (
                id VARCHAR(36) PRIMARY KEY,
                email VARCHAR(255) UNIQUE,
                password VARCHAR(255),
                role VARCHAR(20),
                status VARCHAR(20) DEFAULT 'active',
                profile_complete BOOLEAN DEFAULT 0,
                name VARCHAR(255),
                age VARCHAR(20),
                gender VARCHAR(50),
                languages JSON,
                location VARCHAR(255),
                language_dialect VARCHAR(100),
                educational_background VARCHAR(100),
                employment_status VARCHAR(100),
                phone_number VARCHAR(50),
                is_active BOOLEAN DEFAULT 1,
                created_at DATETIME,
                updated_at DATETIME
            )
        """)
        )
        await conn.execute(
            text("""
            CREATE TABLE sentences (
                id VARCHAR(36) PRIMARY KEY,
                mozilla_id VARCHAR(100) UNIQUE,
                text TEXT,
                language_code VARCHAR(10) DEFAULT 'luo',
                source TEXT,
                bucket VARCHAR(50),
                hash VARCHAR(128),
                version INTEGER DEFAULT 1,
                clips_count INTEGER DEFAULT 0,
                has_valid_clip BOOLEAN DEFAULT 0,
                is_validated BOOLEAN DEFAULT 0,
                taxonomy JSON,
                metadata JSON,
                is_active BOOLEAN DEFAULT 1,
                difficulty_level VARCHAR(20) DEFAULT 'basic',
                word_count INTEGER,
                character_count INTEGER,
                created_at DATETIME,
                updated_at DATETIME
            )
        """)
        )
        await conn.execute(
            text(
                "INSERT INTO users (id, email, password, role, status) "
                "VALUES ('11111111-1111-4111-8111-111111111111', 'old@example.com', 'secret1', "
                "'contributor', 'active')"
            )
        )
    yield engine
    await engine.dispose()


class TestMigrations:
    async def test_adds_missing_columns(self, legacy_engine) -> None:
        """Legacy tables gain the new columns."""
        await init_db(legacy_engine)
        async with legacy_engine.connect() as conn:
            users = _column_names((await conn.execute(text("PRAGMA table_info(users)"))).fetchall())
            sentences = _column_names((await conn.execute(text("PRAGMA table_info(sentences)"))).fetchall())
        assert {"constituency", "last_login_at"} <= users
        assert "imported_at" in sentences

    async def test_keeps_existing_rows(self, legacy_engine) -> None:
        await init_db(legacy_engine)
        async with legacy_engine.connect() as conn:
            rows = (await conn.execute(text("SELECT email, constituency FROM users"))).fetchall()
        assert rows == [("old@example.com", None)]

    async def test_idempotent(self, legacy_engine) -> None:
        """Running init_db twice does not try to add the columns again."""
        await init_db(legacy_engine)
        await init_db(legacy_engine)

    async def test_creates_missing_tables(self, legacy_engine) -> None:
        await init_db(legacy_engine)
        async with legacy_engine.connect() as conn:
            tables = {
                row[0]
                for row in (
                    await conn.execute(text("SELECT name FROM sqlite_master WHERE type='table'"))
                ).fetchall()
            }
        assert {"users", "recordings", "reviews", "sentences"} <= tables

    async def test_fresh_database(self, tmp_path) -> None:
        engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'fresh.db'}", echo=False)
        try:
            await init_db(engine)
            async with engine.connect() as conn:
                users = _column_names((await conn.execute(text("PRAGMA table_info(users)"))).fetchall())
            assert "last_login_at" in users
        finally:
            await engine.dispose()

    async def test_added_timestamps_keep_timezone(self, legacy_engine) -> None:
        await init_db(legacy_engine)
        async with legacy_engine.connect() as conn:
            rows = (await conn.execute(text("PRAGMA table_info(users)"))).fetchall()
        types = {row[1]: row[2] for row in rows}
        assert types["last_login_at"] == "TIMESTAMP WITH TIME ZONE"


class TestSchema:
    def test_timestamp_columns_are_timezone_aware(self) -> None:
        """Rows are stamped with UTC-aware datetimes, so every column must accept them."""
        timestamp_columns = [
            column
            for table in Base.metadata.sorted_tables
            for column in table.columns
            if isinstance(column.type, DateTime)
        ]
        assert {c.name for c in timestamp_columns} >= {"created_at", "updated_at", "reviewed_at", "last_login_at"}
        assert all(c.type.timezone for c in timestamp_columns), [
            f"{c.table.name}.{c.name}" for c in timestamp_columns if not c.type.timezone
        ]
