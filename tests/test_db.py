"""Tests for app.db module."""

from pathlib import Path

from sqlalchemy import inspect, text

from app.config import DB_PATH
from app.db import get_database_url, init_db


class TestDatabaseUrl:
    """Tests for get_database_url."""

    def test_default_path(self):
        """Should use config.DB_PATH by default."""
        assert get_database_url() == f"sqlite:///{DB_PATH}"

    def test_override(self):
        """Should use the given path."""
        assert get_database_url("/tmp/x.db") == "sqlite:////tmp/x.db"


class TestInitDb:
    """Tests for database initialization."""

    def test_creates_database_file(self, temp_db):
        """init_db should create the database file."""
        db_path, _, _ = temp_db
        assert db_path.exists()

    def test_creates_parent_directory(self, tmp_path):
        """init_db should create a missing data directory."""
        db_path = tmp_path / "nested" / "studio.db"

        engine, _ = init_db(db_path)
        engine.dispose()

        assert Path(db_path).exists()

    def test_creates_all_tables(self, temp_db):
        """init_db should create the profiles and posts tables."""
        _, engine, _ = temp_db

        tables = inspect(engine).get_table_names()

        assert "profiles" in tables
        assert "posts" in tables

    def test_posts_use_autoincrement(self, temp_db):
        """posts ids must never be reused (SQLite AUTOINCREMENT)."""
        _, engine, _ = temp_db

        with engine.connect() as conn:
            ddl = conn.execute(
                text("SELECT sql FROM sqlite_master WHERE type='table' AND name='posts'")
            ).scalar_one()

        assert "AUTOINCREMENT" in ddl.upper()

    def test_idempotent(self, temp_db):
        """init_db should be safe to call multiple times."""
        db_path, _, _ = temp_db

        engine2, _ = init_db(db_path)

        assert "posts" in inspect(engine2).get_table_names()
        engine2.dispose()
