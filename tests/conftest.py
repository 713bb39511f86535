"""Shared pytest fixtures for Studio Backend tests.

Every fixture works on an isolated temporary database and upload root, so
tests never touch the repository's data/ directory.
"""

import tempfile
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from app.blobs import BlobStore
from app.db import init_db
from app.records import RecordStore
from services.content_api.coordinator import SubmissionCoordinator
from services.content_api.main import app, override_stores


@pytest.fixture
def temp_db():
    """Create a temporary database for testing.

    Yields:
        tuple: (db_path, engine, SessionFactory)
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        db_path = Path(tmpdir) / "test.db"
        engine, SessionFactory = init_db(db_path)
        yield db_path, engine, SessionFactory
        engine.dispose()


@pytest.fixture
def record_store(temp_db):
    """RecordStore over the temporary database."""
    _, _, SessionFactory = temp_db
    return RecordStore(SessionFactory)


@pytest.fixture
def blob_store(tmp_path):
    """BlobStore rooted in a not-yet-existing temporary directory."""
    return BlobStore(tmp_path / "uploads", "/uploads")


@pytest.fixture
def coordinator(blob_store, record_store):
    """SubmissionCoordinator over the temporary stores."""
    return SubmissionCoordinator(blob_store, record_store)


@pytest.fixture
def client(record_store, blob_store):
    """Create a FastAPI test client over the temporary stores.

    Yields:
        tuple: (test_client, record_store, blob_store)
    """
    override_stores(record_store, blob_store)

    with TestClient(app) as test_client:
        yield test_client, record_store, blob_store

    override_stores(None, None)
