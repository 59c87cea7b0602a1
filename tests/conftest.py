"""Shared pytest fixtures for all tests."""

from datetime import datetime, timedelta
from typing import Optional

import pytest
from fastapi.testclient import TestClient

from drive_api.database import Database
from drive_api.main import create_app
from drive_api.repositories import SqliteFileRepository, SqliteFolderRepository, SqliteUserRepository
from drive_api.retry import RetryPolicy
from drive_api.services.upload_validator import UploadValidator
from drive_cli.config import Config
from drive_common.constants import MIB
from tests.fakes import BASE_TIME, FakeObjectStore, no_sleep, register_user

TEST_MIME_TYPES = ("text/plain", "application/pdf", "image/*")


@pytest.fixture
def db(tmp_path) -> Database:
    """
    Create a temporary initialized database with two users.
    """
    database = Database(str(tmp_path / "drive.db"))
    database.init_schema()
    users = SqliteUserRepository(database)
    users.create_user("user-a", "alice", "hash", "drv_key_a", BASE_TIME)
    users.create_user("user-b", "bob", "hash", "drv_key_b", BASE_TIME)
    return database


@pytest.fixture
def user_repo(db):
    return SqliteUserRepository(db)


@pytest.fixture
def folder_repo(db):
    return SqliteFolderRepository(db)


@pytest.fixture
def file_repo(db):
    return SqliteFileRepository(db)


@pytest.fixture
def make_file(file_repo):
    """
    Factory inserting file rows directly, bypassing the upload pipeline.
    """
    counter = {"n": 0}

    def _make(
        name: str,
        user_id: str = "user-a",
        size: int = 100,
        mime_type: str = "text/plain",
        folder_id: Optional[int] = None,
        created_at: Optional[datetime] = None,
    ):
        counter["n"] += 1
        stamp = created_at or BASE_TIME + timedelta(minutes=counter["n"])
        return file_repo.create(
            name=name,
            original_name=name,
            mime_type=mime_type,
            size=size,
            path=f"memory://{name}",
            object_key=f"drive/{user_id}/{counter['n']}-{name}",
            user_id=user_id,
            folder_id=folder_id,
            created_at=stamp,
        )

    return _make


@pytest.fixture
def fast_retry() -> RetryPolicy:
    return RetryPolicy(max_attempts=3, base_delay=0.01, sleep=no_sleep)


@pytest.fixture
def object_store() -> FakeObjectStore:
    return FakeObjectStore()


@pytest.fixture
def upload_validator() -> UploadValidator:
    return UploadValidator(max_files=10, max_file_size=MIB, allowed_mime_types=TEST_MIME_TYPES)


@pytest.fixture
def app_factory(tmp_path, fast_retry, upload_validator):
    """
    Build apps around a temporary database; keyword arguments override defaults.
    """
    def _build(**overrides):
        options = {
            "database_path": str(tmp_path / "api.db"),
            "object_store": FakeObjectStore(),
            "retry_policy": fast_retry,
            "validator": upload_validator,
            "quota_limit_bytes": 10 * MIB,
            "folder_delete_policy": "reject",
            "run_background_tasks": False,
        }
        options.update(overrides)
        return create_app(**options)

    return _build


@pytest.fixture
def api(app_factory, object_store):
    """
    TestClient for an app backed by the shared fake object store.
    """
    app = app_factory(object_store=object_store)
    with TestClient(app) as client:
        yield client


@pytest.fixture
def auth_headers(api) -> dict:
    return register_user(api)


@pytest.fixture
def temp_config_dir(tmp_path):
    """
    Create temporary config directory.
    """
    config_dir = tmp_path / '.clouddrive'
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def temp_config(temp_config_dir):
    return Config(temp_config_dir / 'config.json')


@pytest.fixture
def sample_file(tmp_path):
    """
    Create a sample file for testing file uploads.
    """
    file_path = tmp_path / 'test.txt'
    file_path.write_text('Sample content for testing')
    return file_path
