"""Tests for single-file operations."""

from dataclasses import replace
from datetime import timedelta

import pytest

from drive_api.exceptions import FileTrashedError, NotFoundError, ValidationError
from drive_api.object_store import DISPOSITION_INLINE
from drive_api.services.file_service import FileService
from tests.fakes import BASE_TIME, FakeObjectStore, StepClock


@pytest.fixture
def store():
    return FakeObjectStore()


@pytest.fixture
def service(file_repo, folder_repo, store, fast_retry):
    return FileService(
        file_repo, folder_repo, store, delete_retry=fast_retry, url_ttl_seconds=600,
        clock=StepClock(BASE_TIME + timedelta(days=1)),
    )


class TestUpdateFile:
    def test_rename_trims_whitespace(self, service, make_file):
        file = make_file("a.txt")
        assert service.update_file("user-a", file.id, {"name": "  b.txt "}).name == "b.txt"

    @pytest.mark.parametrize("bad_name", ["", "   ", "a/b.txt", "what?.txt", "x" * 256])
    def test_invalid_names_rejected(self, service, make_file, bad_name):
        file = make_file("a.txt")
        with pytest.raises(ValidationError):
            service.update_file("user-a", file.id, {"name": bad_name})

    def test_trash_records_time_and_restore_clears_it(self, service, make_file):
        file = make_file("a.txt")

        trashed = service.update_file("user-a", file.id, {"is_trashed": True})
        assert trashed.is_trashed
        assert trashed.trashed_at is not None

        restored = service.update_file("user-a", file.id, {"is_trashed": False})
        assert not restored.is_trashed
        assert restored.trashed_at is None

    def test_star_and_unstar(self, service, make_file):
        file = make_file("a.txt")
        assert service.update_file("user-a", file.id, {"is_starred": True}).is_starred
        assert not service.update_file("user-a", file.id, {"is_starred": False}).is_starred

    def test_star_round_trip_only_touches_updated_at(self, service, make_file):
        file = make_file("a.txt", size=42, mime_type="text/plain")

        service.update_file("user-a", file.id, {"is_starred": True})
        restored = service.update_file("user-a", file.id, {"is_starred": False})

        assert restored.updated_at > file.updated_at
        assert replace(restored, updated_at=file.updated_at) == file

    def test_move_into_own_folder_and_back_to_root(self, service, make_file, folder_repo):
        file = make_file("a.txt")
        folder = folder_repo.create("Docs", "user-a", None, StepClock()())

        assert service.update_file("user-a", file.id, {"folder_id": folder.id}).folder_id == folder.id
        assert service.update_file("user-a", file.id, {"folder_id": None}).folder_id is None

    def test_move_into_foreign_folder_rejected(self, service, make_file, folder_repo):
        file = make_file("a.txt")
        foreign = folder_repo.create("Bob's", "user-b", None, StepClock()())

        with pytest.raises(ValidationError, match="Folder not found"):
            service.update_file("user-a", file.id, {"folder_id": foreign.id})

    def test_foreign_file_not_found(self, service, make_file):
        file = make_file("a.txt", user_id="user-b")
        with pytest.raises(NotFoundError):
            service.update_file("user-a", file.id, {"name": "mine.txt"})

    def test_unknown_fields_rejected(self, service, make_file):
        file = make_file("a.txt")
        with pytest.raises(ValidationError):
            service.update_file("user-a", file.id, {"size": 1})

    def test_update_bumps_updated_at(self, service, make_file):
        file = make_file("a.txt")
        assert service.update_file("user-a", file.id, {"is_starred": True}).updated_at > file.updated_at


class TestDeleteFile:
    @pytest.mark.asyncio
    async def test_delete_removes_row_and_object(self, service, make_file, file_repo, store):
        file = make_file("a.txt")
        store.objects[file.object_key] = b"data"

        await service.delete_file("user-a", file.id)

        assert file_repo.get_by_id(file.id, "user-a") is None
        assert file.object_key not in store.objects

    @pytest.mark.asyncio
    async def test_object_delete_failure_still_removes_row(self, service, make_file, file_repo, store):
        store.fail_deletes = True
        file = make_file("a.txt")

        await service.delete_file("user-a", file.id)

        assert file_repo.get_by_id(file.id, "user-a") is None
        assert store.delete_calls == [file.object_key] * 3

    @pytest.mark.asyncio
    async def test_delete_foreign_file_not_found(self, service, make_file):
        file = make_file("a.txt", user_id="user-b")
        with pytest.raises(NotFoundError):
            await service.delete_file("user-a", file.id)


class TestSignedUrl:
    @pytest.mark.asyncio
    async def test_signed_url_carries_ttl_and_disposition(self, service, make_file):
        file = make_file("a.txt")

        signed = await service.signed_url("user-a", file.id, DISPOSITION_INLINE)

        assert file.object_key in signed.url
        assert "expires_in=600" in signed.url
        assert "disposition=inline" in signed.url
        assert signed.expires_at.tzinfo is not None

    @pytest.mark.asyncio
    async def test_trashed_file_has_no_url(self, service, make_file):
        file = make_file("a.txt")
        service.update_file("user-a", file.id, {"is_trashed": True})

        with pytest.raises(FileTrashedError):
            await service.signed_url("user-a", file.id)
