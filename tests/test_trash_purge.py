"""Tests for the trash retention purge."""

from datetime import timedelta
from unittest.mock import patch

import pytest

from drive_api.services.file_service import FileService
from drive_api.trash_purge import TrashPurger
from tests.fakes import BASE_TIME, FakeObjectStore


@pytest.fixture
def store():
    return FakeObjectStore()


@pytest.fixture
def make_purger(file_repo, folder_repo, store, fast_retry):
    def _make(retention_days=30):
        files = FileService(file_repo, folder_repo, store, delete_retry=fast_retry)
        return TrashPurger(file_repo, files, retention_days=retention_days, interval_seconds=3600,
                           clock=lambda: BASE_TIME)
    return _make


def trash(file_repo, file, when):
    file_repo.update(file.id, file.user_id, {"is_trashed": True, "trashed_at": when}, when)


class TestTrashPurger:
    @pytest.mark.asyncio
    async def test_purges_only_expired_trash(self, make_purger, file_repo, make_file, store):
        expired = make_file("expired.txt")
        recent = make_file("recent.txt")
        live = make_file("live.txt")
        bobs = make_file("bobs.txt", user_id="user-b")
        store.objects[expired.object_key] = b"x"
        trash(file_repo, expired, BASE_TIME - timedelta(days=31))
        trash(file_repo, recent, BASE_TIME - timedelta(days=29))
        trash(file_repo, bobs, BASE_TIME - timedelta(days=60))

        purged = await make_purger().purge_cycle()

        assert purged == 2
        assert file_repo.get_by_id(expired.id, "user-a") is None
        assert file_repo.get_by_id(bobs.id, "user-b") is None
        assert file_repo.get_by_id(recent.id, "user-a") is not None
        assert file_repo.get_by_id(live.id, "user-a") is not None
        assert expired.object_key not in store.objects

    @pytest.mark.asyncio
    async def test_works_through_multiple_batches(self, make_purger, file_repo, make_file):
        for i in range(5):
            trash(file_repo, make_file(f"f{i}.txt"), BASE_TIME - timedelta(days=40))

        with patch("drive_api.trash_purge.PURGE_BATCH_SIZE", 2):
            assert await make_purger().purge_cycle() == 5

    @pytest.mark.asyncio
    async def test_disabled_when_retention_is_zero(self, make_purger, file_repo, make_file):
        trash(file_repo, make_file("old.txt"), BASE_TIME - timedelta(days=400))
        purger = make_purger(retention_days=0)

        assert not purger.enabled
        assert await purger.purge_cycle() == 0
        await purger.start()
        assert purger._task is None

    @pytest.mark.asyncio
    async def test_start_and_stop(self, make_purger):
        purger = make_purger()
        await purger.start()
        assert purger._task is not None
        await purger.stop()
        assert purger._task is None
