"""Integration tests for the SQLite repositories."""

import sqlite3
from datetime import timedelta

import pytest

from drive_api.database import Database
from drive_api.repositories.file_repository import FileOrdering, FilePredicate
from tests.fakes import BASE_TIME


class TestDatabase:
    def test_init_schema_is_idempotent(self, db):
        db.init_schema()
        assert db.ping()

    def test_schema_creates_parent_directory(self, tmp_path):
        database = Database(str(tmp_path / "nested" / "dir" / "drive.db"))
        database.init_schema()
        assert (tmp_path / "nested" / "dir" / "drive.db").exists()


class TestUserRepository:
    def test_lookup_by_username_key_and_id(self, user_repo):
        assert user_repo.get_by_username("alice").user_id == "user-a"
        assert user_repo.get_by_api_key("drv_key_b").username == "bob"
        assert user_repo.get_by_user_id("user-a").api_key == "drv_key_a"
        assert user_repo.get_by_username("nobody") is None

    def test_duplicate_username_rejected(self, user_repo):
        with pytest.raises(sqlite3.IntegrityError):
            user_repo.create_user("user-c", "alice", "hash", "drv_key_c", BASE_TIME)

    def test_update_api_key_invalidates_old_key(self, user_repo):
        user_repo.update_api_key("user-a", "drv_new", BASE_TIME + timedelta(hours=1))
        assert user_repo.get_by_api_key("drv_key_a") is None
        assert user_repo.get_by_api_key("drv_new").user_id == "user-a"


class TestFileRepository:
    def test_create_and_get_round_trip(self, file_repo, make_file):
        created = make_file("a.txt", size=42)
        fetched = file_repo.get_by_id(created.id, "user-a")

        assert fetched == created
        assert fetched.created_at.tzinfo is not None

    def test_get_is_scoped_to_owner(self, file_repo, make_file):
        created = make_file("a.txt")
        assert file_repo.get_by_id(created.id, "user-b") is None

    def test_update_converts_flags_and_timestamps(self, file_repo, make_file):
        created = make_file("a.txt")
        when = BASE_TIME + timedelta(days=2)

        updated = file_repo.update(created.id, "user-a", {"is_trashed": True, "trashed_at": when}, when)

        assert updated.is_trashed is True
        assert updated.trashed_at == when
        assert updated.updated_at == when

    def test_update_rejects_unknown_columns(self, file_repo, make_file):
        created = make_file("a.txt")
        with pytest.raises(ValueError):
            file_repo.update(created.id, "user-a", {"user_id": "user-b"}, BASE_TIME)

    def test_update_of_foreign_file_returns_none(self, file_repo, make_file):
        created = make_file("a.txt")
        assert file_repo.update(created.id, "user-b", {"name": "x"}, BASE_TIME) is None

    def test_delete(self, file_repo, make_file):
        created = make_file("a.txt")
        assert file_repo.delete(created.id, "user-b") is False
        assert file_repo.delete(created.id, "user-a") is True
        assert file_repo.get_by_id(created.id, "user-a") is None

    def test_predicate_always_scopes_to_owner(self):
        sql, params = FilePredicate("user-a").and_("folder_id = ?", 3).to_sql()
        assert sql == "user_id = ? AND folder_id = ?"
        assert params == ("user-a", 3)

    def test_ordering_sql(self):
        assert FileOrdering("name", case_insensitive=True).to_sql() == "casefold(name) ASC, id ASC"
        assert FileOrdering("size", descending=True).to_sql() == "size DESC, id ASC"
        with pytest.raises(ValueError):
            FileOrdering("password_hash").to_sql()

    def test_list_trashed_before_spans_users(self, file_repo, make_file):
        old = make_file("old.txt")
        bobs = make_file("bobs.txt", user_id="user-b")
        fresh = make_file("fresh.txt")
        long_ago = BASE_TIME - timedelta(days=40)
        file_repo.update(old.id, "user-a", {"is_trashed": True, "trashed_at": long_ago}, long_ago)
        file_repo.update(bobs.id, "user-b", {"is_trashed": True, "trashed_at": long_ago}, long_ago)
        file_repo.update(fresh.id, "user-a", {"is_trashed": True, "trashed_at": BASE_TIME}, BASE_TIME)

        expired = file_repo.list_trashed_before(BASE_TIME - timedelta(days=30))

        assert {f.name for f in expired} == {"old.txt", "bobs.txt"}


class TestFolderRepository:
    def test_list_by_parent_sorted_by_name(self, folder_repo):
        for name in ("zeta", "Alpha", "beta"):
            folder_repo.create(name, "user-a", None, BASE_TIME)
        folder_repo.create("other", "user-b", None, BASE_TIME)

        assert [f.name for f in folder_repo.list_by_parent("user-a", None)] == ["Alpha", "beta", "zeta"]

    def test_descendants_include_folder_itself(self, folder_repo):
        root = folder_repo.create("root", "user-a", None, BASE_TIME)
        child = folder_repo.create("child", "user-a", root.id, BASE_TIME)
        grandchild = folder_repo.create("grandchild", "user-a", child.id, BASE_TIME)
        folder_repo.create("sibling", "user-a", None, BASE_TIME)

        assert sorted(folder_repo.list_descendant_ids(root.id, "user-a")) == sorted(
            [root.id, child.id, grandchild.id]
        )
        assert folder_repo.list_descendant_ids(root.id, "user-b") == []

    def test_count_children(self, folder_repo, make_file):
        parent = folder_repo.create("parent", "user-a", None, BASE_TIME)
        folder_repo.create("child", "user-a", parent.id, BASE_TIME)
        make_file("a.txt", folder_id=parent.id)
        make_file("b.txt", folder_id=parent.id)

        assert folder_repo.count_children(parent.id, "user-a") == (2, 1)

    def test_update_moves_to_root(self, folder_repo):
        parent = folder_repo.create("parent", "user-a", None, BASE_TIME)
        child = folder_repo.create("child", "user-a", parent.id, BASE_TIME)

        moved = folder_repo.update(child.id, "user-a", {"parent_id": None}, BASE_TIME)

        assert moved.parent_id is None
