"""Tests for the drive API endpoints."""

import pytest
from fastapi.testclient import TestClient

from tests.fakes import FakeObjectStore, register_user

HUGE_ID = "99999999999999999999"


def upload(client, headers, *files, folder_id=None):
    """
    POST files given as (name, content, mime_type) tuples.
    """
    data = {"folderId": str(folder_id)} if folder_id is not None else {}
    return client.post(
        "/files",
        files=[("files", f) for f in files],
        data=data,
        headers=headers,
    )


def txt(name, content=b"hello"):
    return (name, content, "text/plain")


class TestHealth:
    def test_root_endpoint(self, api):
        response = api.get("/")
        assert response.status_code == 200
        assert response.json()["status"] == "running"

    def test_ready(self, api, object_store):
        response = api.get("/health/ready")
        assert response.status_code == 200
        assert response.json() == {"ready": True, "database": "ok", "objectStore": "ok"}

        object_store.healthy = False
        response = api.get("/health/ready")
        assert response.status_code == 503
        assert response.json()["objectStore"] == "error"

    def test_request_id_header(self, api):
        assert api.get("/").headers["X-Request-ID"]


class TestAuthEndpoints:
    def test_register_and_login(self, api):
        response = api.post("/auth/register", json={"username": "alice", "password": "pw123456"})
        assert response.status_code == 201
        first_key = response.json()["apiKey"]
        assert first_key.startswith("drv_")
        assert response.json()["userId"]

        response = api.post("/auth/login", json={"username": "alice", "password": "pw123456"})
        assert response.status_code == 200
        assert response.json()["apiKey"] != first_key

        stale = api.get("/files", headers={"Authorization": f"Bearer {first_key}"})
        assert stale.status_code == 401

    def test_register_duplicate(self, api):
        register_user(api, "alice")
        response = api.post("/auth/register", json={"username": "alice", "password": "other"})
        assert response.status_code == 409
        assert response.json()["code"] == "USER_ALREADY_EXISTS"

    def test_login_wrong_password(self, api):
        register_user(api, "alice", "right")
        response = api.post("/auth/login", json={"username": "alice", "password": "wrong"})
        assert response.status_code == 401
        assert response.json()["code"] == "INVALID_CREDENTIALS"

    def test_missing_or_bad_key(self, api):
        assert api.get("/files").json()["code"] == "AUTH_REQUIRED"
        response = api.get("/files", headers={"Authorization": "Bearer drv_unknown"})
        assert response.status_code == 401

    def test_malformed_body(self, api):
        response = api.post("/auth/register", content=b"{not json", headers={"Content-Type": "application/json"})
        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"


class TestUploadEndpoint:
    def test_upload_success(self, api, auth_headers):
        response = upload(api, auth_headers, txt("a.txt"), ("b.pdf", b"%PDF", "application/pdf"))

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "success"
        assert body["errors"] == []
        uploaded = {f["name"]: f for f in body["uploadedFiles"]}
        assert set(uploaded) == {"a.txt", "b.pdf"}
        assert (uploaded["a.txt"]["size"], uploaded["a.txt"]["mimeType"]) == (5, "text/plain")
        assert (uploaded["b.pdf"]["size"], uploaded["b.pdf"]["mimeType"]) == (4, "application/pdf")
        first = body["uploadedFiles"][0]
        assert {"mimeType", "isStarred", "isTrashed", "createdAt", "folderId"} <= set(first)

    def test_partial_upload_returns_207(self, api, auth_headers, object_store):
        object_store.always_fail.add("broken.txt")

        response = upload(api, auth_headers, txt("good.txt"), txt("broken.txt"))

        assert response.status_code == 207
        body = response.json()
        assert body["status"] == "partial"
        assert [f["name"] for f in body["uploadedFiles"]] == ["good.txt"]
        assert body["errors"][0]["name"] == "broken.txt"

    def test_middle_file_exhausting_retries(self, api, auth_headers, object_store):
        object_store.always_fail.add("two.txt")

        response = upload(api, auth_headers, txt("one.txt"), txt("two.txt"), txt("three.txt"))

        assert response.status_code == 207
        body = response.json()
        assert sorted(f["name"] for f in body["uploadedFiles"]) == ["one.txt", "three.txt"]
        assert [e["name"] for e in body["errors"]] == ["two.txt"]
        assert len([k for k in object_store.put_calls if k.endswith("two.txt")]) == 3
        listed = api.get("/files", headers=auth_headers).json()
        assert listed["pagination"]["totalCount"] == 2

    def test_all_uploads_failing_returns_502(self, api, auth_headers, object_store):
        object_store.always_fail.add("broken.txt")

        response = upload(api, auth_headers, txt("broken.txt"))

        assert response.status_code == 502
        assert response.json()["status"] == "failed"

    def test_no_files(self, api, auth_headers):
        response = api.post("/files", data={"folderId": ""}, headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    def test_too_many_files(self, api, auth_headers, object_store):
        response = upload(api, auth_headers, *[txt(f"{i}.txt") for i in range(11)])

        assert response.status_code == 400
        assert response.json()["code"] == "TOO_MANY_FILES"
        assert object_store.put_calls == []

    def test_invalid_files_listed(self, api, auth_headers, object_store):
        response = upload(
            api, auth_headers,
            txt("ok.txt"),
            ("page.html", b"<html>", "text/html"),
            txt("big.txt", b"x" * (1024 * 1024 + 1)),
        )

        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "INVALID_FILE"
        assert [item["name"] for item in body["details"]] == ["page.html", "big.txt"]
        assert object_store.put_calls == []

    def test_quota_exceeded(self, app_factory, object_store):
        app = app_factory(object_store=object_store, quota_limit_bytes=100)
        with TestClient(app) as client:
            headers = register_user(client)
            assert upload(client, headers, txt("a.txt", b"x" * 60)).status_code == 200

            response = upload(client, headers, txt("b.txt", b"x" * 50))

        assert response.status_code == 413
        body = response.json()
        assert body["code"] == "QUOTA_EXCEEDED"
        assert (body["currentUsage"], body["requested"], body["limit"]) == (60, 50, 100)
        assert len(object_store.put_calls) == 1

    def test_zero_quota_is_honoured(self, app_factory, object_store):
        app = app_factory(object_store=object_store, quota_limit_bytes=0)
        with TestClient(app) as client:
            headers = register_user(client)
            response = upload(client, headers, txt("a.txt", b"x"))
            profile = client.get("/user", headers=headers).json()

        assert response.status_code == 413
        assert response.json()["limit"] == 0
        assert object_store.put_calls == []
        assert (profile["storageTotal"], profile["storagePercentage"]) == (0, 0.0)

    def test_upload_into_folder(self, api, auth_headers):
        folder = api.post("/folders", json={"name": "Docs"}, headers=auth_headers).json()

        response = upload(api, auth_headers, txt("a.txt"), folder_id=folder["id"])

        assert response.json()["uploadedFiles"][0]["folderId"] == folder["id"]

    def test_upload_into_foreign_or_bad_folder(self, api, auth_headers):
        other = register_user(api, "bob")
        foreign = api.post("/folders", json={"name": "Bob's"}, headers=other).json()

        assert upload(api, auth_headers, txt("a.txt"), folder_id=foreign["id"]).status_code == 400
        assert upload(api, auth_headers, txt("a.txt"), folder_id="abc").status_code == 400
        assert upload(api, auth_headers, txt("a.txt"), folder_id=0).status_code == 400


class TestFileEndpoints:
    def uploaded(self, api, headers, name="a.txt"):
        return upload(api, headers, txt(name)).json()["uploadedFiles"][0]

    def test_list_views_and_search(self, api, auth_headers):
        a = self.uploaded(api, auth_headers, "alpha.txt")
        self.uploaded(api, auth_headers, "beta.txt")
        api.put(f"/files/{a['id']}", json={"isStarred": True}, headers=auth_headers)

        drive = api.get("/files", headers=auth_headers).json()
        assert [f["name"] for f in drive["files"]] == ["alpha.txt", "beta.txt"]
        assert drive["view"] == "my-drive"
        assert drive["pagination"] == {
            "page": 1, "limit": 50, "totalCount": 2, "totalPages": 1, "hasNext": False, "hasPrev": False,
        }

        starred = api.get("/files", params={"view": "starred"}, headers=auth_headers).json()
        assert [f["name"] for f in starred["files"]] == ["alpha.txt"]

        found = api.get("/files", params={"view": "trash", "search": "BETA"}, headers=auth_headers).json()
        assert found["view"] == "search"
        assert found["searchQuery"] == "BETA"
        assert [f["name"] for f in found["files"]] == ["beta.txt"]

    def test_lenient_listing_parameters(self, api, auth_headers):
        self.uploaded(api, auth_headers)
        response = api.get(
            "/files",
            params={"view": "nonsense", "page": "x", "limit": "1000", "sortBy": "color", "sortOrder": "up"},
            headers=auth_headers,
        )
        assert response.status_code == 200
        assert response.json()["pagination"]["limit"] == 100
        assert response.json()["view"] == "my-drive"

    def test_update_file(self, api, auth_headers):
        file = self.uploaded(api, auth_headers)
        folder = api.post("/folders", json={"name": "Docs"}, headers=auth_headers).json()

        renamed = api.put(f"/files/{file['id']}", json={"name": "renamed.txt"}, headers=auth_headers)
        assert renamed.json()["name"] == "renamed.txt"

        moved = api.put(f"/files/{file['id']}", json={"folderId": folder["id"]}, headers=auth_headers)
        assert moved.json()["folderId"] == folder["id"]

        back = api.put(f"/files/{file['id']}", json={"folderId": None}, headers=auth_headers)
        assert back.json()["folderId"] is None

        bad = api.put(f"/files/{file['id']}", json={"name": "a/b"}, headers=auth_headers)
        assert bad.status_code == 400

    def test_trash_and_restore(self, api, auth_headers):
        file = self.uploaded(api, auth_headers)

        trashed = api.put(f"/files/{file['id']}", json={"isTrashed": True}, headers=auth_headers).json()
        assert trashed["isTrashed"] and trashed["trashedAt"]
        assert api.get("/files", headers=auth_headers).json()["files"] == []
        trash = api.get("/files", params={"view": "trash"}, headers=auth_headers).json()
        assert [f["id"] for f in trash["files"]] == [file["id"]]

        download = api.get(f"/files/{file['id']}/download", headers=auth_headers)
        assert download.status_code == 410
        assert download.json()["code"] == "FILE_TRASHED"

        api.put(f"/files/{file['id']}", json={"isTrashed": False}, headers=auth_headers)
        assert len(api.get("/files", headers=auth_headers).json()["files"]) == 1

    def test_download_and_preview_urls(self, api, auth_headers):
        file = self.uploaded(api, auth_headers)

        redirect = api.get(f"/files/{file['id']}/download", headers=auth_headers, follow_redirects=False)
        assert redirect.status_code == 302
        assert "disposition=attachment" in redirect.headers["location"]

        signed = api.get(
            f"/files/{file['id']}/preview", params={"redirect": "false"}, headers=auth_headers
        ).json()
        assert "disposition=inline" in signed["url"]
        assert signed["expiresAt"]

    def test_delete_file(self, api, auth_headers, object_store):
        file = self.uploaded(api, auth_headers)

        response = api.delete(f"/files/{file['id']}", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["id"] == file["id"]
        assert api.get(f"/files/{file['id']}", headers=auth_headers).status_code == 404
        assert object_store.objects == {}

    def test_files_are_private(self, api, auth_headers):
        file = self.uploaded(api, auth_headers)
        other = register_user(api, "bob")

        assert api.get(f"/files/{file['id']}", headers=other).status_code == 404
        assert api.put(f"/files/{file['id']}", json={"name": "x.txt"}, headers=other).status_code == 404
        assert api.delete(f"/files/{file['id']}", headers=other).status_code == 404
        assert api.get("/files", params={"view": "recent"}, headers=other).json()["files"] == []

    def test_search_folds_non_ascii_case(self, api, auth_headers):
        self.uploaded(api, auth_headers, "Résumé.txt")
        self.uploaded(api, auth_headers, "resume-notes.txt")

        found = api.get("/files", params={"search": "RÉSUMÉ"}, headers=auth_headers).json()

        assert found["pagination"]["totalCount"] == 1
        assert [f["name"] for f in found["files"]] == ["Résumé.txt"]


class TestOutOfRangeNumbers:
    def test_huge_page_is_clamped(self, api, auth_headers):
        response = api.get("/files", params={"page": HUGE_ID}, headers=auth_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["files"] == []
        assert body["pagination"]["page"] == (2**63 - 1) // 50

    @pytest.mark.parametrize("path", [
        "/files/{n}", "/files/{n}/download", "/files/{n}/preview", "/folders/{n}", "/files/-{n}",
    ])
    def test_huge_path_ids_are_not_found(self, api, auth_headers, path):
        response = api.get(path.format(n=HUGE_ID), headers=auth_headers)
        assert response.status_code == 404
        assert response.json()["code"] == "NOT_FOUND"

    def test_huge_ids_in_writes(self, api, auth_headers):
        assert api.delete(f"/files/{HUGE_ID}", headers=auth_headers).status_code == 404
        assert api.delete(f"/folders/{HUGE_ID}", headers=auth_headers).status_code == 404
        assert api.put(f"/files/{HUGE_ID}", json={"name": "x.txt"}, headers=auth_headers).status_code == 404

        file = upload(api, auth_headers, txt("a.txt")).json()["uploadedFiles"][0]
        moved = api.put(f"/files/{file['id']}", json={"folderId": int(HUGE_ID)}, headers=auth_headers)
        assert moved.status_code == 400
        created = api.post("/folders", json={"name": "x", "parentId": int(HUGE_ID)}, headers=auth_headers)
        assert created.status_code == 400

    @pytest.mark.parametrize("param", ["folderId", "parentId"])
    def test_huge_query_ids_rejected(self, api, auth_headers, param):
        path = "/files" if param == "folderId" else "/folders"
        response = api.get(path, params={param: HUGE_ID}, headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    def test_huge_upload_folder_rejected(self, api, auth_headers):
        assert upload(api, auth_headers, txt("a.txt"), folder_id=HUGE_ID).status_code == 400


class TestFolderEndpoints:
    def test_create_list_and_update(self, api, auth_headers):
        parent = api.post("/folders", json={"name": "Projects"}, headers=auth_headers)
        assert parent.status_code == 201
        parent_id = parent.json()["id"]
        child = api.post("/folders", json={"name": "2024", "parentId": parent_id}, headers=auth_headers).json()

        root = api.get("/folders", headers=auth_headers).json()["folders"]
        assert [f["name"] for f in root] == ["Projects"]
        nested = api.get("/folders", params={"parentId": parent_id}, headers=auth_headers).json()["folders"]
        assert [f["id"] for f in nested] == [child["id"]]

        cycle = api.put(f"/folders/{parent_id}", json={"parentId": child["id"]}, headers=auth_headers)
        assert cycle.status_code == 400

        moved = api.put(f"/folders/{child['id']}", json={"parentId": None}, headers=auth_headers)
        assert moved.json()["parentId"] is None

    def test_delete_policies(self, api, auth_headers):
        folder = api.post("/folders", json={"name": "Docs"}, headers=auth_headers).json()
        upload(api, auth_headers, txt("a.txt"), folder_id=folder["id"])

        rejected = api.delete(f"/folders/{folder['id']}", headers=auth_headers)
        assert rejected.status_code == 409
        assert rejected.json()["code"] == "FOLDER_NOT_EMPTY"
        assert rejected.json()["fileCount"] == 1

        bad = api.delete(f"/folders/{folder['id']}", params={"policy": "shred"}, headers=auth_headers)
        assert bad.status_code == 400

        orphaned = api.delete(f"/folders/{folder['id']}", params={"policy": "orphan"}, headers=auth_headers)
        assert orphaned.status_code == 200
        assert orphaned.json()["movedFiles"] == 1
        assert len(api.get("/files", headers=auth_headers).json()["files"]) == 1

    def test_cascade_from_configuration(self, app_factory):
        store = FakeObjectStore()
        with TestClient(app_factory(object_store=store, folder_delete_policy="cascade")) as client:
            headers = register_user(client)
            folder = client.post("/folders", json={"name": "Docs"}, headers=headers).json()
            upload(client, headers, txt("a.txt"), folder_id=folder["id"])

            response = client.delete(f"/folders/{folder['id']}", headers=headers)

            assert response.json()["deletedFiles"] == 1
            assert client.get("/files", params={"view": "recent"}, headers=headers).json()["files"] == []
        assert store.objects == {}


class TestUserEndpoint:
    def test_usage(self, api, auth_headers):
        upload(api, auth_headers, txt("a.txt", b"x" * 1024))

        body = api.get("/user", headers=auth_headers).json()

        assert body["username"] == "alice"
        assert body["storageUsed"] == 1024
        assert body["storageTotal"] == 10 * 1024 * 1024
        assert body["storagePercentage"] == 0.01
