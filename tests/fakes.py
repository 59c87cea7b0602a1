"""Test doubles shared across test modules."""

from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional, Set

from drive_api.exceptions import ObjectStoreError, ObjectStoreUnavailableError
from drive_api.object_store import StoredObject

BASE_TIME = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)


async def no_sleep(delay: float) -> None:
    return None


class FakeObjectStore:
    """
    In-memory object store with scripted failures.

    Failures are keyed by a substring of the object key, normally the
    uploaded filename.
    """

    appends_extension = False

    def __init__(
        self,
        transient_failures: Optional[Dict[str, int]] = None,
        always_fail: Iterable[str] = (),
        reject: Iterable[str] = (),
        fail_deletes: bool = False,
    ):
        self.objects: Dict[str, bytes] = {}
        self.put_calls: List[str] = []
        self.delete_calls: List[str] = []
        self.transient_failures = dict(transient_failures or {})
        self.always_fail: Set[str] = set(always_fail)
        self.reject: Set[str] = set(reject)
        self.fail_deletes = fail_deletes
        self.healthy = True

    def _match(self, names: Iterable[str], key: str) -> Optional[str]:
        for name in names:
            if key.endswith(name):
                return name
        return None

    def put(self, key: str, data: bytes, content_type: str) -> StoredObject:
        self.put_calls.append(key)
        if self._match(self.reject, key):
            raise ObjectStoreError(f"Rejected {key}")
        if self._match(self.always_fail, key):
            raise ObjectStoreUnavailableError(f"Store down for {key}")
        name = self._match(self.transient_failures, key)
        if name and self.transient_failures[name] > 0:
            self.transient_failures[name] -= 1
            raise ObjectStoreUnavailableError(f"Transient failure for {key}")
        self.objects[key] = data
        return StoredObject(key=key, location=f"memory://{key}", size=len(data))

    def delete(self, key: str) -> None:
        self.delete_calls.append(key)
        if self.fail_deletes:
            raise ObjectStoreUnavailableError(f"Cannot delete {key}")
        self.objects.pop(key, None)

    def signed_url(self, key: str, expires_in: int, filename: str, disposition: str = "attachment") -> str:
        return f"https://objects.test/{key}?expires_in={expires_in}&disposition={disposition}"

    def ping(self) -> bool:
        return self.healthy


class StepClock:
    """Clock that advances one second per call, for deterministic ordering."""

    def __init__(self, start: datetime = BASE_TIME):
        self.current = start

    def __call__(self) -> datetime:
        self.current += timedelta(seconds=1)
        return self.current


def register_user(client, username: str = "alice", password: str = "secret123") -> dict:
    """
    Register a user through the API and return Authorization headers for them.
    """
    response = client.post("/auth/register", json={"username": username, "password": password})
    assert response.status_code == 201, response.text
    return {"Authorization": f"Bearer {response.json()['apiKey']}"}
