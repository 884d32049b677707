"""Shared fixtures: an in-memory Drive appdata backend and a scripted authenticator."""

import asyncio
import itertools
import json

import httpx
import pytest

from gappdata.auth import Authenticator
from gappdata.store import AppDataStore
from gappdata.transport import HttpxTransport

TEST_TOKEN = "test-access-token"
TEST_CLIENT_ID = "test-client-id.apps.googleusercontent.com"


class FakeDrive:
    """Just enough of the Drive v3 files API, scoped to appDataFolder."""

    def __init__(self, token: str = TEST_TOKEN):
        self.token = token
        self.files: dict[str, dict] = {}
        self.requests: list[httpx.Request] = []
        self.events: list[str] = []
        self._ids = itertools.count(1)

    @staticmethod
    def error(status: int, message: str) -> httpx.Response:
        return httpx.Response(status, json={"error": {"code": status, "message": message}})

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        self.events.append(f"request {request.method}")

        if request.headers.get("Authorization") != f"Bearer {self.token}":
            return self.error(401, "Invalid Credentials")

        path = request.url.path
        upload = path.startswith("/upload/")
        prefix = "/upload/drive/v3/files" if upload else "/drive/v3/files"
        file_id = path[len(prefix) :].lstrip("/") or None

        if file_id is None:
            if request.method == "GET":
                return self._list()
            if request.method == "POST":
                return self._create(json.loads(request.content))
            return self.error(405, "Method not allowed.")

        if file_id not in self.files:
            return self.error(404, "File not found.")

        if upload and request.method == "PATCH":
            self.files[file_id]["content"] = request.content
            self._touch(file_id)
            return httpx.Response(200, json={"id": file_id})
        if request.method == "GET" and request.url.params.get("alt") == "media":
            return httpx.Response(200, content=self.files[file_id]["content"])
        if request.method == "PATCH":
            self.files[file_id]["name"] = json.loads(request.content)["name"]
            self._touch(file_id)
            return httpx.Response(200, json={"id": file_id})
        if request.method == "DELETE":
            del self.files[file_id]
            return httpx.Response(204)
        return self.error(405, "Method not allowed.")

    def _touch(self, file_id: str) -> None:
        self.files[file_id]["modifiedTime"] = f"2024-05-01T12:00:{len(self.requests):02d}.000Z"

    def _list(self) -> httpx.Response:
        files = [
            {"id": fid, "name": f["name"], "modifiedTime": f["modifiedTime"]}
            for fid, f in self.files.items()
        ]
        return httpx.Response(200, json={"files": files})

    def _create(self, metadata: dict) -> httpx.Response:
        file_id = f"file-{next(self._ids)}"
        self.files[file_id] = {
            "name": metadata["name"],
            "parents": metadata.get("parents"),
            "content": b"",
            "modifiedTime": "2024-05-01T12:00:00.000Z",
        }
        return httpx.Response(200, json={"id": file_id, "name": metadata["name"]})


class FakeAuthenticator(Authenticator):
    """Hands out a fixed token and records every call."""

    def __init__(self, token: str = TEST_TOKEN, error: Exception | None = None, delay: float = 0):
        self.token = token
        self.error = error
        self.delay = delay
        self.acquire_calls: list[str] = []
        self.revoked: list[str] = []
        self.events: list[str] | None = None

    async def acquire_token(self, client_id: str) -> str:
        self.acquire_calls.append(client_id)
        if self.events is not None:
            self.events.append("authenticate")
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        return self.token

    async def revoke_token(self, token: str) -> None:
        self.revoked.append(token)


def make_store(drive: FakeDrive, authenticator: Authenticator, **kwargs) -> AppDataStore:
    """Build a store whose transport talks to the fake backend."""
    client = httpx.AsyncClient(transport=httpx.MockTransport(drive.handle))
    return AppDataStore(
        client_id=TEST_CLIENT_ID,
        authenticator=authenticator,
        transport=HttpxTransport(client),
        **kwargs,
    )


@pytest.fixture
def drive():
    """Empty in-memory Drive backend."""
    return FakeDrive()


@pytest.fixture
def authenticator(drive):
    """Authenticator sharing the backend's event log."""
    auth = FakeAuthenticator()
    auth.events = drive.events
    return auth


@pytest.fixture
def store(drive, authenticator):
    """Store wired to the fake backend."""
    return make_store(drive, authenticator)
