"""JSON document store on top of the Drive application data folder."""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any

import httpx

from gappdata.auth import Authenticator, ImplicitGrantAuthenticator, TokenStore
from gappdata.config import get_client_id
from gappdata.exceptions import HttpError, MalformedResponse
from gappdata.store.urls import FILES_URL, UPLOAD_FILES_URL, build_url
from gappdata.transport import HttpxTransport, Transport

logger = logging.getLogger(__name__)

APP_DATA_FOLDER = "appDataFolder"
DEFAULT_FILE_NAME = "name_not_set"

LIST_FIELDS = "files/name,files/id,files/modifiedTime"


@dataclass
class FileDescriptor:
    """Metadata of a document in the application data folder."""

    id: str
    name: str
    modified_time: datetime | None = None


@dataclass
class Session:
    """Token state owned by one store."""

    client_id: str
    token: str | None = None
    response: httpx.Response | None = None


def validate_response(response: httpx.Response) -> None:
    """Raise unless the response status is 2xx.

    The provider's ``error.message`` is used when the body carries one.

    Raises:
        HttpError: For any status outside 200-299.
    """
    status = response.status_code
    if 200 <= status <= 299:
        return

    message = f"HTTP {status}"
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            message = error["message"]

    raise HttpError(message, status_code=status, response=response)


def _decode_json(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError as e:
        raise MalformedResponse(f"Response body is not valid JSON: {e}", response=response) from e


class AppDataStore:
    """Store JSON documents in the Google Drive application data folder.

    A token is acquired on first use (or read from the token store) and
    reused until revoked. Every call is a single round trip; nothing is
    cached locally.

    Usage:
        async with AppDataStore(client_id) as store:
            file_id = await store.create("settings.json")
            await store.update(file_id, {"theme": "dark"})
            settings = await store.get(file_id)

            for f in await store.list():
                print(f.id, f.name, f.modified_time)

            await store.rename(file_id, "prefs.json")
            await store.delete(file_id)

    Note:
        A 401 is raised like any other HttpError. Call reauthenticate()
        and retry when a token has expired.
    """

    def __init__(
        self,
        client_id: str | None = None,
        authenticator: Authenticator | None = None,
        transport: Transport | None = None,
        token_store: TokenStore | None = None,
    ) -> None:
        """Initialize the store.

        Args:
            client_id: OAuth client id. Falls back to GAPPDATA_CLIENT_ID.
            authenticator: Token source. Defaults to the implicit grant flow.
            transport: HTTP transport. Defaults to an httpx-backed transport
                owned (and closed) by this store.
            token_store: Optional slot persisting the token across runs.
        """
        self.session = Session(client_id=get_client_id(client_id))
        self._authenticator = authenticator or ImplicitGrantAuthenticator()
        self._owns_transport = transport is None
        self._transport = transport or HttpxTransport()
        self._token_store = token_store
        self._acquisition: asyncio.Future[str] | None = None

        if token_store is not None:
            self.session.token = token_store.load()

    @property
    def client_id(self) -> str:
        """The OAuth client id."""
        return self.session.client_id

    @property
    def response(self) -> httpx.Response | None:
        """Raw response of the last API call."""
        return self.session.response

    @property
    def access_token(self) -> str | None:
        """The cached access token, if any."""
        return self.session.token

    @access_token.setter
    def access_token(self, value: str | None) -> None:
        self.session.token = value
        if self._token_store is None:
            return
        if value:
            self._token_store.save(value)
        else:
            self._token_store.clear()

    # =========================================================================
    # Token lifecycle
    # =========================================================================

    async def ensure_authenticated(self) -> str:
        """Return the cached token, acquiring one first if there is none.

        Concurrent callers await the same in-flight acquisition, so a
        denied consent surfaces to all of them from a single prompt.

        Raises:
            AuthenticationDenied: If the authenticator does not issue a token.
        """
        if self.session.token:
            return self.session.token

        if self._acquisition is None:
            self._acquisition = asyncio.ensure_future(self._acquire_token())
        # Shielded so one cancelled caller does not cancel the shared flow
        return await asyncio.shield(self._acquisition)

    async def _acquire_token(self) -> str:
        try:
            logger.info("No cached token, starting authentication")
            self.access_token = await self._authenticator.acquire_token(self.client_id)
            return self.session.token
        finally:
            self._acquisition = None

    async def reauthenticate(self) -> str:
        """Drop the cached token and acquire a new one."""
        self.access_token = None
        return await self.ensure_authenticated()

    async def revoke(self) -> None:
        """Revoke the token and clear it locally, including the token store."""
        token = self.session.token
        try:
            if token:
                await self._authenticator.revoke_token(token)
            else:
                logger.warning("No token to revoke")
        finally:
            self.access_token = None

    # =========================================================================
    # Requests
    # =========================================================================

    async def _request(
        self,
        method: str,
        url: str,
        body: str | bytes | None = None,
        accept_json: bool = False,
    ) -> httpx.Response:
        token = await self.ensure_authenticated()

        headers = {"Authorization": f"Bearer {token}"}
        if accept_json:
            headers["Accept"] = "application/json"
        if body is not None:
            headers["Content-Type"] = "application/json"

        response = await self._transport.send(method, url, headers, body)
        self.session.response = response
        validate_response(response)
        return response

    # =========================================================================
    # Files
    # =========================================================================

    async def list(self) -> list[FileDescriptor]:
        """List all documents in the application data folder.

        Returns:
            FileDescriptor for each document.
        """
        params = {"spaces": APP_DATA_FOLDER, "fields": LIST_FIELDS}
        response = await self._request("GET", build_url(FILES_URL, params=params))

        data = _decode_json(response)
        if not isinstance(data, dict):
            raise MalformedResponse("Expected a JSON object listing files", response=response)
        files = data.get("files", [])
        if not isinstance(files, list):
            raise MalformedResponse("Expected 'files' to be a JSON array", response=response)
        return [self._parse_file(item, response) for item in files]

    async def get(self, file_id: str) -> Any:
        """Retrieve the JSON contents of a document.

        Args:
            file_id: Id returned by list() or create().

        Returns:
            The decoded document; an empty file decodes to {}.
        """
        params = {"spaces": APP_DATA_FOLDER, "alt": "media"}
        response = await self._request("GET", build_url(FILES_URL, file_id, params))

        if not response.content:
            return {}
        return _decode_json(response)

    async def create(self, name: str = DEFAULT_FILE_NAME) -> str:
        """Create an empty document.

        Args:
            name: File name for the new document.

        Returns:
            Id of the new document.
        """
        body = json.dumps({"name": name, "parents": [APP_DATA_FOLDER]})
        response = await self._request("POST", build_url(FILES_URL), body, accept_json=True)

        data = _decode_json(response)
        if not isinstance(data, dict) or "id" not in data:
            raise MalformedResponse("Create response carries no file id", response=response)

        logger.info(f"Created {name} ({data['id']})")
        return data["id"]

    async def update(self, file_id: str, contents: Any) -> None:
        """Replace the contents of a document.

        Args:
            file_id: Id returned by list() or create().
            contents: JSON text (str or bytes), sent as is, or any other
                JSON-serializable value, which is serialized first.
        """
        if isinstance(contents, (str, bytes)):
            body = contents
        else:
            body = json.dumps(contents)

        await self._request("PATCH", build_url(UPLOAD_FILES_URL, file_id), body)

    async def delete(self, file_id: str) -> None:
        """Delete a document."""
        await self._request("DELETE", build_url(FILES_URL, file_id))
        logger.info(f"Deleted {file_id}")

    async def rename(self, file_id: str, name: str) -> None:
        """Rename a document.

        Args:
            file_id: Id returned by list() or create().
            name: The new file name.
        """
        body = json.dumps({"name": name})
        await self._request("PATCH", build_url(FILES_URL, file_id), body, accept_json=True)

    def _parse_file(self, data: Any, response: httpx.Response) -> FileDescriptor:
        """Parse file metadata from API response."""
        if not isinstance(data, dict) or not isinstance(data.get("id"), str):
            raise MalformedResponse(f"File entry carries no id: {data!r}", response=response)

        name = data.get("name", "")
        if not isinstance(name, str):
            raise MalformedResponse(f"File {data['id']} has a non-text name", response=response)

        raw_time = data.get("modifiedTime")
        if raw_time is not None and not isinstance(raw_time, str):
            raise MalformedResponse(
                f"File {data['id']} has a non-text modifiedTime", response=response
            )

        # Unparseable timestamps are dropped, the file is still listed
        modified_time = None
        if raw_time:
            with contextlib.suppress(ValueError):
                modified_time = datetime.fromisoformat(raw_time.replace("Z", "+00:00"))

        return FileDescriptor(id=data["id"], name=name, modified_time=modified_time)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def aclose(self) -> None:
        """Close the transport if this store created it."""
        if self._owns_transport:
            await self._transport.aclose()

    async def __aenter__(self) -> AppDataStore:
        return self

    async def __aexit__(self, *args) -> None:
        await self.aclose()
