"""JSON documents in the Google Drive application data folder.

Usage:
    from gappdata.store import AppDataStore

    async with AppDataStore(client_id) as store:
        file_id = await store.create("settings.json")
        await store.update(file_id, {"theme": "dark"})
        settings = await store.get(file_id)

OAuth Setup:
    1. Create an OAuth client id in the Google Cloud Console
    2. Configure: export GAPPDATA_CLIENT_ID=... (or put it in ~/.gappdata/.env)
    3. Authorize: gappdata login
"""

from __future__ import annotations

from gappdata.store.client import (
    APP_DATA_FOLDER,
    DEFAULT_FILE_NAME,
    AppDataStore,
    FileDescriptor,
    Session,
    validate_response,
)
from gappdata.store.urls import FILES_URL, UPLOAD_FILES_URL, build_url

__all__ = [
    "AppDataStore",
    "FileDescriptor",
    "Session",
    "validate_response",
    "build_url",
    "FILES_URL",
    "UPLOAD_FILES_URL",
    "APP_DATA_FOLDER",
    "DEFAULT_FILE_NAME",
]
