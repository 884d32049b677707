"""Store JSON documents in a user's Google Drive application data folder."""

from gappdata.auth import (
    Authenticator,
    FileTokenStore,
    ImplicitGrantAuthenticator,
    MemoryTokenStore,
    TokenStore,
)
from gappdata.exceptions import (
    AppDataError,
    AuthenticationDenied,
    ClientIdNotFoundError,
    HttpError,
    MalformedResponse,
)
from gappdata.store import AppDataStore, FileDescriptor, Session, build_url
from gappdata.transport import HttpxTransport, Transport

__all__ = [
    "AppDataStore",
    "FileDescriptor",
    "Session",
    "build_url",
    "Authenticator",
    "ImplicitGrantAuthenticator",
    "TokenStore",
    "FileTokenStore",
    "MemoryTokenStore",
    "Transport",
    "HttpxTransport",
    "AppDataError",
    "AuthenticationDenied",
    "ClientIdNotFoundError",
    "HttpError",
    "MalformedResponse",
]
