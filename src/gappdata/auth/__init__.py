"""Google OAuth token acquisition and persistence."""

from gappdata.auth.base import Authenticator
from gappdata.auth.implicit import (
    DEFAULT_SCOPES,
    SCOPES,
    ImplicitGrantAuthenticator,
    browser_consent_handler,
)
from gappdata.auth.token_store import FileTokenStore, MemoryTokenStore, TokenStore

__all__ = [
    "Authenticator",
    "ImplicitGrantAuthenticator",
    "browser_consent_handler",
    "SCOPES",
    "DEFAULT_SCOPES",
    "TokenStore",
    "FileTokenStore",
    "MemoryTokenStore",
]
