"""gappdata exceptions."""

from __future__ import annotations

from typing import Any


class AppDataError(Exception):
    """Base exception for gappdata errors."""

    pass


class ClientIdNotFoundError(AppDataError):
    """Raised when no OAuth client id is supplied or configured."""

    def __init__(self, env_var: str):
        self.env_var = env_var
        super().__init__(
            f"OAuth client id is required. Set {env_var} or pass client_id. "
            "Create a client id in the Google Cloud Console."
        )


class AuthenticationDenied(AppDataError):
    """Raised when the identity provider does not hand out a token."""

    pass


class HttpError(AppDataError):
    """Raised when the Drive API answers with a non-2xx status."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response: Any = None,
    ):
        self.message = message
        self.status_code = status_code
        self.response = response
        super().__init__(message)


class MalformedResponse(AppDataError):
    """Raised when a response body is not the JSON the operation expects."""

    def __init__(self, message: str, response: Any = None):
        self.response = response
        super().__init__(message)
