"""OAuth 2.0 implicit-grant authentication for Google APIs.

The implicit grant hands the access token straight back in the fragment of
the redirect URL; there is no client secret and no refresh token. Getting
the redirect URL back from the user's browser is the job of a consent
handler, a callable that receives the authorization URL and a one-shot
callback to report the redirect URL (or an exception) on.

Example:
    >>> auth = ImplicitGrantAuthenticator(scopes=["drive_appdata"])
    >>> token = await auth.acquire_token("1234.apps.googleusercontent.com")
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import threading
import webbrowser
from collections.abc import AsyncIterator, Callable
from typing import Union
from urllib.parse import parse_qsl, urlparse

import httpx
from authlib.integrations.httpx_client import AsyncOAuth2Client
from authlib.oauth2 import OAuth2Error
from authlib.oauth2.rfc6749.parameters import parse_implicit_response

from gappdata.auth.base import Authenticator
from gappdata.exceptions import AuthenticationDenied

logger = logging.getLogger(__name__)

ConsentCallback = Callable[[Union[str, BaseException]], None]
ConsentHandler = Callable[[str, ConsentCallback], None]


SCOPES = {
    "drive": "https://www.googleapis.com/auth/drive",
    "drive_readonly": "https://www.googleapis.com/auth/drive.readonly",
    "drive_file": "https://www.googleapis.com/auth/drive.file",
    "drive_appdata": "https://www.googleapis.com/auth/drive.appdata",
}

DEFAULT_SCOPES = ["drive_file", "drive_appdata"]


def browser_consent_handler(
    url: str, callback: ConsentCallback, open_browser: bool = True
) -> None:
    """Open the consent page and read the pasted redirect URL from stdin.

    Runs on a daemon thread so the event loop stays free while the user is
    in the browser.
    """

    def run() -> None:
        try:
            print(f"Authorization URL:\n{url}\n")
            if open_browser:
                webbrowser.open(url)
            redirect_url = input("Paste redirect URL: ").strip()
        except (EOFError, OSError) as e:
            callback(e)
            return
        callback(redirect_url)

    threading.Thread(target=run, name="gappdata-consent", daemon=True).start()


class ImplicitGrantAuthenticator(Authenticator):
    """Google OAuth implicit-grant authenticator.

    Handles the consent flow, token revocation and token verification.

    Example:
        >>> auth = ImplicitGrantAuthenticator()
        >>> token = await auth.acquire_token(client_id)
        >>> await auth.verify_token(token)
        True
        >>> await auth.revoke_token(token)
    """

    AUTHORIZE_URL = "https://accounts.google.com/o/oauth2/v2/auth"
    REVOKE_URL = "https://oauth2.googleapis.com/revoke"
    TOKENINFO_URL = "https://www.googleapis.com/oauth2/v1/tokeninfo"

    def __init__(
        self,
        scopes: list[str] | None = None,
        redirect_uri: str = "http://localhost",
        consent_handler: ConsentHandler | None = None,
        consent_timeout: float | None = 300.0,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ):
        """Initialize the authenticator.

        Args:
            scopes: Scope names (e.g., ["drive_appdata"]) or full URLs.
                   If None, defaults to ["drive_file", "drive_appdata"].
            redirect_uri: Redirect URI registered for the OAuth client.
            consent_handler: Callable receiving the authorization URL and a
                   callback. Defaults to opening a browser and reading stdin.
            consent_timeout: Seconds to wait for the consent callback, or None
                   to wait indefinitely.
            http_client: Client used for revoke/verify calls. A short-lived
                   client is created per call when omitted.
            timeout: Timeout in seconds for revoke/verify calls.
        """
        self.scopes = self._resolve_scopes(scopes or DEFAULT_SCOPES)
        self.redirect_uri = redirect_uri
        self.consent_handler = consent_handler or browser_consent_handler
        self.consent_timeout = consent_timeout
        self.timeout = timeout
        self._http_client = http_client

    def _resolve_scopes(self, scopes: list[str]) -> list[str]:
        """Resolve scope names to full URLs."""
        resolved = []
        for scope in scopes:
            if scope.startswith("https://"):
                resolved.append(scope)
            elif scope in SCOPES:
                resolved.append(SCOPES[scope])
            else:
                raise ValueError(
                    f"Unknown scope: {scope}. Use full URL or one of: {list(SCOPES.keys())}"
                )
        return resolved

    @contextlib.asynccontextmanager
    async def _client(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._http_client is not None:
            yield self._http_client
            return
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            yield client

    async def acquire_token(self, client_id: str) -> str:
        """Run the consent flow and return the access token.

        Raises:
            AuthenticationDenied: If consent is denied, times out, or the
                redirect URL carries no valid token.
        """
        async with AsyncOAuth2Client(
            client_id=client_id,
            scope=" ".join(self.scopes),
            redirect_uri=self.redirect_uri,
        ) as session:
            url, state = session.create_authorization_url(
                self.AUTHORIZE_URL,
                response_type="token",
                include_granted_scopes="true",
            )

        loop = asyncio.get_running_loop()
        future: asyncio.Future[str] = loop.create_future()

        def callback(result: str | BaseException) -> None:
            def resolve() -> None:
                if future.done():
                    return
                if isinstance(result, BaseException):
                    future.set_exception(result)
                else:
                    future.set_result(result)

            loop.call_soon_threadsafe(resolve)

        logger.info("Waiting for OAuth consent")
        self.consent_handler(url, callback)

        try:
            redirect_url = await asyncio.wait_for(future, self.consent_timeout)
        except asyncio.TimeoutError as e:
            raise AuthenticationDenied("Timed out waiting for OAuth consent") from e
        except Exception as e:
            # Raised by the consent handler through the callback
            raise AuthenticationDenied(f"Consent flow aborted: {e}") from e

        token = self._token_from_redirect(redirect_url, state)
        logger.info("Access token acquired")
        return token

    def _token_from_redirect(self, redirect_url: str, state: str) -> str:
        """Extract the access token from an implicit-grant redirect URL."""
        if not redirect_url:
            raise AuthenticationDenied("No redirect URL provided")

        params = dict(parse_qsl(urlparse(redirect_url).fragment, keep_blank_values=True))
        if "error" in params:
            description = params.get("error_description")
            detail = f"{params['error']}: {description}" if description else params["error"]
            raise AuthenticationDenied(f"Consent denied ({detail})")

        try:
            token = parse_implicit_response(redirect_url, state)
        except OAuth2Error as e:
            raise AuthenticationDenied(f"Invalid authorization response: {e}") from e

        return token["access_token"]

    async def revoke_token(self, token: str) -> None:
        """Revoke the token remotely. Failures are logged, not raised."""
        try:
            async with self._client() as client:
                response = await client.post(self.REVOKE_URL, params={"token": token})
            if not 200 <= response.status_code <= 299:
                logger.warning(f"Token revocation returned HTTP {response.status_code}")
                return
        except httpx.HTTPError as e:
            logger.warning(f"Failed to revoke token remotely: {e}")
            return

        logger.info("Token revoked successfully")

    async def verify_token(self, token: str) -> bool:
        """Check with the tokeninfo endpoint whether a token is still accepted.

        Returns:
            True if the token is valid.
        """
        try:
            async with self._client() as client:
                response = await client.post(
                    self.TOKENINFO_URL,
                    params={"access_token": token},
                    headers={"Authorization": f"Bearer {token}"},
                )
        except httpx.HTTPError as e:
            logger.warning(f"Token verification failed: {e}")
            return False

        return 200 <= response.status_code <= 299
