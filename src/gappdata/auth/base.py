"""
Abstract base class for token authenticators.
"""

from abc import ABC, abstractmethod


class Authenticator(ABC):
    """Obtains and revokes bearer tokens from an identity provider."""

    @abstractmethod
    async def acquire_token(self, client_id: str) -> str:
        """
        Obtain a fresh access token.

        May run an interactive consent flow; the coroutine stays suspended
        until the user finishes or cancels it.

        Args:
            client_id: OAuth client identifier.

        Returns:
            The bearer token.

        Raises:
            AuthenticationDenied: If consent is denied or no token is issued.
        """
        pass

    @abstractmethod
    async def revoke_token(self, token: str) -> None:
        """
        Revoke a token with the identity provider.

        Args:
            token: The bearer token to revoke.
        """
        pass
