"""
Abstract authentication provider interface.

Defines the contract that all auth providers must implement.
Sign-in and account management live in an external identity service;
this service only needs to issue and verify bearer tokens.

Example:
    from common.auth import AuthProvider, JWTAuth

    def get_auth_provider(settings) -> AuthProvider:
        return JWTAuth(secret=settings.JWT_SECRET)
"""

from abc import ABC, abstractmethod
from typing import Dict, Any


class AuthProvider(ABC):
    """
    Abstract authentication provider.

    Implement this interface for different token strategies.
    """

    @abstractmethod
    async def create_token(
        self,
        user_id: str,
        **claims: Any,
    ) -> str:
        """
        Create an authentication token for a user.

        Args:
            user_id: The user's unique identifier
            **claims: Additional claims to include in the token

        Returns:
            The authentication token string
        """
        pass

    @abstractmethod
    async def verify_token(self, token: str) -> Dict[str, Any]:
        """
        Verify and decode an authentication token.

        Args:
            token: The authentication token

        Returns:
            Dictionary containing token claims (at minimum: sub)

        Raises:
            ValueError: If token is invalid or expired
        """
        pass
