"""
Module: api.auth

Purpose:
    Session verification for endpoints that require a signed-in user.
    Account management lives elsewhere; this only checks bearer tokens.
"""

from __future__ import annotations

import secrets
from abc import ABC, abstractmethod
from typing import Optional


class TokenVerifier(ABC):
    """Decides whether a bearer token belongs to an authenticated session."""

    @abstractmethod
    def verify(self, token: str) -> bool:
        """Return True if token is a valid session token."""


class StaticTokenVerifier(TokenVerifier):
    """
    Accepts one configured token.

    With no token configured every request is rejected.
    """

    def __init__(self, expected: Optional[str]) -> None:
        self._expected = expected

    def verify(self, token: str) -> bool:
        if not self._expected or not token:
            return False
        return secrets.compare_digest(token.encode(), self._expected.encode())


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    """
    Extract the token from an Authorization header.

    Example:
        >>> bearer_token("Bearer abc123")
        'abc123'
    """
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()
