"""Identity and admin checks consumed by the gateway.

Token issuance and verification live outside this service; the gateway
only depends on the :class:`IdentityVerifier` interface.
"""

from abc import ABC, abstractmethod
from typing import Dict, Iterable, Optional

from pydantic import BaseModel

from ..errors import AuthenticationError, AuthorizationError


class Identity(BaseModel):
    user_id: str
    email: Optional[str] = None


class IdentityVerifier(ABC):
    @abstractmethod
    def verify(self, token: str) -> Identity:
        """Return the caller's identity or raise :class:`AuthenticationError`."""


class StaticTokenVerifier(IdentityVerifier):
    """Verifier backed by a fixed token table."""

    def __init__(self, tokens: Optional[Dict[str, Identity]] = None) -> None:
        self._tokens: Dict[str, Identity] = dict(tokens or {})

    def register(self, token: str, identity: Identity) -> None:
        self._tokens[token] = identity

    def verify(self, token: str) -> Identity:
        identity = self._tokens.get(token)
        if identity is None:
            raise AuthenticationError("Invalid token. Please login again.")
        return identity


def parse_bearer(authorization: Optional[str]) -> str:
    if not authorization:
        raise AuthenticationError("No token provided. Please include Authorization header.")
    parts = authorization.split(" ")
    if len(parts) != 2 or parts[0] != "Bearer":
        raise AuthenticationError("Invalid authorization header format. Use: Bearer <token>")
    token = parts[1].strip()
    if not token:
        raise AuthenticationError("Token is required")
    return token


class AdminPolicy:
    """Allow-list of administrator emails.

    With an empty allow-list the outcome is ``allow_when_unconfigured``.
    """

    def __init__(self, admin_emails: Iterable[str] = (), allow_when_unconfigured: bool = True) -> None:
        self.admin_emails = frozenset(email.strip().lower() for email in admin_emails if email.strip())
        self.allow_when_unconfigured = allow_when_unconfigured

    def is_admin(self, identity: Identity) -> bool:
        if not self.admin_emails:
            return self.allow_when_unconfigured
        return bool(identity.email) and identity.email.strip().lower() in self.admin_emails

    def require_admin(self, identity: Identity) -> None:
        if self.is_admin(identity):
            return
        if not self.admin_emails:
            raise AuthorizationError("Admin access not configured")
        raise AuthorizationError("Admin access required")
