"""
Bearer-token lookup.

Tokens are issued elsewhere; this module only maps an opaque token to the
caller it was issued for.
"""

import logging
import threading
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional, Protocol

from disasteralert.core.constants import UserRole

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Caller:
    """Authenticated identity attached to a request."""
    user_id: str
    username: str
    role: str = UserRole.USER.value

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class TokenStore(Protocol):
    """Key/value store holding the caller each token belongs to."""

    def get(self, key: str) -> Optional[Caller]:
        ...

    def put(self, key: str, caller: Caller) -> None:
        ...

    def delete(self, key: str) -> None:
        ...


class InMemoryTokenStore:
    """Process-local TokenStore."""

    def __init__(self):
        self._tokens: Dict[str, Caller] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Caller]:
        with self._lock:
            return self._tokens.get(key)

    def put(self, key: str, caller: Caller) -> None:
        if not key:
            raise ValueError("Token must not be empty")
        with self._lock:
            self._tokens[key] = caller
        logger.debug(f"Token registered for user {caller.user_id} ({caller.role})")

    def delete(self, key: str) -> None:
        with self._lock:
            self._tokens.pop(key, None)


def parse_bearer(value: Optional[str]) -> Optional[str]:
    """
    Extract the token from an Authorization header value.

    The "Bearer " prefix is optional.
    """
    if not value:
        return None
    token = value.strip()
    if token.lower().startswith("bearer "):
        token = token[7:].strip()
    return token or None


def resolve_caller(store: TokenStore, token: Optional[str]) -> Optional[Caller]:
    """Caller for a token, or None when missing or unknown."""
    if not token:
        return None
    return store.get(token)
