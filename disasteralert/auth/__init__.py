"""
DisasterAlert - Auth Module
Caller identity resolved from bearer tokens.
"""

from disasteralert.auth.token_store import (
    Caller,
    TokenStore,
    InMemoryTokenStore,
    parse_bearer,
    resolve_caller,
)

__all__ = [
    "Caller",
    "TokenStore",
    "InMemoryTokenStore",
    "parse_bearer",
    "resolve_caller",
]
