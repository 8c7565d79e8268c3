"""
Caller identity.

Resolves the bearer token sent by clients to the id of the signed-in user.
"""

from .resolver import IdentityResolver, HttpIdentityResolver, parse_bearer_token

__all__ = [
    "IdentityResolver",
    "HttpIdentityResolver",
    "parse_bearer_token",
]
