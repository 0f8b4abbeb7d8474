"""
Bearer-token guard for protected routes.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Depends, Header

from event_ratings.dependencies import get_credential_verifier
from event_ratings.errors import Unauthenticated
from event_ratings.identity import CredentialVerifier, Identity


def parse_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Return the token from an ``Authorization: Bearer <token>`` header."""
    parts = (authorization or "").split(" ")
    scheme = parts[0]
    token = parts[1] if len(parts) > 1 else ""
    if scheme != "Bearer" or not token:
        return None
    return token


def get_current_identity(
    authorization: Optional[str] = Header(default=None),
    verifier: CredentialVerifier = Depends(get_credential_verifier),
) -> Identity:
    token = parse_bearer_token(authorization)
    if token is None:
        raise Unauthenticated("Unauthorized")
    return verifier.verify(token)
