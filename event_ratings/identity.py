"""
Identity abstraction over Firebase Authentication and an in-memory test implementation.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from typing import Dict, Optional, Protocol

import firebase_admin
from firebase_admin import auth
from firebase_admin import exceptions as firebase_exceptions

from event_ratings.errors import InvalidArgument, NotFound, Unauthenticated

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


@dataclass(frozen=True)
class Identity:
    uid: str
    email: Optional[str] = None


class CredentialVerifier(Protocol):
    """Turns a bearer token into a verified identity."""

    def verify(self, token: str) -> Identity:
        ...


class IdentityDirectory(Protocol):
    """User management operations the API needs from the identity provider."""

    def create_user(self, email: str, password: str) -> Identity:
        ...

    def find_by_email(self, email: str) -> Identity:
        ...

    def issue_custom_token(self, uid: str) -> str:
        ...


class IdentityClient(CredentialVerifier, IdentityDirectory, Protocol):
    ...


class FirebaseIdentityClient:
    """Firebase Authentication backed verifier and directory."""

    def __init__(self, app: Optional[firebase_admin.App] = None):
        self._app = app

    def verify(self, token: str) -> Identity:
        try:
            decoded = auth.verify_id_token(token, app=self._app)
        except (ValueError, firebase_exceptions.FirebaseError) as exc:
            logger.debug("ID token rejected: %s", exc)
            raise Unauthenticated("Invalid token") from exc
        return Identity(uid=decoded["uid"], email=decoded.get("email"))

    def create_user(self, email: str, password: str) -> Identity:
        try:
            record = auth.create_user(email=email, password=password, app=self._app)
        except (ValueError, firebase_exceptions.FirebaseError) as exc:
            raise InvalidArgument(str(exc)) from exc
        return Identity(uid=record.uid, email=record.email)

    def find_by_email(self, email: str) -> Identity:
        try:
            record = auth.get_user_by_email(email, app=self._app)
        except auth.UserNotFoundError as exc:
            raise NotFound(str(exc)) from exc
        except (ValueError, firebase_exceptions.FirebaseError) as exc:
            raise InvalidArgument(str(exc)) from exc
        return Identity(uid=record.uid, email=record.email)

    def issue_custom_token(self, uid: str) -> str:
        try:
            token = auth.create_custom_token(uid, app=self._app)
        except (ValueError, firebase_exceptions.FirebaseError) as exc:
            raise InvalidArgument(str(exc)) from exc
        if isinstance(token, bytes):
            return token.decode("utf-8")
        return token


@dataclass
class _UserRecord:
    uid: str
    email: str
    password: str


@dataclass
class InMemoryIdentityClient:
    """
    Test double for the identity provider.

    Custom tokens are exchanged for ID tokens with ``sign_in_with_custom_token``,
    standing in for the client-side sign-in step of the real provider.
    """

    users: Dict[str, _UserRecord] = field(default_factory=dict)
    custom_tokens: Dict[str, str] = field(default_factory=dict)
    id_tokens: Dict[str, str] = field(default_factory=dict)

    def verify(self, token: str) -> Identity:
        uid = self.id_tokens.get(token)
        user = self.users.get(uid) if uid else None
        if user is None:
            raise Unauthenticated("Invalid token")
        return Identity(uid=user.uid, email=user.email)

    def create_user(self, email: str, password: str) -> Identity:
        if not email or "@" not in email:
            raise InvalidArgument(f'Malformed email address string: "{email}".')
        if not password or len(password) < MIN_PASSWORD_LENGTH:
            raise InvalidArgument(
                f"Invalid password string. Password must be a string at least "
                f"{MIN_PASSWORD_LENGTH} characters long."
            )
        if self._by_email(email) is not None:
            raise InvalidArgument(
                "The user with the provided email already exists (EMAIL_EXISTS)."
            )
        record = _UserRecord(uid=uuid.uuid4().hex[:28], email=email, password=password)
        self.users[record.uid] = record
        return Identity(uid=record.uid, email=record.email)

    def find_by_email(self, email: str) -> Identity:
        record = self._by_email(email)
        if record is None:
            raise NotFound(f"No user record found for the provided email: {email}.")
        return Identity(uid=record.uid, email=record.email)

    def issue_custom_token(self, uid: str) -> str:
        if uid not in self.users:
            raise InvalidArgument(f"Unknown uid: {uid}")
        token = f"custom-{uuid.uuid4().hex}"
        self.custom_tokens[token] = uid
        return token

    def sign_in_with_custom_token(self, custom_token: str) -> str:
        uid = self.custom_tokens.pop(custom_token, None)
        if uid is None:
            raise Unauthenticated("Invalid custom token")
        return self.issue_id_token(uid)

    def issue_id_token(self, uid: str) -> str:
        token = f"id-{uuid.uuid4().hex}"
        self.id_tokens[token] = uid
        return token

    def reset(self) -> None:
        """Clear all users and tokens (useful in tests)."""
        self.users.clear()
        self.custom_tokens.clear()
        self.id_tokens.clear()

    def _by_email(self, email: str) -> Optional[_UserRecord]:
        for record in self.users.values():
            if record.email == email:
                return record
        return None
