"""
Dependency wiring for the FastAPI app.

The Firebase app, Firestore client and the clients built on them are created
once per process by ``init_backends`` and released by ``shutdown_backends``.
"""

from __future__ import annotations

import json
import logging
from typing import Optional

import firebase_admin
from fastapi import Depends, Request
from firebase_admin import credentials, firestore

from event_ratings.config import Settings, get_settings
from event_ratings.identity import (
    CredentialVerifier,
    FirebaseIdentityClient,
    IdentityClient,
    IdentityDirectory,
    InMemoryIdentityClient,
)
from event_ratings.store import FirestoreRatingStore, InMemoryRatingStore, RatingStore

logger = logging.getLogger(__name__)

_firebase_app: Optional[firebase_admin.App] = None
_firestore_client = None
_identity_client: IdentityClient | None = None
_rating_store: RatingStore | None = None


def _use_in_memory(settings: Settings) -> bool:
    return settings.use_in_memory_backends or not settings.service_account_json


def _initialize_firebase(settings: Settings) -> firebase_admin.App:
    service_account = json.loads(settings.service_account_json)
    credential = credentials.Certificate(service_account)
    try:
        return firebase_admin.initialize_app(credential)
    except ValueError:
        # Default app already exists in this process.
        return firebase_admin.get_app()


def init_backends(settings: Settings) -> None:
    global _firebase_app, _firestore_client, _identity_client, _rating_store
    if _identity_client is not None and _rating_store is not None:
        return

    if _use_in_memory(settings):
        if not settings.use_in_memory_backends:
            logger.warning(
                "SERVICE_ACCOUNT_JSON is not set, falling back to in-memory backends"
            )
        _identity_client = InMemoryIdentityClient()
        _rating_store = InMemoryRatingStore()
    else:
        _firebase_app = _initialize_firebase(settings)
        _firestore_client = firestore.client(_firebase_app)
        _identity_client = FirebaseIdentityClient(_firebase_app)
        _rating_store = FirestoreRatingStore(
            _firestore_client, collection=settings.ratings_collection
        )
    logger.info(
        "Backends ready: identity=%s ratings=%s",
        _identity_client.__class__.__name__,
        _rating_store.__class__.__name__,
    )


def shutdown_backends() -> None:
    global _firebase_app, _firestore_client, _identity_client, _rating_store
    if _firestore_client is not None:
        _firestore_client.close()
    if _firebase_app is not None:
        firebase_admin.delete_app(_firebase_app)
    _firebase_app = None
    _firestore_client = None
    _identity_client = None
    _rating_store = None


def get_app_settings(request: Request) -> Settings:
    settings = getattr(request.app.state, "settings", None)
    return settings or get_settings()


def get_identity_client(
    settings: Settings = Depends(get_app_settings),
) -> IdentityClient:
    """
    Return the process-wide identity client, building it on first use if the
    app was started without its lifespan hooks.
    """
    if _identity_client is None:
        init_backends(settings)
    return _identity_client


def get_rating_store(settings: Settings = Depends(get_app_settings)) -> RatingStore:
    if _rating_store is None:
        init_backends(settings)
    return _rating_store


def get_credential_verifier(
    client: IdentityClient = Depends(get_identity_client),
) -> CredentialVerifier:
    return client


def get_identity_directory(
    client: IdentityClient = Depends(get_identity_client),
) -> IdentityDirectory:
    return client
