"""
HTTP routes for the ratings API.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from event_ratings.auth import get_current_identity
from event_ratings.config import Settings
from event_ratings.dependencies import (
    get_app_settings,
    get_identity_directory,
    get_rating_store,
)
from event_ratings.errors import NotFound
from event_ratings.identity import Identity, IdentityDirectory
from event_ratings.ratings import DEFAULT_PAGE_SIZE, append_rating, list_ratings
from event_ratings.schemas import (
    LoginRequest,
    MessageResponse,
    ProtectedResponse,
    RatingCreatedResponse,
    RatingCreateRequest,
    RatingPageResponse,
    RatingResponse,
    RegisterRequest,
    TokenResponse,
    UserResponse,
)
from event_ratings.store import RatingStore

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/message", response_model=MessageResponse)
def message():
    return MessageResponse(message="Hello from the backend!")


@router.post("/register", response_model=UserResponse)
def register(
    payload: RegisterRequest,
    directory: IdentityDirectory = Depends(get_identity_directory),
):
    identity = directory.create_user(payload.email, payload.password)
    return UserResponse(uid=identity.uid, email=identity.email)


@router.post("/login", response_model=TokenResponse)
def login(
    payload: LoginRequest,
    directory: IdentityDirectory = Depends(get_identity_directory),
):
    """
    Issue a custom token for the account registered under ``email``.

    No password is checked here. The client exchanges the custom token with the
    identity provider, which performs the actual credential check; this endpoint
    is only as safe as that step.
    """
    try:
        identity = directory.find_by_email(payload.email)
    except NotFound as exc:
        raise NotFound(exc.detail, status_code=status.HTTP_400_BAD_REQUEST) from exc
    return TokenResponse(token=directory.issue_custom_token(identity.uid))


@router.get("/profile", response_model=UserResponse)
def profile(identity: Identity = Depends(get_current_identity)):
    return UserResponse(uid=identity.uid, email=identity.email)


@router.get("/protected", response_model=ProtectedResponse)
def protected(identity: Identity = Depends(get_current_identity)):
    return ProtectedResponse(
        message="You have accessed a protected route!",
        user=UserResponse(uid=identity.uid, email=identity.email),
    )


@router.get("/ratings", response_model=RatingPageResponse)
def get_ratings(
    event_id: Optional[str] = Query(None, alias="eventId"),
    page_size: int = Query(DEFAULT_PAGE_SIZE, alias="pageSize"),
    page_token: Optional[str] = Query(None, alias="pageToken"),
    store: RatingStore = Depends(get_rating_store),
    settings: Settings = Depends(get_app_settings),
):
    page = list_ratings(
        store,
        event_id=event_id,
        page_size=page_size,
        page_token=page_token,
        max_page_size=settings.max_page_size,
    )
    return RatingPageResponse(
        ratings=[RatingResponse(**record.as_dict()) for record in page.ratings],
        nextPageToken=page.next_page_token,
    )


@router.post(
    "/ratings",
    response_model=RatingCreatedResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_rating(
    payload: RatingCreateRequest,
    identity: Identity = Depends(get_current_identity),
    store: RatingStore = Depends(get_rating_store),
):
    rating_id = append_rating(
        store, event_id=payload.eventId, score=payload.score, identity=identity
    )
    return RatingCreatedResponse(id=rating_id)
