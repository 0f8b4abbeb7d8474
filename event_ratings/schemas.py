"""
Pydantic schemas for the ratings API.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, StrictFloat, StrictInt, StrictStr


class MessageResponse(BaseModel):
    message: str


class RegisterRequest(BaseModel):
    email: str
    password: str


class LoginRequest(BaseModel):
    email: str


class TokenResponse(BaseModel):
    token: str


class UserResponse(BaseModel):
    uid: str
    email: Optional[str] = None


class ProtectedResponse(BaseModel):
    message: str
    user: UserResponse


class RatingCreateRequest(BaseModel):
    # uid/timestamp sent by the client are dropped here.
    model_config = ConfigDict(extra="ignore")

    eventId: Optional[StrictStr] = None
    score: Optional[Union[StrictInt, StrictFloat]] = None


class RatingCreatedResponse(BaseModel):
    id: str


class RatingResponse(BaseModel):
    id: str
    eventId: Optional[str] = None
    score: Optional[Union[int, float]] = None
    uid: Optional[str] = None
    timestamp: Optional[datetime] = None


class RatingPageResponse(BaseModel):
    ratings: list[RatingResponse]
    nextPageToken: Optional[str] = None
