"""
Rating submission and cursor-based listing.

Listing returns ratings newest first. The page token is the id of the last
rating on the previous page; a token that no longer resolves to a rating is
ignored and the listing restarts from the first page.

``next_page_token`` is set whenever a page comes back full, so a result set
whose size is an exact multiple of the page size ends with one empty page.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Optional

from event_ratings.errors import InvalidArgument
from event_ratings.identity import Identity
from event_ratings.store import RatingRecord, RatingStore

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10


@dataclass
class RatingPage:
    ratings: list[RatingRecord]
    next_page_token: Optional[str]


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def validate_page_size(page_size: Any, max_page_size: Optional[int] = None) -> int:
    if isinstance(page_size, bool) or not isinstance(page_size, int):
        raise InvalidArgument("pageSize must be an integer")
    if page_size < 1:
        raise InvalidArgument("pageSize must be at least 1")
    if max_page_size is not None and page_size > max_page_size:
        raise InvalidArgument(f"pageSize must be at most {max_page_size}")
    return page_size


def list_ratings(
    store: RatingStore,
    *,
    event_id: Optional[str] = None,
    page_size: int = DEFAULT_PAGE_SIZE,
    page_token: Optional[str] = None,
    max_page_size: Optional[int] = None,
) -> RatingPage:
    page_size = validate_page_size(page_size, max_page_size)

    cursor = None
    if page_token:
        cursor = store.resolve_cursor(page_token)
        if cursor is None:
            logger.info("Page token %s not found, listing from the first page", page_token)

    ratings = store.query(
        event_id=event_id or None, start_after=cursor, limit=page_size
    )

    next_page_token = None
    if len(ratings) == page_size:
        next_page_token = ratings[-1].id
    return RatingPage(ratings=ratings, next_page_token=next_page_token)


def append_rating(
    store: RatingStore, *, event_id: Any, score: Any, identity: Identity
) -> str:
    """
    Validate and store a new rating for ``identity``.

    The uid always comes from the verified identity and the timestamp from the
    store; nothing the client sends can override either.
    """
    if not event_id or not isinstance(event_id, str):
        raise InvalidArgument("eventId is required")
    if not _is_number(score):
        raise InvalidArgument("score must be a number")
    rating_id = store.add(event_id=event_id, score=score, uid=identity.uid)
    logger.info("Stored rating %s for event %s", rating_id, event_id)
    return rating_id
