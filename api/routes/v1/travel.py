"""
api/routes/v1/travel.py -- Visited / wishlist endpoints.

Routes (all require a bearer token; the resolved user owns the record):
  GET    /api/v1/travel             -- both sets
  GET    /api/v1/visited            -- visited set
  POST   /api/v1/visited/{code}     -- mark visited (drops it from wishlist)
  DELETE /api/v1/visited/{code}     -- unmark visited
  GET    /api/v1/wishlist           -- wishlist set
  POST   /api/v1/wishlist/{code}    -- add to wishlist (drops it from visited)
  DELETE /api/v1/wishlist/{code}    -- remove from wishlist

{code} is case-insensitive; "fr" is stored as "FR". Anything that is not two
letters is rejected with 400 invalid_country_code before the store is touched.
Well-formed codes are not checked against a country list.

The two POST routes return both sets because they may move a code out of the
other set. The DELETE routes only ever touch their own set.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from api.models import TravelStateResponse, VisitedResponse, WishlistResponse
from auth.dependencies import get_current_user
from auth.models import User
from travel.store import TravelStore

router = APIRouter()


def _store(request: Request) -> TravelStore:
    return request.app.state.travel_store


@router.get("/travel", response_model=TravelStateResponse)
def get_travel_state(request: Request, user: User = Depends(get_current_user)) -> TravelStateResponse:
    return TravelStateResponse.from_state(_store(request).get_state(user.id))


# ---------------------------------------------------------------------------
# Visited
# ---------------------------------------------------------------------------


@router.get("/visited", response_model=VisitedResponse)
def list_visited(request: Request, user: User = Depends(get_current_user)) -> VisitedResponse:
    state = _store(request).get_state(user.id)
    return VisitedResponse(visited_countries=state.visited)


@router.post("/visited/{code}", response_model=TravelStateResponse)
def mark_visited(request: Request, code: str, user: User = Depends(get_current_user)) -> TravelStateResponse:
    """Mark a country as visited. Idempotent."""
    return TravelStateResponse.from_state(_store(request).mark_visited(user.id, code))


@router.delete("/visited/{code}", response_model=VisitedResponse)
def unmark_visited(request: Request, code: str, user: User = Depends(get_current_user)) -> VisitedResponse:
    """Unmark a visited country. No-op if it was not marked."""
    state = _store(request).unmark_visited(user.id, code)
    return VisitedResponse(visited_countries=state.visited)


# ---------------------------------------------------------------------------
# Wishlist
# ---------------------------------------------------------------------------


@router.get("/wishlist", response_model=WishlistResponse)
def list_wishlist(request: Request, user: User = Depends(get_current_user)) -> WishlistResponse:
    state = _store(request).get_state(user.id)
    return WishlistResponse(wishlist_countries=state.wishlist)


@router.post("/wishlist/{code}", response_model=TravelStateResponse)
def add_to_wishlist(request: Request, code: str, user: User = Depends(get_current_user)) -> TravelStateResponse:
    """Add a country to the wishlist. Idempotent."""
    return TravelStateResponse.from_state(_store(request).add_to_wishlist(user.id, code))


@router.delete("/wishlist/{code}", response_model=WishlistResponse)
def remove_from_wishlist(request: Request, code: str, user: User = Depends(get_current_user)) -> WishlistResponse:
    """Remove a country from the wishlist. No-op if it was not there."""
    state = _store(request).remove_from_wishlist(user.id, code)
    return WishlistResponse(wishlist_countries=state.wishlist)
