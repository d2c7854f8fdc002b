"""
api/routes/v1/countries.py -- Country enrichment endpoints.

Routes (auth optional):
  GET /api/v1/country-info/{code}            -- REST Countries data, cached 24 h
  GET /api/v1/country-news/{code}?name=...   -- GNews articles, cached 30 min

Both degrade to 200 with an empty payload and a `note` when the upstream is
down, so the UI can render "no data" instead of an error. Two cases still
fail: a malformed code (400) and REST Countries reporting the code unknown
(404).

country-info also reports the caller's own mark for the country
(travel_status) when a valid bearer token is present; anonymous callers get
null.
"""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query, Request

from api.models import CountryInfoResponse, CountryNewsResponse
from auth.dependencies import try_get_current_user
from auth.models import User
from core.pipeline import get_country_info, get_country_news
from travel.models import normalize_country_code

router = APIRouter()


@router.get("/country-info/{code}", response_model=CountryInfoResponse)
def country_info(
    request: Request,
    code: str,
    user: Optional[User] = Depends(try_get_current_user),
) -> CountryInfoResponse:
    iso2 = normalize_country_code(code)
    result = get_country_info(iso2, request.app.state.cache, request.app.state.settings)
    travel_status = None
    if user is not None:
        mark = request.app.state.travel_store.get_state(user.id).status_of(iso2)
        travel_status = mark.value if mark is not None else None
    return CountryInfoResponse.from_result(result, travel_status=travel_status)


@router.get("/country-news/{code}", response_model=CountryNewsResponse)
def country_news(
    request: Request,
    code: str,
    name: Annotated[Optional[str], Query(max_length=100)] = None,
) -> CountryNewsResponse:
    """Recent articles about the country; `name` improves the search term."""
    iso2 = normalize_country_code(code)
    result = get_country_news(iso2, request.app.state.cache, request.app.state.settings, country_name=name)
    return CountryNewsResponse.from_result(result)
