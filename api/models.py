"""
API request and response models for Travel Globe REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py,
travel/models.py and core/models.py, which own the internal domain
representation. Route handlers map between the two.

Credentials never appear here: UserOut is built from a User by picking the
public fields, so a salt or hash cannot leak through a response model.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from auth.models import User
from core.models import Article, CountryInfoResult, CountryNewsResult
from travel.models import TravelState

# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class RegisterRequest(BaseModel):
    """Request body for POST /api/v1/auth/register.

    Length and emptiness rules are enforced by auth.accounts.register_user so
    that a short password surfaces as weak_password (400) rather than a
    generic 422. register_user also trims email and display_name; the
    password is taken exactly as sent, as it is on login.
    """

    email: str = Field(max_length=255)
    password: str = Field(max_length=1024, json_schema_extra={"format": "password"})
    display_name: Optional[str] = Field(default=None, max_length=100)


class LoginRequest(BaseModel):
    """Request body for POST /api/v1/auth/login."""

    email: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1, max_length=1024)


# ---------------------------------------------------------------------------
# Auth responses
# ---------------------------------------------------------------------------


class UserOut(BaseModel):
    """Public view of a user -- id, email and display name only."""

    model_config = ConfigDict(frozen=True)

    id: str
    email: str
    display_name: Optional[str] = None

    @classmethod
    def from_user(cls, user: User) -> "UserOut":
        return cls(id=user.id, email=user.email, display_name=user.display_name)


class AuthResponse(BaseModel):
    """Response for register and login: the user plus a fresh bearer token."""

    model_config = ConfigDict(frozen=True)

    user: UserOut
    token: str
    token_type: str = "bearer"
    expires_in: int


class MeResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    user: UserOut


# ---------------------------------------------------------------------------
# Travel-state responses
# ---------------------------------------------------------------------------


class VisitedResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    visited_countries: list[str]


class WishlistResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    wishlist_countries: list[str]


class TravelStateResponse(BaseModel):
    """Both sets -- returned by GET /travel and by the two "add" mutations,
    which may move a code out of the other set."""

    model_config = ConfigDict(frozen=True)

    visited_countries: list[str]
    wishlist_countries: list[str]

    @classmethod
    def from_state(cls, state: TravelState) -> "TravelStateResponse":
        return cls(visited_countries=list(state.visited), wishlist_countries=list(state.wishlist))


# ---------------------------------------------------------------------------
# Enrichment responses
# ---------------------------------------------------------------------------


class ArticleOut(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    description: Optional[str] = None
    url: str
    image: Optional[str] = None
    published_at: Optional[str] = None
    source: str

    @classmethod
    def from_article(cls, article: Article) -> "ArticleOut":
        return cls(
            title=article.title,
            description=article.description,
            url=article.url,
            image=article.image,
            published_at=article.published_at,
            source=article.source,
        )


class CountryInfoResponse(BaseModel):
    """Response for GET /api/v1/country-info/{code}.

    info is the REST Countries payload as-is; it is {} and note explains why
    when the upstream is unavailable. travel_status is the caller's own mark.
    """

    model_config = ConfigDict(frozen=True)

    code: str
    info: dict[str, Any]
    note: Optional[str] = None
    travel_status: Optional[str] = None  # "visited" | "wishlist" | None (anonymous or unmarked)

    @classmethod
    def from_result(cls, result: CountryInfoResult, travel_status: Optional[str] = None) -> "CountryInfoResponse":
        return cls(code=result.code, info=result.info, note=result.note, travel_status=travel_status)


class CountryNewsResponse(BaseModel):
    """Response for GET /api/v1/country-news/{code}."""

    model_config = ConfigDict(frozen=True)

    code: str
    articles: list[ArticleOut]
    note: Optional[str] = None

    @classmethod
    def from_result(cls, result: CountryNewsResult) -> "CountryNewsResponse":
        return cls(
            code=result.code,
            articles=[ArticleOut.from_article(a) for a in result.articles],
            note=result.note,
        )


# ---------------------------------------------------------------------------
# Errors and health
# ---------------------------------------------------------------------------


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /api/v1/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    version: str
    components: dict[str, str] = Field(default_factory=dict)
