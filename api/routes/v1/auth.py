"""
api/routes/v1/auth.py -- Registration, login and current-user endpoints.

Routes:
  POST /api/v1/auth/register  -- create account; returns {user, token}
  POST /api/v1/auth/login     -- password login; returns {user, token}
  GET  /api/v1/auth/me        -- current user (requires auth)

Security:
  POST /register and /login are rate-limited per client IP (AUTH_RATE_LIMIT).
  authenticate_user() provides timing equalization -- use it, never inline
  get_by_email() + verify_password().
  Cache-Control: no-store on every response that carries a token.
  Login failures use one message for unknown email and wrong password.

Handlers are sync `def`: the KDF and the SQLite calls block, so FastAPI runs
them in its threadpool instead of on the event loop.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from api.limiter import auth_rate_limit, limiter
from api.models import AuthResponse, LoginRequest, MeResponse, RegisterRequest, UserOut
from auth.accounts import authenticate_user, register_user
from auth.dependencies import get_current_user
from auth.models import User
from auth.store import UserStore
from auth.tokens import TokenService

# Auth policy:
# - POST /api/v1/auth/register: public
# - POST /api/v1/auth/login:    public
# - GET  /api/v1/auth/me:       requires auth (get_current_user)
router = APIRouter()


def _token_response(request: Request, user: User, status_code: int) -> JSONResponse:
    tokens: TokenService = request.app.state.tokens
    token = tokens.issue(user.id, user.email)
    resp = JSONResponse(
        status_code=status_code,
        content=AuthResponse(
            user=UserOut.from_user(user),
            token=token,
            expires_in=tokens.expire_seconds,
        ).model_dump(),
    )
    resp.headers["Cache-Control"] = "no-store"
    return resp


@limiter.limit(auth_rate_limit)  # must be ABOVE @router to preserve FastAPI introspection
@router.post("/auth/register", response_model=AuthResponse, status_code=201)
def register(request: Request, body: RegisterRequest) -> JSONResponse:
    """Create an account and return it with a bearer token.

    400 missing_field / weak_password, 409 email_taken.
    """
    user_store: UserStore = request.app.state.user_store
    user = register_user(user_store, body.email, body.password, body.display_name)
    return _token_response(request, user, status_code=201)


@limiter.limit(auth_rate_limit)
@router.post("/auth/login", response_model=AuthResponse)
def login(request: Request, body: LoginRequest) -> JSONResponse:
    """Authenticate with email and password; return the user and a bearer token.

    401 invalid_credentials for both unknown email and wrong password.
    """
    user_store: UserStore = request.app.state.user_store
    user = authenticate_user(user_store, body.email, body.password)
    return _token_response(request, user, status_code=200)


@router.get("/auth/me", response_model=MeResponse)
def me(current_user: User = Depends(get_current_user)) -> MeResponse:
    """Return the currently authenticated user."""
    return MeResponse(user=UserOut.from_user(current_user))
