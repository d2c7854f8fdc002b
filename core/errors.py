"""
core/errors.py -- Typed failure taxonomy shared by every layer.

Each error carries the HTTP status it maps to and a machine-readable code, so
api/main.py needs a single exception handler to turn any of them into the
standard {"error": {...}} envelope. Lower layers raise these; they never build
HTTP responses themselves.

  ValidationError    400  malformed input, rejected before any state change
  AuthError          401  uniform "unauthorized" to the caller
  ConflictError      409  duplicate email
  NotFoundError      404  upstream resource reported "not found"
  UpstreamError      502  absorbed by the cache proxy for enrichment routes
  StorageUnavailable 503  backing store unreachable
"""

from __future__ import annotations


class TravelGlobeError(Exception):
    status_code: int = 500
    code: str = "internal_error"
    message: str = "An unexpected error occurred."

    def __init__(self, message: str | None = None, *, detail: str | None = None) -> None:
        self.message = message or self.message
        self.detail = detail
        super().__init__(self.message)


# ---------------------------------------------------------------------------
# 400
# ---------------------------------------------------------------------------


class ValidationError(TravelGlobeError):
    status_code = 400
    code = "validation_error"
    message = "Invalid input."


class InvalidCountryCode(ValidationError):
    code = "invalid_country_code"
    message = "Invalid ISO-2 code."


class WeakPassword(ValidationError):
    code = "weak_password"
    message = "Password must be at least 6 characters."


class MissingField(ValidationError):
    code = "missing_field"
    message = "A required field is missing."


# ---------------------------------------------------------------------------
# 401
# ---------------------------------------------------------------------------


class AuthError(TravelGlobeError):
    status_code = 401
    code = "unauthorized"
    message = "Authentication required."


class Unauthorized(AuthError):
    pass


class InvalidToken(AuthError):
    message = "Invalid token."


class ExpiredToken(AuthError):
    message = "Token expired."


class InvalidCredentials(AuthError):
    code = "invalid_credentials"
    message = "Invalid email or password."


# ---------------------------------------------------------------------------
# 404 / 409
# ---------------------------------------------------------------------------


class ConflictError(TravelGlobeError):
    status_code = 409
    code = "conflict"
    message = "Resource already exists."


class EmailTaken(ConflictError):
    code = "email_taken"
    message = "Email already registered."


class NotFoundError(TravelGlobeError):
    status_code = 404
    code = "not_found"
    message = "Not found."


class UpstreamNotFound(NotFoundError):
    message = "Country not found."


# ---------------------------------------------------------------------------
# 5xx
# ---------------------------------------------------------------------------


class UpstreamError(TravelGlobeError):
    """An external data source was unreachable or answered with an error.

    message doubles as the user-facing note when the cache proxy downgrades
    the failure to an empty result.
    """

    status_code = 502
    code = "upstream_error"
    message = "Upstream data temporarily unavailable."


class StorageUnavailable(TravelGlobeError):
    status_code = 503
    code = "service_unavailable"
    message = "Database not available."
