"""Core constants: status codes, sentinel codes and header names."""

from enum import IntEnum

# Time constants
MILLISECONDS_PER_SECOND = 1000

# Client retry defaults (milliseconds)
DEFAULT_RETRY_DELAYS_MS = (500, 1000, 3000)

# HTTP status codes
HTTP_200_OK = 200
HTTP_201_CREATED = 201
HTTP_400_BAD_REQUEST = 400
HTTP_401_UNAUTHORIZED = 401
HTTP_403_FORBIDDEN = 403
HTTP_404_NOT_FOUND = 404
HTTP_405_METHOD_NOT_ALLOWED = 405
HTTP_429_TOO_MANY_REQUESTS = 429
HTTP_500_INTERNAL_SERVER_ERROR = 500

RETRYABLE_STATUS_CODES = frozenset({HTTP_429_TOO_MANY_REQUESTS, HTTP_500_INTERNAL_SERVER_ERROR})
AUTHENTICATION_ERROR_STATUS_CODES = frozenset({HTTP_401_UNAUTHORIZED, HTTP_403_FORBIDDEN})


class ApiStatusCode(IntEnum):
    """Client-side sentinel status codes outside the HTTP range."""

    UNCAUGHT_CLIENT_ERROR = 600
    """The request could not be built or sent."""

    DATA_PARSE_ERROR = 601
    """The response body did not decode or match the data schema."""


# HTTP headers
CORS_ALLOW_ORIGIN_HEADER = "Access-Control-Allow-Origin"
CORRELATION_ID_HEADER = "X-Correlation-ID"
CONTENT_TYPE_HEADER = "Content-Type"
AUTHORIZATION_HEADER = "Authorization"

# Content types
JSON_CONTENT_TYPE = "application/json"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"
TEXT_CONTENT_TYPE = "text/plain"

# Security and redaction
REDACTED = "[REDACTED]"
SENSITIVE_HEADERS = frozenset(
    {
        "authorization",
        "cookie",
        "x-api-key",
        "x-auth-token",
        "x-csrf-token",
        "set-cookie",
        "x-secret-key",
        "proxy-authorization",
    }
)
