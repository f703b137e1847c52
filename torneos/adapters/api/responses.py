"""Standard JSON envelopes for API responses.

Success: ``{success, data, requestId, timestamp}``.
Error: ``{success: false, error: {message, code, details, requestId, timestamp}}``.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET,POST,PUT,DELETE,OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type,Authorization,X-API-Key",
}

ERROR_CODES = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "CONFLICT",
    413: "PAYLOAD_TOO_LARGE",
    422: "VALIDATION_ERROR",
    429: "RATE_LIMIT_EXCEEDED",
    500: "INTERNAL_SERVER_ERROR",
    502: "BAD_GATEWAY",
    503: "SERVICE_UNAVAILABLE",
    504: "GATEWAY_TIMEOUT",
}


@dataclass
class ApiResponse:
    """Transport-agnostic response: status code, JSON body and headers."""

    status: int
    body: dict[str, Any]
    headers: dict[str, str] = field(default_factory=lambda: dict(CORS_HEADERS))


def codigo_error(status: int) -> str:
    return ERROR_CODES.get(status, "UNKNOWN_ERROR")


def respuesta_exitosa(
    data: Any, request_id: str | None = None, status: int = 200
) -> ApiResponse:
    return ApiResponse(
        status=status,
        body={
            "success": True,
            "data": data,
            "requestId": request_id,
            "timestamp": _ahora(),
        },
    )


def respuesta_error(
    status: int,
    message: str,
    request_id: str | None = None,
    details: dict[str, Any] | None = None,
) -> ApiResponse:
    return ApiResponse(
        status=status,
        body={
            "success": False,
            "error": {
                "message": message,
                "code": codigo_error(status),
                "details": details,
                "requestId": request_id,
                "timestamp": _ahora(),
            },
        },
    )


def _ahora() -> str:
    return datetime.now(UTC).isoformat()
