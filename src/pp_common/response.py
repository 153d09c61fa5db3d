"""Unified API response wrapper.

Every endpoint, success or AppError, returns the same envelope:
{
    "code": 0,           // 0 = success, otherwise the AppError code
    "message": "success",
    "data": { ... },     // null on error
    "timestamp": "...",
    "request_id": "..."  // echoes X-Request-ID when the caller sent one
}
"""

import uuid
from datetime import datetime, timezone
from typing import Any

from fastapi import Request
from pydantic import BaseModel, Field

from src.pp_common.errors import AppError


class ApiResponse(BaseModel):
    code: int = 0
    message: str = "success"
    data: Any = None
    timestamp: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    request_id: str = Field(default_factory=lambda: f"req_{uuid.uuid4().hex[:12]}")


def _with_request_id(resp: ApiResponse, request: Request | None) -> ApiResponse:
    # request_id is set on request.state by RequestLogMiddleware
    if request is not None:
        resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


def success_response(data: Any = None, request: Request | None = None) -> ApiResponse:
    return _with_request_id(ApiResponse(data=data), request)


def error_response(exc: AppError, request: Request | None = None) -> ApiResponse:
    return _with_request_id(ApiResponse(code=exc.code, message=exc.message), request)
