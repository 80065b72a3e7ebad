"""JSON envelope shared by every admin endpoint.

    {"code": 0, "message": "success", "data": {...},
     "timestamp": "...", "request_id": "req_..."}

A non-zero code is the AppError code; data is null in that case.
"""

import uuid
from typing import Any

from pydantic import BaseModel, Field

from src.ra_common.datetime_utils import utc_now


def new_request_id() -> str:
    return f"req_{uuid.uuid4().hex[:12]}"


class ApiResponse(BaseModel):
    code: int = 0
    message: str = "success"
    data: Any = None
    timestamp: str = Field(default_factory=lambda: utc_now().isoformat())
    request_id: str = Field(default_factory=new_request_id)

    def for_request(self, request_id: str | None) -> "ApiResponse":
        """Stamp the id assigned by RequestLogMiddleware, if there is one."""
        if request_id:
            self.request_id = request_id
        return self


def success_response(data: Any = None, request_id: str | None = None) -> ApiResponse:
    return ApiResponse(data=data).for_request(request_id)


def error_response(code: int, message: str, request_id: str | None = None) -> ApiResponse:
    return ApiResponse(code=code, message=message).for_request(request_id)
