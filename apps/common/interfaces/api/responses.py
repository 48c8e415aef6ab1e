from __future__ import annotations

from rest_framework import status
from rest_framework.response import Response

from apps.common.domain.results import ErrorCode

_STATUS_BY_CODE = {
    ErrorCode.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorCode.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorCode.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorCode.STORAGE: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def success(*, data: dict, message: str = "", http_status: int = status.HTTP_200_OK) -> Response:
    payload: dict = {"success": True, "data": data}
    if message:
        payload["message"] = message
    return Response(payload, status=http_status)


def error(*, message: str, field: str | None = None, http_status: int = status.HTTP_400_BAD_REQUEST) -> Response:
    payload: dict = {"success": False, "data": {}, "error": {"message": message}}
    if field:
        payload["error"]["field"] = field
    return Response(payload, status=http_status)


def from_result(result) -> Response:
    """Render a failed use-case result (`error`, `error_code`, optional `field`)."""
    http_status = _STATUS_BY_CODE.get(result.error_code, status.HTTP_400_BAD_REQUEST)
    return error(message=result.error, field=getattr(result, "field", None), http_status=http_status)
