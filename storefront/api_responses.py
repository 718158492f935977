from __future__ import annotations

from rest_framework import status
from rest_framework.response import Response


def success(*, data: dict, http_status: int = status.HTTP_200_OK) -> Response:
    return Response({"success": True, "data": data}, status=http_status)


def error(
    *,
    message: str,
    code: str,
    field: str | None = None,
    details: dict | None = None,
    http_status: int = status.HTTP_400_BAD_REQUEST,
) -> Response:
    payload: dict = {"success": False, "data": {}, "error": {"message": message, "code": code}}
    if field:
        payload["error"]["field"] = field
    if details:
        payload["error"]["details"] = details
    return Response(payload, status=http_status)


def invalid(serializer) -> Response:
    return error(message="Validation failed.", code="validation_error", details=serializer.errors)
