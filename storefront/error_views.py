from __future__ import annotations

import logging

from django.http import HttpRequest, JsonResponse

logger = logging.getLogger("storefront.request")


def _error_payload(*, message: str, code: str) -> dict:
    return {"success": False, "data": {}, "error": {"message": message, "code": code}}


def healthz(request: HttpRequest) -> JsonResponse:
    return JsonResponse({"status": "ok"})


def handle_404(request: HttpRequest, exception=None) -> JsonResponse:
    return JsonResponse(_error_payload(message="Not found.", code="not_found"), status=404)


def handle_500(request: HttpRequest) -> JsonResponse:
    logger.error(
        "server_error",
        extra={"status_code": 500, "error_code": "server_error", "path": request.path},
    )
    return JsonResponse(_error_payload(message="Internal server error.", code="server_error"), status=500)
