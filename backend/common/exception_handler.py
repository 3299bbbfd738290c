"""
DRF exception handler.

Every error leaves the API as {"error": "..."}; serializer errors also carry
their field details. Anything unexpected becomes a generic 500 after being
logged, so no internal detail reaches the client.
"""

import logging

from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler

from .exceptions import ServiceError

logger = logging.getLogger(__name__)


def api_exception_handler(exc, context):
    if isinstance(exc, ServiceError):
        return Response({"error": exc.message}, status=exc.status_code)

    response = exception_handler(exc, context)

    if response is None:
        view = context.get("view")
        logger.exception(
            "Unhandled error in %s", view.__class__.__name__ if view else "unknown view",
            exc_info=exc,
        )
        return Response(
            {"error": "Internal server error"},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    if isinstance(exc, ValidationError):
        response.data = {"error": "Invalid input", "details": response.data}
    elif isinstance(exc, Http404):
        response.data = {"error": "Not found"}
    elif isinstance(response.data, dict) and "detail" in response.data:
        response.data = {"error": str(response.data["detail"])}

    return response
