import logging

from django.core.exceptions import ObjectDoesNotExist
from django.http import Http404
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from ..exceptions import MarketplaceError

logger = logging.getLogger(__name__)


def marketplace_exception_handler(exc, context):
    """Render domain errors as ``{"error": message}`` and defer the rest to DRF."""
    if isinstance(exc, MarketplaceError):
        if exc.status_code >= 500:
            logger.error("%s in %s: %s", type(exc).__name__, context.get("view"), exc.message)
        return Response({"error": exc.message}, status=exc.status_code)
    if isinstance(exc, PermissionError):
        return Response({"error": str(exc) or "Permission denied."}, status=status.HTTP_403_FORBIDDEN)
    if isinstance(exc, ObjectDoesNotExist) and not isinstance(exc, Http404):
        return Response({"error": "Not found."}, status=status.HTTP_404_NOT_FOUND)

    response = exception_handler(exc, context)
    if response is not None and isinstance(response.data, dict) and "detail" in response.data:
        response.data = {"error": str(response.data["detail"])}
    return response
