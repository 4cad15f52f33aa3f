from __future__ import annotations

import logging

from rest_framework.response import Response
from rest_framework.views import exception_handler

from .services.errors import BookCraftError

logger = logging.getLogger(__name__)


def bookcraft_exception_handler(exc, context):
    """Render BookCraftError as ``{"error": {"code", "message"}}``; defer everything else to DRF."""
    if isinstance(exc, BookCraftError):
        logger.info("Request failed code=%s status=%s", exc.code, exc.status_code)
        return Response(exc.as_payload(), status=exc.status_code)
    return exception_handler(exc, context)
