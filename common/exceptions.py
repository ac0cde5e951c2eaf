# common/exceptions.py
import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from payments.mpesa import MpesaError

logger = logging.getLogger(__name__)


def custom_exception_handler(exc, context):
    response = exception_handler(exc, context)
    if response is not None:
        return response

    if isinstance(exc, IntegrityError):
        return Response(
            {"detail": "Database integrity error: " + str(exc)},
            status=status.HTTP_400_BAD_REQUEST,
        )

    if isinstance(exc, DjangoValidationError):
        detail = exc.message_dict if hasattr(exc, "error_dict") else {"detail": exc.messages}
        return Response(detail, status=status.HTTP_400_BAD_REQUEST)

    if isinstance(exc, MpesaError):
        view = context.get("view")
        logger.warning("M-Pesa error in %s: %s", view.__class__.__name__ if view else "-", exc.cause or exc)
        return Response({"detail": str(exc)}, status=status.HTTP_502_BAD_GATEWAY)

    return response
