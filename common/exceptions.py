import logging
from typing import Any

from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class RegistrationError(APIException):
    """Base class for errors raised by the registration gateway."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Registration request failed."
    default_code = "error"


class ValidationError(RegistrationError):
    """Missing or malformed request fields, or a write rejected by the record store."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid request."
    default_code = "validation_error"


class StorageError(RegistrationError):
    """The raw file could not be written to object storage."""
    status_code = status.HTTP_502_BAD_GATEWAY
    default_detail = "Failed to store the uploaded file."
    default_code = "storage_error"


class PersistenceError(RegistrationError):
    """The record store failed to read or write."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Failed to persist records."
    default_code = "persistence_error"


class NotFoundError(PersistenceError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Institute not found."
    default_code = "not_found"


def registration_exception_handler(exc: Exception, context: dict[str, Any]) -> Response:
    """Global DRF exception handler.

    Every error leaves the API as:
      {"error": str, "code": str, "fields"?: dict}

    - serializer ValidationError => fields populated
    - anything DRF does not know about => 500 server_error
    """

    resp = exception_handler(exc, context)
    if resp is None:
        logger.exception("Unhandled error in %s", context.get("view").__class__.__name__)
        return Response(
            {"error": "Server error", "code": "server_error"},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    raw = resp.data
    data: dict[str, Any] = {}

    if isinstance(raw, dict) and "detail" in raw:
        data["error"] = str(raw["detail"])
    elif isinstance(raw, dict):
        # Treat as validation-style dict of fields.
        data["error"] = "Invalid request"
        data["fields"] = raw
    elif isinstance(raw, list):
        data["error"] = " ".join(str(item) for item in raw) or "Invalid request"
    else:
        data["error"] = str(raw)

    code = exc.get_codes() if isinstance(exc, APIException) else None
    if isinstance(code, str):
        data["code"] = code
    elif code is not None:
        data["code"] = "validation_error"
    else:
        data["code"] = "error"

    if resp.status_code >= 500:
        logger.error("Request failed: %s (%s)", data["error"], data["code"])
    else:
        logger.warning("Request rejected: %s (%s)", data["error"], data["code"])

    resp.data = data
    return resp
