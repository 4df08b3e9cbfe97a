"""Exception handlers for the API."""

import traceback
import typing as t
from copy import deepcopy

import structlog
from django.conf import settings
from django.http import HttpRequest
from ninja.responses import Response

from invites.exceptions import GenerationExhaustedError, GuestAlreadyHasCodeError, RateLimitedError
from records.exceptions import RecordNotFoundError, RecordStoreError
from rsvps.exceptions import InvalidInviteCodeError, LocationNotAllowedError, TooManyPlusOnesError

logger = structlog.get_logger(__name__)


def handle_general_exception(request: HttpRequest, exc: Exception | t.Type[Exception]) -> Response:
    """Handle a general exception.

    Args:
        request: The incoming HTTP request.
        exc: The exception.

    Returns:
        The response.
    """
    logger.exception(
        "INTERNAL_SERVER_ERROR",
        exc_info=True,
        method=request.method,
        path=request.path,
        headers=obfuscate(dict(request.headers)),
    )
    data = {"detail": "Internal Server Error."}
    if settings.DEBUG:  # pragma: no cover
        data["traceback"] = traceback.format_exc()
    return Response(status=500, data=data)


def handle_rate_limited_error(request: HttpRequest, exc: RateLimitedError | t.Type[RateLimitedError]) -> Response:
    """Handle a client that ran out of code validation attempts."""
    return Response(status=429, data={"detail": str(exc)})


def handle_generation_exhausted_error(
    request: HttpRequest, exc: GenerationExhaustedError | t.Type[GenerationExhaustedError]
) -> Response:
    """Handle a failed unique code search. This is an operational alarm, not user error."""
    logger.error("CODE_GENERATION_EXHAUSTED", path=request.path, detail=str(exc))
    return Response(status=500, data={"detail": "Failed to generate a unique invite code."})


def handle_guest_already_has_code_error(
    request: HttpRequest, exc: GuestAlreadyHasCodeError | t.Type[GuestAlreadyHasCodeError]
) -> Response:
    """Handle a request to issue a second code to a guest."""
    return Response(status=409, data={"detail": "This guest already has an invite code."})


def handle_record_not_found_error(
    request: HttpRequest, exc: RecordNotFoundError | t.Type[RecordNotFoundError]
) -> Response:
    """Handle a record id unknown to the record store."""
    return Response(status=404, data={"detail": "Record not found."})


def handle_record_store_error(request: HttpRequest, exc: RecordStoreError | t.Type[RecordStoreError]) -> Response:
    """Handle a failure of the external record store.

    The full error is logged for operators; clients get a generic message.
    """
    logger.error("RECORD_STORE_ERROR", path=request.path, detail=str(exc), exc_info=True)
    return Response(status=502, data={"detail": "The guest list is temporarily unavailable."})


def handle_invalid_invite_code_error(
    request: HttpRequest, exc: InvalidInviteCodeError | t.Type[InvalidInviteCodeError]
) -> Response:
    """Handle an RSVP request carrying an unknown code."""
    return Response(status=404, data={"detail": "Invalid code"})


def handle_location_not_allowed_error(
    request: HttpRequest, exc: LocationNotAllowedError | t.Type[LocationNotAllowedError]
) -> Response:
    """Handle an RSVP for a location the guest is not invited to."""
    return Response(status=403, data={"detail": str(exc)})


def handle_too_many_plus_ones_error(
    request: HttpRequest, exc: TooManyPlusOnesError | t.Type[TooManyPlusOnesError]
) -> Response:
    """Handle an RSVP naming more plus-ones than allowed."""
    return Response(status=400, data={"detail": str(exc)})


SENSITIVE_KEYS = {"password", "token", "x-api-key", "authorization", "authentication", "cookie"}


def obfuscate(data: dict[str, t.Any]) -> dict[str, t.Any]:
    """Obfuscate sensitive data in payloads and headers."""
    new_data = deepcopy(data)
    for key in data.keys():
        if key.lower() in SENSITIVE_KEYS:
            new_data[key] = "********"
    return new_data
