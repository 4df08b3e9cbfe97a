from django.conf import settings
from django.http import HttpRequest
from ninja_extra import NinjaExtraAPI

from common.schema import ResponseOk, VersionResponse
from common.throttling import AnonDefaultThrottle
from invites.controllers import InviteAdminController, InviteController
from invites.exceptions import GenerationExhaustedError, GuestAlreadyHasCodeError, RateLimitedError
from records.exceptions import RecordNotFoundError, RecordStoreError
from rsvps.controllers import RSVPAdminController, RSVPController
from rsvps.exceptions import InvalidInviteCodeError, LocationNotAllowedError, TooManyPlusOnesError

from .exception_handlers import (
    handle_general_exception,
    handle_generation_exhausted_error,
    handle_guest_already_has_code_error,
    handle_invalid_invite_code_error,
    handle_location_not_allowed_error,
    handle_rate_limited_error,
    handle_record_not_found_error,
    handle_record_store_error,
    handle_too_many_plus_ones_error,
)

api = NinjaExtraAPI(
    title="Guestlist API",
    docs_url="/docs",
    version=settings.VERSION,
    description=f"Guestlist API {settings.VERSION}",
    app_name=f"guestlist-api-{settings.VERSION}",
    urls_namespace="api",
    servers=[
        {"url": settings.SERVICE_URL, "description": settings.SERVICE_DESCRIPTION},
    ],
    throttle=[AnonDefaultThrottle()],
)


@api.get("/version", tags=["Version"], response={200: VersionResponse})
def version(request: HttpRequest) -> tuple[int, VersionResponse]:
    """Get the API version.

    Args:
        request: The incoming HTTP request.

    Returns:
        The response status code and message.
    """
    return 200, VersionResponse(version=settings.VERSION)


@api.get("/healthcheck", tags=["Healthcheck"], response={200: ResponseOk})
def healthcheck(request: HttpRequest) -> tuple[int, ResponseOk]:
    """Check the health of the API."""
    return 200, ResponseOk()


api.register_controllers(
    InviteController,
    InviteAdminController,
    RSVPController,
    RSVPAdminController,
)

EXCEPTION_HANDLERS = {
    Exception: handle_general_exception,
    RateLimitedError: handle_rate_limited_error,
    GenerationExhaustedError: handle_generation_exhausted_error,
    GuestAlreadyHasCodeError: handle_guest_already_has_code_error,
    RecordStoreError: handle_record_store_error,
    RecordNotFoundError: handle_record_not_found_error,
    InvalidInviteCodeError: handle_invalid_invite_code_error,
    LocationNotAllowedError: handle_location_not_allowed_error,
    TooManyPlusOnesError: handle_too_many_plus_ones_error,
}

for exc, handler in EXCEPTION_HANDLERS.items():
    api.add_exception_handler(exc, handler)
