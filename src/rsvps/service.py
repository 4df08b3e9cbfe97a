"""RSVP submission and lookup.

Every operation keyed by an invite code first resolves the guest through
CodeValidationService, so RSVP endpoints share the per-IP limit on failed
codes with the validation endpoint and cannot be used to probe codes.
"""

import structlog
from django.conf import settings
from django.utils import timezone

from invites.rate_limit import RateLimiter
from invites.service import CodeValidationService
from records.exceptions import RecordNotFoundError
from records.models import RSVP, Guest, Location
from records.protocols import GuestRecordStore, RSVPRecordStore
from rsvps.exceptions import InvalidInviteCodeError, LocationNotAllowedError, TooManyPlusOnesError
from rsvps.schema import RSVPSubmitSchema, RSVPUpdateSchema

logger = structlog.get_logger(__name__)


def plus_one_cap(guest: Guest, location: Location) -> int:
    """Return how many plus-ones a guest may bring to a location.

    The per-location cap wins over the global one; no cap means none allowed.
    """
    if location in guest.location_plus_ones:
        return guest.location_plus_ones[location]
    return guest.allowed_plus_ones or 0


async def resolve_guest(
    guest_store: GuestRecordStore,
    code: str,
    client_ip: str,
    rate_limiter: RateLimiter | None = None,
) -> Guest:
    """Return the guest owning ``code``.

    Raises:
        InvalidInviteCodeError: If the code is malformed or unknown.
        RateLimitedError: If the client has exhausted its attempts.
    """
    guest = await CodeValidationService(guest_store, rate_limiter).validate(code, client_ip)
    if guest is None:
        raise InvalidInviteCodeError()
    return guest


def _check_allowed(guest: Guest, payload: RSVPSubmitSchema) -> tuple[str, ...]:
    if payload.location not in guest.allowed_locations:
        raise LocationNotAllowedError(payload.location.value)
    plus_one_names = tuple(name for name in payload.plus_one_names if name)
    allowed = plus_one_cap(guest, payload.location)
    if len(plus_one_names) > allowed:
        raise TooManyPlusOnesError(allowed=allowed, requested=len(plus_one_names))
    return plus_one_names


def _build_rsvp(guest: Guest, payload: RSVPSubmitSchema, plus_one_names: tuple[str, ...], rsvp_id: str | None) -> RSVP:
    return RSVP(
        id=rsvp_id,
        invite_code=guest.invite_code,
        location=payload.location,
        name=payload.name,
        phone_number=payload.phone_number or None,
        guests=payload.guests,
        attending=payload.attending,
        dietary_restrictions=payload.dietary_restrictions or None,
        visa_required=payload.visa_required,
        accommodation_needed=payload.accommodation_needed,
        submitted_at=timezone.now().date(),
        plus_one_names=plus_one_names,
    )


async def get_rsvp(
    guest_store: GuestRecordStore,
    rsvp_store: RSVPRecordStore,
    code: str,
    location: Location,
    client_ip: str,
) -> RSVP | None:
    """Return the guest's existing RSVP for a location, if any."""
    guest = await resolve_guest(guest_store, code, client_ip)
    return await rsvp_store.find_rsvp(guest.invite_code or code, location)


async def submit_rsvp(
    guest_store: GuestRecordStore,
    rsvp_store: RSVPRecordStore,
    payload: RSVPSubmitSchema,
    client_ip: str,
) -> tuple[RSVP, bool]:
    """Create or replace the guest's RSVP for the payload's location.

    There is at most one RSVP per (invite code, location): a second submission
    overwrites the first.

    Returns:
        The RSVP written and whether an existing one was updated.

    Raises:
        InvalidInviteCodeError: If the code matches no guest.
        LocationNotAllowedError: If the guest is not invited to the location.
        TooManyPlusOnesError: If more plus-one names are given than allowed.
    """
    guest = await resolve_guest(guest_store, payload.invite_code, client_ip)
    plus_one_names = _check_allowed(guest, payload)
    code = guest.invite_code or payload.invite_code

    existing = await rsvp_store.find_rsvp(code, payload.location)
    if existing is not None and existing.id:
        rsvp = _build_rsvp(guest, payload, plus_one_names, existing.id)
        await rsvp_store.update_rsvp(existing.id, rsvp)
        logger.info("rsvp_replaced", guest_id=guest.id, location=payload.location.value, attending=rsvp.attending)
        return rsvp, True

    rsvp = _build_rsvp(guest, payload, plus_one_names, None)
    await rsvp_store.create_rsvp(rsvp)
    logger.info("rsvp_created", guest_id=guest.id, location=payload.location.value, attending=rsvp.attending)
    return rsvp, False


async def update_rsvp(
    guest_store: GuestRecordStore,
    rsvp_store: RSVPRecordStore,
    payload: RSVPUpdateSchema,
    client_ip: str,
) -> RSVP:
    """Overwrite an RSVP addressed by its record id.

    Only the guest's own RSVP for the payload's location can be overwritten.

    Raises:
        InvalidInviteCodeError, LocationNotAllowedError, TooManyPlusOnesError: As for submit_rsvp.
        RecordNotFoundError: If the RSVP id does not exist or belongs to another guest.
    """
    guest = await resolve_guest(guest_store, payload.invite_code, client_ip)
    plus_one_names = _check_allowed(guest, payload)
    owned = await rsvp_store.find_rsvp(guest.invite_code or payload.invite_code, payload.location)
    if owned is None or owned.id != payload.id:
        logger.warning("rsvp_update_refused", guest_id=guest.id, rsvp_id=payload.id)
        raise RecordNotFoundError(settings.AIRTABLE_RSVPS_TABLE, payload.id)
    rsvp = _build_rsvp(guest, payload, plus_one_names, payload.id)
    await rsvp_store.update_rsvp(payload.id, rsvp)
    return rsvp


async def list_rsvps(rsvp_store: RSVPRecordStore, location: Location | None = None) -> list[RSVP]:
    """Return all RSVPs, or those for one location, newest first."""
    return await rsvp_store.list_rsvps(location)
