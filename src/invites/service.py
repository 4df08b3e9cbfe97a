"""Invite code issuance and validation."""

import typing as t
from dataclasses import dataclass
from datetime import date

import structlog
from django.conf import settings
from django.utils import timezone

from invites.codes import generate_code, is_valid_format, normalize_code
from invites.exceptions import GenerationExhaustedError, GuestAlreadyHasCodeError, RateLimitedError
from invites.rate_limit import RateLimiter, get_rate_limiter
from records.exceptions import RecordNotFoundError
from records.models import Guest
from records.protocols import GuestRecordStore

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class IssuedCode:
    code: str
    unique_link: str


def build_invite_link(code: str) -> str:
    """Return the public link that pre-fills ``code`` on the site."""
    return f"{settings.SITE_URL}?code={code}"


async def generate_unique_code(
    store: GuestRecordStore,
    max_attempts: int | None = None,
    generator: t.Callable[[], str] = generate_code,
) -> str:
    """Generate a code no guest record carries yet.

    Args:
        store: Guest record store used for the existence check.
        max_attempts: Candidates to try. Defaults to CODE_GENERATION_MAX_ATTEMPTS.
        generator: Candidate source.

    Returns:
        The first candidate the store reports as unused.

    Raises:
        GenerationExhaustedError: If every candidate was already taken. With
            32^8 possible codes this points at a broken existence check rather
            than bad luck, and is not retried.
    """
    max_attempts = max_attempts if max_attempts is not None else settings.CODE_GENERATION_MAX_ATTEMPTS
    for attempt in range(1, max_attempts + 1):
        candidate = generator()
        if not await store.exists_guest_with_code(candidate):
            logger.info("unique_code_generated", attempt=attempt)
            return candidate
        logger.warning("generated_code_collision", code=candidate, attempt=attempt, max_attempts=max_attempts)

    logger.error("code_generation_exhausted", max_attempts=max_attempts)
    raise GenerationExhaustedError(max_attempts)


async def issue_code(store: GuestRecordStore, guest_id: str, *, issued_at: date | None = None) -> IssuedCode:
    """Assign a fresh invite code to a guest.

    Raises:
        RecordNotFoundError: If the guest does not exist.
        GuestAlreadyHasCodeError: If the guest already holds a code; codes are never reassigned.
        GenerationExhaustedError: See generate_unique_code.
    """
    guest = await store.get_guest(guest_id)
    if guest is None:
        raise RecordNotFoundError(settings.AIRTABLE_GUESTS_TABLE, guest_id)
    if guest.invite_code:
        raise GuestAlreadyHasCodeError(guest_id, guest.invite_code)

    code = await generate_unique_code(store)
    await store.patch_guest_code(guest_id, code, issued_at or timezone.now().date())
    logger.info("invite_code_issued", guest_id=guest_id, code=code)
    return IssuedCode(code=code, unique_link=build_invite_link(code))


async def preview_code(store: GuestRecordStore) -> IssuedCode:
    """Generate an unused code without assigning it to anyone."""
    code = await generate_unique_code(store)
    return IssuedCode(code=code, unique_link=build_invite_link(code))


class CodeValidationService:
    """Resolves an invite code typed by a visitor to a guest.

    Malformed codes and unknown codes produce the same outcome (None) and both
    count against the caller's rate limit, so responses reveal nothing about
    which strings are well-formed codes. Successful validations are not counted.
    """

    def __init__(self, store: GuestRecordStore, rate_limiter: RateLimiter | None = None) -> None:
        self._store = store
        self._rate_limiter = rate_limiter or get_rate_limiter()

    async def validate(self, raw_code: str, client_ip: str) -> Guest | None:
        """Validate a code for a client.

        Returns:
            The matching guest, or None if the code is malformed or unknown.

        Raises:
            RateLimitedError: If the client has no attempts left in its window.
                The store is not queried and nothing is recorded.
        """
        if not self._rate_limiter.check_allowed(client_ip):
            logger.warning("code_validation_rate_limited", ip=client_ip)
            raise RateLimitedError(client_ip)

        code = normalize_code(raw_code)
        if not is_valid_format(code):
            logger.info("code_validation_invalid_format", ip=client_ip, code=code)
            self._rate_limiter.record_attempt(client_ip)
            return None

        guest = await self._store.find_guest_by_exact_code(code)
        if guest is not None and (guest.invite_code or "").upper() != code:
            # The store's query matched more loosely than an exact comparison.
            logger.warning("code_validation_mismatch", searched=code, found=guest.invite_code)
            guest = None

        if guest is None:
            logger.info("code_validation_not_found", ip=client_ip, code=code)
            self._rate_limiter.record_attempt(client_ip)
            return None

        logger.info("code_validation_succeeded", guest_id=guest.id, code=code)
        return guest
