"""
Shared fixtures: an in-memory record store standing in for Airtable, a fresh
rate limiter per test and guest factories.
"""

import secrets
import typing as t
from collections.abc import Iterator
from dataclasses import replace
from datetime import date

import faker
import pytest
from django.core.cache import cache
from pytest import MonkeyPatch

from invites.codes import generate_code
from invites.rate_limit import InMemoryRateLimiter
from records.exceptions import RecordNotFoundError
from records.models import RSVP, Guest, Location

ADMIN_PASSWORD = "test-admin-secret"


class FakeRecordStore:
    """In-memory implementation of GuestRecordStore and RSVPRecordStore.

    Matches codes exactly, like Airtable formulas, and keeps a log of the
    lookups and existence checks it served.
    """

    def __init__(self, guests: t.Iterable[Guest] = (), rsvps: t.Iterable[RSVP] = ()) -> None:
        self.guests: dict[str, Guest] = {guest.id: guest for guest in guests}
        self.rsvps: dict[str, RSVP] = {}
        self.lookups: list[str] = []
        self.existence_checks: list[str] = []
        self._next_rsvp = 1
        for rsvp in rsvps:
            self._store_rsvp(rsvp)

    def _store_rsvp(self, rsvp: RSVP) -> RSVP:
        if rsvp.id is None:
            rsvp = rsvp.evolve(id=f"rec_rsvp_{self._next_rsvp}")
            self._next_rsvp += 1
        self.rsvps[t.cast(str, rsvp.id)] = rsvp
        return rsvp

    async def find_guest_by_exact_code(self, code: str) -> Guest | None:
        self.lookups.append(code)
        return next((guest for guest in self.guests.values() if guest.invite_code == code), None)

    async def exists_guest_with_code(self, code: str) -> bool:
        self.existence_checks.append(code)
        return any(guest.invite_code == code for guest in self.guests.values())

    async def patch_guest_code(self, guest_id: str, code: str, issued_at: date) -> None:
        if guest_id not in self.guests:
            raise RecordNotFoundError("Guests", guest_id)
        self.guests[guest_id] = replace(self.guests[guest_id], invite_code=code, code_generated_at=issued_at)

    async def get_guest(self, guest_id: str) -> Guest | None:
        return self.guests.get(guest_id)

    async def list_guests(self) -> list[Guest]:
        return sorted(self.guests.values(), key=lambda guest: guest.name)

    async def find_rsvp(self, code: str, location: Location) -> RSVP | None:
        return next(
            (rsvp for rsvp in self.rsvps.values() if rsvp.invite_code == code and rsvp.location == location),
            None,
        )

    async def create_rsvp(self, rsvp: RSVP) -> None:
        self._store_rsvp(rsvp.evolve(id=None))

    async def update_rsvp(self, rsvp_id: str, rsvp: RSVP) -> None:
        if rsvp_id not in self.rsvps:
            raise RecordNotFoundError("RSVPs", rsvp_id)
        self.rsvps[rsvp_id] = rsvp.evolve(id=rsvp_id)

    async def list_rsvps(self, location: Location | None = None) -> list[RSVP]:
        rsvps = [rsvp for rsvp in self.rsvps.values() if location is None or rsvp.location == location]
        return sorted(rsvps, key=lambda rsvp: rsvp.submitted_at or date.min, reverse=True)


class GuestFactory:
    """Factory for Guest records."""

    fake = faker.Faker()

    def create_guest(self, **kwargs: t.Any) -> Guest:
        kwargs.setdefault("id", "rec" + "".join(secrets.choice("abcdefghijklmnop0123456789") for _ in range(14)))
        kwargs.setdefault("name", self.fake.name())
        kwargs.setdefault("allowed_locations", (Location.LONDON,))
        kwargs.setdefault("invite_code", generate_code())
        return Guest(**kwargs)

    def __call__(self, **kwargs: t.Any) -> Guest:
        return self.create_guest(**kwargs)


@pytest.fixture
def guest_factory() -> GuestFactory:
    return GuestFactory()


@pytest.fixture
def guest(guest_factory: GuestFactory) -> Guest:
    """A guest invited to London and Portugal, with one plus-one allowed in Portugal."""
    return guest_factory(
        name="Ada Obi",
        invite_code="K7M9P2Q4",
        allowed_locations=(Location.LONDON, Location.PORTUGAL),
        location_plus_ones={Location.PORTUGAL: 1},
    )


@pytest.fixture
def uncoded_guest(guest_factory: GuestFactory) -> Guest:
    """A guest without an invite code yet."""
    return guest_factory(name="Bola Ade", invite_code=None, allowed_locations=(Location.LAGOS,))


@pytest.fixture
def record_store(monkeypatch: MonkeyPatch, guest: Guest, uncoded_guest: Guest) -> FakeRecordStore:
    """The record store returned by records.service.get_record_store for this test."""
    store = FakeRecordStore(guests=[guest, uncoded_guest])
    monkeypatch.setattr("records.service._record_store", store)
    return store


@pytest.fixture
def rate_limiter(monkeypatch: MonkeyPatch) -> InMemoryRateLimiter:
    """A fresh limiter (10 attempts / 15 minutes) installed as the process-wide one."""
    limiter = InMemoryRateLimiter(max_attempts=10, window_ms=900_000)
    monkeypatch.setattr("invites.rate_limit._rate_limiter", limiter)
    return limiter


@pytest.fixture(autouse=True)
def isolate_rate_limits(monkeypatch: MonkeyPatch) -> Iterator[None]:
    """Give every test an empty invite limiter and empty ninja_extra throttle counters."""
    monkeypatch.setattr("invites.rate_limit._rate_limiter", None)
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def admin_headers(settings: t.Any) -> dict[str, str]:
    """Authorization headers accepted by the admin endpoints."""
    settings.ADMIN_PASSWORD = ADMIN_PASSWORD
    return {"HTTP_AUTHORIZATION": f"Bearer {ADMIN_PASSWORD}"}
