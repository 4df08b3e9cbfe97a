"""Guest and RSVP records as held by the external record store.

These are plain value objects: the records themselves live in Airtable and
are never persisted by Django.
"""

import typing as t
from dataclasses import dataclass, field, replace
from datetime import date
from enum import StrEnum


class Location(StrEnum):
    LAGOS = "Lagos"
    LONDON = "London"
    PORTUGAL = "Portugal"


@dataclass(frozen=True)
class Guest:
    """An invited guest.

    Attributes:
        id: Opaque record identifier from the record store.
        name: Display name.
        allowed_locations: Locations the guest is invited to.
        invite_code: Canonical invite code, None until one is issued.
        email: Optional contact email.
        code_generated_at: Date the invite code was issued.
        allowed_plus_ones: Global cap on additional attendees.
        location_plus_ones: Per-location caps, preferred over the global one.
    """

    id: str
    name: str
    allowed_locations: tuple[Location, ...] = ()
    invite_code: str | None = None
    email: str | None = None
    code_generated_at: date | None = None
    allowed_plus_ones: int | None = None
    location_plus_ones: dict[Location, int] = field(default_factory=dict)


@dataclass(frozen=True)
class RSVP:
    """An attendance response for one location."""

    location: Location
    name: str
    attending: bool
    guests: int = 1
    id: str | None = None
    invite_code: str | None = None
    phone_number: str | None = None
    dietary_restrictions: str | None = None
    visa_required: bool | None = None
    accommodation_needed: bool | None = None
    submitted_at: date | None = None
    plus_one_names: tuple[str, ...] = ()

    def evolve(self, **changes: t.Any) -> "RSVP":
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)
