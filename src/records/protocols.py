"""Protocol definitions for the external guest/RSVP record store.

The invite and RSVP services only talk to these protocols, so the Airtable
backend can be swapped for another tabular store (or a fake in tests).
"""

from datetime import date
from typing import Protocol

from records.models import RSVP, Guest, Location


class GuestRecordStore(Protocol):
    """Access to guest records."""

    async def find_guest_by_exact_code(self, code: str) -> Guest | None:
        """Return the guest whose stored invite code equals ``code`` exactly, if any."""
        ...

    async def exists_guest_with_code(self, code: str) -> bool:
        """Check whether any guest record already carries ``code``."""
        ...

    async def patch_guest_code(self, guest_id: str, code: str, issued_at: date) -> None:
        """Assign an invite code to a guest.

        Raises:
            RecordNotFoundError: If ``guest_id`` does not exist.
        """
        ...

    async def get_guest(self, guest_id: str) -> Guest | None:
        """Return a guest by record id, or None."""
        ...

    async def list_guests(self) -> list[Guest]:
        """Return all guests ordered by name."""
        ...


class RSVPRecordStore(Protocol):
    """Access to RSVP records."""

    async def find_rsvp(self, code: str, location: Location) -> RSVP | None:
        """Return the RSVP submitted with ``code`` for ``location``, if any."""
        ...

    async def create_rsvp(self, rsvp: RSVP) -> None:
        """Create a new RSVP record."""
        ...

    async def update_rsvp(self, rsvp_id: str, rsvp: RSVP) -> None:
        """Overwrite an existing RSVP record.

        Raises:
            RecordNotFoundError: If ``rsvp_id`` does not exist.
        """
        ...

    async def list_rsvps(self, location: Location | None = None) -> list[RSVP]:
        """Return RSVPs, newest submission first, optionally for one location."""
        ...
