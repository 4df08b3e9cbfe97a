class InvalidInviteCodeError(Exception):
    """Raised when an RSVP is submitted with a code that matches no guest."""


class LocationNotAllowedError(Exception):
    """Raised when a guest responds for a location they are not invited to."""

    def __init__(self, location: str) -> None:
        super().__init__(f"This invitation does not include {location}.")
        self.location = location


class TooManyPlusOnesError(Exception):
    """Raised when an RSVP names more plus-ones than the guest is allowed."""

    def __init__(self, allowed: int, requested: int) -> None:
        super().__init__(f"You can bring up to {allowed} additional guest(s).")
        self.allowed = allowed
        self.requested = requested
