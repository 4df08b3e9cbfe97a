class RateLimitedError(Exception):
    """Raised when a client IP has used up its validation attempts for the window."""

    def __init__(self, ip: str) -> None:
        super().__init__("Too many validation attempts. Please try again later.")
        self.ip = ip


class GenerationExhaustedError(Exception):
    """Raised when no unused invite code was found within the allowed attempts."""

    def __init__(self, attempts: int) -> None:
        super().__init__(f"Failed to generate unique code after {attempts} attempts")
        self.attempts = attempts


class GuestAlreadyHasCodeError(Exception):
    """Raised when issuing a code for a guest who already has one."""

    def __init__(self, guest_id: str, code: str) -> None:
        super().__init__(f"Guest {guest_id} already has an invite code")
        self.guest_id = guest_id
        self.code = code
