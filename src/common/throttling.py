from ninja_extra.throttling import AnonRateThrottle


class AnonDefaultThrottle(AnonRateThrottle):
    rate = "60/min"


class CodeValidationThrottle(AnonRateThrottle):
    # Coarse request cap; failed codes are counted separately by invites.rate_limit
    scope = "invite_validation"
    rate = "30/min"


class RSVPWriteThrottle(AnonRateThrottle):
    scope = "rsvp_write"
    rate = "20/min"


class AdminThrottle(AnonRateThrottle):
    scope = "admin"
    rate = "120/min"
