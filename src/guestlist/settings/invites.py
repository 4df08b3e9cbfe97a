from decouple import Choices, config

# Invite code validation throttle (per client IP)
RATE_LIMIT_MAX_ATTEMPTS = config("RATE_LIMIT_MAX_ATTEMPTS", default=10, cast=int)
RATE_LIMIT_WINDOW_MS = config("RATE_LIMIT_WINDOW_MS", default=900_000, cast=int)
# "memory" keeps counters in the process, "cache" uses the Django cache (shared when CACHES is shared)
RATE_LIMIT_BACKEND = config("RATE_LIMIT_BACKEND", default="memory", cast=Choices(["memory", "cache"]))

CODE_GENERATION_MAX_ATTEMPTS = config("CODE_GENERATION_MAX_ATTEMPTS", default=10, cast=int)
