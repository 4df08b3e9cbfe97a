from decouple import config

AIRTABLE_API_URL = config("AIRTABLE_API_URL", default="https://api.airtable.com/v0")
AIRTABLE_BASE_ID = config("AIRTABLE_BASE_ID", default="")
AIRTABLE_PERSONAL_ACCESS_TOKEN = config("AIRTABLE_PERSONAL_ACCESS_TOKEN", default="")
AIRTABLE_GUESTS_TABLE = config("AIRTABLE_GUESTS_TABLE", default="Guests")
AIRTABLE_RSVPS_TABLE = config("AIRTABLE_RSVPS_TABLE", default="RSVPs")
AIRTABLE_TIMEOUT_SECONDS = config("AIRTABLE_TIMEOUT_SECONDS", default=10.0, cast=float)
