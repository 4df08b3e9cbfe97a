"""Airtable-backed guest and RSVP record store.

Guests and RSVPs are rows of two Airtable tables, accessed through the
Airtable REST API:

- Lookups use ``filterByFormula`` with an exact ``{field}="value"`` match.
  Airtable formulas compare strings case-sensitively, so codes are always
  written and queried in canonical uppercase.
- Listings follow the ``offset`` cursor until every page has been read.
- Optional date columns (``code_generated_at``, ``submitted_at``) are dropped
  and the write retried once when the table rejects them, so a table missing
  those columns still accepts codes and RSVPs.

Every request opens its own ``httpx.AsyncClient``; the store holds no
connection state and is safe to share between event loops.
"""

import typing as t
from datetime import date

import httpx
import structlog
from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from django.utils import timezone

from records.exceptions import RecordNotFoundError, RecordStoreError
from records.models import RSVP, Guest, Location

logger = structlog.get_logger(__name__)

PAGE_SIZE = 100


def _formula_string(value: str) -> str:
    """Quote a value for use inside an Airtable formula."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _positive_int(value: t.Any) -> int | None:
    """Keep plus-one caps only when they are a positive number."""
    if isinstance(value, bool) or not isinstance(value, int | float):
        return None
    return int(value) if value > 0 else None


def _parse_date(value: t.Any) -> date | None:
    if not value or not isinstance(value, str):
        return None
    try:
        # Date fields come back as YYYY-MM-DD, date-time fields as full ISO strings
        return date.fromisoformat(value[:10])
    except ValueError:
        return None


def _parse_locations(values: t.Any) -> tuple[Location, ...]:
    locations = []
    for value in values or []:
        try:
            locations.append(Location(value))
        except ValueError:
            logger.warning("unknown_guest_location", location=value)
    return tuple(locations)


def _parse_plus_one_names(value: t.Any) -> tuple[str, ...]:
    """Plus-one names are stored as a comma-separated long text field."""
    if isinstance(value, str):
        names = value.split(",")
    elif isinstance(value, list):
        names = [str(name) for name in value]
    else:
        return ()
    return tuple(name.strip() for name in names if name.strip())


def guest_from_record(record: dict[str, t.Any]) -> Guest:
    """Build a Guest from an Airtable record."""
    fields = record.get("fields", {})
    location_plus_ones = {}
    for location in Location:
        cap = _positive_int(fields.get(f"allowed_plus_ones_{location.value.lower()}"))
        if cap is not None:
            location_plus_ones[location] = cap
    return Guest(
        id=record["id"],
        name=fields.get("name", ""),
        allowed_locations=_parse_locations(fields.get("allowed_locations")),
        invite_code=fields.get("invite_code") or None,
        email=fields.get("email") or None,
        code_generated_at=_parse_date(fields.get("code_generated_at")),
        allowed_plus_ones=_positive_int(fields.get("allowed_plus_ones")),
        location_plus_ones=location_plus_ones,
    )


def rsvp_from_record(record: dict[str, t.Any]) -> RSVP:
    """Build an RSVP from an Airtable record."""
    fields = record.get("fields", {})
    return RSVP(
        id=record.get("id"),
        invite_code=fields.get("invite_code") or None,
        location=Location(fields["location"]),
        name=fields.get("name", ""),
        phone_number=fields.get("phone_number") or None,
        guests=fields.get("guests") or 1,
        attending=bool(fields.get("attending", False)),
        dietary_restrictions=fields.get("dietary_restrictions") or None,
        visa_required=fields.get("visa_required"),
        accommodation_needed=fields.get("accommodation_needed"),
        submitted_at=_parse_date(fields.get("submitted_at")),
        plus_one_names=_parse_plus_one_names(fields.get("plus_one_names")),
    )


def rsvp_to_fields(rsvp: RSVP, *, clear_missing: bool = False) -> dict[str, t.Any]:
    """Serialize an RSVP into Airtable fields.

    Args:
        rsvp: The RSVP to write.
        clear_missing: Write explicit nulls for empty optional text fields, so an
            update clears values left over from a previous submission.
    """
    fields: dict[str, t.Any] = {
        "location": rsvp.location.value,
        "name": rsvp.name,
        "phone_number": rsvp.phone_number,
        "guests": rsvp.guests,
        "attending": rsvp.attending,
    }
    if rsvp.invite_code:
        fields["invite_code"] = rsvp.invite_code
    if rsvp.dietary_restrictions:
        fields["dietary_restrictions"] = rsvp.dietary_restrictions
    elif clear_missing:
        fields["dietary_restrictions"] = None
    if rsvp.visa_required is not None:
        fields["visa_required"] = rsvp.visa_required
    if rsvp.accommodation_needed is not None:
        fields["accommodation_needed"] = rsvp.accommodation_needed
    if rsvp.plus_one_names:
        fields["plus_one_names"] = ", ".join(rsvp.plus_one_names)
    elif clear_missing:
        fields["plus_one_names"] = None
    submitted_at = rsvp.submitted_at or timezone.now().date()
    fields["submitted_at"] = submitted_at.isoformat()
    return fields


def _rejects_field(error: RecordStoreError, field_name: str) -> bool:
    message = str(error)
    return field_name in message or "cannot accept the provided value" in message


class AirtableRecordStore:
    """Guest and RSVP record store backed by the Airtable REST API."""

    def __init__(
        self,
        base_id: str | None = None,
        token: str | None = None,
        api_url: str | None = None,
        guests_table: str | None = None,
        rsvps_table: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the store.

        Args:
            base_id: Airtable base id (``app...``).
            token: Airtable personal access token.
            api_url: Root of the Airtable REST API.
            guests_table: Name of the guests table.
            rsvps_table: Name of the RSVPs table.
            timeout: Request timeout in seconds.
            transport: Optional httpx transport, used to stub the API in tests.

        Raises:
            ImproperlyConfigured: If the base id or token is missing.
        """
        self.base_id = base_id or settings.AIRTABLE_BASE_ID
        self.token = token or settings.AIRTABLE_PERSONAL_ACCESS_TOKEN
        if not self.base_id or not self.token:
            raise ImproperlyConfigured(
                "Missing Airtable configuration. Please set AIRTABLE_BASE_ID and "
                "AIRTABLE_PERSONAL_ACCESS_TOKEN environment variables."
            )
        self.api_url = (api_url or settings.AIRTABLE_API_URL).rstrip("/")
        self.guests_table = guests_table or settings.AIRTABLE_GUESTS_TABLE
        self.rsvps_table = rsvps_table or settings.AIRTABLE_RSVPS_TABLE
        self.timeout = timeout or settings.AIRTABLE_TIMEOUT_SECONDS
        self._transport = transport

    # ------------------------------------------------------------------
    # HTTP plumbing
    # ------------------------------------------------------------------

    async def _request(
        self,
        method: str,
        table: str,
        record_id: str | None = None,
        *,
        params: dict[str, t.Any] | None = None,
        body: dict[str, t.Any] | None = None,
    ) -> dict[str, t.Any]:
        path = f"/{table}/{record_id}" if record_id else f"/{table}"
        async with httpx.AsyncClient(
            base_url=f"{self.api_url}/{self.base_id}",
            headers={"Authorization": f"Bearer {self.token}"},
            timeout=httpx.Timeout(self.timeout),
            transport=self._transport,
        ) as client:
            try:
                response = await client.request(method, path, params=params, json=body)
            except httpx.RequestError as e:
                logger.error("airtable_request_failed", method=method, table=table, error=str(e))
                raise RecordStoreError(f"Airtable request failed: {e}") from e

        if response.is_error:
            raise self._error_from_response(response, table, record_id)
        return t.cast(dict[str, t.Any], response.json())

    def _error_from_response(self, response: httpx.Response, table: str, record_id: str | None) -> RecordStoreError:
        try:
            payload = response.json()
        except ValueError:
            payload = {"error": {"message": response.text or "Unknown error"}}

        error = payload.get("error") if isinstance(payload, dict) else None
        if isinstance(error, dict):
            error_type = str(error.get("type", ""))
            message = str(error.get("message", error_type))
        else:
            error_type = str(error or "")
            message = error_type or response.text

        logger.error(
            "airtable_error_response",
            status_code=response.status_code,
            table=table,
            record_id=record_id,
            error_type=error_type,
            error_message=message,
        )

        if "UNKNOWN_FIELD_NAME" in error_type or "Unknown field name" in message:
            return RecordStoreError(
                f"Airtable field not found ({message}). Please check the {table} table schema.",
                status_code=response.status_code,
            )
        if response.status_code == 404 or "NOT_FOUND" in error_type:
            if record_id:
                return RecordNotFoundError(table, record_id)
            return RecordStoreError(f"Airtable table {table!r} not found.", status_code=response.status_code)
        if response.status_code in (401, 403) or "AUTHENTICATION_REQUIRED" in error_type:
            return RecordStoreError(
                "Airtable authentication failed. Please check the personal access token.",
                status_code=response.status_code,
            )
        return RecordStoreError(f"Airtable API error: {message}", status_code=response.status_code)

    async def _list_records(self, table: str, params: dict[str, t.Any]) -> list[dict[str, t.Any]]:
        records: list[dict[str, t.Any]] = []
        page_params = {"pageSize": PAGE_SIZE, **params}
        while True:
            data = await self._request("GET", table, params=page_params)
            records.extend(data.get("records", []))
            offset = data.get("offset")
            if not offset:
                return records
            page_params = {**page_params, "offset": offset}

    async def _find_first(self, table: str, formula: str) -> dict[str, t.Any] | None:
        data = await self._request("GET", table, params={"filterByFormula": formula, "maxRecords": 1})
        records = data.get("records", [])
        return records[0] if records else None

    # ------------------------------------------------------------------
    # Guests
    # ------------------------------------------------------------------

    async def find_guest_by_exact_code(self, code: str) -> Guest | None:
        """Return the guest whose ``invite_code`` equals ``code``."""
        record = await self._find_first(self.guests_table, f"{{invite_code}}={_formula_string(code)}")
        if record is None:
            logger.info("guest_not_found_for_code", code=code)
            return None
        return guest_from_record(record)

    async def exists_guest_with_code(self, code: str) -> bool:
        """Check whether any guest already carries ``code``."""
        record = await self._find_first(self.guests_table, f"{{invite_code}}={_formula_string(code)}")
        return record is not None

    async def patch_guest_code(self, guest_id: str, code: str, issued_at: date) -> None:
        """Write the invite code and issuance date onto a guest record."""
        fields = {"invite_code": code, "code_generated_at": issued_at.isoformat()}
        try:
            await self._request("PATCH", self.guests_table, guest_id, body={"fields": fields})
        except RecordNotFoundError:
            raise
        except RecordStoreError as e:
            if not _rejects_field(e, "code_generated_at"):
                raise
            logger.warning("code_generated_at_rejected_retrying_without_date", guest_id=guest_id)
            await self._request("PATCH", self.guests_table, guest_id, body={"fields": {"invite_code": code}})
        logger.info("guest_code_saved", guest_id=guest_id, code=code)

    async def get_guest(self, guest_id: str) -> Guest | None:
        """Return a guest by record id."""
        try:
            record = await self._request("GET", self.guests_table, guest_id)
        except RecordNotFoundError:
            return None
        return guest_from_record(record)

    async def list_guests(self) -> list[Guest]:
        """Return all guests sorted by name."""
        records = await self._list_records(self.guests_table, {"sort[0][field]": "name"})
        return [guest_from_record(record) for record in records]

    # ------------------------------------------------------------------
    # RSVPs
    # ------------------------------------------------------------------

    async def find_rsvp(self, code: str, location: Location) -> RSVP | None:
        """Return the RSVP for an invite code and location."""
        formula = f"AND({{invite_code}}={_formula_string(code)}, {{location}}={_formula_string(location.value)})"
        record = await self._find_first(self.rsvps_table, formula)
        return rsvp_from_record(record) if record else None

    async def create_rsvp(self, rsvp: RSVP) -> None:
        """Create an RSVP record."""
        fields = rsvp_to_fields(rsvp)
        try:
            await self._request("POST", self.rsvps_table, body={"fields": fields})
        except RecordStoreError as e:
            if not _rejects_field(e, "submitted_at"):
                raise
            logger.warning("submitted_at_rejected_retrying_without_date", location=rsvp.location.value)
            fields.pop("submitted_at")
            await self._request("POST", self.rsvps_table, body={"fields": fields})

    async def update_rsvp(self, rsvp_id: str, rsvp: RSVP) -> None:
        """Overwrite an RSVP record."""
        fields = rsvp_to_fields(rsvp, clear_missing=True)
        await self._request("PATCH", self.rsvps_table, rsvp_id, body={"fields": fields})
        logger.info("rsvp_updated", rsvp_id=rsvp_id)

    async def list_rsvps(self, location: Location | None = None) -> list[RSVP]:
        """Return RSVPs, most recent submission first."""
        params: dict[str, t.Any] = {
            "sort[0][field]": "submitted_at",
            "sort[0][direction]": "desc",
        }
        if location is not None:
            params["filterByFormula"] = f"{{location}}={_formula_string(location.value)}"
        records = await self._list_records(self.rsvps_table, params)
        rsvps = []
        for record in records:
            try:
                rsvps.append(rsvp_from_record(record))
            except (KeyError, ValueError):
                logger.warning("skipping_malformed_rsvp_record", record_id=record.get("id"))
        return rsvps
