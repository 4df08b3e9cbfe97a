from ninja import Query
from ninja.errors import HttpError
from ninja_extra import ControllerBase, api_controller, route

from common.authentication import AdminBearerAuth
from common.throttling import AdminThrottle, AnonDefaultThrottle, RSVPWriteThrottle
from common.utils import get_client_ip
from records.models import RSVP, Location
from records.service import get_record_store
from rsvps import schema
from rsvps import service as rsvp_service


@api_controller("/rsvp", tags=["RSVP"], throttle=AnonDefaultThrottle())
class RSVPController(ControllerBase):
    def client_ip(self) -> str:
        return get_client_ip(self.context.request)  # type: ignore[union-attr]

    @route.get("/", url_name="rsvp", response=schema.RSVPLookupResponse)
    async def get_rsvp(self, invite_code: str = Query(...), location: Location = Query(...)) -> dict[str, RSVP | None]:
        """Return the RSVP already submitted with an invite code for a location, or null."""
        store = get_record_store()
        return {"rsvp": await rsvp_service.get_rsvp(store, store, invite_code, location, self.client_ip())}

    @route.post("/", url_name="rsvp", response=schema.RSVPSubmitResponse, throttle=RSVPWriteThrottle())
    async def submit_rsvp(self, payload: schema.RSVPSubmitSchema) -> dict[str, bool]:
        """Submit an RSVP for one location.

        A guest has one RSVP per location; submitting again replaces it and
        answers ``updated: true``.
        """
        store = get_record_store()
        _, updated = await rsvp_service.submit_rsvp(store, store, payload, self.client_ip())
        return {"success": True, "updated": updated}

    @route.put("/", url_name="rsvp", response=schema.RSVPSubmitResponse, throttle=RSVPWriteThrottle())
    async def update_rsvp(self, payload: schema.RSVPUpdateSchema) -> dict[str, bool]:
        """Overwrite an existing RSVP by its id."""
        store = get_record_store()
        await rsvp_service.update_rsvp(store, store, payload, self.client_ip())
        return {"success": True, "updated": True}


@api_controller("/admin/rsvps", auth=AdminBearerAuth(), tags=["Admin"], throttle=AdminThrottle())
class RSVPAdminController(ControllerBase):
    @route.get("/", url_name="admin_list_rsvps", response=schema.RSVPListResponse)
    async def list_rsvps(self, location: str | None = None) -> dict[str, list[RSVP]]:
        """List RSVPs, newest first. ``location`` filters by location; ``all`` or no value lists everything."""
        selected = None
        if location and location != "all":
            try:
                selected = Location(location)
            except ValueError:
                raise HttpError(400, f"Unknown location: {location}")
        return {"rsvps": await rsvp_service.list_rsvps(get_record_store(), selected)}
