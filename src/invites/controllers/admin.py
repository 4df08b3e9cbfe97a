from ninja_extra import ControllerBase, api_controller, route

from common.authentication import AdminBearerAuth
from common.throttling import AdminThrottle
from invites import schema
from invites import service as invite_service
from invites.service import IssuedCode
from records.models import Guest
from records.service import get_record_store


@api_controller("/admin", auth=AdminBearerAuth(), tags=["Admin"], throttle=AdminThrottle())
class InviteAdminController(ControllerBase):
    @route.get("/guests", url_name="admin_list_guests", response=schema.GuestListResponse)
    async def list_guests(self) -> dict[str, list[Guest]]:
        """List every guest with their invitation link, when a code has been issued."""
        return {"guests": await get_record_store().list_guests()}

    @route.post("/codes", url_name="admin_codes", response=schema.IssuedCodeResponse)
    async def issue_code(self, payload: schema.IssueCodeSchema) -> IssuedCode:
        """Issue an invite code to a guest record.

        Guests that already hold a code are refused with 409; codes are never reassigned.
        """
        return await invite_service.issue_code(get_record_store(), payload.record_id)

    @route.get("/codes", url_name="admin_codes", response=schema.IssuedCodeResponse)
    async def preview_code(self) -> IssuedCode:
        """Generate an unused invite code without assigning it to a guest."""
        return await invite_service.preview_code(get_record_store())
