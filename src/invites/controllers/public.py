import structlog
from ninja_extra import ControllerBase, api_controller, route

from common.schema import ErrorResponse
from common.throttling import CodeValidationThrottle
from common.utils import get_client_ip
from invites import schema
from invites.service import CodeValidationService
from records.models import Guest
from records.service import get_record_store

logger = structlog.get_logger(__name__)


@api_controller("/invites", tags=["Invites"], throttle=CodeValidationThrottle())
class InviteController(ControllerBase):
    @route.post(
        "/validate",
        url_name="validate_code",
        response={200: schema.ValidateCodeResponse, 404: ErrorResponse, 429: ErrorResponse},
    )
    async def validate_code(self, payload: schema.ValidateCodeSchema) -> tuple[int, dict[str, Guest | str]]:
        """Exchange an invite code for the guest it belongs to.

        Codes are case-insensitive. Malformed and unknown codes both answer 404;
        each failure counts towards a per-IP limit, after which the endpoint
        answers 429 until the window resets.
        """
        ip = get_client_ip(self.context.request)  # type: ignore[union-attr]
        service = CodeValidationService(get_record_store())
        guest = await service.validate(payload.code, ip)
        if guest is None:
            return 404, {"detail": "Invalid code"}
        return 200, {"guest": guest}
