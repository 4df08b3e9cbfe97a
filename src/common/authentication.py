import hmac
import typing as t

import structlog
from django.conf import settings
from django.http import HttpRequest
from ninja.security import HttpBearer

logger = structlog.get_logger(__name__)


class AdminBearerAuth(HttpBearer):
    """Shared-secret bearer authentication for the admin endpoints.

    Requests must send ``Authorization: Bearer <ADMIN_PASSWORD>``. When
    ADMIN_PASSWORD is not configured every request is refused.

    Usage:
        @api_controller("/admin", auth=AdminBearerAuth())
        class AdminController:
            ...
    """

    def authenticate(self, request: HttpRequest, token: str) -> t.Any:
        """Return the token when it matches the configured admin password, None otherwise."""
        expected = settings.ADMIN_PASSWORD
        if not expected:
            logger.error("admin_password_not_configured")
            return None
        if not hmac.compare_digest(token.encode(), expected.encode()):
            logger.warning("admin_auth_failed", path=request.path)
            return None
        return token
