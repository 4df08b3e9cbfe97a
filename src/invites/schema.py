"""Schemas for invite code validation and issuance."""

import datetime

from ninja import Field, Schema

from common.schema import StrippedString
from invites.service import build_invite_link
from records.models import Guest, Location


class ValidateCodeSchema(Schema):
    code: StrippedString = Field(..., description="Invite code, case-insensitive")


class GuestSchema(Schema):
    id: str
    invite_code: str | None = None
    name: str
    email: str | None = None
    allowed_locations: list[Location]
    code_generated_at: datetime.date | None = None
    allowed_plus_ones: int | None = None
    allowed_plus_ones_lagos: int | None = None
    allowed_plus_ones_london: int | None = None
    allowed_plus_ones_portugal: int | None = None

    @staticmethod
    def resolve_allowed_plus_ones_lagos(obj: Guest) -> int | None:
        return obj.location_plus_ones.get(Location.LAGOS)

    @staticmethod
    def resolve_allowed_plus_ones_london(obj: Guest) -> int | None:
        return obj.location_plus_ones.get(Location.LONDON)

    @staticmethod
    def resolve_allowed_plus_ones_portugal(obj: Guest) -> int | None:
        return obj.location_plus_ones.get(Location.PORTUGAL)


class AdminGuestSchema(GuestSchema):
    unique_link: str | None = None

    @staticmethod
    def resolve_unique_link(obj: Guest) -> str | None:
        """Build the invitation link for guests that already hold a code."""
        return build_invite_link(obj.invite_code) if obj.invite_code else None


class ValidateCodeResponse(Schema):
    guest: GuestSchema


class GuestListResponse(Schema):
    guests: list[AdminGuestSchema]


class IssueCodeSchema(Schema):
    record_id: StrippedString = Field(..., min_length=1, description="Record id of the guest to issue a code for")


class IssuedCodeResponse(Schema):
    code: str
    unique_link: str
