"""RSVP schemas."""

import datetime

from ninja import Field, Schema

from common.schema import OneToOneFiftyString, StrippedString
from records.models import Location


class RSVPSchema(Schema):
    id: str | None = None
    invite_code: str | None = None
    location: Location
    name: str
    phone_number: str | None = None
    guests: int
    attending: bool
    dietary_restrictions: str | None = None
    visa_required: bool | None = None
    accommodation_needed: bool | None = None
    submitted_at: datetime.date | None = None
    plus_one_names: list[str] = []


class RSVPSubmitSchema(Schema):
    invite_code: StrippedString
    location: Location
    name: OneToOneFiftyString
    phone_number: StrippedString | None = Field(None, max_length=32)
    guests: int = Field(1, ge=1, le=20)
    attending: bool = True
    dietary_restrictions: StrippedString | None = Field(None, max_length=1000)
    visa_required: bool = False
    accommodation_needed: bool = False
    plus_one_names: list[StrippedString] = []


class RSVPUpdateSchema(RSVPSubmitSchema):
    id: StrippedString = Field(..., min_length=1, description="Record id of the RSVP to overwrite")


class RSVPLookupResponse(Schema):
    rsvp: RSVPSchema | None = None


class RSVPSubmitResponse(Schema):
    success: bool = True
    updated: bool


class RSVPListResponse(Schema):
    rsvps: list[RSVPSchema]
