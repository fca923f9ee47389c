"""
Request schemas.

Every schema accepts camelCase keys (as sent by the web client) as well as
snake_case, drops unknown keys and treats empty strings as absent values.
``model_dump`` output is snake_case so it maps directly onto model columns.
"""

from __future__ import annotations

from datetime import date
from typing import Any, List, Literal, Optional

import pydantic
from pydantic import (
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    StrictBool,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from churchconnect.exceptions import ValidationError
from churchconnect.models.enums import (
    AgeGroup,
    CheckInMethod,
    ChurchRole,
    ContactMethod,
    EventType,
    FollowUpStatus,
    Gender,
    Relationship,
    ReportFrequency,
    SuperAdminRole,
)
from churchconnect.utils.dates import today

PHONE_PATTERN = r"^\+?[\d\s\-()]+$"
TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"
HEX_COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"
SUBDOMAIN_PATTERN = r"^[a-z0-9-]+$"
URL_PATTERN = r"^https?://\S+$"
PIN_PATTERN = r"^\d{6}$"


class RequestSchema(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
        str_strip_whitespace=True,
        extra="ignore",
    )

    @model_validator(mode="before")
    @classmethod
    def blank_strings_to_none(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {k: (None if v == "" else v) for k, v in data.items()}
        return data

    def changes(self):
        """Fields the client actually sent, by column name."""
        return self.model_dump(exclude_unset=True)


def validate(schema_cls, data):
    """Validate a request body, raising ValidationError (400) with field details."""
    if data is None:
        raise ValidationError("No data provided")
    try:
        return schema_cls.model_validate(data)
    except pydantic.ValidationError as e:
        details = [
            {
                "field": ".".join(str(part) for part in err["loc"]),
                "message": err["msg"],
            }
            for err in e.errors()
        ]
        raise ValidationError("Validation error", details=details)


# ---- Churches -------------------------------------------------------------


class ChurchRegistration(RequestSchema):
    church_name: str = Field(..., min_length=1, max_length=255)
    admin_first_name: str = Field(..., min_length=1)
    admin_last_name: str = Field(..., min_length=1)
    admin_email: EmailStr
    password: str = Field(..., min_length=8)
    subdomain: Optional[str] = Field(None, min_length=3, max_length=50, pattern=SUBDOMAIN_PATTERN)


class LoginRequest(RequestSchema):
    email: EmailStr
    password: str = Field(..., min_length=1)


class ChurchSettingsUpdate(RequestSchema):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    logo_url: Optional[str] = Field(None, pattern=URL_PATTERN)
    brand_color: Optional[str] = Field(None, pattern=HEX_COLOR_PATTERN)


class BrandingUpdate(RequestSchema):
    logo_url: Optional[str] = Field(None, pattern=URL_PATTERN)
    banner_url: Optional[str] = Field(None, pattern=URL_PATTERN)
    brand_color: Optional[str] = Field(None, pattern=HEX_COLOR_PATTERN)


class KioskSettingsUpdate(RequestSchema):
    kiosk_mode_enabled: Optional[bool] = None
    kiosk_session_timeout: Optional[int] = Field(None, ge=5, le=1440)


class SubdomainCheck(RequestSchema):
    subdomain: str = Field(..., min_length=3, max_length=50, pattern=SUBDOMAIN_PATTERN)


# ---- Church users -----------------------------------------------------------


class ChurchUserCreate(RequestSchema):
    username: Optional[str] = None
    full_name: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=6)
    role: ChurchRole
    is_active: bool = True


class ChurchUserUpdate(RequestSchema):
    full_name: Optional[str] = Field(None, min_length=1)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=6)
    role: Optional[ChurchRole] = None
    is_active: Optional[bool] = None


# ---- Members ----------------------------------------------------------------


class MemberFields(RequestSchema):
    title: Optional[str] = None
    phone: Optional[str] = Field(None, pattern=PHONE_PATTERN)
    email: Optional[EmailStr] = None
    whatsapp_number: Optional[str] = Field(None, pattern=PHONE_PATTERN)
    address: Optional[str] = None
    date_of_birth: Optional[date] = None
    wedding_anniversary: Optional[date] = None
    fingerprint_id: Optional[str] = None
    parent_id: Optional[int] = None
    family_group_id: Optional[str] = None

    @field_validator("date_of_birth")
    @classmethod
    def birth_date_in_past(cls, value):
        if value is not None and value >= today():
            raise ValueError("Date of birth must be in the past")
        return value


class MemberCreate(MemberFields):
    first_name: str = Field(..., min_length=1, max_length=100)
    surname: str = Field(..., min_length=1, max_length=100)
    gender: Gender
    age_group: AgeGroup
    is_current_member: bool = True
    relationship_to_head: Relationship = Relationship.HEAD
    is_family_head: bool = True

    @model_validator(mode="after")
    def adults_need_phone(self):
        if self.age_group == AgeGroup.ADULT.value and not self.phone:
            raise ValueError("Phone number is required for adults")
        return self


class MemberUpdate(MemberFields):
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    surname: Optional[str] = Field(None, min_length=1, max_length=100)
    gender: Optional[Gender] = None
    age_group: Optional[AgeGroup] = None
    is_current_member: Optional[bool] = None
    relationship_to_head: Optional[Relationship] = None
    is_family_head: Optional[bool] = None


class BulkUploadRequest(RequestSchema):
    members: List[dict] = Field(..., min_length=1)


class FingerprintEnroll(RequestSchema):
    member_id: int
    fingerprint_id: Optional[str] = None


class FingerprintScan(RequestSchema):
    fingerprint_id: Optional[str] = None
    device_id: Optional[str] = None


# ---- Attendance -------------------------------------------------------------


class AttendanceCreate(RequestSchema):
    member_id: Optional[int] = None
    visitor_id: Optional[int] = None
    event_id: Optional[int] = None
    attendance_date: Optional[date] = None
    check_in_method: CheckInMethod = CheckInMethod.MANUAL
    is_guest: bool = False
    visitor_name: Optional[str] = None
    visitor_gender: Optional[Gender] = None
    visitor_age_group: Optional[AgeGroup] = None

    @model_validator(mode="after")
    def one_attendee(self):
        if bool(self.member_id) == bool(self.visitor_id):
            raise ValueError("Exactly one of memberId or visitorId must be provided")
        if self.visitor_id and not (
            self.visitor_name and self.visitor_gender and self.visitor_age_group
        ):
            raise ValueError(
                "Visitor check-ins require visitorName, visitorGender and visitorAgeGroup"
            )
        return self


class KioskCheckIn(RequestSchema):
    event_id: Optional[int] = None


class FamilyCheckIn(RequestSchema):
    parent_id: int
    event_id: Optional[int] = None


class SelectiveFamilyCheckIn(FamilyCheckIn):
    children_ids: List[int] = Field(default_factory=list)


# ---- Visitors ---------------------------------------------------------------


class VisitorFields(RequestSchema):
    gender: Optional[Gender] = None
    address: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, pattern=PHONE_PATTERN)
    whatsapp_number: Optional[str] = Field(None, pattern=PHONE_PATTERN)
    wedding_anniversary: Optional[date] = None
    birthday: Optional[date] = None
    prayer_points: Optional[str] = None
    how_did_you_hear_about_us: Optional[str] = None
    comments: Optional[str] = None
    assigned_to: Optional[str] = None


class VisitorCreate(VisitorFields):
    name: str = Field(..., min_length=1, max_length=255)
    age_group: AgeGroup
    follow_up_status: FollowUpStatus = FollowUpStatus.PENDING
    event_id: Optional[int] = None


class VisitorUpdate(VisitorFields):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    age_group: Optional[AgeGroup] = None
    follow_up_status: Optional[FollowUpStatus] = None
    member_id: Optional[int] = None


# ---- Events -----------------------------------------------------------------


class EventFields(RequestSchema):
    description: Optional[str] = None
    organizer: Optional[str] = None
    location: Optional[str] = None
    recurring_pattern: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    start_time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    end_time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    max_attendees: Optional[int] = Field(None, ge=1)

    @model_validator(mode="after")
    def end_after_start(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("End date cannot be before start date")
        return self


class EventCreate(EventFields):
    name: str = Field(..., min_length=1, max_length=255)
    event_type: EventType = EventType.SUNDAY_SERVICE
    is_recurring: bool = False
    is_active: bool = True


class EventUpdate(EventFields):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    event_type: Optional[EventType] = None
    is_recurring: Optional[bool] = None
    is_active: Optional[bool] = None


class ExternalCheckInToggle(RequestSchema):
    enabled: StrictBool


class ExternalCheckIn(RequestSchema):
    """Public check-in body. Both fields are optional here so that a missing
    one is reported through ``missing_fields``."""

    pin: Optional[str] = Field(None, pattern=PIN_PATTERN)
    member_id: Optional[int] = Field(None, gt=0)


# ---- Follow-up, reports, billing --------------------------------------------


class FollowUpContact(RequestSchema):
    method: ContactMethod
    message: Optional[str] = None


class ReportConfigCreate(RequestSchema):
    report_type: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    frequency: ReportFrequency = ReportFrequency.ON_DEMAND
    is_active: bool = True


class ReportConfigUpdate(RequestSchema):
    report_type: Optional[str] = Field(None, min_length=1)
    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    frequency: Optional[ReportFrequency] = None
    is_active: Optional[bool] = None


class ReportRunCreate(RequestSchema):
    report_config_id: int
    parameters: Optional[dict] = None
    file_path: Optional[str] = None


class CheckoutRequest(RequestSchema):
    plan_id: Literal["starter", "growth", "enterprise"]
    success_url: str = Field(..., pattern=URL_PATTERN)
    cancel_url: str = Field(..., pattern=URL_PATTERN)


class ChangePlanRequest(RequestSchema):
    new_plan_id: Literal["starter", "growth", "enterprise"]


class PortalRequest(RequestSchema):
    return_url: str = Field(..., pattern=URL_PATTERN)


# ---- Super admin --------------------------------------------------------------


class SuperAdminCreate(RequestSchema):
    email: EmailStr
    password: str = Field(..., min_length=8)
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    role: SuperAdminRole = SuperAdminRole.SUPPORT_ADMIN


class ChurchStatusUpdate(RequestSchema):
    is_active: bool


class BulkChurchAction(RequestSchema):
    church_ids: List[int] = Field(..., min_length=1)
    action: str = Field(..., min_length=1)


class GenerateReportRequest(RequestSchema):
    report_type: Literal["revenue", "subscription", "churn", "usage"]
    date_range: Literal["7d", "30d", "90d", "1y"] = "30d"
