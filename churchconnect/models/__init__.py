from churchconnect.models.church import Church
from churchconnect.models.church_user import ChurchUser
from churchconnect.models.super_admin import SuperAdmin
from churchconnect.models.member import Member
from churchconnect.models.visitor import Visitor
from churchconnect.models.event import Event
from churchconnect.models.attendance_record import AttendanceRecord
from churchconnect.models.follow_up_record import FollowUpRecord
from churchconnect.models.subscription import Subscription
from churchconnect.models.report import ReportConfig, ReportRun, PlatformReport
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
    SubscriptionTier,
    SuperAdminRole,
)
