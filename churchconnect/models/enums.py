from enum import Enum


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"


class AgeGroup(str, Enum):
    CHILD = "child"
    ADOLESCENT = "adolescent"
    ADULT = "adult"


class CheckInMethod(str, Enum):
    FINGERPRINT = "fingerprint"
    MANUAL = "manual"
    FAMILY = "family"
    VISITOR = "visitor"
    EXTERNAL = "external"
    KIOSK = "kiosk"


class ChurchRole(str, Enum):
    ADMIN = "admin"
    VOLUNTEER = "volunteer"
    DATA_VIEWER = "data_viewer"


class SuperAdminRole(str, Enum):
    SUPER_ADMIN = "super_admin"
    PLATFORM_ADMIN = "platform_admin"
    SUPPORT_ADMIN = "support_admin"


class SubscriptionTier(str, Enum):
    TRIAL = "trial"
    STARTER = "starter"
    GROWTH = "growth"
    ENTERPRISE = "enterprise"
    SUSPENDED = "suspended"


class FollowUpStatus(str, Enum):
    PENDING = "pending"
    CONTACTED = "contacted"
    MEMBER = "member"


class EventType(str, Enum):
    SUNDAY_SERVICE = "sunday_service"
    PRAYER_MEETING = "prayer_meeting"
    BIBLE_STUDY = "bible_study"
    YOUTH_GROUP = "youth_group"
    SPECIAL_EVENT = "special_event"
    OTHER = "other"


class Relationship(str, Enum):
    HEAD = "head"
    SPOUSE = "spouse"
    CHILD = "child"
    PARENT = "parent"
    SIBLING = "sibling"
    OTHER = "other"


class ContactMethod(str, Enum):
    SMS = "sms"
    EMAIL = "email"


class ReportFrequency(str, Enum):
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    ON_DEMAND = "on-demand"


def enum_values(enum_cls):
    """Persist enum values ("male") rather than member names ("MALE")."""
    return [member.value for member in enum_cls]


def value_of(member):
    """Plain value for an enum column that may still hold the raw assigned string."""
    return getattr(member, "value", member)
