"""
Subscription plans, the tier/feature matrix and usage limits.

All plan enforcement happens server side: routes declare the feature they need
with ``require_feature`` and the church on ``g`` (set by ``church_user_required``)
is checked against the matrix below.
"""

import math
import os
from dataclasses import dataclass, field
from functools import wraps
from typing import Dict, List, Optional

from flask import g

from churchconnect.exceptions import FeatureNotAvailableError, LimitExceededError
from churchconnect.models.enums import SubscriptionTier
from churchconnect.utils.dates import as_utc, utcnow

UNLIMITED = 999999


@dataclass(frozen=True)
class Plan:
    id: str
    name: str
    price: int  # cents per month
    max_members: int
    stripe_price_id: Optional[str]
    features: List[str] = field(default_factory=list)

    @property
    def monthly_price(self):
        return self.price / 100

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "price": self.price,
            "interval": "month",
            "maxMembers": self.max_members,
            "stripePriceId": self.stripe_price_id,
            "features": list(self.features),
        }


SUBSCRIPTION_PLANS: Dict[str, Plan] = {
    "starter": Plan(
        id="starter",
        name="Starter",
        price=1900,
        max_members=100,
        stripe_price_id=os.getenv("STRIPE_STARTER_PRICE_ID"),
        features=[
            "Up to 100 members",
            "Basic check-in",
            "Member management",
            "Basic reports",
        ],
    ),
    "growth": Plan(
        id="growth",
        name="Growth",
        price=4900,
        max_members=UNLIMITED,
        stripe_price_id=os.getenv("STRIPE_GROWTH_PRICE_ID"),
        features=[
            "Unlimited members",
            "Biometric and family check-in",
            "Visitor management",
            "Follow-up queue",
            "Email notifications",
        ],
    ),
    "enterprise": Plan(
        id="enterprise",
        name="Enterprise",
        price=9900,
        max_members=UNLIMITED,
        stripe_price_id=os.getenv("STRIPE_ENTERPRISE_PRICE_ID"),
        features=[
            "Everything in Growth",
            "Full analytics",
            "SMS notifications",
            "Bulk upload",
            "Advanced roles",
            "Multi-location",
            "API access",
            "Custom branding",
        ],
    ),
}

_PAID = ("starter", "growth", "enterprise")
_GROWTH_UP = ("growth", "enterprise")
_ENTERPRISE = ("enterprise",)

FEATURE_MATRIX: Dict[str, tuple] = {
    "basic_checkin": _PAID,
    "member_management": _PAID,
    "basic_reports": _PAID,
    "biometric_checkin": _GROWTH_UP,
    "family_checkin": _GROWTH_UP,
    "visitor_management": _GROWTH_UP,
    "history_tracking": _GROWTH_UP,
    "follow_up_queue": _GROWTH_UP,
    "email_notifications": _GROWTH_UP,
    "full_analytics": _ENTERPRISE,
    "sms_notifications": _ENTERPRISE,
    "bulk_upload": _ENTERPRISE,
    "advanced_roles": _ENTERPRISE,
    "multi_location": _ENTERPRISE,
    "api_access": _ENTERPRISE,
    "custom_branding": _ENTERPRISE,
}

USAGE_LIMITS: Dict[str, Dict[str, int]] = {
    "starter": {
        "members": 100,
        "monthly_reports": 5,
        "email_notifications": 100,
        "sms_notifications": 0,
    },
    "growth": {
        "members": UNLIMITED,
        "monthly_reports": 50,
        "email_notifications": 1000,
        "sms_notifications": 0,
    },
    "enterprise": {
        "members": UNLIMITED,
        "monthly_reports": UNLIMITED,
        "email_notifications": UNLIMITED,
        "sms_notifications": UNLIMITED,
    },
}


def get_plan(plan_id):
    return SUBSCRIPTION_PLANS.get(plan_id)


def is_trial_active(church) -> bool:
    if church.subscription_tier != SubscriptionTier.TRIAL.value:
        return False
    if not church.trial_end_date:
        return False
    return utcnow() < as_utc(church.trial_end_date)


def trial_days_remaining(church) -> int:
    if church.subscription_tier != SubscriptionTier.TRIAL.value or not church.trial_end_date:
        return 0
    seconds = (as_utc(church.trial_end_date) - utcnow()).total_seconds()
    return max(0, math.ceil(seconds / 86400))


def has_feature_access(church, feature: str) -> bool:
    if is_trial_active(church):
        return True
    tiers = FEATURE_MATRIX.get(feature)
    if not tiers:
        return False
    return church.subscription_tier in tiers


def feature_map(church) -> Dict[str, bool]:
    return {name: has_feature_access(church, name) for name in FEATURE_MATRIX}


def check_feature_limit(church, limit_name: str, current_usage: int) -> bool:
    """True while ``current_usage`` is still below the tier's limit."""
    if is_trial_active(church):
        return True
    limits = USAGE_LIMITS.get(church.subscription_tier)
    if not limits:
        return False
    return current_usage < limits.get(limit_name, 0)


def current_usage(church, usage_field: str) -> int:
    """Usage this billing month for a USAGE_LIMITS key; untracked counters read 0."""
    from churchconnect.repositories import MemberRepository, ReportRepository

    if usage_field == "members":
        return MemberRepository.count_for_church(church.id)
    if usage_field == "monthly_reports":
        month_start = utcnow().replace(day=1, hour=0, minute=0, second=0, microsecond=0)
        return ReportRepository.count_runs_since(church.id, month_start)
    return 0


def require_feature(feature: str, usage_field: Optional[str] = None):
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            church = g.church
            if not has_feature_access(church, feature):
                raise FeatureNotAvailableError(feature, church.subscription_tier)
            if usage_field:
                usage = current_usage(church, usage_field)
                if not check_feature_limit(church, usage_field, usage):
                    limit = USAGE_LIMITS.get(church.subscription_tier, {}).get(usage_field, 0)
                    raise LimitExceededError(
                        "Usage limit exceeded",
                        message=f"Your plan allows {limit} {usage_field.replace('_', ' ')}.",
                        currentUsage=usage,
                        limit=limit,
                        upgradeRequired=True,
                    )
            return fn(*args, **kwargs)

        return wrapper

    return decorator


def check_member_limit(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        from churchconnect.repositories.member_repository import MemberRepository

        church = g.church
        current_count = MemberRepository.count_for_church(church.id)
        limit = church.max_members or 100
        if current_count >= limit:
            raise LimitExceededError(
                "Member limit reached",
                message=(
                    f"Your current plan allows up to {limit} members. "
                    "Please upgrade to add more members."
                ),
                currentCount=current_count,
                limit=limit,
                upgradeRequired=True,
            )
        return fn(*args, **kwargs)

    return wrapper


def apply_trial_headers(response):
    """after_request hook adding trial status headers for church users."""
    church = getattr(g, "church", None)
    if church is None or church.subscription_tier != SubscriptionTier.TRIAL.value:
        return response

    days_remaining = trial_days_remaining(church)
    active = is_trial_active(church)
    response.headers["X-Trial-Days-Remaining"] = str(days_remaining)
    response.headers["X-Trial-Status"] = "active" if active else "expired"
    if not active:
        response.headers["X-Trial-Warning"] = (
            "Your trial has expired. Please upgrade to continue using all features."
        )
    elif days_remaining <= 7:
        response.headers["X-Trial-Warning"] = (
            f"Your trial expires in {days_remaining} days"
        )
    return response
