from datetime import timedelta
from types import SimpleNamespace

import pytest

from churchconnect.exceptions import FeatureNotAvailableError, LimitExceededError
from churchconnect.features import (
    FEATURE_MATRIX,
    check_feature_limit,
    feature_map,
    has_feature_access,
    is_trial_active,
    trial_days_remaining,
)
from churchconnect.utils.dates import utcnow


def _church(tier="trial", trial_days=None):
    trial_end = utcnow() + timedelta(days=trial_days) if trial_days is not None else None
    return SimpleNamespace(subscription_tier=tier, trial_end_date=trial_end)


def test_active_trial_unlocks_everything():
    church = _church(trial_days=10)
    assert is_trial_active(church)
    assert all(feature_map(church).values())
    assert check_feature_limit(church, "members", 10_000)


def test_expired_trial_has_no_features():
    church = _church(trial_days=-1)
    assert not is_trial_active(church)
    assert trial_days_remaining(church) == 0
    assert not any(feature_map(church).values())


def test_trial_days_round_up():
    church = _church(trial_days=0)
    church.trial_end_date = utcnow() + timedelta(hours=30)
    assert trial_days_remaining(church) == 2


@pytest.mark.parametrize(
    "tier, feature, allowed",
    [
        ("starter", "basic_checkin", True),
        ("starter", "family_checkin", False),
        ("growth", "visitor_management", True),
        ("growth", "bulk_upload", False),
        ("enterprise", "custom_branding", True),
        ("suspended", "basic_checkin", False),
        ("enterprise", "teleportation", False),
    ],
)
def test_tier_matrix(tier, feature, allowed):
    assert has_feature_access(_church(tier), feature) is allowed


def test_paid_tier_ignores_trial_date():
    church = _church("starter", trial_days=10)
    assert not is_trial_active(church)
    assert trial_days_remaining(church) == 0
    assert not has_feature_access(church, "follow_up_queue")


def test_usage_limits():
    starter = _church("starter")
    assert check_feature_limit(starter, "members", 99)
    assert not check_feature_limit(starter, "members", 100)
    assert not check_feature_limit(starter, "sms_notifications", 0)
    assert check_feature_limit(_church("enterprise"), "sms_notifications", 5000)
    assert not check_feature_limit(_church("suspended"), "members", 0)


def test_every_feature_has_tiers():
    assert all(FEATURE_MATRIX.values())


def test_gate_errors_carry_message_alongside_error():
    body = FeatureNotAvailableError("bulk_upload", "growth").to_dict()
    assert body["error"] == "Feature not available"
    assert body["message"].endswith("Current tier: growth")

    limit = LimitExceededError("Usage limit exceeded", message="Your plan allows 5.", limit=5)
    assert limit.to_dict() == {
        "error": "Usage limit exceeded",
        "message": "Your plan allows 5.",
        "limit": 5,
    }
    assert limit.status_code == 403
