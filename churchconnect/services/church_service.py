import logging
from datetime import timedelta

from flask import current_app
from werkzeug.security import check_password_hash, generate_password_hash

from churchconnect.auth import create_church_user_token, generate_subdomain
from churchconnect.exceptions import (
    AuthenticationError,
    ChurchSuspendedError,
    NotFoundError,
    ValidationError,
)
from churchconnect.features import (
    UNLIMITED,
    USAGE_LIMITS,
    feature_map,
    is_trial_active,
    trial_days_remaining,
)
from churchconnect.models import Church, ChurchRole, ChurchUser, SubscriptionTier
from churchconnect.repositories import (
    ChurchRepository,
    ChurchUserRepository,
    MemberRepository,
)
from churchconnect.utils.dates import as_utc, isoformat, utcnow
from churchconnect.utils.email import send_welcome_email

logger = logging.getLogger(__name__)


def church_summary(church):
    data = church.to_dict()
    data["isTrialActive"] = is_trial_active(church)
    data["trialDaysRemaining"] = trial_days_remaining(church)
    return data


class ChurchService:
    @staticmethod
    def unique_subdomain(base):
        base = base or "church"
        candidate = base
        counter = 1
        while ChurchRepository.subdomain_exists(candidate):
            suffix = f"-{counter}"
            candidate = f"{base[:50 - len(suffix)]}{suffix}"
            counter += 1
        return candidate

    @staticmethod
    def register(data):
        if ChurchUserRepository.find_by_email(data.admin_email):
            logger.warning(f"Registration attempt with existing email: {data.admin_email}")
            raise ValidationError("Email already registered")

        subdomain = ChurchService.unique_subdomain(
            data.subdomain or generate_subdomain(data.church_name)
        )
        now = utcnow()
        trial_days = current_app.config.get("TRIAL_LENGTH_DAYS", 30)

        church = Church(
            name=data.church_name,
            subdomain=subdomain,
            subscription_tier=SubscriptionTier.TRIAL.value,
            trial_start_date=now,
            trial_end_date=now + timedelta(days=trial_days),
            max_members=UNLIMITED,
            kiosk_mode_enabled=False,
            kiosk_session_timeout=60,
        )
        # committed together with the admin user below
        ChurchRepository.add(church)

        user = ChurchUser(
            church_id=church.id,
            email=data.admin_email,
            password=generate_password_hash(data.password),
            role=ChurchRole.ADMIN.value,
            first_name=data.admin_first_name,
            last_name=data.admin_last_name,
            is_active=True,
        )
        ChurchUserRepository.create(user)

        logger.info(f"Church registered: {church.name} ({church.subdomain})")
        send_welcome_email(church, user)

        return {
            "message": "Church registered successfully",
            "church": church_summary(church),
            "user": user.to_dict(),
            "token": create_church_user_token(user),
        }

    @staticmethod
    def login(email, password):
        user = ChurchUserRepository.find_by_email(email)
        if not user or not check_password_hash(user.password, password):
            logger.warning(f"Failed login attempt for: {email}")
            raise AuthenticationError("Invalid email or password")
        if not user.is_active:
            raise AuthenticationError("Account is deactivated")

        church = ChurchRepository.find_by_id(user.church_id)
        if not church:
            raise NotFoundError("Church not found")
        if church.is_suspended:
            raise ChurchSuspendedError()

        user.last_login_at = utcnow()
        ChurchUserRepository.save(user)
        logger.info(f"Church user logged in: {email}")

        return {
            "message": "Login successful",
            "church": church_summary(church),
            "user": user.to_dict(),
            "token": create_church_user_token(user),
        }

    @staticmethod
    def get_current(church, user_id):
        user = ChurchUserRepository.find_in_church(user_id, church.id)
        data = church_summary(church)
        data["memberCount"] = MemberRepository.count_for_church(church.id)
        return {"church": data, "user": user.to_dict() if user else None}

    @staticmethod
    def update_settings(church, changes):
        for field, value in changes.items():
            if field == "name" and value is None:
                continue
            setattr(church, field, value)
        ChurchRepository.save(church)
        logger.info(f"Settings updated for church {church.id}: {sorted(changes)}")
        return church_summary(church)

    @staticmethod
    def get_kiosk_settings(church):
        return {
            "kioskModeEnabled": church.kiosk_mode_enabled,
            "kioskSessionTimeout": church.kiosk_session_timeout,
            "kioskSessionStartTime": isoformat(church.kiosk_session_start_time),
        }

    @staticmethod
    def update_kiosk_settings(church, changes):
        if "kiosk_mode_enabled" in changes and changes["kiosk_mode_enabled"] is not None:
            church.kiosk_mode_enabled = changes["kiosk_mode_enabled"]
            if not church.kiosk_mode_enabled:
                church.kiosk_session_start_time = None
        if changes.get("kiosk_session_timeout") is not None:
            church.kiosk_session_timeout = changes["kiosk_session_timeout"]
        ChurchRepository.save(church)
        return ChurchService.get_kiosk_settings(church)

    @staticmethod
    def kiosk_status(church):
        timeout = timedelta(minutes=church.kiosk_session_timeout or 60)
        started = as_utc(church.kiosk_session_start_time)
        remaining = 0
        if church.kiosk_mode_enabled and started:
            remaining = max(0, int((started + timeout - utcnow()).total_seconds()))
        return {
            "kioskModeEnabled": church.kiosk_mode_enabled,
            "sessionActive": remaining > 0,
            "sessionStartTime": isoformat(started),
            "sessionTimeout": church.kiosk_session_timeout,
            "secondsRemaining": remaining,
        }

    @staticmethod
    def start_kiosk_session(church):
        if not church.kiosk_mode_enabled:
            raise ValidationError("Kiosk mode is not enabled for this church")
        church.kiosk_session_start_time = utcnow()
        ChurchRepository.save(church)
        logger.info(f"Kiosk session started for church {church.id}")
        return ChurchService.kiosk_status(church)

    @staticmethod
    def end_kiosk_session(church):
        church.kiosk_session_start_time = None
        ChurchRepository.save(church)
        logger.info(f"Kiosk session ended for church {church.id}")
        return ChurchService.kiosk_status(church)

    @staticmethod
    def kiosk_session_active(church):
        return ChurchService.kiosk_status(church)["sessionActive"]

    @staticmethod
    def get_features(church):
        return {
            "subscriptionTier": church.subscription_tier,
            "isTrialActive": is_trial_active(church),
            "trialDaysRemaining": trial_days_remaining(church),
            "features": feature_map(church),
        }

    @staticmethod
    def get_usage(church):
        member_count = MemberRepository.count_for_church(church.id)
        limit = church.max_members or 100
        limits = USAGE_LIMITS.get(church.subscription_tier, {})
        return {
            "subscriptionTier": church.subscription_tier,
            "isTrialActive": is_trial_active(church),
            "trialDaysRemaining": trial_days_remaining(church),
            "members": {
                "current": member_count,
                "limit": limit,
                "percentage": round(member_count / limit * 100) if limit else 0,
            },
            "limits": limits,
        }

    @staticmethod
    def check_subdomain(subdomain):
        available = not ChurchRepository.subdomain_exists(subdomain)
        return {"subdomain": subdomain, "available": available}

    @staticmethod
    def get_branding(church):
        return {
            "logoUrl": church.logo_url,
            "bannerUrl": church.banner_url,
            "brandColor": church.brand_color,
        }

    @staticmethod
    def update_branding(church, changes):
        for field, value in changes.items():
            setattr(church, field, value)
        ChurchRepository.save(church)
        return ChurchService.get_branding(church)
