import logging
import time
from collections import Counter
from datetime import timedelta

from flask import current_app
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.security import check_password_hash, generate_password_hash

from churchconnect.auth import create_super_admin_token
from churchconnect.exceptions import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
)
from churchconnect.extensions import db
from churchconnect.features import SUBSCRIPTION_PLANS
from churchconnect.models import PlatformReport, SubscriptionTier, SuperAdmin
from churchconnect.repositories import (
    AttendanceRepository,
    ChurchRepository,
    ChurchUserRepository,
    MemberRepository,
    ReportRepository,
    SubscriptionRepository,
    SuperAdminRepository,
)
from churchconnect.utils.dates import as_utc, isoformat, today, utcnow

logger = logging.getLogger(__name__)

PAID_TIERS = ("starter", "growth", "enterprise")
ALL_TIERS = [tier.value for tier in SubscriptionTier]

BULK_ACTIONS = {
    "suspend": SubscriptionTier.SUSPENDED.value,
    "activate": SubscriptionTier.STARTER.value,
    "upgrade_to_growth": SubscriptionTier.GROWTH.value,
    "upgrade_to_enterprise": SubscriptionTier.ENTERPRISE.value,
}

REPORT_RANGES = {"7d": 7, "30d": 30, "90d": 90, "1y": 365}


def monthly_price(tier):
    plan = SUBSCRIPTION_PLANS.get(tier)
    return plan.monthly_price if plan else 0


def _set_tier(church, tier):
    church.subscription_tier = tier
    plan = SUBSCRIPTION_PLANS.get(tier)
    if plan:
        church.max_members = plan.max_members


def church_stats(church):
    return {
        "totalMembers": MemberRepository.count_for_church(church.id),
        "activeMembers": MemberRepository.count_current_for_church(church.id),
        "totalAttendance": AttendanceRepository.count_for_church(church.id),
    }


class SuperAdminService:
    @staticmethod
    def login(email, password):
        admin = SuperAdminRepository.find_by_email(email)
        if not admin or not check_password_hash(admin.password, password):
            logger.warning(f"Failed super admin login attempt for: {email}")
            raise AuthenticationError("Invalid credentials")
        if not admin.is_active:
            raise AuthenticationError("Account is disabled")

        admin.last_login_at = utcnow()
        db.session.commit()
        logger.info(f"Super admin logged in: {email}")
        return {
            "success": True,
            "token": create_super_admin_token(admin),
            "admin": admin.to_dict(),
        }

    @staticmethod
    def dashboard():
        churches = ChurchRepository.get_all()
        tiers = Counter(c.subscription_tier for c in churches)
        month_start = today().replace(day=1)
        return {
            "totalChurches": len(churches),
            "activeChurches": len(churches) - tiers[SubscriptionTier.SUSPENDED.value],
            "trialChurches": tiers[SubscriptionTier.TRIAL.value],
            "suspendedChurches": tiers[SubscriptionTier.SUSPENDED.value],
            "churchesByTier": {tier: tiers[tier] for tier in ALL_TIERS},
            "newChurchesThisMonth": sum(
                1 for c in churches if c.created_at and as_utc(c.created_at).date() >= month_start
            ),
            "totalMembers": MemberRepository.count_all(),
            "totalUsers": ChurchUserRepository.count_all(),
            "totalAttendance": AttendanceRepository.count_all(),
            "attendanceLast30Days": AttendanceRepository.count_all(
                since=today() - timedelta(days=30)
            ),
        }

    @staticmethod
    def list_churches():
        results = []
        for church in ChurchRepository.get_all():
            data = church.to_dict()
            data.update(church_stats(church))
            results.append(data)
        return results

    @staticmethod
    def get_church(church_id):
        church = ChurchRepository.find_by_id(church_id)
        if not church:
            raise NotFoundError("Church not found")
        data = church.to_dict()
        data.update(church_stats(church))
        data["users"] = [u.to_admin_dict() for u in ChurchUserRepository.list_for_church(church.id)]
        return data

    @staticmethod
    def update_church_status(church_id, is_active):
        church = ChurchRepository.find_by_id(church_id)
        if not church:
            raise NotFoundError("Church not found")
        _set_tier(
            church,
            SubscriptionTier.STARTER.value if is_active else SubscriptionTier.SUSPENDED.value,
        )
        ChurchRepository.save(church)
        logger.info(f"Church {church.id} status set to {church.subscription_tier}")
        return church.to_dict()

    @staticmethod
    def bulk_church_action(church_ids, action):
        tier = BULK_ACTIONS.get(action)
        success_count = 0
        errors = []
        if tier is None:
            errors = [f"Unknown action: {action}" for _ in church_ids]
        else:
            for church_id in church_ids:
                church = ChurchRepository.find_by_id(church_id)
                if not church:
                    errors.append(f"Failed to {action} church {church_id}: Church not found")
                    continue
                _set_tier(church, tier)
                success_count += 1
            db.session.commit()
            logger.info(f"Bulk action {action} applied to {success_count} churches")

        result = {
            "success": True,
            "successCount": success_count,
            "totalRequested": len(church_ids),
        }
        if errors:
            result["errors"] = errors
        return result

    # Business metrics

    @staticmethod
    def revenue_metrics():
        churches = ChurchRepository.get_all()
        paying = [c for c in churches if c.subscription_tier in PAID_TIERS]
        mrr = sum(monthly_price(c.subscription_tier) for c in paying)
        cancelled = sum(1 for s in SubscriptionRepository.get_all() if s.status == "canceled")
        subscribed = len(paying) + cancelled
        return {
            "monthlyRecurringRevenue": mrr,
            "annualRecurringRevenue": mrr * 12,
            "averageRevenuePerChurch": round(mrr / len(paying), 2) if paying else 0,
            "payingChurches": len(paying),
            "churnRate": round(cancelled / subscribed, 4) if subscribed else 0,
        }

    @staticmethod
    def subscription_metrics():
        tiers = Counter(c.subscription_tier for c in ChurchRepository.get_all())
        total = sum(tiers.values())
        suspended = tiers[SubscriptionTier.SUSPENDED.value]
        return {
            "totalSubscriptions": total,
            "activeSubscriptions": total - suspended,
            "trialUsers": tiers[SubscriptionTier.TRIAL.value],
            "canceledSubscriptions": suspended,
            "subscriptionsByTier": {tier: tiers[tier] for tier in PAID_TIERS},
        }

    @staticmethod
    def churn_analysis(limit=10):
        churned = [
            c for c in ChurchRepository.get_all()
            if c.subscription_tier == SubscriptionTier.SUSPENDED.value
        ][:limit]
        results = []
        for church in churned:
            subscription = SubscriptionRepository.find_current_for_church(church.id)
            start = church.subscription_start_date or church.created_at
            months = 0
            if start:
                months = max(1, round((utcnow() - as_utc(start)).days / 30))
            plan_id = subscription.plan_id if subscription else None
            results.append(
                {
                    "id": church.id,
                    "churchName": church.name,
                    "subscriptionTier": plan_id,
                    "cancelDate": isoformat(church.updated_at),
                    "subscriptionStatus": subscription.status if subscription else None,
                    "subscriptionDuration": months,
                    "totalRevenueLost": monthly_price(plan_id) * 12 if plan_id else 0,
                }
            )
        return results

    @staticmethod
    def platform_analytics():
        churches = ChurchRepository.get_all()
        tiers = Counter(c.subscription_tier for c in churches)
        total = len(churches)
        active = total - tiers[SubscriptionTier.SUSPENDED.value]

        def percent(count):
            return round(count / total * 100) if total else 0

        growth_up = tiers["growth"] + tiers["enterprise"]
        mrr = sum(monthly_price(tier) * tiers[tier] for tier in PAID_TIERS)
        return {
            "activeChurchRate": percent(active),
            "featureAdoption": {
                "memberManagement": percent(active),
                "familyCheckin": percent(growth_up),
                "visitorManagement": percent(growth_up),
                "fullAnalytics": percent(tiers["enterprise"]),
            },
            "revenueForecasting": {
                "next30Days": mrr,
                "next90Days": mrr * 3,
            },
        }

    # Platform reports

    @staticmethod
    def list_reports():
        return [SuperAdminService._report_summary(r) for r in ReportRepository.platform_reports()]

    @staticmethod
    def _report_summary(report):
        data = report.to_dict()
        data["downloadUrl"] = f"/api/super-admin/reports/{report.id}/download"
        return data

    @staticmethod
    def _report_lines(report_type, days):
        since = today() - timedelta(days=days)
        if report_type == "revenue":
            metrics = SuperAdminService.revenue_metrics()
            return [
                f"Monthly recurring revenue: ${metrics['monthlyRecurringRevenue']:.2f}",
                f"Annual recurring revenue: ${metrics['annualRecurringRevenue']:.2f}",
                f"Paying churches: {metrics['payingChurches']}",
                f"Average revenue per church: ${metrics['averageRevenuePerChurch']:.2f}",
            ]
        if report_type == "subscription":
            metrics = SuperAdminService.subscription_metrics()
            lines = [
                f"Total churches: {metrics['totalSubscriptions']}",
                f"Active: {metrics['activeSubscriptions']}",
                f"On trial: {metrics['trialUsers']}",
                f"Suspended: {metrics['canceledSubscriptions']}",
            ]
            lines += [f"{tier.title()}: {n}" for tier, n in metrics["subscriptionsByTier"].items()]
            return lines
        if report_type == "churn":
            rows = SuperAdminService.churn_analysis(limit=None)
            if not rows:
                return ["No churned churches"]
            return [
                f"{r['churchName']} (last plan: {r['subscriptionTier'] or 'none'}, "
                f"{r['subscriptionDuration']} months)"
                for r in rows
            ]
        # usage
        return [
            f"Churches: {len(ChurchRepository.get_all())}",
            f"Members: {MemberRepository.count_all()}",
            f"Church users: {ChurchUserRepository.count_all()}",
            f"Check-ins since {since.isoformat()}: {AttendanceRepository.count_all(since=since)}",
        ]

    @staticmethod
    def generate_report(data, admin_id):
        days = REPORT_RANGES[data.date_range]
        title = f"{data.report_type.title()} Report"
        lines = [
            title,
            f"Generated: {utcnow().strftime('%Y-%m-%d %H:%M UTC')}",
            f"Period: last {days} days",
            "",
        ] + SuperAdminService._report_lines(data.report_type, days)

        report = PlatformReport(
            report_type=data.report_type,
            title=title,
            status="ready",
            date_range=data.date_range,
            content="\n".join(lines) + "\n",
            generated_by_id=admin_id,
        )
        ReportRepository.save(report)
        logger.info(f"Platform report {report.id} ({data.report_type}) generated")
        return SuperAdminService._report_summary(report)

    @staticmethod
    def download_report(report_id):
        report = ReportRepository.find_platform_report(report_id)
        if not report:
            raise NotFoundError("Report not found")
        filename = f"{report.report_type}_report_{report.id}.txt"
        return report.content, filename

    # Operations

    @staticmethod
    def system_health():
        started = time.perf_counter()
        db_status = "connected"
        try:
            db.session.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            current_app.logger.error(f"Database health check failed: {str(e)}")
            db.session.rollback()
            db_status = "disconnected"
        response_ms = round((time.perf_counter() - started) * 1000, 2)

        if db_status == "disconnected":
            status = "critical"
        elif response_ms > 1000:
            status = "warning"
        else:
            status = "healthy"

        start_time = current_app.config.get("APP_START_TIME")
        uptime = int((utcnow() - start_time).total_seconds()) if start_time else 0
        return {
            "status": status,
            "uptime": uptime,
            "database": {"status": db_status, "responseTime": response_ms},
            "checkedAt": utcnow().isoformat(),
        }

    @staticmethod
    def list_admin_users():
        return [a.to_dict() for a in SuperAdminRepository.get_all()]

    @staticmethod
    def create_admin_user(data):
        if SuperAdminRepository.find_by_email(data.email):
            raise ConflictError("Admin with this email already exists")
        admin = SuperAdmin(
            email=data.email,
            password=generate_password_hash(data.password),
            first_name=data.first_name,
            last_name=data.last_name,
            role=data.role,
            is_active=True,
        )
        SuperAdminRepository.create(admin)
        logger.info(f"Super admin user created: {admin.email} ({admin.role})")
        return admin.to_dict()
