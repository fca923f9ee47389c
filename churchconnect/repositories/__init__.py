from churchconnect.repositories.church_repository import ChurchRepository
from churchconnect.repositories.church_user_repository import ChurchUserRepository
from churchconnect.repositories.super_admin_repository import SuperAdminRepository
from churchconnect.repositories.member_repository import MemberRepository
from churchconnect.repositories.visitor_repository import VisitorRepository
from churchconnect.repositories.event_repository import EventRepository
from churchconnect.repositories.attendance_repository import AttendanceRepository
from churchconnect.repositories.follow_up_repository import FollowUpRepository
from churchconnect.repositories.subscription_repository import SubscriptionRepository
from churchconnect.repositories.report_repository import ReportRepository
