import logging
from datetime import timedelta

from flask import current_app

from churchconnect.extensions import db
from churchconnect.models import ContactMethod
from churchconnect.repositories import AttendanceRepository, FollowUpRepository, MemberRepository
from churchconnect.services.member_service import MemberService
from churchconnect.utils.dates import isoformat, today, utcnow
from churchconnect.utils.email import send_follow_up_email, send_follow_up_sms

logger = logging.getLogger(__name__)

ABSENCE_WINDOW_DAYS = 21
ABSENT_SERVICES = 3


class FollowUpService:
    @staticmethod
    def members_needing_follow_up(church_id):
        results = []
        for member, record in FollowUpRepository.needing_follow_up(church_id):
            data = member.to_dict()
            data["followUpRecord"] = record.to_dict()
            data["consecutiveAbsences"] = record.consecutive_absences
            data["lastContactDate"] = isoformat(record.last_contact_date)
            results.append(data)
        return results

    @staticmethod
    def update_absences(church_id):
        """Flag members with no attendance in the last three weeks."""
        cutoff = today() - timedelta(days=ABSENCE_WINDOW_DAYS)
        last_seen = AttendanceRepository.last_attendance_by_member(church_id)
        flagged = 0
        for member in MemberRepository.list_for_church(church_id):
            if not member.is_current_member:
                continue
            last = last_seen.get(member.id)
            if last is not None and last >= cutoff:
                continue
            record = FollowUpRepository.get_or_create(member.id, church_id)
            record.consecutive_absences = ABSENT_SERVICES
            record.needs_follow_up = True
            flagged += 1
        db.session.commit()
        logger.info(f"Flagged {flagged} members for follow-up in church {church_id}")
        return {"success": True, "flagged": flagged}

    @staticmethod
    def record_contact(church_id, member_id, method):
        member = MemberService.get_member_or_404(member_id, church_id)
        record = FollowUpRepository.get_or_create(member.id, church_id)
        record.last_contact_date = utcnow()
        record.contact_method = method
        record.needs_follow_up = False
        db.session.commit()

        notified = False
        try:
            if method == ContactMethod.EMAIL.value:
                notified = send_follow_up_email(member, method)
            else:
                notified = send_follow_up_sms(member, method)
        except Exception as e:
            current_app.logger.error(f"Follow-up notification failed for member {member.id}: {e}")

        logger.info(f"Member {member.id} contacted via {method}")
        return {"success": True, "notificationSent": bool(notified), "followUpRecord": record.to_dict()}
