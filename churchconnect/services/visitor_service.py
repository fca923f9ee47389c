import logging

from churchconnect.exceptions import NotFoundError, ValidationError
from churchconnect.extensions import db
from churchconnect.models import CheckInMethod, FollowUpStatus, Member, Visitor
from churchconnect.models.enums import value_of
from churchconnect.repositories import EventRepository, MemberRepository, VisitorRepository
from churchconnect.schemas import MemberCreate, validate
from churchconnect.services.attendance_service import AttendanceService
from churchconnect.utils.dates import utcnow

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = {"name", "age_group", "follow_up_status"}


class VisitorService:
    @staticmethod
    def get_visitor_or_404(visitor_id, church_id):
        visitor = VisitorRepository.find_in_church(visitor_id, church_id)
        if not visitor:
            raise NotFoundError("Visitor not found")
        return visitor

    @staticmethod
    def create_visitor(church_id, data):
        fields = data.model_dump(exclude={"event_id"})
        visitor = Visitor(church_id=church_id, visit_date=utcnow(), **fields)
        VisitorRepository.create(visitor)
        logger.info(f"Visitor created: {visitor.name} (church {church_id})")
        return visitor

    @staticmethod
    def check_in_visitor(church_id, data):
        """Register a first-time visitor and record their attendance in one step."""
        if data.event_id is not None and not EventRepository.find_in_church(data.event_id, church_id):
            raise NotFoundError("Event not found")
        visitor = VisitorService.create_visitor(church_id, data)
        record = AttendanceService.check_in(
            church_id,
            visitor=visitor,
            event_id=data.event_id,
            method=CheckInMethod.VISITOR.value,
            is_guest=True,
            visitor_name=visitor.name,
            visitor_gender=visitor.gender,
            visitor_age_group=visitor.age_group,
        )
        return {
            "visitor": visitor.to_dict(),
            "attendanceRecord": record.to_dict(),
            "message": f"Welcome, {visitor.name}!",
        }

    @staticmethod
    def list_visitors(church_id, status=None):
        return [v.to_dict() for v in VisitorRepository.list_for_church(church_id, status=status)]

    @staticmethod
    def update_visitor(visitor_id, church_id, changes):
        visitor = VisitorService.get_visitor_or_404(visitor_id, church_id)
        if changes.get("member_id") is not None:
            if not MemberRepository.find_in_church(changes["member_id"], church_id):
                raise NotFoundError("Member not found")

        for field, value in changes.items():
            if value is None and field in REQUIRED_FIELDS:
                continue
            setattr(visitor, field, value)

        # conversion commits the visitor with the new member, or rolls both back
        if changes.get("follow_up_status") == FollowUpStatus.MEMBER.value:
            VisitorService.convert_to_member(visitor)
        else:
            VisitorRepository.save(visitor)
        return visitor

    @staticmethod
    def convert_to_member(visitor):
        """Create (or find) the member record for a visitor who joined the church.

        A new member goes through the same checks as ``POST /api/members``, so
        a visitor without a gender, or an adult without a phone, cannot be
        converted until those details are filled in.
        """
        parts = visitor.name.strip().split()
        first_name = parts[0]
        surname = " ".join(parts[1:]) or parts[0]

        member = None
        if visitor.member_id:
            member = MemberRepository.find_in_church(visitor.member_id, visitor.church_id)
        if member is None:
            member = MemberRepository.find_by_name(first_name, surname, visitor.church_id)
        if member is None:
            try:
                data = validate(
                    MemberCreate,
                    {
                        "first_name": first_name,
                        "surname": surname,
                        "gender": value_of(visitor.gender),
                        "age_group": value_of(visitor.age_group),
                        "phone": visitor.phone,
                        "email": visitor.email,
                        "whatsapp_number": visitor.whatsapp_number,
                        "address": visitor.address,
                        "date_of_birth": visitor.birthday,
                        "wedding_anniversary": visitor.wedding_anniversary,
                    },
                )
            except ValidationError as e:
                db.session.rollback()
                raise ValidationError(
                    "Visitor is missing details required for membership",
                    details=e.extra.get("details"),
                )
            member = Member(church_id=visitor.church_id, **data.model_dump())
            MemberRepository.create(member)
            logger.info(f"Visitor {visitor.id} converted to member {member.id}")

        visitor.member_id = member.id
        VisitorRepository.save(visitor)
        AttendanceService.move_visitor_attendance(visitor, member)
        return member
