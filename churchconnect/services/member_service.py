import logging
import time

from churchconnect.exceptions import NotFoundError, ValidationError
from churchconnect.extensions import db
from churchconnect.models import AgeGroup, Member
from churchconnect.models.enums import value_of
from churchconnect.repositories import AttendanceRepository, MemberRepository
from churchconnect.schemas import MemberCreate, validate

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = {
    "first_name",
    "surname",
    "gender",
    "age_group",
    "is_current_member",
    "is_family_head",
}


class MemberService:
    @staticmethod
    def _check_parent(parent_id, church_id, member_id=None):
        if parent_id is None:
            return
        if member_id is not None and parent_id == member_id:
            raise ValidationError("A member cannot be their own parent")
        if not MemberRepository.find_in_church(parent_id, church_id):
            raise ValidationError("Parent member not found")

    @staticmethod
    def get_member_or_404(member_id, church_id):
        member = MemberRepository.find_in_church(member_id, church_id)
        if not member:
            raise NotFoundError("Member not found")
        return member

    @staticmethod
    def create_member(church_id, data):
        fields = data.model_dump()
        MemberService._check_parent(fields.get("parent_id"), church_id)
        member = Member(church_id=church_id, **fields)
        MemberRepository.create(member)
        logger.info(f"Member created: {member.full_name} (church {church_id})")
        return member

    @staticmethod
    def list_members(church_id, search=None, group=None):
        gender = None if not group or group == "all" else group
        members = MemberRepository.list_for_church(church_id, search=search, gender=gender)
        return [m.to_dict() for m in members]

    @staticmethod
    def update_member(member_id, church_id, changes):
        member = MemberService.get_member_or_404(member_id, church_id)
        if "parent_id" in changes:
            MemberService._check_parent(changes["parent_id"], church_id, member.id)
        for field, value in changes.items():
            if value is None and field in REQUIRED_FIELDS:
                continue
            setattr(member, field, value)
        if value_of(member.age_group) == AgeGroup.ADULT.value and not member.phone:
            db.session.rollback()
            raise ValidationError("Phone number is required for adults")
        MemberRepository.save(member)
        return member

    @staticmethod
    def delete_member(member_id, church_id):
        member = MemberService.get_member_or_404(member_id, church_id)
        MemberRepository.delete(member)
        logger.info(f"Member {member_id} deleted from church {church_id}")

    @staticmethod
    def get_children(member_id, church_id):
        MemberService.get_member_or_404(member_id, church_id)
        return [c.to_dict() for c in MemberRepository.children_of(member_id, church_id)]

    @staticmethod
    def get_attendance(member_id, church_id, limit=10):
        MemberService.get_member_or_404(member_id, church_id)
        records = AttendanceRepository.for_member(member_id, church_id, limit=limit)
        return [r.to_dict() for r in records]

    @staticmethod
    def bulk_upload(church, rows):
        """Create members row by row; a bad row is reported and skipped, never fatal."""
        created = []
        errors = []
        limit = church.max_members or 100
        count = MemberRepository.count_for_church(church.id)

        for index, row in enumerate(rows):
            label = (
                f"{row.get('firstName') or row.get('first_name') or ''} "
                f"{row.get('surname') or ''}".strip()
                if isinstance(row, dict)
                else ""
            ) or f"row {index + 1}"

            if count >= limit:
                errors.append(f"Member {label}: Member limit reached")
                continue
            try:
                data = validate(MemberCreate, row)
                member = MemberService.create_member(church.id, data)
            except ValidationError as e:
                detail = e.extra.get("details") or []
                message = "; ".join(d["message"] for d in detail) if detail else e.message
                errors.append(f"Member {label}: {message}")
                continue
            created.append(member.to_dict())
            count += 1

        logger.info(
            f"Bulk upload for church {church.id}: {len(created)} of {len(rows)} created"
        )
        return {"created": len(created), "total": len(rows), "errors": errors, "members": created}

    @staticmethod
    def enroll_fingerprint(church_id, member_id, fingerprint_id=None):
        member = MemberService.get_member_or_404(member_id, church_id)
        fingerprint_id = fingerprint_id or f"fp_{member.id}_{int(time.time() * 1000)}"
        existing = MemberRepository.find_by_fingerprint(fingerprint_id, church_id)
        if existing and existing.id != member.id:
            raise ValidationError("Fingerprint is already enrolled for another member")
        member.fingerprint_id = fingerprint_id
        MemberRepository.save(member)
        logger.info(f"Fingerprint enrolled for member {member.id}")
        return {
            "success": True,
            "fingerprintId": fingerprint_id,
            "member": member.to_dict(),
            "message": "Fingerprint enrolled successfully",
        }
