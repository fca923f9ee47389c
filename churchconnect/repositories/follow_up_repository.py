from churchconnect.extensions import db
from churchconnect.models import FollowUpRecord, Member


class FollowUpRepository:
    @staticmethod
    def find_for_member(member_id):
        return FollowUpRecord.query.filter_by(member_id=member_id).first()

    @staticmethod
    def get_or_create(member_id, church_id):
        record = FollowUpRecord.query.filter_by(member_id=member_id).first()
        if not record:
            record = FollowUpRecord(
                member_id=member_id,
                church_id=church_id,
                consecutive_absences=0,
                needs_follow_up=False,
            )
            db.session.add(record)
        return record

    @staticmethod
    def needing_follow_up(church_id):
        return (
            db.session.query(Member, FollowUpRecord)
            .join(FollowUpRecord, FollowUpRecord.member_id == Member.id)
            .filter(
                Member.church_id == church_id,
                FollowUpRecord.needs_follow_up.is_(True),
            )
            .order_by(FollowUpRecord.consecutive_absences.desc(), Member.first_name)
            .all()
        )

    @staticmethod
    def list_for_church(church_id):
        return (
            db.session.query(Member, FollowUpRecord)
            .join(FollowUpRecord, FollowUpRecord.member_id == Member.id)
            .filter(Member.church_id == church_id)
            .order_by(Member.first_name, Member.surname)
            .all()
        )
