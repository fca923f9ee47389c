from churchconnect.extensions import db
from churchconnect.utils.dates import isoformat


class FollowUpRecord(db.Model):
    __tablename__ = "follow_up_records"

    id = db.Column(db.Integer, primary_key=True)
    church_id = db.Column(
        db.Integer, db.ForeignKey("churches.id", ondelete="CASCADE"), nullable=False
    )
    member_id = db.Column(
        db.Integer,
        db.ForeignKey("members.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    last_contact_date = db.Column(db.TIMESTAMP(timezone=True), nullable=True)
    contact_method = db.Column(db.String(10), nullable=True)
    consecutive_absences = db.Column(db.Integer, nullable=False, default=0)
    needs_follow_up = db.Column(db.Boolean, nullable=False, default=False)

    member = db.relationship("Member")

    def to_dict(self):
        return {
            "id": self.id,
            "churchId": self.church_id,
            "memberId": self.member_id,
            "lastContactDate": isoformat(self.last_contact_date),
            "contactMethod": self.contact_method,
            "consecutiveAbsences": self.consecutive_absences,
            "needsFollowUp": self.needs_follow_up,
        }
