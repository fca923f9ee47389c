from churchconnect.extensions import db
from churchconnect.utils.dates import isoformat
from .enums import AgeGroup, FollowUpStatus, Gender, enum_values, value_of


class Visitor(db.Model):
    __tablename__ = "visitors"

    id = db.Column(db.Integer, primary_key=True)
    church_id = db.Column(
        db.Integer,
        db.ForeignKey("churches.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    member_id = db.Column(
        db.Integer, db.ForeignKey("members.id", ondelete="CASCADE"), nullable=True
    )
    name = db.Column(db.String(255), nullable=False)
    gender = db.Column(
        db.Enum(Gender, values_callable=enum_values, native_enum=False), nullable=True
    )
    age_group = db.Column(
        db.Enum(AgeGroup, values_callable=enum_values, native_enum=False),
        nullable=True,
    )
    address = db.Column(db.Text, nullable=True)
    email = db.Column(db.String(255), nullable=True)
    phone = db.Column(db.String(50), nullable=True)
    whatsapp_number = db.Column(db.String(50), nullable=True)
    wedding_anniversary = db.Column(db.Date, nullable=True)
    birthday = db.Column(db.Date, nullable=True)
    prayer_points = db.Column(db.Text, nullable=True)
    how_did_you_hear_about_us = db.Column(db.Text, nullable=True)
    comments = db.Column(db.Text, nullable=True)
    visit_date = db.Column(
        db.TIMESTAMP(timezone=True), nullable=True, server_default=db.func.now()
    )
    follow_up_status = db.Column(
        db.String(50), nullable=False, default=FollowUpStatus.PENDING.value
    )
    assigned_to = db.Column(db.String(255), nullable=True)
    created_at = db.Column(
        db.TIMESTAMP(timezone=True), nullable=False, server_default=db.func.now()
    )
    updated_at = db.Column(
        db.TIMESTAMP(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "churchId": self.church_id,
            "memberId": self.member_id,
            "name": self.name,
            "gender": value_of(self.gender),
            "ageGroup": value_of(self.age_group),
            "address": self.address,
            "email": self.email,
            "phone": self.phone,
            "whatsappNumber": self.whatsapp_number,
            "weddingAnniversary": isoformat(self.wedding_anniversary),
            "birthday": isoformat(self.birthday),
            "prayerPoints": self.prayer_points,
            "howDidYouHearAboutUs": self.how_did_you_hear_about_us,
            "comments": self.comments,
            "visitDate": isoformat(self.visit_date),
            "followUpStatus": self.follow_up_status,
            "assignedTo": self.assigned_to,
            "createdAt": isoformat(self.created_at),
            "updatedAt": isoformat(self.updated_at),
        }

    def __repr__(self):
        return f"Visitor(id={self.id}, name='{self.name}', status={self.follow_up_status})"
