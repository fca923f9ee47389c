from churchconnect.extensions import db
from churchconnect.utils.dates import isoformat
from .enums import AgeGroup, Gender, enum_values, value_of


class AttendanceRecord(db.Model):
    __tablename__ = "attendance_records"
    # NULL event ids compare distinct in SQL, so event-less check-ins rely on the
    # service level duplicate check as well
    __table_args__ = (
        db.UniqueConstraint(
            "member_id", "event_id", "attendance_date",
            name="uq_attendance_member_event_day",
        ),
        db.UniqueConstraint(
            "visitor_id", "event_id", "attendance_date",
            name="uq_attendance_visitor_event_day",
        ),
    )

    id = db.Column(db.Integer, primary_key=True)
    church_id = db.Column(
        db.Integer,
        db.ForeignKey("churches.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    event_id = db.Column(
        db.Integer, db.ForeignKey("events.id", ondelete="SET NULL"), nullable=True
    )
    member_id = db.Column(
        db.Integer, db.ForeignKey("members.id", ondelete="CASCADE"), nullable=True
    )
    visitor_id = db.Column(
        db.Integer, db.ForeignKey("visitors.id", ondelete="CASCADE"), nullable=True
    )
    attendance_date = db.Column(db.Date, nullable=False, index=True)
    check_in_time = db.Column(
        db.TIMESTAMP(timezone=True), nullable=False, server_default=db.func.now()
    )
    check_in_method = db.Column(db.String(20), nullable=False)
    is_guest = db.Column(db.Boolean, nullable=False, default=False)
    visitor_name = db.Column(db.String(255), nullable=True)
    visitor_gender = db.Column(
        db.Enum(Gender, values_callable=enum_values, native_enum=False), nullable=True
    )
    visitor_age_group = db.Column(
        db.Enum(AgeGroup, values_callable=enum_values, native_enum=False),
        nullable=True,
    )

    member = db.relationship("Member")
    visitor = db.relationship("Visitor")
    event = db.relationship("Event")

    @property
    def attendee_gender(self):
        if self.member is not None:
            return self.member.gender
        return self.visitor_gender

    @property
    def attendee_age_group(self):
        if self.member is not None:
            return self.member.age_group
        return self.visitor_age_group

    def to_dict(self, include_attendee=False):
        data = {
            "id": self.id,
            "churchId": self.church_id,
            "eventId": self.event_id,
            "memberId": self.member_id,
            "visitorId": self.visitor_id,
            "attendanceDate": isoformat(self.attendance_date),
            "checkInTime": isoformat(self.check_in_time),
            "checkInMethod": self.check_in_method,
            "isGuest": self.is_guest,
            "visitorName": self.visitor_name,
            "visitorGender": value_of(self.visitor_gender),
            "visitorAgeGroup": value_of(self.visitor_age_group),
        }
        if include_attendee:
            data["member"] = self.member.to_dict() if self.member else None
            data["eventName"] = self.event.name if self.event else None
        return data

    def __repr__(self):
        return (
            f"AttendanceRecord(id={self.id}, member_id={self.member_id}, "
            f"visitor_id={self.visitor_id}, date={self.attendance_date})"
        )
