from churchconnect.extensions import db
from churchconnect.utils.dates import isoformat
from .enums import EventType


class Event(db.Model):
    __tablename__ = "events"

    id = db.Column(db.Integer, primary_key=True)
    church_id = db.Column(
        db.Integer,
        db.ForeignKey("churches.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    event_type = db.Column(
        db.String(30), nullable=False, default=EventType.SUNDAY_SERVICE.value
    )
    organizer = db.Column(db.String(255), nullable=True)
    location = db.Column(db.String(255), nullable=True)
    is_recurring = db.Column(db.Boolean, nullable=False, default=False)
    recurring_pattern = db.Column(db.String(50), nullable=True)
    start_date = db.Column(db.Date, nullable=True)
    end_date = db.Column(db.Date, nullable=True)
    start_time = db.Column(db.String(5), nullable=True)
    end_time = db.Column(db.String(5), nullable=True)
    max_attendees = db.Column(db.Integer, nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    external_check_in_enabled = db.Column(db.Boolean, nullable=False, default=False)
    external_check_in_pin = db.Column(db.String(6), nullable=True)
    external_check_in_url = db.Column(db.String(64), nullable=True, unique=True)
    created_at = db.Column(
        db.TIMESTAMP(timezone=True), nullable=False, server_default=db.func.now()
    )
    updated_at = db.Column(
        db.TIMESTAMP(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    church = db.relationship("Church")

    def to_dict(self):
        return {
            "id": self.id,
            "churchId": self.church_id,
            "name": self.name,
            "description": self.description,
            "eventType": self.event_type,
            "organizer": self.organizer,
            "location": self.location,
            "isRecurring": self.is_recurring,
            "recurringPattern": self.recurring_pattern,
            "startDate": isoformat(self.start_date),
            "endDate": isoformat(self.end_date),
            "startTime": self.start_time,
            "endTime": self.end_time,
            "maxAttendees": self.max_attendees,
            "isActive": self.is_active,
            "externalCheckInEnabled": self.external_check_in_enabled,
            "externalCheckInPin": self.external_check_in_pin,
            "externalCheckInUrl": self.external_check_in_url,
            "createdAt": isoformat(self.created_at),
            "updatedAt": isoformat(self.updated_at),
        }

    def __repr__(self):
        return f"Event(id={self.id}, name='{self.name}', type={self.event_type})"
