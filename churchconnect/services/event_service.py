import logging
from collections import Counter

from churchconnect.exceptions import NotFoundError, ValidationError
from churchconnect.models import Event
from churchconnect.models.enums import value_of
from churchconnect.repositories import AttendanceRepository, EventRepository
from churchconnect.utils.dates import isoformat

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = {"name", "event_type", "is_recurring", "is_active"}


class EventService:
    @staticmethod
    def get_event_or_404(event_id, church_id):
        event = EventRepository.find_in_church(event_id, church_id)
        if not event:
            raise NotFoundError("Event not found")
        return event

    @staticmethod
    def list_events(church_id, active_only=False):
        return [
            e.to_dict()
            for e in EventRepository.list_for_church(church_id, active_only=active_only)
        ]

    @staticmethod
    def create_event(church_id, data):
        event = Event(church_id=church_id, **data.model_dump())
        EventRepository.create(event)
        logger.info(f"Event created: {event.name} (church {church_id})")
        return event

    @staticmethod
    def update_event(event_id, church_id, changes):
        event = EventService.get_event_or_404(event_id, church_id)
        for field, value in changes.items():
            if value is None and field in REQUIRED_FIELDS:
                continue
            setattr(event, field, value)
        if event.start_date and event.end_date and event.end_date < event.start_date:
            raise ValidationError("End date cannot be before start date")
        EventRepository.save(event)
        return event

    @staticmethod
    def delete_event(event_id, church_id):
        event = EventService.get_event_or_404(event_id, church_id)
        EventRepository.delete(event)
        logger.info(f"Event {event_id} deleted from church {church_id}")

    @staticmethod
    def attendance_counts(church_id):
        counts = AttendanceRepository.counts_by_event(church_id)
        return [
            {
                "eventId": event.id,
                "eventName": event.name,
                "totalAttendance": counts.get(event.id, 0),
            }
            for event in EventRepository.list_for_church(church_id)
        ]

    @staticmethod
    def attendance_stats(event_id, church_id):
        event = EventService.get_event_or_404(event_id, church_id)
        records = AttendanceRepository.for_event(event.id, church_id)
        genders = Counter(value_of(r.attendee_gender) for r in records)
        age_groups = Counter(value_of(r.attendee_age_group) for r in records)
        dates = sorted({r.attendance_date for r in records})
        return {
            "eventId": event.id,
            "eventName": event.name,
            "totalAttendance": len(records),
            "memberAttendance": sum(1 for r in records if r.member_id is not None),
            "visitorAttendance": sum(1 for r in records if r.visitor_id is not None),
            "genderBreakdown": {
                "male": genders.get("male", 0),
                "female": genders.get("female", 0),
            },
            "ageGroupBreakdown": {
                "child": age_groups.get("child", 0),
                "adolescent": age_groups.get("adolescent", 0),
                "adult": age_groups.get("adult", 0),
            },
            "uniqueDates": [isoformat(d) for d in dates],
        }
