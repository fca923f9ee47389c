import logging
import secrets
import string

from churchconnect.exceptions import (
    AuthenticationError,
    DuplicateCheckInError,
    MissingFieldsError,
    NotFoundError,
    ValidationError,
)
from churchconnect.models import CheckInMethod
from churchconnect.repositories import EventRepository, MemberRepository
from churchconnect.services.attendance_service import AttendanceService
from churchconnect.utils.dates import utcnow

logger = logging.getLogger(__name__)

URL_ALPHABET = string.ascii_letters + string.digits + "_-"
URL_LENGTH = 16


def generate_check_in_url():
    while True:
        token = "".join(secrets.choice(URL_ALPHABET) for _ in range(URL_LENGTH))
        if not EventRepository.external_url_exists(token):
            return token


def generate_pin():
    return str(100000 + secrets.randbelow(900000))


def full_url(base_url, token):
    if not token:
        return None
    return f"{base_url.rstrip('/')}/external-checkin/{token}"


class ExternalCheckInService:
    @staticmethod
    def toggle(event_id, church_id, enabled, base_url):
        if not isinstance(enabled, bool):
            raise ValidationError("enabled must be a boolean")
        event = EventRepository.find_in_church(event_id, church_id)
        if not event:
            raise NotFoundError("Event not found")

        event.external_check_in_enabled = enabled
        if enabled:
            event.external_check_in_url = generate_check_in_url()
            event.external_check_in_pin = generate_pin()
        else:
            event.external_check_in_url = None
            event.external_check_in_pin = None
        EventRepository.save(event)
        logger.info(
            f"External check-in {'enabled' if enabled else 'disabled'} for event {event.id}"
        )

        return {
            "success": True,
            "event": event.to_dict(),
            "externalUrl": full_url(base_url, event.external_check_in_url) if enabled else None,
        }

    @staticmethod
    def get_details(event_id, church_id, base_url):
        event = EventRepository.find_in_church(event_id, church_id)
        if not event:
            raise NotFoundError("Event not found")
        return {
            "enabled": bool(event.external_check_in_enabled),
            "url": event.external_check_in_url,
            "pin": event.external_check_in_pin,
            "fullUrl": full_url(base_url, event.external_check_in_url),
        }

    @staticmethod
    def _open_event(token):
        event = EventRepository.find_by_external_url(token)
        if not event or not event.external_check_in_enabled or not event.is_active:
            raise NotFoundError("External check-in not found or disabled")
        return event

    @staticmethod
    def _verify_pin(event, pin):
        pin = str(pin)
        if len(pin) != 6 or not pin.isdigit():
            raise ValidationError("PIN must be exactly 6 digits")
        if not secrets.compare_digest(pin, event.external_check_in_pin or ""):
            logger.warning(f"Invalid external check-in PIN for event {event.id}")
            raise AuthenticationError("Invalid PIN or check-in not available")

    @staticmethod
    def get_public_page(token):
        event = ExternalCheckInService._open_event(token)
        church = event.church
        if not church:
            raise NotFoundError("Church not found")
        return {
            "eventId": event.id,
            "eventName": event.name,
            "eventType": event.event_type,
            "location": event.location,
            "churchName": church.name,
            "churchBrandColor": church.brand_color,
            "requiresPin": True,
        }

    @staticmethod
    def list_members(token, pin):
        event = ExternalCheckInService._open_event(token)
        if not pin:
            raise MissingFieldsError(["pin"])
        ExternalCheckInService._verify_pin(event, pin)
        members = MemberRepository.list_for_church(event.church_id)
        return [
            {"id": m.id, "name": m.full_name}
            for m in members
            if m.is_current_member
        ]

    @staticmethod
    def check_in(token, pin, member_id):
        missing = [name for name, value in (("pin", pin), ("memberId", member_id)) if not value]
        if missing:
            raise MissingFieldsError(missing)

        event = ExternalCheckInService._open_event(token)
        ExternalCheckInService._verify_pin(event, pin)

        member = MemberRepository.find_in_church(member_id, event.church_id)
        if not member:
            raise NotFoundError("Member not found")

        try:
            AttendanceService.check_in(
                event.church_id,
                member=member,
                event_id=event.id,
                method=CheckInMethod.EXTERNAL.value,
                duplicate_status=409,
            )
        except DuplicateCheckInError:
            raise DuplicateCheckInError(
                "You have already checked in to this event today", status_code=409
            )

        return {
            "success": True,
            "message": f"Check-in successful for {member.full_name}",
            "member": {"name": member.full_name, "checkInTime": utcnow().isoformat()},
        }
