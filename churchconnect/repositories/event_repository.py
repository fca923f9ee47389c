from churchconnect.extensions import db
from churchconnect.models import Event


class EventRepository:
    @staticmethod
    def create(event):
        db.session.add(event)
        db.session.commit()
        return event

    @staticmethod
    def save(event):
        db.session.add(event)
        db.session.commit()
        return event

    @staticmethod
    def delete(event):
        db.session.delete(event)
        db.session.commit()

    @staticmethod
    def find_in_church(event_id, church_id):
        if event_id is None:
            return None
        return Event.query.filter_by(id=event_id, church_id=church_id).first()

    @staticmethod
    def list_for_church(church_id, active_only=False):
        query = Event.query.filter_by(church_id=church_id)
        if active_only:
            query = query.filter_by(is_active=True)
        return query.order_by(Event.start_date.desc(), Event.created_at.desc()).all()

    @staticmethod
    def find_by_external_url(url):
        return Event.query.filter_by(external_check_in_url=url).first()

    @staticmethod
    def external_url_exists(url):
        return Event.query.filter_by(external_check_in_url=url).first() is not None
