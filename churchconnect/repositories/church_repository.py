from churchconnect.extensions import db
from churchconnect.models import Church


class ChurchRepository:
    @staticmethod
    def add(church):
        """Stage a new church and assign its id without committing."""
        db.session.add(church)
        db.session.flush()
        return church

    @staticmethod
    def save(church):
        db.session.add(church)
        db.session.commit()
        return church

    @staticmethod
    def find_by_id(church_id):
        if church_id is None:
            return None
        return db.session.get(Church, church_id)

    @staticmethod
    def find_by_subdomain(subdomain):
        return Church.query.filter_by(subdomain=subdomain).first()

    @staticmethod
    def subdomain_exists(subdomain):
        return Church.query.filter_by(subdomain=subdomain).first() is not None

    @staticmethod
    def get_all():
        return Church.query.order_by(Church.created_at.desc()).all()

    @staticmethod
    def find_by_ids(church_ids):
        return Church.query.filter(Church.id.in_(church_ids)).all()
