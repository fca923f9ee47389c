from churchconnect.extensions import db
from churchconnect.models import Visitor


class VisitorRepository:
    @staticmethod
    def create(visitor):
        db.session.add(visitor)
        db.session.commit()
        return visitor

    @staticmethod
    def save(visitor):
        db.session.add(visitor)
        db.session.commit()
        return visitor

    @staticmethod
    def find_in_church(visitor_id, church_id):
        if visitor_id is None:
            return None
        return Visitor.query.filter_by(id=visitor_id, church_id=church_id).first()

    @staticmethod
    def list_for_church(church_id, status=None):
        query = Visitor.query.filter_by(church_id=church_id)
        if status:
            query = query.filter(Visitor.follow_up_status == status)
        return query.order_by(Visitor.visit_date.desc(), Visitor.id.desc()).all()
