from churchconnect.extensions import db
from churchconnect.models import ChurchUser


class ChurchUserRepository:
    @staticmethod
    def create(user):
        db.session.add(user)
        db.session.commit()
        return user

    @staticmethod
    def save(user):
        db.session.add(user)
        db.session.commit()
        return user

    @staticmethod
    def find_by_email(email):
        return ChurchUser.query.filter(
            db.func.lower(ChurchUser.email) == email.lower()
        ).first()

    @staticmethod
    def find_by_id(user_id):
        return db.session.get(ChurchUser, user_id)

    @staticmethod
    def find_in_church(user_id, church_id):
        return ChurchUser.query.filter_by(id=user_id, church_id=church_id).first()

    @staticmethod
    def list_for_church(church_id):
        return (
            ChurchUser.query.filter_by(church_id=church_id)
            .order_by(ChurchUser.created_at.desc())
            .all()
        )

    @staticmethod
    def delete(user):
        db.session.delete(user)
        db.session.commit()

    @staticmethod
    def count_all():
        return ChurchUser.query.count()
