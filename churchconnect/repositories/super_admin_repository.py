from churchconnect.extensions import db
from churchconnect.models import SuperAdmin


class SuperAdminRepository:
    @staticmethod
    def create(admin):
        db.session.add(admin)
        db.session.commit()
        return admin

    @staticmethod
    def find_by_email(email):
        return SuperAdmin.query.filter(
            db.func.lower(SuperAdmin.email) == email.lower()
        ).first()

    @staticmethod
    def find_by_id(admin_id):
        return db.session.get(SuperAdmin, admin_id)

    @staticmethod
    def get_all():
        return SuperAdmin.query.order_by(SuperAdmin.created_at.desc()).all()
