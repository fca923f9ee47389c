from churchconnect.extensions import db
from churchconnect.utils.dates import isoformat
from .enums import SuperAdminRole


class SuperAdmin(db.Model):
    __tablename__ = "super_admins"

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False)
    password = db.Column(db.String(255), nullable=False)
    first_name = db.Column(db.String(100), nullable=False)
    last_name = db.Column(db.String(100), nullable=False)
    role = db.Column(
        db.String(20), nullable=False, default=SuperAdminRole.SUPER_ADMIN.value
    )
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    last_login_at = db.Column(db.TIMESTAMP(timezone=True), nullable=True)
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
            "email": self.email,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "role": self.role,
            "isActive": self.is_active,
            "lastLoginAt": isoformat(self.last_login_at),
            "createdAt": isoformat(self.created_at),
        }
