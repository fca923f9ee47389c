from churchconnect.extensions import db
from churchconnect.utils.dates import isoformat
from .enums import ChurchRole


class ChurchUser(db.Model):
    __tablename__ = "church_users"

    id = db.Column(db.Integer, primary_key=True)
    church_id = db.Column(
        db.Integer, db.ForeignKey("churches.id", ondelete="CASCADE"), nullable=False
    )
    email = db.Column(db.String(255), unique=True, nullable=False)
    password = db.Column(db.String(255), nullable=False)
    role = db.Column(db.String(20), nullable=False, default=ChurchRole.ADMIN.value)
    first_name = db.Column(db.String(100), nullable=False)
    last_name = db.Column(db.String(100), nullable=False)
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

    church = db.relationship("Church", backref=db.backref("users", lazy="dynamic"))

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}".strip()

    def to_dict(self):
        return {
            "id": self.id,
            "churchId": self.church_id,
            "email": self.email,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "role": self.role,
            "isActive": self.is_active,
            "lastLoginAt": isoformat(self.last_login_at),
            "createdAt": isoformat(self.created_at),
        }

    def to_admin_dict(self):
        """Shape used by the church user management screens."""
        return {
            "id": self.id,
            "username": self.email.split("@")[0],
            "fullName": self.full_name,
            "email": self.email,
            "role": self.role,
            "isActive": self.is_active,
            "lastLogin": isoformat(self.last_login_at),
            "createdAt": isoformat(self.created_at),
            "updatedAt": isoformat(self.updated_at),
        }

    def __repr__(self):
        return f"ChurchUser(id={self.id}, email='{self.email}', role={self.role})"
