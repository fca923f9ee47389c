from churchconnect.extensions import db
from churchconnect.utils.dates import isoformat
from .enums import AgeGroup, Gender, Relationship, enum_values, value_of


class Member(db.Model):
    __tablename__ = "members"

    id = db.Column(db.Integer, primary_key=True)
    church_id = db.Column(
        db.Integer,
        db.ForeignKey("churches.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title = db.Column(db.String(50), nullable=True)
    first_name = db.Column(db.String(100), nullable=False)
    surname = db.Column(db.String(100), nullable=False)
    gender = db.Column(
        db.Enum(Gender, values_callable=enum_values, native_enum=False), nullable=False
    )
    age_group = db.Column(
        db.Enum(AgeGroup, values_callable=enum_values, native_enum=False),
        nullable=False,
    )
    phone = db.Column(db.String(50), nullable=True)
    email = db.Column(db.String(255), nullable=True)
    whatsapp_number = db.Column(db.String(50), nullable=True)
    address = db.Column(db.Text, nullable=True)
    date_of_birth = db.Column(db.Date, nullable=True)
    wedding_anniversary = db.Column(db.Date, nullable=True)
    is_current_member = db.Column(db.Boolean, nullable=False, default=True)
    fingerprint_id = db.Column(db.String(255), nullable=True, index=True)
    parent_id = db.Column(
        db.Integer, db.ForeignKey("members.id", ondelete="SET NULL"), nullable=True
    )
    family_group_id = db.Column(db.String(64), nullable=True)
    relationship_to_head = db.Column(
        db.String(20), nullable=True, default=Relationship.HEAD.value
    )
    is_family_head = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(
        db.TIMESTAMP(timezone=True), nullable=False, server_default=db.func.now()
    )
    updated_at = db.Column(
        db.TIMESTAMP(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    @property
    def full_name(self):
        return f"{self.first_name} {self.surname}"

    def to_dict(self):
        return {
            "id": self.id,
            "churchId": self.church_id,
            "title": self.title,
            "firstName": self.first_name,
            "surname": self.surname,
            "gender": value_of(self.gender),
            "ageGroup": value_of(self.age_group),
            "phone": self.phone,
            "email": self.email,
            "whatsappNumber": self.whatsapp_number,
            "address": self.address,
            "dateOfBirth": isoformat(self.date_of_birth),
            "weddingAnniversary": isoformat(self.wedding_anniversary),
            "isCurrentMember": self.is_current_member,
            "fingerprintId": self.fingerprint_id,
            "parentId": self.parent_id,
            "familyGroupId": self.family_group_id,
            "relationshipToHead": self.relationship_to_head,
            "isFamilyHead": self.is_family_head,
            "createdAt": isoformat(self.created_at),
            "updatedAt": isoformat(self.updated_at),
        }

    def __repr__(self):
        return (
            f"Member("
            f"id={self.id}, "
            f"first_name='{self.first_name}', "
            f"surname='{self.surname}', "
            f"gender={self.gender}"
            f")"
        )
