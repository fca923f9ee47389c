from sqlalchemy import or_

from churchconnect.extensions import db
from churchconnect.models import Member


class MemberRepository:
    @staticmethod
    def create(member):
        db.session.add(member)
        db.session.commit()
        return member

    @staticmethod
    def save(member):
        db.session.add(member)
        db.session.commit()
        return member

    @staticmethod
    def delete(member):
        db.session.delete(member)
        db.session.commit()

    @staticmethod
    def find_in_church(member_id, church_id):
        if member_id is None:
            return None
        return Member.query.filter_by(id=member_id, church_id=church_id).first()

    @staticmethod
    def list_for_church(church_id, search=None, gender=None):
        query = Member.query.filter_by(church_id=church_id)
        if search:
            pattern = f"%{search}%"
            query = query.filter(
                or_(Member.first_name.ilike(pattern), Member.surname.ilike(pattern))
            )
        if gender:
            query = query.filter(Member.gender == gender)
        return query.order_by(Member.first_name, Member.surname).all()

    @staticmethod
    def children_of(parent_id, church_id):
        return (
            Member.query.filter_by(parent_id=parent_id, church_id=church_id)
            .order_by(Member.first_name)
            .all()
        )

    @staticmethod
    def find_by_fingerprint(fingerprint_id, church_id):
        return Member.query.filter_by(
            fingerprint_id=fingerprint_id, church_id=church_id
        ).first()

    @staticmethod
    def find_by_name(first_name, surname, church_id):
        return Member.query.filter(
            Member.church_id == church_id,
            db.func.lower(Member.first_name) == first_name.lower(),
            db.func.lower(Member.surname) == surname.lower(),
        ).first()

    @staticmethod
    def count_for_church(church_id):
        return Member.query.filter_by(church_id=church_id).count()

    @staticmethod
    def count_current_for_church(church_id):
        return Member.query.filter_by(church_id=church_id, is_current_member=True).count()

    @staticmethod
    def count_all():
        return Member.query.count()

    @staticmethod
    def created_between(church_id, start, end):
        return (
            Member.query.filter(
                Member.church_id == church_id,
                Member.created_at >= start,
                Member.created_at < end,
            )
            .order_by(Member.created_at.desc())
            .all()
        )
