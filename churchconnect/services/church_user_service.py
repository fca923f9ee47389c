import logging

from werkzeug.security import generate_password_hash

from churchconnect.exceptions import NotFoundError, ValidationError
from churchconnect.models import ChurchUser
from churchconnect.repositories import ChurchUserRepository

logger = logging.getLogger(__name__)


def split_full_name(full_name):
    parts = full_name.strip().split()
    if not parts:
        return "", ""
    return parts[0], " ".join(parts[1:])


class ChurchUserService:
    @staticmethod
    def list_users(church_id):
        return [u.to_admin_dict() for u in ChurchUserRepository.list_for_church(church_id)]

    @staticmethod
    def get_user(user_id, church_id):
        user = ChurchUserRepository.find_in_church(user_id, church_id)
        if not user:
            raise NotFoundError("User not found")
        return user.to_admin_dict()

    @staticmethod
    def create_user(church_id, data):
        if ChurchUserRepository.find_by_email(data.email):
            raise ValidationError("Email already registered")

        first_name, last_name = split_full_name(data.full_name)
        user = ChurchUser(
            church_id=church_id,
            email=data.email,
            password=generate_password_hash(data.password),
            role=data.role,
            first_name=first_name,
            last_name=last_name,
            is_active=data.is_active,
        )
        ChurchUserRepository.create(user)
        logger.info(f"Church user {user.email} created for church {church_id} as {user.role}")
        return user.to_admin_dict()

    @staticmethod
    def update_user(user_id, church_id, changes):
        user = ChurchUserRepository.find_in_church(user_id, church_id)
        if not user:
            raise NotFoundError("User not found")

        if changes.get("email") and changes["email"].lower() != user.email.lower():
            if ChurchUserRepository.find_by_email(changes["email"]):
                raise ValidationError("Email already registered")
            user.email = changes["email"]
        if changes.get("full_name"):
            user.first_name, user.last_name = split_full_name(changes["full_name"])
        if changes.get("password"):
            user.password = generate_password_hash(changes["password"])
        if changes.get("role"):
            user.role = changes["role"]
        if changes.get("is_active") is not None:
            user.is_active = changes["is_active"]

        ChurchUserRepository.save(user)
        return user.to_admin_dict()

    @staticmethod
    def delete_user(user_id, church_id, acting_user_id):
        if user_id == acting_user_id:
            raise ValidationError("Cannot delete your own account")
        user = ChurchUserRepository.find_in_church(user_id, church_id)
        if not user:
            raise NotFoundError("User not found")
        ChurchUserRepository.delete(user)
        logger.info(f"Church user {user_id} deleted from church {church_id}")
