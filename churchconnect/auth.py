import re
from datetime import timedelta
from functools import wraps

from flask import current_app, g, jsonify
from flask_jwt_extended import (
    create_access_token,
    get_jwt,
    get_jwt_identity,
    verify_jwt_in_request,
)

from churchconnect.exceptions import (
    AuthenticationError,
    ChurchSuspendedError,
    NotFoundError,
    UnauthorizedError,
)
from churchconnect.extensions import jwt

CHURCH_USER_TOKEN = "church_user"
SUPER_ADMIN_TOKEN = "super_admin"


def create_church_user_token(user):
    return create_access_token(
        identity=str(user.id),
        additional_claims={
            "type": CHURCH_USER_TOKEN,
            "church_id": user.church_id,
            "email": user.email,
            "role": user.role,
            "first_name": user.first_name,
            "last_name": user.last_name,
        },
        expires_delta=current_app.config.get(
            "JWT_ACCESS_TOKEN_EXPIRES", timedelta(days=7)
        ),
    )


def create_super_admin_token(admin):
    return create_access_token(
        identity=str(admin.id),
        additional_claims={
            "type": SUPER_ADMIN_TOKEN,
            "email": admin.email,
            "role": admin.role,
        },
        expires_delta=current_app.config.get(
            "SUPER_ADMIN_TOKEN_EXPIRES", timedelta(hours=24)
        ),
    )


def generate_subdomain(church_name):
    subdomain = church_name.lower()
    subdomain = re.sub(r"[^a-z0-9\s-]", "", subdomain)
    subdomain = re.sub(r"\s+", "-", subdomain)
    subdomain = re.sub(r"-+", "-", subdomain)
    subdomain = subdomain.strip("-")
    return subdomain[:50].rstrip("-")


def current_user_id():
    return int(get_jwt_identity())


def church_user_required(roles=None):
    """Require a church user token, load the church onto ``g`` and check its role.

    Suspended churches are rejected before the role check.
    """

    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            from churchconnect.repositories.church_repository import ChurchRepository

            verify_jwt_in_request()
            claims = get_jwt()
            if claims.get("type") != CHURCH_USER_TOKEN:
                raise AuthenticationError("Invalid token type")

            church = ChurchRepository.find_by_id(claims.get("church_id"))
            if not church:
                raise NotFoundError("Church not found")
            if church.is_suspended:
                current_app.logger.warning(
                    f"Blocked request for suspended church {church.id}"
                )
                raise ChurchSuspendedError()
            if roles and claims.get("role") not in roles:
                raise UnauthorizedError()

            g.church = church
            g.church_id = church.id
            g.user_id = current_user_id()
            g.user_role = claims.get("role")
            g.user_claims = claims
            return fn(*args, **kwargs)

        return wrapper

    return decorator


def super_admin_required(roles=None):
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            from churchconnect.repositories.super_admin_repository import (
                SuperAdminRepository,
            )

            verify_jwt_in_request()
            claims = get_jwt()
            if claims.get("type") != SUPER_ADMIN_TOKEN:
                raise UnauthorizedError("Super admin access required")

            admin = SuperAdminRepository.find_by_id(current_user_id())
            if not admin or not admin.is_active:
                raise AuthenticationError("Super admin account not found or inactive")
            if roles and admin.role not in roles:
                raise UnauthorizedError()

            g.super_admin = admin
            return fn(*args, **kwargs)

        return wrapper

    return decorator


@jwt.unauthorized_loader
def missing_token_callback(reason):
    return jsonify({"error": "Access token required"}), 401


@jwt.invalid_token_loader
def invalid_token_callback(reason):
    return jsonify({"error": "Invalid or expired token"}), 401


@jwt.expired_token_loader
def expired_token_callback(jwt_header, jwt_payload):
    return jsonify({"error": "Invalid or expired token"}), 401
