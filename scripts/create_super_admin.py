"""Seed the first platform super admin from DEFAULT_SUPER_ADMIN_* environment variables."""
import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from werkzeug.security import generate_password_hash

from churchconnect import create_app
from churchconnect.extensions import db
from churchconnect.models import SuperAdmin, SuperAdminRole


def create_super_admin(update=False):
    email = (os.getenv("DEFAULT_SUPER_ADMIN_EMAIL") or "").strip()
    password = os.getenv("DEFAULT_SUPER_ADMIN_PASSWORD")
    if not email or not password:
        print("DEFAULT_SUPER_ADMIN_EMAIL or DEFAULT_SUPER_ADMIN_PASSWORD missing; not seeding.")
        return

    app = create_app()
    with app.app_context():
        db.create_all()
        admin = SuperAdmin.query.filter(db.func.lower(SuperAdmin.email) == email.lower()).first()
        if not admin:
            if SuperAdmin.query.first() and not update:
                print("A super admin already exists; skipping seed.")
                return
            admin = SuperAdmin(
                email=email,
                password=generate_password_hash(password),
                first_name=(os.getenv("DEFAULT_SUPER_ADMIN_FIRST") or "System").strip(),
                last_name=(os.getenv("DEFAULT_SUPER_ADMIN_LAST") or "Admin").strip(),
                role=SuperAdminRole.SUPER_ADMIN.value,
                is_active=True,
            )
            db.session.add(admin)
            db.session.commit()
            print(f"Created super admin: {email}")
        elif update:
            admin.password = generate_password_hash(password)
            admin.is_active = True
            db.session.commit()
            print(f"Super admin updated: {email}")
        else:
            print("Super admin already exists!")


if __name__ == "__main__":
    create_super_admin(update="--update" in sys.argv)
