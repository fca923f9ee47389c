"""Create (or with --rebuild, drop and recreate) every ChurchConnect table."""
import sys
import os

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from churchconnect import create_app, db
import churchconnect.models  # noqa: F401  registers every table on the metadata


def create_tables(rebuild=False):
    app = create_app()
    with app.app_context():
        if rebuild:
            print("Dropping all tables...")
            db.drop_all()
        db.create_all()
        tables = sorted(db.metadata.tables)
        print(f"{len(tables)} tables ready: {', '.join(tables)}")


if __name__ == "__main__":
    create_tables(rebuild="--rebuild" in sys.argv)
